"""Unit tests for error-code to HTTP status mapping and handlers."""

import asyncio
import json

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from plek_api.exceptions import (
    generic_exception_handler,
    get_http_status_for_error,
    plek_error_handler,
    request_validation_error_handler,
    subscription_error_handler,
)
from plek_shared.models import (
    ConflictError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from plek_shared.services.subscription import SubscriptionServiceError


def _request() -> Request:
    return Request(scope={"type": "http", "path": "/api/test", "headers": []})


class TestStatusMapping:
    """Every error code maps to the documented status."""

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (ErrorCode.VALIDATION_FAILED, HTTP_400_BAD_REQUEST),
            (ErrorCode.INVALID_DATE_RANGE, HTTP_400_BAD_REQUEST),
            (ErrorCode.DATES_UNAVAILABLE, HTTP_400_BAD_REQUEST),
            (ErrorCode.PACKAGE_NOT_FOUND, HTTP_400_BAD_REQUEST),
            (ErrorCode.PAYMENT_NOT_VALIDATED, HTTP_400_BAD_REQUEST),
            (ErrorCode.POST_NOT_FOUND, HTTP_404_NOT_FOUND),
            (ErrorCode.BOOKING_NOT_FOUND, HTTP_404_NOT_FOUND),
            (ErrorCode.PACKAGE_RECORD_NOT_FOUND, HTTP_404_NOT_FOUND),
            (ErrorCode.AUTH_REQUIRED, HTTP_401_UNAUTHORIZED),
            (ErrorCode.FORBIDDEN, HTTP_403_FORBIDDEN),
        ],
    )
    def test_mapping(self, code: ErrorCode, status: int) -> None:
        assert get_http_status_for_error(code) == status

    def test_every_code_is_mapped(self) -> None:
        from plek_api.exceptions import ERROR_CODE_TO_HTTP_STATUS

        assert set(ERROR_CODE_TO_HTTP_STATUS) == set(ErrorCode)


class TestHandlers:
    """Handlers render the standard error body."""

    def test_conflict_renders_dates_unavailable(self) -> None:
        exc = ConflictError(details="The selected dates overlap with an existing booking.")

        response = asyncio.run(plek_error_handler(_request(), exc))

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert json.loads(response.body) == {
            "success": False,
            "error_code": "ERR_003",
            "error": "Booking dates are not available.",
            "details": "The selected dates overlap with an existing booking.",
        }

    def test_package_not_found_is_400(self) -> None:
        exc = NotFoundError(ErrorCode.PACKAGE_NOT_FOUND, details="Package x not found")
        response = asyncio.run(plek_error_handler(_request(), exc))
        body = json.loads(response.body)
        assert response.status_code == HTTP_400_BAD_REQUEST
        assert body["error"] == "Package not found"

    def test_custom_message_and_dict_details(self) -> None:
        exc = ValidationError(message="Package name cannot be empty", details={"field": "name"})
        body = json.loads(asyncio.run(plek_error_handler(_request(), exc)).body)
        assert body["error"] == "Package name cannot be empty"
        assert body["details"] == {"field": "name"}

    def test_billing_failure_is_502(self) -> None:
        response = asyncio.run(
            subscription_error_handler(_request(), SubscriptionServiceError("down"))
        )
        assert response.status_code == HTTP_502_BAD_GATEWAY
        assert json.loads(response.body)["error_code"] == "ERR_BILLING"

    def test_unexpected_error_hides_details(self) -> None:
        response = asyncio.run(
            generic_exception_handler(_request(), RuntimeError("secret internals"))
        )
        body = json.loads(response.body)
        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert "secret" not in body["error"]
        assert body["success"] is False

    def test_request_validation_renders_field(self) -> None:
        exc = RequestValidationError(
            [
                {
                    "type": "date_from_datetime_parsing",
                    "loc": ("body", "fromDate"),
                    "msg": "Input should be a valid date or datetime",
                    "input": "garbage",
                },
                {
                    "type": "missing",
                    "loc": ("body", "packageType"),
                    "msg": "Field required",
                    "input": None,
                },
            ]
        )

        response = asyncio.run(request_validation_error_handler(_request(), exc))

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert json.loads(response.body) == {
            "success": False,
            "error_code": "ERR_VALIDATION",
            "error": "Request validation failed",
            "details": {
                "field": "fromDate",
                "message": "Input should be a valid date or datetime",
            },
        }

    def test_request_validation_keeps_nested_path(self) -> None:
        exc = RequestValidationError(
            [
                {
                    "type": "missing",
                    "loc": ("body", "packageSettings", 0, "packageId"),
                    "msg": "Field required",
                }
            ]
        )
        body = json.loads(asyncio.run(request_validation_error_handler(_request(), exc)).body)
        assert body["details"]["field"] == "packageSettings.0.packageId"
