"""FastAPI exception handlers for converting domain errors to HTTP responses.

Every PlekError is rendered as ``{success, error_code, error, details}``
with a status derived from its error code:
- 400 Bad Request: validation, date conflicts, unresolvable packages
- 401 Unauthorized: missing identity
- 403 Forbidden: not the owner of the resource
- 404 Not Found: missing post, booking, estimate, package or guest
- 502 Bad Gateway: billing service failures

Request bodies and parameters FastAPI rejects before a route runs are
rendered the same way, as VALIDATION_FAILED with the offending field.

Usage:
    from plek_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from plek_shared.models.errors import ErrorCode, PlekError, ValidationError
from plek_shared.services.subscription import SubscriptionServiceError
from plek_shared.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Input and business rules -> 400
    ErrorCode.VALIDATION_FAILED: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DATE_RANGE: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DATE_FORMAT: HTTP_400_BAD_REQUEST,
    ErrorCode.DATES_UNAVAILABLE: HTTP_400_BAD_REQUEST,
    ErrorCode.PACKAGE_NOT_FOUND: HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_NOT_VALIDATED: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INVITE_TOKEN: HTTP_400_BAD_REQUEST,
    # Missing records -> 404
    ErrorCode.POST_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.ESTIMATE_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.PACKAGE_RECORD_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.GUEST_NOT_FOUND: HTTP_404_NOT_FOUND,
    # Identity
    ErrorCode.AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: HTTP_403_FORBIDDEN,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """HTTP status for an ErrorCode, 400 if not explicitly mapped."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def plek_error_handler(request: Request, exc: PlekError) -> JSONResponse:
    """Convert a PlekError to a JSON error response."""
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_error_response().model_dump(mode="json"),
    )


def _field_name(loc: tuple[int | str, ...]) -> str:
    """Dotted field path without the leading ``body``/``query``/``path`` part."""
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI's request validation failures as VALIDATION_FAILED (400)."""
    errors = exc.errors()
    first = errors[0] if errors else {"loc": ("body",), "msg": "Invalid request"}
    field = _field_name(tuple(first.get("loc", ())))
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "field": field, "error_count": len(errors)},
    )
    error = ValidationError(
        message="Request validation failed",
        details={"field": field, "message": str(first.get("msg", ""))},
    )
    return await plek_error_handler(request, error)


async def subscription_error_handler(
    request: Request, exc: SubscriptionServiceError
) -> JSONResponse:
    logger.error("Billing service error: %s", exc)
    return JSONResponse(
        status_code=HTTP_502_BAD_GATEWAY,
        content={
            "success": False,
            "error_code": "ERR_BILLING",
            "error": "Billing service unavailable",
            "details": None,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions; internal details stay in the logs."""
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error_code": "ERR_INTERNAL",
            "error": "An unexpected error occurred",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(PlekError, plek_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, request_validation_error_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        SubscriptionServiceError, subscription_error_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, generic_exception_handler)
