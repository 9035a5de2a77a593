"""Standard error codes and domain exceptions for the Plek platform.

Services raise one of the ``PlekError`` subclasses; the API layer converts
them to an ``ErrorResponse`` with an HTTP status derived from the code.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Input and business-rule errors
    VALIDATION_FAILED = "ERR_VALIDATION"
    INVALID_DATE_RANGE = "ERR_001"
    INVALID_DATE_FORMAT = "ERR_002"
    DATES_UNAVAILABLE = "ERR_003"
    PACKAGE_NOT_FOUND = "ERR_004"
    PAYMENT_NOT_VALIDATED = "ERR_005"
    INVALID_INVITE_TOKEN = "ERR_006"

    # Missing resources
    POST_NOT_FOUND = "ERR_NOT_FOUND_001"
    BOOKING_NOT_FOUND = "ERR_NOT_FOUND_002"
    ESTIMATE_NOT_FOUND = "ERR_NOT_FOUND_003"
    PACKAGE_RECORD_NOT_FOUND = "ERR_NOT_FOUND_004"
    GUEST_NOT_FOUND = "ERR_NOT_FOUND_005"

    # Authentication / authorization
    AUTH_REQUIRED = "ERR_AUTH_001"
    FORBIDDEN = "ERR_AUTH_002"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Request validation failed",
    ErrorCode.INVALID_DATE_RANGE: "Start date must be before end date.",
    ErrorCode.INVALID_DATE_FORMAT: "Invalid date format",
    ErrorCode.DATES_UNAVAILABLE: "Booking dates are not available.",
    ErrorCode.PACKAGE_NOT_FOUND: "Package not found",
    ErrorCode.PAYMENT_NOT_VALIDATED: "Payment validation required",
    ErrorCode.INVALID_INVITE_TOKEN: "Invite token is invalid or expired",
    ErrorCode.POST_NOT_FOUND: "Post not found",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.ESTIMATE_NOT_FOUND: "Estimate not found",
    ErrorCode.PACKAGE_RECORD_NOT_FOUND: "Package not found",
    ErrorCode.GUEST_NOT_FOUND: "Guest not found in booking",
    ErrorCode.AUTH_REQUIRED: "Unauthorized",
    ErrorCode.FORBIDDEN: "You are not allowed to perform this action",
}

ErrorDetails = Optional[Union[str, dict[str, str]]]


class ErrorResponse(BaseModel):
    """Standard JSON error body returned by the API."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    error: str
    details: ErrorDetails = None


class PlekError(Exception):
    """Base class for domain errors.

    Subclasses pick a default code; callers may pass a more specific one.
    """

    default_code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        code: Optional[ErrorCode] = None,
        details: ErrorDetails = None,
        message: Optional[str] = None,
    ):
        self.code = code or self.default_code
        self.message = message or ERROR_MESSAGES[self.code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to the API error body."""
        return ErrorResponse(
            error_code=self.code,
            error=self.message,
            details=self.details,
        )


class ValidationError(PlekError):
    """Malformed or missing input (bad date range, empty name, ...)."""

    default_code = ErrorCode.VALIDATION_FAILED


class NotFoundError(PlekError):
    """A post, package, booking or estimate does not exist."""

    default_code = ErrorCode.POST_NOT_FOUND


class ConflictError(PlekError):
    """Requested dates overlap an existing booking at write time."""

    default_code = ErrorCode.DATES_UNAVAILABLE


class UnauthorizedError(PlekError):
    """Missing or invalid session for a gated endpoint."""

    default_code = ErrorCode.AUTH_REQUIRED


class ForbiddenError(PlekError):
    """Authenticated, but not the owner of the resource."""

    default_code = ErrorCode.FORBIDDEN
