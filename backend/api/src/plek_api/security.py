"""Caller identity extraction.

The API gateway validates the session and forwards the user id in the
``x-user-sub`` header. When running behind a REST API with a Cognito
authorizer the claims arrive in the Lambda event instead (via Mangum).
The backend trusts these values because only the gateway can set them.
"""

import logging

from fastapi import Request

from plek_shared.models import UnauthorizedError

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-sub"


def _get_header_case_insensitive(request: Request, header_name: str) -> str | None:
    """Extract a header value with case-insensitive lookup."""
    for name, value in request.headers.items():
        if name.lower() == header_name.lower():
            return value.strip() if value else None
    return None


def get_optional_user_id(request: Request) -> str | None:
    """The caller's user id, or None for anonymous requests."""
    user_id = _get_header_case_insensitive(request, USER_ID_HEADER)
    if not user_id:
        event = request.scope.get("aws.event", {})
        claims = event.get("requestContext", {}).get("authorizer", {}).get("claims", {})
        user_id = claims.get("sub")
    return user_id or None


def get_current_user_id(request: Request) -> str:
    """The caller's user id.

    Raises:
        UnauthorizedError: If no identity was forwarded by the gateway
    """
    user_id = get_optional_user_id(request)
    if not user_id:
        logger.warning("auth_user_missing", extra={"path": request.url.path})
        raise UnauthorizedError(details="Authentication required")
    return user_id
