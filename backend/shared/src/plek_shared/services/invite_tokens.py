"""Signed invite tokens for sharing a booking with guests.

Tokens are HS256 JWTs carrying ``bookingId`` and ``customerId`` and expire
after seven days. The signing secret comes from INVITE_TOKEN_SECRET or SSM.
"""

import datetime as dt
import uuid
from typing import Any

from jose import JWTError, jwt

from plek_shared.models import ErrorCode, ValidationError
from plek_shared.services.ssm_service import INVITE_SECRET_PARAMETER, resolve_secret

ALGORITHM = "HS256"
INVITE_TOKEN_TTL = dt.timedelta(days=7)


class InviteTokenService:
    """Creates and verifies invite tokens."""

    def __init__(
        self,
        secret: str | None = None,
        ttl: dt.timedelta = INVITE_TOKEN_TTL,
    ) -> None:
        self._secret = secret
        self.ttl = ttl

    def _get_secret(self) -> str:
        if self._secret is None:
            self._secret = resolve_secret("INVITE_TOKEN_SECRET", INVITE_SECRET_PARAMETER)
        return self._secret

    def create_token(
        self,
        booking_id: str,
        customer_id: str,
        now: dt.datetime | None = None,
    ) -> str:
        """Sign a new invite token.

        A random ``jti`` makes every token unique, so a refresh always
        invalidates the previous one.
        """
        issued_at = now or dt.datetime.now(dt.UTC)
        claims = {
            "bookingId": booking_id,
            "customerId": customer_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._get_secret(), algorithm=ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Raises:
            ValidationError: INVALID_INVITE_TOKEN if the signature is bad,
                the token expired, or required claims are missing
        """
        try:
            claims: dict[str, Any] = jwt.decode(
                token, self._get_secret(), algorithms=[ALGORITHM]
            )
        except JWTError as e:
            raise ValidationError(ErrorCode.INVALID_INVITE_TOKEN, details=str(e)) from e

        if not claims.get("bookingId") or not claims.get("customerId"):
            raise ValidationError(
                ErrorCode.INVALID_INVITE_TOKEN, details="Token is missing booking claims"
            )
        return claims

    def is_valid(self, token: str) -> bool:
        try:
            self.decode_token(token)
        except ValidationError:
            return False
        return True
