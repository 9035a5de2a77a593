"""Subscription lookup against the billing vendor's REST API.

Calls ``GET {REVENUECAT_API_URL}/subscribers/{app_user_id}`` with a bearer
secret key and reports which entitlements are currently active. An
entitlement is active when it has no ``expires_date`` or one in the future.
"""

import datetime as dt
import os
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from plek_shared.services.ssm_service import (
    REVENUECAT_KEY_PARAMETER,
    SSMServiceError,
    resolve_secret,
)
from plek_shared.utils.dates import parse_datetime
from plek_shared.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REVENUECAT_API_URL = "https://api.revenuecat.com/v1"
REQUEST_TIMEOUT_SECONDS = 10.0


class SubscriptionServiceError(Exception):
    """Raised when the billing service cannot be queried."""

    pass


class SubscriptionStatus(BaseModel):
    """Active entitlements for a user."""

    model_config = ConfigDict(strict=True)

    user_id: str
    has_active_subscription: bool
    active_entitlements: list[str] = Field(default_factory=list)


class SubscriptionService:
    """Client for the billing vendor's subscriber endpoint."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Base URL. Defaults to REVENUECAT_API_URL env var.
            api_key: Secret key. Resolved from env or SSM on first use if None.
            http_client: Injected client (tests pass one with a MockTransport).
        """
        self.api_url = (
            api_url or os.getenv("REVENUECAT_API_URL", DEFAULT_REVENUECAT_API_URL)
        ).rstrip("/")
        self._api_key = api_key
        self._http = http_client or httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS)

    def _get_api_key(self) -> str:
        if self._api_key is None:
            try:
                self._api_key = resolve_secret(
                    "REVENUECAT_API_KEY", REVENUECAT_KEY_PARAMETER
                )
            except SSMServiceError as e:
                raise SubscriptionServiceError(
                    "Billing API key is not configured"
                ) from e
        return self._api_key

    def fetch_subscriber(self, user_id: str) -> dict[str, Any] | None:
        """Fetch the raw subscriber document.

        Returns:
            The ``subscriber`` object, or None if the vendor has no record

        Raises:
            SubscriptionServiceError: On transport errors or unexpected status
        """
        url = f"{self.api_url}/subscribers/{quote(user_id, safe='')}"
        try:
            response = self._http.get(
                url,
                headers={
                    "Authorization": f"Bearer {self._get_api_key()}",
                    "Accept": "application/json",
                },
            )
        except httpx.TimeoutException as e:
            raise SubscriptionServiceError("Billing service timed out") from e
        except httpx.RequestError as e:
            raise SubscriptionServiceError(
                f"Could not reach billing service: {e}"
            ) from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise SubscriptionServiceError(
                f"Billing service returned {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SubscriptionServiceError("Billing service returned invalid JSON") from e
        subscriber: dict[str, Any] | None = payload.get("subscriber")
        return subscriber

    def get_subscription_status(
        self, user_id: str, now: dt.datetime | None = None
    ) -> SubscriptionStatus:
        """Active entitlements for ``user_id``.

        Args:
            user_id: Billing app user id (same as the platform user id)
            now: Reference time, defaults to the current UTC time
        """
        now = now or dt.datetime.now(dt.UTC)
        subscriber = self.fetch_subscriber(user_id) or {}
        entitlements: dict[str, Any] = subscriber.get("entitlements") or {}

        active = sorted(
            name
            for name, entitlement in entitlements.items()
            if _is_active(entitlement or {}, now)
        )
        logger.info(
            "Subscription status checked",
            extra={"user_id": user_id, "active_entitlements": active},
        )
        return SubscriptionStatus(
            user_id=user_id,
            has_active_subscription=bool(active),
            active_entitlements=active,
        )

    def has_active_subscription(self, user_id: str) -> bool:
        return self.get_subscription_status(user_id).has_active_subscription


def _is_active(entitlement: dict[str, Any], now: dt.datetime) -> bool:
    expires = entitlement.get("expires_date")
    if expires is None:
        return True
    try:
        expires_at = parse_datetime(expires)
    except ValueError:
        return False
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=dt.UTC)
    return expires_at > now
