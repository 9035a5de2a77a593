"""Subscription status endpoint."""

from fastapi import APIRouter, Depends

from plek_api.dependencies import get_subscription_service
from plek_api.models.common import ErrorResponse
from plek_api.models.posts import SubscriptionResponse
from plek_api.security import get_current_user_id
from plek_shared.services.subscription import SubscriptionService

router = APIRouter(tags=["subscription"])


@router.get(
    "/check-subscription",
    summary="Check the caller's subscription",
    description="Active entitlements are those without an expiry or expiring in the future.",
    response_model=SubscriptionResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        502: {"model": ErrorResponse, "description": "Billing service unavailable"},
    },
)
async def check_subscription(
    user_id: str = Depends(get_current_user_id),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    status = service.get_subscription_status(user_id)
    return SubscriptionResponse(
        has_active_subscription=status.has_active_subscription,
        active_entitlements=status.active_entitlements,
    )
