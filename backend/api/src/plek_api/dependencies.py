"""FastAPI dependency providers for shared services.

Factories are wrapped in @lru_cache so each service is built once per
process. Services are created lazily on first request.

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        ├── PostService
        │       ├── PackageService ── PackageResolver
        │       └── AvailabilityService (+ SubscriptionService)
        │               └── BookingService (+ InviteTokenService)
        └── EstimateService (PostService, PackageResolver, BookingService)

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from plek_shared.services.availability import AvailabilityService
from plek_shared.services.booking import BookingService
from plek_shared.services.dynamodb import get_dynamodb_service
from plek_shared.services.estimates import EstimateService
from plek_shared.services.invite_tokens import InviteTokenService
from plek_shared.services.packages import PackageResolver, PackageService
from plek_shared.services.posts import PostService
from plek_shared.services.subscription import SubscriptionService


@lru_cache
def get_post_service() -> PostService:
    return PostService(db=get_dynamodb_service())


@lru_cache
def get_subscription_service() -> SubscriptionService:
    return SubscriptionService()


@lru_cache
def get_invite_token_service() -> InviteTokenService:
    return InviteTokenService()


@lru_cache
def get_package_service() -> PackageService:
    return PackageService(db=get_dynamodb_service(), posts=get_post_service())


@lru_cache
def get_package_resolver() -> PackageResolver:
    return PackageResolver(packages=get_package_service(), posts=get_post_service())


@lru_cache
def get_availability_service() -> AvailabilityService:
    """Get cached AvailabilityService instance.

    Returns:
        AvailabilityService configured with posts and billing lookup.
    """
    return AvailabilityService(
        db=get_dynamodb_service(),
        posts=get_post_service(),
        subscriptions=get_subscription_service(),
    )


@lru_cache
def get_booking_service() -> BookingService:
    return BookingService(
        db=get_dynamodb_service(),
        posts=get_post_service(),
        availability=get_availability_service(),
        tokens=get_invite_token_service(),
    )


@lru_cache
def get_estimate_service() -> EstimateService:
    """Get cached EstimateService instance.

    Returns:
        EstimateService wired to the resolver and booking write path.
    """
    return EstimateService(
        db=get_dynamodb_service(),
        posts=get_post_service(),
        resolver=get_package_resolver(),
        bookings=get_booking_service(),
    )


def reset_services() -> None:
    """Clear all cached service instances.

    Also resets the DynamoDB singleton and the SSM parameter cache.
    """
    from plek_shared.services.dynamodb import reset_dynamodb_service
    from plek_shared.services.ssm_service import SSMService, get_ssm_service

    get_post_service.cache_clear()
    get_subscription_service.cache_clear()
    get_invite_token_service.cache_clear()
    get_package_service.cache_clear()
    get_package_resolver.cache_clear()
    get_availability_service.cache_clear()
    get_booking_service.cache_clear()
    get_estimate_service.cache_clear()

    reset_dynamodb_service()
    get_ssm_service.cache_clear()
    SSMService.reset()
