"""Backend services for the Plek booking platform."""

from .availability import AvailabilityService
from .booking import BookingService
from .dynamodb import DynamoDBService, get_dynamodb_service, reset_dynamodb_service
from .estimates import EstimateService
from .invite_tokens import InviteTokenService
from .packages import PackageResolver, PackageService
from .posts import PostService
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .subscription import (
    SubscriptionService,
    SubscriptionServiceError,
    SubscriptionStatus,
)

__all__ = [
    "AvailabilityService",
    "BookingService",
    "DynamoDBService",
    "EstimateService",
    "InviteTokenService",
    "PackageResolver",
    "PackageService",
    "PostService",
    "SSMService",
    "SSMServiceError",
    "SubscriptionService",
    "SubscriptionServiceError",
    "SubscriptionStatus",
    "get_dynamodb_service",
    "get_ssm_service",
    "reset_dynamodb_service",
]
