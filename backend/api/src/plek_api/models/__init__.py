"""API request/response models (camelCase JSON)."""

from plek_api.models.bookings import (
    AvailabilityResponse,
    BookingCreateRequest,
    BookingListResponse,
    BookingResponse,
    BookingUpdateResponse,
    DateRange,
    InviteTokenClaims,
    InviteTokenResponse,
    UnavailableDatesResponse,
)
from plek_api.models.common import CamelModel, ErrorResponse, SuccessMessage
from plek_api.models.estimates import (
    EstimateConfirmRequest,
    EstimateConfirmResponse,
    EstimateCreateRequest,
    EstimateResponse,
)
from plek_api.models.packages import (
    CatalogProductListResponse,
    CatalogProductResponse,
    PackageCreateRequest,
    PackageListResponse,
    PackageResponse,
    PackageSuggestionResponse,
    PackageUpdateRequest,
)
from plek_api.models.posts import (
    PackageSettingModel,
    PackageSettingsUpdateRequest,
    PostCreateRequest,
    PostResponse,
    SubscriptionResponse,
)

__all__ = [
    "AvailabilityResponse",
    "BookingCreateRequest",
    "BookingListResponse",
    "BookingResponse",
    "BookingUpdateResponse",
    "CamelModel",
    "CatalogProductListResponse",
    "CatalogProductResponse",
    "DateRange",
    "ErrorResponse",
    "EstimateConfirmRequest",
    "EstimateConfirmResponse",
    "EstimateCreateRequest",
    "EstimateResponse",
    "InviteTokenClaims",
    "InviteTokenResponse",
    "PackageCreateRequest",
    "PackageListResponse",
    "PackageResponse",
    "PackageSettingModel",
    "PackageSettingsUpdateRequest",
    "PackageSuggestionResponse",
    "PackageUpdateRequest",
    "PostCreateRequest",
    "PostResponse",
    "SubscriptionResponse",
    "SuccessMessage",
    "UnavailableDatesResponse",
]
