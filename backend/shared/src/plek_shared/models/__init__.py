"""Domain models shared by the Plek services and API."""

from plek_shared.models.booking import AvailabilityResult, Booking, BookingCreate
from plek_shared.models.catalog import CatalogProduct, nights_for_period
from plek_shared.models.enums import (
    BillingPeriod,
    Entitlement,
    MatchStrategy,
    PackageCategory,
    PackageSource,
    PaymentStatus,
)
from plek_shared.models.errors import (
    ERROR_MESSAGES,
    ConflictError,
    ErrorCode,
    ErrorResponse,
    ForbiddenError,
    NotFoundError,
    PlekError,
    UnauthorizedError,
    ValidationError,
)
from plek_shared.models.estimate import Estimate, EstimateRequest, SelectedPackage
from plek_shared.models.package import (
    MAX_MULTIPLIER,
    MIN_MULTIPLIER,
    Package,
    PackageResolution,
)
from plek_shared.models.post import PackageSetting, Post

__all__ = [
    # Enums
    "BillingPeriod",
    "Entitlement",
    "MatchStrategy",
    "PackageCategory",
    "PackageSource",
    "PaymentStatus",
    # Errors
    "ERROR_MESSAGES",
    "ConflictError",
    "ErrorCode",
    "ErrorResponse",
    "ForbiddenError",
    "NotFoundError",
    "PlekError",
    "UnauthorizedError",
    "ValidationError",
    # Posts and packages
    "CatalogProduct",
    "MAX_MULTIPLIER",
    "MIN_MULTIPLIER",
    "Package",
    "PackageResolution",
    "PackageSetting",
    "Post",
    "nights_for_period",
    # Bookings and estimates
    "AvailabilityResult",
    "Booking",
    "BookingCreate",
    "Estimate",
    "EstimateRequest",
    "SelectedPackage",
]
