"""Enumeration types for Plek data models."""

from enum import Enum


class PackageCategory(str, Enum):
    """Category of a bookable package."""

    STANDARD = "standard"
    HOSTED = "hosted"
    ADDON = "addon"
    SPECIAL = "special"


class PackageSource(str, Enum):
    """Where a package definition came from."""

    DATABASE = "database"
    REVENUECAT = "revenuecat"  # synthesized from the billing catalog


class Entitlement(str, Enum):
    """Subscription tier a package requires."""

    STANDARD = "standard"
    PRO = "pro"


class PaymentStatus(str, Enum):
    """Payment status for a booking or estimate."""

    PAID = "paid"
    UNPAID = "unpaid"


class BillingPeriod(str, Enum):
    """Billing period of a catalog product."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class MatchStrategy(str, Enum):
    """Lookup strategy that resolved a requested package identifier."""

    CANDIDATE_ID = "candidate_id"
    CANDIDATE_CATALOG_ID = "candidate_catalog_id"
    DATABASE_ID = "database_id"
    DATABASE_NAME = "database_name"
    CATALOG_ID = "catalog_id"
