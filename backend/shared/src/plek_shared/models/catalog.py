"""Billing catalog product model.

Catalog products mirror the purchasable items configured at the billing
vendor. They are kept in a static in-memory table and turned into
``Package`` instances on demand.
"""

from pydantic import BaseModel, ConfigDict, Field

from plek_shared.models.enums import BillingPeriod, Entitlement, PackageCategory

# Nights covered by one unit of each billing period
PERIOD_NIGHTS: dict[BillingPeriod, int] = {
    BillingPeriod.DAY: 1,
    BillingPeriod.WEEK: 7,
    BillingPeriod.MONTH: 30,
    BillingPeriod.YEAR: 365,
}


def nights_for_period(period: BillingPeriod, count: int) -> int:
    """Convert a billing period to a number of nights.

    Hourly products always count as a single night.
    """
    if period == BillingPeriod.HOUR:
        return 1
    return max(1, PERIOD_NIGHTS[period] * count)


class CatalogProduct(BaseModel):
    """A product from the billing vendor's catalog."""

    model_config = ConfigDict(strict=True)

    id: str
    title: str
    description: str = ""
    price: float = Field(..., ge=0)
    currency: str = "USD"
    period: BillingPeriod = BillingPeriod.DAY
    period_count: int = Field(default=1, ge=1)
    category: PackageCategory = PackageCategory.STANDARD
    features: list[str] = Field(default_factory=list)
    is_enabled: bool = True
    entitlement: Entitlement = Entitlement.STANDARD

    @property
    def nights(self) -> int:
        return nights_for_period(self.period, self.period_count)
