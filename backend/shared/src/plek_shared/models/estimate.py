"""Estimate models.

An estimate is a priced, not-yet-paid booking request. There is at most one
estimate per post, customer and date range; requesting the same range again
updates it.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from plek_shared.models.enums import PaymentStatus


class SelectedPackage(BaseModel):
    """Snapshot of the database package chosen for an estimate."""

    model_config = ConfigDict(strict=True)

    package_id: str
    custom_name: str | None = None
    enabled: bool = True


class Estimate(BaseModel):
    """A priced booking request."""

    model_config = ConfigDict(strict=True)

    estimate_id: str
    title: str = ""
    post_id: str
    customer_id: str
    guests: list[str] = Field(default_factory=list)
    from_date: dt.date
    to_date: dt.date
    total: float = Field(..., ge=0)
    selected_package: SelectedPackage | None = None
    package_type: str
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    booking_id: str | None = None
    confirmed_at: dt.datetime | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class EstimateRequest(BaseModel):
    """Input for creating or updating an estimate.

    Lenient so ISO strings from the API coerce to dates.
    """

    model_config = ConfigDict(strict=False)

    post_id: str = Field(..., min_length=1)
    from_date: dt.date
    to_date: dt.date
    guests: list[str] = Field(default_factory=list)
    package_type: str = Field(..., min_length=1)
    total: float | None = Field(default=None, ge=0)
    title: str | None = None
