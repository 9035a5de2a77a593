"""API models for estimate endpoints."""

import datetime as dt

from pydantic import ConfigDict, Field

from plek_api.models.bookings import BookingResponse
from plek_api.models.common import CamelModel
from plek_shared.models.enums import PaymentStatus


class EstimateCreateRequest(CamelModel):
    """Request a price estimate for a stay."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "postId": "post-123",
                    "fromDate": "2024-01-01",
                    "toDate": "2024-01-04",
                    "guests": [],
                    "packageType": "weekly",
                }
            ]
        }
    )

    post_id: str = Field(..., min_length=1)
    from_date: dt.date
    to_date: dt.date
    guests: list[str] = Field(default_factory=list)
    package_type: str = Field(
        ...,
        min_length=1,
        description="Package id, catalog id or package name",
    )
    total: float | None = Field(
        default=None,
        ge=0,
        description="Client-computed total; used as-is when given",
    )
    title: str | None = None


class SelectedPackageResponse(CamelModel):
    package_id: str
    custom_name: str | None = None
    enabled: bool


class EstimateResponse(CamelModel):
    estimate_id: str
    title: str
    post_id: str
    customer_id: str
    guests: list[str]
    from_date: dt.date
    to_date: dt.date
    total: float
    selected_package: SelectedPackageResponse | None = None
    package_type: str
    payment_status: PaymentStatus
    booking_id: str | None = None
    confirmed_at: dt.datetime | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class EstimateConfirmRequest(CamelModel):
    payment_validated: bool = Field(
        default=False,
        description="Set by the client once the billing purchase succeeded",
    )


class EstimateConfirmResponse(CamelModel):
    estimate: EstimateResponse
    booking: BookingResponse
