"""API models for booking, availability and invite endpoints."""

import datetime as dt

from pydantic import ConfigDict, Field

from plek_api.models.common import CamelModel
from plek_shared.models.enums import PaymentStatus


class DateRange(CamelModel):
    start_date: dt.date = Field(..., examples=["2024-03-05"])
    end_date: dt.date = Field(..., examples=["2024-03-07"])


class AvailabilityResponse(CamelModel):
    """Availability of a date range for a post."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "postId": "post-123",
                    "isAvailable": True,
                    "requestedRange": {
                        "startDate": "2024-03-05",
                        "endDate": "2024-03-07",
                    },
                }
            ]
        }
    )

    post_id: str
    is_available: bool = Field(..., description="True if no booking overlaps the range")
    requested_range: DateRange


class UnavailableDatesResponse(CamelModel):
    unavailable_dates: list[str] = Field(
        default_factory=list,
        description="Occupied days (YYYY-MM-DD); empty for non-subscribers",
        examples=[["2024-03-01", "2024-03-02"]],
    )


class BookingCreateRequest(CamelModel):
    """Request to create a booking. The customer is the caller."""

    post_id: str = Field(..., min_length=1, examples=["post-123"])
    from_date: dt.date = Field(..., description="Check-in date", examples=["2024-03-01"])
    to_date: dt.date = Field(
        ..., description="Check-out date (exclusive)", examples=["2024-03-05"]
    )
    guests: list[str] = Field(default_factory=list)
    title: str = ""


class BookingResponse(CamelModel):
    booking_id: str
    title: str
    post_id: str
    customer_id: str
    guests: list[str]
    from_date: dt.date
    to_date: dt.date
    payment_status: PaymentStatus
    created_at: dt.datetime
    updated_at: dt.datetime


class BookingListResponse(CamelModel):
    bookings: list[BookingResponse]
    total: int


class InviteTokenResponse(CamelModel):
    booking_id: str
    token: str


class InviteTokenClaims(CamelModel):
    """Decoded invite token."""

    booking_id: str
    customer_id: str
    expires_at: dt.datetime | None = None


class BookingUpdateResponse(CamelModel):
    """Result of accepting an invite or removing a guest."""

    message: str = Field(..., examples=["Booking updated"])
    booking: BookingResponse
