"""Booking and availability models."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator

from plek_shared.models.enums import PaymentStatus


class Booking(BaseModel):
    """A confirmed stay at a post.

    ``to_date`` is the check-out day and is not occupied by the booking.
    """

    model_config = ConfigDict(strict=True)

    booking_id: str
    title: str = ""
    post_id: str
    customer_id: str
    guests: list[str] = Field(default_factory=list)
    from_date: dt.date
    to_date: dt.date
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    token: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @model_validator(mode="after")
    def validate_dates(self) -> "Booking":
        if self.from_date >= self.to_date:
            raise ValueError("from_date must be before to_date")
        return self

    @property
    def nights(self) -> int:
        return (self.to_date - self.from_date).days

    def is_owner(self, user_id: str) -> bool:
        return self.customer_id == user_id

    def is_member(self, user_id: str) -> bool:
        """True for the customer and every invited guest."""
        return self.is_owner(user_id) or user_id in self.guests


class BookingCreate(BaseModel):
    """Data required to create a booking."""

    model_config = ConfigDict(strict=True)

    post_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    from_date: dt.date
    to_date: dt.date
    guests: list[str] = Field(default_factory=list)
    title: str = ""
    payment_status: PaymentStatus = PaymentStatus.UNPAID


class AvailabilityResult(BaseModel):
    """Result of an availability check for a date range."""

    model_config = ConfigDict(strict=True)

    post_id: str
    start_date: dt.date
    end_date: dt.date
    is_available: bool
    conflicting_booking_ids: list[str] = Field(default_factory=list)
