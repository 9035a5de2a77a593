"""Booking endpoints.

Provides REST endpoints for:
- Checking availability of a date range (public)
- Listing occupied days for subscribers
- Creating, reading and deleting bookings
- Invite links: issue, refresh, decode and accept
- Removing guests

Identity comes from the x-user-sub header set by the API gateway.
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query
from starlette.status import HTTP_201_CREATED

from plek_api.dependencies import get_availability_service, get_booking_service
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
from plek_api.models.common import ErrorResponse, SuccessMessage
from plek_api.security import get_current_user_id
from plek_shared.models import Booking, BookingCreate, ErrorCode, ValidationError
from plek_shared.services.availability import AvailabilityService
from plek_shared.services.booking import BookingService
from plek_shared.utils.dates import to_calendar_day

router = APIRouter(prefix="/bookings", tags=["bookings"])

MISSING_AVAILABILITY_PARAMS = (
    "Post slug/ID and date range (startDate, endDate) are required"
)


def _to_response(booking: Booking) -> BookingResponse:
    return BookingResponse.model_validate(booking.model_dump())


def _parse_day(value: str, field: str) -> dt.date:
    try:
        return to_calendar_day(value)
    except ValueError as e:
        raise ValidationError(ErrorCode.INVALID_DATE_FORMAT, details={"field": field}) from e


@router.get(
    "/check-availability",
    summary="Check date availability",
    description="""
Check whether a date range is free for a post.

**Notes:**
- Pass either `postId` or `slug`
- Dates are YYYY-MM-DD; any time of day is ignored
- `endDate` is the check-out day and may equal another booking's check-in
""",
    response_model=AvailabilityResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid parameters"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def check_availability(
    post_id: str | None = Query(default=None, alias="postId"),
    slug: str | None = Query(default=None),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    post_ref = post_id or slug
    if not post_ref or not start_date or not end_date:
        raise ValidationError(message=MISSING_AVAILABILITY_PARAMS)

    result = service.check_availability(
        post_ref,
        _parse_day(start_date, "startDate"),
        _parse_day(end_date, "endDate"),
    )
    return AvailabilityResponse(
        post_id=result.post_id,
        is_available=result.is_available,
        requested_range=DateRange(start_date=result.start_date, end_date=result.end_date),
    )


@router.get(
    "/unavailable-dates",
    summary="List occupied days",
    description="""
Every day covered by an existing booking for the post.

Requires authentication. Callers without an active subscription receive
an empty list so the calendar renders as open.
""",
    response_model=UnavailableDatesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing post reference"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def get_unavailable_dates(
    post_id: str | None = Query(default=None, alias="postId"),
    slug: str | None = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    service: AvailabilityService = Depends(get_availability_service),
) -> UnavailableDatesResponse:
    post_ref = post_id or slug
    if not post_ref:
        raise ValidationError(message="Post slug or ID is required")
    return UnavailableDatesResponse(
        unavailable_dates=service.get_unavailable_dates(post_ref, user_id)
    )


@router.get(
    "/token/{token}",
    summary="Decode an invite token",
    response_model=InviteTokenClaims,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
)
async def decode_invite_token(
    token: str,
    service: BookingService = Depends(get_booking_service),
) -> InviteTokenClaims:
    claims = service.decode_token(token)
    exp = claims.get("exp")
    return InviteTokenClaims(
        booking_id=claims["bookingId"],
        customer_id=claims["customerId"],
        expires_at=dt.datetime.fromtimestamp(exp, dt.UTC) if exp else None,
    )


@router.post(
    "",
    summary="Create a booking",
    description="""
Create a booking for the caller.

The overlap check is repeated on write and the nights are claimed in one
transaction, so a range taken by a concurrent request is rejected with
"Booking dates are not available."
""",
    response_model=BookingResponse,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid range or dates taken"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def create_booking(
    body: BookingCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = service.create_booking(
        BookingCreate(
            post_id=body.post_id,
            customer_id=user_id,
            from_date=body.from_date,
            to_date=body.to_date,
            guests=body.guests,
            title=body.title,
        )
    )
    return _to_response(booking)


@router.get(
    "",
    summary="List my bookings",
    description="Bookings where the caller is the customer or an invited guest.",
    response_model=BookingListResponse,
    responses={401: {"model": ErrorResponse, "description": "Authentication required"}},
)
async def list_bookings(
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    bookings = [_to_response(b) for b in service.list_bookings_for_user(user_id)]
    return BookingListResponse(bookings=bookings, total=len(bookings))


@router.get(
    "/{booking_id}",
    summary="Get a booking",
    response_model=BookingResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Not part of this booking"},
        404: {"model": ErrorResponse, "description": "Booking not found"},
    },
)
async def get_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    return _to_response(service.get_booking_for_user(booking_id, user_id))


@router.delete(
    "/{booking_id}",
    summary="Delete a booking",
    description="Owner only. Frees the booked nights.",
    response_model=SuccessMessage,
    responses={
        403: {"model": ErrorResponse, "description": "Not the booking owner"},
        404: {"model": ErrorResponse, "description": "Booking not found"},
    },
)
async def delete_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> SuccessMessage:
    service.delete_booking(booking_id, user_id)
    return SuccessMessage(message="Booking deleted")


@router.post(
    "/{booking_id}/token",
    summary="Get the invite token",
    description="Owner only. Creates the token on first request.",
    response_model=InviteTokenResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not the booking owner"},
        404: {"model": ErrorResponse, "description": "Booking not found"},
    },
)
async def get_invite_token(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> InviteTokenResponse:
    token = service.get_or_create_token(booking_id, user_id)
    return InviteTokenResponse(booking_id=booking_id, token=token)


@router.post(
    "/{booking_id}/refresh-token",
    summary="Refresh the invite token",
    description="Owner only. The previous invite link stops working.",
    response_model=InviteTokenResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not the booking owner"},
        404: {"model": ErrorResponse, "description": "Booking not found"},
    },
)
async def refresh_invite_token(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> InviteTokenResponse:
    token = service.refresh_token(booking_id, user_id)
    return InviteTokenResponse(booking_id=booking_id, token=token)


@router.post(
    "/{booking_id}/accept-invite/{token}",
    summary="Accept an invite",
    description="Adds the caller to the booking's guests.",
    response_model=BookingUpdateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Token does not match"},
        404: {"model": ErrorResponse, "description": "Booking not found"},
    },
)
async def accept_invite(
    booking_id: str,
    token: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingUpdateResponse:
    booking, added = service.accept_invite(booking_id, token, user_id)
    return BookingUpdateResponse(
        message="Booking updated" if added else "User already in booking",
        booking=_to_response(booking),
    )


@router.delete(
    "/{booking_id}/guests/{guest_id}",
    summary="Remove a guest",
    description="Owner only.",
    response_model=BookingUpdateResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Not the booking owner"},
        404: {"model": ErrorResponse, "description": "Booking or guest not found"},
    },
)
async def remove_guest(
    booking_id: str,
    guest_id: str,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingUpdateResponse:
    booking = service.remove_guest(booking_id, guest_id, user_id)
    return BookingUpdateResponse(
        message="Guest removed from booking",
        booking=_to_response(booking),
    )
