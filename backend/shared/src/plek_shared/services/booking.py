"""Booking service for creating bookings and managing guest invites."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from plek_shared.models import (
    Booking,
    BookingCreate,
    ConflictError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    PaymentStatus,
    ValidationError,
)
from plek_shared.services.availability import validate_range
from plek_shared.utils.dates import parse_datetime
from plek_shared.utils.logging import get_logger, log_booking_operation

if TYPE_CHECKING:
    from .availability import AvailabilityService
    from .dynamodb import DynamoDBService
    from .invite_tokens import InviteTokenService
    from .posts import PostService

logger = get_logger(__name__)

OVERLAP_DETAIL = "The selected dates overlap with an existing booking."


class BookingService:
    """Service for booking lifecycle and invite links."""

    TABLE = "bookings"
    CUSTOMER_INDEX = "customer_id-index"

    def __init__(
        self,
        db: "DynamoDBService",
        posts: "PostService",
        availability: "AvailabilityService",
        tokens: "InviteTokenService",
    ) -> None:
        """Initialize booking service.

        Args:
            db: DynamoDB service instance
            posts: Post service, used to check the booked post exists
            availability: Overlap checks and night claims
            tokens: Invite token signing and verification
        """
        self.db = db
        self.posts = posts
        self.availability = availability
        self.tokens = tokens

    # Creation

    def create_booking(self, data: BookingCreate) -> Booking:
        """Create a booking after re-checking availability.

        The overlap query runs first so the caller gets a clear conflict;
        the transactional night claim then guarantees that concurrent
        requests for the same nights cannot both succeed.

        Raises:
            ValidationError: If from_date is not before to_date
            NotFoundError: If the post does not exist
            ConflictError: If the dates overlap an existing booking
        """
        start, end = validate_range(data.from_date, data.to_date)
        post_id = self.posts.resolve_post_id(data.post_id)

        if self.availability.find_conflicts(post_id, start, end):
            log_booking_operation(
                logger,
                "create_booking",
                post_id=post_id,
                user_id=data.customer_id,
                status="conflict",
            )
            raise ConflictError(details=OVERLAP_DETAIL)

        now = dt.datetime.now(dt.UTC)
        booking = Booking(
            booking_id=str(uuid.uuid4()),
            title=data.title,
            post_id=post_id,
            customer_id=data.customer_id,
            guests=[g for g in dict.fromkeys(data.guests) if g != data.customer_id],
            from_date=start,
            to_date=end,
            payment_status=data.payment_status,
            created_at=now,
            updated_at=now,
        )

        try:
            self.availability.claim_nights(
                booking.post_id, start, end, self._booking_to_item(booking)
            )
        except ConflictError:
            log_booking_operation(
                logger,
                "create_booking",
                post_id=booking.post_id,
                booking_id=booking.booking_id,
                user_id=booking.customer_id,
                status="conflict",
            )
            raise

        log_booking_operation(
            logger,
            "create_booking",
            post_id=booking.post_id,
            booking_id=booking.booking_id,
            user_id=booking.customer_id,
            status="created",
            nights=booking.nights,
        )
        return booking

    # Reads

    def get_booking(self, booking_id: str) -> Booking:
        """Get a booking by id.

        Raises:
            NotFoundError: BOOKING_NOT_FOUND
        """
        item = self.db.get_item(self.TABLE, {"booking_id": booking_id})
        if not item:
            raise NotFoundError(ErrorCode.BOOKING_NOT_FOUND)
        return self._item_to_booking(item)

    def get_booking_for_user(self, booking_id: str, user_id: str) -> Booking:
        """Get a booking the user owns or is a guest of."""
        booking = self.get_booking(booking_id)
        if not booking.is_member(user_id):
            raise ForbiddenError(details="You are not part of this booking")
        return booking

    def list_bookings_for_user(self, user_id: str) -> list[Booking]:
        """Bookings where the user is the customer or a guest."""
        owned = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=self.CUSTOMER_INDEX,
            partition_key_name="customer_id",
            partition_key_value=user_id,
        )
        invited = self.db.scan(
            self.TABLE, filter_expression=Attr("guests").contains(user_id)
        )

        by_id: dict[str, dict[str, Any]] = {}
        for item in owned + invited:
            by_id[item["booking_id"]] = item

        bookings = [self._item_to_booking(item) for item in by_id.values()]
        return sorted(bookings, key=lambda b: (b.from_date, b.booking_id))

    # Invite tokens

    def get_or_create_token(self, booking_id: str, user_id: str) -> str:
        """Return the booking's invite token, creating it on first use.

        An expired or unverifiable stored token is replaced.

        Raises:
            ForbiddenError: If the user does not own the booking
        """
        booking = self._get_owned(booking_id, user_id)
        if booking.token and self.tokens.is_valid(booking.token):
            return booking.token
        return self._store_new_token(booking)

    def refresh_token(self, booking_id: str, user_id: str) -> str:
        """Replace the invite token; the previous link stops working."""
        booking = self._get_owned(booking_id, user_id)
        return self._store_new_token(booking)

    def decode_token(self, token: str) -> dict[str, Any]:
        return self.tokens.decode_token(token)

    def accept_invite(
        self, booking_id: str, token: str, user_id: str
    ) -> tuple[Booking, bool]:
        """Add the user to the booking's guests.

        Returns:
            Tuple of (booking, added). ``added`` is False when the user was
            already the customer or a guest.

        Raises:
            ValidationError: INVALID_INVITE_TOKEN if the token does not match
                the one stored on the booking, or is expired
        """
        booking = self.get_booking(booking_id)
        if not booking.token or booking.token != token:
            raise ValidationError(
                ErrorCode.INVALID_INVITE_TOKEN,
                details="Token does not match this booking",
            )
        claims = self.tokens.decode_token(token)
        if claims["bookingId"] != booking_id:
            raise ValidationError(
                ErrorCode.INVALID_INVITE_TOKEN,
                details="Token was issued for another booking",
            )

        if booking.is_member(user_id):
            return booking, False

        now = dt.datetime.now(dt.UTC).isoformat()
        attrs = self.db.update_item(
            table=self.TABLE,
            key={"booking_id": booking_id},
            update_expression=(
                "SET guests = list_append(if_not_exists(guests, :empty), :guest), "
                "updated_at = :now"
            ),
            expression_attribute_values={
                ":guest": [user_id],
                ":empty": [],
                ":now": now,
                ":token": token,
            },
            condition_expression="#token = :token",
            expression_attribute_names={"#token": "token"},
        )
        if attrs is None:
            # token was refreshed between the read and the write
            raise ValidationError(
                ErrorCode.INVALID_INVITE_TOKEN,
                details="Token does not match this booking",
            )

        log_booking_operation(
            logger,
            "accept_invite",
            post_id=booking.post_id,
            booking_id=booking_id,
            user_id=user_id,
            status="guest_added",
        )
        return self._item_to_booking(attrs), True

    # Owner operations

    def remove_guest(self, booking_id: str, guest_id: str, user_id: str) -> Booking:
        """Remove a guest from the booking.

        Raises:
            ForbiddenError: If the user does not own the booking
            NotFoundError: GUEST_NOT_FOUND if the guest is not on the booking
        """
        booking = self._get_owned(booking_id, user_id)
        if guest_id not in booking.guests:
            raise NotFoundError(ErrorCode.GUEST_NOT_FOUND)

        remaining = [g for g in booking.guests if g != guest_id]
        attrs = self.db.update_item(
            table=self.TABLE,
            key={"booking_id": booking_id},
            update_expression="SET guests = :guests, updated_at = :now",
            expression_attribute_values={
                ":guests": remaining,
                ":now": dt.datetime.now(dt.UTC).isoformat(),
            },
            condition_expression="attribute_exists(booking_id)",
        )
        if attrs is None:
            raise NotFoundError(ErrorCode.BOOKING_NOT_FOUND)
        log_booking_operation(
            logger,
            "remove_guest",
            post_id=booking.post_id,
            booking_id=booking_id,
            user_id=user_id,
            status="guest_removed",
            guest_id=guest_id,
        )
        return self._item_to_booking(attrs)

    def delete_booking(self, booking_id: str, user_id: str) -> None:
        """Delete a booking and release its nights.

        Raises:
            ForbiddenError: If the user does not own the booking
            ConflictError: If the night rows could not be released
        """
        booking = self._get_owned(booking_id, user_id)
        released = self.availability.release_nights(
            booking.post_id, booking.from_date, booking.to_date, booking_id
        )
        if not released:
            log_booking_operation(
                logger,
                "delete_booking",
                post_id=booking.post_id,
                booking_id=booking_id,
                user_id=user_id,
                error="night release cancelled",
            )
            raise ConflictError(
                message="Booking could not be deleted",
                details="Night claims are held by another booking",
            )
        log_booking_operation(
            logger,
            "delete_booking",
            post_id=booking.post_id,
            booking_id=booking_id,
            user_id=user_id,
            status="deleted",
        )

    # Helpers

    def _get_owned(self, booking_id: str, user_id: str) -> Booking:
        booking = self.get_booking(booking_id)
        if not booking.is_owner(user_id):
            raise ForbiddenError(details="Only the booking owner can do this")
        return booking

    def _store_new_token(self, booking: Booking) -> str:
        token = self.tokens.create_token(booking.booking_id, booking.customer_id)
        attrs = self.db.update_item(
            table=self.TABLE,
            key={"booking_id": booking.booking_id},
            update_expression="SET #token = :token, updated_at = :now",
            expression_attribute_values={
                ":token": token,
                ":now": dt.datetime.now(dt.UTC).isoformat(),
            },
            expression_attribute_names={"#token": "token"},
            condition_expression="attribute_exists(booking_id)",
        )
        if attrs is None:
            raise NotFoundError(ErrorCode.BOOKING_NOT_FOUND)
        logger.info(
            "Invite token issued",
            extra={"booking_id": booking.booking_id},
        )
        return token

    def _booking_to_item(self, booking: Booking) -> dict[str, Any]:
        return booking.model_dump(mode="json", exclude_none=True)

    def _item_to_booking(self, item: dict[str, Any]) -> Booking:
        created_at = parse_datetime(item.get("created_at")) or dt.datetime.now(dt.UTC)
        return Booking(
            booking_id=item["booking_id"],
            title=item.get("title", ""),
            post_id=item["post_id"],
            customer_id=item["customer_id"],
            guests=[str(g) for g in item.get("guests", [])],
            from_date=dt.date.fromisoformat(item["from_date"]),
            to_date=dt.date.fromisoformat(item["to_date"]),
            payment_status=PaymentStatus(
                item.get("payment_status", PaymentStatus.UNPAID.value)
            ),
            token=item.get("token"),
            created_at=created_at,
            updated_at=parse_datetime(item.get("updated_at")) or created_at,
        )
