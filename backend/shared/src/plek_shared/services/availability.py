"""Availability service for booking overlap checks and night claims.

Bookings occupy the half-open range ``[from_date, to_date)``: the check-out
day is free for the next arrival. Every occupied night is also written to
the ``booking-nights`` table, keyed by post and night, so two overlapping
bookings cannot both commit.
"""

import datetime as dt
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from plek_shared.models import (
    AvailabilityResult,
    ConflictError,
    ErrorCode,
    ValidationError,
)
from plek_shared.services.subscription import SubscriptionServiceError
from plek_shared.utils.dates import iter_days, to_calendar_day
from plek_shared.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .posts import PostService
    from .subscription import SubscriptionService

logger = get_logger(__name__)

# DynamoDB caps a transaction at 100 items; the last claim batch also
# carries the booking row
MAX_TRANSACTION_ITEMS = 100
NIGHTS_PER_TRANSACTION = MAX_TRANSACTION_ITEMS - 1


def validate_range(start: dt.date, end: dt.date) -> tuple[dt.date, dt.date]:
    """Normalize a range to calendar days and check start < end.

    Raises:
        ValidationError: If start is not strictly before end
    """
    start_day = to_calendar_day(start)
    end_day = to_calendar_day(end)
    if start_day >= end_day:
        raise ValidationError(
            ErrorCode.INVALID_DATE_RANGE,
            details={
                "startDate": start_day.isoformat(),
                "endDate": end_day.isoformat(),
            },
        )
    return start_day, end_day


class AvailabilityService:
    """Service for availability checking and night claims."""

    BOOKINGS_TABLE = "bookings"
    NIGHTS_TABLE = "booking-nights"
    POST_INDEX = "post_id-index"

    def __init__(
        self,
        db: "DynamoDBService",
        posts: "PostService",
        subscriptions: "SubscriptionService",
    ) -> None:
        """Initialize availability service.

        Args:
            db: DynamoDB service instance
            posts: Post service, used to resolve slugs
            subscriptions: Billing lookup gating the unavailable-dates view
        """
        self.db = db
        self.posts = posts
        self.subscriptions = subscriptions

    def find_conflicts(
        self,
        post_id: str,
        start: dt.date,
        end: dt.date,
        exclude_booking_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Bookings for a post that overlap ``[start, end)``.

        Overlap means ``existing.from < end AND existing.to > start``.
        """
        overlap = Attr("from_date").lt(end.isoformat()) & Attr("to_date").gt(
            start.isoformat()
        )
        items = self.db.query_by_gsi(
            table=self.BOOKINGS_TABLE,
            index_name=self.POST_INDEX,
            partition_key_name="post_id",
            partition_key_value=post_id,
            filter_expression=overlap,
        )
        return [i for i in items if i.get("booking_id") != exclude_booking_id]

    def check_availability(
        self,
        post_ref: str,
        start: dt.date,
        end: dt.date,
    ) -> AvailabilityResult:
        """Check whether a date range is free for a post.

        Args:
            post_ref: Post id or slug
            start: Check-in date (time of day is ignored)
            end: Check-out date (time of day is ignored)

        Returns:
            AvailabilityResult with the conflicting booking ids, if any

        Raises:
            ValidationError: If start is not before end
            NotFoundError: If the post cannot be resolved
        """
        start_day, end_day = validate_range(start, end)
        post_id = self.posts.resolve_post_id(post_ref)

        conflicts = self.find_conflicts(post_id, start_day, end_day)
        return AvailabilityResult(
            post_id=post_id,
            start_date=start_day,
            end_date=end_day,
            is_available=not conflicts,
            conflicting_booking_ids=[str(c["booking_id"]) for c in conflicts],
        )

    def get_unavailable_dates(self, post_ref: str, user_id: str) -> list[str]:
        """Every occupied calendar day for a post, as sorted ISO strings.

        Non-subscribers get an empty list, so calendars render as open until
        the user subscribes. Billing lookup failures are treated the same way.
        """
        post_id = self.posts.resolve_post_id(post_ref)

        try:
            subscribed = self.subscriptions.has_active_subscription(user_id)
        except SubscriptionServiceError as e:
            logger.warning(
                "Subscription lookup failed, hiding unavailable dates",
                extra={"user_id": user_id, "error": str(e)},
            )
            return []
        if not subscribed:
            return []

        items = self.db.query_by_gsi(
            table=self.BOOKINGS_TABLE,
            index_name=self.POST_INDEX,
            partition_key_name="post_id",
            partition_key_value=post_id,
        )
        days: set[str] = set()
        for item in items:
            start = dt.date.fromisoformat(item["from_date"])
            end = dt.date.fromisoformat(item["to_date"])
            days.update(d.isoformat() for d in iter_days(start, end))
        return sorted(days)

    def claim_nights(
        self,
        post_id: str,
        start: dt.date,
        end: dt.date,
        booking_item: dict[str, Any],
    ) -> None:
        """Claim every night in ``[start, end)`` and write the booking.

        Each night row is written only if it does not exist yet. Nights are
        claimed in transactions of up to ``NIGHTS_PER_TRANSACTION`` rows and
        the booking row goes into the last one, so the booking only exists
        once all of its nights are held. If a later batch is rejected, the
        nights claimed by earlier batches are released again.

        Raises:
            ConflictError: If any night is already claimed
        """
        booking_id = booking_item["booking_id"]
        batches = _batches(iter_days(start, end), NIGHTS_PER_TRANSACTION)
        claimed: list[dt.date] = []

        for i, batch in enumerate(batches):
            transact_items = [self._night_put(post_id, night, booking_id) for night in batch]
            if i == len(batches) - 1:
                transact_items.append(
                    {
                        "Put": {
                            "TableName": self.db.table_name(self.BOOKINGS_TABLE),
                            "Item": self.db.serialize(booking_item),
                            "ConditionExpression": "attribute_not_exists(booking_id)",
                        }
                    }
                )

            if not self.db.transact_write(transact_items):
                logger.warning(
                    "Night claim rejected",
                    extra={
                        "post_id": post_id,
                        "booking_id": booking_id,
                        "batch": i,
                        "released": len(claimed),
                    },
                )
                if claimed:
                    self._delete_nights(post_id, claimed, booking_id)
                raise ConflictError(
                    details="The selected dates overlap with an existing booking."
                )
            claimed.extend(batch)

    def release_nights(
        self,
        post_id: str,
        start: dt.date,
        end: dt.date,
        booking_id: str,
        delete_booking: bool = True,
    ) -> bool:
        """Release the nights held by a booking.

        Night rows owned by another booking are left alone and the release
        stops there. Releasing is safe to repeat: nights already gone are
        skipped by the delete condition.

        Args:
            post_id: Post the booking belongs to
            start: Check-in date
            end: Check-out date (exclusive)
            booking_id: Booking that holds the nights
            delete_booking: Also delete the booking row, in the last batch

        Returns:
            True if released, False if a batch was cancelled
        """
        booking_delete = (
            {
                "Delete": {
                    "TableName": self.db.table_name(self.BOOKINGS_TABLE),
                    "Key": {"booking_id": {"S": booking_id}},
                }
            }
            if delete_booking
            else None
        )
        return self._delete_nights(
            post_id, iter_days(start, end), booking_id, booking_delete
        )

    def _night_put(self, post_id: str, night: dt.date, booking_id: str) -> dict[str, Any]:
        return {
            "Put": {
                "TableName": self.db.table_name(self.NIGHTS_TABLE),
                "Item": self.db.serialize(
                    {
                        "post_id": post_id,
                        "night": night.isoformat(),
                        "booking_id": booking_id,
                    }
                ),
                "ConditionExpression": "attribute_not_exists(night)",
            }
        }

    def _delete_nights(
        self,
        post_id: str,
        nights: list[dt.date],
        booking_id: str,
        last_item: dict[str, Any] | None = None,
    ) -> bool:
        nights_table = self.db.table_name(self.NIGHTS_TABLE)
        deletes: list[dict[str, Any]] = [
            {
                "Delete": {
                    "TableName": nights_table,
                    "Key": {
                        "post_id": {"S": post_id},
                        "night": {"S": night.isoformat()},
                    },
                    "ConditionExpression": (
                        "attribute_not_exists(night) OR booking_id = :bid"
                    ),
                    "ExpressionAttributeValues": {":bid": {"S": booking_id}},
                }
            }
            for night in nights
        ]
        if last_item is not None:
            deletes.append(last_item)

        for batch in _batches(deletes, MAX_TRANSACTION_ITEMS):
            if not self.db.transact_write(batch):
                logger.warning(
                    "Night release rejected",
                    extra={"post_id": post_id, "booking_id": booking_id},
                )
                return False
        return True


def _batches(items: list[Any], size: int) -> list[list[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]
