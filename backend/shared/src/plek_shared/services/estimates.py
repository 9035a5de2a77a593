"""Estimate service: price a requested stay and confirm it into a booking."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from plek_shared.models import (
    Booking,
    BookingCreate,
    ErrorCode,
    Estimate,
    EstimateRequest,
    ForbiddenError,
    NotFoundError,
    PaymentStatus,
    SelectedPackage,
    ValidationError,
)
from plek_shared.services.availability import validate_range
from plek_shared.services.pricing import (
    compute_duration,
    compute_total,
    effective_base_rate,
)
from plek_shared.utils.dates import parse_datetime
from plek_shared.utils.logging import get_logger, log_booking_operation

if TYPE_CHECKING:
    from .booking import BookingService
    from .dynamodb import DynamoDBService
    from .packages import PackageResolver
    from .posts import PostService

logger = get_logger(__name__)


class EstimateService:
    """Service for estimates."""

    TABLE = "estimates"
    CUSTOMER_INDEX = "customer_id-index"

    def __init__(
        self,
        db: "DynamoDBService",
        posts: "PostService",
        resolver: "PackageResolver",
        bookings: "BookingService",
    ) -> None:
        self.db = db
        self.posts = posts
        self.resolver = resolver
        self.bookings = bookings

    def upsert_estimate(
        self, user_id: str, request: EstimateRequest
    ) -> tuple[Estimate, bool]:
        """Create or update the user's estimate for a post and date range.

        The package is resolved first; an explicit total in the request is
        used as-is, otherwise the total is base rate x nights x multiplier.
        Only database packages are recorded as ``selected_package``.

        Returns:
            Tuple of (estimate, created)

        Raises:
            ValidationError: If the date range is invalid
            NotFoundError: PACKAGE_NOT_FOUND if the package cannot be resolved
        """
        start, end = validate_range(request.from_date, request.to_date)
        resolution = self.resolver.resolve(request.post_id, request.package_type)
        package = resolution.package

        if request.total is not None:
            total = float(request.total)
        else:
            base_rate = effective_base_rate(
                package, self.posts.get_base_rate(request.post_id)
            )
            total = compute_total(
                base_rate, compute_duration(start, end), package.multiplier
            )

        selected: SelectedPackage | None = None
        if resolution.is_database:
            setting = resolution.setting
            selected = SelectedPackage(
                package_id=package.package_id,
                custom_name=setting.custom_name if setting else None,
                enabled=setting.enabled if setting else package.is_enabled,
            )

        now = dt.datetime.now(dt.UTC)
        existing = self._find_open_estimate(user_id, request.post_id, start, end)
        created = existing is None
        title = request.title or (
            existing.title if existing else f"Estimate for {request.post_id}"
        )

        estimate = Estimate(
            estimate_id=existing.estimate_id if existing else str(uuid.uuid4()),
            title=title,
            post_id=request.post_id,
            customer_id=user_id,
            guests=list(dict.fromkeys(request.guests)),
            from_date=start,
            to_date=end,
            total=total,
            selected_package=selected,
            package_type=resolution.display_name,
            payment_status=PaymentStatus.UNPAID,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        self.db.put_item(self.TABLE, self._estimate_to_item(estimate))

        log_booking_operation(
            logger,
            "upsert_estimate",
            post_id=estimate.post_id,
            estimate_id=estimate.estimate_id,
            user_id=user_id,
            status="created" if created else "updated",
            package_id=package.package_id,
            strategy=resolution.strategy.value,
            total=total,
        )
        return estimate, created

    def get_estimate(self, estimate_id: str, user_id: str | None = None) -> Estimate:
        """Get an estimate, optionally checking ownership.

        Raises:
            NotFoundError: ESTIMATE_NOT_FOUND
            ForbiddenError: If ``user_id`` is given and is not the customer
        """
        item = self.db.get_item(self.TABLE, {"estimate_id": estimate_id})
        if not item:
            raise NotFoundError(ErrorCode.ESTIMATE_NOT_FOUND)
        estimate = self._item_to_estimate(item)
        if user_id is not None and estimate.customer_id != user_id:
            raise ForbiddenError(details="This estimate belongs to another user")
        return estimate

    def get_latest_estimate(self, user_id: str, post_ref: str | None = None) -> Estimate:
        """Most recently created estimate of the user, optionally for one post.

        Raises:
            NotFoundError: If the post is unknown or there is no estimate
        """
        post_id = self.posts.resolve_post_id(post_ref) if post_ref else None
        filter_expression = Attr("post_id").eq(post_id) if post_id else None
        items = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=self.CUSTOMER_INDEX,
            partition_key_name="customer_id",
            partition_key_value=user_id,
            filter_expression=filter_expression,
        )
        if not items:
            raise NotFoundError(ErrorCode.ESTIMATE_NOT_FOUND)
        latest = max(items, key=lambda i: i.get("created_at", ""))
        return self._item_to_estimate(latest)

    def confirm_estimate(
        self, estimate_id: str, user_id: str, payment_validated: bool
    ) -> tuple[Estimate, Booking]:
        """Mark a paid estimate confirmed and create its booking.

        Confirming twice returns the booking created the first time.

        Raises:
            ValidationError: PAYMENT_NOT_VALIDATED if payment was not validated
            ConflictError: If the dates were taken in the meantime
        """
        if not payment_validated:
            raise ValidationError(ErrorCode.PAYMENT_NOT_VALIDATED)

        estimate = self.get_estimate(estimate_id, user_id)
        if estimate.payment_status == PaymentStatus.PAID and estimate.booking_id:
            return estimate, self.bookings.get_booking(estimate.booking_id)

        booking = self.bookings.create_booking(
            BookingCreate(
                post_id=estimate.post_id,
                customer_id=estimate.customer_id,
                from_date=estimate.from_date,
                to_date=estimate.to_date,
                guests=list(estimate.guests),
                title=estimate.title,
                payment_status=PaymentStatus.PAID,
            )
        )

        now = dt.datetime.now(dt.UTC)
        confirmed = estimate.model_copy(
            update={
                "payment_status": PaymentStatus.PAID,
                "booking_id": booking.booking_id,
                "confirmed_at": now,
                "updated_at": now,
            }
        )
        self.db.put_item(self.TABLE, self._estimate_to_item(confirmed))

        log_booking_operation(
            logger,
            "confirm_estimate",
            post_id=confirmed.post_id,
            booking_id=booking.booking_id,
            estimate_id=estimate_id,
            user_id=user_id,
            status="confirmed",
            total=confirmed.total,
        )
        return confirmed, booking

    def _find_open_estimate(
        self, user_id: str, post_id: str, start: dt.date, end: dt.date
    ) -> Estimate | None:
        """The user's unpaid estimate for exactly this post and range."""
        items = self.db.query_by_gsi(
            table=self.TABLE,
            index_name=self.CUSTOMER_INDEX,
            partition_key_name="customer_id",
            partition_key_value=user_id,
            filter_expression=(
                Attr("post_id").eq(post_id)
                & Attr("from_date").eq(start.isoformat())
                & Attr("to_date").eq(end.isoformat())
                & Attr("payment_status").eq(PaymentStatus.UNPAID.value)
            ),
        )
        if not items:
            return None
        return self._item_to_estimate(min(items, key=lambda i: i.get("created_at", "")))

    def _estimate_to_item(self, estimate: Estimate) -> dict[str, Any]:
        return estimate.model_dump(mode="json", exclude_none=True)

    def _item_to_estimate(self, item: dict[str, Any]) -> Estimate:
        selected = item.get("selected_package")
        created_at = parse_datetime(item.get("created_at")) or dt.datetime.now(dt.UTC)
        return Estimate(
            estimate_id=item["estimate_id"],
            title=item.get("title", ""),
            post_id=item["post_id"],
            customer_id=item["customer_id"],
            guests=[str(g) for g in item.get("guests", [])],
            from_date=dt.date.fromisoformat(item["from_date"]),
            to_date=dt.date.fromisoformat(item["to_date"]),
            total=float(item.get("total", 0)),
            selected_package=(
                SelectedPackage(
                    package_id=selected["package_id"],
                    custom_name=selected.get("custom_name"),
                    enabled=bool(selected.get("enabled", True)),
                )
                if selected
                else None
            ),
            package_type=item.get("package_type", ""),
            payment_status=PaymentStatus(
                item.get("payment_status", PaymentStatus.UNPAID.value)
            ),
            booking_id=item.get("booking_id"),
            confirmed_at=parse_datetime(item.get("confirmed_at")),
            created_at=created_at,
            updated_at=parse_datetime(item.get("updated_at")) or created_at,
        )
