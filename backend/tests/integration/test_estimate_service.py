"""Integration tests for estimates and their confirmation (moto DynamoDB)."""

import datetime as dt
from typing import Any

import pytest

from plek_shared.models import (
    ErrorCode,
    EstimateRequest,
    ForbiddenError,
    NotFoundError,
    PackageSetting,
    PaymentStatus,
    ValidationError,
)

OWNER_ID = "user-owner-123"
STRANGER_ID = "user-stranger-789"


def _request(post_id: str, package_type: str, **overrides: Any) -> EstimateRequest:
    data: dict[str, Any] = {
        "post_id": post_id,
        "from_date": "2024-01-01",
        "to_date": "2024-01-04",
        "package_type": package_type,
    }
    data.update(overrides)
    return EstimateRequest.model_validate(data)


class TestUpsertEstimate:
    """Test suite for EstimateService.upsert_estimate()."""

    def test_total_from_base_rate_and_multiplier(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        """150 per night, 3 nights, multiplier 0.9."""
        estimate, created = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )

        assert created is True
        assert estimate.total == 405.0
        assert estimate.package_type == "Weekend Deal"
        assert estimate.selected_package.package_id == weekend_package.package_id
        assert estimate.payment_status == PaymentStatus.UNPAID

    def test_same_range_updates_existing(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        first, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        second, created = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id, total=300)
        )

        assert created is False
        assert second.estimate_id == first.estimate_id
        assert second.total == 300.0
        assert second.created_at == first.created_at

    def test_title_defaults_to_post(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        untitled, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        titled, _ = estimate_service.upsert_estimate(
            OWNER_ID,
            _request(
                sample_post.post_id,
                weekend_package.package_id,
                to_date="2024-01-06",
                title="Family trip",
            ),
        )
        kept, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )

        assert untitled.title == f"Estimate for {sample_post.post_id}"
        assert titled.title == "Family trip"
        assert kept.title == untitled.title

    def test_different_range_creates_new(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        first, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        second, created = estimate_service.upsert_estimate(
            OWNER_ID,
            _request(sample_post.post_id, weekend_package.package_id, to_date="2024-01-05"),
        )

        assert created is True
        assert second.estimate_id != first.estimate_id

    def test_catalog_package_has_no_selected_package(
        self, estimate_service: Any, sample_post: Any
    ) -> None:
        estimate, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, "hosted3nights")
        )

        assert estimate.selected_package is None
        assert estimate.total == pytest.approx(1349.97)

    def test_custom_name_recorded(
        self,
        estimate_service: Any,
        post_service: Any,
        sample_post: Any,
        weekend_package: Any,
    ) -> None:
        post_service.update_package_settings(
            sample_post.post_id,
            [PackageSetting(package_id=weekend_package.package_id, custom_name="Short Break")],
        )

        estimate, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )

        assert estimate.package_type == "Short Break"
        assert estimate.selected_package.custom_name == "Short Break"

    def test_unknown_package(self, estimate_service: Any, sample_post: Any) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            estimate_service.upsert_estimate(OWNER_ID, _request(sample_post.post_id, "nope"))
        assert exc_info.value.code == ErrorCode.PACKAGE_NOT_FOUND

    def test_invalid_range(self, estimate_service: Any, sample_post: Any) -> None:
        with pytest.raises(ValidationError) as exc_info:
            estimate_service.upsert_estimate(
                OWNER_ID,
                _request(sample_post.post_id, "weekly", to_date="2024-01-01"),
            )
        assert exc_info.value.code == ErrorCode.INVALID_DATE_RANGE


class TestReadEstimates:
    """Estimates are private to their customer."""

    def test_owner_reads_estimate(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        estimate, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        assert estimate_service.get_estimate(estimate.estimate_id, OWNER_ID) == estimate

    def test_stranger_forbidden(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        estimate, _ = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        with pytest.raises(ForbiddenError):
            estimate_service.get_estimate(estimate.estimate_id, STRANGER_ID)

    def test_latest_by_slug(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> None:
        estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )
        latest, _ = estimate_service.upsert_estimate(
            OWNER_ID,
            _request(
                sample_post.post_id,
                weekend_package.package_id,
                from_date="2024-02-01",
                to_date="2024-02-03",
            ),
        )

        assert estimate_service.get_latest_estimate(OWNER_ID, "lakeside-cabin") == latest
        assert estimate_service.get_latest_estimate(OWNER_ID) == latest

    def test_latest_without_estimates(self, estimate_service: Any, sample_post: Any) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            estimate_service.get_latest_estimate(OWNER_ID, sample_post.post_id)
        assert exc_info.value.code == ErrorCode.ESTIMATE_NOT_FOUND


class TestConfirmEstimate:
    """Confirmation turns a paid estimate into a booking."""

    @pytest.fixture
    def estimate(
        self, estimate_service: Any, sample_post: Any, weekend_package: Any
    ) -> Any:
        created, _ = estimate_service.upsert_estimate(
            OWNER_ID,
            _request(sample_post.post_id, weekend_package.package_id, guests=["friend"]),
        )
        return created

    def test_payment_must_be_validated(self, estimate_service: Any, estimate: Any) -> None:
        with pytest.raises(ValidationError) as exc_info:
            estimate_service.confirm_estimate(estimate.estimate_id, OWNER_ID, False)
        assert exc_info.value.code == ErrorCode.PAYMENT_NOT_VALIDATED

    def test_creates_paid_booking(
        self, estimate_service: Any, booking_service: Any, estimate: Any
    ) -> None:
        confirmed, booking = estimate_service.confirm_estimate(
            estimate.estimate_id, OWNER_ID, True
        )

        assert confirmed.payment_status == PaymentStatus.PAID
        assert confirmed.booking_id == booking.booking_id
        assert confirmed.confirmed_at is not None
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.guests == ["friend"]
        assert (booking.from_date, booking.to_date) == (
            dt.date(2024, 1, 1),
            dt.date(2024, 1, 4),
        )
        assert booking_service.get_booking(booking.booking_id) == booking

    def test_confirm_twice_returns_same_booking(
        self, estimate_service: Any, estimate: Any
    ) -> None:
        _, first = estimate_service.confirm_estimate(estimate.estimate_id, OWNER_ID, True)
        _, second = estimate_service.confirm_estimate(estimate.estimate_id, OWNER_ID, True)
        assert first.booking_id == second.booking_id

    def test_paid_estimate_not_reused(
        self,
        estimate_service: Any,
        sample_post: Any,
        weekend_package: Any,
        estimate: Any,
    ) -> None:
        estimate_service.confirm_estimate(estimate.estimate_id, OWNER_ID, True)

        fresh, created = estimate_service.upsert_estimate(
            OWNER_ID, _request(sample_post.post_id, weekend_package.package_id)
        )

        assert created is True
        assert fresh.estimate_id != estimate.estimate_id

    def test_stranger_cannot_confirm(self, estimate_service: Any, estimate: Any) -> None:
        with pytest.raises(ForbiddenError):
            estimate_service.confirm_estimate(estimate.estimate_id, STRANGER_ID, True)
