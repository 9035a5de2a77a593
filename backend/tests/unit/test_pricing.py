"""Unit tests for pricing math and package suggestion."""

import datetime as dt

import pytest

from plek_shared.models import Package
from plek_shared.services.pricing import (
    DEFAULT_BASE_RATE,
    coerce_base_rate,
    compute_duration,
    compute_total,
    effective_base_rate,
    get_default_base_rate,
    suggest_package,
)


def _package(package_id: str, min_nights: int, max_nights: int, **kwargs) -> Package:
    return Package(
        package_id=package_id,
        name=package_id.title(),
        min_nights=min_nights,
        max_nights=max_nights,
        **kwargs,
    )


class TestComputeDuration:
    """Test suite for compute_duration()."""

    def test_three_nights(self) -> None:
        assert compute_duration(dt.date(2024, 1, 1), dt.date(2024, 1, 4)) == 3

    def test_same_day_counts_as_one_night(self) -> None:
        assert compute_duration(dt.date(2024, 1, 1), dt.date(2024, 1, 1)) == 1

    def test_reversed_range_floors_at_one(self) -> None:
        assert compute_duration(dt.date(2024, 1, 5), dt.date(2024, 1, 1)) == 1

    def test_partial_day_rounds_up(self) -> None:
        """Datetimes 1.5 days apart count as two nights."""
        start = dt.datetime(2024, 1, 1, 12, 0)
        end = dt.datetime(2024, 1, 3, 0, 0)
        assert compute_duration(start, end) == 2

    def test_month_boundary(self) -> None:
        assert compute_duration(dt.date(2024, 2, 27), dt.date(2024, 3, 2)) == 4


class TestComputeTotal:
    """Test suite for compute_total()."""

    def test_base_rate_times_nights_times_multiplier(self) -> None:
        assert compute_total(150, 3, 0.9) == 405.0

    def test_rounds_to_cents(self) -> None:
        assert compute_total(99.99, 3, 1.1) == 329.97

    def test_never_negative(self) -> None:
        assert compute_total(-10, 2, 1.0) == 0.0

    def test_returns_float(self) -> None:
        assert isinstance(compute_total(150, 1, 1.0), float)


class TestBaseRate:
    """Test suite for base rate helpers."""

    def test_default_base_rate_is_150(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DEFAULT_BASE_RATE", raising=False)
        assert get_default_base_rate() == DEFAULT_BASE_RATE == 150.0

    def test_default_base_rate_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_BASE_RATE", "200")
        assert get_default_base_rate() == 200.0

    def test_invalid_env_value_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_BASE_RATE", "cheap")
        assert get_default_base_rate() == 150.0

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, 150.0),
            (120, 120.0),
            ("99.5", 99.5),
            ("abc", 150.0),
            (-5, 150.0),
            (True, 150.0),
        ],
    )
    def test_coerce_base_rate(self, raw: object, expected: float) -> None:
        assert coerce_base_rate(raw, default=150.0) == expected

    def test_package_rate_wins_over_post_rate(self) -> None:
        package = _package("fixed", 1, 1, base_rate=80.0)
        assert effective_base_rate(package, 150.0) == 80.0

    def test_post_rate_used_without_package_rate(self) -> None:
        package = _package("plain", 1, 7)
        assert effective_base_rate(package, 175.0) == 175.0


class TestSuggestPackage:
    """Test suite for suggest_package()."""

    def test_first_package_containing_duration_wins(self) -> None:
        short = _package("short", 1, 3)
        weekly = _package("weekly", 2, 7)
        assert suggest_package([short, weekly], 3) is short

    def test_falls_back_to_closest_min_nights(self) -> None:
        """No window contains 10 nights; the longer package is closer."""
        week = _package("week", 7, 7)
        month = _package("month", 14, 30)
        assert suggest_package([week, month], 10) is month

    def test_per_night_package_is_a_fallback(self) -> None:
        per_night = _package("per-night", 1, 1)
        assert suggest_package([per_night], 4) is per_night

    def test_packages_too_short_are_skipped(self) -> None:
        short = _package("short", 2, 3)
        assert suggest_package([short], 5) is None

    def test_tie_keeps_declaration_order(self) -> None:
        """Both packages are one night away from a 2-night stay."""
        per_night = _package("per-night", 1, 1)
        three = _package("three", 3, 5)

        assert suggest_package([per_night, three], 2) is per_night
        assert suggest_package([three, per_night], 2) is three

    def test_disabled_packages_ignored(self) -> None:
        disabled = _package("off", 1, 7, is_enabled=False)
        enabled = _package("on", 3, 7)
        assert suggest_package([disabled, enabled], 2) is enabled

    def test_empty_list(self) -> None:
        assert suggest_package([], 3) is None
