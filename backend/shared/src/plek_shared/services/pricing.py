"""Pricing math and package suggestion.

All functions here are pure. Totals are computed in Decimal and rounded to
cents before being handed back as floats.
"""

import datetime as dt
import math
import os
from collections.abc import Sequence
from decimal import Decimal

from plek_shared.models import Package
from plek_shared.services.dynamodb import to_money
from plek_shared.utils.dates import to_calendar_day

DEFAULT_BASE_RATE = 150.0


def get_default_base_rate() -> float:
    """Nightly rate used when a post has none (DEFAULT_BASE_RATE env var)."""
    raw = os.getenv("DEFAULT_BASE_RATE")
    if raw is None:
        return DEFAULT_BASE_RATE
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_BASE_RATE


def coerce_base_rate(value: object, default: float | None = None) -> float:
    """Return ``value`` as a rate, or the default when absent or non-numeric."""
    fallback = get_default_base_rate() if default is None else default
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else fallback
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return fallback
        return parsed if parsed >= 0 and math.isfinite(parsed) else fallback
    return fallback


def compute_duration(from_date: dt.date, to_date: dt.date) -> int:
    """Number of nights between two dates, never less than one.

    Datetimes are accepted; partial days round up.
    """
    if isinstance(from_date, dt.datetime) and isinstance(to_date, dt.datetime):
        days = (to_date - from_date).total_seconds() / 86400
    else:
        days = (to_calendar_day(to_date) - to_calendar_day(from_date)).days
    return max(1, math.ceil(days))


def compute_total(base_rate: float, duration: int, multiplier: float) -> float:
    """base_rate x duration x multiplier, floored at zero and rounded to cents."""
    total = Decimal(str(base_rate)) * duration * Decimal(str(multiplier))
    return float(max(Decimal("0.00"), to_money(total)))


def effective_base_rate(package: Package, post_base_rate: float) -> float:
    """The package's fixed rate when set, otherwise the post's rate."""
    if package.base_rate is not None:
        return package.base_rate
    return post_base_rate


def suggest_package(packages: Sequence[Package], duration: int) -> Package | None:
    """Pick the best-fitting package for a stay of ``duration`` nights.

    The first package whose [min_nights, max_nights] window contains the
    duration wins. Otherwise the closest ``min_nights`` among packages that
    can still hold the stay (or per-night packages with max_nights == 1).
    Ties go to the package listed first.
    """
    enabled = [p for p in packages if p.is_enabled]

    for package in enabled:
        if package.fits(duration):
            return package

    best: Package | None = None
    best_distance = 0
    for package in enabled:
        if not (package.max_nights >= duration or package.max_nights == 1):
            continue
        distance = abs(package.min_nights - duration)
        # strict comparison keeps the earlier package on ties
        if best is None or distance < best_distance:
            best = package
            best_distance = distance
    return best
