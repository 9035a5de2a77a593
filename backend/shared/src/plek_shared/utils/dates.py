"""Date parsing helpers for values stored as ISO strings."""

import datetime as dt
from typing import Any


def parse_datetime(value: Any) -> dt.datetime | None:
    """Parse an ISO timestamp, accepting a trailing ``Z``."""
    if isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return dt.datetime.fromisoformat(value)


def to_calendar_day(value: dt.date | str) -> dt.date:
    """Drop any time-of-day component.

    Accepts ``date``, ``datetime`` or an ISO string with or without time.
    Timezone-aware values are converted to UTC first; naive ones are taken
    as they are.

    Raises:
        ValueError: If a string cannot be parsed
    """
    if isinstance(value, dt.datetime):
        return _utc_day(value)
    if isinstance(value, dt.date):
        return value
    text = value.strip()
    if len(text) > 10:
        parsed = parse_datetime(text)
        if parsed is None:
            raise ValueError(f"Invalid date: {value!r}")
        return _utc_day(parsed)
    return dt.date.fromisoformat(text)


def _utc_day(value: dt.datetime) -> dt.date:
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(dt.UTC)
    return value.date()


def iter_days(start: dt.date, end: dt.date) -> list[dt.date]:
    """Every calendar day in ``[start, end)``."""
    return [start + dt.timedelta(days=i) for i in range((end - start).days)]
