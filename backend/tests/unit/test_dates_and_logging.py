"""Unit tests for date helpers and structured logging."""

import datetime as dt
import logging

import pytest

from plek_shared.utils.dates import iter_days, parse_datetime, to_calendar_day
from plek_shared.utils.logging import (
    CorrelationIdFilter,
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_booking_operation,
    set_correlation_id,
)


class TestDates:
    """Test suite for date helpers."""

    def test_parse_datetime_with_z(self) -> None:
        parsed = parse_datetime("2024-03-01T10:00:00Z")
        assert parsed == dt.datetime(2024, 3, 1, 10, 0, tzinfo=dt.UTC)

    def test_parse_datetime_empty(self) -> None:
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    @pytest.mark.parametrize(
        "value",
        ["2024-03-01", "2024-03-01T23:59:00Z", dt.datetime(2024, 3, 1, 18, 30)],
    )
    def test_to_calendar_day_drops_time(self, value: object) -> None:
        assert to_calendar_day(value) == dt.date(2024, 3, 1)

    @pytest.mark.parametrize(
        "value",
        [
            dt.datetime(2024, 3, 5, 1, 0, tzinfo=dt.timezone(dt.timedelta(hours=2))),
            "2024-03-05T01:00:00+02:00",
            "2024-03-05T00:30:00+01:00",
        ],
    )
    def test_to_calendar_day_uses_utc_for_aware_values(self, value: object) -> None:
        assert to_calendar_day(value) == dt.date(2024, 3, 4)

    def test_to_calendar_day_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            to_calendar_day("next tuesday")

    def test_iter_days_excludes_end(self) -> None:
        days = iter_days(dt.date(2024, 2, 28), dt.date(2024, 3, 2))
        assert days == [dt.date(2024, 2, 28), dt.date(2024, 2, 29), dt.date(2024, 3, 1)]


class TestCorrelationId:
    """Correlation ID context handling."""

    def test_set_and_clear(self) -> None:
        set_correlation_id("req-123")
        assert get_correlation_id() == "req-123"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_generates_when_missing(self) -> None:
        cid = set_correlation_id()
        assert cid and get_correlation_id() == cid
        clear_correlation_id()

    def test_formatter_prefixes_correlation_id(self) -> None:
        set_correlation_id("req-456")
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "hello", None, None)
        CorrelationIdFilter().filter(record)
        line = StructuredFormatter("%(message)s").format(record)
        clear_correlation_id()
        assert line == "[req-456] hello"

    def test_get_logger_adds_filter_once(self) -> None:
        logger = get_logger("plek.tests.filter")
        get_logger("plek.tests.filter")
        assert sum(isinstance(f, CorrelationIdFilter) for f in logger.filters) == 1


class TestLogBookingOperation:
    """log_booking_operation picks the level from the outcome."""

    def test_info_on_success(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("plek.tests.ops")
        with caplog.at_level(logging.INFO, logger="plek.tests.ops"):
            log_booking_operation(logger, "create_booking", booking_id="b-1", status="created")
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert "booking_id=b-1" in record.getMessage()
        assert record.operation == "create_booking"

    def test_warning_on_conflict(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("plek.tests.ops")
        with caplog.at_level(logging.INFO, logger="plek.tests.ops"):
            log_booking_operation(logger, "create_booking", status="conflict")
        assert caplog.records[-1].levelno == logging.WARNING

    def test_error_when_error_given(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("plek.tests.ops")
        with caplog.at_level(logging.INFO, logger="plek.tests.ops"):
            log_booking_operation(logger, "delete_booking", error="boom")
        assert caplog.records[-1].levelno == logging.ERROR
