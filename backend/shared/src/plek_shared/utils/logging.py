"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- A formatter that prefixes every line with the correlation ID
- ``log_booking_operation`` for consistent booking/estimate audit lines

Usage:
    from plek_shared.utils.logging import get_logger, set_correlation_id

    # In middleware:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Estimate created", extra={"estimate_id": "..."})
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

NO_CORRELATION_ID = "no-correlation-id"


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Existing correlation ID. A new one is generated if None.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter that prefixes messages with the correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        base = super().format(record)
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: int = logging.INFO) -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; existing handlers are reused.
    """
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for handler in root.handlers:
        handler.setFormatter(
            StructuredFormatter("%(levelname)s %(name)s: %(message)s")
        )
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def log_booking_operation(
    logger: logging.Logger,
    operation: str,
    *,
    post_id: str | None = None,
    booking_id: str | None = None,
    estimate_id: str | None = None,
    user_id: str | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a booking or estimate operation with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g. "create_booking", "upsert_estimate")
        post_id: Post the operation concerns
        booking_id: Booking ID if available
        estimate_id: Estimate ID if available
        user_id: Acting user
        status: Outcome label (created, updated, conflict, ...)
        error: Error message if the operation failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"operation": operation}

    if post_id:
        context["post_id"] = post_id
    if booking_id:
        context["booking_id"] = booking_id
    if estimate_id:
        context["estimate_id"] = estimate_id
    if user_id:
        context["user_id"] = user_id
    if status:
        context["status"] = status
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Booking operation: {operation}"]
    for key, value in context.items():
        if key != "operation":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    elif status == "conflict":
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)
