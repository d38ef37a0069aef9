"""Logging for SQLSampler.

Loggers live under the ``sqlsampler`` namespace. Many load threads sample at
once, so every request runs inside a correlation scope and its records carry
the request's correlation ID next to the thread name. The structured
formatter renders records as one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlsampler.utils.serializers import to_json

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from logging import LogRecord

__all__ = (
    "ROOT_LOGGER_NAME",
    "CorrelationFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
)

ROOT_LOGGER_NAME = "sqlsampler"

_correlation_id: ContextVar[str | None] = ContextVar("sqlsampler_correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the request being executed in this context, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Run a block under a correlation ID.

    An enclosing scope's ID is kept unless ``correlation_id`` is given, so a
    host that tags its samples itself sees its own ID in sampler records.

    Args:
        correlation_id: ID to use; a new random one when neither this nor an
            enclosing scope provides one.

    Yields:
        The active correlation ID.
    """
    active = correlation_id or _correlation_id.get() or uuid.uuid4().hex[:16]
    token = _correlation_id.set(active)
    try:
        yield active
    finally:
        _correlation_id.reset(token)


class CorrelationFilter(logging.Filter):
    """Stamps records with the active correlation ID."""

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = _correlation_id.get()  # type: ignore[attr-defined]
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return to_json(entry)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger in the ``sqlsampler`` namespace.

    Args:
        name: Dotted name, with or without the ``sqlsampler.`` prefix. The
            namespace root when omitted.

    Returns:
        The logger, carrying a ``CorrelationFilter``.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())
    return logger


def configure_logging(
    level: str = "WARNING", structured: bool = True, handlers: Sequence[logging.Handler] | None = None
) -> None:
    """Send ``sqlsampler`` records to stderr, replacing earlier configuration.

    Records stop propagating to the root logger so a host's own logging
    setup does not print them twice.

    Args:
        level: Level name, case-insensitive.
        structured: JSON lines when True, plain text otherwise.
        handlers: Extra handlers attached next to the stderr one.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())
    root.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(
        StructuredFormatter()
        if structured
        else logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s")
    )
    root.addHandler(stderr_handler)
    for handler in handlers or ():
        root.addHandler(handler)
    root.propagate = False


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with fields the structured formatter merges into the entry."""
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)
