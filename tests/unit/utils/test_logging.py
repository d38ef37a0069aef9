"""Unit tests for structured logging."""

import logging
from collections.abc import Generator

import pytest

from sqlsampler.utils.logging import (
    CorrelationFilter,
    StructuredFormatter,
    configure_logging,
    correlation_scope,
    get_correlation_id,
    get_logger,
    log_with_context,
)
from sqlsampler.utils.serializers import from_json, to_json


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def restore_sampler_logger() -> "Generator[logging.Logger, None, None]":
    root = logging.getLogger("sqlsampler")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


def test_get_logger_namespace() -> None:
    assert get_logger().name == "sqlsampler"
    assert get_logger("core.cache").name == "sqlsampler.core.cache"
    assert get_logger("sqlsampler.driver").name == "sqlsampler.driver"

    logger = get_logger("core.cache")
    get_logger("core.cache")
    assert sum(isinstance(f, CorrelationFilter) for f in logger.filters) == 1


def test_structured_formatter() -> None:
    record = logging.LogRecord("sqlsampler.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
    record.extra_fields = {"query_type": "Commit"}
    with correlation_scope("sample-42"):
        CorrelationFilter().filter(record)

    entry = from_json(StructuredFormatter().format(record))

    assert entry["message"] == "hello world"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "sqlsampler.test"
    assert entry["thread"] == record.threadName
    assert entry["correlation_id"] == "sample-42"
    assert entry["query_type"] == "Commit"


def test_structured_formatter_without_correlation_id() -> None:
    record = logging.LogRecord("sqlsampler.test", logging.INFO, __file__, 10, "idle", (), None)
    CorrelationFilter().filter(record)

    assert "correlation_id" not in from_json(StructuredFormatter().format(record))


def test_correlation_scope_nesting() -> None:
    assert get_correlation_id() is None

    with correlation_scope() as generated:
        assert generated
        assert get_correlation_id() == generated
        with correlation_scope() as inner:
            assert inner == generated
        with correlation_scope("explicit") as explicit:
            assert explicit == "explicit"
            assert get_correlation_id() == "explicit"
        assert get_correlation_id() == generated

    assert get_correlation_id() is None


def test_correlation_scope_resets_on_error() -> None:
    with pytest.raises(RuntimeError), correlation_scope("failing"):
        raise RuntimeError

    assert get_correlation_id() is None


def test_configure_logging_and_log_with_context(restore_sampler_logger: logging.Logger) -> None:
    handler = ListHandler()

    configure_logging(level="debug", structured=False, handlers=[handler])
    log_with_context(get_logger("driver.dispatch"), logging.DEBUG, "executing query", query_type="Select Statement")

    assert restore_sampler_logger.propagate is False
    assert restore_sampler_logger.level == logging.DEBUG
    assert len(restore_sampler_logger.handlers) == 2
    record = next(record for record in handler.records if record.getMessage() == "executing query")
    assert record.extra_fields == {"query_type": "Select Statement"}
    assert record.funcName == "test_configure_logging_and_log_with_context"


def test_log_with_context_respects_level(restore_sampler_logger: logging.Logger) -> None:
    handler = ListHandler()
    configure_logging(level="WARNING", handlers=[handler])

    log_with_context(get_logger("driver.dispatch"), logging.DEBUG, "hidden")

    assert handler.records == []


def test_to_json_falls_back_to_str() -> None:
    from decimal import Decimal

    class Custom:
        def __str__(self) -> str:
            return "custom"

    assert from_json(to_json({"value": Custom()})) == {"value": "custom"}
    assert to_json({"a": 1}, as_bytes=True) == b'{"a":1}'
    assert from_json(to_json({"amount": Decimal("1.5")})) == {"amount": "1.5"}
