"""Tests for logging configuration."""

from __future__ import annotations

import logging

from asgi_correlation_id.context import correlation_id
from pythonjsonlogger import jsonlogger

from digiblog.observability import CorrelationIdFilter, configure_logging


def _record() -> logging.LogRecord:
    return logging.LogRecord("digiblog.test", logging.INFO, __file__, 1, "hi", None, None)


def test_filter_defaults_without_request():
    record = _record()
    assert CorrelationIdFilter().filter(record) is True
    assert record.correlation_id == "-"


def test_filter_uses_current_request_id():
    token = correlation_id.set("req-123")
    try:
        record = _record()
        CorrelationIdFilter().filter(record)
    finally:
        correlation_id.reset(token)
    assert record.correlation_id == "req-123"


def test_json_and_text_formats():
    configure_logging("DEBUG")
    handler = logging.getLogger().handlers[0]
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)

    configure_logging("INFO", fmt="text", sql_echo=True)
    handler = logging.getLogger().handlers[0]
    assert not isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    configure_logging("INFO")
