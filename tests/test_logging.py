"""Tests for structured logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from nanjil.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
    setup_logging,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_json_format_with_context(self):
        record = _record("Rate limit exceeded")
        record.request_id = "req-1"
        record.client_id = "10.0.0.1"
        record.booking_id = "bk-9"

        data = json.loads(JSONFormatter().format(record))

        assert data["request_id"] == "req-1"
        assert data["client_id"] == "10.0.0.1"
        assert data["booking_id"] == "bk-9"
        assert "extra" not in data

    def test_placeholder_context_is_omitted(self):
        record = _record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "request_id" not in data
        assert "client_id" not in data

    def test_json_format_with_extra_fields(self):
        record = _record("Photo stored")
        record.photo_file = "bk-1-1.jpg"
        record.size = 42

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["photo_file"] == "bk-1-1.jpg"
        assert data["extra"]["size"] == 42

    def test_json_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        exception_text = "".join(data["exception"])
        assert "ValueError" in exception_text
        assert "Test error" in exception_text

    def test_json_format_unicode(self):
        data = json.loads(JSONFormatter().format(_record("நாகர்கோவில் booking")))
        assert data["message"] == "நாகர்கோவில் booking"


class TestContextFilter:
    def test_adds_default_fields(self):
        record = _record()
        assert ContextFilter().filter(record) is True
        assert record.request_id == "-"
        assert record.client_id == "-"

    def test_preserves_existing_values(self):
        record = _record()
        record.request_id = "existing"

        ContextFilter().filter(record)

        assert record.request_id == "existing"


class TestGetLoggingConfig:
    def test_default_text_format(self):
        with patch("nanjil.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "text"
            mock_settings.log_level = "INFO"

            config = get_logging_config()

        assert "json" not in config["formatters"]
        assert config["handlers"]["console"]["formatter"] == "standard"

    def test_structured_format(self):
        with patch("nanjil.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "structured"
            mock_settings.log_level = "DEBUG"

            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "structured"
        assert config["handlers"]["console"]["level"] == "DEBUG"

    def test_json_format(self):
        with patch("nanjil.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "json"
            mock_settings.log_level = "WARNING"

            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["handlers"]["console"]["level"] == "WARNING"

    def test_context_filter_added(self):
        config = get_logging_config()
        assert "context" in config["handlers"]["console"]["filters"]
        assert "nanjil" in config["loggers"]


class TestGetLogContext:
    def test_filters_none(self):
        context = get_log_context(request_id="req-1", client_id=None, booking_id="bk-1")
        assert context == {"request_id": "req-1", "booking_id": "bk-1"}

    def test_extra_fields(self):
        context = get_log_context(user_id="u1", path="/api/x")
        assert context == {"user_id": "u1", "path": "/api/x"}


def test_get_logger_default_name():
    assert get_logger().name == "nanjil"


def test_json_logging_output(capsys):
    with patch("nanjil.app.core.logging.settings") as mock_settings:
        mock_settings.log_format = "json"
        mock_settings.log_level = "INFO"

        setup_logging()
        logger = get_logger("nanjil.test")
        logger.info("Integration test", extra=get_log_context(request_id="abc123", client_id="1.2.3.4"))

    data = json.loads(capsys.readouterr().out.strip())

    assert data["logger"] == "nanjil.test"
    assert data["message"] == "Integration test"
    assert data["request_id"] == "abc123"
    assert data["client_id"] == "1.2.3.4"
