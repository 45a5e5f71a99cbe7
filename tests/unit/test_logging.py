"""Unit tests for logging setup and the structlog formatters."""

import json
import logging
import sys

import pytest
import structlog

from app.core.config import LogFormatEnum, Settings
from app.core.logging import build_formatter, setup_logging


def make_record(**extra):
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Test cases for the JSON renderer."""

    def test_renders_message_level_logger_and_extras(self):
        output = build_formatter(LogFormatEnum.json).format(
            make_record(request_id="req-1", status_code=404)
        )

        payload = json.loads(output)
        assert payload["event"] == "hello world"
        assert payload["level"] == "warning"
        assert payload["logger"] == "app.test"
        assert payload["request_id"] == "req-1"
        assert payload["status_code"] == 404
        assert "timestamp" in payload

    def test_renders_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "app.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        payload = json.loads(build_formatter(LogFormatEnum.json).format(record))
        assert payload["event"] == "failed"
        assert "RuntimeError: boom" in payload["exception"]

    def test_includes_bound_context(self):
        """Test that values bound to the context show up on every record."""
        structlog.contextvars.bind_contextvars(request_id="ctx-1")
        try:
            payload = json.loads(build_formatter(LogFormatEnum.json).format(make_record()))
        finally:
            structlog.contextvars.clear_contextvars()

        assert payload["request_id"] == "ctx-1"

    def test_explicit_extra_wins_over_context(self):
        structlog.contextvars.bind_contextvars(request_id="ctx-1")
        try:
            output = build_formatter(LogFormatEnum.json).format(make_record(request_id="req-2"))
        finally:
            structlog.contextvars.clear_contextvars()

        assert json.loads(output)["request_id"] == "req-2"


class TestConsoleFormatter:
    """Test cases for the console renderer."""

    def test_appends_extras(self):
        output = build_formatter(LogFormatEnum.simple).format(make_record(duration_ms=1.5))

        assert "hello world" in output
        assert "warning" in output
        assert "app.test" in output
        assert "duration_ms=1.5" in output

    def test_without_extras(self):
        output = build_formatter(LogFormatEnum.simple).format(make_record())

        assert "hello world" in output
        assert "duration_ms" not in output


class TestSetupLogging:
    """Test cases for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    @staticmethod
    def installed_renderer():
        formatter = logging.getLogger().handlers[-1].formatter
        assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
        return formatter.processors[-1]

    def test_installs_single_handler(self):
        """Test that repeated setup replaces instead of stacking handlers."""
        root = logging.getLogger()
        before = len(root.handlers)

        setup_logging(Settings(log_format="json", log_level="DEBUG"))
        setup_logging(Settings(log_format="simple", log_level="WARNING"))

        assert len(root.handlers) <= before + 1
        assert isinstance(self.installed_renderer(), structlog.dev.ConsoleRenderer)
        assert root.level == logging.WARNING

    def test_json_format_selected(self):
        setup_logging(Settings(log_format="json"))

        assert isinstance(self.installed_renderer(), structlog.processors.JSONRenderer)

    def test_structlog_loggers_share_the_handler(self, capsys):
        """Test that structlog-native loggers render through the root handler."""
        setup_logging(Settings(log_format="json", log_level="INFO"))

        structlog.get_logger("app.native").info("native event", user="u1")

        lines = [line for line in capsys.readouterr().out.splitlines() if "native event" in line]
        payload = json.loads(lines[-1])
        assert payload["event"] == "native event"
        assert payload["user"] == "u1"
        assert payload["logger"] == "app.native"
        assert payload["level"] == "info"
