"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest
from opentelemetry.sdk.trace import TracerProvider

from gcal_mcp.core.logging import (
    LOG_FILENAME,
    QUIET_LOGGERS,
    add_call_context,
    configure_logging,
    get_tool_context,
    set_tool_context,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _reset_logging():
    set_tool_context(None)
    yield
    set_tool_context(None)
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


class TestCallContext:
    def test_tool_name_round_trips(self):
        set_tool_context("list-events")
        assert get_tool_context() == "list-events"

    def test_record_tagged_with_tool(self):
        set_tool_context("get-freebusy")
        assert add_call_context(None, "info", {"event": "x"})["tool"] == "get-freebusy"

    def test_nothing_added_outside_tool_and_span(self):
        assert add_call_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_trace_ids_from_active_span(self):
        tracer = TracerProvider().get_tracer("test")
        with tracer.start_as_current_span("gcal.tool.list-events") as span:
            event_dict = add_call_context(None, "info", {"event": "x"})
        context = span.get_span_context()
        assert event_dict["trace_id"] == format(context.trace_id, "032x")
        assert event_dict["span_id"] == format(context.span_id, "016x")


class TestConfigureLogging:
    def test_console_handler_on_stderr(self):
        configure_logging(level="debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_quiet_loggers_raised_to_warning(self):
        configure_logging(level="DEBUG")
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_reconfiguration_replaces_handlers(self):
        configure_logging()
        configure_logging(fmt="json")
        assert len(logging.getLogger().handlers) == 1

    def test_file_handler_writes_json(self, tmp_path: Path):
        log_root = tmp_path / "logs"
        configure_logging(level="INFO", fmt="json", log_root=log_root)

        set_tool_context("list-calendars")
        logging.getLogger("gcal_mcp.test").info("hello %s", "world")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (log_root / LOG_FILENAME).read_text().strip().splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "hello world"
        assert record["tool"] == "list-calendars"
        assert record["level"] == "info"
        assert record["logger"] == "gcal_mcp.test"
        assert "trace_id" not in record
