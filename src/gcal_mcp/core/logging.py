"""structlog rendering for the stdlib loggers used across gcal-mcp.

Call sites keep ``logging.getLogger(__name__)``; :func:`configure_logging`
routes them through a structlog ``ProcessorFormatter`` on stderr (stdout is
the MCP stdio stream), optionally mirrored to a JSON file. Each record is
tagged with the running tool and, inside a span, its trace and span ids.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path

import structlog
from opentelemetry import trace

LOG_FILENAME = "gcal-mcp.log"

# Chatty per-request loggers from the HTTP stack and the MCP transport.
QUIET_LOGGERS = ("httpx", "httpcore", "mcp.server.lowlevel.server", "uvicorn.access")

_current_tool: ContextVar[str | None] = ContextVar("gcal_current_tool", default=None)


def set_tool_context(name: str | None) -> None:
    _current_tool.set(name)


def get_tool_context() -> str | None:
    return _current_tool.get()


def add_call_context(_logger, _method_name: str, event_dict: dict) -> dict:
    """Tag the record with the active tool and the ids of the current span."""
    tool = _current_tool.get()
    if tool is not None:
        event_dict.setdefault("tool", tool)
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def _pre_chain(timestamp_fmt: str) -> list:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=timestamp_fmt),
        add_call_context,
    ]


def _handler(handler: logging.Handler, renderer, timestamp_fmt: str) -> logging.Handler:
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_pre_chain(timestamp_fmt),
        )
    )
    return handler


def configure_logging(
    level: str = "INFO", fmt: str = "text", log_root: Path | None = None
) -> None:
    """Install the stderr handler (and the JSON file handler when *log_root* is set).

    ``fmt`` is ``"text"`` for the colored console renderer or ``"json"`` for
    JSON lines. Calling it again replaces the previous handlers.
    """
    if fmt == "json":
        console = _handler(
            logging.StreamHandler(sys.stderr), structlog.processors.JSONRenderer(), "iso"
        )
    else:
        console = _handler(
            logging.StreamHandler(sys.stderr), structlog.dev.ConsoleRenderer(), "%H:%M:%S"
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))

    if log_root is not None:
        log_dir = Path(log_root)
        log_dir.mkdir(parents=True, exist_ok=True)
        root.addHandler(
            _handler(
                logging.FileHandler(log_dir / LOG_FILENAME),
                structlog.processors.JSONRenderer(),
                "iso",
            )
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *_pre_chain("iso" if fmt == "json" else "%H:%M:%S"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
