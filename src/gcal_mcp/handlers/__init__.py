"""Tool handlers, keyed by MCP tool name."""

from __future__ import annotations

from gcal_mcp.handlers.base import BaseToolHandler, ToolResult, text_result
from gcal_mcp.handlers.create_event import CreateEventHandler
from gcal_mcp.handlers.delete_event import DeleteEventHandler
from gcal_mcp.handlers.free_busy import FreeBusyHandler
from gcal_mcp.handlers.list_calendars import ListCalendarsHandler
from gcal_mcp.handlers.list_colors import ListColorsHandler
from gcal_mcp.handlers.list_events import ListEventsHandler
from gcal_mcp.handlers.search_events import SearchEventsHandler
from gcal_mcp.handlers.update_event import UpdateEventHandler


def default_handlers() -> dict[str, BaseToolHandler]:
    """Return a fresh tool-name → handler mapping."""
    return {
        "list-calendars": ListCalendarsHandler(),
        "list-events": ListEventsHandler(),
        "search-events": SearchEventsHandler(),
        "list-colors": ListColorsHandler(),
        "create-event": CreateEventHandler(),
        "update-event": UpdateEventHandler(),
        "delete-event": DeleteEventHandler(),
        "get-freebusy": FreeBusyHandler(),
    }


__all__ = [
    "BaseToolHandler",
    "CreateEventHandler",
    "DeleteEventHandler",
    "FreeBusyHandler",
    "ListCalendarsHandler",
    "ListColorsHandler",
    "ListEventsHandler",
    "SearchEventsHandler",
    "ToolResult",
    "UpdateEventHandler",
    "default_handlers",
    "text_result",
]
