"""``list-calendars``: the caller's calendar list."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.handlers.base import BaseToolHandler
from gcal_mcp.schemas import ListCalendarsArguments


def format_calendar_list(calendars: Sequence[Mapping[str, Any]]) -> str:
    """Render calendars as ``summary (id)`` lines."""
    return "\n".join(
        f"{calendar.get('summary') or 'Untitled'} ({calendar.get('id') or 'no-id'})"
        for calendar in calendars
    )


class ListCalendarsHandler(BaseToolHandler):
    arguments_model = ListCalendarsArguments

    async def execute(self, args: ListCalendarsArguments, client: AuthorizedClient) -> str:
        payload = await client.request_json("GET", "/users/me/calendarList")
        items = payload.get("items")
        if not isinstance(items, list):
            return format_calendar_list([])
        return format_calendar_list([item for item in items if isinstance(item, Mapping)])
