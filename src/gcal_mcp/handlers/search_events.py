"""``search-events``: free-text search within one calendar."""

from __future__ import annotations

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.batch.builder import EventFilters
from gcal_mcp.handlers.base import BaseToolHandler
from gcal_mcp.handlers.formatting import format_event_list
from gcal_mcp.handlers.list_events import list_calendar_events
from gcal_mcp.schemas import SearchEventsArguments


class SearchEventsHandler(BaseToolHandler):
    arguments_model = SearchEventsArguments

    async def execute(self, args: SearchEventsArguments, client: AuthorizedClient) -> str:
        events = await list_calendar_events(
            client,
            args.calendar_id,
            EventFilters(time_min=args.time_min, time_max=args.time_max),
            q=args.query,
        )
        return format_event_list(events)
