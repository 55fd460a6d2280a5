"""``list-events``: one calendar via a direct call, several via the batch endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.batch.builder import BatchRequestBuilder, EventFilters
from gcal_mcp.batch.executor import BatchRequestExecutor
from gcal_mcp.batch.merger import BatchOutcome, EventMerger, correlate
from gcal_mcp.batch.parser import BatchResponseParser, boundary_from_content_type
from gcal_mcp.handlers.base import BaseToolHandler, encode_path_segment
from gcal_mcp.handlers.formatting import ResultFormatter, format_event_list
from gcal_mcp.schemas import ListEventsArguments, SingleCalendar

logger = logging.getLogger(__name__)


def events_query_params(filters: EventFilters, **extra: str) -> dict[str, str]:
    params = {"singleEvents": "true", "orderBy": "startTime", **extra}
    if filters.time_min:
        params["timeMin"] = filters.time_min
    if filters.time_max:
        params["timeMax"] = filters.time_max
    return params


async def list_calendar_events(
    client: AuthorizedClient,
    calendar_id: str,
    filters: EventFilters,
    **extra: str,
) -> list[Mapping[str, Any]]:
    """List one calendar's events with a single direct API call."""
    payload = await client.request_json(
        "GET",
        f"/calendars/{encode_path_segment(calendar_id)}/events",
        params=events_query_params(filters, **extra),
    )
    items = payload.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


class ListEventsHandler(BaseToolHandler):
    """List events from one calendar, or from 2–50 calendars in one batch call."""

    arguments_model = ListEventsArguments

    def __init__(
        self,
        *,
        builder: BatchRequestBuilder | None = None,
        executor: BatchRequestExecutor | None = None,
        parser: BatchResponseParser | None = None,
        merger: EventMerger | None = None,
        formatter: ResultFormatter | None = None,
    ) -> None:
        self._builder = builder or BatchRequestBuilder()
        self._executor = executor or BatchRequestExecutor()
        self._parser = parser or BatchResponseParser()
        self._merger = merger or EventMerger()
        self._formatter = formatter or ResultFormatter()

    async def execute(self, args: ListEventsArguments, client: AuthorizedClient) -> str:
        filters = EventFilters(time_min=args.time_min, time_max=args.time_max)
        selection = args.selection

        if isinstance(selection, SingleCalendar):
            events = await list_calendar_events(client, selection.calendar_id, filters)
            return format_event_list(events)

        outcome = await self.list_batch(client, selection.calendar_ids, filters)
        return self._formatter.format(outcome, selection.calendar_ids)

    async def list_batch(
        self,
        client: AuthorizedClient,
        calendar_ids: Sequence[str],
        filters: EventFilters,
    ) -> BatchOutcome:
        """Fetch and merge events for *calendar_ids* with one batch round trip."""
        envelope = self._builder.build(calendar_ids, filters)
        response = await self._executor.execute(envelope, client)
        sub_responses = self._parser.parse(
            response.text,
            boundary_from_content_type(response.content_type),
        )
        slots = correlate(calendar_ids, sub_responses, envelope.sub_requests)
        outcome = self._merger.merge_slots(slots)
        logger.info(
            "Listed events across %d calendars (events=%d, failed_calendars=%d)",
            len(calendar_ids),
            len(outcome.events),
            len(outcome.errors),
        )
        return outcome
