"""``update-event``: patch only the supplied fields."""

from __future__ import annotations

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.errors import ArgumentValidationError
from gcal_mcp.handlers.base import BaseToolHandler, encode_path_segment
from gcal_mcp.handlers.create_event import build_event_body
from gcal_mcp.schemas import UpdateEventArguments


class UpdateEventHandler(BaseToolHandler):
    arguments_model = UpdateEventArguments

    async def execute(self, args: UpdateEventArguments, client: AuthorizedClient) -> str:
        patch = build_event_body(args)
        if not patch:
            raise ArgumentValidationError("update-event requires at least one field to change")
        event = await client.request_json(
            "PATCH",
            f"/calendars/{encode_path_segment(args.calendar_id)}"
            f"/events/{encode_path_segment(args.event_id)}",
            json_body=patch,
        )
        summary = event.get("summary") or "Untitled"
        return f"Event updated: {summary} ({event.get('id') or args.event_id})"
