"""``delete-event``."""

from __future__ import annotations

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.handlers.base import BaseToolHandler, encode_path_segment
from gcal_mcp.schemas import DeleteEventArguments


class DeleteEventHandler(BaseToolHandler):
    arguments_model = DeleteEventArguments

    async def execute(self, args: DeleteEventArguments, client: AuthorizedClient) -> str:
        await client.request_json(
            "DELETE",
            f"/calendars/{encode_path_segment(args.calendar_id)}"
            f"/events/{encode_path_segment(args.event_id)}",
        )
        return "Event deleted successfully"
