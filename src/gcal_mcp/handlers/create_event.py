"""``create-event``."""

from __future__ import annotations

from typing import Any

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.handlers.base import BaseToolHandler, encode_path_segment
from gcal_mcp.schemas import CreateEventArguments, UpdateEventArguments


def event_time(value: str, time_zone: str | None) -> dict[str, str]:
    """Build a Google event boundary: ``date`` for all-day, else ``dateTime``."""
    if "T" not in value:
        return {"date": value}
    boundary = {"dateTime": value}
    if time_zone:
        boundary["timeZone"] = time_zone
    return boundary


def build_event_body(args: CreateEventArguments | UpdateEventArguments) -> dict[str, Any]:
    """Google event resource holding only the fields supplied in *args*."""
    body: dict[str, Any] = {}
    for field_name, key in (
        ("summary", "summary"),
        ("description", "description"),
        ("location", "location"),
        ("color_id", "colorId"),
        ("recurrence", "recurrence"),
    ):
        value = getattr(args, field_name)
        if value is not None:
            body[key] = value
    if args.start is not None:
        body["start"] = event_time(args.start, args.time_zone)
    if args.end is not None:
        body["end"] = event_time(args.end, args.time_zone)
    if args.attendees is not None:
        body["attendees"] = [attendee.model_dump(exclude_none=True) for attendee in args.attendees]
    if args.reminders is not None:
        body["reminders"] = args.reminders.model_dump(by_alias=True, exclude_none=True)
    return body


class CreateEventHandler(BaseToolHandler):
    arguments_model = CreateEventArguments

    async def execute(self, args: CreateEventArguments, client: AuthorizedClient) -> str:
        event = await client.request_json(
            "POST",
            f"/calendars/{encode_path_segment(args.calendar_id)}/events",
            json_body=build_event_body(args),
        )
        summary = event.get("summary") or args.summary
        return f"Event created: {summary} ({event.get('id') or 'no-id'})"
