"""``get-freebusy``: busy intervals across several calendars."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.handlers.base import BaseToolHandler
from gcal_mcp.schemas import FreeBusyArguments


def _calendar_section(calendar_id: str, entry: Any) -> str:
    lines = [f"{calendar_id}:"]
    if not isinstance(entry, Mapping):
        lines.append("  Error: calendar missing from response")
        return "\n".join(lines)

    errors = entry.get("errors")
    if isinstance(errors, list) and errors:
        reasons = ", ".join(
            str(error.get("reason", "unknown")) for error in errors if isinstance(error, Mapping)
        )
        lines.append(f"  Error: {reasons or 'unknown'}")
        return "\n".join(lines)

    busy = entry.get("busy")
    if not isinstance(busy, list) or not busy:
        lines.append("  Free for the entire window")
        return "\n".join(lines)
    lines.extend(
        f"  Busy: {interval.get('start')} - {interval.get('end')}"
        for interval in busy
        if isinstance(interval, Mapping)
    )
    return "\n".join(lines)


def format_free_busy(payload: Mapping[str, Any], args: FreeBusyArguments) -> str:
    calendars = payload.get("calendars")
    calendars = calendars if isinstance(calendars, Mapping) else {}
    sections = [f"Free/busy from {args.time_min} to {args.time_max}:"]
    sections.extend(
        _calendar_section(calendar_id, calendars.get(calendar_id))
        for calendar_id in dict.fromkeys(args.calendar_ids)
    )
    return "\n\n".join(sections)


class FreeBusyHandler(BaseToolHandler):
    arguments_model = FreeBusyArguments

    async def execute(self, args: FreeBusyArguments, client: AuthorizedClient) -> str:
        body: dict[str, Any] = {
            "timeMin": args.time_min,
            "timeMax": args.time_max,
            "items": [{"id": calendar_id} for calendar_id in args.calendar_ids],
        }
        if args.time_zone:
            body["timeZone"] = args.time_zone
        payload = await client.request_json("POST", "/freeBusy", json_body=body)
        return format_free_busy(payload, args)
