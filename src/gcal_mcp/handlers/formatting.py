"""Text rendering for events and merged batch outcomes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from gcal_mcp.batch.merger import CALENDAR_ID_KEY, BatchOutcome

NO_EVENTS_TEXT = "No events found."


def _event_boundary(value: Any) -> str:
    if isinstance(value, Mapping):
        return value.get("dateTime") or value.get("date") or "unspecified"
    return "unspecified"


def _attendee_line(attendees: Any) -> str | None:
    if not isinstance(attendees, list) or not attendees:
        return None
    rendered = []
    for attendee in attendees:
        if not isinstance(attendee, Mapping):
            continue
        email = attendee.get("email") or "unknown"
        status = attendee.get("responseStatus") or "unknown"
        rendered.append(f"{email} ({status})")
    return f"Attendees: {', '.join(rendered)}" if rendered else None


def _reminder_line(reminders: Any) -> str | None:
    if not isinstance(reminders, Mapping):
        return None
    if reminders.get("useDefault"):
        return "Reminders: default"
    overrides = reminders.get("overrides")
    if not isinstance(overrides, list) or not overrides:
        return None
    rendered = [
        f"{override.get('method', 'popup')} {override.get('minutes', 0)} min"
        for override in overrides
        if isinstance(override, Mapping)
    ]
    return f"Reminders: {', '.join(rendered)}" if rendered else None


def format_event(event: Mapping[str, Any], *, include_calendar: bool = False) -> str:
    """Render one event as a short multi-line block."""
    lines = [f"{event.get('summary') or 'Untitled'} ({event.get('id') or 'no-id'})"]
    if include_calendar and event.get(CALENDAR_ID_KEY):
        lines.append(f"Calendar: {event[CALENDAR_ID_KEY]}")
    if event.get("location"):
        lines.append(f"Location: {event['location']}")
    lines.append(f"Start: {_event_boundary(event.get('start'))}")
    lines.append(f"End: {_event_boundary(event.get('end'))}")

    attendee_line = _attendee_line(event.get("attendees"))
    if attendee_line:
        lines.append(attendee_line)
    if event.get("colorId"):
        lines.append(f"Color ID: {event['colorId']}")
    reminder_line = _reminder_line(event.get("reminders"))
    if reminder_line:
        lines.append(reminder_line)
    recurrence = event.get("recurrence")
    if isinstance(recurrence, list) and recurrence:
        lines.append(f"Recurrence: {', '.join(str(rule) for rule in recurrence)}")
    return "\n".join(lines)


def format_event_list(events: Sequence[Mapping[str, Any]]) -> str:
    """Render a single calendar's events, no header or grouping."""
    if not events:
        return NO_EVENTS_TEXT
    return "\n\n".join(format_event(event) for event in events)


class ResultFormatter:
    """Render a :class:`BatchOutcome` for the multi-calendar ``list-events`` path.

    By default events appear as one chronological list, each tagged with its
    calendar. With ``grouped=True`` they appear under one heading per
    calendar, in request order. Per-calendar errors always follow in a
    trailing ``Errors:`` section.
    """

    def __init__(self, *, grouped: bool = False) -> None:
        self._grouped = grouped

    def format(self, outcome: BatchOutcome, calendar_ids: Sequence[str]) -> str:
        distinct_ids = list(dict.fromkeys(calendar_ids))
        sections = [
            f"Found {len(outcome.events)} events across {len(distinct_ids)} calendars:"
        ]

        if self._grouped:
            sections.extend(self._grouped_sections(outcome, distinct_ids))
        elif outcome.events:
            sections.append(
                "\n\n".join(format_event(event, include_calendar=True) for event in outcome.events)
            )

        if outcome.errors:
            error_lines = [
                f"- {failure.calendar_id}: {failure.error}" for failure in outcome.errors
            ]
            sections.append("Errors:\n" + "\n".join(error_lines))

        return "\n\n".join(sections)

    @staticmethod
    def _grouped_sections(outcome: BatchOutcome, distinct_ids: list[str]) -> list[str]:
        failed_ids = {failure.calendar_id for failure in outcome.errors}
        sections = []
        for calendar_id in distinct_ids:
            group = [event for event in outcome.events if event.get(CALENDAR_ID_KEY) == calendar_id]
            if not group and calendar_id in failed_ids:
                continue
            body = "\n\n".join(format_event(event) for event in group) if group else NO_EVENTS_TEXT
            sections.append(f"Calendar: {calendar_id}\n{body}")
        return sections
