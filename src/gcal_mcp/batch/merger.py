"""Correlate batch sub-responses with calendars and merge their events."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from gcal_mcp.auth.client import google_error_message
from gcal_mcp.batch.builder import SubRequest
from gcal_mcp.batch.parser import SubResponse
from gcal_mcp.errors import BatchInternalError, sanitize_error_message

logger = logging.getLogger(__name__)

CALENDAR_ID_KEY = "calendarId"


@dataclass(frozen=True)
class BatchSlot:
    """A calendar id together with the sub-request and sub-response sent for it."""

    calendar_id: str
    sub_response: SubResponse
    sub_request: SubRequest | None = None


@dataclass(frozen=True)
class CalendarFailure:
    """A calendar whose sub-response signalled failure."""

    calendar_id: str
    status_code: int
    error: str


@dataclass(frozen=True)
class BatchOutcome:
    events: tuple[Mapping[str, Any], ...] = ()
    errors: tuple[CalendarFailure, ...] = ()


def correlate(
    calendar_ids: Sequence[str],
    sub_responses: Sequence[SubResponse],
    sub_requests: Sequence[SubRequest] | None = None,
) -> tuple[BatchSlot, ...]:
    """Pair each calendar id with the sub-response at the same position.

    Raises
    ------
    BatchInternalError
        When the sequences have different lengths.
    """
    if len(calendar_ids) != len(sub_responses):
        raise BatchInternalError(
            f"Batch returned {len(sub_responses)} sub-responses for "
            f"{len(calendar_ids)} calendars"
        )
    if sub_requests is not None and len(sub_requests) != len(calendar_ids):
        raise BatchInternalError(
            f"Batch built {len(sub_requests)} sub-requests for {len(calendar_ids)} calendars"
        )

    return tuple(
        BatchSlot(
            calendar_id=calendar_id,
            sub_response=sub_response,
            sub_request=sub_requests[index] if sub_requests is not None else None,
        )
        for index, (calendar_id, sub_response) in enumerate(
            zip(calendar_ids, sub_responses, strict=True)
        )
    )


def event_start_key(event: Mapping[str, Any]) -> str:
    """Sort key: ``start.dateTime``, else ``start.date``, else ``""``.

    Plain string comparison is used. A bare date is a strict prefix of any
    dateTime on the same day, so all-day events sort first on that day.
    Offsets are not normalized, so dateTimes in different offsets may not
    compare in true chronological order.
    """
    start = event.get("start")
    if not isinstance(start, Mapping):
        return ""
    value = start.get("dateTime") or start.get("date") or ""
    return value if isinstance(value, str) else ""


def sort_events(events: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Stable chronological sort of *events* by :func:`event_start_key`."""
    return sorted(events, key=event_start_key)


def failure_message(body: Any) -> str:
    message = google_error_message(body)
    if message:
        return message
    if body is None or body == "":
        return "Unknown error"
    if isinstance(body, str):
        return sanitize_error_message(body)
    return sanitize_error_message(str(body))


class EventMerger:
    """Build a :class:`BatchOutcome` from positionally correlated sub-responses.

    A failing calendar is recorded in ``errors`` and never prevents other
    calendars' events from being collected.
    """

    def merge(
        self,
        calendar_ids: Sequence[str],
        sub_responses: Sequence[SubResponse],
    ) -> BatchOutcome:
        return self.merge_slots(correlate(calendar_ids, sub_responses))

    def merge_slots(self, slots: Sequence[BatchSlot]) -> BatchOutcome:
        events: list[Mapping[str, Any]] = []
        errors: list[CalendarFailure] = []

        for slot in slots:
            response = slot.sub_response
            if not response.is_success:
                logger.info(
                    "Calendar %s failed in batch (status=%d)",
                    slot.calendar_id,
                    response.status_code,
                )
                errors.append(
                    CalendarFailure(
                        calendar_id=slot.calendar_id,
                        status_code=response.status_code,
                        error=failure_message(response.body),
                    )
                )
                continue

            items = response.body.get("items") if isinstance(response.body, Mapping) else None
            if not isinstance(items, list):
                continue
            events.extend(
                {**item, CALENDAR_ID_KEY: slot.calendar_id}
                for item in items
                if isinstance(item, Mapping)
            )

        return BatchOutcome(events=tuple(sort_events(events)), errors=tuple(errors))
