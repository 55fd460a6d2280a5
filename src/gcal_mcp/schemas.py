"""Validated argument models for every calendar tool.

Tool arguments arrive with the Calendar API's camelCase names
(``calendarId``, ``timeMin`` ...). Each model accepts those aliases and
exposes snake_case attributes.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

MAX_CALENDAR_IDS = 50

_RFC3339_WITH_OFFSET = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})$"
)
_EVENT_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})?$"
)
_EVENT_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

CalendarId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _parses_as_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False
    return True


def validate_time_bound(value: str | None) -> str | None:
    """Require an ISO-8601 date-time carrying a timezone (``Z`` or ``±HH:MM``)."""
    if value is None:
        return None
    normalized = value.strip()
    if not _RFC3339_WITH_OFFSET.match(normalized) or not _parses_as_datetime(normalized):
        raise ValueError(
            "must be an ISO-8601 date-time with timezone (e.g. 2024-01-01T00:00:00Z)"
        )
    return normalized


def validate_event_time(value: str | None) -> str | None:
    """Accept ``YYYY-MM-DD`` (all-day) or an ISO-8601 date-time with optional offset."""
    if value is None:
        return None
    normalized = value.strip()
    if _EVENT_DATE.match(normalized):
        try:
            datetime.strptime(normalized, "%Y-%m-%d")
        except ValueError as exc:
            raise ValueError(f"invalid date: {normalized!r}") from exc
        return normalized
    if not _EVENT_DATETIME.match(normalized) or not _parses_as_datetime(normalized):
        raise ValueError(
            "must be a date (YYYY-MM-DD) or ISO-8601 date-time (e.g. 2024-01-01T09:00:00)"
        )
    return normalized


def resolve_calendar_ids(value: Any) -> Any:
    """Normalize the accepted ``calendarId`` shapes into a list.

    Accepts a single id, a list of ids, or a JSON string encoding a list of
    ids. A string that looks like JSON but does not decode is kept as a
    literal calendar id.
    """
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                decoded = json.loads(stripped)
            except json.JSONDecodeError:
                return [value]
            if isinstance(decoded, list):
                return decoded
        return [value]
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass(frozen=True)
class SingleCalendar:
    """Selection naming exactly one calendar."""

    calendar_id: str


@dataclass(frozen=True)
class CalendarBatch:
    """Selection naming 2–50 calendars, listed through the batch endpoint."""

    calendar_ids: tuple[str, ...]


CalendarSelection = SingleCalendar | CalendarBatch


class ToolArguments(BaseModel):
    """Fields shared by every tool: the caller's OAuth2 bearer token."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    access_token: NonEmptyText = Field(alias="accessToken", repr=False)


class ListCalendarsArguments(ToolArguments):
    pass


class ListColorsArguments(ToolArguments):
    pass


class _TimeWindowArguments(ToolArguments):
    time_min: str | None = Field(default=None, alias="timeMin")
    time_max: str | None = Field(default=None, alias="timeMax")

    @field_validator("time_min", "time_max")
    @classmethod
    def _validate_time_bounds(cls, value: str | None) -> str | None:
        return validate_time_bound(value)


class ListEventsArguments(_TimeWindowArguments):
    """Arguments for ``list-events``.

    ``calendarId`` is resolved once, here, into :attr:`selection`.
    """

    calendar_ids: tuple[CalendarId, ...] = Field(
        alias="calendarId",
        min_length=1,
        max_length=MAX_CALENDAR_IDS,
    )

    @field_validator("calendar_ids", mode="before")
    @classmethod
    def _resolve_calendar_ids(cls, value: Any) -> Any:
        return resolve_calendar_ids(value)

    @property
    def selection(self) -> CalendarSelection:
        if len(self.calendar_ids) == 1:
            return SingleCalendar(self.calendar_ids[0])
        return CalendarBatch(self.calendar_ids)


class SearchEventsArguments(_TimeWindowArguments):
    calendar_id: CalendarId = Field(alias="calendarId")
    query: NonEmptyText


class ReminderOverride(BaseModel):
    model_config = ConfigDict(extra="forbid")

    method: Literal["email", "popup"] = "popup"
    minutes: int = Field(ge=0, le=40320)


class Reminders(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    use_default: bool = Field(alias="useDefault")
    overrides: list[ReminderOverride] | None = Field(default=None, max_length=5)


class Attendee(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: NonEmptyText
    optional: bool | None = None


class _EventFields(ToolArguments):
    summary: str | None = None
    description: str | None = None
    start: str | None = None
    end: str | None = None
    time_zone: str | None = Field(default=None, alias="timeZone")
    location: str | None = None
    attendees: list[Attendee] | None = None
    color_id: str | None = Field(default=None, alias="colorId")
    reminders: Reminders | None = None
    recurrence: list[str] | None = None

    @field_validator("start", "end")
    @classmethod
    def _validate_event_times(cls, value: str | None) -> str | None:
        return validate_event_time(value)


class CreateEventArguments(_EventFields):
    calendar_id: CalendarId = Field(alias="calendarId")
    summary: NonEmptyText
    start: str
    end: str


class UpdateEventArguments(_EventFields):
    calendar_id: CalendarId = Field(alias="calendarId")
    event_id: NonEmptyText = Field(alias="eventId")


class DeleteEventArguments(ToolArguments):
    calendar_id: CalendarId = Field(alias="calendarId")
    event_id: NonEmptyText = Field(alias="eventId")


class FreeBusyArguments(ToolArguments):
    calendar_ids: tuple[CalendarId, ...] = Field(
        alias="calendarIds",
        min_length=1,
        max_length=MAX_CALENDAR_IDS,
    )
    time_min: str = Field(alias="timeMin")
    time_max: str = Field(alias="timeMax")
    time_zone: str | None = Field(default=None, alias="timeZone")

    @field_validator("calendar_ids", mode="before")
    @classmethod
    def _resolve_calendar_ids(cls, value: Any) -> Any:
        return resolve_calendar_ids(value)

    @field_validator("time_min", "time_max")
    @classmethod
    def _validate_time_bounds(cls, value: str) -> str:
        return validate_time_bound(value)
