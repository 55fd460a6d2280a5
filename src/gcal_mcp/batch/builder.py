"""Multipart/mixed request builder for the Calendar batch endpoint."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from gcal_mcp.errors import BatchConfigurationError

MAX_BATCH_CALENDARS = 50
EVENTS_PATH_TEMPLATE = "/calendar/v3/calendars/{calendar_id}/events"
CRLF = "\r\n"


@dataclass(frozen=True)
class EventFilters:
    """Time window applied to every sub-request."""

    time_min: str | None = None
    time_max: str | None = None


@dataclass(frozen=True)
class SubRequest:
    """One calendar's events-list call inside a batch."""

    method: str
    path: str

    @property
    def request_line(self) -> str:
        return f"{self.method} {self.path} HTTP/1.1"


@dataclass(frozen=True)
class BatchEnvelope:
    """Serialized multipart body plus the sub-requests it carries.

    ``sub_requests[n]`` is sent under ``Content-ID: <item{n+1}>``.
    """

    boundary: str
    sub_requests: tuple[SubRequest, ...]
    body: str

    @property
    def content_type(self) -> str:
        return f"multipart/mixed; boundary={self.boundary}"


def content_id(index: int) -> str:
    """Content-ID value for the 0-based sub-request *index*."""
    return f"item{index + 1}"


def events_list_path(calendar_id: str, filters: EventFilters) -> str:
    params: list[tuple[str, str]] = [("singleEvents", "true"), ("orderBy", "startTime")]
    if filters.time_min:
        params.append(("timeMin", filters.time_min))
    if filters.time_max:
        params.append(("timeMax", filters.time_max))
    path = EVENTS_PATH_TEMPLATE.format(calendar_id=quote(calendar_id, safe=""))
    return f"{path}?{urlencode(params)}"


def _serialize_part(boundary: str, index: int, sub_request: SubRequest) -> str:
    return CRLF.join(
        [
            f"--{boundary}",
            "Content-Type: application/http",
            f"Content-ID: <{content_id(index)}>",
            "",
            sub_request.request_line,
        ]
    )


class BatchRequestBuilder:
    """Build a :class:`BatchEnvelope` listing events for each calendar id."""

    def __init__(self, boundary_factory: Callable[[], str] | None = None) -> None:
        self._boundary_factory = boundary_factory or (lambda: f"batch_{uuid.uuid4().hex}")

    def build(self, calendar_ids: Sequence[str], filters: EventFilters) -> BatchEnvelope:
        if not calendar_ids:
            raise BatchConfigurationError("At least one calendar id is required for a batch")
        if len(calendar_ids) > MAX_BATCH_CALENDARS:
            raise BatchConfigurationError(
                f"Batch requests support at most {MAX_BATCH_CALENDARS} calendars "
                f"(got {len(calendar_ids)})"
            )

        sub_requests = tuple(
            SubRequest(method="GET", path=events_list_path(calendar_id, filters))
            for calendar_id in calendar_ids
        )
        boundary = self._boundary_factory()
        parts = [
            _serialize_part(boundary, index, sub_request)
            for index, sub_request in enumerate(sub_requests)
        ]
        body = (CRLF * 2).join(parts) + f"{CRLF * 2}--{boundary}--"
        return BatchEnvelope(boundary=boundary, sub_requests=sub_requests, body=body)
