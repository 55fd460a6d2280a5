"""Multipart/mixed response parser for the Calendar batch endpoint.

A batch response looks like::

    --batch_abc
    Content-Type: application/http
    Content-ID: <response-item1>

    HTTP/1.1 200 OK
    Content-Type: application/json; charset=UTF-8

    {"items": [...]}
    --batch_abc
    ...
    --batch_abc--

Parts come back in the order the sub-requests were sent. The parser keeps
that order and never reorders by Content-ID.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from gcal_mcp.errors import BatchParseError

_BOUNDARY_PATTERN = re.compile(r"""boundary\s*=\s*(?:"([^"]+)"|([^;\s]+))""", re.IGNORECASE)
_BLANK_LINE = re.compile(r"\r?\n\r?\n")
_LINE_BREAK = re.compile(r"\r?\n")
_STATUS_LINE = re.compile(r"^HTTP/\d(?:\.\d)?\s+(\d{3})\b(?:\s*(.*))?$")


@dataclass(frozen=True)
class SubResponse:
    """One decoded HTTP response carried inside a batch response."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Any = None
    content_id: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def boundary_from_content_type(content_type: str) -> str:
    """Read the multipart boundary out of a ``Content-Type`` header value."""
    match = _BOUNDARY_PATTERN.search(content_type or "")
    if match is None:
        raise BatchParseError(
            f"Batch response Content-Type has no multipart boundary: {content_type!r}"
        )
    return match.group(1) or match.group(2)


def _parse_headers(lines: list[str]) -> httpx.Headers:
    headers = httpx.Headers()
    for line in lines:
        if not line.strip():
            continue
        name, sep, value = line.partition(":")
        if not sep:
            raise BatchParseError(f"Malformed header line in batch response: {line!r}")
        headers[name.strip()] = value.strip()
    return headers


def _split_head(text: str) -> tuple[str, str | None]:
    pieces = _BLANK_LINE.split(text, maxsplit=1)
    if len(pieces) == 1:
        return pieces[0], None
    return pieces[0], pieces[1]


def _decode_body(raw_body: str, headers: httpx.Headers) -> Any:
    body = raw_body.strip()
    if "application/json" not in headers.get("content-type", "").lower():
        return body
    if not body:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        # Mislabelled bodies (e.g. an HTML 502 page) stay with their own part.
        return body


class BatchResponseParser:
    """Split a multipart batch response into ordered :class:`SubResponse` values."""

    def parse(self, raw_text: str, boundary: str) -> tuple[SubResponse, ...]:
        if not boundary:
            raise BatchParseError("Batch response boundary is empty")

        delimiter = f"--{boundary}"
        closing_at = raw_text.find(f"{delimiter}--")
        if closing_at == -1:
            raise BatchParseError("Batch response is truncated: closing boundary not found")

        chunks = raw_text[:closing_at].split(delimiter)
        # chunks[0] is the preamble before the first delimiter.
        parts = chunks[1:]
        if not parts:
            raise BatchParseError("Batch response contains no parts")

        return tuple(
            self._parse_part(part, position) for position, part in enumerate(parts, start=1)
        )

    def _parse_part(self, part: str, position: int) -> SubResponse:
        outer_head, payload = _split_head(part.lstrip(" \t\r\n"))
        if payload is None:
            raise BatchParseError(f"Batch response part {position} has no embedded HTTP response")
        outer_headers = _parse_headers(_LINE_BREAK.split(outer_head))

        http_head, raw_body = _split_head(payload.lstrip("\r\n"))
        head_lines = _LINE_BREAK.split(http_head)
        status_match = _STATUS_LINE.match(head_lines[0].strip())
        if status_match is None:
            raise BatchParseError(
                f"Batch response part {position} has no HTTP status line: {head_lines[0]!r}"
            )

        headers = _parse_headers(head_lines[1:])
        content_id = outer_headers.get("content-id")
        return SubResponse(
            status_code=int(status_match.group(1)),
            headers=headers,
            body=_decode_body(raw_body or "", headers),
            content_id=content_id.strip("<>") if content_id else None,
        )
