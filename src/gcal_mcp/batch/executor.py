"""Single-round-trip sender for batch envelopes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from gcal_mcp.auth.client import AuthorizedClient, is_auth_failure, safe_google_error_message
from gcal_mcp.batch.builder import BatchEnvelope
from gcal_mcp.errors import (
    CalendarAuthenticationError,
    CalendarNetworkError,
    CalendarRequestError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchHttpResponse:
    """Raw outer response of a batch call."""

    status_code: int
    content_type: str
    text: str


class BatchRequestExecutor:
    """POST a :class:`BatchEnvelope` to the batch endpoint in one network call.

    No retries happen here; connection failures surface as
    :class:`CalendarNetworkError` and retry policy is left to the caller.
    """

    async def execute(self, envelope: BatchEnvelope, client: AuthorizedClient) -> BatchHttpResponse:
        access_token = await client.get_access_token()
        batch_url = client.config.batch_url

        logger.debug(
            "Sending calendar batch request (sub_requests=%d, url=%s)",
            len(envelope.sub_requests),
            batch_url,
        )
        try:
            response = await client.http_client.post(
                batch_url,
                content=envelope.body.encode(),
                headers={
                    "Content-Type": envelope.content_type,
                    "Authorization": f"Bearer {access_token}",
                },
            )
        except httpx.HTTPError as exc:
            raise CalendarNetworkError(f"Google Calendar batch request failed: {exc}") from exc

        if is_auth_failure(response):
            raise CalendarAuthenticationError()
        if response.status_code < 200 or response.status_code >= 300:
            raise CalendarRequestError(
                status_code=response.status_code,
                message=safe_google_error_message(response),
            )

        return BatchHttpResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            text=response.text,
        )
