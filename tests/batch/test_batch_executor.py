"""Unit tests for BatchRequestExecutor."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.batch.builder import BatchRequestBuilder, EventFilters
from gcal_mcp.batch.executor import BatchRequestExecutor
from gcal_mcp.config import GOOGLE_CALENDAR_BATCH_URL, GoogleConfig
from gcal_mcp.errors import (
    CalendarAuthenticationError,
    CalendarNetworkError,
    CalendarRequestError,
)
from tests.fakes import RESPONSE_BOUNDARY, batch_http_response, items_part, mock_response

pytestmark = pytest.mark.unit


@pytest.fixture
def envelope():
    builder = BatchRequestBuilder(boundary_factory=lambda: "batch_req")
    return builder.build(["primary", "work@example.com"], EventFilters())


class TestExecute:
    async def test_single_post_with_multipart_headers(
        self,
        envelope,
        authorized_client: AuthorizedClient,
        mock_http_client: MagicMock,
        access_token: str,
    ):
        mock_http_client.post.return_value = batch_http_response([items_part(1), items_part(2)])

        result = await BatchRequestExecutor().execute(envelope, authorized_client)

        mock_http_client.post.assert_awaited_once()
        args, kwargs = mock_http_client.post.call_args
        assert args == (GOOGLE_CALENDAR_BATCH_URL,)
        assert kwargs["content"] == envelope.body.encode()
        assert kwargs["headers"] == {
            "Content-Type": "multipart/mixed; boundary=batch_req",
            "Authorization": f"Bearer {access_token}",
        }
        mock_http_client.request.assert_not_called()

        assert result.status_code == 200
        assert result.content_type == f"multipart/mixed; boundary={RESPONSE_BOUNDARY}"
        assert f"--{RESPONSE_BOUNDARY}--" in result.text

    async def test_uses_configured_batch_url(self, envelope, mock_http_client: MagicMock):
        config = GoogleConfig(batch_url="https://calendar.test/batch")
        client = AuthorizedClient("token", config=config, http_client=mock_http_client)
        mock_http_client.post.return_value = batch_http_response([items_part(1), items_part(2)])

        await BatchRequestExecutor().execute(envelope, client)

        assert mock_http_client.post.call_args.args == ("https://calendar.test/batch",)

    async def test_network_error_is_wrapped(
        self, envelope, authorized_client: AuthorizedClient, mock_http_client: MagicMock
    ):
        mock_http_client.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(CalendarNetworkError, match="connection refused"):
            await BatchRequestExecutor().execute(envelope, authorized_client)

    async def test_timeout_is_wrapped(
        self, envelope, authorized_client: AuthorizedClient, mock_http_client: MagicMock
    ):
        mock_http_client.post.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(CalendarNetworkError):
            await BatchRequestExecutor().execute(envelope, authorized_client)

    async def test_401_raises_authentication_error(
        self, envelope, authorized_client: AuthorizedClient, mock_http_client: MagicMock
    ):
        mock_http_client.post.return_value = mock_response(
            status_code=401,
            method="POST",
            json_body={"error": {"code": 401, "message": "Invalid Credentials"}},
        )

        with pytest.raises(CalendarAuthenticationError, match="re-run the authentication"):
            await BatchRequestExecutor().execute(envelope, authorized_client)

    async def test_outer_error_status_raises_request_error(
        self, envelope, authorized_client: AuthorizedClient, mock_http_client: MagicMock
    ):
        mock_http_client.post.return_value = mock_response(
            status_code=400,
            method="POST",
            json_body={"error": {"code": 400, "message": "Bad batch request"}},
        )

        with pytest.raises(CalendarRequestError) as exc_info:
            await BatchRequestExecutor().execute(envelope, authorized_client)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Bad batch request"

    async def test_missing_token_sends_nothing(
        self, envelope, google_config: GoogleConfig, mock_http_client: MagicMock
    ):
        client = AuthorizedClient("   ", config=google_config, http_client=mock_http_client)

        with pytest.raises(CalendarAuthenticationError, match="No access token"):
            await BatchRequestExecutor().execute(envelope, client)

        mock_http_client.post.assert_not_called()
