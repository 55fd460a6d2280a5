"""Bearer-token bound Google Calendar HTTP client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gcal_mcp.config import GoogleConfig
from gcal_mcp.errors import (
    CalendarAuthenticationError,
    CalendarError,
    CalendarNetworkError,
    CalendarRequestError,
    sanitize_error_message,
)

logger = logging.getLogger(__name__)


def safe_google_error_message(response: httpx.Response) -> str:
    """Extract a short, credential-free error message from a Google API response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = google_error_message(payload)
        if message:
            return message

    raw_text = response.text.strip()
    if raw_text:
        return sanitize_error_message(raw_text)
    return "Request failed without an error payload"


def google_error_message(payload: Any) -> str | None:
    """Return the error message carried by a Google JSON error payload, if any."""
    if not isinstance(payload, dict):
        return None
    error_payload = payload.get("error")
    if isinstance(error_payload, dict):
        message = error_payload.get("message")
        if isinstance(message, str) and message.strip():
            return sanitize_error_message(message)
    if isinstance(error_payload, str) and error_payload.strip():
        description = payload.get("error_description")
        if isinstance(description, str) and description.strip():
            return sanitize_error_message(f"{error_payload}: {description}")
        return sanitize_error_message(error_payload)
    return None


def is_auth_failure(response: httpx.Response) -> bool:
    """Whether *response* signals an invalid or expired token."""
    if response.status_code == 401:
        return True
    try:
        payload = response.json()
    except ValueError:
        return False
    return isinstance(payload, dict) and payload.get("error") == "invalid_grant"


class AuthorizedClient:
    """Google Calendar API client bound to a single OAuth2 bearer token.

    The token is supplied by the MCP caller; this client never stores refresh
    tokens, so ``get_access_token`` hands back the bound token and a rejected
    token surfaces as :class:`CalendarAuthenticationError`.
    """

    def __init__(
        self,
        access_token: str,
        *,
        config: GoogleConfig,
        http_client: httpx.AsyncClient,
    ) -> None:
        self._access_token = access_token.strip()
        self._config = config
        self._http_client = http_client

    @property
    def config(self) -> GoogleConfig:
        return self._config

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client

    async def get_access_token(self) -> str:
        if not self._access_token:
            raise CalendarAuthenticationError("No access token was provided.")
        return self._access_token

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one authenticated request to the Calendar API host."""
        access_token = await self.get_access_token()
        normalized_path = path if path.startswith("/") else f"/{path}"
        url = f"{self._config.api_base_url}{normalized_path}"
        try:
            return await self._http_client.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise CalendarNetworkError(f"Google Calendar request failed: {exc}") from exc

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated request and decode the JSON object response.

        Raises
        ------
        CalendarAuthenticationError
            When Google rejects the token.
        CalendarRequestError
            For any other non-2xx status.
        """
        response = await self.request(method, path, params=params, json_body=json_body)

        if is_auth_failure(response):
            logger.warning("Google rejected access token (status=%d)", response.status_code)
            raise CalendarAuthenticationError()

        if response.status_code < 200 or response.status_code >= 300:
            raise CalendarRequestError(
                status_code=response.status_code,
                message=safe_google_error_message(response),
            )

        if response.status_code == 204 or not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as exc:
            raise CalendarError(
                "Google Calendar API returned invalid JSON for a successful response"
            ) from exc

        if not isinstance(payload, dict):
            raise CalendarError("Google Calendar API returned an unexpected JSON payload shape")
        return payload
