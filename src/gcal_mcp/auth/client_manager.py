"""Per-token store of authorized Google Calendar clients."""

from __future__ import annotations

import logging

import httpx

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.config import GoogleConfig
from gcal_mcp.errors import CalendarAuthenticationError

logger = logging.getLogger(__name__)


class ClientManager:
    """Keyed store mapping bearer tokens to :class:`AuthorizedClient` instances.

    Clients are memoized for the lifetime of the manager (normally the
    process). All clients share one ``httpx.AsyncClient`` created lazily on
    first use; :meth:`aclose` releases it.
    """

    def __init__(
        self,
        config: GoogleConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client
        self._clients: dict[str, AuthorizedClient] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, access_token: object) -> bool:
        return access_token in self._clients

    def _shared_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
        return self._http_client

    def get_client(self, access_token: str) -> AuthorizedClient:
        """Return the client bound to *access_token*, building it on first use.

        Raises
        ------
        ConfigError
            If the OAuth client id or secret is not configured.
        CalendarAuthenticationError
            If *access_token* is empty.
        """
        cached = self._clients.get(access_token)
        if cached is not None:
            return cached

        if not access_token or not access_token.strip():
            raise CalendarAuthenticationError("No access token was provided.")

        self._config.require_client_credentials()
        client = AuthorizedClient(
            access_token,
            config=self._config,
            http_client=self._shared_http_client(),
        )
        self._clients[access_token] = client
        logger.debug("Created authorized client (cached clients=%d)", len(self._clients))
        return client

    async def aclose(self) -> None:
        """Forget cached clients and close the shared HTTP client if owned."""
        self._clients.clear()
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
