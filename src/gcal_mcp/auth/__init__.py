"""OAuth bearer-token clients for the Google Calendar API."""

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.auth.client_manager import ClientManager

__all__ = ["AuthorizedClient", "ClientManager"]
