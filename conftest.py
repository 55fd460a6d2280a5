"""Shared fixtures for the gcal-mcp test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.auth.client_manager import ClientManager
from gcal_mcp.config import GoogleConfig
from tests.fakes import make_mock_http_client

ACCESS_TOKEN = "ya29.test-access-token"


@pytest.fixture
def google_config() -> GoogleConfig:
    return GoogleConfig(client_id="client-id", client_secret="client-secret")


@pytest.fixture
def mock_http_client() -> MagicMock:
    return make_mock_http_client()


@pytest.fixture
def authorized_client(google_config: GoogleConfig, mock_http_client: MagicMock) -> AuthorizedClient:
    return AuthorizedClient(ACCESS_TOKEN, config=google_config, http_client=mock_http_client)


@pytest.fixture
def client_manager(google_config: GoogleConfig, mock_http_client: MagicMock) -> ClientManager:
    return ClientManager(google_config, http_client=mock_http_client)


@pytest.fixture
def access_token() -> str:
    return ACCESS_TOKEN
