"""Server configuration loading and validation.

Reads an optional ``gcal-mcp.toml`` file, resolves ``${VAR}`` references from
the environment, applies environment fallbacks for the Google OAuth client
settings, and returns a validated :class:`Config` dataclass.

Example::

    [server]
    name = "google-calendar"
    transport = "stdio"

    [google]
    client_id = "${GOOGLE_CLIENT_ID}"
    client_secret = "${GOOGLE_CLIENT_SECRET}"
    timeout_seconds = 30

    [logging]
    level = "INFO"
    format = "text"
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_SERVER_NAME = "google-calendar"
DEFAULT_CONFIG_FILENAME = "gcal-mcp.toml"
GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
GOOGLE_CALENDAR_BATCH_URL = "https://www.googleapis.com/batch/calendar/v3"
DEFAULT_TIMEOUT_SECONDS = 30.0

CLIENT_ID_ENV = "GOOGLE_CLIENT_ID"
CLIENT_SECRET_ENV = "GOOGLE_CLIENT_SECRET"
LOG_LEVEL_ENV = "GCAL_MCP_LOG_LEVEL"

VALID_TRANSPORTS = ("stdio", "http")

# Matches ${VAR_NAME} with alphanumeric and underscore names.
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(Exception):
    """Raised when server configuration is missing, malformed, or invalid."""


@dataclass
class LoggingConfig:
    """Logging configuration from the [logging] section."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    log_root: str | None = None


@dataclass
class ServerConfig:
    """MCP server settings from the [server] section."""

    name: str = DEFAULT_SERVER_NAME
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class GoogleConfig:
    """Google OAuth client and API endpoint settings from the [google] section.

    ``client_id`` and ``client_secret`` may be absent at load time; they are
    only required once an authorized client is built (see
    :meth:`require_client_credentials`).
    """

    client_id: str | None = None
    client_secret: str | None = None
    api_base_url: str = GOOGLE_CALENDAR_API_BASE_URL
    batch_url: str = GOOGLE_CALENDAR_BATCH_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def require_client_credentials(self) -> None:
        """Raise :class:`ConfigError` unless both OAuth client settings are present."""
        if not self.client_id:
            raise ConfigError(f"{CLIENT_ID_ENV} environment variable is required")
        if not self.client_secret:
            raise ConfigError(f"{CLIENT_SECRET_ENV} environment variable is required")


@dataclass
class Config:
    """Top-level configuration for the gcal-mcp server."""

    server: ServerConfig = field(default_factory=ServerConfig)
    google: GoogleConfig = field(default_factory=GoogleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Env var resolution
# ---------------------------------------------------------------------------


def resolve_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR_NAME}`` references in string values.

    Raises
    ------
    ConfigError
        If a referenced environment variable is not set.
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]

    if isinstance(value, str):
        return _resolve_string(value)

    return value


def _resolve_string(s: str) -> str:
    """Replace all ``${VAR_NAME}`` occurrences in *s* with env var values.

    Collects all missing variable names and reports them in a single error.
    """
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            missing.append(var_name)
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, s)

    if missing:
        vars_str = ", ".join(missing)
        raise ConfigError(
            f"Unresolved environment variable(s) in config value: {vars_str} (original: {s!r})"
        )

    return result


def _env_or_none(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _parse_server(section: dict[str, Any]) -> ServerConfig:
    name = str(section.get("name", DEFAULT_SERVER_NAME)).strip()
    if not name:
        raise ConfigError("server.name must be a non-empty string")

    transport = str(section.get("transport", "stdio")).lower()
    if transport not in VALID_TRANSPORTS:
        raise ConfigError(
            f"Invalid server.transport: {transport!r}. "
            f"Expected one of {', '.join(VALID_TRANSPORTS)}."
        )

    try:
        port = int(section.get("port", 8000))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid server.port: {section.get('port')!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Invalid server.port: {port!r}. Must be between 1 and 65535.")

    return ServerConfig(
        name=name,
        transport=transport,
        host=str(section.get("host", "127.0.0.1")),
        port=port,
    )


def _parse_google(section: dict[str, Any]) -> GoogleConfig:
    client_id = section.get("client_id") or _env_or_none(CLIENT_ID_ENV)
    client_secret = section.get("client_secret") or _env_or_none(CLIENT_SECRET_ENV)

    try:
        timeout_seconds = float(section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid google.timeout_seconds: {section.get('timeout_seconds')!r}"
        ) from exc
    if timeout_seconds <= 0:
        raise ConfigError(
            f"Invalid google.timeout_seconds: {timeout_seconds!r}. Must be a positive number."
        )

    return GoogleConfig(
        client_id=str(client_id).strip() if client_id else None,
        client_secret=str(client_secret).strip() if client_secret else None,
        api_base_url=str(section.get("api_base_url", GOOGLE_CALENDAR_API_BASE_URL)).rstrip("/"),
        batch_url=str(section.get("batch_url", GOOGLE_CALENDAR_BATCH_URL)),
        timeout_seconds=timeout_seconds,
    )


def _parse_logging(section: dict[str, Any]) -> LoggingConfig:
    level = str(section.get("level") or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    log_format = str(section.get("format", "text")).lower()
    if log_format not in ("text", "json"):
        raise ConfigError(f"Invalid logging.format: {log_format!r}. Expected 'text' or 'json'.")
    return LoggingConfig(level=level, format=log_format, log_root=section.get("log_root"))


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def parse_config(data: dict[str, Any]) -> Config:
    """Build a :class:`Config` from already-decoded TOML *data*."""
    data = resolve_env_vars(data)
    return Config(
        server=_parse_server(_section(data, "server")),
        google=_parse_google(_section(data, "google")),
        logging=_parse_logging(_section(data, "logging")),
    )


def load_config(config_path: Path | None = None) -> Config:
    """Load and validate configuration.

    Parameters
    ----------
    config_path:
        Path to a TOML file, or a directory containing ``gcal-mcp.toml``.
        When ``None``, configuration comes from defaults and environment
        variables only.

    Raises
    ------
    ConfigError
        If the file is missing, contains invalid TOML, or has invalid values.
    """
    if config_path is None:
        return parse_config({})

    toml_path = config_path / DEFAULT_CONFIG_FILENAME if config_path.is_dir() else config_path
    if not toml_path.exists():
        raise ConfigError(f"Config file not found: {toml_path}")

    try:
        data = tomllib.loads(toml_path.read_bytes().decode())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {toml_path}: {exc}") from exc

    return parse_config(data)
