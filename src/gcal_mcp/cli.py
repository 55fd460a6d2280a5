"""CLI for gcal-mcp: run the Google Calendar MCP server."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from gcal_mcp import __version__
from gcal_mcp.auth.client_manager import ClientManager
from gcal_mcp.config import VALID_TRANSPORTS, Config, ConfigError, load_config
from gcal_mcp.core.logging import configure_logging
from gcal_mcp.core.telemetry import init_telemetry
from gcal_mcp.handlers import default_handlers
from gcal_mcp.server import create_server

logger = logging.getLogger(__name__)

# FastMCP transport name for the "http" setting.
_FASTMCP_HTTP_TRANSPORT = "streamable-http"


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """gcal-mcp: Google Calendar tools over the Model Context Protocol."""


def _load_or_exit(config_path: Path | None) -> Config:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to gcal-mcp.toml (or a directory containing it)",
)
@click.option("--transport", type=click.Choice(VALID_TRANSPORTS), default=None)
@click.option("--host", default=None, help="Bind address for the http transport")
@click.option("--port", type=int, default=None, help="Port for the http transport")
def serve(
    config_path: Path | None,
    transport: str | None,
    host: str | None,
    port: int | None,
) -> None:
    """Run the MCP server."""
    config = _load_or_exit(config_path)
    if transport is not None:
        config.server.transport = transport
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port

    configure_logging(
        level=config.logging.level,
        fmt=config.logging.format,
        log_root=Path(config.logging.log_root) if config.logging.log_root else None,
    )
    init_telemetry(config.server.name)
    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


@cli.command("tools")
def list_tools() -> None:
    """List the tool names this server exposes."""
    for name in default_handlers():
        click.echo(name)


async def _serve(config: Config) -> None:
    client_manager = ClientManager(config.google)
    mcp = create_server(config, client_manager)
    logger.info(
        "Starting %s MCP server (transport=%s)", config.server.name, config.server.transport
    )
    try:
        if config.server.transport == "http":
            await mcp.run_async(
                transport=_FASTMCP_HTTP_TRANSPORT,
                host=config.server.host,
                port=config.server.port,
            )
        else:
            await mcp.run_async(transport="stdio")
    finally:
        await client_manager.aclose()
        logger.info("Server stopped")


if __name__ == "__main__":
    cli()
