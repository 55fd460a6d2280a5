"""Allow ``python -m gcal_mcp``."""

from gcal_mcp.cli import cli

cli()
