"""Google Calendar tools behind an MCP server."""

__version__ = "0.1.0"
