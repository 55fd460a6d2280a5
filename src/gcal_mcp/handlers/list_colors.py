"""``list-colors``: event color palette."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.errors import CalendarError
from gcal_mcp.handlers.base import BaseToolHandler
from gcal_mcp.schemas import ListColorsArguments


def format_color_list(colors: Mapping[str, Any]) -> str:
    event_colors = colors.get("event")
    if not isinstance(event_colors, Mapping):
        return ""
    return "\n".join(
        f"Color ID: {color_id} - {info.get('background')} (background) / "
        f"{info.get('foreground')} (foreground)"
        for color_id, info in event_colors.items()
        if isinstance(info, Mapping)
    )


class ListColorsHandler(BaseToolHandler):
    arguments_model = ListColorsArguments

    async def execute(self, args: ListColorsArguments, client: AuthorizedClient) -> str:
        colors = await client.request_json("GET", "/colors")
        if not colors:
            raise CalendarError("Failed to retrieve colors")
        return f"Available event colors:\n{format_color_list(colors)}"
