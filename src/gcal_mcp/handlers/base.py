"""Base class shared by every calendar tool handler."""

from __future__ import annotations

import abc
from collections.abc import Mapping
from typing import Any, ClassVar
from urllib.parse import quote

from gcal_mcp.auth.client import AuthorizedClient
from gcal_mcp.auth.client_manager import ClientManager
from gcal_mcp.schemas import ToolArguments

ToolResult = dict[str, Any]


def text_result(text: str) -> ToolResult:
    """Wrap *text* in the MCP tool-result envelope."""
    return {"content": [{"type": "text", "text": text}]}


def encode_path_segment(value: str) -> str:
    """Percent-encode a calendar or event id for use as a URL path segment."""
    return quote(value, safe="")


class BaseToolHandler(abc.ABC):
    """Validate arguments, resolve the caller's client, run one tool.

    Subclasses declare ``arguments_model`` and implement :meth:`execute`,
    which returns the tool's text output.
    """

    arguments_model: ClassVar[type[ToolArguments]]

    async def run_tool(self, args: Mapping[str, Any], client_manager: ClientManager) -> ToolResult:
        valid_args = self.arguments_model.model_validate(dict(args))
        client = client_manager.get_client(valid_args.access_token)
        return text_result(await self.execute(valid_args, client))

    @abc.abstractmethod
    async def execute(self, args: Any, client: AuthorizedClient) -> str:
        """Run the tool against *client* and return its text output."""
        ...
