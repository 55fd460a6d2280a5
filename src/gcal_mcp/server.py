"""FastMCP server exposing the Google Calendar tools.

Every tool routes through :meth:`ToolDispatcher.call_tool`, which turns any
failure into an ``"Error: ..."`` text result so the host always receives a
normal tool result rather than a protocol-level error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field, ValidationError

from gcal_mcp.auth.client_manager import ClientManager
from gcal_mcp.config import Config, ConfigError
from gcal_mcp.core.telemetry import tool_span
from gcal_mcp.errors import BatchInternalError, BatchParseError, CalendarError
from gcal_mcp.handlers import BaseToolHandler, ToolResult, default_handlers, text_result

logger = logging.getLogger(__name__)

BATCH_FAILURE_TEXT = (
    "Failed to list events across calendars: the batch response could not be processed."
)

AccessToken = Annotated[str, Field(description="OAuth2 access token for the calendar owner")]
TimeBound = Annotated[
    str | None,
    Field(description="ISO-8601 date-time with timezone, e.g. 2024-01-01T00:00:00Z"),
]


def format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(piece) for piece in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def _present(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


class ToolDispatcher:
    """Route tool calls to handlers and convert every failure into text."""

    def __init__(
        self,
        client_manager: ClientManager,
        handlers: Mapping[str, BaseToolHandler] | None = None,
    ) -> None:
        self._client_manager = client_manager
        self._handlers = dict(handlers) if handlers is not None else default_handlers()

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def call_tool(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            return text_result(f"Error: Unknown tool: {name}")

        try:
            with tool_span(name):
                return await handler.run_tool(arguments, self._client_manager)
        except ValidationError as exc:
            return text_result(f"Error: Invalid arguments: {format_validation_error(exc)}")
        except (BatchParseError, BatchInternalError) as exc:
            logger.error("Tool %s failed while processing a batch: %s", name, exc, exc_info=True)
            return text_result(f"Error: {BATCH_FAILURE_TEXT}")
        except (CalendarError, ConfigError) as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return text_result(f"Error: {exc}")
        except Exception as exc:
            logger.exception("Tool %s failed unexpectedly", name)
            return text_result(f"Error: {exc}")

    async def call_text(self, name: str, arguments: Mapping[str, Any]) -> str:
        result = await self.call_tool(name, arguments)
        return result["content"][0]["text"]


def register_tools(mcp: Any, dispatcher: ToolDispatcher) -> None:
    """Register every calendar tool on *mcp*."""

    @mcp.tool(name="list-calendars")
    async def list_calendars(accessToken: AccessToken) -> str:  # noqa: N803
        """List all calendars available to the user."""
        return await dispatcher.call_text("list-calendars", {"accessToken": accessToken})

    @mcp.tool(name="list-events")
    async def list_events(
        accessToken: AccessToken,  # noqa: N803
        calendarId: Annotated[  # noqa: N803
            str | list[str],
            Field(
                description=(
                    "Calendar id, an array of 1-50 calendar ids, or a JSON array string. "
                    "Use 'primary' for the main calendar."
                )
            ),
        ],
        timeMin: TimeBound = None,  # noqa: N803
        timeMax: TimeBound = None,  # noqa: N803
    ) -> str:
        """List events from one or more calendars, sorted by start time."""
        return await dispatcher.call_text(
            "list-events",
            _present(
                accessToken=accessToken,
                calendarId=calendarId,
                timeMin=timeMin,
                timeMax=timeMax,
            ),
        )

    @mcp.tool(name="search-events")
    async def search_events(
        accessToken: AccessToken,  # noqa: N803
        calendarId: str,  # noqa: N803
        query: Annotated[str, Field(description="Free text matched against event fields")],
        timeMin: TimeBound = None,  # noqa: N803
        timeMax: TimeBound = None,  # noqa: N803
    ) -> str:
        """Search events in a calendar by text query."""
        return await dispatcher.call_text(
            "search-events",
            _present(
                accessToken=accessToken,
                calendarId=calendarId,
                query=query,
                timeMin=timeMin,
                timeMax=timeMax,
            ),
        )

    @mcp.tool(name="list-colors")
    async def list_colors(accessToken: AccessToken) -> str:  # noqa: N803
        """List available color ids and their meaning for calendar events."""
        return await dispatcher.call_text("list-colors", {"accessToken": accessToken})

    @mcp.tool(name="create-event")
    async def create_event(
        accessToken: AccessToken,  # noqa: N803
        calendarId: str,  # noqa: N803
        summary: str,
        start: Annotated[str, Field(description="YYYY-MM-DD or ISO-8601 date-time")],
        end: Annotated[str, Field(description="YYYY-MM-DD or ISO-8601 date-time")],
        description: str | None = None,
        timeZone: str | None = None,  # noqa: N803
        location: str | None = None,
        attendees: list[dict[str, Any]] | None = None,
        colorId: str | None = None,  # noqa: N803
        reminders: dict[str, Any] | None = None,
        recurrence: list[str] | None = None,
    ) -> str:
        """Create a new calendar event."""
        return await dispatcher.call_text(
            "create-event",
            _present(
                accessToken=accessToken,
                calendarId=calendarId,
                summary=summary,
                start=start,
                end=end,
                description=description,
                timeZone=timeZone,
                location=location,
                attendees=attendees,
                colorId=colorId,
                reminders=reminders,
                recurrence=recurrence,
            ),
        )

    @mcp.tool(name="update-event")
    async def update_event(
        accessToken: AccessToken,  # noqa: N803
        calendarId: str,  # noqa: N803
        eventId: str,  # noqa: N803
        summary: str | None = None,
        description: str | None = None,
        start: str | None = None,
        end: str | None = None,
        timeZone: str | None = None,  # noqa: N803
        location: str | None = None,
        attendees: list[dict[str, Any]] | None = None,
        colorId: str | None = None,  # noqa: N803
        reminders: dict[str, Any] | None = None,
        recurrence: list[str] | None = None,
    ) -> str:
        """Update fields of an existing calendar event."""
        return await dispatcher.call_text(
            "update-event",
            _present(
                accessToken=accessToken,
                calendarId=calendarId,
                eventId=eventId,
                summary=summary,
                description=description,
                start=start,
                end=end,
                timeZone=timeZone,
                location=location,
                attendees=attendees,
                colorId=colorId,
                reminders=reminders,
                recurrence=recurrence,
            ),
        )

    @mcp.tool(name="delete-event")
    async def delete_event(
        accessToken: AccessToken,  # noqa: N803
        calendarId: str,  # noqa: N803
        eventId: str,  # noqa: N803
    ) -> str:
        """Delete a calendar event."""
        return await dispatcher.call_text(
            "delete-event",
            {"accessToken": accessToken, "calendarId": calendarId, "eventId": eventId},
        )

    @mcp.tool(name="get-freebusy")
    async def get_freebusy(
        accessToken: AccessToken,  # noqa: N803
        calendarIds: Annotated[  # noqa: N803
            list[str], Field(description="1-50 calendar ids to query")
        ],
        timeMin: Annotated[str, Field(description="Window start, with timezone")],  # noqa: N803
        timeMax: Annotated[str, Field(description="Window end, with timezone")],  # noqa: N803
        timeZone: str | None = None,  # noqa: N803
    ) -> str:
        """Query busy intervals for a set of calendars."""
        return await dispatcher.call_text(
            "get-freebusy",
            _present(
                accessToken=accessToken,
                calendarIds=calendarIds,
                timeMin=timeMin,
                timeMax=timeMax,
                timeZone=timeZone,
            ),
        )


def create_server(
    config: Config,
    client_manager: ClientManager | None = None,
    handlers: Mapping[str, BaseToolHandler] | None = None,
) -> FastMCP:
    """Build the FastMCP server with all calendar tools registered."""
    mcp = FastMCP(config.server.name)
    dispatcher = ToolDispatcher(client_manager or ClientManager(config.google), handlers)
    register_tools(mcp, dispatcher)
    logger.info("Registered %d calendar tools", len(dispatcher.tool_names))
    return mcp
