"""Multi-calendar event listing over the Calendar HTTP batch endpoint."""

from gcal_mcp.batch.builder import (
    MAX_BATCH_CALENDARS,
    BatchEnvelope,
    BatchRequestBuilder,
    EventFilters,
    SubRequest,
)
from gcal_mcp.batch.executor import BatchHttpResponse, BatchRequestExecutor
from gcal_mcp.batch.merger import BatchOutcome, BatchSlot, CalendarFailure, EventMerger
from gcal_mcp.batch.parser import BatchResponseParser, SubResponse, boundary_from_content_type

__all__ = [
    "MAX_BATCH_CALENDARS",
    "BatchEnvelope",
    "BatchHttpResponse",
    "BatchOutcome",
    "BatchRequestBuilder",
    "BatchRequestExecutor",
    "BatchResponseParser",
    "BatchSlot",
    "CalendarFailure",
    "EventFilters",
    "EventMerger",
    "SubRequest",
    "SubResponse",
    "boundary_from_content_type",
]
