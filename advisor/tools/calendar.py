"""Calendar tools — search and create events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from advisor.tools.base import ToolParams, ToolResult
from advisor.tools.registry import registry

if TYPE_CHECKING:
    from advisor.integrations.base import Providers

_CATEGORY = "calendar"


class SearchEventsParams(ToolParams):
    query: str
    time_min: str | None = Field(default=None, alias="timeMin")
    time_max: str | None = Field(default=None, alias="timeMax")


@registry.tool(
    name="search_calendar_events", category=_CATEGORY, params_model=SearchEventsParams
)
async def search_calendar_events(
    query: str, time_min: str | None, time_max: str | None, providers: Providers
) -> ToolResult:
    events = await providers.require_calendar().search(query, time_min, time_max)
    return ToolResult(data={"events": events})


class CreateEventParams(ToolParams):
    title: str
    start: str = Field(description="Start time in ISO 8601 format")
    end: str = Field(description="End time in ISO 8601 format")
    description: str | None = None
    attendees: list[str] | None = None
    location: str | None = None


@registry.tool(
    name="create_calendar_event", category=_CATEGORY, params_model=CreateEventParams
)
async def create_calendar_event(
    title: str,
    start: str,
    end: str,
    description: str | None,
    attendees: list[str] | None,
    location: str | None,
    providers: Providers,
) -> ToolResult:
    event = await providers.require_calendar().create(
        title=title,
        start=start,
        end=end,
        description=description,
        attendees=attendees,
        location=location,
    )
    return ToolResult(data={"event": event})
