"""Google Calendar provider — search and create events on the primary calendar."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from advisor.config import settings
from advisor.errors import ProviderCallError

if TYPE_CHECKING:
    from collections.abc import Callable

    from advisor.integrations.google_auth import GoogleAuthManager

logger = logging.getLogger(__name__)


def event_times(event: dict) -> tuple[str, str]:
    """Return ``(start, end)`` of a Calendar API event as strings.

    All-day events carry ``date`` instead of ``dateTime``.
    """
    start = event.get("start", {})
    end = event.get("end", {})
    return (
        start.get("dateTime", start.get("date", "")),
        end.get("dateTime", end.get("date", "")),
    )


class GoogleCalendarProvider:
    """Calendar provider backed by the Google Calendar API."""

    def __init__(
        self,
        auth: GoogleAuthManager,
        calendar_id: str = "primary",
        time_zone: str | None = None,
    ) -> None:
        self._auth = auth
        self._calendar_id = calendar_id
        self._time_zone = time_zone or settings.calendar_time_zone
        self._lock = asyncio.Lock()

    async def _call(self, fn: Callable[[Any], Any]) -> Any:
        try:
            async with self._lock:
                service = self._auth.calendar()
                return await asyncio.to_thread(fn, service)
        except (HttpError, GoogleAuthError, FileNotFoundError) as exc:
            raise ProviderCallError(f"Calendar request failed: {exc}") from exc

    async def search(
        self, query: str, time_min: str | None = None, time_max: str | None = None
    ) -> list[dict[str, Any]]:
        """Return raw events matching *query*, from *time_min* (default: now)."""
        params: dict[str, Any] = {
            "calendarId": self._calendar_id,
            "q": query,
            "timeMin": time_min or datetime.now(UTC).isoformat(),
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_max:
            params["timeMax"] = time_max

        result = await self._call(lambda s: s.events().list(**params).execute())
        return result.get("items", [])

    async def get_event(self, event_id: str) -> dict[str, Any]:
        return await self._call(
            lambda s: s.events().get(calendarId=self._calendar_id, eventId=event_id).execute()
        )

    async def create(
        self,
        title: str,
        start: str,
        end: str,
        description: str | None = None,
        attendees: list[str] | None = None,
        location: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "summary": title,
            "start": {"dateTime": start, "timeZone": self._time_zone},
            "end": {"dateTime": end, "timeZone": self._time_zone},
        }
        if description:
            body["description"] = description
        if location:
            body["location"] = location
        if attendees:
            body["attendees"] = [{"email": e} for e in attendees]

        event = await self._call(
            lambda s: s.events()
            .insert(calendarId=self._calendar_id, body=body, sendUpdates="all")
            .execute()
        )
        logger.info("Created event: %s", event.get("id"))
        return event
