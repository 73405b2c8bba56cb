"""Calendar trigger — ingest a new or changed event and plan preparation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from advisor.integrations.calendar import event_times
from advisor.tasks.models import Task
from advisor.triggers.registry import trigger_registry

if TYPE_CHECKING:
    from advisor.app import Runtime

logger = logging.getLogger(__name__)

CLIENT_KEYWORDS = ("client", "meeting", "consultation", "review")


def normalize_event(event: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Calendar API event into the dict used for ingestion."""
    start, end = event_times(event)
    return {
        "id": event.get("id"),
        "title": event.get("summary", ""),
        "description": event.get("description"),
        "start": start,
        "end": end,
        "attendees": [a.get("email", "") for a in event.get("attendees", [])],
        "location": event.get("location"),
        "organizer": (event.get("organizer") or {}).get("email"),
        "status": event.get("status"),
        "recurringEventId": event.get("recurringEventId"),
    }


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def calendar_tasks(event: dict[str, Any], now: datetime | None = None) -> list[Task]:
    """Rule-based tasks for a calendar event.

    A confirmed upcoming client meeting gets a high-priority preparation task
    due two hours before it starts.
    """
    now = now or datetime.now(UTC)
    title = event.get("title") or ""
    description = event.get("description") or ""
    start = _parse_time(event.get("start"))
    context = {"source": "calendar", "eventId": event.get("id")}

    tasks = []
    if event.get("status") == "confirmed" and start is not None and start > now:
        text = f"{title} {description}".lower()
        if any(word in text for word in CLIENT_KEYWORDS):
            attendees = ", ".join(event.get("attendees") or [])
            tasks.append(Task(
                title=f"Prepare for: {title}",
                description=(
                    f"Meeting scheduled for {start.isoformat()}\n\n"
                    f"Attendees: {attendees}\n\n"
                    f"Location: {event.get('location') or 'No location specified'}"
                ),
                due_date=(start - timedelta(hours=2)).isoformat(),
                priority="high",
                context=context,
            ))
        if event.get("recurringEventId"):
            tasks.append(Task(
                title=f"Recurring Event: {title}",
                description="Recurring meeting scheduled. Consider if this needs review or changes.",
                due_date=(now + timedelta(days=7)).isoformat(),
                priority="medium",
                context=context,
            ))

    if event.get("status") == "cancelled":
        tasks.append(Task(
            title=f"Cancelled Event: {title}",
            description="Event was cancelled. Consider rescheduling or notifying attendees.",
            due_date=(now + timedelta(hours=24)).isoformat(),
            priority="medium",
            context=context,
        ))
    return tasks


@trigger_registry.handler("calendar")
async def handle_calendar(payload: dict[str, Any], runtime: Runtime) -> None:
    """Accepts a Calendar API event, a normalized event, or ``{"eventId": ...}``."""
    if "summary" in payload:
        event = normalize_event(payload)
    elif payload.get("eventId") and "title" not in payload:
        raw = await runtime.providers.require_calendar().get_event(payload["eventId"])
        event = normalize_event(raw)
    else:
        event = payload

    await runtime.processor.process_calendar_event(event)

    for task in calendar_tasks(event):
        await runtime.tasks.create(task)

    runtime.proactive.dispatch("calendar_event_created", event)
