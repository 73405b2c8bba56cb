"""Gmail trigger — ingest a new email and create follow-up tasks.

Accepts either a normalized email (``from``, ``to``, ``subject``, ``body``,
...) or ``{"messageId": ...}``, in which case the message is fetched from
the email provider.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from advisor.integrations.gmail import to_email_data
from advisor.tasks.models import Task
from advisor.triggers.registry import trigger_registry

if TYPE_CHECKING:
    from advisor.app import Runtime

logger = logging.getLogger(__name__)

URGENT_KEYWORDS = ("urgent", "emergency", "asap", "important", "critical")
PREVIEW_LENGTH = 200


def _mentions(email: dict[str, Any], words: tuple[str, ...]) -> bool:
    subject = (email.get("subject") or "").lower()
    body = (email.get("body") or "").lower()
    return any(w in subject or w in body for w in words)


def email_tasks(email: dict[str, Any], now: datetime | None = None) -> list[Task]:
    """Rule-based tasks for an incoming email.

    Urgent emails get a high-priority task due in two hours; emails that
    mention a meeting get a medium-priority task due in a day.
    """
    now = now or datetime.now(UTC)
    subject = email.get("subject") or ""
    sender = email.get("from") or ""
    preview = (email.get("body") or "")[:PREVIEW_LENGTH]
    context = {"source": "gmail", "messageId": email.get("id")}

    tasks = []
    if _mentions(email, URGENT_KEYWORDS):
        tasks.append(Task(
            title=f"Urgent Email: {subject}",
            description=f"From: {sender}\n\n{preview}...",
            due_date=(now + timedelta(hours=2)).isoformat(),
            priority="high",
            context=context,
        ))
    if _mentions(email, ("meeting",)):
        tasks.append(Task(
            title=f"Meeting Request: {subject}",
            description=f"Meeting request from {sender}\n\n{preview}...",
            due_date=(now + timedelta(hours=24)).isoformat(),
            priority="medium",
            context=context,
        ))
    return tasks


async def _resolve_email(payload: dict[str, Any], runtime: Runtime) -> dict[str, Any]:
    message_id = payload.get("messageId")
    if message_id and "subject" not in payload:
        message = await runtime.providers.require_email().get_message(message_id)
        return to_email_data(message)
    return payload


@trigger_registry.handler("gmail")
async def handle_gmail(payload: dict[str, Any], runtime: Runtime) -> None:
    email = await _resolve_email(payload, runtime)

    await runtime.processor.process_email(email)

    for task in email_tasks(email):
        await runtime.tasks.create(task)

    runtime.proactive.dispatch("email_received", email)
