"""HubSpot trigger — contact and note events from CRM webhooks."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from advisor.tasks.models import Task
from advisor.triggers.handlers.gmail import URGENT_KEYWORDS
from advisor.triggers.registry import trigger_registry

if TYPE_CHECKING:
    from advisor.app import Runtime

logger = logging.getLogger(__name__)

CONTACT_EVENTS = ("contact.creation", "contact.propertyChange")


def normalize_contact(contact: dict[str, Any]) -> dict[str, Any]:
    """Flatten a CRM v3 contact object into the dict used for ingestion."""
    props = contact.get("properties") or {}
    return {
        "id": contact.get("id"),
        "firstName": props.get("firstname"),
        "lastName": props.get("lastname"),
        "email": props.get("email"),
        "company": props.get("company"),
        "phone": props.get("phone"),
        "notes": props.get("hs_note_body") or "",
        "properties": {
            "lifecyclestage": props.get("lifecyclestage"),
            "leadstatus": props.get("hs_lead_status"),
        },
    }


def normalize_note(note: dict[str, Any]) -> dict[str, Any]:
    props = note.get("properties") or {}
    contacts = (note.get("associations") or {}).get("contacts", {}).get("results", [])
    return {
        "id": note.get("id"),
        "content": props.get("hs_note_body") or "",
        "noteType": "note" if props.get("hs_timestamp") else "activity",
        "createdAt": props.get("hs_timestamp"),
        "contactId": contacts[0].get("id") if contacts else None,
    }


def contact_tasks(contact: dict[str, Any], now: datetime | None = None) -> list[Task]:
    """Rule-based tasks for a created or updated contact."""
    now = now or datetime.now(UTC)
    name = f"{contact.get('firstName') or ''} {contact.get('lastName') or ''}".strip()
    props = contact.get("properties") or {}
    context = {"source": "hubspot", "contactId": contact.get("id")}

    tasks = []
    if props.get("lifecyclestage") == "lead":
        tasks.append(Task(
            title=f"New Lead: {name}",
            description=(
                f"New lead from {contact.get('company') or 'Unknown company'}\n"
                f"Email: {contact.get('email')}\n"
                f"Phone: {contact.get('phone') or 'No phone'}"
            ),
            due_date=(now + timedelta(hours=4)).isoformat(),
            priority="high",
            context=context,
        ))
    if props.get("leadstatus") == "qualified":
        tasks.append(Task(
            title=f"Qualified Lead: {name}",
            description="Lead has been qualified. Ready for sales process.",
            due_date=(now + timedelta(hours=24)).isoformat(),
            priority="medium",
            context=context,
        ))
    if props.get("lifecyclestage") == "customer":
        tasks.append(Task(
            title=f"New Customer: {name}",
            description="Contact converted to customer. Consider onboarding process.",
            due_date=(now + timedelta(days=7)).isoformat(),
            priority="medium",
            context=context,
        ))
    return tasks


def note_tasks(note: dict[str, Any], now: datetime | None = None) -> list[Task]:
    now = now or datetime.now(UTC)
    content = note.get("content") or ""
    if not any(word in content.lower() for word in URGENT_KEYWORDS):
        return []
    return [Task(
        title=f"Urgent Note: {content[:50]}...",
        description=content,
        due_date=(now + timedelta(hours=2)).isoformat(),
        priority="high",
        context={"source": "hubspot_notes", "noteId": note.get("id")},
    )]


@trigger_registry.handler("hubspot")
async def handle_hubspot(payload: dict[str, Any], runtime: Runtime) -> None:
    """Handle a HubSpot webhook event (``subscriptionType`` + ``objectId``)."""
    subscription = payload.get("subscriptionType", "")
    object_id = payload.get("objectId")
    if not subscription or object_id is None:
        raise ValueError("HubSpot event needs subscriptionType and objectId")

    crm = runtime.providers.require_crm()

    if subscription in CONTACT_EVENTS:
        contact = normalize_contact(await crm.get_contact(str(object_id)))
        await runtime.processor.process_contact(contact)
        for task in contact_tasks(contact):
            await runtime.tasks.create(task)
        if subscription == "contact.creation":
            runtime.proactive.dispatch("contact_created", contact)
    elif subscription == "note.creation":
        note = normalize_note(await crm.get_note(str(object_id)))
        await runtime.processor.process_note(note)
        for task in note_tasks(note):
            await runtime.tasks.create(task)
    else:
        logger.info("Unhandled HubSpot subscription type: %s", subscription)
