"""Render tool results as plain text for the follow-up completion request."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from advisor.integrations.gmail import decode_body_data, extract_headers

if TYPE_CHECKING:
    from collections.abc import Sequence

    from advisor.agent.models import ToolCallResult


def _email_content(email: dict[str, Any]) -> str | None:
    payload = email.get("payload") or {}
    data = (payload.get("body") or {}).get("data")
    if data:
        return decode_body_data(data)
    for part in payload.get("parts") or []:
        part_data = (part.get("body") or {}).get("data")
        if part.get("mimeType") == "text/plain" and part_data:
            return decode_body_data(part_data)
    return None


def _summarize_emails(emails: list[dict[str, Any]]) -> str:
    if not emails:
        return "\nNo emails found matching the search criteria.\n"

    out = f"\nEmail Search Results ({len(emails)} emails found):\n"
    for index, email in enumerate(emails, start=1):
        headers = extract_headers(email)
        out += f"\nEmail {index}:\n"
        out += f"From: {headers.get('From', 'Unknown sender')}\n"
        out += f"Subject: {headers.get('Subject', 'No subject')}\n"
        out += f"Date: {headers.get('Date', 'Unknown date')}\n"
        if email.get("snippet"):
            out += f"Snippet: {email['snippet']}\n"
        content = _email_content(email)
        if content is not None:
            out += f"Content: {content}\n"
        out += "\n"
    return out


def _summarize_contacts(contacts: list[dict[str, Any]]) -> str:
    if not contacts:
        return "\nNo HubSpot contacts found matching the search criteria.\n"

    out = f"\nHubSpot Contact Search Results ({len(contacts)} contacts found):\n"
    for index, contact in enumerate(contacts, start=1):
        props = contact.get("properties") or {}
        out += f"\nContact {index}:\n"
        out += f"Name: {props.get('firstname') or ''} {props.get('lastname') or ''}\n"
        out += f"Email: {props.get('email') or 'No email'}\n"
        out += f"Company: {props.get('company') or 'No company'}\n"
        out += f"Phone: {props.get('phone') or 'No phone'}\n"
    return out


def _summarize_events(events: list[dict[str, Any]]) -> str:
    if not events:
        return "\nNo calendar events found matching the search criteria.\n"

    out = f"\nCalendar Event Search Results ({len(events)} events found):\n"
    for index, event in enumerate(events, start=1):
        start = event.get("start") or {}
        end = event.get("end") or {}
        out += f"\nEvent {index}:\n"
        out += f"Title: {event.get('summary') or 'No title'}\n"
        out += f"Start: {start.get('dateTime') or start.get('date') or 'No start time'}\n"
        out += f"End: {end.get('dateTime') or end.get('date') or 'No end time'}\n"
        out += f"Description: {event.get('description') or 'No description'}\n"
    return out


def summarize_tool_results(results: Sequence[ToolCallResult]) -> str:
    """Deterministic natural-language rendering of a turn's tool results."""
    out = ""
    for item in results:
        result = item.result
        data = result.data or {}
        if not result.success:
            out += f"\nTool {item.tool_name} failed: {result.error or 'Unknown error'}\n"
        elif item.tool_name == "search_emails":
            out += _summarize_emails(data.get("emails") or [])
        elif item.tool_name == "search_hubspot_contacts":
            out += _summarize_contacts(data.get("contacts") or [])
        elif item.tool_name == "search_calendar_events":
            out += _summarize_events(data.get("events") or [])
        else:
            out += f"\nTool {item.tool_name} executed successfully.\n"
            if data:
                out += f"Result: {json.dumps(data, indent=2, default=str)}\n"
    return out
