"""Tool schemas handed to the completion provider.

This list is the wire contract with the model: names, parameter names and
required fields must stay stable.
"""

from typing import Any

TOOLS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "search_emails",
            "description": "Search for emails in Gmail",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query for emails"},
                    "maxResults": {
                        "type": "number",
                        "description": "Maximum number of results to return",
                        "default": 10,
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "send_email",
            "description": "Send an email via Gmail",
            "parameters": {
                "type": "object",
                "properties": {
                    "to": {"type": "string", "description": "Recipient email address"},
                    "subject": {"type": "string", "description": "Email subject"},
                    "body": {"type": "string", "description": "Email body content"},
                    "threadId": {
                        "type": "string",
                        "description": "Gmail thread ID to reply to (optional)",
                    },
                },
                "required": ["to", "subject", "body"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "search_hubspot_contacts",
            "description": "Search for contacts in HubSpot",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query for contacts"},
                    "limit": {
                        "type": "number",
                        "description": "Maximum number of results to return",
                        "default": 10,
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "create_hubspot_contact",
            "description": "Create a new contact in HubSpot",
            "parameters": {
                "type": "object",
                "properties": {
                    "email": {"type": "string", "description": "Contact email address"},
                    "firstName": {"type": "string", "description": "Contact first name"},
                    "lastName": {"type": "string", "description": "Contact last name"},
                    "company": {"type": "string", "description": "Contact company"},
                    "phone": {"type": "string", "description": "Contact phone number"},
                },
                "required": ["email"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "add_hubspot_note",
            "description": "Add a note to a HubSpot contact",
            "parameters": {
                "type": "object",
                "properties": {
                    "contactId": {"type": "string", "description": "HubSpot contact ID"},
                    "content": {"type": "string", "description": "Note content"},
                },
                "required": ["contactId", "content"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "search_calendar_events",
            "description": "Search for calendar events",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query for events"},
                    "timeMin": {
                        "type": "string",
                        "description": "Start time for search (ISO format)",
                    },
                    "timeMax": {
                        "type": "string",
                        "description": "End time for search (ISO format)",
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "create_calendar_event",
            "description": "Create a new calendar event",
            "parameters": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Event title"},
                    "description": {"type": "string", "description": "Event description"},
                    "start": {"type": "string", "description": "Event start time (ISO format)"},
                    "end": {"type": "string", "description": "Event end time (ISO format)"},
                    "attendees": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of attendee email addresses",
                    },
                    "location": {"type": "string", "description": "Event location"},
                },
                "required": ["title", "start", "end"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "create_task",
            "description": "Create a new task for the agent to handle",
            "parameters": {
                "type": "object",
                "properties": {
                    "description": {"type": "string", "description": "Task description"},
                    "context": {
                        "type": "object",
                        "description": "Additional context for the task",
                    },
                },
                "required": ["description"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "update_task",
            "description": "Update an existing task",
            "parameters": {
                "type": "object",
                "properties": {
                    "taskId": {"type": "number", "description": "Task ID to update"},
                    "status": {
                        "type": "string",
                        "description": "New task status",
                        "enum": ["pending", "in_progress", "completed", "failed"],
                    },
                    "result": {"type": "object", "description": "Task result data"},
                },
                "required": ["taskId"],
            },
        },
    },
]


def valid_tool_schemas(schemas: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep only well-formed function schemas (type, name and parameters present)."""
    return [
        s
        for s in schemas
        if s.get("type") == "function"
        and isinstance(s.get("function"), dict)
        and s["function"].get("name")
        and s["function"].get("parameters")
    ]


def schema_by_name(schemas: list[dict[str, Any]] | None = None) -> dict[str, dict[str, Any]]:
    """Index function schemas by tool name."""
    if schemas is None:
        schemas = TOOLS
    return {s["function"]["name"]: s for s in valid_tool_schemas(schemas)}
