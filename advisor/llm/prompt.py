"""Prompt assembly for a conversation turn."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from advisor.rag.retriever import build_context

if TYPE_CHECKING:
    from collections.abc import Sequence

    from advisor.instructions.store import Instruction
    from advisor.rag.store import EmbeddingRecord

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

DEFAULT_SYSTEM_PROMPT = """\
You are an AI financial advisor assistant that helps manage client relationships, \
emails, and scheduling. You have access to these tools:

**Gmail Tools:**
- search_emails: Search for emails in Gmail using queries
- send_email: Send emails to recipients

**HubSpot Tools:**
- search_hubspot_contacts: Search for contacts in HubSpot
- create_hubspot_contact: Create new contacts in HubSpot
- add_hubspot_note: Add notes to HubSpot contacts

**Calendar Tools:**
- search_calendar_events: Search for calendar events
- create_calendar_event: Create new calendar events

**Task Management:**
- create_task: Create new tasks
- update_task: Update task status

**Your capabilities:**
- Answer questions about clients using information from emails and HubSpot
- Schedule appointments and manage calendar events
- Send emails and manage email threads
- Create and update HubSpot contacts and notes
- Handle multi-step tasks that require waiting for responses
- Remember ongoing instructions and apply them proactively

**Important:** When users ask about emails, contacts, or calendar events, ALWAYS use \
the appropriate tools to search for and retrieve the information. Do not say you \
cannot access emails - you have access to Gmail, HubSpot, and Calendar APIs.

When a user asks a question, search the knowledge base for relevant context and \
provide a helpful answer. When asked to perform actions, use the available tools to \
accomplish the task.

Always be professional, helpful, and proactive in managing client relationships."""


def _read_config(filename: str) -> str:
    """Read a config markdown file, returning empty string if missing."""
    path = CONFIG_DIR / filename
    if path.exists():
        return path.read_text(encoding="utf-8")
    return ""


def system_prompt() -> str:
    """The fixed system instruction block (``config/SYSTEM_PROMPT.md`` overrides it)."""
    return _read_config("SYSTEM_PROMPT.md").strip() or DEFAULT_SYSTEM_PROMPT


def format_instructions(instructions: Sequence[Instruction]) -> str:
    if not instructions:
        return ""
    text = "\n".join(i.instruction for i in instructions)
    return f"Ongoing instructions to follow:\n{text}"


def format_context(records: Sequence[EmbeddingRecord], max_tokens: int = 4000) -> str:
    context = build_context(records, max_tokens)
    if not context:
        return ""
    return f"Relevant information from your knowledge base:\n{context}"


def build_messages(
    user_message: str,
    *,
    instructions: Sequence[Instruction] = (),
    context: Sequence[EmbeddingRecord] = (),
    history: Sequence[dict[str, Any]] = (),
    max_context_tokens: int = 4000,
) -> list[dict[str, Any]]:
    """Assemble the message list for the first completion request of a turn.

    Order: system prompt, standing instructions, knowledge-base context,
    recent history, then the new user message.
    """
    messages: list[dict[str, Any]] = [{"role": "system", "content": system_prompt()}]

    instructions_text = format_instructions(instructions)
    if instructions_text:
        messages.append({"role": "system", "content": instructions_text})

    context_text = format_context(context, max_context_tokens)
    if context_text:
        messages.append({"role": "system", "content": context_text})

    messages.extend(history)
    messages.append({"role": "user", "content": user_message})
    return messages


def build_followup_messages(user_message: str, tool_summary: str) -> list[dict[str, Any]]:
    """Messages for the second request of a turn, after tools have run.

    Tool output is presented as text rather than tool-role messages so the
    request carries no provider-specific tool message shapes.
    """
    return [
        {"role": "system", "content": system_prompt()},
        {
            "role": "system",
            "content": (
                "Tool results have been obtained. Please analyze and respond to the "
                f"user's request based on these results:\n\n{tool_summary}"
            ),
        },
        {"role": "user", "content": user_message or "Please analyze the search results"},
    ]
