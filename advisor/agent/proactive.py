"""Proactive entry point — lets external events drive the agent.

Event sources (new email, calendar event, CRM contact) call ``handle`` or
``dispatch`` with a trigger name and the event data.  If a standing
instruction applies, a system-authored message is run through a fresh
``ConversationAgent``, so concurrent events never share history.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from advisor.agent.conversation import ConversationAgent
    from advisor.agent.models import TurnResult
    from advisor.instructions.store import Instruction, InstructionStore

logger = logging.getLogger(__name__)

# Words that make an instruction relevant to every trigger.
TRIGGER_KEYWORDS = ("when", "email", "contact", "calendar")


def describe_event(trigger: str, data: dict[str, Any]) -> str:
    """One-line description of the event that fired."""
    if trigger == "email_received":
        return f"New email received from {data.get('from', '')} with subject: {data.get('subject', '')}"
    if trigger == "contact_created":
        return f"New contact created in HubSpot: {data.get('email', '')}"
    if trigger == "calendar_event_created":
        return f"New calendar event created: {data.get('title', '')}"
    return f"System event: {trigger}"


def select_instructions(trigger: str, instructions: Sequence[Instruction]) -> list[Instruction]:
    """Instructions mentioning the trigger name or one of ``TRIGGER_KEYWORDS``."""
    selected = []
    for instruction in instructions:
        text = instruction.instruction.lower()
        if trigger.lower() in text or any(word in text for word in TRIGGER_KEYWORDS):
            selected.append(instruction)
    return selected


def build_proactive_message(
    trigger: str, data: dict[str, Any], instructions: Sequence[Instruction]
) -> str | None:
    """Synthesize the agent prompt for an event, or None if no instruction applies."""
    relevant = select_instructions(trigger, instructions)
    if not relevant:
        return None
    instruction_text = "\n".join(i.instruction for i in relevant)
    return (
        f"{describe_event(trigger, data)}\n\n"
        f"Consider these ongoing instructions:\n{instruction_text}\n\n"
        "Should any action be taken?"
    )


class ProactiveTriggerHandler:
    """Turns events into autonomous agent turns.

    *agent_factory* builds a new agent per event; the handler is safe to call
    concurrently.
    """

    def __init__(
        self,
        instructions: InstructionStore,
        agent_factory: Callable[[], ConversationAgent],
    ) -> None:
        self._instructions = instructions
        self._agent_factory = agent_factory
        self._background: set[asyncio.Task] = set()

    async def handle(self, trigger: str, data: dict[str, Any]) -> TurnResult | None:
        """Run the agent for one event. Returns None when nothing applies."""
        try:
            instructions = await self._instructions.get_active()
        except Exception:
            logger.exception("Proactive trigger %s: could not load instructions", trigger)
            return None

        message = build_proactive_message(trigger, data, instructions)
        if message is None:
            logger.info("Proactive trigger %s: no applicable instructions", trigger)
            return None

        logger.info("Proactive trigger %s: running agent", trigger)
        agent = self._agent_factory()
        result = await agent.process_message(message)
        logger.info(
            "Proactive trigger %s finished (%s, %d tool call(s))",
            trigger,
            result.status,
            len(result.tool_results),
        )
        return result

    def dispatch(self, trigger: str, data: dict[str, Any]) -> asyncio.Task:
        """Schedule ``handle`` in the background and return the task."""
        task = asyncio.create_task(self._run(trigger, data))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _run(self, trigger: str, data: dict[str, Any]) -> TurnResult | None:
        """Execute a proactive trigger with error logging."""
        try:
            return await self.handle(trigger, data)
        except Exception:
            logger.exception("Proactive handler failed: trigger=%s", trigger)
            return None

    async def drain(self) -> None:
        """Wait for all dispatched triggers to finish."""
        if self._background:
            await asyncio.gather(*list(self._background))
