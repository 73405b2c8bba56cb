"""Conversation turn and turn-result models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from advisor.llm.client import ToolCall
    from advisor.outcome import Status
    from advisor.tools.base import ToolResult


class TurnState(enum.Enum):
    """Where the agent is within a single turn."""

    IDLE = "idle"
    RETRIEVING_CONTEXT = "retrieving_context"
    AWAITING_COMPLETION = "awaiting_completion"
    EXECUTING_TOOLS = "executing_tools"
    AWAITING_FINAL_COMPLETION = "awaiting_final_completion"
    RESPONDING = "responding"


@dataclass
class Turn:
    """One entry of conversation history, replayed to the model in order."""

    role: str  # "system", "user", "assistant" or "tool"
    content: str = ""
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    def to_message(self) -> dict[str, Any]:
        """Render as a chat-completions message."""
        message: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_message() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            message["tool_call_id"] = self.tool_call_id
        return message


@dataclass
class ToolCallResult:
    """The outcome of one tool call, tagged with the call that produced it."""

    tool_call_id: str
    tool_name: str
    result: ToolResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "result": self.result.to_dict(),
        }


@dataclass
class TurnResult:
    """What ``ConversationAgent.process_message`` returns.

    ``response`` is never empty.  ``status`` is ``degraded`` when the reply
    came from the offline table or context retrieval failed.
    """

    response: str
    tool_results: list[ToolCallResult] = field(default_factory=list)
    context: str = ""
    error: str | None = None
    status: Status = "success"
