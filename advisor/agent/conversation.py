"""ConversationAgent — one assistant turn from user message to final reply.

A turn runs through these states::

    IDLE -> RETRIEVING_CONTEXT -> AWAITING_COMPLETION -> RESPONDING -> IDLE
                                        |
                                        +-> EXECUTING_TOOLS -> AWAITING_FINAL_COMPLETION
                                                -> RESPONDING -> IDLE

The agent owns its history and instruction cache, so callers must not run
two turns on the same instance at once.  Use one agent per conversation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from advisor.agent.history import ConversationHistory
from advisor.agent.models import ToolCallResult, Turn, TurnResult, TurnState
from advisor.agent.offline import offline_response
from advisor.agent.summary import summarize_tool_results
from advisor.config import settings
from advisor.llm.prompt import build_followup_messages, build_messages
from advisor.tools.base import ToolResult
from advisor.tools.definitions import valid_tool_schemas

if TYPE_CHECKING:
    from advisor.instructions.store import Instruction, InstructionStore
    from advisor.integrations.base import Providers
    from advisor.llm.client import CompletionProvider, ToolCall
    from advisor.rag.retriever import ContextRetriever
    from advisor.rag.store import EmbeddingRecord
    from advisor.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "I wasn't able to produce a response. Please try again."


class ConversationAgent:
    """Runs assistant turns for a single conversation."""

    def __init__(
        self,
        completion: CompletionProvider | None,
        retriever: ContextRetriever | None,
        instructions: InstructionStore | None,
        registry: ToolRegistry,
        providers: Providers | None = None,
        *,
        context_limit: int | None = None,
        history: ConversationHistory | None = None,
    ) -> None:
        self._completion = completion
        self._retriever = retriever
        self._instruction_store = instructions
        self._registry = registry
        self._providers = providers
        self._context_limit = context_limit or settings.context_limit
        self.history = history or ConversationHistory()
        self.active_instructions: list[Instruction] = []
        self.state = TurnState.IDLE

    @property
    def online(self) -> bool:
        return self._completion is not None

    # -- Standing instructions -------------------------------------------------

    async def load_instructions(self) -> list[Instruction]:
        """Refresh the instruction cache. On failure the previous cache is kept."""
        if self._instruction_store is None:
            return self.active_instructions
        try:
            self.active_instructions = await self._instruction_store.get_active()
        except Exception:
            logger.exception("Failed to load standing instructions, keeping cached copy")
        return self.active_instructions

    async def add_instruction(self, text: str) -> Instruction:
        """Persist a new standing instruction and refresh the cache."""
        if self._instruction_store is None:
            raise RuntimeError("No instruction store configured")
        instruction = await self._instruction_store.add(text)
        await self.load_instructions()
        return instruction

    def clear_history(self) -> int:
        return self.history.clear()

    # -- Turn ------------------------------------------------------------------

    async def process_message(self, message: str) -> TurnResult:
        """Run one turn. Never raises; the worst case is an offline reply."""
        completion = self._completion
        if completion is None:
            logger.info("No language model configured, answering offline")
            return offline_response(message)

        tool_results: list[ToolCallResult] = []
        try:
            return await self._run_turn(completion, message, tool_results)
        except Exception as exc:
            logger.warning("Turn failed, falling back to offline reply: %s", exc, exc_info=True)
            result = offline_response(message, str(exc) or exc.__class__.__name__)
            result.tool_results = tool_results
            return result
        finally:
            self.state = TurnState.IDLE

    async def _run_turn(
        self,
        completion: CompletionProvider,
        message: str,
        tool_results: list[ToolCallResult],
    ) -> TurnResult:
        await self.load_instructions()

        self.state = TurnState.RETRIEVING_CONTEXT
        records, retrieval_error = await self._retrieve(message)

        messages = build_messages(
            message,
            instructions=self.active_instructions,
            context=records,
            history=self.history.to_api_messages(),
            max_context_tokens=settings.context_max_tokens,
        )
        tools = valid_tool_schemas(self._registry.get_schemas())

        self.state = TurnState.AWAITING_COMPLETION
        reply = await completion.complete(messages, tools or None)
        self.history.add("user", message)

        if not reply.tool_calls:
            self.state = TurnState.RESPONDING
            response = reply.content or EMPTY_RESPONSE
            self.history.add("assistant", response)
            return TurnResult(
                response=response,
                context=(
                    "Found relevant context from knowledge base"
                    if records
                    else "No relevant context found"
                ),
                error=retrieval_error,
                status="degraded" if retrieval_error else "success",
            )

        self.state = TurnState.EXECUTING_TOOLS
        tool_results.extend(await self._execute_tools(reply.tool_calls))

        self.history.append(
            Turn(role="assistant", content=reply.content, tool_calls=reply.tool_calls)
        )
        for item in tool_results:
            self.history.append(
                Turn(role="tool", content=item.result.to_content(), tool_call_id=item.tool_call_id)
            )

        summary = summarize_tool_results(tool_results)
        self.state = TurnState.AWAITING_FINAL_COMPLETION
        final = await completion.complete(build_followup_messages(message, summary))

        self.state = TurnState.RESPONDING
        response = final.content or EMPTY_RESPONSE
        self.history.add("assistant", response)
        return TurnResult(
            response=response,
            tool_results=tool_results,
            context=summary,
            error=retrieval_error,
            status="degraded" if retrieval_error else "success",
        )

    async def _retrieve(self, message: str) -> tuple[list[EmbeddingRecord], str | None]:
        """Context records for *message*, plus an error note if retrieval degraded."""
        if self._retriever is None:
            return [], None
        outcome = await self._retriever.retrieve(message, limit=self._context_limit)
        if outcome.status != "success":
            logger.warning("Context retrieval %s: %s", outcome.status, outcome.error)
        return outcome.unwrap_or([]), outcome.error

    # -- Tools -----------------------------------------------------------------

    async def _execute_tools(self, calls: list[ToolCall]) -> list[ToolCallResult]:
        """Run all calls concurrently. Results keep the order and ids of *calls*."""
        results = await asyncio.gather(*(self._execute_one(call) for call in calls))
        return list(results)

    async def _execute_one(self, call: ToolCall) -> ToolCallResult:
        try:
            arguments: Any = json.loads(call.arguments or "{}")
        except json.JSONDecodeError as exc:
            result = ToolResult(error=f"Invalid JSON arguments for {call.name}: {exc}")
        else:
            if not isinstance(arguments, dict):
                result = ToolResult(error=f"Arguments for {call.name} must be a JSON object")
            else:
                try:
                    result = await self._registry.execute(call.name, arguments, self._providers)
                except Exception as exc:
                    logger.exception("Tool '%s' raised past the registry", call.name)
                    result = ToolResult(error=str(exc) or f"Tool '{call.name}' failed")
        return ToolCallResult(tool_call_id=call.id, tool_name=call.name, result=result)
