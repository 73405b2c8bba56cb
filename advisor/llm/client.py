"""Async completion providers with tool calling.

Messages and tool schemas use the chat-completions shape throughout the
agent (``{"role": ..., "content": ..., "tool_calls": [...]}`` and
``{"type": "function", "function": {...}}``).  The OpenAI provider passes
them straight through; the Anthropic provider converts them to the Messages
API on the way out and back.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from advisor.config import settings
from advisor.errors import CompletionError, ModelUnavailableError, QuotaExceededError

if TYPE_CHECKING:
    import anthropic
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool invocation requested by the model. ``arguments`` is raw JSON."""

    id: str
    name: str
    arguments: str = "{}"

    def to_message(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class Completion:
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)


class CompletionProvider(Protocol):
    """Produces the next assistant message for a conversation.

    Raises ``QuotaExceededError`` on rate limiting, ``ModelUnavailableError``
    when the model cannot be found, and ``CompletionError`` otherwise.
    """

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> Completion: ...


def _translate_error(exc: Exception) -> CompletionError:
    """Map an SDK exception onto the completion error taxonomy."""
    status = getattr(exc, "status_code", None)
    if status == 429:
        return QuotaExceededError(f"Model quota exceeded: {exc}")
    if status == 404:
        return ModelUnavailableError(f"Model not available: {exc}")
    return CompletionError(str(exc) or exc.__class__.__name__)


# -- OpenAI ------------------------------------------------------------------


class OpenAICompletionProvider:
    """Chat completions against the OpenAI API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.openai_chat_model
        self.temperature = settings.completion_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.completion_max_tokens
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Lazily initialise the AsyncOpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> Completion:
        import openai

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await self._get_client().chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise _translate_error(exc) from exc

        message = response.choices[0].message
        return Completion(
            content=message.content or "",
            tool_calls=[
                ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "{}")
                for tc in (message.tool_calls or [])
            ],
        )


# -- Anthropic ---------------------------------------------------------------


def _to_anthropic_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "name": t["function"]["name"],
            "description": t["function"].get("description", ""),
            "input_schema": t["function"]["parameters"],
        }
        for t in tools
    ]


def _to_anthropic_messages(
    messages: list[dict[str, Any]],
) -> tuple[str, list[dict[str, Any]]]:
    """Split out system text and convert the rest to Messages API turns.

    Consecutive tool results are merged into a single user turn, as the
    Messages API requires.
    """
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []

    for msg in messages:
        role = msg["role"]
        content = msg.get("content") or ""

        if role == "system":
            system_parts.append(content)
        elif role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": msg["tool_call_id"],
                "content": content,
            }
            prev = converted[-1] if converted else None
            if prev and prev["role"] == "user" and isinstance(prev["content"], list):
                prev["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif role == "assistant" and msg.get("tool_calls"):
            blocks: list[dict[str, Any]] = []
            if content:
                blocks.append({"type": "text", "text": content})
            for call in msg["tool_calls"]:
                fn = call["function"]
                try:
                    tool_input = json.loads(fn.get("arguments") or "{}")
                except json.JSONDecodeError:
                    tool_input = {}
                blocks.append({
                    "type": "tool_use",
                    "id": call["id"],
                    "name": fn["name"],
                    "input": tool_input,
                })
            converted.append({"role": "assistant", "content": blocks})
        else:
            converted.append({"role": role, "content": content})

    # The Messages API requires the conversation to open with a user turn
    if converted and converted[0]["role"] != "user":
        converted.insert(0, {"role": "user", "content": "(earlier conversation omitted)"})

    return "\n\n".join(system_parts), converted


class AnthropicCompletionProvider:
    """Claude Messages API behind the chat-completions message shape."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.claude_model
        self.temperature = settings.completion_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.completion_max_tokens
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Lazily initialise the Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> Completion:
        import anthropic

        system, converted = _to_anthropic_messages(messages)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": converted,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = _to_anthropic_tools(tools)
            kwargs["tool_choice"] = {"type": "auto"}

        try:
            response = await self._get_client().messages.create(**kwargs)
        except anthropic.AnthropicError as exc:
            raise _translate_error(exc) from exc

        text = "".join(b.text for b in response.content if b.type == "text")
        calls = [
            ToolCall(id=b.id, name=b.name, arguments=json.dumps(b.input))
            for b in response.content
            if b.type == "tool_use"
        ]
        return Completion(content=text, tool_calls=calls)


def create_completion_provider() -> CompletionProvider | None:
    """Build the configured provider, or None when no credential is set."""
    if not settings.llm_credential():
        logger.warning(
            "No API key for LLM provider '%s' — assistant will run in offline mode",
            settings.llm_provider,
        )
        return None
    if settings.llm_provider == "anthropic":
        return AnthropicCompletionProvider()
    if settings.llm_provider == "openai":
        return OpenAICompletionProvider()
    msg = f"Unknown LLM_PROVIDER '{settings.llm_provider}' (expected 'openai' or 'anthropic')"
    raise ValueError(msg)
