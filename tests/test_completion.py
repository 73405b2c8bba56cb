"""Tests for the completion providers."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import openai
import pytest

from advisor.errors import CompletionError, ModelUnavailableError, QuotaExceededError
from advisor.llm.client import (
    AnthropicCompletionProvider,
    OpenAICompletionProvider,
    _to_anthropic_messages,
    _to_anthropic_tools,
    _translate_error,
    create_completion_provider,
)

TOOL = {
    "type": "function",
    "function": {
        "name": "search_emails",
        "description": "Search Gmail",
        "parameters": {"type": "object", "properties": {"query": {"type": "string"}}},
    },
}


class _StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"status {status_code}")
        self.status_code = status_code


# -- Error mapping -----------------------------------------------------------------


class TestTranslateError:
    def test_quota(self):
        assert isinstance(_translate_error(_StatusError(429)), QuotaExceededError)

    def test_not_found(self):
        assert isinstance(_translate_error(_StatusError(404)), ModelUnavailableError)

    def test_other(self):
        err = _translate_error(_StatusError(500))
        assert type(err) is CompletionError
        assert str(err) == "status 500"


# -- OpenAI ------------------------------------------------------------------------


def _openai_response(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestOpenAI:
    async def test_text_reply(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response("Hi there"))
        provider = OpenAICompletionProvider(api_key="sk-test", model="gpt-test")

        with patch.object(provider, "_get_client", return_value=client):
            completion = await provider.complete([{"role": "user", "content": "hi"}])

        assert completion.content == "Hi there"
        assert completion.tool_calls == []
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert "tools" not in kwargs

    async def test_tool_calls(self):
        tc = SimpleNamespace(
            id="call_1",
            function=SimpleNamespace(name="search_emails", arguments='{"query": "sara"}'),
        )
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response(None, [tc]))
        provider = OpenAICompletionProvider(api_key="sk-test")

        with patch.object(provider, "_get_client", return_value=client):
            completion = await provider.complete([{"role": "user", "content": "x"}], [TOOL])

        assert completion.content == ""
        assert completion.tool_calls[0].id == "call_1"
        assert completion.tool_calls[0].name == "search_emails"
        assert json.loads(completion.tool_calls[0].arguments) == {"query": "sara"}
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["tools"] == [TOOL]
        assert kwargs["tool_choice"] == "auto"

    async def test_rate_limit(self):
        response = MagicMock(status_code=429, headers={})
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=openai.RateLimitError("slow down", response=response, body=None)
        )
        provider = OpenAICompletionProvider(api_key="sk-test")

        with (
            patch.object(provider, "_get_client", return_value=client),
            pytest.raises(QuotaExceededError),
        ):
            await provider.complete([{"role": "user", "content": "x"}])


# -- Anthropic ---------------------------------------------------------------------


class TestAnthropicConversion:
    def test_tools(self):
        assert _to_anthropic_tools([TOOL]) == [
            {
                "name": "search_emails",
                "description": "Search Gmail",
                "input_schema": TOOL["function"]["parameters"],
            }
        ]

    def test_system_messages_are_joined(self):
        system, messages = _to_anthropic_messages(
            [
                {"role": "system", "content": "one"},
                {"role": "system", "content": "two"},
                {"role": "user", "content": "hi"},
            ]
        )
        assert system == "one\n\ntwo"
        assert messages == [{"role": "user", "content": "hi"}]

    def test_tool_round_trip(self):
        _, messages = _to_anthropic_messages(
            [
                {"role": "user", "content": "find"},
                {
                    "role": "assistant",
                    "content": "",
                    "tool_calls": [
                        {"id": "c1", "type": "function", "function": {"name": "a", "arguments": '{"x": 1}'}},
                        {"id": "c2", "type": "function", "function": {"name": "b", "arguments": "not json"}},
                    ],
                },
                {"role": "tool", "content": "r1", "tool_call_id": "c1"},
                {"role": "tool", "content": "r2", "tool_call_id": "c2"},
            ]
        )

        assert len(messages) == 3
        blocks = messages[1]["content"]
        assert blocks[0] == {"type": "tool_use", "id": "c1", "name": "a", "input": {"x": 1}}
        assert blocks[1]["input"] == {}
        results = messages[2]
        assert results["role"] == "user"
        assert [b["tool_use_id"] for b in results["content"]] == ["c1", "c2"]

    def test_leading_assistant_gets_user_turn(self):
        _, messages = _to_anthropic_messages([{"role": "assistant", "content": "earlier reply"}])
        assert messages[0]["role"] == "user"
        assert messages[1] == {"role": "assistant", "content": "earlier reply"}


class TestAnthropic:
    async def test_text_and_tool_use(self):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Let me check."),
                SimpleNamespace(type="tool_use", id="tu_1", name="search_emails", input={"query": "x"}),
            ]
        )
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=response)
        provider = AnthropicCompletionProvider(api_key="sk-ant", model="claude-test")

        with patch.object(provider, "_get_client", return_value=client):
            completion = await provider.complete(
                [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}],
                [TOOL],
            )

        assert completion.content == "Let me check."
        assert completion.tool_calls[0].id == "tu_1"
        assert json.loads(completion.tool_calls[0].arguments) == {"query": "x"}
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["tools"][0]["name"] == "search_emails"

    async def test_not_found(self):
        response = MagicMock(status_code=404, headers={})
        client = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=anthropic.NotFoundError("no model", response=response, body=None)
        )
        provider = AnthropicCompletionProvider(api_key="sk-ant")

        with (
            patch.object(provider, "_get_client", return_value=client),
            pytest.raises(ModelUnavailableError),
        ):
            await provider.complete([{"role": "user", "content": "hi"}])


# -- Factory -----------------------------------------------------------------------


class TestFactory:
    def test_no_key_means_offline(self, monkeypatch):
        monkeypatch.setattr("advisor.config.settings.llm_provider", "openai")
        monkeypatch.setattr("advisor.config.settings.openai_api_key", "")
        assert create_completion_provider() is None

    def test_openai(self, monkeypatch):
        monkeypatch.setattr("advisor.config.settings.llm_provider", "openai")
        monkeypatch.setattr("advisor.config.settings.openai_api_key", "sk-test")
        assert isinstance(create_completion_provider(), OpenAICompletionProvider)

    def test_anthropic(self, monkeypatch):
        monkeypatch.setattr("advisor.config.settings.llm_provider", "anthropic")
        monkeypatch.setattr("advisor.config.settings.anthropic_api_key", "sk-ant")
        assert isinstance(create_completion_provider(), AnthropicCompletionProvider)

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr("advisor.config.settings.llm_provider", "other")
        monkeypatch.setattr("advisor.config.settings.openai_api_key", "sk-test")
        with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
            create_completion_provider()
