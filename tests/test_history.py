"""Tests for ConversationHistory."""

from advisor.agent.history import ConversationHistory
from advisor.agent.models import Turn
from advisor.llm.client import ToolCall


def test_add_and_len() -> None:
    history = ConversationHistory(window_size=10)
    history.add("user", "hi")
    history.add("assistant", "hello")

    assert len(history) == 2
    assert history.to_api_messages() == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_window_keeps_full_history() -> None:
    history = ConversationHistory(window_size=3)
    for i in range(6):
        history.add("user" if i % 2 == 0 else "assistant", f"m{i}")

    assert len(history) == 6
    assert [t.content for t in history.recent()] == ["m3", "m4", "m5"]
    assert [t.content for t in history.recent(1)] == ["m5"]
    assert history.recent(0) == []


def test_window_drops_orphaned_tool_turns() -> None:
    history = ConversationHistory(window_size=3)
    history.add("user", "find emails")
    history.append(Turn(role="assistant", tool_calls=[ToolCall(id="c1", name="search_emails")]))
    history.append(Turn(role="tool", content="{}", tool_call_id="c1"))
    history.append(Turn(role="tool", content="{}", tool_call_id="c2"))
    history.add("assistant", "done")

    assert [t.role for t in history.recent()] == ["assistant"]


def test_tool_turn_messages() -> None:
    call = ToolCall(id="c1", name="search_emails", arguments='{"query": "x"}')
    assistant = Turn(role="assistant", tool_calls=[call]).to_message()
    tool = Turn(role="tool", content='{"success": true}', tool_call_id="c1").to_message()

    assert assistant["tool_calls"] == [
        {"id": "c1", "type": "function", "function": {"name": "search_emails", "arguments": '{"query": "x"}'}}
    ]
    assert tool == {"role": "tool", "content": '{"success": true}', "tool_call_id": "c1"}


def test_clear_returns_count() -> None:
    history = ConversationHistory()
    history.add("user", "a")
    history.add("assistant", "b")

    assert history.clear() == 2
    assert len(history) == 0
    assert history.clear() == 0
