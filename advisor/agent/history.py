"""In-memory conversation history owned by one agent."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from advisor.agent.models import Turn
from advisor.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ConversationHistory:
    """Append-only list of turns; only ``clear`` removes entries.

    The full history is kept. ``recent`` returns the window replayed to the
    model.
    """

    turns: list[Turn] = field(default_factory=list)
    window_size: int = field(default_factory=lambda: settings.history_window)

    def append(self, turn: Turn) -> None:
        self.turns.append(turn)

    def add(self, role: str, content: str) -> None:
        self.append(Turn(role=role, content=content))

    def clear(self) -> int:
        """Clear all turns. Returns the count of cleared turns."""
        count = len(self.turns)
        self.turns.clear()
        return count

    def recent(self, n: int | None = None) -> list[Turn]:
        """The last *n* turns (default: the window size).

        Tool turns at the start of the window are dropped, since the
        assistant turn that requested them fell outside it.
        """
        n = self.window_size if n is None else n
        if n <= 0:
            return []
        window = self.turns[-n:]
        start = 0
        while start < len(window) and window[start].role == "tool":
            start += 1
        return window[start:]

    def to_api_messages(self, n: int | None = None) -> list[dict[str, Any]]:
        """Format the recent window as chat-completions messages."""
        return [t.to_message() for t in self.recent(n)]

    def __len__(self) -> int:
        return len(self.turns)
