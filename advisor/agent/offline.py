"""Canned replies used when no language model is reachable."""

from __future__ import annotations

from advisor.agent.models import TurnResult

OFFLINE_CONTEXT = "Offline mode - language model unavailable"

# Checked in order; the first keyword found in the message wins.
OFFLINE_RESPONSES: dict[str, str] = {
    "hello": "Hello! I'm your AI assistant. I'm currently in offline mode "
    "because the language model service is unavailable.",
    "help": "I can help you with various tasks. Currently, I'm in offline mode, "
    "but I can still provide basic assistance.",
    "test": "I'm working! This is a test response from offline mode.",
}

DEFAULT_OFFLINE_RESPONSE = (
    "I understand your message. I'm currently in offline mode because the language "
    "model service is unavailable. Please try again later when the service is restored."
)


def offline_reply(message: str) -> str:
    lowered = message.lower()
    for keyword, reply in OFFLINE_RESPONSES.items():
        if keyword in lowered:
            return reply
    return DEFAULT_OFFLINE_RESPONSE


def offline_response(message: str, error: str | None = None) -> TurnResult:
    """Build a degraded turn result from the keyword table.

    When *error* is given it is appended as ``Error: <text>``.
    """
    response = offline_reply(message)
    if error:
        response += f"\n\nError: {error}"
    return TurnResult(
        response=response,
        context=OFFLINE_CONTEXT,
        error=error,
        status="degraded",
    )
