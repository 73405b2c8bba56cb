"""Trigger handler registry — central catalog for external event sources."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from advisor.app import Runtime

logger = logging.getLogger(__name__)

# Handler signature: async (payload: dict, runtime: Runtime) -> None
TriggerHandler = Callable[[dict[str, Any], "Runtime"], Awaitable[None]]


class TriggerRegistry:
    """Registry for named event-source handlers.

    Usage::

        registry = TriggerRegistry()

        @registry.handler("gmail")
        async def handle_gmail(payload: dict, runtime: Runtime) -> None:
            ...
    """

    def __init__(self) -> None:
        self._handlers: dict[str, TriggerHandler] = {}

    def handler(self, source: str) -> Callable[[TriggerHandler], TriggerHandler]:
        """Decorator to register an async function as a trigger handler."""

        def decorator(fn: TriggerHandler) -> TriggerHandler:
            self._handlers[source] = fn
            logger.debug("Registered trigger handler: %s", source)
            return fn

        return decorator

    def get(self, source: str) -> TriggerHandler | None:
        """Look up a handler by source name."""
        return self._handlers.get(source)

    @property
    def sources(self) -> list[str]:
        """All registered source names."""
        return list(self._handlers)

    async def run(self, source: str, payload: dict[str, Any], runtime: Runtime) -> None:
        """Run the handler for *source*. Raises ``KeyError`` for an unknown source."""
        handler = self.get(source)
        if handler is None:
            raise KeyError(f"No trigger handler for source '{source}'")
        logger.info("Trigger received: source=%s, keys=%s", source, list(payload)[:10])
        await handler(payload, runtime)


trigger_registry = TriggerRegistry()
