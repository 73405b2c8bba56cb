"""Runtime factory — builds stores, providers and the agent from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from advisor.agent.conversation import ConversationAgent
from advisor.agent.proactive import ProactiveTriggerHandler
from advisor.config import settings
from advisor.instructions.store import InstructionStore
from advisor.integrations.base import Providers
from advisor.llm.client import create_completion_provider
from advisor.rag.embeddings import OpenAIEmbeddingProvider
from advisor.rag.processor import DocumentProcessor
from advisor.rag.retriever import ContextRetriever
from advisor.rag.store import EmbeddingStore
from advisor.tasks.store import TaskStore
from advisor.tools import registry as tool_registry
from advisor.triggers.handlers import calendar, gmail, hubspot  # noqa: F401
from advisor.triggers.registry import trigger_registry

if TYPE_CHECKING:
    from pathlib import Path

    from advisor.llm.client import CompletionProvider
    from advisor.rag.embeddings import EmbeddingProvider
    from advisor.tools.registry import ToolRegistry
    from advisor.triggers.registry import TriggerRegistry

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Everything a conversation or trigger needs, wired together."""

    store: EmbeddingStore
    embedder: EmbeddingProvider
    processor: DocumentProcessor
    retriever: ContextRetriever
    instructions: InstructionStore
    tasks: TaskStore
    providers: Providers
    completion: CompletionProvider | None
    registry: ToolRegistry
    triggers: TriggerRegistry
    proactive: ProactiveTriggerHandler | None = None

    def new_agent(self) -> ConversationAgent:
        """A fresh agent with its own history."""
        return ConversationAgent(
            completion=self.completion,
            retriever=self.retriever,
            instructions=self.instructions,
            registry=self.registry,
            providers=self.providers,
        )


def _build_providers(tasks: TaskStore) -> Providers:
    """Create the capability providers whose credentials are configured."""
    providers = Providers(tasks=tasks)

    from advisor.integrations.google_auth import GoogleAuthManager

    google = GoogleAuthManager()
    if google.enabled:
        from advisor.integrations.calendar import GoogleCalendarProvider
        from advisor.integrations.gmail import GmailProvider

        providers.email = GmailProvider(google)
        providers.calendar = GoogleCalendarProvider(google)
    else:
        logger.info(
            "Google token not found at %s — Gmail and Calendar disabled",
            settings.google_token_path,
        )

    if settings.hubspot_access_token:
        from advisor.integrations.hubspot import HubSpotProvider

        providers.crm = HubSpotProvider(settings.hubspot_access_token, settings.hubspot_api_url)
    else:
        logger.info("HUBSPOT_ACCESS_TOKEN not set — HubSpot disabled")

    return providers


def build_runtime(
    *,
    db_path: Path | None = None,
    completion: CompletionProvider | None = None,
    embedder: EmbeddingProvider | None = None,
    providers: Providers | None = None,
    use_configured_completion: bool = True,
) -> Runtime:
    """Assemble a ``Runtime`` from settings.

    Explicit arguments override the configured components (tests pass a
    temporary *db_path* and fakes). Raises ``ToolRegistryError`` if the tool
    handlers disagree with the declared schemas.
    """
    tool_registry.validate()

    if completion is None and use_configured_completion:
        completion = create_completion_provider()

    embedder = embedder or OpenAIEmbeddingProvider()
    store = EmbeddingStore(db_path=db_path, dimensions=embedder.dimensions)
    tasks = TaskStore(db_path=db_path)
    instructions = InstructionStore(db_path=db_path)
    if providers is None:
        providers = _build_providers(tasks)
    elif providers.tasks is None:
        providers.tasks = tasks

    runtime = Runtime(
        store=store,
        embedder=embedder,
        processor=DocumentProcessor(store, embedder),
        retriever=ContextRetriever(store, embedder),
        instructions=instructions,
        tasks=tasks,
        providers=providers,
        completion=completion,
        registry=tool_registry,
        triggers=trigger_registry,
    )
    runtime.proactive = ProactiveTriggerHandler(instructions, runtime.new_agent)
    return runtime
