"""Context retrieval: semantic search plus token-bounded context assembly."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from advisor.outcome import Outcome
from advisor.rag.embeddings import embed_with_fallback

if TYPE_CHECKING:
    from collections.abc import Iterable

    from advisor.rag.embeddings import EmbeddingProvider
    from advisor.rag.store import EmbeddingRecord, EmbeddingStore

logger = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    """Rough token count (one token per four characters)."""
    return math.ceil(len(text) / 4)


def build_context(records: Iterable[EmbeddingRecord], max_tokens: int = 4000) -> str:
    """Concatenate records into a prompt block without exceeding *max_tokens*.

    Records are taken in the given order; assembly stops at the first record
    that would push the estimate over budget. Records are never split.
    """
    parts: list[str] = []
    used = 0
    for record in records:
        cost = estimate_tokens(record.content)
        if used + cost > max_tokens:
            break
        parts.append(f"Source: {record.source}\nContent: {record.content}\n\n")
        used += cost
    return "".join(parts).strip()


class ContextRetriever:
    """Embeds queries and ranks stored chunks against them."""

    def __init__(self, store: EmbeddingStore, embedder: EmbeddingProvider) -> None:
        self._store = store
        self._embedder = embedder

    async def search_context(
        self,
        query: str,
        limit: int = 10,
        filters: dict[str, str] | None = None,
    ) -> list[EmbeddingRecord]:
        """Return up to *limit* chunks ranked by similarity to *query*.

        Raises ``EmbeddingError`` if the query cannot be embedded.
        """
        embedding = await embed_with_fallback(self._embedder, query)
        return await self._store.search(embedding.value, limit, filters)

    async def retrieve(
        self,
        query: str,
        limit: int = 10,
        filters: dict[str, str] | None = None,
    ) -> Outcome[list[EmbeddingRecord]]:
        """Like ``search_context`` but reports failure instead of raising."""
        try:
            embedding = await embed_with_fallback(self._embedder, query)
            records = await self._store.search(embedding.value, limit, filters)
        except Exception as exc:
            logger.exception("Context retrieval failed")
            return Outcome.failed(exc)

        if embedding.status == "degraded":
            return Outcome.degraded(records, embedding.error or "fallback embedding")
        return Outcome.ok(records)
