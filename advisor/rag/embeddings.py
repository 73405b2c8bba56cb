"""Embedding generation with a quota fallback."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Protocol

from advisor.config import settings
from advisor.errors import EmbeddingError, QuotaExceededError
from advisor.outcome import Outcome

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Turns text into a fixed-length vector.

    Implementations raise ``QuotaExceededError`` on rate limiting so callers
    can fall back instead of failing.
    """

    dimensions: int

    async def embed(self, text: str) -> list[float]: ...


class OpenAIEmbeddingProvider:
    """Embeddings from the OpenAI API (``text-embedding-3-small`` by default)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dimensions
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Lazily initialise the AsyncOpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def embed(self, text: str) -> list[float]:
        import openai

        try:
            response = await self._get_client().embeddings.create(
                model=self.model, input=text, dimensions=self.dimensions
            )
        except openai.RateLimitError as exc:
            raise QuotaExceededError(str(exc)) from exc
        except openai.OpenAIError as exc:
            raise EmbeddingError(str(exc)) from exc
        return list(response.data[0].embedding)


def fallback_vector(dimensions: int, rng: random.Random | None = None) -> list[float]:
    """Pseudo-random vector with components in [-0.5, 0.5)."""
    rng = rng or random.Random()
    return [rng.random() - 0.5 for _ in range(dimensions)]


async def embed_with_fallback(provider: EmbeddingProvider, text: str) -> Outcome[list[float]]:
    """Embed *text*, substituting a random vector when the provider is out of quota.

    Returns a ``success`` or ``degraded`` outcome. Any other provider failure
    raises ``EmbeddingError``.
    """
    try:
        vector = await provider.embed(text)
    except QuotaExceededError as exc:
        logger.warning("Embedding quota exceeded, using fallback vector: %s", exc)
        return Outcome.degraded(fallback_vector(provider.dimensions), str(exc))
    except EmbeddingError:
        raise
    except Exception as exc:
        raise EmbeddingError(str(exc)) from exc
    return Outcome.ok(vector)
