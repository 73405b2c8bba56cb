"""Shared test fixtures."""

import hashlib
import math
import re
from pathlib import Path

import pytest

from advisor.errors import QuotaExceededError
from advisor.rag.embeddings import EmbeddingProvider
from advisor.rag.store import EmbeddingStore

DIMENSIONS = 1536


class HashingEmbedder:
    """Deterministic bag-of-words embedder: each word bumps one hashed bucket."""

    def __init__(self, dimensions: int = DIMENSIONS) -> None:
        self.dimensions = dimensions
        self.calls: list[str] = []
        self.quota_exceeded = False

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.quota_exceeded:
            raise QuotaExceededError("429 quota exceeded")
        vector = [0.0] * self.dimensions
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            digest = hashlib.md5(word.encode()).hexdigest()
            vector[int(digest, 16) % self.dimensions] += 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector] if norm else vector


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("advisor.config.settings.turso_database_url", "")


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def embedder() -> EmbeddingProvider:
    return HashingEmbedder()


@pytest.fixture
def store(db_path: Path, _no_turso) -> EmbeddingStore:
    """An EmbeddingStore backed by a temp database."""
    return EmbeddingStore(db_path=db_path, dimensions=DIMENSIONS)
