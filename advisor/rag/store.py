"""EmbeddingStore — chunk persistence and full-scan cosine similarity search.

There is no native vector index: ``search`` loads up to ``SCAN_LIMIT`` rows,
scores every candidate in memory and keeps the best ``limit``.  This is
adequate for a corpus of hundreds to low thousands of chunks.
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from advisor.config import settings
from advisor.db import TableStore
from advisor.errors import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)

SCAN_LIMIT = 1000

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS embeddings (
    id         TEXT PRIMARY KEY,
    content    TEXT NOT NULL,
    embedding  TEXT NOT NULL,
    metadata   TEXT NOT NULL DEFAULT '{}',
    source     TEXT NOT NULL,
    source_id  TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_CREATE_SOURCE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_embeddings_source ON embeddings (source, source_id)
"""

_COLUMNS = "id, content, embedding, metadata, source, source_id, created_at, updated_at"


@dataclass
class EmbeddingRecord:
    """A stored chunk of content with its embedding vector.

    ``similarity`` is only set on records returned from ``search``.
    """

    id: str
    content: str
    embedding: list[float]
    source: str
    source_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    similarity: float | None = None

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``embeddings`` column order."""
        return (
            self.id,
            self.content,
            json.dumps(self.embedding),
            json.dumps(self.metadata, default=str),
            self.source,
            self.source_id,
            self.created_at,
            self.updated_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> EmbeddingRecord:
        return cls(
            id=row[0],
            content=row[1],
            embedding=json.loads(row[2]),
            metadata=json.loads(row[3] or "{}"),
            source=row[4],
            source_id=row[5],
            created_at=row[6],
            updated_at=row[7],
        )


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when either vector is missing or empty, when the dimensions
    differ, or when either vector has zero norm.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


class EmbeddingStore(TableStore):
    """Persists embedded chunks in SQLite / Turso."""

    _SCHEMA = (_CREATE_TABLE, _CREATE_SOURCE_INDEX)

    def __init__(self, db_path: Path | None = None, dimensions: int | None = None) -> None:
        super().__init__(db_path)
        self.dimensions = dimensions or settings.embedding_dimensions

    # -- Write ---------------------------------------------------------------

    async def insert(
        self,
        content: str,
        embedding: list[float],
        metadata: dict[str, Any] | None,
        source: str,
        source_id: str | None,
    ) -> EmbeddingRecord:
        """Store one chunk. Raises ``PersistenceError`` if the write fails."""
        if len(embedding) != self.dimensions:
            msg = f"Embedding has {len(embedding)} dimensions, store expects {self.dimensions}"
            raise ValueError(msg)

        record = EmbeddingRecord(
            id=uuid.uuid4().hex,
            content=content,
            embedding=list(embedding),
            metadata=dict(metadata or {}),
            source=source,
            source_id=source_id,
        )
        try:
            async with self._session() as db:
                await db.execute(
                    f"INSERT INTO embeddings ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    record.to_row(),
                )
                await db.commit()
        except Exception as exc:
            msg = f"Failed to store chunk for {source}/{source_id}: {exc}"
            raise PersistenceError(msg) from exc

        logger.debug("Stored chunk %s (%s/%s)", record.id, source, source_id)
        return record

    async def delete(self, record_ids: list[str]) -> int:
        """Remove chunks by id. Returns the number of rows deleted."""
        if not record_ids:
            return 0
        placeholders = ", ".join("?" for _ in record_ids)
        try:
            async with self._session() as db:
                cursor = await db.execute(
                    f"DELETE FROM embeddings WHERE id IN ({placeholders})", tuple(record_ids)
                )
                await db.commit()
        except Exception as exc:
            raise PersistenceError(f"Failed to delete chunks: {exc}") from exc
        return cursor.rowcount

    # -- Read ----------------------------------------------------------------

    async def scan(self, filters: dict[str, str] | None = None) -> list[EmbeddingRecord]:
        """Load up to ``SCAN_LIMIT`` candidate rows in insertion order.

        Raises ``PersistenceError`` on any read failure.
        """
        clauses: list[str] = []
        params: list[Any] = []
        filters = filters or {}
        if filters.get("source"):
            clauses.append("source = ?")
            params.append(filters["source"])
        if filters.get("source_id"):
            clauses.append("source_id = ?")
            params.append(filters["source_id"])

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = f"SELECT {_COLUMNS} FROM embeddings{where} ORDER BY rowid LIMIT ?"
        params.append(SCAN_LIMIT)

        try:
            async with self._session() as db:
                cursor = await db.execute(sql, tuple(params))
                rows = await cursor.fetchall()
            return [EmbeddingRecord.from_row(row) for row in rows]
        except Exception as exc:
            raise PersistenceError(f"Embedding scan failed: {exc}") from exc

    async def search(
        self,
        query_embedding: list[float],
        limit: int = 10,
        filters: dict[str, str] | None = None,
    ) -> list[EmbeddingRecord]:
        """Return up to *limit* records ordered by descending cosine similarity.

        Persistence failures are logged and produce an empty list.
        """
        try:
            candidates = await self.scan(filters)
        except PersistenceError:
            logger.exception("Embedding search failed, returning no results")
            return []

        for record in candidates:
            record.similarity = cosine_similarity(query_embedding, record.embedding)

        # sorted() is stable, so equal scores keep scan order
        ranked = sorted(candidates, key=lambda r: r.similarity, reverse=True)
        return ranked[: max(limit, 0)]

    async def count(self) -> int:
        """Number of stored chunks."""
        async with self._session() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM embeddings")
            row = await cursor.fetchone()
        return int(row[0]) if row else 0
