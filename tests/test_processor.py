"""Tests for chunking and document ingestion."""

from unittest.mock import AsyncMock

import pytest

from advisor.errors import EmbeddingError, PersistenceError
from advisor.rag.processor import DocumentProcessor, chunk_text
from advisor.rag.store import EmbeddingStore

pytestmark = pytest.mark.usefixtures("_no_turso")


# -- chunk_text ------------------------------------------------------------------


class TestChunkText:
    def test_short_text_is_one_chunk(self):
        assert chunk_text("hello", chunk_size=10, overlap=2) == ["hello"]

    def test_empty_text_has_no_chunks(self):
        assert chunk_text("", chunk_size=10, overlap=2) == []

    def test_windows_overlap(self):
        text = "abcdefghij"
        chunks = chunk_text(text, chunk_size=4, overlap=1)
        assert chunks == ["abcd", "defg", "ghij", "j"]

    def test_consecutive_chunks_share_overlap(self):
        text = "".join(chr(ord("a") + i % 26) for i in range(2500))
        chunks = chunk_text(text, chunk_size=1000, overlap=200)
        for prev, nxt in zip(chunks, chunks[1:]):
            if len(prev) == 1000:
                assert prev[-200:] == nxt[:200]

    @pytest.mark.parametrize(("size", "overlap"), [(10, 0), (10, 3), (7, 6), (1000, 200)])
    def test_non_overlapping_parts_cover_text(self, size, overlap):
        text = "The quick brown fox jumps over the lazy dog. " * 40
        chunks = chunk_text(text, chunk_size=size, overlap=overlap)
        step = size - overlap
        rebuilt = "".join(chunk[:step] for chunk in chunks[:-1]) + chunks[-1]
        assert rebuilt == text

    @pytest.mark.parametrize(("size", "overlap"), [(10, 10), (10, 11), (0, 0), (10, -1)])
    def test_invalid_settings_rejected(self, size, overlap):
        with pytest.raises(ValueError):
            chunk_text("some text", chunk_size=size, overlap=overlap)


# -- DocumentProcessor -------------------------------------------------------------


async def test_process_stores_chunks_with_index(store: EmbeddingStore, embedder) -> None:
    processor = DocumentProcessor(store, embedder, chunk_size=20, overlap=5)
    text = "word " * 10

    records = await processor.process(text, {"type": "note"}, "hubspot_notes", "n1")

    assert len(records) == len(chunk_text(text, 20, 5))
    for index, record in enumerate(records):
        assert record.metadata["chunkIndex"] == index
        assert record.metadata["totalChunks"] == len(records)
        assert record.metadata["type"] == "note"
        assert record.source == "hubspot_notes"
        assert record.source_id == "n1"
    assert await store.count() == len(records)


async def test_process_embedding_failure_aborts_document(store: EmbeddingStore) -> None:
    embedder = AsyncMock()
    embedder.dimensions = 1536
    embedder.embed.side_effect = [[0.1] * 1536, RuntimeError("boom")]
    processor = DocumentProcessor(store, embedder, chunk_size=10, overlap=0)

    with pytest.raises(EmbeddingError, match="boom"):
        await processor.process("x" * 20, {}, "gmail", "e1")

    assert await store.count() == 0


async def test_process_write_failure_removes_partial_chunks(
    store: EmbeddingStore, embedder, monkeypatch: pytest.MonkeyPatch
) -> None:
    await store.insert("earlier", [0.1] * 1536, {}, "gmail", "e1")
    real_insert = store.insert
    writes = 0

    async def flaky_insert(*args, **kwargs):
        nonlocal writes
        writes += 1
        if writes == 3:
            raise PersistenceError("disk full")
        return await real_insert(*args, **kwargs)

    monkeypatch.setattr(store, "insert", flaky_insert)
    processor = DocumentProcessor(store, embedder, chunk_size=10, overlap=0)

    with pytest.raises(PersistenceError, match="disk full"):
        await processor.process("x" * 40, {}, "gmail", "e1")

    assert [r.content for r in await store.scan()] == ["earlier"]


async def test_process_uses_fallback_on_quota(store: EmbeddingStore, embedder) -> None:
    embedder.quota_exceeded = True
    processor = DocumentProcessor(store, embedder)

    records = await processor.process("some content", {}, "gmail", "e1")

    assert len(records) == 1
    assert len(records[0].embedding) == 1536


def test_processor_rejects_bad_chunk_settings(store: EmbeddingStore, embedder) -> None:
    with pytest.raises(ValueError):
        DocumentProcessor(store, embedder, chunk_size=100, overlap=100)


# -- Source helpers ------------------------------------------------------------------


async def test_process_email_labels_fields(store: EmbeddingStore, embedder) -> None:
    processor = DocumentProcessor(store, embedder)
    email = {
        "id": "m1",
        "threadId": "t1",
        "from": "sara@example.com",
        "to": "advisor@example.com",
        "subject": "Hello",
        "date": "2024-01-15",
        "body": "Body text",
    }

    [record] = await processor.process_email(email)

    assert record.source == "gmail"
    assert record.source_id == "m1"
    assert "From: sara@example.com" in record.content
    assert "Subject: Hello" in record.content
    assert "Body: Body text" in record.content
    assert record.metadata["type"] == "email"
    assert record.metadata["threadId"] == "t1"


async def test_process_contact_and_note_sources(store: EmbeddingStore, embedder) -> None:
    processor = DocumentProcessor(store, embedder)

    [contact] = await processor.process_contact(
        {"id": "c1", "firstName": "Bill", "lastName": "Wilson", "email": "b@example.com"}
    )
    [note] = await processor.process_note({"id": "n1", "contactId": "c1", "content": "Called"})

    assert contact.source == "hubspot"
    assert "Name: Bill Wilson" in contact.content
    assert note.source == "hubspot_notes"
    assert "Note: Called" in note.content


async def test_process_calendar_event(store: EmbeddingStore, embedder) -> None:
    processor = DocumentProcessor(store, embedder)

    [record] = await processor.process_calendar_event(
        {"id": "ev1", "title": "Review", "attendees": ["a@x.com", "b@x.com"], "start": "2024-02-01"}
    )

    assert record.source == "calendar"
    assert "Attendees: a@x.com, b@x.com" in record.content
    assert record.metadata["attendees"] == ["a@x.com", "b@x.com"]
