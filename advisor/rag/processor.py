"""Document processing: chunk, embed, and store content for retrieval."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from advisor.config import settings
from advisor.rag.embeddings import embed_with_fallback

if TYPE_CHECKING:
    from advisor.rag.embeddings import EmbeddingProvider
    from advisor.rag.store import EmbeddingRecord, EmbeddingStore

logger = logging.getLogger(__name__)


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 200) -> list[str]:
    """Split *text* into overlapping windows.

    Each chunk covers ``[start, start + chunk_size)``; the next window starts
    ``chunk_size - overlap`` characters later, until ``start`` passes the end
    of the text.

    Raises ``ValueError`` unless ``0 <= overlap < chunk_size``.
    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)
    if overlap < 0 or overlap >= chunk_size:
        msg = f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}"
        raise ValueError(msg)

    step = chunk_size - overlap
    chunks: list[str] = []
    start = 0
    while start < len(text):
        chunks.append(text[start : start + chunk_size])
        start += step
    return chunks


class DocumentProcessor:
    """Chunks content, embeds each chunk, and writes the chunks to the store."""

    def __init__(
        self,
        store: EmbeddingStore,
        embedder: EmbeddingProvider,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.chunk_size = chunk_size or settings.chunk_size
        self.overlap = settings.chunk_overlap if overlap is None else overlap
        # Fail at construction rather than on the first document
        chunk_text("", self.chunk_size, self.overlap)

    async def process(
        self,
        content: str,
        metadata: dict[str, Any],
        source: str,
        source_id: str | None,
    ) -> list[EmbeddingRecord]:
        """Ingest one document. Returns the stored chunk records in order.

        Embeddings are requested concurrently; if any chunk fails the whole
        document is abandoned and the error propagates. A failed write removes
        the chunks of this document already stored before re-raising.
        """
        chunks = chunk_text(content, self.chunk_size, self.overlap)
        outcomes = await asyncio.gather(
            *(embed_with_fallback(self._embedder, chunk) for chunk in chunks)
        )

        records: list[EmbeddingRecord] = []
        try:
            for index, (chunk, outcome) in enumerate(zip(chunks, outcomes, strict=True)):
                chunk_meta = {**metadata, "chunkIndex": index, "totalChunks": len(chunks)}
                records.append(
                    await self._store.insert(chunk, outcome.value, chunk_meta, source, source_id)
                )
        except Exception:
            if records:
                logger.warning(
                    "Removing %d partial chunk(s) of %s/%s", len(records), source, source_id
                )
                await self._store.delete([r.id for r in records])
            raise

        degraded = sum(1 for o in outcomes if o.status == "degraded")
        logger.info(
            "Processed %s/%s into %d chunk(s)%s",
            source,
            source_id,
            len(records),
            f" ({degraded} with fallback embeddings)" if degraded else "",
        )
        return records

    # -- Source-specific ingestion ------------------------------------------

    async def process_email(self, email: dict[str, Any]) -> list[EmbeddingRecord]:
        content = (
            f"From: {email.get('from', '')}\n"
            f"To: {email.get('to', '')}\n"
            f"Subject: {email.get('subject', '')}\n"
            f"Date: {email.get('date', '')}\n"
            f"Body: {email.get('body', '')}"
        )
        metadata = {
            "type": "email",
            "from": email.get("from"),
            "to": email.get("to"),
            "subject": email.get("subject"),
            "date": email.get("date"),
            "threadId": email.get("threadId"),
        }
        return await self.process(content, metadata, "gmail", email.get("id"))

    async def process_contact(self, contact: dict[str, Any]) -> list[EmbeddingRecord]:
        name = f"{contact.get('firstName', '')} {contact.get('lastName', '')}".strip()
        content = (
            f"Name: {name}\n"
            f"Email: {contact.get('email', '')}\n"
            f"Company: {contact.get('company', '')}\n"
            f"Phone: {contact.get('phone', '')}\n"
            f"Notes: {contact.get('notes') or ''}\n"
            f"Properties: {json.dumps(contact.get('properties') or {})}"
        )
        metadata = {
            "type": "hubspot_contact",
            "contactId": contact.get("id"),
            "email": contact.get("email"),
            "company": contact.get("company"),
        }
        return await self.process(content, metadata, "hubspot", contact.get("id"))

    async def process_note(self, note: dict[str, Any]) -> list[EmbeddingRecord]:
        content = (
            f"Contact: {note.get('contactId', '')}\n"
            f"Note: {note.get('content', '')}\n"
            f"Created: {note.get('createdAt', '')}\n"
            f"Type: {note.get('noteType', '')}"
        )
        metadata = {
            "type": "hubspot_note",
            "contactId": note.get("contactId"),
            "noteType": note.get("noteType"),
            "createdAt": note.get("createdAt"),
        }
        return await self.process(content, metadata, "hubspot_notes", note.get("id"))

    async def process_calendar_event(self, event: dict[str, Any]) -> list[EmbeddingRecord]:
        attendees = event.get("attendees") or []
        content = (
            f"Title: {event.get('title', '')}\n"
            f"Description: {event.get('description') or ''}\n"
            f"Start: {event.get('start', '')}\n"
            f"End: {event.get('end', '')}\n"
            f"Attendees: {', '.join(attendees)}\n"
            f"Location: {event.get('location') or ''}"
        )
        metadata = {
            "type": "calendar_event",
            "eventId": event.get("id"),
            "attendees": attendees,
            "location": event.get("location"),
        }
        return await self.process(content, metadata, "calendar", event.get("id"))
