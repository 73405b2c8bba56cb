"""Gmail email provider — search and send via the Gmail API."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from advisor.errors import ProviderCallError

if TYPE_CHECKING:
    from collections.abc import Callable

    from advisor.integrations.google_auth import GoogleAuthManager

logger = logging.getLogger(__name__)


def decode_body_data(data: str) -> str:
    """Decode a Gmail ``body.data`` field (URL-safe base64, padding optional).

    Returns the input unchanged if it is not valid base64 text.
    """
    try:
        padded = data + "=" * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, ValueError):
        return data


def extract_headers(msg: dict) -> dict[str, str]:
    """Extract headers from a Gmail message into a flat dict."""
    return {
        h["name"]: h["value"]
        for h in msg.get("payload", {}).get("headers", [])
    }


def extract_body(payload: dict) -> str:
    """Walk MIME parts and extract the best text body."""
    parts = payload.get("parts", [])
    if not parts:
        data = payload.get("body", {}).get("data", "")
        if not data:
            return ""
        text = decode_body_data(data)
        if payload.get("mimeType") == "text/html":
            return BeautifulSoup(text, "html.parser").get_text(separator="\n").strip()
        return text

    # Multi-part: prefer text/plain, fall back to text/html
    plain = ""
    html = ""
    for part in parts:
        mime = part.get("mimeType", "")
        if mime.startswith("multipart/"):
            nested = extract_body(part)
            if nested:
                return nested
        data = part.get("body", {}).get("data", "")
        if not data:
            continue
        if mime == "text/plain" and not plain:
            plain = decode_body_data(data)
        elif mime == "text/html" and not html:
            html = decode_body_data(data)

    if plain:
        return plain
    if html:
        return BeautifulSoup(html, "html.parser").get_text(separator="\n").strip()
    return ""


def to_email_data(msg: dict) -> dict[str, Any]:
    """Flatten a full Gmail message into the dict used for ingestion."""
    headers = extract_headers(msg)
    return {
        "id": msg.get("id"),
        "threadId": msg.get("threadId"),
        "from": headers.get("From", ""),
        "to": headers.get("To", ""),
        "subject": headers.get("Subject", ""),
        "date": headers.get("Date", ""),
        "body": extract_body(msg.get("payload", {})),
    }


class GmailProvider:
    """Email provider backed by the Gmail API for the authenticated user."""

    def __init__(self, auth: GoogleAuthManager) -> None:
        self._auth = auth
        # The service's http transport is not thread-safe
        self._lock = asyncio.Lock()

    async def _call(self, fn: Callable[[Any], Any]) -> Any:
        """Run a blocking Gmail request in a thread, normalising failures."""
        try:
            async with self._lock:
                service = self._auth.gmail()
                return await asyncio.to_thread(fn, service)
        except (HttpError, GoogleAuthError, FileNotFoundError) as exc:
            raise ProviderCallError(f"Gmail request failed: {exc}") from exc

    async def search(self, query: str, max_results: int = 10) -> list[dict[str, Any]]:
        """Return full message resources matching a Gmail search query."""
        listing = await self._call(
            lambda s: s.users()
            .messages()
            .list(userId="me", q=query, maxResults=max_results)
            .execute()
        )

        messages = []
        for ref in listing.get("messages", []):
            messages.append(await self.get_message(ref["id"]))
        return messages

    async def get_message(self, message_id: str) -> dict[str, Any]:
        return await self._call(
            lambda s: s.users()
            .messages()
            .get(userId="me", id=message_id, format="full")
            .execute()
        )

    async def send(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> dict[str, Any]:
        message = MIMEText(body)
        message["to"] = to
        message["subject"] = subject
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode()

        send_body: dict[str, Any] = {"raw": raw}
        if thread_id:
            send_body["threadId"] = thread_id

        result = await self._call(
            lambda s: s.users().messages().send(userId="me", body=send_body).execute()
        )
        logger.info("Sent email to %s: %s", to, result.get("id"))
        return {"messageId": result.get("id"), "threadId": result.get("threadId")}
