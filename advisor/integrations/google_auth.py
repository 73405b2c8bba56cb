"""Google OAuth2 credentials from an authorized-user token file.

Obtaining the token (the consent flow) happens elsewhere; this module only
loads it, refreshes it when expired, and builds API services.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from advisor.config import settings

logger = logging.getLogger(__name__)

# (api name, version) for each service the advisor talks to
GMAIL_API = ("gmail", "v1")
CALENDAR_API = ("calendar", "v3")


class GoogleAuthManager:
    """Credentials for the one Google account the advisor acts as.

    Services are built once per credential object and rebuilt after a refresh.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/gmail.modify",
        "https://www.googleapis.com/auth/calendar",
    ]

    def __init__(self, token_path: Path | None = None) -> None:
        self._token_path = token_path or settings.google_token_path
        self._credentials: Credentials | None = None
        self._services: dict[tuple[str, str], Any] = {}

    @property
    def enabled(self) -> bool:
        """True if the token file exists on disk."""
        return self._token_path.exists()

    def credentials(self) -> Credentials:
        """Valid credentials, loading the token file or refreshing as needed.

        Raises ``FileNotFoundError`` without a token file and
        ``google.auth.exceptions.RefreshError`` if the grant was revoked.
        """
        creds = self._credentials
        if creds is None:
            if not self._token_path.exists():
                msg = f"Google token file not found at {self._token_path}."
                raise FileNotFoundError(msg)
            creds = Credentials.from_authorized_user_file(str(self._token_path), self.SCOPES)
            self._credentials = creds

        if creds.expired and creds.refresh_token:
            self._refresh(creds)
        return creds

    def _refresh(self, creds: Credentials) -> None:
        logger.info("Refreshing expired Google credentials")
        try:
            creds.refresh(Request())
        except RefreshError:
            logger.exception("Google token refresh failed; re-run the consent flow")
            self._credentials = None
            raise
        self._token_path.write_text(creds.to_json(), encoding="utf-8")
        self._services.clear()

    def service(self, api: tuple[str, str]) -> Any:
        """API client for *api*, e.g. ``GMAIL_API``."""
        creds = self.credentials()
        if api not in self._services:
            name, version = api
            self._services[api] = build(name, version, credentials=creds, cache_discovery=False)
        return self._services[api]

    def gmail(self) -> Any:
        return self.service(GMAIL_API)

    def calendar(self) -> Any:
        return self.service(CALENDAR_API)
