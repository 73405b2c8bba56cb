"""Capability interfaces consumed by the tool handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from advisor.errors import ProviderCallError

if TYPE_CHECKING:
    from advisor.tasks.store import TaskStore


class EmailProvider(Protocol):
    async def get_message(self, message_id: str) -> dict[str, Any]: ...

    async def search(self, query: str, max_results: int = 10) -> list[dict[str, Any]]: ...

    async def send(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> dict[str, Any]: ...


class CalendarProvider(Protocol):
    async def get_event(self, event_id: str) -> dict[str, Any]: ...

    async def search(
        self, query: str, time_min: str | None = None, time_max: str | None = None
    ) -> list[dict[str, Any]]: ...

    async def create(
        self,
        title: str,
        start: str,
        end: str,
        description: str | None = None,
        attendees: list[str] | None = None,
        location: str | None = None,
    ) -> dict[str, Any]: ...


class CRMProvider(Protocol):
    async def get_contact(self, contact_id: str) -> dict[str, Any]: ...

    async def get_note(self, note_id: str) -> dict[str, Any]: ...

    async def search_contacts(self, query: str, limit: int = 10) -> list[dict[str, Any]]: ...

    async def create_contact(self, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def add_note(self, contact_id: str, content: str) -> dict[str, Any]: ...


@dataclass
class Providers:
    """The capability providers available to tools for one agent.

    A provider left as ``None`` is treated as not configured; tools that
    need it fail with a ``ProviderCallError``.
    """

    email: EmailProvider | None = None
    calendar: CalendarProvider | None = None
    crm: CRMProvider | None = None
    tasks: TaskStore | None = None

    def require_email(self) -> EmailProvider:
        if self.email is None:
            msg = "Google is not configured. Connect a Google account to use Gmail tools."
            raise ProviderCallError(msg)
        return self.email

    def require_calendar(self) -> CalendarProvider:
        if self.calendar is None:
            msg = "Google is not configured. Connect a Google account to use Calendar tools."
            raise ProviderCallError(msg)
        return self.calendar

    def require_crm(self) -> CRMProvider:
        if self.crm is None:
            msg = "HubSpot not configured. Please connect your HubSpot account."
            raise ProviderCallError(msg)
        return self.crm

    def require_tasks(self) -> TaskStore:
        if self.tasks is None:
            raise ProviderCallError("Task store is not available.")
        return self.tasks
