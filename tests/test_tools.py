"""Tests for the Gmail, Calendar, HubSpot and task tool handlers."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from advisor.integrations.base import Providers
from advisor.tasks.store import TaskStore
from advisor.tools import registry

pytestmark = pytest.mark.usefixtures("_no_turso")


@pytest.fixture
def providers(tmp_path: Path) -> Providers:
    return Providers(
        email=AsyncMock(),
        calendar=AsyncMock(),
        crm=AsyncMock(),
        tasks=TaskStore(db_path=tmp_path / "test.db"),
    )


# -- Gmail -------------------------------------------------------------------------


async def test_search_emails_wraps_messages(providers: Providers) -> None:
    providers.email.search.return_value = [{"id": "m1"}]

    result = await registry.execute("search_emails", {"query": "from:sara", "maxResults": 5}, providers)

    assert result.to_dict() == {"success": True, "emails": [{"id": "m1"}]}
    providers.email.search.assert_awaited_once_with("from:sara", 5)


async def test_search_emails_default_max_results(providers: Providers) -> None:
    providers.email.search.return_value = []

    await registry.execute("search_emails", {"query": "x"}, providers)

    providers.email.search.assert_awaited_once_with("x", 10)


async def test_send_email_returns_ids(providers: Providers) -> None:
    providers.email.send.return_value = {"messageId": "m9", "threadId": "t9"}

    result = await registry.execute(
        "send_email",
        {"to": "a@b.com", "subject": "Hi", "body": "Hello", "threadId": "t9"},
        providers,
    )

    assert result.to_dict() == {"success": True, "messageId": "m9", "threadId": "t9"}
    providers.email.send.assert_awaited_once_with("a@b.com", "Hi", "Hello", "t9")


async def test_gmail_not_configured() -> None:
    result = await registry.execute("search_emails", {"query": "x"}, Providers())

    assert not result.success
    assert "Google is not configured" in result.error


# -- Calendar ------------------------------------------------------------------------


async def test_search_calendar_events(providers: Providers) -> None:
    providers.calendar.search.return_value = [{"id": "ev1", "summary": "Review"}]

    result = await registry.execute(
        "search_calendar_events",
        {"query": "review", "timeMin": "2024-01-01T00:00:00Z"},
        providers,
    )

    assert result.data == {"events": [{"id": "ev1", "summary": "Review"}]}
    providers.calendar.search.assert_awaited_once_with("review", "2024-01-01T00:00:00Z", None)


async def test_create_calendar_event(providers: Providers) -> None:
    providers.calendar.create.return_value = {"id": "ev2"}

    result = await registry.execute(
        "create_calendar_event",
        {
            "title": "Review",
            "start": "2024-02-01T10:00:00",
            "end": "2024-02-01T11:00:00",
            "attendees": ["sara@example.com"],
        },
        providers,
    )

    assert result.data == {"event": {"id": "ev2"}}
    kwargs = providers.calendar.create.await_args.kwargs
    assert kwargs["title"] == "Review"
    assert kwargs["attendees"] == ["sara@example.com"]
    assert kwargs["location"] is None


async def test_create_calendar_event_missing_end(providers: Providers) -> None:
    result = await registry.execute(
        "create_calendar_event", {"title": "Review", "start": "2024-02-01T10:00:00"}, providers
    )

    assert not result.success
    assert "Invalid arguments" in result.error
    providers.calendar.create.assert_not_awaited()


# -- HubSpot -------------------------------------------------------------------------


async def test_search_hubspot_contacts(providers: Providers) -> None:
    providers.crm.search_contacts.return_value = [{"id": "c1"}]

    result = await registry.execute("search_hubspot_contacts", {"query": "sara"}, providers)

    assert result.data == {"contacts": [{"id": "c1"}]}
    providers.crm.search_contacts.assert_awaited_once_with("sara", 10)


async def test_create_hubspot_contact_maps_fields(providers: Providers) -> None:
    providers.crm.create_contact.return_value = {"id": "c2"}

    result = await registry.execute(
        "create_hubspot_contact",
        {"email": "new@example.com", "firstName": "New", "company": "Acme"},
        providers,
    )

    assert result.data == {"contact": {"id": "c2"}}
    fields = providers.crm.create_contact.await_args.args[0]
    assert fields["email"] == "new@example.com"
    assert fields["firstName"] == "New"
    assert fields["company"] == "Acme"
    assert fields["lastName"] is None


async def test_add_hubspot_note(providers: Providers) -> None:
    providers.crm.add_note.return_value = {"id": "n1"}

    result = await registry.execute(
        "add_hubspot_note", {"contactId": "c1", "content": "Called client"}, providers
    )

    assert result.data == {"note": {"id": "n1"}}
    providers.crm.add_note.assert_awaited_once_with("c1", "Called client")


async def test_hubspot_not_configured() -> None:
    result = await registry.execute("search_hubspot_contacts", {"query": "x"}, Providers())

    assert result.error == "HubSpot not configured. Please connect your HubSpot account."


# -- Tasks ---------------------------------------------------------------------------


async def test_create_task_defaults(providers: Providers) -> None:
    description = "Follow up with Sara about the college savings plan " * 3

    result = await registry.execute(
        "create_task", {"description": description, "context": {"contact": "c1"}}, providers
    )

    task = result.data["task"]
    assert task["id"] is not None
    assert task["title"] == description[:80]
    assert task["description"] == description
    assert task["user_id"] == "system"
    assert task["priority"] == "medium"
    assert task["status"] == "pending"
    assert task["context"] == {"contact": "c1"}


async def test_update_task_status_and_result(providers: Providers) -> None:
    created = await registry.execute("create_task", {"description": "Call Bill"}, providers)
    task_id = created.data["task"]["id"]

    result = await registry.execute(
        "update_task",
        {"taskId": task_id, "status": "completed", "result": {"called": True}},
        providers,
    )

    task = result.data["task"]
    assert task["status"] == "completed"
    assert task["result"] == {"called": True}


async def test_update_task_accepts_numeric_id(providers: Providers) -> None:
    created = await registry.execute("create_task", {"description": "Call Bill"}, providers)
    task_id = created.data["task"]["id"]

    result = await registry.execute(
        "update_task", {"taskId": float(task_id), "status": "in_progress"}, providers
    )

    assert result.data["task"]["status"] == "in_progress"


async def test_update_unknown_task_fails(providers: Providers) -> None:
    result = await registry.execute("update_task", {"taskId": 999, "status": "completed"}, providers)

    assert not result.success
    assert "999" in result.error


async def test_update_task_rejects_bad_status(providers: Providers) -> None:
    result = await registry.execute("update_task", {"taskId": 1, "status": "done"}, providers)

    assert not result.success
    assert "Invalid arguments" in result.error
