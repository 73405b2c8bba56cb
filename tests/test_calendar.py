"""Tests for the Google Calendar provider."""

from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import GoogleAuthError

from advisor.errors import ProviderCallError
from advisor.integrations.calendar import GoogleCalendarProvider, event_times


@pytest.fixture
def calendar_mock():
    auth = MagicMock()
    service = MagicMock()
    auth.calendar.return_value = service
    return GoogleCalendarProvider(auth, time_zone="Europe/London"), service


class TestEventTimes:
    def test_timed_event(self):
        event = {
            "start": {"dateTime": "2025-03-01T10:00:00Z"},
            "end": {"dateTime": "2025-03-01T11:00:00Z"},
        }
        assert event_times(event) == ("2025-03-01T10:00:00Z", "2025-03-01T11:00:00Z")

    def test_all_day_event(self):
        event = {"start": {"date": "2025-03-01"}, "end": {"date": "2025-03-02"}}
        assert event_times(event) == ("2025-03-01", "2025-03-02")

    def test_missing_times(self):
        assert event_times({}) == ("", "")


class TestSearch:
    async def test_search_defaults_time_min_to_now(self, calendar_mock):
        provider, service = calendar_mock
        service.events().list().execute.return_value = {"items": [{"id": "ev1"}]}

        events = await provider.search("review")

        assert events == [{"id": "ev1"}]
        kwargs = service.events().list.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["q"] == "review"
        assert kwargs["timeMin"]
        assert kwargs["singleEvents"] is True
        assert kwargs["orderBy"] == "startTime"
        assert "timeMax" not in kwargs

    async def test_search_passes_window(self, calendar_mock):
        provider, service = calendar_mock
        service.events().list().execute.return_value = {}

        events = await provider.search("x", "2025-01-01T00:00:00Z", "2025-02-01T00:00:00Z")

        assert events == []
        kwargs = service.events().list.call_args.kwargs
        assert kwargs["timeMin"] == "2025-01-01T00:00:00Z"
        assert kwargs["timeMax"] == "2025-02-01T00:00:00Z"

    async def test_auth_failure_becomes_provider_error(self, calendar_mock):
        provider, service = calendar_mock
        service.events().list().execute.side_effect = GoogleAuthError("revoked")

        with pytest.raises(ProviderCallError, match="Calendar request failed"):
            await provider.search("x")


class TestCreate:
    async def test_create_builds_event_body(self, calendar_mock):
        provider, service = calendar_mock
        service.events().insert().execute.return_value = {"id": "new1"}

        event = await provider.create(
            title="Annual review",
            start="2025-03-01T10:00:00",
            end="2025-03-01T11:00:00",
            description="Portfolio review",
            attendees=["sara@example.com"],
        )

        assert event == {"id": "new1"}
        kwargs = service.events().insert.call_args.kwargs
        assert kwargs["sendUpdates"] == "all"
        body = kwargs["body"]
        assert body["summary"] == "Annual review"
        assert body["start"] == {"dateTime": "2025-03-01T10:00:00", "timeZone": "Europe/London"}
        assert body["description"] == "Portfolio review"
        assert body["attendees"] == [{"email": "sara@example.com"}]
        assert "location" not in body


class TestGetEvent:
    async def test_get_event(self, calendar_mock):
        provider, service = calendar_mock
        service.events().get().execute.return_value = {"id": "ev9"}

        assert await provider.get_event("ev9") == {"id": "ev9"}
        service.events().get.assert_called_with(calendarId="primary", eventId="ev9")
