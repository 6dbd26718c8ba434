"""
Unit tests for the Calendar SDK functions, with the Calendar service mocked.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from gcli.sdk.calendar import events


@pytest.fixture
def calendar(monkeypatch):
    """A mocked Calendar service bound to the 'work' account's calendar."""
    service = MagicMock()
    monkeypatch.setattr(events, "get_calendar_service",
                        lambda account=None: (service, account or "work", "team@example.com"))
    return service


def test_list_events_parses_timed_and_all_day(calendar):
    calendar.events.return_value.list.return_value.execute.return_value = {
        "items": [
            {
                "id": "e1", "summary": "Standup", "status": "confirmed",
                "start": {"dateTime": "2024-12-24T09:00:00Z"},
                "end": {"dateTime": "2024-12-24T09:15:00Z"},
            },
            {
                "id": "e2", "summary": "Holiday", "location": "Home",
                "start": {"date": "2024-12-25"}, "end": {"date": "2024-12-26"},
            },
        ]
    }
    time_min = datetime(2024, 12, 24, tzinfo=timezone.utc)
    time_max = datetime(2024, 12, 31, tzinfo=timezone.utc)

    listed = events.list_events(time_min, time_max, max_results=10, account="personal")

    assert [e["id"] for e in listed] == ["e1", "e2"]
    timed, all_day = listed
    assert timed["account"] == "personal"
    assert timed["calendar_id"] == "team@example.com"
    assert timed["start"] == datetime(2024, 12, 24, 9, 0, tzinfo=timezone.utc)
    assert timed["all_day"] is False
    assert all_day["all_day"] is True
    assert all_day["start"].date().isoformat() == "2024-12-25"
    assert all_day["location"] == "Home"

    calendar.events.return_value.list.assert_called_once_with(
        calendarId="team@example.com",
        timeMin="2024-12-24T00:00:00+00:00",
        timeMax="2024-12-31T00:00:00+00:00",
        singleEvents=True,
        orderBy="startTime",
        maxResults=10,
    )


def test_get_event_details(calendar):
    calendar.events.return_value.get.return_value.execute.return_value = {
        "id": "e1", "summary": "Review", "description": "Q4 numbers",
        "start": {"dateTime": "2024-12-24T09:00:00Z"}, "end": {"dateTime": "2024-12-24T10:00:00Z"},
        "attendees": [{"email": "a@example.com"}, {"email": "b@example.com"}],
        "organizer": {"email": "boss@example.com"},
        "htmlLink": "https://calendar.google.com/event?eid=e1",
        "created": "2024-12-01T08:00:00.000Z",
    }

    detail = events.get_event("e1")

    assert detail["description"] == "Q4 numbers"
    assert detail["attendees"] == ["a@example.com", "b@example.com"]
    assert detail["organizer"] == "boss@example.com"
    assert detail["created"] == datetime(2024, 12, 1, 8, 0, tzinfo=timezone.utc)
    assert detail["updated"] is None


def test_create_all_day_event_uses_dates(calendar):
    calendar.events.return_value.insert.return_value.execute.return_value = {"id": "new-1"}

    event_id = events.create_event(
        "Holiday",
        datetime(2024, 12, 25).astimezone(),
        datetime(2024, 12, 26).astimezone(),
        all_day=True,
        attendees=["a@example.com"],
    )

    assert event_id == "new-1"
    body = calendar.events.return_value.insert.call_args.kwargs["body"]
    assert body["start"] == {"date": "2024-12-25"}
    assert body["end"] == {"date": "2024-12-26"}
    assert body["attendees"] == [{"email": "a@example.com"}]
    assert "description" not in body


def test_create_timed_event_uses_offset(calendar):
    calendar.events.return_value.insert.return_value.execute.return_value = {"id": "new-2"}

    events.create_event(
        "Call",
        datetime(2024, 12, 24, 15, 0, tzinfo=timezone.utc),
        datetime(2024, 12, 24, 16, 0, tzinfo=timezone.utc),
        location="Zoom",
    )

    body = calendar.events.return_value.insert.call_args.kwargs["body"]
    assert body["start"] == {"dateTime": "2024-12-24T15:00:00+00:00"}
    assert body["location"] == "Zoom"


def test_update_overlays_only_given_fields(calendar):
    existing = {
        "id": "e1", "summary": "Old title", "location": "Room 1", "description": "keep me",
        "start": {"dateTime": "2024-12-24T09:00:00Z"}, "end": {"dateTime": "2024-12-24T10:00:00Z"},
        "attendees": [{"email": "a@example.com"}],
    }
    calendar.events.return_value.get.return_value.execute.return_value = existing

    events.update_event("e1", summary="New title",
                        end=datetime(2024, 12, 24, 11, 0, tzinfo=timezone.utc))

    body = calendar.events.return_value.update.call_args.kwargs["body"]
    assert body["summary"] == "New title"
    assert body["location"] == "Room 1"
    assert body["description"] == "keep me"
    assert body["start"] == {"dateTime": "2024-12-24T09:00:00Z"}
    assert body["end"] == {"dateTime": "2024-12-24T11:00:00+00:00"}
    assert body["attendees"] == [{"email": "a@example.com"}]


def test_delete_event(calendar):
    events.delete_event("e1")
    calendar.events.return_value.delete.assert_called_once_with(
        calendarId="team@example.com", eventId="e1"
    )


def test_list_calendars(calendar):
    calendar.calendarList.return_value.list.return_value.execute.return_value = {
        "items": [{"id": "me@example.com", "summary": "Me", "primary": True},
                  {"id": "team@example.com", "summary": "Team"}],
    }

    calendars = events.list_calendars()

    assert calendars[0] == {"id": "me@example.com", "summary": "Me", "description": "", "primary": True}
    assert calendars[1]["primary"] is False


def test_calendar_id_defaults_to_primary(two_accounts, monkeypatch):
    from gcli.sdk.calendar import service as calendar_service

    monkeypatch.setattr(calendar_service, "get_credentials", lambda name, account: object())
    monkeypatch.setattr(calendar_service, "build", lambda *args, **kwargs: "svc")

    assert calendar_service.get_calendar_service("work") == ("svc", "work", "primary")
