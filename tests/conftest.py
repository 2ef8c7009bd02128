"""Shared fixtures for calendar bridge tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from teamup.errors import UpstreamError
from teamup.models import Calendar, EventRecord, Subcalendar


class FakeCalendarClient:
    """In-memory stand-in for CalendarClient that records every call."""

    def __init__(self):
        self.events: dict[str, list[dict]] = {}
        self.failing: set[str] = set()
        self.subcalendars: list[Subcalendar] = []
        self.calls: list[tuple] = []
        self.created: list[dict] = []

    async def list_events(self, calendar, start_at, end_at):
        self.calls.append(("list_events", calendar.name, start_at, end_at))
        if calendar.name in self.failing:
            raise UpstreamError(calendar.name, "GET /events", status_code=503)
        return [EventRecord.from_api(e, calendar) for e in self.events.get(calendar.name, [])]

    async def list_subcalendars(self, calendar):
        self.calls.append(("list_subcalendars", calendar.name))
        return list(self.subcalendars)

    async def create_event(self, calendar, title, start_at, end_at, notes, subcalendar_id):
        self.calls.append(("create_event", calendar.name, subcalendar_id))
        payload = {
            "id": str(len(self.created) + 1),
            "title": title,
            "start_dt": start_at.isoformat(),
            "end_dt": end_at.isoformat(),
            "notes": notes,
            "subcalendar_id": subcalendar_id,
        }
        self.created.append(payload)
        return EventRecord.from_api(payload, calendar)


class RecordingNotifier:
    """Notifier that records announcements, optionally failing."""

    def __init__(self, error: Exception = None):
        self.announcements: list[tuple] = []
        self.error = error

    async def announce(self, text, event=None):
        if self.error is not None:
            raise self.error
        self.announcements.append((text, event))


@pytest.fixture
def calendars():
    return [
        Calendar(name="birthday", store_key="key-a"),
        Calendar(name="event", store_key="key-b"),
    ]


@pytest.fixture
def fake_client():
    return FakeCalendarClient()


@pytest.fixture
def notifier():
    return RecordingNotifier()
