"""Tests for the calendar command router."""

from datetime import datetime

import pytest
import pytz

from bridge_config import BridgeConfig
from commands.router import (
    ANNOUNCE_FAILED_MESSAGE,
    CREATED_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    INVALID_DATES_MESSAGE,
    CommandRouter,
    CommandState,
)
from teamup.aggregator import EventAggregator
from teamup.errors import NotificationDeliveryError
from teamup.models import Subcalendar
from teamup.workflow import EventCreationWorkflow

NOW = datetime(2025, 9, 2, 8, 0, tzinfo=pytz.UTC)


@pytest.fixture
def config(calendars):
    return BridgeConfig(calendars=tuple(calendars), timezone_name="UTC")


@pytest.fixture
def router(config, fake_client, notifier):
    return CommandRouter(
        config,
        workflow=EventCreationWorkflow(fake_client),
        aggregator=EventAggregator(fake_client),
        notifier=notifier,
        clock=lambda: NOW,
    )


class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_success_creates_announces_and_replies(self, router, fake_client, notifier):
        fake_client.subcalendars = [Subcalendar(5, "General")]
        executing = []

        async def on_executing():
            executing.append(True)

        result = await router.create_event(
            "event", "Planning", "2025-09-02T14:00", "2025-09-02T15:00",
            notes="agenda", on_executing=on_executing,
        )

        assert result.state is CommandState.REPLIED
        assert result.content == CREATED_MESSAGE
        assert result.history == [
            CommandState.RECEIVED,
            CommandState.VALIDATING,
            CommandState.EXECUTING,
            CommandState.REPLIED,
        ]
        assert executing == [True]
        assert fake_client.created[0]["start_dt"] == "2025-09-02T14:00:00+00:00"
        text, card = notifier.announcements[0]
        assert "Event created" in text
        assert card.title == "Planning"

    @pytest.mark.asyncio
    async def test_invalid_dates_fail_before_executing(self, router, fake_client):
        result = await router.create_event(
            "event", "Planning", "2025-09-02T15:00", "2025-09-02T14:00"
        )

        assert result.state is CommandState.FAILED
        assert result.content == INVALID_DATES_MESSAGE
        assert CommandState.EXECUTING not in result.history
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_unparseable_dates_fail(self, router, fake_client):
        result = await router.create_event("event", "Planning", "tomorrow", "later")

        assert result.content == INVALID_DATES_MESSAGE
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_unknown_calendar_fails(self, router, fake_client):
        result = await router.create_event(
            "nope", "Planning", "2025-09-02T14:00", "2025-09-02T15:00"
        )

        assert result.state is CommandState.FAILED
        assert "Unknown calendar" in result.content
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_upstream_error_is_generic(self, router, fake_client):
        async def broken(calendar):
            raise RuntimeError("boom")

        fake_client.list_subcalendars = broken

        result = await router.create_event(
            "event", "Planning", "2025-09-02T14:00", "2025-09-02T15:00"
        )

        assert result.state is CommandState.FAILED
        assert result.content == GENERIC_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_subcalendars_message_is_shown(self, router):
        result = await router.create_event(
            "event", "Planning", "2025-09-02T14:00", "2025-09-02T15:00"
        )

        assert result.state is CommandState.FAILED
        assert "No subcalendars" in result.content

    @pytest.mark.asyncio
    async def test_announcement_failure_keeps_created_event(self, router, fake_client, notifier):
        notifier.error = NotificationDeliveryError("channel gone")

        result = await router.create_event(
            "event", "Planning", "2025-09-02T14:00", "2025-09-02T15:00",
            subcalendar_id=3,
        )

        assert result.state is CommandState.FAILED
        assert result.content == ANNOUNCE_FAILED_MESSAGE
        assert len(fake_client.created) == 1


def upcoming_event(i):
    return {
        "id": str(i),
        "title": f"Event {i}",
        "start_dt": f"2025-09-02T{10 + i % 10:02d}:{i:02d}:00+00:00",
        "end_dt": "",
    }


class TestListUpcoming:
    @pytest.mark.asyncio
    async def test_no_events_message(self, router):
        result = await router.list_upcoming()

        assert result.state is CommandState.REPLIED
        assert result.content == "No events in the next 24h (all)."

    @pytest.mark.asyncio
    async def test_default_window_is_24_hours(self, router, fake_client):
        await router.list_upcoming()

        fetches = [c for c in fake_client.calls if c[0] == "list_events"]
        assert len(fetches) == 2
        _, _, start, end = fetches[0]
        assert (end - start).total_seconds() == 24 * 3600

    @pytest.mark.asyncio
    async def test_truncates_to_twelve(self, router, fake_client):
        fake_client.events = {"birthday": [upcoming_event(i) for i in range(15)]}

        result = await router.list_upcoming(hours=48)

        lines = result.content.splitlines()
        assert lines[0] == "**Upcoming (next 48h, all):**"
        assert len([line for line in lines if line.startswith("•")]) == 12
        assert lines[-1] == "… and 3 more"

    @pytest.mark.asyncio
    async def test_single_calendar_selection(self, router, fake_client):
        fake_client.events = {
            "birthday": [upcoming_event(1)],
            "event": [upcoming_event(2)],
        }

        result = await router.list_upcoming(calendar="event")

        assert [c[1] for c in fake_client.calls] == ["event"]
        assert "• [event] 2025-09-02 12:02 — Event 2" in result.content
        assert "birthday" not in result.content

    @pytest.mark.asyncio
    async def test_failure_is_generic(self, router, fake_client):
        fake_client.failing = {"birthday"}

        result = await router.list_upcoming()

        assert result.state is CommandState.FAILED
        assert result.content == GENERIC_ERROR_MESSAGE
        assert result.history == [
            CommandState.RECEIVED,
            CommandState.EXECUTING,
            CommandState.FAILED,
        ]
