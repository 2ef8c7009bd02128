"""Tests for multi-calendar event aggregation."""

from datetime import datetime

import pytest
import pytz

from teamup.aggregator import EventAggregator
from teamup.errors import UpstreamError

START = datetime(2025, 9, 2, 0, 0, tzinfo=pytz.UTC)
END = datetime(2025, 9, 3, 0, 0, tzinfo=pytz.UTC)


def event(event_id, start):
    return {
        "id": event_id,
        "title": f"Event {event_id}",
        "start_dt": start,
        "end_dt": start,
    }


class TestCollect:
    @pytest.mark.asyncio
    async def test_merges_and_sorts_by_start(self, fake_client, calendars):
        fake_client.events = {
            "birthday": [
                event("a2", "2025-09-02T15:00:00+00:00"),
                event("a1", "2025-09-02T09:00:00+00:00"),
            ],
            "event": [event("b1", "2025-09-02T12:00:00+00:00")],
        }

        events = await EventAggregator(fake_client).collect(calendars, START, END)

        assert [e.id for e in events] == ["a1", "b1", "a2"]
        assert [e.calendar_name for e in events] == ["birthday", "event", "birthday"]

    @pytest.mark.asyncio
    async def test_order_independent_of_calendar_order(self, fake_client, calendars):
        fake_client.events = {
            "birthday": [event("a1", "2025-09-02T10:00:00+00:00")],
            "event": [event("b1", "2025-09-02T08:00:00+00:00")],
        }

        forward = await EventAggregator(fake_client).collect(calendars, START, END)
        backward = await EventAggregator(fake_client).collect(
            list(reversed(calendars)), START, END
        )

        assert [e.id for e in forward] == ["b1", "a1"]
        assert [e.id for e in backward] == ["b1", "a1"]

    @pytest.mark.asyncio
    async def test_ties_keep_calendar_order(self, fake_client, calendars):
        same = "2025-09-02T10:00:00+00:00"
        fake_client.events = {
            "birthday": [event("a1", same)],
            "event": [event("b1", same)],
        }

        events = await EventAggregator(fake_client).collect(calendars, START, END)

        assert [e.id for e in events] == ["a1", "b1"]

    @pytest.mark.asyncio
    async def test_one_failure_aborts_collection(self, fake_client, calendars):
        fake_client.events = {
            "birthday": [event("a1", "2025-09-02T10:00:00+00:00")],
        }
        fake_client.failing = {"event"}

        with pytest.raises(UpstreamError) as exc_info:
            await EventAggregator(fake_client).collect(calendars, START, END)

        assert exc_info.value.calendar_name == "event"

    @pytest.mark.asyncio
    async def test_empty_calendars_give_empty_list(self, fake_client, calendars):
        events = await EventAggregator(fake_client).collect(calendars, START, END)
        assert events == []
        assert len(fake_client.calls) == 2
