# teamup-bridge - Discord Bot for Teamup Calendars
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Event Aggregator

Collects events from several calendars over one time window and merges
them into a single listing sorted by start time.
"""

import asyncio
import logging
from datetime import datetime
from typing import Sequence

from .client import CalendarClient
from .models import Calendar, EventRecord

logger = logging.getLogger("teamupbridge.teamup.aggregator")


class EventAggregator:
    """
    Fail-fast multi-calendar event listing.

    Fetches run concurrently. If any calendar fails, the whole collection
    fails with that error and no partial listing is returned.
    """

    def __init__(self, client: CalendarClient):
        self.client = client

    async def collect(
        self,
        calendars: Sequence[Calendar],
        start_at: datetime,
        end_at: datetime,
    ) -> list[EventRecord]:
        """
        Collect events from every calendar in [start_at, end_at].

        Args:
            calendars: Calendars to query
            start_at: Window start
            end_at: Window end

        Returns:
            Events stamped with their source calendar, ascending by start
        """
        results = await asyncio.gather(
            *(self.client.list_events(cal, start_at, end_at) for cal in calendars)
        )

        merged: list[EventRecord] = []
        for calendar, events in zip(calendars, results):
            merged.extend(e.with_calendar(calendar) for e in events)

        # sorted() is stable, so equal starts keep calendar order
        merged = sorted(merged, key=lambda e: e.start_dt)
        logger.debug(f"Collected {len(merged)} event(s) from {len(calendars)} calendar(s)")
        return merged
