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
Reminder Engine

Scans every configured calendar for events about to start and announces
each occasion once. Occasions already announced are tracked in a
RemindedSet owned by the engine.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

import pytz

from teamup.client import CalendarClient
from teamup.formatting import build_event_card, starting_soon_text
from teamup.models import Calendar, EventRecord

logger = logging.getLogger("teamupbridge.reminders.engine")

# Size at which the reminded set is reset
REMINDED_SET_CEILING = 2000

# Events that started slightly before the check are still announced
GRACE_PERIOD = timedelta(minutes=1)


class RemindedSet:
    """
    Keys of occasions already announced.

    Grows during the process lifetime and is cleared outright once it
    exceeds its ceiling; old occasions never fall in a future window.
    """

    def __init__(self, ceiling: int = REMINDED_SET_CEILING):
        self.ceiling = ceiling
        self._keys: set[str] = set()

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, key: str) -> None:
        self._keys.add(key)

    def clear(self) -> None:
        self._keys.clear()

    def enforce_ceiling(self) -> bool:
        """Clear the set if it is over the ceiling. Returns True if cleared."""
        if len(self._keys) > self.ceiling:
            self._keys.clear()
            return True
        return False


@dataclass(frozen=True)
class ScanWindow:
    """Closed interval of start times that trigger a reminder."""

    start: datetime
    end: datetime

    @classmethod
    def around(cls, now: datetime, lookahead_minutes: int) -> "ScanWindow":
        return cls(
            start=now - GRACE_PERIOD,
            end=now + timedelta(minutes=lookahead_minutes),
        )

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class ReminderEngine:
    """
    Periodic "starting soon" announcer for several calendars.

    A failing calendar is logged and skipped; the others are still
    scanned. A key is recorded only after its announcement went out, so
    a failed announcement is retried on the next tick.
    """

    def __init__(
        self,
        client: CalendarClient,
        notifier,
        calendars: Sequence[Calendar],
        timezone: pytz.BaseTzInfo = pytz.UTC,
        lookahead_minutes: int = 15,
        reminded: Optional[RemindedSet] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.notifier = notifier
        self.calendars = list(calendars)
        self.timezone = timezone
        self.lookahead_minutes = lookahead_minutes
        self.reminded = reminded if reminded is not None else RemindedSet()
        self.clock = clock or (lambda: datetime.now(self.timezone))
        self._tick_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._tick_lock.locked()

    async def tick(self) -> int:
        """
        Run one scan.

        Returns:
            Number of reminders announced (0 if skipped or failed)
        """
        if self._tick_lock.locked():
            logger.warning("Previous reminder scan still running, skipping this tick")
            return 0

        async with self._tick_lock:
            try:
                return await self._scan()
            except Exception as e:
                logger.error(f"Reminder scan failed: {e}", exc_info=True)
                return 0

    async def _fetch(
        self, now: datetime, fetch_end: datetime
    ) -> list[tuple[Calendar, list[EventRecord]]]:
        results = await asyncio.gather(
            *(self.client.list_events(cal, now, fetch_end) for cal in self.calendars),
            return_exceptions=True,
        )

        fetched = []
        for calendar, result in zip(self.calendars, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Reminder scan failed for calendar {calendar.name}: {result}",
                    exc_info=result,
                )
                continue
            fetched.append((calendar, result))
        return fetched

    async def _scan(self) -> int:
        now = self.clock()
        window = ScanWindow.around(now, self.lookahead_minutes)
        # Fetch from now; the containment window reaches back one minute further
        fetched = await self._fetch(now, window.end)

        sent = 0
        for calendar, events in fetched:
            for event in events:
                event = event.with_calendar(calendar)
                if await self._remind(event, window, now):
                    sent += 1

        if self.reminded.enforce_ceiling():
            logger.info("Reminded set exceeded its ceiling and was cleared")

        if sent:
            logger.info(f"Sent {sent} reminder(s)")
        return sent

    async def _remind(self, event: EventRecord, window: ScanWindow, now: datetime) -> bool:
        start = event.start_at
        if start is not None and start.tzinfo is None:
            start = self.timezone.localize(start)
        if start is None or not window.contains(start):
            return False

        key = event.reminder_key()
        if key in self.reminded:
            return False

        try:
            await self.notifier.announce(
                starting_soon_text(event.calendar_name),
                build_event_card(event, self.timezone, now),
            )
        except Exception as e:
            logger.error(f"Failed to announce reminder {key}: {e}", exc_info=True)
            return False

        self.reminded.add(key)
        logger.info(f"Reminder sent for {key}")
        return True
