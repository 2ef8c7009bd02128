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
Reminder Scheduler Module

Background task loop that drives the reminder engine.
Uses discord.ext.tasks for reliable scheduling.
"""

import logging
from typing import TYPE_CHECKING

from discord.ext import tasks

if TYPE_CHECKING:
    from discord.ext import commands

from .engine import ReminderEngine

logger = logging.getLogger("teamupbridge.reminders.scheduler")


class ReminderScheduler:
    """
    Background scheduler for calendar reminders.

    Runs the engine every scan interval once the bot is ready. An
    interval of zero or less disables scanning entirely.
    """

    def __init__(
        self,
        bot: "commands.Bot",
        engine: ReminderEngine,
        interval_seconds: int = 120,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            bot: Discord bot instance
            engine: Engine whose tick runs on each iteration
            interval_seconds: Seconds between scans
        """
        self.bot = bot
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._started = False

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    def start(self) -> None:
        """Start the scheduler loop."""
        if not self.enabled:
            logger.info("Reminder scanning disabled (interval <= 0)")
            return
        if not self._started:
            self._scan.change_interval(seconds=self.interval_seconds)
            self._scan.start()
            self._started = True
            logger.info(
                f"Reminder scanner every {self.interval_seconds}s; "
                f"lookahead {self.engine.lookahead_minutes}m; "
                f"calendars: {', '.join(c.name for c in self.engine.calendars)}"
            )

    def stop(self) -> None:
        """Stop the scheduler loop."""
        if self._started:
            self._scan.cancel()
            self._started = False
            logger.info("Reminder scheduler stopped")

    @tasks.loop(seconds=120)
    async def _scan(self) -> None:
        """Run one reminder scan."""
        await self.engine.tick()

    @_scan.before_loop
    async def _before_scan(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        await self.bot.wait_until_ready()
        logger.info("Reminder scheduler ready, starting loop")
