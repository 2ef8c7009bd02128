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
Calendar Slash Commands

Discord slash commands for creating Teamup events and listing upcoming
ones. Command logic lives in CommandRouter.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from .router import ALL_CALENDARS, CommandResult, CommandRouter

logger = logging.getLogger("teamupbridge.commands.calendar")


class CalendarCommands(commands.Cog):
    """
    Slash commands for Teamup calendars.

    Commands:
    - /addevent - Create an event and announce it
    - /upcoming - List upcoming events
    """

    def __init__(self, bot: commands.Bot, router: CommandRouter):
        self.bot = bot
        self.router = router

    async def _send(self, interaction: discord.Interaction, result: CommandResult):
        """Deliver the reply, as a followup once the response was deferred."""
        try:
            if interaction.response.is_done():
                await interaction.followup.send(result.content, ephemeral=True)
            else:
                await interaction.response.send_message(result.content, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(
                f"Failed to reply to /{result.command} ({result.state.value}): {e}",
                exc_info=True,
            )

    def _calendar_choices(
        self, current: str, include_all: bool
    ) -> list[app_commands.Choice[str]]:
        names = list(self.router.config.calendar_names)
        if include_all:
            names.insert(0, ALL_CALENDARS)
        current_lower = current.lower()
        return [
            app_commands.Choice(name=name, value=name)
            for name in names
            if current_lower in name.lower()
        ][:25]

    # =========================================================================
    # /addevent
    # =========================================================================

    @app_commands.command(name="addevent", description="Create a Teamup event")
    @app_commands.describe(
        calendar="Which calendar?",
        title="Event title",
        start="Start ISO (e.g., 2025-09-02T14:00)",
        end="End ISO (e.g., 2025-09-02T15:00)",
        notes="Notes / Description",
        subcalendar_id="Optional numeric subcalendar id",
    )
    async def add_event(
        self,
        interaction: discord.Interaction,
        calendar: str,
        title: str,
        start: str,
        end: str,
        notes: Optional[str] = None,
        subcalendar_id: Optional[int] = None,
    ):
        """Create a Teamup event."""
        result = await self.router.create_event(
            calendar_name=calendar,
            title=title,
            start=start,
            end=end,
            notes=notes,
            subcalendar_id=subcalendar_id,
            on_executing=lambda: interaction.response.defer(ephemeral=True),
        )
        await self._send(interaction, result)

    @add_event.autocomplete("calendar")
    async def add_event_calendar_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> list[app_commands.Choice[str]]:
        """Autocomplete for the calendar parameter."""
        return self._calendar_choices(current, include_all=False)

    # =========================================================================
    # /upcoming
    # =========================================================================

    @app_commands.command(name="upcoming", description="List upcoming Teamup events")
    @app_commands.describe(
        hours="Hours ahead (default 24)",
        calendar='calendar (or "all")',
    )
    async def upcoming(
        self,
        interaction: discord.Interaction,
        hours: Optional[app_commands.Range[int, 1, 8760]] = None,
        calendar: Optional[str] = None,
    ):
        """List upcoming Teamup events."""
        result = await self.router.list_upcoming(
            hours=hours,
            calendar=calendar,
            on_executing=lambda: interaction.response.defer(ephemeral=True),
        )
        await self._send(interaction, result)

    @upcoming.autocomplete("calendar")
    async def upcoming_calendar_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> list[app_commands.Choice[str]]:
        """Autocomplete for the calendar parameter."""
        return self._calendar_choices(current, include_all=True)

