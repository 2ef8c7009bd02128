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
Calendar Command Router

Platform-neutral handling of the calendar commands. Each invocation
moves through received -> validating -> executing -> replied | failed;
the Discord cog only parses options and delivers the reply.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional

from bridge_config import BridgeConfig
from teamup.aggregator import EventAggregator
from teamup.errors import NotificationDeliveryError, ValidationError
from teamup.formatting import (
    build_event_card,
    event_created_text,
    format_datetime,
    parse_local_datetime,
)
from teamup.models import EventCreationRequest, EventRecord
from teamup.workflow import EventCreationWorkflow

logger = logging.getLogger("teamupbridge.commands.router")

# Entries shown by /upcoming before the "and N more" suffix
UPCOMING_LIMIT = 12
DEFAULT_UPCOMING_HOURS = 24
ALL_CALENDARS = "all"

INVALID_DATES_MESSAGE = (
    "⚠️ Invalid dates. Use ISO like 2025-09-02T14:00; end must be after start."
)
GENERIC_ERROR_MESSAGE = "❌ Error. Check logs."
CREATED_MESSAGE = "✅ Event created and announced."
ANNOUNCE_FAILED_MESSAGE = "⚠️ Event created, but the announcement could not be posted."


class CommandState(Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    EXECUTING = "executing"
    REPLIED = "replied"
    FAILED = "failed"


_TRANSITIONS = {
    CommandState.RECEIVED: {CommandState.VALIDATING, CommandState.EXECUTING},
    CommandState.VALIDATING: {CommandState.EXECUTING, CommandState.FAILED},
    CommandState.EXECUTING: {CommandState.REPLIED, CommandState.FAILED},
    CommandState.REPLIED: set(),
    CommandState.FAILED: set(),
}


@dataclass
class CommandResult:
    """Outcome of one command invocation."""

    command: str
    state: CommandState = CommandState.RECEIVED
    content: str = ""
    history: list[CommandState] = field(default_factory=lambda: [CommandState.RECEIVED])

    @property
    def ok(self) -> bool:
        return self.state is CommandState.REPLIED

    def advance(self, state: CommandState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal command transition {self.state.value} -> {state.value}"
            )
        logger.debug(f"/{self.command}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def reply(self, content: str) -> "CommandResult":
        self.advance(CommandState.REPLIED)
        self.content = content
        return self

    def fail(self, content: str) -> "CommandResult":
        self.advance(CommandState.FAILED)
        self.content = content
        return self


# Called once when an invocation starts executing (e.g. to defer a reply)
OnExecuting = Optional[Callable[[], Awaitable[None]]]


class CommandRouter:
    """Maps calendar commands to the workflow and aggregator."""

    def __init__(
        self,
        config: BridgeConfig,
        workflow: EventCreationWorkflow,
        aggregator: EventAggregator,
        notifier,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.workflow = workflow
        self.aggregator = aggregator
        self.notifier = notifier
        self.clock = clock or (lambda: datetime.now(self.config.timezone))

    async def _enter_executing(self, result: CommandResult, on_executing: OnExecuting):
        result.advance(CommandState.EXECUTING)
        if on_executing is not None:
            await on_executing()

    # =========================================================================
    # create-event
    # =========================================================================

    def _validate_create(
        self,
        calendar_name: str,
        title: str,
        start: str,
        end: str,
        notes: Optional[str],
        subcalendar_id: Optional[int],
    ) -> EventCreationRequest:
        calendar = self.config.get_calendar(calendar_name)
        if calendar is None:
            raise ValidationError(f"⚠️ Unknown calendar: {calendar_name}")

        tz = self.config.timezone
        try:
            start_at = parse_local_datetime(start, tz)
            end_at = parse_local_datetime(end, tz)
        except ValidationError:
            raise ValidationError(INVALID_DATES_MESSAGE)
        if end_at <= start_at:
            raise ValidationError(INVALID_DATES_MESSAGE)

        return EventCreationRequest(
            calendar=calendar,
            title=title,
            start_at=start_at,
            end_at=end_at,
            notes=notes or "",
            forced_subcalendar_id=subcalendar_id,
        )

    async def create_event(
        self,
        calendar_name: str,
        title: str,
        start: str,
        end: str,
        notes: Optional[str] = None,
        subcalendar_id: Optional[int] = None,
        on_executing: OnExecuting = None,
    ) -> CommandResult:
        """
        Handle the create-event command.

        Args:
            calendar_name: Configured calendar name
            title: Event title
            start: ISO local start, e.g. 2025-09-02T14:00
            end: ISO local end
            notes: Optional description
            subcalendar_id: Optional subcalendar override
            on_executing: Awaited once validation passed

        Returns:
            CommandResult in the replied or failed state
        """
        result = CommandResult(command="addevent")
        result.advance(CommandState.VALIDATING)
        try:
            request = self._validate_create(
                calendar_name, title, start, end, notes, subcalendar_id
            )
        except ValidationError as e:
            return result.fail(str(e))

        try:
            await self._enter_executing(result, on_executing)
            created = await self.workflow.create(request)
        except ValidationError as e:
            return result.fail(f"⚠️ {e}")
        except Exception as e:
            logger.error(f"/addevent failed for calendar {calendar_name}: {e}", exc_info=True)
            return result.fail(GENERIC_ERROR_MESSAGE)

        created = created.with_calendar(request.calendar)
        try:
            await self.notifier.announce(
                event_created_text(request.calendar.name),
                build_event_card(created, self.config.timezone),
            )
        except NotificationDeliveryError as e:
            logger.error(f"Event created but announcement failed: {e}", exc_info=True)
            return result.fail(ANNOUNCE_FAILED_MESSAGE)
        except Exception as e:
            logger.error(f"Event created but announcement failed: {e}", exc_info=True)
            return result.fail(GENERIC_ERROR_MESSAGE)

        return result.reply(CREATED_MESSAGE)

    # =========================================================================
    # list-upcoming
    # =========================================================================

    def format_upcoming(
        self, events: list[EventRecord], hours: int, selection: str
    ) -> str:
        """Render the upcoming listing, or the explicit no-events message."""
        if not events:
            return f"No events in the next {hours}h ({selection})."

        tz = self.config.timezone
        lines = []
        for event in events[:UPCOMING_LIMIT]:
            start = event.start_at
            when = format_datetime(start, tz) if start else event.start_dt
            lines.append(f"• [{event.calendar_name}] {when} — {event.title or 'Untitled'}")

        text = f"**Upcoming (next {hours}h, {selection}):**\n" + "\n".join(lines)
        if len(events) > UPCOMING_LIMIT:
            text += f"\n… and {len(events) - UPCOMING_LIMIT} more"
        return text

    async def list_upcoming(
        self,
        hours: Optional[int] = None,
        calendar: Optional[str] = None,
        on_executing: OnExecuting = None,
    ) -> CommandResult:
        """
        Handle the list-upcoming command.

        Args:
            hours: Hours ahead (default 24)
            calendar: Configured calendar name or "all" (default)
            on_executing: Awaited once the command starts executing

        Returns:
            CommandResult in the replied or failed state
        """
        result = CommandResult(command="upcoming")
        hours = DEFAULT_UPCOMING_HOURS if hours is None else hours
        selection = calendar or ALL_CALENDARS

        try:
            await self._enter_executing(result, on_executing)

            if selection == ALL_CALENDARS:
                calendars = list(self.config.calendars)
            else:
                target = self.config.get_calendar(selection)
                if target is None:
                    return result.fail(f"⚠️ Unknown calendar: {selection}")
                calendars = [target]

            now = self.clock()
            events = await self.aggregator.collect(
                calendars, now, now + timedelta(hours=hours)
            )
        except Exception as e:
            logger.error(f"/upcoming failed ({selection}, {hours}h): {e}", exc_info=True)
            return result.fail(GENERIC_ERROR_MESSAGE)

        return result.reply(self.format_upcoming(events, hours, selection))
