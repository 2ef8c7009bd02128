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
Event Creation Workflow

Validates a creation request, resolves the target subcalendar and
creates the event. Announcing the result is left to the caller.
"""

import logging
from typing import Callable, Optional, Sequence

from .client import CalendarClient
from .errors import ValidationError
from .models import EventCreationRequest, EventRecord, Subcalendar

logger = logging.getLogger("teamupbridge.teamup.workflow")

# Picks a subcalendar id from the upstream list, or None if none fits
SubcalendarStrategy = Callable[[Sequence[Subcalendar]], Optional[int]]


def first_subcalendar(subcalendars: Sequence[Subcalendar]) -> Optional[int]:
    """Use the first subcalendar in upstream order."""
    if not subcalendars:
        return None
    return subcalendars[0].id


class EventCreationWorkflow:
    """Straight-line event creation: validate, resolve, create."""

    def __init__(
        self,
        client: CalendarClient,
        subcalendar_strategy: SubcalendarStrategy = first_subcalendar,
    ):
        self.client = client
        self.subcalendar_strategy = subcalendar_strategy

    async def resolve_subcalendar(self, request: EventCreationRequest) -> int:
        """Return the forced subcalendar id, or pick one from upstream."""
        if request.forced_subcalendar_id is not None:
            return request.forced_subcalendar_id

        subcalendars = await self.client.list_subcalendars(request.calendar)
        subcalendar_id = self.subcalendar_strategy(subcalendars)
        if subcalendar_id is None:
            raise ValidationError(
                "No subcalendars available; specify subcalendar_id explicitly."
            )
        logger.debug(
            f"Resolved subcalendar {subcalendar_id} for calendar {request.calendar.name}"
        )
        return subcalendar_id

    async def create(self, request: EventCreationRequest) -> EventRecord:
        """
        Create the requested event.

        Raises:
            ValidationError: If end is not after start, or no subcalendar exists
            UpstreamError: If any calendar store call fails
        """
        if request.end_at <= request.start_at:
            raise ValidationError("End must be after start.")

        subcalendar_id = await self.resolve_subcalendar(request)
        return await self.client.create_event(
            request.calendar,
            title=request.title,
            start_at=request.start_at,
            end_at=request.end_at,
            notes=request.notes,
            subcalendar_id=subcalendar_id,
        )
