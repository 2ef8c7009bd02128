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
Calendar Data Model

Typed records for calendars, subcalendars and events as returned by the
Teamup API. Records are produced from API payloads and never mutated.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Calendar:
    """A named Teamup calendar reachable with its own key."""

    name: str
    store_key: str


@dataclass(frozen=True)
class Subcalendar:
    """A sub-partition of a calendar that every event must belong to."""

    id: int
    name: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Subcalendar":
        return cls(id=int(payload["id"]), name=payload.get("name") or "")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from the API.

    Args:
        value: Timestamp string, possibly with a trailing "Z"

    Returns:
        Parsed datetime, or None if the value is missing or malformed
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class EventRecord:
    """
    A single event occurrence.

    start_dt/end_dt keep the raw ISO strings from the API; they are the
    sort key for aggregated listings and part of the reminder key.
    """

    title: str
    start_dt: str
    end_dt: str
    notes: str = ""
    id: Optional[str] = None
    series_id: Optional[str] = None
    url: Optional[str] = None
    source_calendar: Optional[Calendar] = None

    @classmethod
    def from_api(
        cls, payload: dict[str, Any], calendar: Optional[Calendar] = None
    ) -> "EventRecord":
        """Build a record from a Teamup event object."""
        event_id = payload.get("id")
        series_id = payload.get("series_id")
        return cls(
            title=payload.get("title") or "",
            start_dt=payload.get("start_dt") or "",
            end_dt=payload.get("end_dt") or "",
            notes=payload.get("notes") or "",
            id=str(event_id) if event_id not in (None, "") else None,
            series_id=str(series_id) if series_id not in (None, "") else None,
            url=payload.get("url") or payload.get("permalink") or None,
            source_calendar=calendar,
        )

    @property
    def start_at(self) -> Optional[datetime]:
        return parse_timestamp(self.start_dt)

    @property
    def end_at(self) -> Optional[datetime]:
        return parse_timestamp(self.end_dt)

    @property
    def calendar_name(self) -> str:
        return self.source_calendar.name if self.source_calendar else ""

    def with_calendar(self, calendar: Calendar) -> "EventRecord":
        """Return a copy stamped with its source calendar."""
        return replace(self, source_calendar=calendar)

    def reminder_key(self) -> str:
        """
        Identity of this reminder occasion: calendar, event identity, start.

        Identity is the event id, else the series id, else the title.
        """
        identity = self.id or self.series_id or self.title
        return f"{self.calendar_name}:{identity}:{self.start_dt}"


@dataclass(frozen=True)
class EventCreationRequest:
    """A validated-on-use request to create an event."""

    calendar: Calendar
    title: str
    start_at: datetime
    end_at: datetime
    notes: str = ""
    forced_subcalendar_id: Optional[int] = None
