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
Event Formatting

Display helpers shared by reminders and commands: timestamps in the
preferred timezone, relative times, and the structured event card that
the notifier renders as an embed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pytz

from .errors import ValidationError
from .models import EventRecord, parse_timestamp

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"

_RELATIVE_UNITS = [
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
]


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass
class StructuredEvent:
    """Platform-neutral description of an event card."""

    title: str
    description: str
    timestamp: datetime
    fields: list[EmbedField] = field(default_factory=list)
    url: Optional[str] = None


def parse_local_datetime(value: str, tz: pytz.BaseTzInfo) -> datetime:
    """
    Parse a user-supplied ISO datetime, interpreting naive values in tz.

    Args:
        value: ISO string such as "2025-09-02T14:00"
        tz: Zone for values without an offset

    Returns:
        Timezone-aware datetime

    Raises:
        ValidationError: If the value is not a valid ISO datetime
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValidationError(f"Invalid date: {value!r}")
    if parsed.tzinfo is None:
        parsed = tz.localize(parsed)
    return parsed


def format_datetime(dt: datetime, tz: pytz.BaseTzInfo) -> str:
    """Format a timestamp in the display timezone."""
    if dt.tzinfo is None:
        dt = tz.localize(dt)
    return dt.astimezone(tz).strftime(DISPLAY_FORMAT)


def format_relative(dt: datetime, now: datetime) -> str:
    """Describe dt relative to now, e.g. 'in 5 minutes' or '2 hours ago'."""
    seconds = int((dt - now).total_seconds())
    magnitude = abs(seconds)
    if magnitude < 1:
        return "now"

    for unit, size in _RELATIVE_UNITS:
        if magnitude >= size:
            count = magnitude // size
            break
    label = f"{count} {unit}" + ("" if count == 1 else "s")
    return f"in {label}" if seconds > 0 else f"{label} ago"


def format_when(event: EventRecord, tz: pytz.BaseTzInfo, now: datetime) -> str:
    """'start → end (relative)' for an event, tolerating unparseable times."""
    start = event.start_at
    end = event.end_at
    if start is not None and start.tzinfo is None:
        start = tz.localize(start)
    start_str = format_datetime(start, tz) if start else event.start_dt or "?"
    end_str = format_datetime(end, tz) if end else event.end_dt or "?"
    when = f"{start_str} → {end_str}"
    if start:
        when = f"{when} ({format_relative(start, now)})"
    return when


def build_event_card(
    event: EventRecord,
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> StructuredEvent:
    """
    Build the card announced for an event.

    Args:
        event: Event to describe
        tz: Display timezone
        now: Reference time for the relative part (defaults to current time)

    Returns:
        StructuredEvent with When and Calendar fields
    """
    now = now or datetime.now(pytz.UTC)
    card = StructuredEvent(
        title=event.title or "Untitled",
        description=event.notes or "",
        timestamp=now,
        url=event.url,
    )
    card.fields.append(EmbedField(name="When", value=format_when(event, tz, now)))
    if event.calendar_name:
        card.fields.append(
            EmbedField(name="Calendar", value=event.calendar_name, inline=True)
        )
    return card


def starting_soon_text(calendar_name: str) -> str:
    return f"⏰ **Starting soon** ({calendar_name})"


def event_created_text(calendar_name: str) -> str:
    return f"🆕 **Event created** ({calendar_name})"
