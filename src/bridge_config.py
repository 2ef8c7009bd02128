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
Bridge Configuration

Startup configuration for the Teamup bridge, read once from environment
variables. Calendars without a key are dropped; at least one must remain.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import pytz

from teamup.client import DEFAULT_BASE_URL
from teamup.models import Calendar

logger = logging.getLogger("teamupbridge.config")

DEFAULT_CALENDAR_NAMES = "birthday,event,timeoff"
CALENDAR_KEY_PREFIX = "TEAMUP_CAL_KEY_OR_ID_"


class ConfigError(Exception):
    """Raised when the configuration cannot be used to start the bot."""

    pass


def _int_setting(env: Mapping[str, str], name: str, default: str) -> int:
    raw = env.get(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _load_calendars(env: Mapping[str, str]) -> tuple[Calendar, ...]:
    names = [
        n.strip()
        for n in env.get("TEAMUP_CALENDARS", DEFAULT_CALENDAR_NAMES).split(",")
        if n.strip()
    ]
    calendars = []
    for name in names:
        key = env.get(f"{CALENDAR_KEY_PREFIX}{name}", "").strip()
        if not key:
            logger.warning(f"No key configured for calendar '{name}', skipping")
            continue
        if any(c.name == name for c in calendars):
            logger.warning(f"Calendar '{name}' listed twice, keeping the first")
            continue
        calendars.append(Calendar(name=name, store_key=key))
    return tuple(calendars)


@dataclass(frozen=True)
class BridgeConfig:
    """Configuration for the calendar bridge."""

    calendars: tuple[Calendar, ...]
    api_key: Optional[str] = None
    discord_token: Optional[str] = None
    channel_id: Optional[int] = None
    api_base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 30.0
    lookahead_minutes: int = 15
    scan_interval_seconds: int = 120
    timezone_name: str = "Europe/Riga"

    def __post_init__(self):
        if not self.calendars:
            raise ConfigError("No Teamup calendars configured")
        try:
            pytz.timezone(self.timezone_name)
        except pytz.UnknownTimeZoneError:
            raise ConfigError(f"Unknown timezone: {self.timezone_name}")

    @property
    def timezone(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone_name)

    @property
    def calendar_names(self) -> list[str]:
        return [c.name for c in self.calendars]

    def get_calendar(self, name: str) -> Optional[Calendar]:
        for calendar in self.calendars:
            if calendar.name == name:
                return calendar
        return None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "BridgeConfig":
        """Create config from environment variables with defaults."""
        env = os.environ if env is None else env

        channel_raw = env.get("DISCORD_CHANNEL_ID", "").strip()
        if channel_raw:
            try:
                channel_id = int(channel_raw)
            except ValueError:
                raise ConfigError(
                    f"DISCORD_CHANNEL_ID must be an integer, got {channel_raw!r}"
                )
        else:
            channel_id = None

        timeout_raw = env.get("TEAMUP_TIMEOUT_SEC", "30").strip()
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigError(f"TEAMUP_TIMEOUT_SEC must be a number, got {timeout_raw!r}")

        return cls(
            calendars=_load_calendars(env),
            api_key=env.get("TEAMUP_API_KEY") or None,
            discord_token=env.get("DISCORD_BOT_TOKEN") or None,
            channel_id=channel_id,
            api_base_url=env.get("TEAMUP_API_URL", DEFAULT_BASE_URL),
            request_timeout=timeout,
            lookahead_minutes=_int_setting(env, "REMINDER_LOOKAHEAD_MIN", "15"),
            scan_interval_seconds=_int_setting(env, "REMINDER_SCAN_INTERVAL_SEC", "120"),
            timezone_name=env.get("TZ_PREF", "Europe/Riga"),
        )
