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
Teamup API Client

Thin async wrapper over the Teamup calendar API. One client serves every
configured calendar; the calendar key is the first path segment of each
request. No retries here: failures surface as UpstreamError.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from .errors import UpstreamError
from .models import Calendar, EventRecord, Subcalendar

logger = logging.getLogger("teamupbridge.teamup.client")

DEFAULT_BASE_URL = "https://api.teamup.com"

# Response bodies embedded in errors are capped
MAX_ERROR_BODY = 500


class CalendarClient:
    """Client for the Teamup calendar API"""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            logger.warning(
                "TEAMUP_API_KEY not set - calendar requests will fail authentication"
            )

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Teamup-Token": api_key or "",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client"""
        await self._client.aclose()

    async def _request(
        self, calendar: Calendar, method: str, path: str, **kwargs: Any
    ) -> Any:
        url = f"/{calendar.store_key}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(calendar.name, f"{method} {path}: {e}") from e

        if response.is_error:
            body = response.text[:MAX_ERROR_BODY]
            logger.debug(
                f"Teamup {method} {path} for {calendar.name} returned "
                f"{response.status_code}: {body}"
            )
            raise UpstreamError(
                calendar.name,
                f"{method} {path} {response.reason_phrase}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                calendar.name, f"{method} {path}: invalid JSON response"
            ) from e

    async def list_subcalendars(self, calendar: Calendar) -> list[Subcalendar]:
        """
        Fetch the subcalendars of a calendar, in upstream order.

        Raises:
            UpstreamError: On transport failure or non-2xx response
        """
        data = await self._request(calendar, "GET", "/subcalendars")
        return [Subcalendar.from_api(s) for s in (data or {}).get("subcalendars") or []]

    async def list_events(
        self, calendar: Calendar, start_at: datetime, end_at: datetime
    ) -> list[EventRecord]:
        """
        List events overlapping [start_at, end_at].

        Returns:
            Event records stamped with the calendar (empty if none)
        """
        params = {
            "startDate": start_at.isoformat(),
            "endDate": end_at.isoformat(),
        }
        data = await self._request(calendar, "GET", "/events", params=params)
        events = (data or {}).get("events") or []
        return [EventRecord.from_api(e, calendar) for e in events]

    async def create_event(
        self,
        calendar: Calendar,
        title: str,
        start_at: datetime,
        end_at: datetime,
        notes: str,
        subcalendar_id: int,
    ) -> EventRecord:
        """
        Create an event in the given subcalendar.

        The subcalendar is mandatory; choosing one is the caller's job.

        Returns:
            The created event as reported by Teamup
        """
        payload = {
            "event": {
                "title": title,
                "start_dt": start_at.isoformat(),
                "end_dt": end_at.isoformat(),
                "subcalendar_id": int(subcalendar_id),
                "notes": notes or "",
            }
        }
        data = await self._request(calendar, "POST", "/events", json=payload)
        created = (data or {}).get("event") or data or {}
        logger.info(f"Created event {created.get('id')} in calendar {calendar.name}")
        return EventRecord.from_api(created, calendar)
