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
Error Taxonomy

Exceptions raised by the calendar bridge. Callers decide what the user
sees: ValidationError messages are shown verbatim, everything else is
logged in full and reported generically.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for calendar bridge errors."""

    pass


class ValidationError(BridgeError):
    """Raised when user input is rejected before any network call."""

    pass


class UpstreamError(BridgeError):
    """Raised when the calendar store fails or returns a non-2xx response."""

    def __init__(
        self,
        calendar_name: str,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ):
        self.calendar_name = calendar_name
        self.status_code = status_code
        self.body = body
        detail = f"Teamup API call for '{calendar_name}' failed: {message}"
        if status_code is not None:
            detail = f"{detail} (HTTP {status_code})"
        if body:
            detail = f"{detail} {body}"
        super().__init__(detail)


class NotificationDeliveryError(BridgeError):
    """Raised when an announcement could not be posted to the chat channel."""

    pass
