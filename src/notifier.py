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
Channel Notifier

Posts announcements and event cards to the configured Discord channel.
"""

import logging
from typing import Optional, Protocol

import discord

from teamup.errors import NotificationDeliveryError
from teamup.formatting import StructuredEvent

logger = logging.getLogger("teamupbridge.notifier")


class Notifier(Protocol):
    """Anything that can announce text with an optional event card."""

    async def announce(
        self, text: str, event: Optional[StructuredEvent] = None
    ) -> None: ...


def build_embed(event: StructuredEvent) -> discord.Embed:
    """Render a StructuredEvent as a Discord embed."""
    embed = discord.Embed(
        title=event.title[:256],
        description=event.description[:4096] if event.description else None,
        color=discord.Color.blue(),
        timestamp=event.timestamp,
    )
    for f in event.fields:
        embed.add_field(name=f.name, value=f.value[:1024], inline=f.inline)
    if event.url:
        embed.url = event.url
    return embed


class ChannelNotifier:
    """Notifier that posts into one text channel."""

    def __init__(self, bot: discord.Client, channel_id: Optional[int]):
        self.bot = bot
        self.channel_id = channel_id

    async def _get_channel(self) -> discord.abc.Messageable:
        if self.channel_id is None:
            raise NotificationDeliveryError("DISCORD_CHANNEL_ID is not configured")

        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(self.channel_id)
            except (discord.NotFound, discord.Forbidden) as e:
                raise NotificationDeliveryError(
                    f"Channel {self.channel_id} not found or inaccessible"
                ) from e
            except discord.HTTPException as e:
                raise NotificationDeliveryError(
                    f"Failed to fetch channel {self.channel_id}: {e}"
                ) from e
        return channel

    async def announce(
        self, text: str, event: Optional[StructuredEvent] = None
    ) -> None:
        """
        Post text and an optional event card.

        Raises:
            NotificationDeliveryError: If the channel is missing or the send fails
        """
        channel = await self._get_channel()
        embeds = [build_embed(event)] if event else []
        try:
            await channel.send(content=text, embeds=embeds)
        except discord.HTTPException as e:
            raise NotificationDeliveryError(
                f"Failed to post to channel {self.channel_id}: {e}"
            ) from e
        logger.debug(f"Announced to channel {self.channel_id}: {text}")
