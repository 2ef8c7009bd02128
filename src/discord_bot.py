"""
Teamup Bridge Discord Bot

Maintains the Discord connection, registers the calendar slash commands
and runs the reminder scanner against the configured Teamup calendars.
"""

import asyncio
import sys
from typing import Optional

import discord
from discord.ext import commands
from dotenv import load_dotenv

from bridge_config import BridgeConfig, ConfigError
from commands.calendar_commands import CalendarCommands
from commands.router import CommandRouter
from notifier import ChannelNotifier
from reminders import ReminderEngine, ReminderScheduler
from teamup import CalendarClient, EventAggregator, EventCreationWorkflow

load_dotenv()

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("teamupbridge")


class CalendarBot(commands.Bot):
    """Discord bot bridging slash commands and reminders to Teamup."""

    def __init__(self, config: BridgeConfig):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config
        self.calendar_client: Optional[CalendarClient] = None
        self.scheduler: Optional[ReminderScheduler] = None
        self._ready_event = asyncio.Event()

    async def setup_hook(self):
        """Called when the bot is starting up."""
        config = self.config
        logger.info(f"Setup: TEAMUP_API_KEY={'set' if config.api_key else 'missing'}")
        logger.info(f"Setup: DISCORD_CHANNEL_ID={config.channel_id or 'missing'}")
        logger.info(f"Setup: calendars={', '.join(config.calendar_names)}")
        logger.info(f"Setup: TZ_PREF={config.timezone_name}")

        self.calendar_client = CalendarClient(
            config.api_key,
            base_url=config.api_base_url,
            timeout=config.request_timeout,
        )
        notifier = ChannelNotifier(self, config.channel_id)
        router = CommandRouter(
            config,
            workflow=EventCreationWorkflow(self.calendar_client),
            aggregator=EventAggregator(self.calendar_client),
            notifier=notifier,
        )
        await self.add_cog(CalendarCommands(self, router))

        # Register globally so the commands work in any server the bot joins
        try:
            synced = await self.tree.sync()
            logger.info(f"Slash commands registered (global): {len(synced)}")
        except discord.HTTPException as e:
            logger.error(f"Failed to register slash commands: {e}", exc_info=True)

        engine = ReminderEngine(
            self.calendar_client,
            notifier,
            config.calendars,
            timezone=config.timezone,
            lookahead_minutes=config.lookahead_minutes,
        )
        self.scheduler = ReminderScheduler(
            self, engine, interval_seconds=config.scan_interval_seconds
        )
        self.scheduler.start()

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")
        self._ready_event.set()

    def is_ready(self) -> bool:
        """Check if the bot is ready."""
        return self._ready_event.is_set()

    async def wait_until_ready(self):
        """Wait until the bot is ready."""
        await self._ready_event.wait()

    async def close(self):
        """Stop background work and close the HTTP client before disconnecting."""
        if self.scheduler is not None:
            self.scheduler.stop()
        if self.calendar_client is not None:
            await self.calendar_client.close()
        await super().close()


async def main():
    """Run the bot."""
    try:
        config = BridgeConfig.from_env()
    except ConfigError as e:
        logger.error(f"{e}. Exiting.")
        sys.exit(1)

    if not config.discord_token:
        logger.error("DISCORD_BOT_TOKEN environment variable not set")
        sys.exit(1)

    bot = CalendarBot(config)
    async with bot:
        await bot.start(config.discord_token)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
