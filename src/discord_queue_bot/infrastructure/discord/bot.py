"""Main Discord bot class integrating the DI container, cog lifecycle, and background jobs."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_queue_bot.domain.shared.constants import find_command
from discord_queue_bot.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

COG_EXTENSIONS = (
    "discord_queue_bot.infrastructure.discord.cogs.music_cog",
    "discord_queue_bot.infrastructure.discord.cogs.health_cog",
)


class QueueBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._shutdown_event = asyncio.Event()
        self._closing = False
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        try:
            await self.container.initialize()
            logger.info(LogTemplates.BOT_CONTAINER_INITIALIZED)
        except Exception as e:
            logger.exception(LogTemplates.BOT_CONTAINER_INIT_FAILED, e)
            raise

        await self._load_cogs()

        try:
            self.container.idle_eviction_job.start()
        except Exception as e:
            logger.warning(LogTemplates.BOT_EVICTION_START_FAILED, e)

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        loaded = 0
        failed = 0

        for cog in COG_EXTENSIONS:
            try:
                await self.load_extension(cog)
                logger.info(LogTemplates.BOT_COG_LOADED, cog)
                loaded += 1
            except Exception as e:
                logger.exception(LogTemplates.BOT_COG_LOAD_FAILED, cog, e)
                failed += 1

        logger.info(LogTemplates.BOT_COGS_LOADED_SUMMARY, loaded, failed)

    def _usage_for(self, ctx: commands.Context) -> str:
        name = ctx.command.name if ctx.command is not None else ""
        spec = find_command(name)
        if spec is None:
            return f"{self.settings.discord.command_prefix}{name}"
        return spec.usage_with_prefix(self.settings.discord.command_prefix)

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        """Global prefix-command error handler."""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.MissingRequiredArgument):
            message = DiscordUIMessages.ERROR_MISSING_ARGUMENT.format(
                param_name=error.param.name, usage=self._usage_for(ctx)
            )
        elif isinstance(error, commands.BadArgument):
            message = DiscordUIMessages.ERROR_INVALID_ARGUMENT.format(usage=self._usage_for(ctx))
        elif isinstance(error, commands.NoPrivateMessage):
            message = DiscordUIMessages.STATE_SERVER_ONLY
        else:
            original = getattr(error, "original", error)
            logger.error(
                LogTemplates.BOT_COMMAND_ERROR,
                getattr(ctx.command, "name", "<unknown>"),
                original,
                exc_info=original,
            )
            message = DiscordUIMessages.ERROR_COMMAND_FAILED_SEE_LOGS

        try:
            await ctx.send(message)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def on_ready(self) -> None:
        logger.info(
            LogTemplates.BOT_READY,
            self.user,  # type: ignore
            self.user.id,  # type: ignore
        )
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        activity = discord.Activity(
            type=discord.ActivityType.listening,
            name=f"{self.settings.discord.command_prefix}help",
        )
        await self.change_presence(activity=activity)

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        try:
            await self.container.idle_eviction_job.stop()
        except Exception as e:
            logger.warning(LogTemplates.BOT_EVICTION_STOP_ERROR, e)

        try:
            await self.container.shutdown()
            logger.info(LogTemplates.BOT_CONTAINER_SHUTDOWN)
        except Exception as e:
            logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, e)

        await super().close()
        self._shutdown_event.set()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        async def runner():
            async with self:
                loop = asyncio.get_running_loop()

                async def _graceful_close() -> None:
                    try:
                        await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
                    except TimeoutError:
                        logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(_graceful_close()))
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> QueueBot:
    return QueueBot(container=container, settings=settings)
