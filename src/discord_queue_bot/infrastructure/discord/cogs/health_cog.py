"""Status publishing loop and the ``status`` command."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import discord
from discord.ext import commands, tasks

from discord_queue_bot.domain.shared.constants import TimeConstants
from discord_queue_bot.domain.shared.messages import (
    DiscordUIMessages,
    EmojiConstants,
    ErrorMessages,
    LogTemplates,
)

if TYPE_CHECKING:
    from ....application.services.status_service import BotStatus
    from ....config.container import Container

logger = logging.getLogger(__name__)


class HealthCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

        health = container.settings.health
        self.status_file = Path(health.status_file)
        self.status_file.parent.mkdir(parents=True, exist_ok=True)
        self.publish_status.change_interval(seconds=health.status_interval_seconds)

    async def cog_load(self) -> None:
        self.publish_status.start()
        logger.info(LogTemplates.COG_LOADED_HEALTH)

    async def cog_unload(self) -> None:
        self.publish_status.cancel()
        logger.info(LogTemplates.COG_UNLOADED_HEALTH)

    def _atomic_write(self, path: Path, status: BotStatus) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(status.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
        tmp.replace(path)

    def write_status(self) -> BotStatus:
        status = self.container.status_service.snapshot()
        self._atomic_write(self.status_file, status)
        logger.debug(LogTemplates.STATUS_WRITTEN, self.status_file)
        return status

    @tasks.loop(seconds=TimeConstants.STATUS_INTERVAL_SECONDS, reconnect=True)
    async def publish_status(self) -> None:
        try:
            self.write_status()
        except Exception:
            logger.exception(LogTemplates.STATUS_WRITE_FAILED)

    @publish_status.before_loop
    async def _wait_ready(self) -> None:
        await self.bot.wait_until_ready()

    def _build_status_embed(self, status: BotStatus) -> discord.Embed:
        color = discord.Color.green() if status.online else discord.Color.red()
        embed = discord.Embed(title=DiscordUIMessages.EMBED_BOT_STATUS, color=color)
        embed.timestamp = datetime.now(UTC)

        emoji = EmojiConstants.ONLINE if status.online else EmojiConstants.OFFLINE
        embed.add_field(
            name=DiscordUIMessages.FIELD_STATUS,
            value=f"{emoji} {status.status.value.capitalize()}",
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_GUILDS, value=str(status.guild_count), inline=True
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_ACTIVE_QUEUES,
            value=str(status.active_group_count),
            inline=True,
        )
        embed.add_field(name=DiscordUIMessages.FIELD_UPTIME, value=status.uptime_human, inline=True)
        return embed

    @commands.command(name="status")
    async def status(self, ctx: commands.Context) -> None:
        """Show bot status."""
        status = self.container.status_service.snapshot()
        await ctx.send(embed=self._build_status_embed(status))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(HealthCog(bot, container))
