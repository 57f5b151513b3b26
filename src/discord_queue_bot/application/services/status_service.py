"""Read-only status projection polled by external reporting surfaces."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import psutil
from pydantic import BaseModel, ConfigDict

from ...domain.shared.constants import COMMAND_CATALOG
from ...domain.shared.datetime_utils import format_uptime, iso_utc
from ...domain.shared.enums import OnlineState
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from discord.ext import commands

    from ...domain.music.repository import QueueStore

logger = logging.getLogger(__name__)

_MIB = 1024 * 1024


class CommandInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    usage: str


class BotStatus(BaseModel):
    """Point-in-time status of the bot process."""

    model_config = ConfigDict(frozen=True)

    online: bool
    status: OnlineState
    guild_count: NonNegativeInt = 0
    active_group_count: NonNegativeInt = 0
    queue_count: NonNegativeInt = 0
    uptime_seconds: NonNegativeInt = 0
    uptime_human: str = "0s"
    memory_rss_mb: float | None = None
    command_catalog: tuple[CommandInfo, ...] = ()
    generated_at: str = ""


class StatusService:
    def __init__(self, *, queue_store: QueueStore, command_prefix: str = "!") -> None:
        self._store = queue_store
        self._prefix = command_prefix
        self._started_at = time.monotonic()
        self._bot: commands.Bot | None = None

    def set_bot(self, bot: commands.Bot) -> None:
        self._bot = bot

    @property
    def uptime_seconds(self) -> int:
        return int(time.monotonic() - self._started_at)

    def is_online(self) -> bool:
        bot = self._bot
        return bot is not None and bot.is_ready() and not bot.is_closed()

    def command_catalog(self) -> tuple[CommandInfo, ...]:
        return tuple(
            CommandInfo(
                name=spec.name,
                description=spec.description,
                usage=spec.usage_with_prefix(self._prefix),
            )
            for spec in COMMAND_CATALOG
        )

    def snapshot(self) -> BotStatus:
        online = self.is_online()
        uptime = self.uptime_seconds
        return BotStatus(
            online=online,
            status=OnlineState.ONLINE if online else OnlineState.OFFLINE,
            guild_count=len(self._bot.guilds) if self._bot is not None else 0,
            active_group_count=self._store.count_playing(),
            queue_count=self._store.count(),
            uptime_seconds=uptime,
            uptime_human=format_uptime(uptime),
            memory_rss_mb=self._memory_rss_mb(),
            command_catalog=self.command_catalog(),
            generated_at=iso_utc(),
        )

    def _memory_rss_mb(self) -> float | None:
        try:
            return round(psutil.Process().memory_info().rss / _MIB, 1)
        except psutil.Error:
            logger.debug(LogTemplates.STATUS_MEMORY_UNAVAILABLE, exc_info=True)
            return None
