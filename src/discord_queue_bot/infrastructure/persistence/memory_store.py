"""In-process queue store; state lives for the lifetime of the service instance."""

from __future__ import annotations

import logging
from datetime import datetime

from discord_queue_bot.domain.music.entities import GuildQueue
from discord_queue_bot.domain.music.repository import QueueStore
from discord_queue_bot.domain.shared.constants import AudioConstants
from discord_queue_bot.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class InMemoryQueueStore(QueueStore):
    def __init__(self, *, default_volume: int = AudioConstants.DEFAULT_VOLUME) -> None:
        self._default_volume = default_volume
        self._queues: dict[int, GuildQueue] = {}

    @property
    def default_volume(self) -> int:
        return self._default_volume

    def get(self, guild_id: int) -> GuildQueue | None:
        return self._queues.get(guild_id)

    def get_or_create(self, guild_id: int) -> GuildQueue:
        queue = self._queues.get(guild_id)
        if queue is None:
            queue = GuildQueue(guild_id=guild_id, volume=self._default_volume)
            self._queues[guild_id] = queue
            logger.debug(LogTemplates.QUEUE_CREATED, guild_id)
        return queue

    def remove(self, guild_id: int) -> bool:
        if self._queues.pop(guild_id, None) is None:
            return False
        logger.debug(LogTemplates.QUEUE_REMOVED_GUILD, guild_id)
        return True

    def all(self) -> list[GuildQueue]:
        return list(self._queues.values())

    def count(self) -> int:
        return len(self._queues)

    def count_playing(self) -> int:
        return sum(1 for queue in self._queues.values() if queue.is_playing)

    def find_idle(self, older_than: datetime) -> list[GuildQueue]:
        return [
            queue
            for queue in self._queues.values()
            if queue.is_idle and queue.last_activity < older_than
        ]
