"""Periodic sweep that drops queues of guilds that have gone quiet."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import NonNegativeInt

if TYPE_CHECKING:
    from ...config.settings import CleanupSettings
    from ...domain.music.repository import QueueStore
    from .playback_service import PlaybackController

logger = logging.getLogger(__name__)


class IdleEvictionJob:
    def __init__(
        self,
        *,
        queue_store: QueueStore,
        controller: PlaybackController,
        settings: CleanupSettings,
    ) -> None:
        self._store = queue_store
        self._controller = controller
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.EVICTION_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.EVICTION_STARTED)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(LogTemplates.EVICTION_STOPPED)

    async def _run_loop(self) -> None:
        interval_seconds = self._settings.sweep_interval_minutes * 60

        while self._running:
            try:
                await self.run_sweep()
            except Exception as e:
                logger.exception(LogTemplates.EVICTION_FAILED, e)

            try:
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break

    async def run_sweep(self) -> EvictionStats:
        stats = EvictionStats()

        logger.debug(LogTemplates.EVICTION_CYCLE_RUNNING)

        cutoff = utcnow() - timedelta(minutes=self._settings.idle_eviction_minutes)
        for queue in self._store.find_idle(cutoff):
            stats.candidates += 1
            if self._controller.has_session(queue.guild_id):
                continue
            try:
                if await self._controller.evict(queue.guild_id):
                    stats.evicted += 1
            except Exception as e:
                logger.error(LogTemplates.EVICTION_GROUP_FAILED, queue.guild_id, e)

        if stats.evicted > 0:
            logger.info(LogTemplates.EVICTION_COMPLETED, stats.evicted)

        return stats

    @property
    def is_running(self) -> bool:
        return self._running


class EvictionStats(BaseModel):
    candidates: NonNegativeInt = 0
    evicted: NonNegativeInt = 0
