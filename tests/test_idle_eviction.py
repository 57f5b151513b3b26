"""
Unit Tests for IdleEvictionJob

Tests for the periodic idle queue sweep:
- Only idle queues past the cutoff are evicted
- Guilds with an open voice session are left alone
- Eviction failures are contained per guild
- Start/stop lifecycle
"""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_queue_bot.application.services.idle_eviction import IdleEvictionJob
from discord_queue_bot.config.settings import CleanupSettings
from discord_queue_bot.domain.music.entities import Track
from discord_queue_bot.domain.music.value_objects import TrackId
from discord_queue_bot.domain.shared.datetime_utils import utcnow
from discord_queue_bot.infrastructure.persistence.memory_store import InMemoryQueueStore


def _age(queue, minutes):
    queue.last_activity = utcnow() - timedelta(minutes=minutes)


@pytest.fixture
def store():
    return InMemoryQueueStore()


@pytest.fixture
def controller(store):
    ctrl = MagicMock()
    ctrl.has_session = MagicMock(return_value=False)

    async def evict(guild_id):
        return store.remove(guild_id)

    ctrl.evict = AsyncMock(side_effect=evict)
    return ctrl


@pytest.fixture
def job(store, controller):
    return IdleEvictionJob(
        queue_store=store,
        controller=controller,
        settings=CleanupSettings(idle_eviction_minutes=30, sweep_interval_minutes=1),
    )


class TestRunSweep:
    """Unit tests for a single sweep."""

    @pytest.mark.asyncio
    async def test_evicts_stale_idle_queues(self, job, store, controller):
        """Should evict idle queues untouched for longer than the threshold."""
        _age(store.get_or_create(1), 45)
        store.get_or_create(2)

        stats = await job.run_sweep()

        assert stats.candidates == 1
        assert stats.evicted == 1
        assert store.get(1) is None
        assert store.get(2) is not None
        controller.evict.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_keeps_queues_with_pending_tracks(self, job, store):
        """Should never evict a queue that still has something to play."""
        queue = store.get_or_create(1)
        queue.append(
            Track(id=TrackId("a"), title="A", artists=("X",), url="https://www.youtube.com/watch?v=a")
        )
        _age(queue, 120)

        stats = await job.run_sweep()

        assert stats.candidates == 0
        assert store.get(1) is not None

    @pytest.mark.asyncio
    async def test_skips_guilds_with_session(self, job, store, controller):
        """Should leave guilds that are still connected to voice."""
        _age(store.get_or_create(1), 45)
        controller.has_session.return_value = True

        stats = await job.run_sweep()

        assert stats.candidates == 1
        assert stats.evicted == 0
        controller.evict.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_evict_refused(self, job, store, controller):
        """Should not count guilds the controller declined to evict."""
        _age(store.get_or_create(1), 45)
        controller.evict = AsyncMock(return_value=False)

        stats = await job.run_sweep()

        assert stats.evicted == 0

    @pytest.mark.asyncio
    async def test_failure_is_contained(self, job, store, controller):
        """Should keep sweeping after one guild fails."""
        _age(store.get_or_create(1), 45)
        _age(store.get_or_create(2), 45)

        async def evict(guild_id):
            if guild_id == 1:
                raise RuntimeError("boom")
            return store.remove(guild_id)

        controller.evict = AsyncMock(side_effect=evict)

        stats = await job.run_sweep()

        assert stats.candidates == 2
        assert stats.evicted == 1
        assert store.get(1) is not None


class TestLifecycle:
    """Unit tests for start/stop."""

    @pytest.mark.asyncio
    async def test_start_runs_sweep_and_stop_cancels(self, job, store):
        """Should sweep immediately on start and stop cleanly."""
        _age(store.get_or_create(1), 45)

        job.start()
        assert job.is_running
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        await job.stop()

        assert not job.is_running
        assert store.get(1) is None

    @pytest.mark.asyncio
    async def test_double_start_is_ignored(self, job):
        """Should not spawn a second loop."""
        job.start()
        task = job._task
        job.start()

        assert job._task is task
        await job.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, job):
        """Should be safe to stop a job that never started."""
        await job.stop()
        assert not job.is_running
