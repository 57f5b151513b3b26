import asyncio
import random

import pytest

from discord_queue_bot.application.interfaces.catalog_resolver import StreamResolver
from discord_queue_bot.application.interfaces.voice_adapter import VoiceAdapter
from discord_queue_bot.application.services.mailbox import MailboxRegistry
from discord_queue_bot.application.services.playback_service import PlaybackController
from discord_queue_bot.domain.music.entities import Track
from discord_queue_bot.domain.music.value_objects import TrackId, TrackSource
from discord_queue_bot.domain.shared.exceptions import StreamUnavailableError, TransportError
from discord_queue_bot.infrastructure.persistence.memory_store import InMemoryQueueStore

# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def build_track(
    name: str = "song",
    *,
    duration: int = 180,
    source: TrackSource = TrackSource.YOUTUBE,
    artists: tuple[str, ...] = ("Artist",),
) -> Track:
    return Track(
        id=TrackId(f"id-{name}"),
        title=f"Title {name}",
        artists=artists,
        duration_seconds=duration,
        url=f"https://www.youtube.com/watch?v={name}",
        source=source,
    )


@pytest.fixture
def make_track():
    """Factory for tracks with a distinct id and title per name."""
    return build_track


@pytest.fixture
def sample_track():
    return build_track("sample")


# ============================================================================
# Transport and Resolver Fakes
# ============================================================================


class FakeVoiceAdapter(VoiceAdapter):
    """In-memory transport that records calls and lets tests fire completions."""

    def __init__(self) -> None:
        self.connected: set[int] = set()
        self.connect_ok = True
        self.play_error: Exception | None = None
        self.next_play_id = 0
        self.plays: list[tuple[int, Track, str, float]] = []
        self.play_ids: dict[int, int] = {}
        self.calls: list[tuple[str, int]] = []
        self.volumes: list[tuple[int, float]] = []
        self.on_end = None
        self.on_error = None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        self.calls.append(("connect", guild_id))
        if not self.connect_ok:
            return False
        self.connected.add(guild_id)
        return True

    async def disconnect(self, guild_id: int) -> bool:
        self.calls.append(("disconnect", guild_id))
        self.connected.discard(guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.connected

    async def play(self, guild_id: int, track: Track, stream_url: str, *, volume: float) -> int:
        self.calls.append(("play", guild_id))
        if self.play_error is not None:
            raise self.play_error
        if guild_id not in self.connected:
            raise TransportError(guild_id)
        self.next_play_id += 1
        self.plays.append((guild_id, track, stream_url, volume))
        self.play_ids[guild_id] = self.next_play_id
        return self.next_play_id

    async def stop(self, guild_id: int) -> bool:
        self.calls.append(("stop", guild_id))
        return True

    async def pause(self, guild_id: int) -> bool:
        self.calls.append(("pause", guild_id))
        return True

    async def resume(self, guild_id: int) -> bool:
        self.calls.append(("resume", guild_id))
        return True

    async def set_volume(self, guild_id: int, volume: float) -> bool:
        self.volumes.append((guild_id, volume))
        return True

    def set_on_track_end_callback(self, callback) -> None:
        self.on_end = callback

    def set_on_track_error_callback(self, callback) -> None:
        self.on_error = callback

    # ── test helpers ──

    def played_titles(self, guild_id: int | None = None) -> list[str]:
        return [t.title for g, t, _, _ in self.plays if guild_id is None or g == guild_id]

    async def finish(self, guild_id: int) -> None:
        """Report the active play as finished, like the FFmpeg after-callback."""
        await self.on_end(guild_id, self.play_ids[guild_id])

    async def fail(self, guild_id: int, error: Exception | None = None) -> None:
        await self.on_error(guild_id, self.play_ids[guild_id], error or RuntimeError("ffmpeg"))


class FakeStreamResolver(StreamResolver):
    """Returns ``stream://<title>`` unless the title is listed as failing or blocking."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.blocking: dict[str, asyncio.Event] = {}
        self.requests: list[str] = []
        self.cancelled: list[str] = []

    async def get_stream_url(self, track: Track) -> str:
        self.requests.append(track.title)
        gate = self.blocking.get(track.title)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(track.title)
                raise
        if track.title in self.failing:
            raise StreamUnavailableError(track.title)
        return f"stream://{track.title}"


@pytest.fixture
def queue_store():
    return InMemoryQueueStore()


@pytest.fixture
def voice():
    return FakeVoiceAdapter()


@pytest.fixture
def streams():
    return FakeStreamResolver()


@pytest.fixture
def mailboxes():
    return MailboxRegistry()


@pytest.fixture
async def controller(queue_store, voice, streams, mailboxes):
    """Playback controller wired to in-memory fakes with a deterministic shuffle."""
    ctrl = PlaybackController(
        queue_store=queue_store,
        voice_adapter=voice,
        stream_resolver=streams,
        mailboxes=mailboxes,
        fetch_timeout=1.0,
        rng=random.Random(1234),
    )
    yield ctrl
    await ctrl.shutdown()
