"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from discord_queue_bot.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import Track

TrackEndCallback = Callable[[int, int], Awaitable[None]]
"""Called with (guild_id, play_id) when a play finishes normally."""

TrackErrorCallback = Callable[[int, int, Exception], Awaitable[None]]
"""Called with (guild_id, play_id, error) when a play fails mid-stream."""


class VoiceAdapter(ABC):
    """Interface for Discord voice channel operations.

    Every successful ``play`` is followed by exactly one track-end or
    track-error callback carrying the play ID that ``play`` returned, also
    when the play is cut short by ``stop`` or ``disconnect``.
    """

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> bool:
        """Connect to a voice channel, moving there if already connected elsewhere."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    async def play(
        self,
        guild_id: DiscordSnowflake,
        track: "Track",
        stream_url: str,
        *,
        volume: float,
    ) -> int:
        """Start playing *stream_url* at *volume* (0.0-1.0) and return the play ID.

        Raises:
            TransportError: If the guild has no voice connection or the player
                could not be started.
        """
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Stop current playback."""
        ...

    @abstractmethod
    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause current playback."""
        ...

    @abstractmethod
    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume paused playback."""
        ...

    @abstractmethod
    async def set_volume(self, guild_id: DiscordSnowflake, volume: float) -> bool:
        """Apply a 0.0-1.0 gain to the active player."""
        ...

    @abstractmethod
    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        """Set callback for when a track ends."""
        ...

    @abstractmethod
    def set_on_track_error_callback(self, callback: TrackErrorCallback) -> None:
        """Set callback for when a track fails while streaming."""
        ...
