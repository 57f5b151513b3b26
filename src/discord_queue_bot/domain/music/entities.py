"""Core domain entities for the music bounded context."""

from __future__ import annotations

import random
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from discord_queue_bot.domain.music.value_objects import LoopMode, TrackId, TrackSource
from discord_queue_bot.domain.shared.datetime_utils import utcnow
from discord_queue_bot.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
    InvalidQueueIndexError,
    ValidationError,
)
from discord_queue_bot.domain.shared.messages import ErrorMessages
from discord_queue_bot.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    QueueCursor,
    TrackTitleStr,
    UtcDatetimeField,
    VolumePercent,
)


def format_seconds(total: int) -> str:
    """Format seconds as M:SS or H:MM:SS."""
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


class Track(BaseModel):
    """Immutable value object representing a playable track."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackId
    title: TrackTitleStr
    artists: tuple[NonEmptyStr, ...] = Field(min_length=1)
    duration_seconds: DurationSeconds = 0
    url: HttpUrlStr
    source: TrackSource = TrackSource.YOUTUBE
    thumbnail_url: HttpUrlStr | None = None

    # Request metadata (set when queued)
    requested_by: NonEmptyStr | None = None

    @property
    def artist(self) -> str:
        return ", ".join(self.artists)

    @property
    def duration_formatted(self) -> str:
        return format_seconds(self.duration_seconds)

    @property
    def display_title(self) -> str:
        """Get display title with duration if available."""
        if self.duration_seconds:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title

    def with_requester(self, user_name: NonEmptyStr) -> Track:
        """Return a copy of this track with requester metadata populated."""
        return self.model_copy(update={"requested_by": user_name})


class QueueSnapshot(BaseModel):
    """Read-only projection of a guild queue for listings and now-playing displays."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    tracks: tuple[Track, ...] = ()
    cursor: QueueCursor = 0
    now_playing: Track | None = None
    is_playing: bool = False
    is_paused: bool = False
    volume: VolumePercent = 50
    loop_mode: LoopMode = LoopMode.OFF

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def upcoming(self) -> tuple[Track, ...]:
        return self.tracks[self.cursor + 1 :]

    @property
    def total_duration_seconds(self) -> int:
        return sum(track.duration_seconds for track in self.tracks)

    def page(self, limit: int) -> list[tuple[int, Track, bool]]:
        """Return the first *limit* entries as (1-based position, track, is_current)."""
        return [
            (index + 1, track, index == self.cursor)
            for index, track in enumerate(self.tracks[:limit])
        ]


class GuildQueue(BaseModel):
    """Aggregate root holding the playback queue and transport flags for one guild.

    The cursor points at the track currently playing (or about to play) and
    stays within ``0 <= cursor <= len(tracks)``; ``cursor == len(tracks)``
    means the queue has run out.
    """

    model_config = ConfigDict(strict=True)

    DEFAULT_VOLUME: ClassVar[int] = 50

    guild_id: DiscordSnowflake
    tracks: list[Track] = Field(default_factory=list)
    cursor: QueueCursor = 0
    is_playing: bool = False
    is_paused: bool = False
    volume: VolumePercent = DEFAULT_VOLUME
    loop_mode: LoopMode = LoopMode.OFF
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def current_track(self) -> Track | None:
        if 0 <= self.cursor < len(self.tracks):
            return self.tracks[self.cursor]
        return None

    @property
    def has_current(self) -> bool:
        return self.cursor < len(self.tracks)

    @property
    def is_idle(self) -> bool:
        """True when nothing is playing and nothing is left to play."""
        return not self.is_playing and self.current_track is None

    @property
    def state_label(self) -> str:
        if self.is_paused:
            return "paused"
        if self.is_playing:
            return "playing"
        return "idle"

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = utcnow()

    def append(self, track: Track) -> int:
        """Add a track to the end of the queue and return its 1-based position."""
        self.tracks.append(track)
        self.touch()
        return len(self.tracks)

    # ── Cursor movement ────────────────────────────────────────────

    def advance_after_finish(self) -> None:
        """Move the cursor after a track finished naturally, honouring the loop mode."""
        if self.loop_mode is not LoopMode.TRACK:
            self.cursor = min(self.cursor + 1, len(self.tracks))
            if self.loop_mode is LoopMode.QUEUE and self.cursor >= len(self.tracks):
                self.cursor = 0
        self.touch()

    def advance_after_error(self) -> None:
        """Errors always move forward, whatever the loop mode."""
        self.cursor = min(self.cursor + 1, len(self.tracks))
        self.touch()

    def advance_after_skip(self) -> None:
        self.cursor = min(self.cursor + 1, len(self.tracks))
        if self.loop_mode is LoopMode.QUEUE and self.cursor >= len(self.tracks):
            self.cursor = 0
        self.touch()

    # ── Playback flags ─────────────────────────────────────────────

    def mark_started(self) -> None:
        self.is_playing = True
        self.is_paused = False
        self.touch()

    def mark_stopped(self) -> None:
        self.is_playing = False
        self.is_paused = False
        self.touch()

    def pause(self) -> None:
        if not self.is_playing or self.is_paused:
            raise InvalidOperationError(operation="pause", current_state=self.state_label)
        self.is_paused = True
        self.touch()

    def resume(self) -> None:
        if not self.is_paused:
            raise InvalidOperationError(operation="resume", current_state=self.state_label)
        self.is_paused = False
        self.touch()

    # ── Settings ───────────────────────────────────────────────────

    def set_volume(self, volume: int) -> None:
        if not 0 <= volume <= 100:
            raise ValidationError(ErrorMessages.INVALID_VOLUME, field="volume")
        self.volume = volume
        self.touch()

    def set_loop(self, mode: LoopMode) -> None:
        self.loop_mode = mode
        self.touch()

    # ── Queue mutations ────────────────────────────────────────────

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Shuffle the queue, pinning the current track at index 0."""
        if len(self.tracks) <= 1:
            raise BusinessRuleViolationError(
                rule="NOT_ENOUGH_TRACKS", message=ErrorMessages.NOT_ENOUGH_TRACKS
            )

        shuffler = rng or random
        current = self.current_track
        if current is None:
            # Queue already ran out: nothing to pin, and nothing becomes current.
            others = list(self.tracks)
            shuffler.shuffle(others)
            self.tracks = others
            self.cursor = len(self.tracks)
        else:
            others = self.tracks[: self.cursor] + self.tracks[self.cursor + 1 :]
            shuffler.shuffle(others)
            self.tracks = [current, *others]
            self.cursor = 0
        self.touch()

    def remove_at(self, position: int) -> Track:
        """Remove the track at a 1-based position, keeping the cursor on the same track."""
        index = position - 1
        if not 0 <= index < len(self.tracks):
            raise InvalidQueueIndexError(index=position, length=len(self.tracks))
        if index == self.cursor:
            raise BusinessRuleViolationError(
                rule="REMOVE_CURRENT", message=ErrorMessages.CANNOT_REMOVE_CURRENT
            )

        track = self.tracks.pop(index)
        if index < self.cursor:
            self.cursor -= 1
        self.touch()
        return track

    def clear_upcoming(self) -> int:
        """Drop everything except the current track and return the count removed."""
        if len(self.tracks) <= 1:
            raise BusinessRuleViolationError(
                rule="ALREADY_EMPTY", message=ErrorMessages.QUEUE_ALREADY_EMPTY
            )

        current = self.current_track
        kept = [current] if current is not None else []
        removed = len(self.tracks) - len(kept)
        self.tracks = kept
        self.cursor = 0
        self.touch()
        return removed

    def reset(self, volume: int = DEFAULT_VOLUME) -> None:
        """Return to the empty initial state, including loop mode and volume."""
        self.tracks = []
        self.cursor = 0
        self.is_playing = False
        self.is_paused = False
        self.volume = volume
        self.loop_mode = LoopMode.OFF
        self.touch()

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            guild_id=self.guild_id,
            tracks=tuple(self.tracks),
            cursor=self.cursor,
            now_playing=self.current_track,
            is_playing=self.is_playing,
            is_paused=self.is_paused,
            volume=self.volume,
            loop_mode=self.loop_mode,
        )
