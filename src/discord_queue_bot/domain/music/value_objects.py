"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from discord_queue_bot.domain.shared.messages import ErrorMessages


@dataclass(frozen=True)
class TrackId:
    """Typically a YouTube video ID, a Spotify track ID, or a hash of the URL."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def from_url(cls, url: str) -> TrackId:
        """Extract track ID from a URL, using YouTube video ID or a URL hash as fallback."""
        import hashlib
        import re

        youtube_patterns = [
            r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})",
            r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})",
        ]

        for pattern in youtube_patterns:
            match = re.search(pattern, url)
            if match:
                return cls(match.group(1))

        url_hash = hashlib.sha256(url.encode()).hexdigest()[:16]
        return cls(url_hash)


class TrackSource(Enum):
    """Catalog a track was resolved from."""

    YOUTUBE = "youtube"
    SPOTIFY = "spotify"

    @property
    def label(self) -> str:
        return "YouTube" if self is TrackSource.YOUTUBE else "Spotify"


class LoopMode(Enum):
    """Loop mode settings for queue playback."""

    OFF = "off"
    TRACK = "track"  # Loop current track
    QUEUE = "queue"  # Loop entire queue

    @classmethod
    def parse(cls, text: str | None) -> LoopMode:
        """Parse user input, accepting the aliases shown in command usage."""
        aliases = {
            "off": cls.OFF,
            "none": cls.OFF,
            "song": cls.TRACK,
            "track": cls.TRACK,
            "single": cls.TRACK,
            "queue": cls.QUEUE,
            "all": cls.QUEUE,
        }
        key = (text or "").strip().lower()
        if key not in aliases:
            raise ValueError(ErrorMessages.INVALID_LOOP_MODE.format(mode=text))
        return aliases[key]

    @property
    def label(self) -> str:
        return {
            LoopMode.OFF: "off",
            LoopMode.TRACK: "current track",
            LoopMode.QUEUE: "whole queue",
        }[self]
