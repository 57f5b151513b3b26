"""Centralized constants for audio options, Spotify endpoints, limits and the command catalog.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations

from dataclasses import dataclass


class AudioConstants:
    """Audio and FFmpeg configuration constants."""

    # FFmpeg Options
    FFMPEG_BEFORE_OPTIONS_DEFAULT = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS_DEFAULT = "-vn"  # No video

    # yt-dlp Options
    YTDLP_FORMAT_DEFAULT = "bestaudio/best"

    # Audio Settings
    DEFAULT_VOLUME = 50
    CONNECT_TIMEOUT_SECONDS = 10.0


class SpotifyEndpoints:
    """Spotify Web API endpoints used for metadata lookups."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    API_BASE_URL = "https://api.spotify.com/v1"
    TRACK_PATH = "/tracks/{track_id}"
    SEARCH_PATH = "/search"
    OPEN_TRACK_URL = "https://open.spotify.com/track/{track_id}"


class TimeConstants:
    """Time-related constants in seconds."""

    STREAM_FETCH_TIMEOUT = 30.0
    HTTP_TIMEOUT = 10.0

    # Idle eviction
    IDLE_EVICTION_MINUTES = 30
    SWEEP_INTERVAL_MINUTES = 5

    STATUS_INTERVAL_SECONDS = 30


class LimitConstants:
    """Numeric limits and constraints."""

    MIN_VOLUME = 0
    MAX_VOLUME = 100

    QUEUE_PAGE_SIZE = 10
    SEARCH_RESULT_LIMIT = 5

    MIN_COMMAND_PREFIX_LENGTH = 1
    MAX_COMMAND_PREFIX_LENGTH = 5


@dataclass(frozen=True)
class CommandSpec:
    """One entry of the user-facing command catalog."""

    name: str
    description: str
    usage: str
    aliases: tuple[str, ...] = ()

    def usage_with_prefix(self, prefix: str) -> str:
        return f"{prefix}{self.usage}"


COMMAND_CATALOG: tuple[CommandSpec, ...] = (
    CommandSpec("play", "Play a song from YouTube or Spotify", "play <url or search query>", ("p",)),
    CommandSpec("pause", "Pause the current song", "pause"),
    CommandSpec("resume", "Resume the paused song", "resume", ("unpause",)),
    CommandSpec("stop", "Stop playing and clear the queue", "stop"),
    CommandSpec("skip", "Skip to the next song", "skip", ("s",)),
    CommandSpec("queue", "Show the current queue", "queue", ("q",)),
    CommandSpec("nowplaying", "Show the current song", "nowplaying", ("np",)),
    CommandSpec("search", "Search for a song", "search <name> - <artist>"),
    CommandSpec("volume", "Set the volume (0-100)", "volume <0-100>", ("vol",)),
    CommandSpec("loop", "Set loop mode", "loop [off|song|queue]"),
    CommandSpec("shuffle", "Shuffle the queue", "shuffle"),
    CommandSpec("remove", "Remove a song from the queue", "remove <position>"),
    CommandSpec("clear", "Clear the queue", "clear"),
    CommandSpec("help", "Show all commands", "help", ("h",)),
    CommandSpec("status", "Show bot status", "status"),
)
"""Every prefix command the bot answers, shared by ``help`` and the status snapshot."""


def find_command(name: str) -> CommandSpec | None:
    """Look up a catalog entry by name or alias."""
    key = name.lower()
    for spec in COMMAND_CATALOG:
        if spec.name == key or key in spec.aliases:
            return spec
    return None
