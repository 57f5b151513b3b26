"""Pydantic models for the yt-dlp payloads and options the YouTube resolver works with.

yt-dlp hands back loosely typed dicts; these models coerce them once at the
boundary so the rest of the resolver only deals with validated values.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_queue_bot.config.settings import AudioSettings
from discord_queue_bot.domain.music.entities import Track
from discord_queue_bot.domain.music.value_objects import TrackId, TrackSource
from discord_queue_bot.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeFloat,
    PositiveInt,
)

CACHE_TTL: Final[int] = 3600
CACHE_MAX_SIZE: Final[int] = 500
DEFAULT_SEARCH_LIMIT: Final[int] = 5
LOG_URL_TRUNCATE: Final[int] = 60
MAX_TITLE_LENGTH: Final[int] = 500
MAX_DURATION_SECONDS: Final[int] = 86_400
UNKNOWN_TITLE: Final[str] = "Unknown Title"
UNKNOWN_ARTIST: Final[str] = "Unknown"


class FormatEntry(BaseModel):
    """One entry of a video's ``formats`` list."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None

    @property
    def carries_audio(self) -> bool:
        return bool(self.url) and self.acodec != "none"


class VideoEntry(BaseModel):
    """A single video as returned by yt-dlp, trimmed to what a track needs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: DurationSeconds | None = None
    thumbnail: HttpUrlStr | None = None
    artist: NonEmptyStr | None = None
    creator: NonEmptyStr | None = None
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    formats: list[FormatEntry] = Field(default_factory=list)

    @field_validator("id", "url", "artist", "creator", "uploader", "channel", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("webpage_url", "thumbnail", mode="before")
    @classmethod
    def _http_or_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.lower().startswith(("http://", "https://")):
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _clip_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v[:MAX_TITLE_LENGTH]

    @field_validator("duration", mode="before")
    @classmethod
    def _sane_duration(cls, v: Any) -> int | None:
        """Live streams and broken metadata report odd durations; treat those as unknown."""
        try:
            seconds = int(v)
        except (TypeError, ValueError):
            return None
        return seconds if 0 <= seconds <= MAX_DURATION_SECONDS else None

    @field_validator("formats", mode="before")
    @classmethod
    def _only_dict_formats(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [f for f in v if isinstance(f, dict)]

    @property
    def artist_name(self) -> str:
        return self.artist or self.creator or self.uploader or self.channel or UNKNOWN_ARTIST

    @property
    def stream_url(self) -> str | None:
        """Direct media URL: the selected format first, else the last audio-bearing format."""
        if self.url and self.url != self.webpage_url:
            return self.url
        for entry in reversed(self.formats):
            if entry.carries_audio:
                return entry.url
        return None

    def to_track(self) -> Track | None:
        """Build a YouTube track, or None when the entry has no page URL to replay from."""
        if not self.webpage_url:
            return None
        return Track(
            id=TrackId(self.id) if self.id else TrackId.from_url(self.webpage_url),
            title=self.title,
            artists=(self.artist_name,),
            duration_seconds=self.duration or 0,
            url=self.webpage_url,
            source=TrackSource.YOUTUBE,
            thumbnail_url=self.thumbnail,
        )


class SearchPage(BaseModel):
    """Result of a ``ytsearchN:`` extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    entries: list[VideoEntry] = Field(default_factory=list)

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_missing(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [e for e in v if isinstance(e, dict)]


class CachedExtraction(BaseModel):
    """A URL extraction remembered for ``CACHE_TTL`` seconds."""

    model_config = ConfigDict(frozen=True)

    entry: VideoEntry
    fetched_at: NonNegativeFloat

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < CACHE_TTL


class YtDlpParams(BaseModel):
    """Options handed to ``YoutubeDL``; metadata only, never downloads."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    skip_download: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = 3
    socket_timeout: PositiveInt = 10
    format: NonEmptyStr = "bestaudio/best"
    extractor_args: dict[str, dict[str, list[str]]] = Field(
        default_factory=lambda: {"youtube": {"player_client": ["android", "web"]}}
    )

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> YtDlpParams:
        return cls(format=settings.ytdlp_format)
