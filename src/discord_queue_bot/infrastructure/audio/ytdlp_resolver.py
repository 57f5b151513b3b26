"""YouTube catalog and stream resolver built on yt-dlp."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_queue_bot.application.interfaces.catalog_resolver import (
    CatalogResolver,
    StreamResolver,
)
from discord_queue_bot.config.settings import AudioSettings
from discord_queue_bot.domain.music.entities import Track
from discord_queue_bot.domain.music.value_objects import TrackSource
from discord_queue_bot.domain.shared.exceptions import StreamUnavailableError
from discord_queue_bot.domain.shared.messages import ErrorMessages, LogTemplates
from discord_queue_bot.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    DEFAULT_SEARCH_LIMIT,
    LOG_URL_TRUNCATE,
    CachedExtraction,
    SearchPage,
    VideoEntry,
    YtDlpParams,
)

logger = logging.getLogger(__name__)

YOUTUBE_URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^https?://(?:www\.|m\.|music\.)?(?:youtube\.com|youtu\.be)/", re.IGNORECASE
)


class YtDlpResolver(CatalogResolver, StreamResolver):
    """Resolves YouTube URLs and searches, and fetches direct audio stream URLs.

    yt-dlp is blocking, so every extraction runs in a worker thread.
    Successful URL extractions are cached so a track resolved at enqueue time
    does not hit YouTube again when its stream is fetched.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._params = YtDlpParams.from_settings(self._settings)
        self._cache: dict[str, CachedExtraction] = {}

    @property
    def source(self) -> TrackSource:
        return TrackSource.YOUTUBE

    def handles_url(self, url: str) -> bool:
        return bool(YOUTUBE_URL_PATTERN.match(url.strip()))

    def _extract(self, target: str) -> Any:
        with YoutubeDL(params=cast(Any, self._params.model_dump())) as ydl:
            return ydl.extract_info(target, download=False)

    @staticmethod
    def _to_track(entry: VideoEntry) -> Track | None:
        try:
            track = entry.to_track()
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_INFO_TO_TRACK)
            return None
        if track is None:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, entry.title)
        return track

    def _remember(self, url: str, entry: VideoEntry, now: float) -> None:
        self._cache[url] = CachedExtraction(entry=entry, fetched_at=now)
        if len(self._cache) <= CACHE_MAX_SIZE:
            return
        stale = [key for key, cached in self._cache.items() if not cached.is_fresh(now)]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug(LogTemplates.CACHE_EXPIRED_PRUNED, len(stale))

    def _extract_entry_sync(self, url: str) -> VideoEntry | None:
        now = time.time()
        cached = self._cache.get(url)
        if cached is not None and cached.is_fresh(now):
            logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
            return cached.entry

        try:
            data = self._extract(url)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None
        if not isinstance(data, dict):
            return None

        entry = VideoEntry.model_validate(data)
        self._remember(url, entry, now)
        return entry

    def _search_sync(self, query: str, limit: int) -> list[VideoEntry]:
        try:
            data = self._extract(f"ytsearch{limit}:{query}")
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []
        if not isinstance(data, dict):
            return []
        return SearchPage.model_validate(data).entries

    # ── CatalogResolver ────────────────────────────────────────────

    async def resolve_by_url(self, url: str) -> Track | None:
        entry = await asyncio.to_thread(self._extract_entry_sync, url)
        if entry is None:
            return None
        return self._to_track(entry)

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Track]:
        entries = await asyncio.to_thread(self._search_sync, query, limit)
        tracks = (self._to_track(entry) for entry in entries)
        return [track for track in tracks if track is not None]

    async def cross_resolve(self, hint: Track) -> Track | None:
        """Find a playable YouTube entry for a track known from another catalog.

        The hit keeps the hint's metadata and provenance; only the locator
        (and anything the hint lacks) comes from YouTube.
        """
        query = f"{hint.title} {' '.join(hint.artists)}"
        results = await self.search(query, limit=1)
        if not results:
            logger.info(LogTemplates.YTDLP_FAILED_CROSS_RESOLVE, query)
            return None

        hit = results[0]
        return hit.model_copy(
            update={
                "title": hint.title,
                "artists": hint.artists,
                "duration_seconds": hint.duration_seconds or hit.duration_seconds,
                "source": hint.source,
                "thumbnail_url": hint.thumbnail_url or hit.thumbnail_url,
                "requested_by": hint.requested_by,
            }
        )

    # ── StreamResolver ─────────────────────────────────────────────

    async def get_stream_url(self, track: Track) -> str:
        entry = await asyncio.to_thread(self._extract_entry_sync, track.url)
        stream_url = entry.stream_url if entry is not None else None
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, track.title)
            raise StreamUnavailableError(
                track.title, ErrorMessages.NO_STREAM_URL_FOR_TRACK.format(title=track.title)
            )
        return stream_url
