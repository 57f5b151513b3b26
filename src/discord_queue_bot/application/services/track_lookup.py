"""Routes user queries to the right catalog and returns playable tracks."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.catalog_resolver import CatalogResolver

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


class TrackLookupService:
    """Resolve ``play`` and ``search`` queries.

    - YouTube URLs resolve directly on YouTube.
    - Spotify URLs resolve to Spotify metadata, which is then matched to a
      playable YouTube entry.
    - Anything else is a YouTube search whose first hit wins.

    Lookups never raise for "not found"; they return None or an empty list.
    """

    def __init__(
        self,
        *,
        youtube: CatalogResolver,
        spotify: CatalogResolver | None = None,
        search_limit: int = 5,
    ) -> None:
        self._youtube = youtube
        self._spotify = spotify
        self._search_limit = search_limit

    @staticmethod
    def is_url(query: str) -> bool:
        return bool(_URL_RE.match(query.strip()))

    async def resolve(self, query: str, *, requested_by: str | None = None) -> Track | None:
        query = query.strip()
        if not query:
            return None

        track = await self._route(query)
        if track is None:
            logger.info(LogTemplates.LOOKUP_NOT_FOUND, query)
            return None
        if requested_by:
            track = track.with_requester(requested_by)
        return track

    async def _route(self, query: str) -> Track | None:
        if self.is_url(query):
            if self._youtube.handles_url(query):
                logger.debug(LogTemplates.LOOKUP_ROUTED, query, self._youtube.source.label)
                return await self._youtube.resolve_by_url(query)

            if self._spotify is not None and self._spotify.handles_url(query):
                logger.debug(LogTemplates.LOOKUP_ROUTED, query, self._spotify.source.label)
                hint = await self._spotify.resolve_by_url(query)
                if hint is None:
                    return None
                return await self._youtube.cross_resolve(hint)

        logger.debug(LogTemplates.LOOKUP_ROUTED, query, "search")
        results = await self._youtube.search(query, limit=1)
        return results[0] if results else None

    async def search(self, query: str, limit: int | None = None) -> list[Track]:
        """Return up to *limit* YouTube results, most relevant first."""
        query = query.strip()
        if not query:
            return []
        return await self._youtube.search(query, limit=limit or self._search_limit)
