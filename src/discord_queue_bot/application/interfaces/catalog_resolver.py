"""Port interfaces for resolving tracks from catalogs and fetching playable streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_queue_bot.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import TrackSource


class CatalogResolver(ABC):
    """Interface for one track catalog (YouTube, Spotify)."""

    @property
    @abstractmethod
    def source(self) -> "TrackSource":
        ...

    @abstractmethod
    def handles_url(self, url: str) -> bool:
        """True if *url* points into this catalog."""
        ...

    @abstractmethod
    async def resolve_by_url(self, url: HttpUrlStr) -> "Track | None":
        """Resolve a catalog URL to a track, or None when nothing is found."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 5) -> list["Track"]:
        """Search for tracks matching a query, most relevant first."""
        ...

    @abstractmethod
    async def cross_resolve(self, hint: "Track") -> "Track | None":
        """Map a track from another catalog onto an entry of this one."""
        ...


class StreamResolver(ABC):
    """Interface for turning a track into a URL the audio player can open."""

    @abstractmethod
    async def get_stream_url(self, track: "Track") -> str:
        """Return a direct stream URL.

        Raises:
            StreamUnavailableError: If no playable stream exists for the track.
        """
        ...
