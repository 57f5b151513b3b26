"""Spotify Web API catalog resolver (metadata only, never playable on its own)."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from discord_queue_bot.application.interfaces.catalog_resolver import CatalogResolver
from discord_queue_bot.config.settings import SpotifySettings
from discord_queue_bot.domain.music.entities import Track
from discord_queue_bot.domain.music.value_objects import TrackId, TrackSource
from discord_queue_bot.domain.shared.constants import SpotifyEndpoints
from discord_queue_bot.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

SPOTIFY_TRACK_URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^https?://open\.spotify\.com/(?:intl-[a-z-]+/)?track/([A-Za-z0-9]{22})", re.IGNORECASE
)
TOKEN_EXPIRY_MARGIN: Final[int] = 60
DEFAULT_SEARCH_LIMIT: Final[int] = 5


# ── Pydantic models for Spotify payloads ───────────────────────────────


class SpotifyAccessToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    expires_in: int = Field(default=3600, ge=0)


class SpotifyArtist(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)


class SpotifyImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str
    width: int | None = None


class SpotifyAlbum(BaseModel):
    model_config = ConfigDict(extra="ignore")

    images: list[SpotifyImage] = Field(default_factory=list)


class SpotifyTrackItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    artists: list[SpotifyArtist] = Field(default_factory=list)
    duration_ms: int = Field(default=0, ge=0)
    external_urls: dict[str, str] = Field(default_factory=dict)
    album: SpotifyAlbum = Field(default_factory=SpotifyAlbum)

    def to_track(self) -> Track:
        url = self.external_urls.get(
            "spotify", SpotifyEndpoints.OPEN_TRACK_URL.format(track_id=self.id)
        )
        artists = tuple(artist.name for artist in self.artists) or ("Unknown",)
        thumbnail = self.album.images[0].url if self.album.images else None
        return Track(
            id=TrackId(self.id),
            title=self.name[:500],
            artists=artists,
            duration_seconds=min(self.duration_ms // 1000, 86_400),
            url=url,
            source=TrackSource.SPOTIFY,
            thumbnail_url=thumbnail,
        )


class SpotifyTrackPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[SpotifyTrackItem] = Field(default_factory=list)


class SpotifySearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tracks: SpotifyTrackPage = Field(default_factory=SpotifyTrackPage)


class SpotifyResolver(CatalogResolver):
    """Looks up Spotify track metadata with the client-credentials flow.

    Without credentials the resolver is disabled: it still recognises Spotify
    URLs but every lookup returns nothing.
    """

    def __init__(
        self,
        settings: SpotifySettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or SpotifySettings()
        self._client = client
        self._owns_client = client is None
        self._token: str | None = None
        self._token_expires_at: float = 0.0
        self._token_lock = asyncio.Lock()
        self._warned_disabled = False

    @property
    def source(self) -> TrackSource:
        return TrackSource.SPOTIFY

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def handles_url(self, url: str) -> bool:
        return bool(SPOTIFY_TRACK_URL_PATTERN.match(url.strip()))

    @staticmethod
    def extract_track_id(url: str) -> str | None:
        match = SPOTIFY_TRACK_URL_PATTERN.match(url.strip())
        return match.group(1) if match else None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.request_timeout_seconds)
        return self._client

    def _check_enabled(self) -> bool:
        if self.enabled:
            return True
        if not self._warned_disabled:
            logger.warning(LogTemplates.SPOTIFY_DISABLED)
            self._warned_disabled = True
        return False

    async def _access_token(self, *, force_refresh: bool = False) -> str:
        async with self._token_lock:
            now = time.monotonic()
            if not force_refresh and self._token and now < self._token_expires_at:
                return self._token

            response = await self._get_client().post(
                SpotifyEndpoints.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(
                    self._settings.client_id,
                    self._settings.client_secret.get_secret_value(),
                ),
            )
            if response.status_code != httpx.codes.OK:
                raise httpx.HTTPStatusError(
                    ErrorMessages.SPOTIFY_TOKEN_FAILED.format(status=response.status_code),
                    request=response.request,
                    response=response,
                )

            token = SpotifyAccessToken.model_validate(response.json())
            self._token = token.access_token
            self._token_expires_at = now + max(token.expires_in - TOKEN_EXPIRY_MARGIN, 0)
            logger.debug(LogTemplates.SPOTIFY_TOKEN_REFRESHED, token.expires_in)
            return self._token

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET an API path, refreshing the token once on 401. Returns None on failure."""
        url = f"{SpotifyEndpoints.API_BASE_URL}{path}"
        try:
            for attempt in range(2):
                token = await self._access_token(force_refresh=attempt > 0)
                response = await self._get_client().get(
                    url, params=params, headers={"Authorization": f"Bearer {token}"}
                )
                if response.status_code == httpx.codes.UNAUTHORIZED and attempt == 0:
                    continue
                if response.status_code == httpx.codes.NOT_FOUND:
                    return None
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError):
            logger.exception(LogTemplates.SPOTIFY_REQUEST_FAILED, path)
        return None

    # ── CatalogResolver ────────────────────────────────────────────

    async def resolve_by_url(self, url: str) -> Track | None:
        track_id = self.extract_track_id(url)
        if track_id is None or not self._check_enabled():
            return None

        data = await self._get(
            SpotifyEndpoints.TRACK_PATH.format(track_id=track_id),
            params={"market": self._settings.market},
        )
        if data is None:
            return None

        try:
            return SpotifyTrackItem.model_validate(data).to_track()
        except ValidationError:
            logger.exception(LogTemplates.SPOTIFY_FAILED_TRACK, track_id)
            return None

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Track]:
        if not self._check_enabled():
            return []

        data = await self._get(
            SpotifyEndpoints.SEARCH_PATH,
            params={"q": query, "type": "track", "limit": limit, "market": self._settings.market},
        )
        if data is None:
            return []

        try:
            page = SpotifySearchResponse.model_validate(data)
        except ValidationError:
            logger.exception(LogTemplates.SPOTIFY_REQUEST_FAILED, SpotifyEndpoints.SEARCH_PATH)
            return []
        return [item.to_track() for item in page.tracks.items]

    async def cross_resolve(self, hint: Track) -> Track | None:
        """Find the Spotify entry matching a track from another catalog."""
        if hint.source is TrackSource.SPOTIFY:
            return hint

        results = await self.search(f"track:{hint.title} artist:{hint.artists[0]}", limit=1)
        if not results:
            return None
        match = results[0]
        if hint.requested_by:
            match = match.with_requester(hint.requested_by)
        return match

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
