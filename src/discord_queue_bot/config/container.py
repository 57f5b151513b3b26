"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue store, catalog resolvers, voice
adapter, playback controller and background jobs. Components are created
on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.idle_eviction import IdleEvictionJob
    from ..application.services.mailbox import MailboxRegistry
    from ..application.services.playback_service import PlaybackController
    from ..application.services.status_service import StatusService
    from ..application.services.track_lookup import TrackLookupService
    from ..domain.music.repository import QueueStore
    from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver
    from ..infrastructure.catalog.spotify_resolver import SpotifyResolver
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _queue_store: QueueStore | None = None

    # Infrastructure adapters
    _youtube_resolver: YtDlpResolver | None = None
    _spotify_resolver: SpotifyResolver | None = None
    _voice_adapter: VoiceAdapter | None = None

    # Application services
    _mailboxes: MailboxRegistry | None = None
    _playback_controller: PlaybackController | None = None
    _track_lookup: TrackLookupService | None = None
    _status_service: StatusService | None = None

    # Background jobs
    _idle_eviction_job: IdleEvictionJob | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot
        if self._status_service is not None:
            self._status_service.set_bot(bot)

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Persistence ===

    @property
    def queue_store(self) -> QueueStore:
        """Get the per-guild queue store."""
        if self._queue_store is None:
            from ..infrastructure.persistence.memory_store import InMemoryQueueStore

            self._queue_store = InMemoryQueueStore(
                default_volume=self.settings.audio.default_volume
            )
        return self._queue_store

    # === Infrastructure Adapters ===

    @property
    def youtube_resolver(self) -> YtDlpResolver:
        """Get the yt-dlp resolver (YouTube catalog and stream URLs)."""
        if self._youtube_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._youtube_resolver = YtDlpResolver(self.settings.audio)
        return self._youtube_resolver

    @property
    def spotify_resolver(self) -> SpotifyResolver:
        """Get the Spotify Web API resolver."""
        if self._spotify_resolver is None:
            from ..infrastructure.catalog.spotify_resolver import SpotifyResolver

            self._spotify_resolver = SpotifyResolver(self.settings.spotify)
        return self._spotify_resolver

    @property
    def voice_adapter(self) -> VoiceAdapter:
        """Get the voice adapter."""
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import (
                DiscordVoiceAdapter,
            )

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    # === Application Services ===

    @property
    def mailboxes(self) -> MailboxRegistry:
        """Get the per-guild mailbox registry."""
        if self._mailboxes is None:
            from ..application.services.mailbox import MailboxRegistry

            self._mailboxes = MailboxRegistry()
        return self._mailboxes

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller."""
        if self._playback_controller is None:
            from ..application.services.playback_service import PlaybackController

            self._playback_controller = PlaybackController(
                queue_store=self.queue_store,
                voice_adapter=self.voice_adapter,
                stream_resolver=self.youtube_resolver,
                mailboxes=self.mailboxes,
                fetch_timeout=self.settings.playback.fetch_timeout_seconds,
                command_prefix=self.settings.discord.command_prefix,
            )
        return self._playback_controller

    @property
    def track_lookup(self) -> TrackLookupService:
        """Get the query routing service."""
        if self._track_lookup is None:
            from ..application.services.track_lookup import TrackLookupService

            spotify = self.spotify_resolver if self.settings.spotify.enabled else None
            self._track_lookup = TrackLookupService(
                youtube=self.youtube_resolver,
                spotify=spotify,
                search_limit=self.settings.playback.search_limit,
            )
        return self._track_lookup

    @property
    def status_service(self) -> StatusService:
        """Get the status projection service."""
        if self._status_service is None:
            from ..application.services.status_service import StatusService

            self._status_service = StatusService(
                queue_store=self.queue_store,
                command_prefix=self.settings.discord.command_prefix,
            )
            if self._bot is not None:
                self._status_service.set_bot(self._bot)
        return self._status_service

    # === Background Jobs ===

    @property
    def idle_eviction_job(self) -> IdleEvictionJob:
        """Get the idle queue eviction job."""
        if self._idle_eviction_job is None:
            from ..application.services.idle_eviction import IdleEvictionJob

            self._idle_eviction_job = IdleEvictionJob(
                queue_store=self.queue_store,
                controller=self.playback_controller,
                settings=self.settings.cleanup,
            )
        return self._idle_eviction_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Wire components that must exist before the first command arrives."""
        # Creating the controller registers its voice callbacks.
        _ = self.playback_controller
        _ = self.status_service

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._playback_controller is not None:
            try:
                await self._playback_controller.shutdown()
            except Exception as exc:
                logger.warning("Failed shutting down playback controller: %r", exc)

        if self._spotify_resolver is not None:
            await self._spotify_resolver.aclose()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
