"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization (properties create instances on first access)
- Caching (subsequent property access returns same instance)
- Bot instance management (set_bot, bot property, error when not set)
- Spotify wiring depending on credentials
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_queue_bot.application.services.idle_eviction import IdleEvictionJob
from discord_queue_bot.application.services.mailbox import MailboxRegistry
from discord_queue_bot.application.services.playback_service import PlaybackController
from discord_queue_bot.application.services.status_service import StatusService
from discord_queue_bot.application.services.track_lookup import TrackLookupService
from discord_queue_bot.config.container import Container, create_container
from discord_queue_bot.config.settings import AudioSettings, Settings, SpotifySettings
from discord_queue_bot.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from discord_queue_bot.infrastructure.catalog.spotify_resolver import SpotifyResolver
from discord_queue_bot.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_queue_bot.infrastructure.persistence.memory_store import InMemoryQueueStore


@pytest.fixture
def settings():
    return Settings(audio=AudioSettings(default_volume=70))


@pytest.fixture
def container(settings):
    """Create container with explicit settings."""
    return Container(settings=settings)


@pytest.fixture
def mock_bot():
    """Mock Discord bot instance."""
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = 123456789
    return bot


# =============================================================================
# Container Initialization Tests
# =============================================================================


class TestContainerInitialization:
    """Unit tests for Container initialization."""

    def test_create_container_with_settings(self, settings):
        """Should create container with settings."""
        container = Container(settings=settings)
        assert container.settings is settings

    def test_create_container_factory(self, settings):
        """Should create container using factory function."""
        container = create_container(settings)
        assert isinstance(container, Container)
        assert container.settings is settings


# =============================================================================
# Bot Management Tests
# =============================================================================


class TestBotManagement:
    """Unit tests for bot instance handling."""

    def test_bot_raises_before_set(self, container):
        """Should refuse to hand out a bot that was never set."""
        with pytest.raises(RuntimeError):
            _ = container.bot

    def test_set_bot(self, container, mock_bot):
        """Should return the bot once set."""
        container.set_bot(mock_bot)
        assert container.bot is mock_bot

    def test_set_bot_reaches_existing_status_service(self, container, mock_bot):
        """Should hand the bot to an already created status service."""
        status = container.status_service
        container.set_bot(mock_bot)
        assert status._bot is mock_bot


# =============================================================================
# Lazy Property Tests
# =============================================================================


class TestLazyProperties:
    """Unit tests for lazily created components."""

    def test_queue_store_uses_default_volume(self, container):
        """Should create an in-memory store seeded with the configured volume."""
        store = container.queue_store
        assert isinstance(store, InMemoryQueueStore)
        assert store.get_or_create(1).volume == 70

    def test_properties_are_cached(self, container, mock_bot):
        """Should return the same instance on every access."""
        container.set_bot(mock_bot)

        assert container.queue_store is container.queue_store
        assert container.mailboxes is container.mailboxes
        assert container.youtube_resolver is container.youtube_resolver
        assert container.voice_adapter is container.voice_adapter
        assert container.playback_controller is container.playback_controller
        assert container.track_lookup is container.track_lookup
        assert container.idle_eviction_job is container.idle_eviction_job

    def test_component_types(self, container, mock_bot):
        """Should build the concrete implementations."""
        container.set_bot(mock_bot)

        assert isinstance(container.mailboxes, MailboxRegistry)
        assert isinstance(container.youtube_resolver, YtDlpResolver)
        assert isinstance(container.spotify_resolver, SpotifyResolver)
        assert isinstance(container.voice_adapter, DiscordVoiceAdapter)
        assert isinstance(container.playback_controller, PlaybackController)
        assert isinstance(container.track_lookup, TrackLookupService)
        assert isinstance(container.status_service, StatusService)
        assert isinstance(container.idle_eviction_job, IdleEvictionJob)

    def test_voice_adapter_requires_bot(self, container):
        """Should need the bot before creating the voice adapter."""
        with pytest.raises(RuntimeError):
            _ = container.voice_adapter

    def test_track_lookup_without_spotify_credentials(self, container):
        """Should leave Spotify out when no credentials are configured."""
        lookup = container.track_lookup
        assert lookup._spotify is None
        assert container._spotify_resolver is None

    def test_track_lookup_with_spotify_credentials(self):
        """Should route Spotify links when credentials are configured."""
        settings = Settings(
            spotify=SpotifySettings(client_id="client", client_secret="secret")
        )
        container = Container(settings=settings)

        lookup = container.track_lookup

        assert lookup._spotify is container.spotify_resolver


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestLifecycle:
    """Unit tests for initialize and shutdown."""

    @pytest.mark.asyncio
    async def test_initialize_creates_controller(self, container, mock_bot):
        """Should wire the controller and status service up front."""
        container.set_bot(mock_bot)

        await container.initialize()

        assert container._playback_controller is not None
        assert container._status_service is not None

    @pytest.mark.asyncio
    async def test_shutdown_without_components(self, container):
        """Should do nothing when nothing was created."""
        await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_stops_controller_and_spotify(self, container):
        """Should shut the controller down and close the Spotify client."""
        controller = MagicMock()
        controller.shutdown = AsyncMock()
        spotify = MagicMock()
        spotify.aclose = AsyncMock()
        container._playback_controller = controller
        container._spotify_resolver = spotify

        await container.shutdown()

        controller.shutdown.assert_awaited_once()
        spotify.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_survives_controller_error(self, container):
        """Should still close Spotify when the controller fails to stop."""
        controller = MagicMock()
        controller.shutdown = AsyncMock(side_effect=RuntimeError("stuck"))
        spotify = MagicMock()
        spotify.aclose = AsyncMock()
        container._playback_controller = controller
        container._spotify_resolver = spotify

        await container.shutdown()

        spotify.aclose.assert_awaited_once()
