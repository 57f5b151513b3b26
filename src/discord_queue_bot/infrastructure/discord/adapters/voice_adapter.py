"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING

import discord

from discord_queue_bot.application.interfaces.voice_adapter import (
    TrackEndCallback,
    TrackErrorCallback,
    VoiceAdapter,
)
from discord_queue_bot.config.settings import AudioSettings
from discord_queue_bot.domain.shared.exceptions import TransportError
from discord_queue_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....domain.music.entities import Track

logger = logging.getLogger(__name__)


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._ffmpeg_options = self._settings.ffmpeg_options
        self._connect_timeout = self._settings.connect_timeout_seconds
        self._play_ids = itertools.count(1)
        self._on_track_end: TrackEndCallback | None = None
        self._on_track_error: TrackErrorCallback | None = None

    def _get_guild(self, guild_id: int) -> discord.Guild | None:
        return self._bot.get_guild(guild_id)

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    # ── Connection ─────────────────────────────────────────────────

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        guild = self._get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            return False

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return False

        vc = self._get_voice_client(guild_id)
        if vc and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self.disconnect(guild_id)
            vc = None

        try:
            async with asyncio.timeout(self._connect_timeout):
                if vc is not None:
                    if vc.channel and vc.channel.id == channel_id:
                        return True
                    await vc.move_to(channel)
                    logger.info(LogTemplates.VOICE_MOVED, channel.name)
                else:
                    await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True  # Not connected

        try:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
            return True
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR)
            return False

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    # ── Playback ───────────────────────────────────────────────────

    async def play(self, guild_id: int, track: Track, stream_url: str, *, volume: float) -> int:
        vc = self._get_voice_client(guild_id)
        if vc is None or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            raise TransportError(
                guild_id, ErrorMessages.VOICE_NOT_CONNECTED.format(guild_id=guild_id)
            )

        if vc.is_playing() or vc.is_paused():
            vc.stop()

        play_id = next(self._play_ids)
        loop = asyncio.get_running_loop()

        source = discord.FFmpegPCMAudio(
            stream_url,
            before_options=self._ffmpeg_options.get("before_options", ""),
            options=self._ffmpeg_options.get("options", ""),
        )
        volume_source = discord.PCMVolumeTransformer(source, volume=max(0.0, min(1.0, volume)))

        def after_callback(error: Exception | None = None) -> None:
            # Runs on the audio player thread.
            asyncio.run_coroutine_threadsafe(
                self._dispatch_play_end(guild_id, play_id, error), loop
            )

        try:
            vc.play(volume_source, after=after_callback)
        except discord.ClientException as e:
            volume_source.cleanup()
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise TransportError(guild_id, str(e)) from e

        logger.debug(LogTemplates.PLAYBACK_STARTED, track.title, guild_id)
        return play_id

    async def _dispatch_play_end(
        self, guild_id: int, play_id: int, error: Exception | None
    ) -> None:
        try:
            if error is not None:
                if self._on_track_error is not None:
                    await self._on_track_error(guild_id, play_id, error)
            elif self._on_track_end is not None:
                await self._on_track_end(guild_id, play_id)
        except Exception:
            logger.exception(LogTemplates.VOICE_CALLBACK_ERROR, guild_id)

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        if vc.is_playing() or vc.is_paused():
            vc.stop()
        return True

    async def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_playing():
            vc.pause()
            return True
        return False

    async def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_paused():
            vc.resume()
            return True
        return False

    async def set_volume(self, guild_id: int, volume: float) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.source:
            return False

        if isinstance(vc.source, discord.PCMVolumeTransformer):
            vc.source.volume = max(0.0, min(1.0, volume))
            return True
        return False

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._on_track_end = callback

    def set_on_track_error_callback(self, callback: TrackErrorCallback) -> None:
        self._on_track_error = callback
