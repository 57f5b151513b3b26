"""Playback controller - the per-guild queue state machine driving the voice transport."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.music.entities import QueueSnapshot, Track
from ...domain.music.value_objects import LoopMode
from ...domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
    InvalidQueueIndexError,
    StreamUnavailableError,
    TransportError,
    ValidationError,
)
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .playback_models import CommandResult, EnqueueResult, LoopResult, VolumeResult

if TYPE_CHECKING:
    from ...domain.music.repository import QueueStore
    from ..interfaces.catalog_resolver import StreamResolver
    from ..interfaces.voice_adapter import VoiceAdapter
    from .mailbox import MailboxRegistry

logger = logging.getLogger(__name__)

TrackStartedCallback = Callable[[DiscordSnowflake, Track], Awaitable[Any]]
TrackFailedCallback = Callable[[DiscordSnowflake, Track, Exception], Awaitable[Any]]
QueueFinishedCallback = Callable[[DiscordSnowflake], Awaitable[Any]]


class PlaybackController:
    """Owns what plays next for every guild.

    Each public operation is funnelled through the guild's mailbox, so commands
    and voice notifications for one guild run strictly in arrival order while
    different guilds proceed independently. Methods prefixed with ``_do_`` are
    the mailbox bodies and must only call each other directly, never through
    the mailbox again.
    """

    def __init__(
        self,
        *,
        queue_store: QueueStore,
        voice_adapter: VoiceAdapter,
        stream_resolver: StreamResolver,
        mailboxes: MailboxRegistry,
        fetch_timeout: float = 30.0,
        command_prefix: str = "!",
        rng: random.Random | None = None,
    ) -> None:
        self._store = queue_store
        self._voice = voice_adapter
        self._streams = stream_resolver
        self._mailboxes = mailboxes
        self._fetch_timeout = fetch_timeout
        self._prefix = command_prefix
        self._rng = rng

        # Guilds with a voice session this controller opened and has not torn down.
        self._sessions: set[DiscordSnowflake] = set()
        # The play ID whose end/error notification is still expected, per guild.
        self._active_play: dict[DiscordSnowflake, int] = {}
        # Outstanding stream fetch per guild; cancelled by skip/stop/disconnect.
        self._fetches: dict[DiscordSnowflake, asyncio.Task[str]] = {}

        self._on_track_started: TrackStartedCallback | None = None
        self._on_track_failed: TrackFailedCallback | None = None
        self._on_queue_finished: QueueFinishedCallback | None = None

        self._voice.set_on_track_end_callback(self.on_track_ended)
        self._voice.set_on_track_error_callback(self._on_voice_error)

    # ── Notification hooks ─────────────────────────────────────────

    def set_track_started_callback(self, callback: TrackStartedCallback) -> None:
        self._on_track_started = callback

    def set_track_failed_callback(self, callback: TrackFailedCallback) -> None:
        self._on_track_failed = callback

    def set_queue_finished_callback(self, callback: QueueFinishedCallback) -> None:
        self._on_queue_finished = callback

    async def _notify(
        self, name: str, callback: Callable[..., Awaitable[Any]] | None, guild_id: int, *args: Any
    ) -> None:
        if callback is None:
            return
        try:
            await callback(guild_id, *args)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_NOTIFY_FAILED, name, guild_id)

    # ── Queries ────────────────────────────────────────────────────

    def snapshot(self, guild_id: DiscordSnowflake) -> QueueSnapshot:
        """Read-only view of a guild's queue; never mutates or creates state."""
        queue = self._store.get(guild_id)
        if queue is None:
            return QueueSnapshot(guild_id=guild_id, volume=self._store.default_volume)
        return queue.snapshot()

    def has_session(self, guild_id: DiscordSnowflake) -> bool:
        return guild_id in self._sessions

    # ── Commands ───────────────────────────────────────────────────

    async def enqueue(
        self, guild_id: DiscordSnowflake, track: Track, channel_id: DiscordSnowflake
    ) -> EnqueueResult:
        """Append *track*, joining *channel_id* first if no session is open."""
        return await self._mailboxes.submit(
            guild_id, partial(self._do_enqueue, guild_id, track, channel_id)
        )

    async def pause(self, guild_id: DiscordSnowflake) -> CommandResult:
        return await self._mailboxes.submit(guild_id, partial(self._do_pause, guild_id))

    async def resume(self, guild_id: DiscordSnowflake) -> CommandResult:
        return await self._mailboxes.submit(guild_id, partial(self._do_resume, guild_id))

    async def stop(self, guild_id: DiscordSnowflake) -> CommandResult:
        self._cancel_fetch(guild_id)
        return await self._mailboxes.submit(guild_id, partial(self._do_stop, guild_id))

    async def skip(self, guild_id: DiscordSnowflake) -> CommandResult:
        self._cancel_fetch(guild_id)
        return await self._mailboxes.submit(guild_id, partial(self._do_skip, guild_id))

    async def set_volume(self, guild_id: DiscordSnowflake, volume: int) -> VolumeResult:
        return await self._mailboxes.submit(
            guild_id, partial(self._do_set_volume, guild_id, volume)
        )

    async def set_loop(self, guild_id: DiscordSnowflake, mode: LoopMode | str | None) -> LoopResult:
        return await self._mailboxes.submit(guild_id, partial(self._do_set_loop, guild_id, mode))

    async def shuffle(self, guild_id: DiscordSnowflake) -> CommandResult:
        return await self._mailboxes.submit(guild_id, partial(self._do_shuffle, guild_id))

    async def remove(self, guild_id: DiscordSnowflake, position: int) -> CommandResult:
        """Remove the entry at a 1-based *position*."""
        return await self._mailboxes.submit(guild_id, partial(self._do_remove, guild_id, position))

    async def clear(self, guild_id: DiscordSnowflake) -> CommandResult:
        return await self._mailboxes.submit(guild_id, partial(self._do_clear, guild_id))

    # ── Transport notifications and session lifecycle ──────────────

    async def on_track_ended(self, guild_id: DiscordSnowflake, play_id: int | None = None) -> None:
        """Advance after the transport reports the play finished.

        ``play_id=None`` refers to whatever play is currently active.
        """
        await self._mailboxes.submit(guild_id, partial(self._do_track_ended, guild_id, play_id))

    async def on_track_error(
        self, guild_id: DiscordSnowflake, error: Exception, play_id: int | None = None
    ) -> None:
        await self._mailboxes.submit(
            guild_id, partial(self._do_track_error, guild_id, error, play_id)
        )

    async def _on_voice_error(self, guild_id: int, play_id: int, error: Exception) -> None:
        await self.on_track_error(guild_id, error, play_id=play_id)

    async def handle_disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Drop all state for a guild whose voice session was lost from outside.

        Disconnects this controller caused itself are ignored.
        """
        if guild_id not in self._sessions:
            return False
        self._cancel_fetch(guild_id)
        dropped = await self._mailboxes.submit(
            guild_id, partial(self._do_handle_disconnect, guild_id)
        )
        if dropped:
            await self._mailboxes.release(guild_id)
        return dropped

    async def evict(self, guild_id: DiscordSnowflake) -> bool:
        """Remove an idle guild's queue and mailbox if it is still idle."""
        evicted = await self._mailboxes.submit(guild_id, partial(self._do_evict, guild_id))
        if evicted:
            await self._mailboxes.release(guild_id)
        return evicted

    async def shutdown(self) -> None:
        """Cancel outstanding fetches, leave every voice channel and close all mailboxes."""
        for guild_id in list(self._fetches):
            self._cancel_fetch(guild_id)
        await self._mailboxes.close_all()
        for guild_id in list(self._sessions):
            await self._teardown_session(guild_id)

    # ── Mailbox bodies ─────────────────────────────────────────────

    async def _do_enqueue(
        self, guild_id: int, track: Track, channel_id: int
    ) -> EnqueueResult:
        queue = self._store.get_or_create(guild_id)

        if guild_id not in self._sessions or not self._voice.is_connected(guild_id):
            if not await self._voice.connect(guild_id, channel_id):
                return EnqueueResult(
                    success=False, message=DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
                )
            self._sessions.add(guild_id)

        position = queue.append(track)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, guild_id)

        if queue.is_playing:
            return EnqueueResult(
                success=True,
                track=track,
                position=position,
                message=DiscordUIMessages.QUEUED_AT_POSITION.format(
                    track_title=track.title, position=position
                ),
            )

        await self._start_current(guild_id)
        return EnqueueResult(
            success=True,
            track=track,
            position=position,
            started=True,
            message=DiscordUIMessages.LOADING_TRACK.format(track_title=track.title),
        )

    async def _do_pause(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        try:
            queue.pause()
        except InvalidOperationError:
            return CommandResult(
                success=False, message=DiscordUIMessages.STATE_NOTHING_PLAYING_OR_PAUSED
            )

        await self._voice.pause(guild_id)
        logger.debug(LogTemplates.PLAYBACK_PAUSED, guild_id)
        return CommandResult(success=True, message=DiscordUIMessages.ACTION_PAUSED)

    async def _do_resume(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        try:
            queue.resume()
        except InvalidOperationError:
            return CommandResult(success=False, message=DiscordUIMessages.STATE_NOTHING_PAUSED)

        await self._voice.resume(guild_id)
        logger.debug(LogTemplates.PLAYBACK_RESUMED, guild_id)
        return CommandResult(success=True, message=DiscordUIMessages.ACTION_RESUMED)

    async def _do_stop(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)

        self._active_play.pop(guild_id, None)
        if guild_id in self._sessions:
            await self._voice.stop(guild_id)
        await self._teardown_session(guild_id)

        queue.reset(volume=self._store.default_volume)
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return CommandResult(success=True, message=DiscordUIMessages.ACTION_STOPPED)

    async def _do_skip(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        if not queue.is_playing:
            return CommandResult(success=False, message=DiscordUIMessages.STATE_NOTHING_PLAYING)

        skipped = queue.current_track
        # Forget the play first so the completion fired by stop() is ignored.
        self._active_play.pop(guild_id, None)
        await self._voice.stop(guild_id)

        queue.advance_after_skip()
        title = skipped.title if skipped is not None else ""
        logger.info(LogTemplates.TRACK_SKIPPED, title, guild_id)

        await self._start_current(guild_id)
        return CommandResult(
            success=True,
            message=DiscordUIMessages.ACTION_SKIPPED.format(track_title=title),
            track=skipped,
        )

    async def _do_set_volume(self, guild_id: int, volume: int) -> VolumeResult:
        queue = self._store.get_or_create(guild_id)
        try:
            queue.set_volume(volume)
        except ValidationError:
            return VolumeResult(
                success=False, message=DiscordUIMessages.ERROR_VOLUME_RANGE, volume=queue.volume
            )

        if guild_id in self._active_play:
            if not await self._voice.set_volume(guild_id, queue.volume / 100):
                logger.warning(LogTemplates.PLAYBACK_VOLUME_FAILED, guild_id)

        logger.info(LogTemplates.VOLUME_CHANGED, queue.volume, guild_id)
        return VolumeResult(
            success=True,
            message=DiscordUIMessages.ACTION_VOLUME_SET.format(volume=queue.volume),
            volume=queue.volume,
        )

    async def _do_set_loop(self, guild_id: int, mode: LoopMode | str | None) -> LoopResult:
        queue = self._store.get_or_create(guild_id)
        try:
            parsed = mode if isinstance(mode, LoopMode) else LoopMode.parse(mode)
        except ValueError:
            return LoopResult(
                success=False,
                message=DiscordUIMessages.ERROR_LOOP_USAGE.format(
                    mode=queue.loop_mode.label, prefix=self._prefix
                ),
                mode=queue.loop_mode,
            )

        queue.set_loop(parsed)
        logger.info(LogTemplates.LOOP_MODE_CHANGED, parsed.value, guild_id)
        return LoopResult(
            success=True,
            message=DiscordUIMessages.ACTION_LOOP_MODE_CHANGED.format(mode=parsed.label),
            mode=parsed,
        )

    async def _do_shuffle(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        try:
            queue.shuffle(self._rng)
        except BusinessRuleViolationError:
            return CommandResult(
                success=False, message=DiscordUIMessages.STATE_NOT_ENOUGH_TRACKS_TO_SHUFFLE
            )

        logger.info(LogTemplates.QUEUE_SHUFFLED, guild_id)
        return CommandResult(success=True, message=DiscordUIMessages.ACTION_SHUFFLED)

    async def _do_remove(self, guild_id: int, position: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        try:
            removed = queue.remove_at(position)
        except InvalidQueueIndexError:
            return CommandResult(
                success=False,
                message=DiscordUIMessages.ERROR_INVALID_POSITION.format(
                    position=position, length=queue.length
                ),
            )
        except BusinessRuleViolationError:
            return CommandResult(
                success=False,
                message=DiscordUIMessages.ERROR_CANNOT_REMOVE_CURRENT.format(prefix=self._prefix),
            )

        logger.info(LogTemplates.QUEUE_REMOVED, removed.title, guild_id)
        return CommandResult(
            success=True,
            message=DiscordUIMessages.ACTION_TRACK_REMOVED.format(track_title=removed.title),
            track=removed,
        )

    async def _do_clear(self, guild_id: int) -> CommandResult:
        queue = self._store.get_or_create(guild_id)
        try:
            count = queue.clear_upcoming()
        except BusinessRuleViolationError:
            return CommandResult(
                success=False, message=DiscordUIMessages.STATE_QUEUE_ALREADY_EMPTY
            )

        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return CommandResult(
            success=True, message=DiscordUIMessages.ACTION_QUEUE_CLEARED.format(count=count)
        )

    async def _do_track_ended(self, guild_id: int, play_id: int | None) -> None:
        if not self._claim_play(guild_id, play_id, "track-end"):
            return

        queue = self._store.get(guild_id)
        if queue is None:
            return

        finished = queue.current_track
        if finished is not None:
            logger.debug(LogTemplates.TRACK_FINISHED, finished.title, guild_id)
        queue.advance_after_finish()
        await self._start_current(guild_id)

    async def _do_track_error(self, guild_id: int, error: Exception, play_id: int | None) -> None:
        if not self._claim_play(guild_id, play_id, "track-error"):
            return

        queue = self._store.get(guild_id)
        if queue is None:
            return

        logger.warning(LogTemplates.PLAYBACK_TRANSPORT_ERROR, guild_id, error)
        failed = queue.current_track
        if failed is not None:
            await self._notify("track_failed", self._on_track_failed, guild_id, failed, error)
        queue.advance_after_error()
        await self._start_current(guild_id)

    async def _do_handle_disconnect(self, guild_id: int) -> bool:
        if guild_id not in self._sessions:
            return False

        self._sessions.discard(guild_id)
        self._active_play.pop(guild_id, None)
        await self._voice.disconnect(guild_id)
        self._store.remove(guild_id)
        logger.info(LogTemplates.PLAYBACK_DISCONNECT_HANDLED, guild_id)
        return True

    async def _do_evict(self, guild_id: int) -> bool:
        queue = self._store.get(guild_id)
        if queue is None or not queue.is_idle or guild_id in self._sessions:
            return False
        return self._store.remove(guild_id)

    # ── Playback core ──────────────────────────────────────────────

    def _claim_play(self, guild_id: int, play_id: int | None, kind: str) -> bool:
        """Consume the active play if *play_id* matches it; False for stale notifications."""
        active = self._active_play.get(guild_id)
        if active is None or (play_id is not None and play_id != active):
            logger.debug(LogTemplates.PLAYBACK_STALE_NOTIFICATION, kind, play_id, guild_id)
            return False
        del self._active_play[guild_id]
        return True

    async def _start_current(self, guild_id: int) -> None:
        """Play the track under the cursor, skipping forward past tracks that fail."""
        while True:
            queue = self._store.get(guild_id)
            if queue is None:
                return

            track = queue.current_track
            if track is None:
                await self._finish(guild_id)
                return

            if guild_id in self._sessions and not self._voice.is_connected(guild_id):
                # The session died underneath us; treat it like a disconnect.
                await self._do_handle_disconnect(guild_id)
                return

            queue.mark_started()
            try:
                stream_url = await self._fetch_stream(guild_id, track)
            except StreamUnavailableError as exc:
                await self._notify("track_failed", self._on_track_failed, guild_id, track, exc)
                queue.advance_after_error()
                continue

            if stream_url is None:
                # Pre-empted by skip/stop/disconnect, which runs next and decides the state.
                return

            try:
                play_id = await self._voice.play(
                    guild_id, track, stream_url, volume=queue.volume / 100
                )
            except TransportError as exc:
                logger.warning(LogTemplates.PLAYBACK_TRANSPORT_ERROR, guild_id, exc)
                await self._notify("track_failed", self._on_track_failed, guild_id, track, exc)
                queue.advance_after_error()
                continue

            self._active_play[guild_id] = play_id
            logger.info(LogTemplates.PLAYBACK_STARTED, track.title, guild_id)
            await self._notify("track_started", self._on_track_started, guild_id, track)
            return

    async def _fetch_stream(self, guild_id: int, track: Track) -> str | None:
        """Fetch a stream URL in a cancellable task bounded by the fetch timeout.

        Returns:
            The stream URL, or None if the fetch was cancelled.

        Raises:
            StreamUnavailableError: If the fetch failed or timed out.
        """
        fetch = asyncio.create_task(
            self._streams.get_stream_url(track), name=f"stream-fetch-{guild_id}"
        )
        self._fetches[guild_id] = fetch
        try:
            done, _ = await asyncio.wait({fetch}, timeout=self._fetch_timeout)
        finally:
            if self._fetches.get(guild_id) is fetch:
                del self._fetches[guild_id]
            if not fetch.done():
                fetch.cancel()

        if not done:
            logger.warning(LogTemplates.PLAYBACK_FETCH_TIMEOUT, track.title, guild_id)
            raise StreamUnavailableError(
                track.title,
                ErrorMessages.STREAM_FETCH_TIMEOUT.format(
                    timeout=self._fetch_timeout, title=track.title
                ),
            )

        if fetch.cancelled():
            return None

        error = fetch.exception()
        if error is not None:
            logger.warning(
                LogTemplates.PLAYBACK_FETCH_FAILED, track.title, guild_id, exc_info=error
            )
            if isinstance(error, StreamUnavailableError):
                raise error
            raise StreamUnavailableError(track.title, str(error)) from error

        return fetch.result()

    def _cancel_fetch(self, guild_id: int) -> None:
        fetch = self._fetches.pop(guild_id, None)
        if fetch is not None and not fetch.done():
            fetch.cancel()
            logger.info(LogTemplates.PLAYBACK_FETCH_CANCELLED, guild_id)

    async def _finish(self, guild_id: int) -> None:
        """Nothing left to play: clear the flags and leave the voice channel."""
        queue = self._store.get(guild_id)
        was_active = queue is not None and queue.is_playing
        if queue is not None:
            queue.mark_stopped()

        had_session = guild_id in self._sessions
        await self._teardown_session(guild_id)

        if was_active or had_session:
            logger.info(LogTemplates.PLAYBACK_FINISHED, guild_id)
            await self._notify("queue_finished", self._on_queue_finished, guild_id)

    async def _teardown_session(self, guild_id: int) -> None:
        self._active_play.pop(guild_id, None)
        if guild_id not in self._sessions:
            return
        # Forget the session before disconnecting so the resulting voice-state
        # event is not mistaken for an external disconnect.
        self._sessions.discard(guild_id)
        await self._voice.disconnect(guild_id)
