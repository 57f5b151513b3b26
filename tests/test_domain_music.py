"""
Unit Tests for the music domain model

Tests for:
- Track value object (immutability, derived fields, requester copies)
- TrackId extraction and LoopMode parsing
- GuildQueue cursor movement under every loop mode
- Shuffle, remove and clear rules including finished-queue edge cases
- QueueSnapshot projection
"""

import random

import pytest
from pydantic import ValidationError as PydanticValidationError

from discord_queue_bot.domain.music.entities import GuildQueue, QueueSnapshot, Track, format_seconds
from discord_queue_bot.domain.music.value_objects import LoopMode, TrackId, TrackSource
from discord_queue_bot.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
    InvalidQueueIndexError,
    ValidationError,
)

GUILD_ID = 111111111111111111


def build_track(name: str, *, duration: int = 180, artists: tuple[str, ...] = ("Artist",)) -> Track:
    return Track(
        id=TrackId(f"id-{name}"),
        title=f"Title {name}",
        artists=artists,
        duration_seconds=duration,
        url=f"https://www.youtube.com/watch?v={name}",
    )


def _queue_with(*names: str, cursor: int = 0) -> GuildQueue:
    queue = GuildQueue(guild_id=GUILD_ID)
    for name in names:
        queue.append(build_track(name))
    queue.cursor = cursor
    return queue


def _titles(queue: GuildQueue) -> list[str]:
    return [t.title for t in queue.tracks]


# =============================================================================
# Track / value objects
# =============================================================================


class TestTrack:
    """Tests for the Track value object."""

    def test_track_is_frozen(self, sample_track):
        """Tracks cannot be mutated after creation."""
        with pytest.raises(PydanticValidationError):
            sample_track.title = "other"

    def test_artist_joins_names(self):
        """Multiple artists are joined with a comma."""
        track = build_track("duo", artists=("A", "B"))
        assert track.artist == "A, B"

    def test_requires_at_least_one_artist(self):
        """An empty artist tuple is rejected."""
        with pytest.raises(PydanticValidationError):
            Track(
                id=TrackId("x"),
                title="x",
                artists=(),
                url="https://example.com/x",
            )

    def test_rejects_non_http_url(self):
        """The locator must be an http(s) URL."""
        with pytest.raises(PydanticValidationError):
            Track(id=TrackId("x"), title="x", artists=("a",), url="ftp://example.com/x")

    def test_duration_formatting(self):
        """Durations render as m:ss and h:mm:ss."""
        assert build_track("a", duration=65).duration_formatted == "1:05"
        assert build_track("b", duration=3725).duration_formatted == "1:02:05"
        assert format_seconds(0) == "0:00"

    def test_display_title_includes_duration(self):
        """display_title appends the duration when known."""
        assert build_track("a", duration=65).display_title == "Title a [1:05]"
        assert build_track("b", duration=0).display_title == "Title b"

    def test_with_requester_returns_copy(self, sample_track):
        """with_requester never mutates the original track."""
        copy = sample_track.with_requester("alice")
        assert copy.requested_by == "alice"
        assert sample_track.requested_by is None


class TestValueObjects:
    """Tests for TrackId, TrackSource and LoopMode."""

    def test_track_id_from_youtube_url(self):
        """YouTube video ids are extracted from watch and short links."""
        assert TrackId.from_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ").value == "dQw4w9WgXcQ"
        assert TrackId.from_url("https://youtu.be/dQw4w9WgXcQ").value == "dQw4w9WgXcQ"

    def test_track_id_hashes_other_urls(self):
        """Non-YouTube URLs get a stable hash id."""
        first = TrackId.from_url("https://example.com/a")
        assert first == TrackId.from_url("https://example.com/a")
        assert len(first.value) == 16

    def test_empty_track_id_rejected(self):
        with pytest.raises(ValueError):
            TrackId("  ")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("off", LoopMode.OFF),
            ("SONG", LoopMode.TRACK),
            ("track", LoopMode.TRACK),
            ("queue", LoopMode.QUEUE),
            (" all ", LoopMode.QUEUE),
        ],
    )
    def test_loop_mode_parse(self, text, expected):
        """Loop mode accepts the command aliases case-insensitively."""
        assert LoopMode.parse(text) is expected

    @pytest.mark.parametrize("text", [None, "", "forever"])
    def test_loop_mode_parse_rejects_unknown(self, text):
        with pytest.raises(ValueError):
            LoopMode.parse(text)

    def test_source_labels(self):
        assert TrackSource.YOUTUBE.label == "YouTube"
        assert TrackSource.SPOTIFY.label == "Spotify"


# =============================================================================
# GuildQueue
# =============================================================================


class TestGuildQueueBasics:
    """Tests for appending and flags."""

    def test_defaults(self):
        """A new queue is empty, idle, at volume 50 with loop off."""
        queue = GuildQueue(guild_id=GUILD_ID)
        assert queue.tracks == []
        assert queue.cursor == 0
        assert queue.volume == 50
        assert queue.loop_mode is LoopMode.OFF
        assert queue.is_idle
        assert queue.current_track is None

    def test_append_returns_one_based_position(self):
        queue = GuildQueue(guild_id=GUILD_ID)
        assert queue.append(build_track("a")) == 1
        assert queue.append(build_track("b")) == 2

    def test_append_updates_last_activity(self):
        queue = GuildQueue(guild_id=GUILD_ID)
        before = queue.last_activity
        queue.append(build_track("a"))
        assert queue.last_activity >= before

    def test_pause_requires_playing(self):
        """Pausing an idle queue is an invalid operation."""
        queue = _queue_with("a")
        with pytest.raises(InvalidOperationError):
            queue.pause()

    def test_pause_and_resume(self):
        queue = _queue_with("a")
        queue.mark_started()
        queue.pause()
        assert queue.is_paused and queue.is_playing
        with pytest.raises(InvalidOperationError):
            queue.pause()
        queue.resume()
        assert not queue.is_paused

    def test_resume_requires_paused(self):
        queue = _queue_with("a")
        queue.mark_started()
        with pytest.raises(InvalidOperationError):
            queue.resume()

    def test_mark_stopped_clears_pause(self):
        """Stopping clears paused as well, keeping paused => playing."""
        queue = _queue_with("a")
        queue.mark_started()
        queue.pause()
        queue.mark_stopped()
        assert not queue.is_playing and not queue.is_paused

    @pytest.mark.parametrize("volume", [-1, 101])
    def test_set_volume_out_of_range(self, volume):
        queue = GuildQueue(guild_id=GUILD_ID)
        with pytest.raises(ValidationError):
            queue.set_volume(volume)
        assert queue.volume == 50

    @pytest.mark.parametrize("volume", [0, 100])
    def test_set_volume_bounds(self, volume):
        queue = GuildQueue(guild_id=GUILD_ID)
        queue.set_volume(volume)
        assert queue.volume == volume


class TestGuildQueueAdvance:
    """Tests for cursor movement after finish, error and skip."""

    def test_finish_off_moves_forward(self):
        queue = _queue_with("a", "b")
        queue.advance_after_finish()
        assert queue.cursor == 1

    def test_finish_off_runs_out(self):
        """The cursor stops at len(tracks) when the queue runs out."""
        queue = _queue_with("a", "b", cursor=1)
        queue.advance_after_finish()
        assert queue.cursor == 2
        assert queue.current_track is None

    def test_finish_track_loop_repeats(self):
        queue = _queue_with("a", "b")
        queue.set_loop(LoopMode.TRACK)
        queue.advance_after_finish()
        assert queue.cursor == 0

    def test_finish_queue_loop_wraps(self):
        queue = _queue_with("a", "b", cursor=1)
        queue.set_loop(LoopMode.QUEUE)
        queue.advance_after_finish()
        assert queue.cursor == 0

    def test_error_ignores_track_loop(self):
        """A failed track is never replayed, whatever the loop mode."""
        queue = _queue_with("a", "b")
        queue.set_loop(LoopMode.TRACK)
        queue.advance_after_error()
        assert queue.cursor == 1

    def test_error_does_not_wrap(self):
        queue = _queue_with("a", "b", cursor=1)
        queue.set_loop(LoopMode.QUEUE)
        queue.advance_after_error()
        assert queue.cursor == 2

    def test_skip_moves_forward_in_track_loop(self):
        queue = _queue_with("a", "b")
        queue.set_loop(LoopMode.TRACK)
        queue.advance_after_skip()
        assert queue.cursor == 1

    def test_skip_wraps_in_queue_loop(self):
        queue = _queue_with("a", "b", cursor=1)
        queue.set_loop(LoopMode.QUEUE)
        queue.advance_after_skip()
        assert queue.cursor == 0


class TestGuildQueueMutations:
    """Tests for shuffle, remove, clear and reset."""

    def test_shuffle_pins_current_first(self):
        """The current track moves to index 0 and the cursor follows it."""
        queue = _queue_with("a", "b", "c", "d", "e", cursor=2)
        queue.shuffle(random.Random(7))
        assert queue.cursor == 0
        assert queue.tracks[0].title == "Title c"
        assert sorted(_titles(queue)) == sorted(f"Title {n}" for n in "abcde")

    def test_shuffle_requires_two_tracks(self):
        queue = _queue_with("a")
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            queue.shuffle()
        assert exc_info.value.rule == "NOT_ENOUGH_TRACKS"

    def test_shuffle_finished_queue_keeps_it_finished(self):
        """Shuffling a queue that ran out leaves nothing current."""
        queue = _queue_with("a", "b", "c", cursor=3)
        queue.shuffle(random.Random(1))
        assert queue.cursor == 3
        assert queue.current_track is None
        assert len(queue.tracks) == 3

    def test_remove_before_cursor_shifts_cursor(self):
        queue = _queue_with("a", "b", "c", cursor=2)
        removed = queue.remove_at(1)
        assert removed.title == "Title a"
        assert queue.cursor == 1
        assert queue.current_track.title == "Title c"

    def test_remove_after_cursor_keeps_cursor(self):
        queue = _queue_with("a", "b", "c", cursor=0)
        queue.remove_at(3)
        assert queue.cursor == 0
        assert _titles(queue) == ["Title a", "Title b"]

    def test_remove_current_rejected(self):
        queue = _queue_with("a", "b", cursor=1)
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            queue.remove_at(2)
        assert exc_info.value.rule == "REMOVE_CURRENT"
        assert len(queue.tracks) == 2

    @pytest.mark.parametrize("position", [0, 3, -1])
    def test_remove_out_of_range(self, position):
        queue = _queue_with("a", "b")
        with pytest.raises(InvalidQueueIndexError):
            queue.remove_at(position)

    def test_clear_keeps_current_only(self):
        queue = _queue_with("a", "b", "c", cursor=1)
        removed = queue.clear_upcoming()
        assert removed == 2
        assert _titles(queue) == ["Title b"]
        assert queue.cursor == 0

    def test_clear_requires_more_than_one_track(self):
        queue = _queue_with("a")
        with pytest.raises(BusinessRuleViolationError):
            queue.clear_upcoming()

    def test_clear_finished_queue_empties_it(self):
        queue = _queue_with("a", "b", cursor=2)
        assert queue.clear_upcoming() == 2
        assert queue.tracks == []
        assert queue.cursor == 0

    def test_reset_restores_defaults(self):
        queue = _queue_with("a", "b", cursor=1)
        queue.mark_started()
        queue.set_volume(80)
        queue.set_loop(LoopMode.QUEUE)
        queue.reset()
        assert queue.tracks == []
        assert queue.cursor == 0
        assert not queue.is_playing
        assert queue.volume == 50
        assert queue.loop_mode is LoopMode.OFF

    def test_is_idle_on_finished_queue(self):
        queue = _queue_with("a", cursor=1)
        assert queue.is_idle
        queue.mark_started()
        assert not queue.is_idle


class TestQueueSnapshot:
    """Tests for the read-only projection."""

    def test_snapshot_reflects_queue(self):
        queue = _queue_with("a", "b", "c", cursor=1)
        queue.mark_started()
        snap = queue.snapshot()
        assert snap.now_playing.title == "Title b"
        assert snap.is_playing
        assert snap.length == 3
        assert [t.title for t in snap.upcoming] == ["Title c"]
        assert snap.total_duration_seconds == 540

    def test_snapshot_is_detached(self):
        """Later queue changes do not leak into an earlier snapshot."""
        queue = _queue_with("a")
        snap = queue.snapshot()
        queue.append(build_track("b"))
        assert snap.length == 1

    def test_page_marks_current(self):
        snap = _queue_with("a", "b", "c", cursor=1).snapshot()
        page = snap.page(2)
        assert [(pos, cur) for pos, _, cur in page] == [(1, False), (2, True)]

    def test_empty_snapshot(self):
        snap = QueueSnapshot(guild_id=GUILD_ID)
        assert snap.is_empty
        assert snap.now_playing is None
