"""Tests for reply utility functions: format_duration, truncate and numbered_lines."""

from __future__ import annotations

import pytest

from discord_queue_bot.utils.reply import format_duration, numbered_lines, truncate

# =============================================================================
# format_duration
# =============================================================================


class TestFormatDuration:
    def test_none(self):
        assert format_duration(None) == "–"

    def test_zero(self):
        assert format_duration(0) == "0:00"

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(5, "0:05"), (65, "1:05"), (600, "10:00"), (3600, "1:00:00"), (3725, "1:02:05")],
    )
    def test_formats(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_float_truncated(self):
        assert format_duration(90.9) == "1:30"

    def test_negative_clamped(self):
        assert format_duration(-3) == "0:00"


# =============================================================================
# truncate
# =============================================================================


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("hello", 10) == "hello"

    def test_exact_length_unchanged(self):
        assert truncate("a" * 10, 10) == "a" * 10

    def test_long_text_gets_ellipsis(self):
        result = truncate("a" * 20, 10)
        assert len(result) == 10
        assert result.endswith("…")

    def test_default_limit(self):
        assert len(truncate("x" * 200)) == 90


# =============================================================================
# numbered_lines
# =============================================================================


class TestNumberedLines:
    def test_numbers_from_one(self):
        assert numbered_lines(["a", "b"]) == "1. a\n2. b"

    def test_custom_start(self):
        assert numbered_lines(["a"], start=4) == "4. a"

    def test_empty(self):
        assert numbered_lines([]) == ""
