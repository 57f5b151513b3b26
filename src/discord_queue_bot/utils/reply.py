"""Helpers for formatting chat replies."""

from __future__ import annotations

from functools import cache

from discord_queue_bot.domain.music.entities import format_seconds


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"
    return format_seconds(max(int(seconds), 0))


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def numbered_lines(entries: list[str], *, start: int = 1) -> str:
    """Join entries as a numbered list, one per line."""
    return "\n".join(f"{index}. {entry}" for index, entry in enumerate(entries, start=start))
