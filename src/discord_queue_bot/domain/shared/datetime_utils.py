"""Date/time helpers.

- Always store and operate on timezone-aware UTC datetimes.
- Provide the string formats used in status output and logs.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Preferred replacement for `datetime.now(UTC)`.

    Returns a timezone-aware datetime in UTC.
    """
    return datetime.now(UTC)


def iso_utc(value: datetime | None = None) -> str:
    """RFC3339/ISO8601 with explicit offset (+00:00)."""
    return (value or utcnow()).astimezone(UTC).isoformat()


def format_uptime(seconds: int) -> str:
    hours, rem = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(rem, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or hours:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)
