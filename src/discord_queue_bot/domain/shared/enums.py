"""Shared string enumerations for type-safe comparisons across cogs."""

from __future__ import annotations

from enum import StrEnum


class OnlineState(StrEnum):
    """Bot connection status labels."""

    ONLINE = "online"
    OFFLINE = "offline"
