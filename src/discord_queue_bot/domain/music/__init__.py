"""
Music Bounded Context

Domain logic for tracks, per-guild queues, and queue storage.
"""

from discord_queue_bot.domain.music.entities import GuildQueue, QueueSnapshot, Track
from discord_queue_bot.domain.music.repository import QueueStore
from discord_queue_bot.domain.music.value_objects import LoopMode, TrackId, TrackSource

__all__ = [
    # Entities
    "Track",
    "GuildQueue",
    "QueueSnapshot",
    # Value Objects
    "TrackId",
    "TrackSource",
    "LoopMode",
    # Repository
    "QueueStore",
]
