"""
Music Domain Repository Interfaces

Abstract base class defining the contract for queue storage.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from discord_queue_bot.domain.music.entities import GuildQueue


class QueueStore(ABC):
    """Abstract store mapping a guild ID to its playback queue.

    The store is synchronous and performs no I/O; callers serialize access
    per guild, so implementations need no locking of their own.
    """

    @property
    @abstractmethod
    def default_volume(self) -> int:
        """Volume given to newly created or reset queues."""
        ...

    @abstractmethod
    def get(self, guild_id: int) -> GuildQueue | None:
        """Retrieve a queue by guild ID.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The queue if found, None otherwise.
        """
        ...

    @abstractmethod
    def get_or_create(self, guild_id: int) -> GuildQueue:
        """Get an existing queue or create an empty one with default settings.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The existing or newly created queue.
        """
        ...

    @abstractmethod
    def remove(self, guild_id: int) -> bool:
        """Drop all state for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            True if a queue was removed, False if none existed.
        """
        ...

    @abstractmethod
    def all(self) -> list[GuildQueue]:
        """Return every queue currently held."""
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def count_playing(self) -> int:
        """Count queues whose playing flag is set."""
        ...

    @abstractmethod
    def find_idle(self, older_than: datetime) -> list[GuildQueue]:
        """Find idle queues whose last activity is before *older_than*.

        Args:
            older_than: Cutoff timestamp (timezone-aware UTC).

        Returns:
            Queues that are empty, not playing, and inactive since the cutoff.
        """
        ...
