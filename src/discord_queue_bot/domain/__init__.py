"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages and exceptions
- music/: Track, queue and queue-store logic
"""

from discord_queue_bot.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
