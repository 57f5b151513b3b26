"""
Shared Domain Kernel

Contains types, messages and exceptions shared across the domain.
"""

from discord_queue_bot.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    InvalidOperationError,
    InvalidQueueIndexError,
    StreamUnavailableError,
    TransportError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
    "InvalidQueueIndexError",
    "TransportError",
    "StreamUnavailableError",
]
