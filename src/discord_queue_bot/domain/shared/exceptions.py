"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class InvalidQueueIndexError(DomainError):
    """Raised when a 1-based queue index does not address an entry."""

    def __init__(self, index: int, length: int, message: str | None = None) -> None:
        msg = message or f"Queue index {index} is outside 1..{length}"
        super().__init__(msg, code="INVALID_QUEUE_INDEX")
        self.index = index
        self.length = length


class TransportError(DomainError):
    """Raised by a voice transport that cannot carry out a request."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Voice transport unavailable for guild {guild_id}"
        super().__init__(msg, code="TRANSPORT_ERROR")
        self.guild_id = guild_id


class StreamUnavailableError(DomainError):
    """Raised when a playable stream cannot be fetched for a track."""

    def __init__(self, track_title: str, message: str | None = None) -> None:
        msg = message or f"No playable stream for '{track_title}'"
        super().__init__(msg, code="STREAM_UNAVAILABLE")
        self.track_title = track_title
