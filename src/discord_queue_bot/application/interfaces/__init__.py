"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_queue_bot.application.interfaces.catalog_resolver import (
    CatalogResolver,
    StreamResolver,
)
from discord_queue_bot.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "CatalogResolver",
    "StreamResolver",
    "VoiceAdapter",
]
