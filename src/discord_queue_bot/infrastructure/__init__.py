"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (in-memory queue store)
- Discord (bot, cogs, voice adapter)
- Audio (yt-dlp, FFmpeg)
- Catalogs (Spotify Web API)
"""

from discord_queue_bot.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_queue_bot.infrastructure.discord.bot import create_bot
from discord_queue_bot.infrastructure.persistence.memory_store import InMemoryQueueStore

__all__ = [
    "create_bot",
    "DiscordVoiceAdapter",
    "InMemoryQueueStore",
]
