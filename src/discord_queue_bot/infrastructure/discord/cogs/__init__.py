"""Discord cogs - command handlers."""

from discord_queue_bot.infrastructure.discord.cogs.health_cog import HealthCog
from discord_queue_bot.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "HealthCog",
    "MusicCog",
]
