"""Catalog infrastructure - Spotify metadata lookups."""

from discord_queue_bot.infrastructure.catalog.spotify_resolver import SpotifyResolver

__all__ = ["SpotifyResolver"]
