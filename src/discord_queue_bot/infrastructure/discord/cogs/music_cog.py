"""Prefix-command music cog delegating to the playback controller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_queue_bot.domain.music.value_objects import LoopMode
from discord_queue_bot.domain.shared.constants import COMMAND_CATALOG
from discord_queue_bot.domain.shared.messages import (
    DiscordUIMessages,
    EmojiConstants,
    ErrorMessages,
    LogTemplates,
)
from discord_queue_bot.utils.reply import format_duration, numbered_lines, truncate

if TYPE_CHECKING:
    from ....config.container import Container
    from ....domain.music.entities import QueueSnapshot, Track

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 80


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self.prefix = container.settings.discord.command_prefix
        self.page_size = container.settings.playback.queue_page_size

        # Text channel each guild last issued a music command from.
        self._text_channels: dict[int, int] = {}

    async def cog_load(self) -> None:
        controller = self.container.playback_controller
        controller.set_track_started_callback(self._on_track_started)
        controller.set_track_failed_callback(self._on_track_failed)
        controller.set_queue_finished_callback(self._on_queue_finished)

    async def cog_unload(self) -> None:
        self._text_channels.clear()

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def _remember_channel(self, ctx: commands.Context) -> None:
        if ctx.guild is not None:
            self._text_channels[ctx.guild.id] = ctx.channel.id

    def _notification_channel(self, guild_id: int) -> discord.abc.Messageable | None:
        channel_id = self._text_channels.get(guild_id)
        if channel_id is None:
            return None
        channel = self.bot.get_channel(channel_id)
        if isinstance(channel, discord.abc.Messageable):
            return channel
        return None

    async def _notify(
        self, guild_id: int, content: str | None = None, *, embed: discord.Embed | None = None
    ) -> None:
        channel = self._notification_channel(guild_id)
        if channel is None:
            return
        try:
            await channel.send(content=content, embed=embed)
        except discord.HTTPException:
            logger.warning(LogTemplates.COG_NOTIFY_FAILED, self._text_channels.get(guild_id))

    @staticmethod
    def _author_voice_channel(ctx: commands.Context) -> discord.abc.Connectable | None:
        author = ctx.author
        if not isinstance(author, discord.Member):
            return None
        if author.voice is None or author.voice.channel is None:
            return None
        return author.voice.channel

    def _format_entry(self, track: Track) -> str:
        return (
            f"**{truncate(track.title, TITLE_MAX_LENGTH)}** - {track.artist}"
            f" ({track.duration_formatted})"
        )

    def _build_track_embed(self, title: str, track: Track, color: discord.Color) -> discord.Embed:
        embed = discord.Embed(
            title=title,
            description=f"[{truncate(track.title, TITLE_MAX_LENGTH)}]({track.url})",
            color=color,
        )
        if track.thumbnail_url:
            embed.set_thumbnail(url=track.thumbnail_url)

        embed.add_field(name=DiscordUIMessages.FIELD_ARTIST, value=track.artist, inline=True)
        embed.add_field(
            name=DiscordUIMessages.FIELD_DURATION,
            value=format_duration(track.duration_seconds),
            inline=True,
        )
        embed.add_field(name=DiscordUIMessages.FIELD_SOURCE, value=track.source.label, inline=True)
        if track.requested_by:
            embed.add_field(
                name=DiscordUIMessages.FIELD_REQUESTED_BY, value=track.requested_by, inline=True
            )
        return embed

    def _build_now_playing_embed(self, track: Track) -> discord.Embed:
        return self._build_track_embed(
            DiscordUIMessages.EMBED_NOW_PLAYING, track, discord.Color.green()
        )

    def _build_queued_embed(self, track: Track, position: int) -> discord.Embed:
        embed = self._build_track_embed(DiscordUIMessages.EMBED_QUEUED, track, discord.Color.blue())
        embed.add_field(name=DiscordUIMessages.FIELD_POSITION, value=str(position), inline=True)
        return embed

    def _build_queue_embed(self, snapshot: QueueSnapshot) -> discord.Embed:
        lines = []
        for position, track, is_current in snapshot.page(self.page_size):
            marker = f"{EmojiConstants.CURRENT_MARKER} " if is_current else ""
            lines.append(f"{marker}{position}. {self._format_entry(track)}")

        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_QUEUE.format(total_tracks=snapshot.length),
            description="\n".join(lines),
            color=discord.Color.blurple(),
        )
        loop_emoji = (
            EmojiConstants.LOOP_ONE if snapshot.loop_mode is LoopMode.TRACK else EmojiConstants.LOOP
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_LOOP,
            value=f"{loop_emoji} {snapshot.loop_mode.label}",
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_VOLUME, value=f"{snapshot.volume}%", inline=True
        )
        embed.set_footer(
            text=DiscordUIMessages.EMBED_QUEUE_FOOTER.format(
                shown=min(self.page_size, snapshot.length),
                total_tracks=snapshot.length,
                total_duration=format_duration(snapshot.total_duration_seconds),
            )
        )
        return embed

    def _build_search_embed(self, query: str, results: list[Track]) -> discord.Embed:
        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_SEARCH_RESULTS.format(query=truncate(query, 200)),
            description=numbered_lines([self._format_entry(track) for track in results]),
            color=discord.Color.orange(),
        )
        embed.set_footer(text=DiscordUIMessages.EMBED_SEARCH_FOOTER.format(prefix=self.prefix))
        return embed

    def _build_help_embed(self) -> discord.Embed:
        description = "\n\n".join(
            f"**{spec.usage_with_prefix(self.prefix)}**\n{spec.description}"
            for spec in COMMAND_CATALOG
        )
        return discord.Embed(
            title=DiscordUIMessages.EMBED_HELP,
            description=description,
            color=discord.Color.gold(),
        )

    # ─────────────────────────────────────────────────────────────────
    # Controller Notifications
    # ─────────────────────────────────────────────────────────────────

    async def _on_track_started(self, guild_id: int, track: Track) -> None:
        await self._notify(guild_id, embed=self._build_now_playing_embed(track))

    async def _on_track_failed(self, guild_id: int, track: Track, error: Exception) -> None:
        await self._notify(
            guild_id,
            DiscordUIMessages.TRACK_FAILED_SKIPPING.format(
                track_title=truncate(track.title, TITLE_MAX_LENGTH)
            ),
        )

    async def _on_queue_finished(self, guild_id: int) -> None:
        await self._notify(guild_id, DiscordUIMessages.QUEUE_FINISHED)
        self._text_channels.pop(guild_id, None)

    # ─────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is None or after.channel is not None:
            return

        guild_id = member.guild.id
        if await self.container.playback_controller.handle_disconnect(guild_id):
            logger.info(LogTemplates.VOICE_EXTERNAL_DISCONNECT, guild_id)
            self._text_channels.pop(guild_id, None)

    # ─────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="play", aliases=["p"])
    @commands.guild_only()
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        """Play a song from YouTube or Spotify."""
        assert ctx.guild is not None

        if not query.strip():
            await ctx.send(DiscordUIMessages.ERROR_QUERY_REQUIRED)
            return

        voice_channel = self._author_voice_channel(ctx)
        if voice_channel is None:
            await ctx.send(DiscordUIMessages.STATE_MUST_BE_IN_VOICE)
            return

        self._remember_channel(ctx)

        async with ctx.typing():
            track = await self.container.track_lookup.resolve(
                query, requested_by=ctx.author.display_name
            )
        if track is None:
            await ctx.send(DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=query))
            return

        result = await self.container.playback_controller.enqueue(
            ctx.guild.id, track, voice_channel.id
        )
        if not result.success:
            await ctx.send(result.message)
            return

        # Started tracks are announced by the track-started notification.
        if not result.started:
            await ctx.send(embed=self._build_queued_embed(track, result.position))

    @commands.command(name="pause")
    @commands.guild_only()
    async def pause(self, ctx: commands.Context) -> None:
        """Pause the current song."""
        result = await self.container.playback_controller.pause(ctx.guild.id)
        await ctx.send(result.message)

    @commands.command(name="resume", aliases=["unpause"])
    @commands.guild_only()
    async def resume(self, ctx: commands.Context) -> None:
        """Resume the paused song."""
        result = await self.container.playback_controller.resume(ctx.guild.id)
        await ctx.send(result.message)

    @commands.command(name="stop")
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        """Stop playing and clear the queue."""
        result = await self.container.playback_controller.stop(ctx.guild.id)
        self._text_channels.pop(ctx.guild.id, None)
        await ctx.send(result.message)

    @commands.command(name="skip", aliases=["s"])
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        """Skip to the next song."""
        self._remember_channel(ctx)
        result = await self.container.playback_controller.skip(ctx.guild.id)
        await ctx.send(result.message)

    @commands.command(name="queue", aliases=["q"])
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        """Show the current queue."""
        snapshot = self.container.playback_controller.snapshot(ctx.guild.id)
        if snapshot.is_empty:
            await ctx.send(DiscordUIMessages.STATE_QUEUE_EMPTY)
            return
        await ctx.send(embed=self._build_queue_embed(snapshot))

    @commands.command(name="nowplaying", aliases=["np"])
    @commands.guild_only()
    async def nowplaying(self, ctx: commands.Context) -> None:
        """Show the current song."""
        snapshot = self.container.playback_controller.snapshot(ctx.guild.id)
        if not snapshot.is_playing or snapshot.now_playing is None:
            await ctx.send(DiscordUIMessages.STATE_NOTHING_PLAYING)
            return
        await ctx.send(embed=self._build_now_playing_embed(snapshot.now_playing))

    @commands.command(name="search")
    async def search(self, ctx: commands.Context, *, query: str = "") -> None:
        """Search for a song and list the top results."""
        if not query.strip():
            await ctx.send(DiscordUIMessages.ERROR_QUERY_REQUIRED)
            return

        async with ctx.typing():
            results = await self.container.track_lookup.search(query)
        if not results:
            await ctx.send(DiscordUIMessages.ERROR_NO_SEARCH_RESULTS.format(query=query))
            return
        await ctx.send(embed=self._build_search_embed(query, results))

    @commands.command(name="volume", aliases=["vol"])
    @commands.guild_only()
    async def volume(self, ctx: commands.Context, volume: int | None = None) -> None:
        """Show or set the volume (0-100)."""
        controller = self.container.playback_controller
        if volume is None:
            snapshot = controller.snapshot(ctx.guild.id)
            await ctx.send(DiscordUIMessages.ACTION_VOLUME_CURRENT.format(volume=snapshot.volume))
            return

        result = await controller.set_volume(ctx.guild.id, volume)
        await ctx.send(result.message)

    @commands.command(name="loop")
    @commands.guild_only()
    async def loop(self, ctx: commands.Context, mode: str | None = None) -> None:
        """Set loop mode: off, song or queue."""
        result = await self.container.playback_controller.set_loop(ctx.guild.id, mode)
        await ctx.send(result.message)

    @commands.command(name="shuffle")
    @commands.guild_only()
    async def shuffle(self, ctx: commands.Context) -> None:
        """Shuffle everything after the current song."""
        result = await self.container.playback_controller.shuffle(ctx.guild.id)
        await ctx.send(result.message)

    @commands.command(name="remove")
    @commands.guild_only()
    async def remove(self, ctx: commands.Context, position: int) -> None:
        """Remove the song at a 1-based queue position."""
        result = await self.container.playback_controller.remove(ctx.guild.id, position)
        await ctx.send(result.message)

    @commands.command(name="clear")
    @commands.guild_only()
    async def clear(self, ctx: commands.Context) -> None:
        """Keep the current song and drop the rest of the queue."""
        result = await self.container.playback_controller.clear(ctx.guild.id)
        await ctx.send(result.message)

    @commands.command(name="help", aliases=["h"])
    async def help_command(self, ctx: commands.Context) -> None:
        """Show all commands."""
        await ctx.send(embed=self._build_help_embed())


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
