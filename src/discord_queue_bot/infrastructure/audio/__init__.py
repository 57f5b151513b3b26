"""Audio infrastructure - yt-dlp catalog and stream resolver."""

from discord_queue_bot.infrastructure.audio.models import VideoEntry, YtDlpParams
from discord_queue_bot.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "VideoEntry",
    "YtDlpParams",
    "YtDlpResolver",
]
