"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import AudioConstants, LimitConstants, TimeConstants
from ..domain.shared.messages import ErrorMessages


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=LimitConstants.MIN_COMMAND_PREFIX_LENGTH,
        max_length=LimitConstants.MAX_COMMAND_PREFIX_LENGTH,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: int = Field(
        default=AudioConstants.DEFAULT_VOLUME,
        ge=LimitConstants.MIN_VOLUME,
        le=LimitConstants.MAX_VOLUME,
    )
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": AudioConstants.FFMPEG_BEFORE_OPTIONS_DEFAULT,
            "options": AudioConstants.FFMPEG_OPTIONS_DEFAULT,
        }
    )
    ytdlp_format: str = AudioConstants.YTDLP_FORMAT_DEFAULT
    connect_timeout_seconds: float = Field(
        default=AudioConstants.CONNECT_TIMEOUT_SECONDS, gt=0.0, le=60.0
    )


class SpotifySettings(BaseModel):
    """Spotify Web API credentials (client-credentials flow)."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(default="", validation_alias=AliasChoices("client_id", "id"))
    client_secret: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("client_secret", "secret")
    )
    market: str = Field(default="US", min_length=2, max_length=2)
    request_timeout_seconds: float = Field(default=TimeConstants.HTTP_TIMEOUT, gt=0.0)

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret.get_secret_value())


class PlaybackSettings(BaseModel):
    """Queue controller behaviour."""

    model_config = SettingsConfigDict(frozen=True)

    fetch_timeout_seconds: float = Field(default=TimeConstants.STREAM_FETCH_TIMEOUT, gt=0.0)
    search_limit: int = Field(default=LimitConstants.SEARCH_RESULT_LIMIT, ge=1, le=25)
    queue_page_size: int = Field(default=LimitConstants.QUEUE_PAGE_SIZE, ge=1, le=25)


class CleanupSettings(BaseModel):
    """Idle queue eviction configuration."""

    model_config = SettingsConfigDict(frozen=True)

    idle_eviction_minutes: int = Field(default=TimeConstants.IDLE_EVICTION_MINUTES, ge=1)
    sweep_interval_minutes: int = Field(default=TimeConstants.SWEEP_INTERVAL_MINUTES, ge=1)


class HealthSettings(BaseModel):
    """Status snapshot publishing configuration."""

    model_config = SettingsConfigDict(frozen=True)

    status_interval_seconds: int = Field(default=TimeConstants.STATUS_INTERVAL_SECONDS, ge=1)
    status_file: str = "logs/status.json"


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX
    - AUDIO__DEFAULT_VOLUME, AUDIO__YTDLP_FORMAT
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET
    - PLAYBACK__FETCH_TIMEOUT_SECONDS, CLEANUP__IDLE_EVICTION_MINUTES, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    cleanup: CleanupSettings = Field(default_factory=CleanupSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(valid_levels))
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
