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

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BYTES_PER_MIB
from ..domain.shared.validators import validate_discord_snowflake, validate_http_url


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = True

    @field_validator("guild_ids", "test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            validate_discord_snowflake(snowflake)
        return v


class JellyfinSettings(BaseModel):
    """Jellyfin media server configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="http://localhost:8096",
        validation_alias=AliasChoices("url", "server_url", "jellyfin_server_url"),
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("api_key", "jellyfin_api_key"),
    )
    user_id: str = Field(
        default="", validation_alias=AliasChoices("user_id", "jellyfin_user_id")
    )
    request_timeout_s: float = Field(default=15.0, gt=0.0, le=300.0)

    # Client identification sent in the MediaBrowser authorization header
    client_name: str = "Jellyfin Music Bot"
    device_name: str = "Discord"
    device_id: str = "jellyfin-music-bot"
    client_version: str = "1.0.0"

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return validate_http_url(v)


class PlaybackSettings(BaseModel):
    """Play-loop timing and audio configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    volume: float = Field(
        default=0.3, ge=0.0, le=2.0, validation_alias=AliasChoices("volume", "default_volume")
    )
    prefill_bytes: int = Field(default=4 * BYTES_PER_MIB, ge=1)

    # Timeouts (seconds)
    connect_timeout_s: float = Field(default=20.0, gt=0.0)
    reconnect_grace_s: float = Field(default=5.0, gt=0.0)

    # Loop delays (seconds)
    advance_delay_s: float = Field(default=1.0, ge=0.0)
    retry_delay_s: float = Field(default=2.0, ge=0.0)
    preplay_delay_s: float = Field(default=0.5, ge=0.0)

    ffmpeg_before_options: str = ""
    ffmpeg_options: str = "-vn"


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, etc. (nested with ``__``)
    - JELLYFIN__URL, JELLYFIN__API_KEY, JELLYFIN__USER_ID
    - PLAYBACK__VOLUME, PLAYBACK__CONNECT_TIMEOUT_S, etc.
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
    jellyfin: JellyfinSettings = Field(default_factory=JellyfinSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

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
