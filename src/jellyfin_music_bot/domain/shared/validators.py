"""Shared validators for settings and domain models."""

from jellyfin_music_bot.domain.shared.messages import ErrorMessages


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers representing unique
    identifiers for users, guilds, channels, messages, etc.

    Raises:
        ValueError: If the snowflake ID is invalid.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


def validate_http_url(value: str) -> str:
    """Validate an http(s) base URL and strip any trailing slash."""
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError(ErrorMessages.INVALID_SERVER_URL)
    return value.rstrip("/")
