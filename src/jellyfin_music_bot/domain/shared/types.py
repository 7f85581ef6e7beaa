"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the code base is defined here once,
so models can simply annotate their fields::

    from jellyfin_music_bot.domain.shared.types import DiscordSnowflake, NonEmptyStr

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        name: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""

# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = NonNegativeInt
"""Media duration in whole seconds."""

BYTES_PER_MIB: int = 1024 * 1024
"""1 mebibyte = 1 048 576 bytes."""

# ── Pydantic-compatible ID aliases ──────────────────────────────────

ChannelIdField = DiscordSnowflake
"""Alias: channel ID used as a plain Pydantic field."""
