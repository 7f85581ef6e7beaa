"""
Music Bounded Context

Catalog value objects, connection/player states and per-guild session records.
"""

from jellyfin_music_bot.domain.music.entities import MediaItem, Playlist
from jellyfin_music_bot.domain.music.session import GuildSession, GuildSessionRegistry
from jellyfin_music_bot.domain.music.value_objects import (
    ConnectionState,
    MediaType,
    PlayerSignal,
    PlayerSignalKind,
    PlayerStatus,
    SessionPhase,
)

__all__ = [
    # Entities
    "MediaItem",
    "Playlist",
    "GuildSession",
    "GuildSessionRegistry",
    # Value Objects
    "MediaType",
    "ConnectionState",
    "SessionPhase",
    "PlayerStatus",
    "PlayerSignal",
    "PlayerSignalKind",
]
