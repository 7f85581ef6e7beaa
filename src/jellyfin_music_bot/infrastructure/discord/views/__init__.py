"""Discord UI views and components."""

from __future__ import annotations

from jellyfin_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView
from jellyfin_music_bot.infrastructure.discord.views.control_view import PlaybackControlView
from jellyfin_music_bot.infrastructure.discord.views.playlist_select_view import (
    PlaylistSelect,
    PlaylistSelectView,
)

__all__ = [
    "BaseInteractiveView",
    "PlaybackControlView",
    "PlaylistSelect",
    "PlaylistSelectView",
]
