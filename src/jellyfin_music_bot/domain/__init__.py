# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting exceptions, message templates and annotated types
- music/: Media items, playlists, and per-guild playback session state
"""

from jellyfin_music_bot.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
