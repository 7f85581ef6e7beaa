"""Jellyfin infrastructure - REST catalog client and payload models."""

from jellyfin_music_bot.infrastructure.jellyfin.client import (
    JellyfinCatalogClient,
    build_authorization_header,
)
from jellyfin_music_bot.infrastructure.jellyfin.models import (
    BaseItemDto,
    ItemsResponse,
    MediaStreamDto,
)

__all__ = [
    "BaseItemDto",
    "ItemsResponse",
    "JellyfinCatalogClient",
    "MediaStreamDto",
    "build_authorization_header",
]
