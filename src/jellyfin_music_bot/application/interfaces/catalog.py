"""Port interface for the media catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import MediaItem, Playlist


class CatalogClient(ABC):
    """Read access to the media server's playlists.

    All methods raise ``CatalogError`` when the catalog cannot be reached,
    rejects the credentials or returns something unreadable.
    """

    @abstractmethod
    async def list_playlists(self) -> list[Playlist]:
        """List every playlist visible to the configured user."""
        ...

    @abstractmethod
    async def get_playlist_items(self, playlist_id: str) -> list[MediaItem]:
        """Get the items of a playlist, in playlist order."""
        ...

    @abstractmethod
    async def get_random_item(self, playlist_id: str) -> MediaItem | None:
        """Pick one item at random, or None if the playlist has no items."""
        ...
