"""Port interface for announcing the track that is about to play."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ...domain.music.entities import MediaItem


class NowPlayingNotifier(ABC):
    @abstractmethod
    async def announce(self, channel: Any, item: MediaItem) -> None:
        """Post a now-playing notice for *item* to *channel*."""
        ...
