"""
Jellyfin Catalog Client

Reads playlists and playlist items from a Jellyfin server over its REST API
and maps them to domain value objects.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from jellyfin_music_bot.application.interfaces.catalog import CatalogClient
from jellyfin_music_bot.domain.music.entities import MediaItem, Playlist
from jellyfin_music_bot.domain.music.value_objects import MediaType
from jellyfin_music_bot.domain.shared.exceptions import CatalogError
from jellyfin_music_bot.domain.shared.messages import LogTemplates
from jellyfin_music_bot.infrastructure.jellyfin.models import BaseItemDto, ItemsResponse

if TYPE_CHECKING:
    from ...config.settings import JellyfinSettings

logger = logging.getLogger(__name__)


def build_authorization_header(settings: JellyfinSettings) -> str:
    """Build the ``MediaBrowser`` authorization header value for *settings*."""
    fields = {
        "Client": settings.client_name,
        "Device": settings.device_name,
        "DeviceId": settings.device_id,
        "Version": settings.client_version,
        "Token": settings.api_key.get_secret_value(),
    }
    return "MediaBrowser " + ", ".join(f'{key}="{value}"' for key, value in fields.items())


class JellyfinCatalogClient(CatalogClient):
    """Catalog client backed by a Jellyfin server."""

    def __init__(
        self,
        settings: JellyfinSettings,
        *,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.url
        self._api_key = settings.api_key.get_secret_value()
        self._rng = rng or random.Random()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=settings.request_timeout_s,
        )
        self._headers = {"Authorization": build_authorization_header(settings)}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # === Catalog API ===

    async def list_playlists(self) -> list[Playlist]:
        response = await self._get_items(
            "list_playlists",
            "/Items",
            params={
                "userId": self._settings.user_id,
                "includeItemTypes": "Playlist",
                "recursive": "true",
            },
        )
        playlists = [
            Playlist(id=item.id, name=item.name or "Unknown", type=item.type or "Unknown")
            for item in response.items
        ]
        logger.debug(LogTemplates.CATALOG_PLAYLISTS_FETCHED, len(playlists))
        return playlists

    async def get_playlist_items(self, playlist_id: str) -> list[MediaItem]:
        response = await self._get_items(
            "get_playlist_items",
            f"/Playlists/{playlist_id}/Items",
            params={"userId": self._settings.user_id},
        )
        try:
            items = [self._to_media_item(item) for item in response.items]
        except ValidationError as exc:
            logger.error(LogTemplates.CATALOG_RESPONSE_INVALID, "get_playlist_items", exc)
            raise CatalogError("get_playlist_items", "Catalog item could not be mapped") from exc
        logger.debug(LogTemplates.CATALOG_ITEMS_FETCHED, len(items), playlist_id)
        return items

    async def get_random_item(self, playlist_id: str) -> MediaItem | None:
        items = await self.get_playlist_items(playlist_id)
        if not items:
            return None
        return self._rng.choice(items)

    # === URLs ===

    def stream_url(self, item_id: str) -> str:
        """Direct (static, untranscoded) stream URL for an item."""
        return f"{self._base_url}/Audio/{item_id}/stream?static=true&api_key={self._api_key}"

    def image_url(self, item: BaseItemDto) -> str | None:
        """Album artwork if the album has a primary image, else the item's own."""
        if item.album_id and item.album_primary_image_tag:
            return f"{self._base_url}/Items/{item.album_id}/Images/Primary?api_key={self._api_key}"
        if item.image_tags.get("Primary"):
            return f"{self._base_url}/Items/{item.id}/Images/Primary?api_key={self._api_key}"
        return None

    # === Internals ===

    async def _get_items(
        self, operation: str, path: str, *, params: dict[str, Any]
    ) -> ItemsResponse:
        try:
            response = await self._client.get(path, params=params, headers=self._headers)
            response.raise_for_status()
            return ItemsResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            logger.error(
                LogTemplates.CATALOG_REQUEST_FAILED, operation, exc.response.status_code
            )
            raise CatalogError(
                operation, f"Catalog returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(LogTemplates.CATALOG_REQUEST_FAILED, operation, repr(exc))
            raise CatalogError(operation, f"Catalog request failed: {exc}") from exc
        except (ValidationError, ValueError) as exc:
            logger.error(LogTemplates.CATALOG_RESPONSE_INVALID, operation, exc)
            raise CatalogError(operation, "Catalog returned an unreadable response") from exc

    def _to_media_item(self, item: BaseItemDto) -> MediaItem:
        audio = item.audio_stream
        return MediaItem(
            id=item.id,
            name=item.name or "Unknown",
            artist=item.album_artist or (item.artists[0] if item.artists else "Unknown Artist"),
            album=item.album or "Unknown Album",
            stream_url=self.stream_url(item.id),
            image_url=self.image_url(item),
            media_type=MediaType.VIDEO if item.is_video else MediaType.AUDIO,
            duration_seconds=item.duration_seconds,
            index_number=item.index_number,
            disc_number=item.parent_index_number,
            album_artist=item.album_artist,
            artists=tuple(item.artists),
            genres=tuple(item.genres),
            year=item.production_year,
            premiere_date=item.premiere_date,
            community_rating=item.community_rating,
            official_rating=item.official_rating,
            container=item.container,
            bitrate=audio.bit_rate if audio else None,
            sample_rate=audio.sample_rate if audio else None,
            channels=audio.channels if audio else None,
            overview=item.overview,
            sort_name=item.sort_name,
        )
