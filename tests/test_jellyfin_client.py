"""
Unit Tests for JellyfinCatalogClient

Tests for:
- Playlist listing and request parameters
- Mapping Jellyfin item payloads to MediaItem
- Stream and artwork URL construction
- HTTP and payload errors surfacing as CatalogError
- Random selection (seeded)
"""

import random

import httpx
import pytest
from pydantic import SecretStr

from jellyfin_music_bot.config.settings import JellyfinSettings
from jellyfin_music_bot.domain.music.value_objects import MediaType
from jellyfin_music_bot.domain.shared.exceptions import CatalogError
from jellyfin_music_bot.infrastructure.jellyfin import (
    BaseItemDto,
    JellyfinCatalogClient,
    build_authorization_header,
)

BASE_URL = "http://jellyfin.local:8096"

TRACK_PAYLOAD = {
    "Id": "track-1",
    "Name": "Song A",
    "Type": "Audio",
    "MediaType": "Audio",
    "Album": "Album X",
    "AlbumId": "album-1",
    "AlbumArtist": "Band",
    "AlbumPrimaryImageTag": "tag",
    "Artists": ["Band", "Guest"],
    "Genres": ["Rock"],
    "RunTimeTicks": 2_250_000_000,
    "IndexNumber": 3,
    "ParentIndexNumber": 1,
    "ProductionYear": 1999,
    "Container": "flac",
    "MediaStreams": [
        {"Type": "Audio", "BitRate": 900_000, "SampleRate": 44100, "Channels": 2},
    ],
}


@pytest.fixture
def settings():
    return JellyfinSettings(url=BASE_URL, api_key=SecretStr("key123"), user_id="user-1")


def _client(settings, handler, seed=None):
    http = httpx.AsyncClient(base_url=settings.url, transport=httpx.MockTransport(handler))
    rng = random.Random(seed) if seed is not None else None
    return JellyfinCatalogClient(settings, client=http, rng=rng), http


def _items(*payloads):
    return httpx.Response(200, json={"Items": list(payloads), "TotalRecordCount": len(payloads)})


class TestListPlaylists:
    @pytest.mark.asyncio
    async def test_returns_playlists_and_sends_query(self, settings):
        requests = []

        def handler(request):
            requests.append(request)
            return _items(
                {"Id": "p1", "Name": "Road Trip", "Type": "Playlist"},
                {"Id": "p2", "Name": None, "Type": "Playlist"},
            )

        catalog, http = _client(settings, handler)
        playlists = await catalog.list_playlists()

        assert [(p.id, p.name) for p in playlists] == [("p1", "Road Trip"), ("p2", "Unknown")]
        request = requests[0]
        assert request.url.path == "/Items"
        assert request.url.params["userId"] == "user-1"
        assert request.url.params["includeItemTypes"] == "Playlist"
        assert request.url.params["recursive"] == "true"
        assert request.headers["Authorization"].startswith("MediaBrowser ")
        await http.aclose()

    @pytest.mark.asyncio
    async def test_null_items_is_empty(self, settings):
        catalog, http = _client(settings, lambda r: httpx.Response(200, json={"Items": None}))

        assert await catalog.list_playlists() == []
        await http.aclose()

    @pytest.mark.asyncio
    async def test_http_error_raises_catalog_error(self, settings):
        catalog, http = _client(settings, lambda r: httpx.Response(401))

        with pytest.raises(CatalogError) as exc_info:
            await catalog.list_playlists()

        assert exc_info.value.operation == "list_playlists"
        assert "401" in exc_info.value.message
        await http.aclose()

    @pytest.mark.asyncio
    async def test_network_error_raises_catalog_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        catalog, http = _client(settings, handler)

        with pytest.raises(CatalogError):
            await catalog.list_playlists()
        await http.aclose()

    @pytest.mark.asyncio
    async def test_malformed_body_raises_catalog_error(self, settings):
        catalog, http = _client(settings, lambda r: httpx.Response(200, content=b"<html>"))

        with pytest.raises(CatalogError):
            await catalog.list_playlists()
        await http.aclose()


class TestPlaylistItems:
    @pytest.mark.asyncio
    async def test_maps_item_fields(self, settings):
        requests = []

        def handler(request):
            requests.append(request)
            return _items(TRACK_PAYLOAD)

        catalog, http = _client(settings, handler)
        (item,) = await catalog.get_playlist_items("p1")

        assert requests[0].url.path == "/Playlists/p1/Items"
        assert item.id == "track-1"
        assert item.name == "Song A"
        assert item.artist == "Band"
        assert item.album == "Album X"
        assert item.stream_url == f"{BASE_URL}/Audio/track-1/stream?static=true&api_key=key123"
        assert item.image_url == f"{BASE_URL}/Items/album-1/Images/Primary?api_key=key123"
        assert item.media_type == MediaType.AUDIO
        assert item.duration_seconds == 225
        assert item.track_label == "Disc 1 - Track 3"
        assert item.artists == ("Band", "Guest")
        assert item.year == 1999
        assert item.bitrate_kbps == 900
        assert item.sample_rate == 44100
        await http.aclose()

    @pytest.mark.asyncio
    async def test_missing_metadata_uses_fallbacks(self, settings):
        catalog, http = _client(settings, lambda r: _items({"Id": "bare", "Artists": None}))

        (item,) = await catalog.get_playlist_items("p1")

        assert item.name == "Unknown"
        assert item.artist == "Unknown Artist"
        assert item.album == "Unknown Album"
        assert item.image_url is None
        assert item.duration_seconds is None
        await http.aclose()

    @pytest.mark.asyncio
    async def test_first_artist_when_no_album_artist(self, settings):
        catalog, http = _client(
            settings, lambda r: _items({"Id": "t", "Artists": ["Solo"], "ImageTags": {"Primary": "x"}})
        )

        (item,) = await catalog.get_playlist_items("p1")

        assert item.artist == "Solo"
        assert item.image_url == f"{BASE_URL}/Items/t/Images/Primary?api_key=key123"
        await http.aclose()

    @pytest.mark.asyncio
    async def test_video_item_detected(self, settings):
        catalog, http = _client(settings, lambda r: _items({"Id": "v", "Type": "MusicVideo"}))

        (item,) = await catalog.get_playlist_items("p1")

        assert item.is_video
        await http.aclose()


class TestRandomItem:
    @pytest.mark.asyncio
    async def test_empty_playlist_returns_none(self, settings):
        catalog, http = _client(settings, lambda r: _items())

        assert await catalog.get_random_item("p1") is None
        await http.aclose()

    @pytest.mark.asyncio
    async def test_seeded_selection_covers_all_items(self, settings):
        payloads = [dict(TRACK_PAYLOAD, Id=f"t{i}") for i in range(3)]
        catalog, http = _client(settings, lambda r: _items(*payloads), seed=42)

        seen = {(await catalog.get_random_item("p1")).id for _ in range(100)}

        assert seen == {"t0", "t1", "t2"}
        await http.aclose()

    @pytest.mark.asyncio
    async def test_refetches_every_call(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return _items(TRACK_PAYLOAD)

        catalog, http = _client(settings, handler)
        await catalog.get_random_item("p1")
        await catalog.get_random_item("p1")

        assert len(calls) == 2
        await http.aclose()


class TestHelpers:
    def test_authorization_header(self, settings):
        header = build_authorization_header(settings)

        assert header.startswith("MediaBrowser ")
        assert 'Token="key123"' in header
        assert 'Client="Jellyfin Music Bot"' in header

    def test_base_item_null_collections(self):
        item = BaseItemDto.model_validate(
            {"Id": "x", "Artists": None, "Genres": None, "MediaStreams": None, "ImageTags": None}
        )

        assert item.artists == []
        assert item.image_tags == {}
        assert item.audio_stream is None

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, settings):
        catalog, http = _client(settings, lambda r: _items())

        await catalog.aclose()

        assert not http.is_closed
        await http.aclose()