import asyncio
import random

import pytest

from jellyfin_music_bot.application.interfaces.catalog import CatalogClient
from jellyfin_music_bot.application.interfaces.notifier import NowPlayingNotifier
from jellyfin_music_bot.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioResource,
    VoiceConnection,
    VoiceTransport,
)
from jellyfin_music_bot.config.settings import PlaybackSettings
from jellyfin_music_bot.domain.music.entities import MediaItem, Playlist
from jellyfin_music_bot.domain.music.session import GuildSessionRegistry
from jellyfin_music_bot.domain.music.value_objects import (
    ConnectionState,
    PlayerSignal,
    PlayerStatus,
)

GUILD_ID = 111111111111111111
CHANNEL_ID = 222222222222222222
PLAYLIST_ID = "playlist-1"


# ============================================================================
# Voice Transport Fakes
# ============================================================================


class FakeConnection(VoiceConnection):
    def __init__(self, guild_id: int, channel_id: int) -> None:
        super().__init__(guild_id, channel_id)
        self.subscribed: list[AudioPlayer] = []
        self.released = 0

    def subscribe(self, player: AudioPlayer) -> None:
        self.subscribed.append(player)

    def _release(self) -> None:
        self.released += 1

    def set_state(self, state: ConnectionState) -> None:
        self._set_state(state)


class FakeResource(AudioResource):
    def __init__(self, stream, volume: float) -> None:
        self.stream = stream
        self._volume = volume
        self.closed = False

    @property
    def volume(self) -> float:
        return self._volume

    def close(self) -> None:
        self.closed = True


class FakePlayer(AudioPlayer):
    def __init__(self) -> None:
        super().__init__()
        self._status = PlayerStatus.IDLE
        self.played: list[FakeResource] = []

    @property
    def status(self) -> PlayerStatus:
        return self._status

    def play(self, resource: AudioResource) -> None:
        self.played.append(resource)
        self._status = PlayerStatus.PLAYING

    def stop(self) -> bool:
        if self._status == PlayerStatus.IDLE:
            return False
        self.finish()
        return True

    def pause(self) -> bool:
        if self._status != PlayerStatus.PLAYING:
            return False
        self._status = PlayerStatus.PAUSED
        return True

    def unpause(self) -> bool:
        if self._status != PlayerStatus.PAUSED:
            return False
        self._status = PlayerStatus.PLAYING
        return True

    def finish(self) -> None:
        """Simulate the current track reaching its natural end."""
        self._status = PlayerStatus.IDLE
        self._emit(PlayerSignal.finished())

    def fail(self, error: Exception) -> None:
        self._status = PlayerStatus.IDLE
        self._emit(PlayerSignal.failed(error))


class FakeTransport(VoiceTransport):
    def __init__(self, *, auto_ready: bool = True, join_error: Exception | None = None) -> None:
        self.auto_ready = auto_ready
        self.join_error = join_error
        self.connections: list[FakeConnection] = []
        self.players: list[FakePlayer] = []
        self.resources: list[FakeResource] = []

    def join(self, guild_id, channel_id, adapter) -> VoiceConnection:
        if self.join_error is not None:
            raise self.join_error
        connection = FakeConnection(guild_id, channel_id)
        self.connections.append(connection)
        if self.auto_ready:
            asyncio.get_running_loop().call_soon(connection.set_state, ConnectionState.READY)
        return connection

    def create_player(self) -> AudioPlayer:
        player = FakePlayer()
        self.players.append(player)
        return player

    def create_resource(self, stream, *, volume: float) -> AudioResource:
        resource = FakeResource(stream, volume)
        self.resources.append(resource)
        return resource


# ============================================================================
# Catalog / Stream / Notifier Fakes
# ============================================================================


class FakeStream:
    def __init__(self, url: str) -> None:
        self.url = url
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


class FakeStreamBuffer:
    def __init__(self) -> None:
        self.opened: list[str] = []
        self.streams: list[FakeStream] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def open(self, url: str) -> FakeStream:
        self.opened.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        stream = FakeStream(url)
        self.streams.append(stream)
        return stream


class FakeCatalog(CatalogClient):
    def __init__(self, items: dict[str, list[MediaItem]], *, seed: int = 1234) -> None:
        self.items = items
        self.rng = random.Random(seed)
        self.random_calls = 0
        self.error: Exception | None = None

    async def list_playlists(self) -> list[Playlist]:
        return [Playlist(id=pid, name=f"Playlist {pid}") for pid in self.items]

    async def get_playlist_items(self, playlist_id: str) -> list[MediaItem]:
        return list(self.items.get(playlist_id, []))

    async def get_random_item(self, playlist_id: str) -> MediaItem | None:
        self.random_calls += 1
        if self.error is not None:
            raise self.error
        items = await self.get_playlist_items(playlist_id)
        return self.rng.choice(items) if items else None


class FakeNotifier(NowPlayingNotifier):
    def __init__(self) -> None:
        self.announcements: list[tuple[object, MediaItem]] = []

    async def announce(self, channel, item: MediaItem) -> None:
        self.announcements.append((channel, item))


def make_item(item_id: str, name: str | None = None, **overrides) -> MediaItem:
    fields = {
        "id": item_id,
        "name": name or f"Song {item_id}",
        "artist": "Test Artist",
        "album": "Test Album",
        "stream_url": f"http://jellyfin.local/Audio/{item_id}/stream?static=true",
    }
    fields.update(overrides)
    return MediaItem(**fields)


async def drain(delay: float = 0.0, rounds: int = 5) -> None:
    """Let scheduled callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(delay)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def playback_settings():
    return PlaybackSettings(
        volume=0.3,
        prefill_bytes=1024,
        connect_timeout_s=0.2,
        reconnect_grace_s=0.05,
        advance_delay_s=0.01,
        retry_delay_s=0.02,
        preplay_delay_s=0.0,
    )


@pytest.fixture
def registry():
    return GuildSessionRegistry()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def items():
    return [make_item("a", "Song A"), make_item("b", "Song B")]


@pytest.fixture
def catalog(items):
    return FakeCatalog({PLAYLIST_ID: items, "empty": []})


@pytest.fixture
def stream_buffer():
    return FakeStreamBuffer()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def connection_manager(registry, transport, playback_settings):
    from jellyfin_music_bot.application.services.connection_manager import ConnectionManager

    return ConnectionManager(registry=registry, transport=transport, settings=playback_settings)


@pytest.fixture
def playback_manager(
    registry, catalog, stream_buffer, transport, notifier, playback_settings, connection_manager
):
    from jellyfin_music_bot.application.services.playback_service import (
        PlaybackSessionManager,
    )

    manager = PlaybackSessionManager(
        registry=registry,
        catalog=catalog,
        stream_buffer=stream_buffer,
        transport=transport,
        notifier=notifier,
        settings=playback_settings,
    )
    connection_manager.set_on_destroy_callback(manager.cleanup)
    return manager
