"""Discord voice transport implementing VoiceTransport on top of discord.py."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import discord

from jellyfin_music_bot.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioResource,
    VoiceConnection,
    VoiceTransport,
)
from jellyfin_music_bot.domain.music.value_objects import (
    ConnectionState,
    PlayerSignal,
    PlayerStatus,
)
from jellyfin_music_bot.domain.shared.exceptions import ConnectError, PlayerError
from jellyfin_music_bot.domain.shared.messages import ErrorMessages, LogTemplates
from jellyfin_music_bot.infrastructure.discord.adapters.audio_source import (
    DiscordAudioResource,
)

if TYPE_CHECKING:
    from discord.ext import commands

    from ....config.settings import PlaybackSettings
    from ....infrastructure.audio.stream_buffer import BufferedStream

logger = logging.getLogger(__name__)

READY_POLL_INTERVAL: float = 0.25


class DiscordAudioPlayer(AudioPlayer):
    """Plays resources on a guild's ``VoiceClient``.

    discord.py invokes the ``after`` callback on its audio thread; the
    callback is marshalled back onto the loop before becoming a signal.
    A source replaced by a newer :meth:`play` is ended silently.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self._loop = loop
        self._voice_client: discord.VoiceClient | None = None
        self._guild_id: int | None = None
        self._current: DiscordAudioResource | None = None
        self._generation = 0

    def attach(self, guild_id: int, voice_client: discord.VoiceClient | None) -> None:
        self._guild_id = guild_id
        self._voice_client = voice_client

    def detach(self) -> None:
        self._voice_client = None

    @property
    def status(self) -> PlayerStatus:
        vc = self._voice_client
        if vc is None or self._current is None:
            return PlayerStatus.IDLE
        if vc.is_paused():
            return PlayerStatus.PAUSED
        if vc.is_playing():
            return PlayerStatus.PLAYING
        return PlayerStatus.IDLE

    def play(self, resource: AudioResource) -> None:
        if not isinstance(resource, DiscordAudioResource):
            raise TypeError(f"Unsupported audio resource: {type(resource).__name__}")

        vc = self._voice_client
        if vc is None or not vc.is_connected():
            raise PlayerError(self._guild_id, "Voice client is not connected")

        self._generation += 1
        generation = self._generation
        self._current = resource
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        def after_callback(error: Exception | None = None) -> None:
            if self._loop.is_closed():
                return
            self._loop.call_soon_threadsafe(self._on_source_end, generation, resource, error)

        vc.play(resource.source, after=after_callback)

    def _on_source_end(
        self, generation: int, resource: DiscordAudioResource, error: Exception | None
    ) -> None:
        resource.close()
        if generation != self._generation:
            logger.debug(LogTemplates.PLAYBACK_IGNORING_CALLBACK, self._guild_id)
            return

        self._current = None
        logger.debug(LogTemplates.TRACK_ENDED, self._guild_id, error)
        if error is not None:
            self._emit(PlayerSignal.failed(error))
        else:
            self._emit(PlayerSignal.finished())

    def stop(self) -> bool:
        vc = self._voice_client
        if vc is None or self._current is None:
            return False
        if not (vc.is_playing() or vc.is_paused()):
            return False
        vc.stop()
        return True

    def pause(self) -> bool:
        vc = self._voice_client
        if vc is None or not vc.is_playing():
            return False
        vc.pause()
        return True

    def unpause(self) -> bool:
        vc = self._voice_client
        if vc is None or not vc.is_paused():
            return False
        vc.resume()
        return True


class DiscordVoiceConnection(VoiceConnection):
    """A guild voice connection driven by discord.py's ``VoiceClient``."""

    def __init__(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
        *,
        ready_timeout: float,
    ) -> None:
        super().__init__(guild.id, channel.id)
        self._guild = guild
        self._channel = channel
        self._ready_timeout = ready_timeout
        self._voice_client: discord.VoiceClient | None = None
        self._player: DiscordAudioPlayer | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._ready_task: asyncio.Task[None] | None = None
        self._teardown_task: asyncio.Task[None] | None = None

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._voice_client

    def start(self) -> None:
        self._set_state(ConnectionState.SIGNALLING)
        self._connect_task = asyncio.create_task(
            self._connect(), name=f"discord-voice-connect-{self.guild_id}"
        )

    async def _connect(self) -> None:
        try:
            vc = await self._channel.connect(self_deaf=True, timeout=self._ready_timeout)
        except TimeoutError:
            logger.warning(LogTemplates.VOICE_CONNECTION_TIMEOUT, self.channel_id, self.guild_id)
            self.destroy()
            return
        except discord.ClientException as exc:
            logger.warning(LogTemplates.VOICE_CLIENT_ERROR, exc)
            self.destroy()
            return
        except Exception:
            logger.exception(LogTemplates.VOICE_CONNECT_UNEXPECTED, self.guild_id)
            self.destroy()
            return

        if self.is_destroyed:
            await vc.disconnect(force=True)
            return

        self._bind(vc)
        self._set_state(ConnectionState.READY)

    def _bind(self, vc: discord.VoiceClient) -> None:
        self._voice_client = vc
        if self._player is not None:
            self._player.attach(self.guild_id, vc)

    def subscribe(self, player: AudioPlayer) -> None:
        if not isinstance(player, DiscordAudioPlayer):
            raise TypeError(f"Unsupported audio player: {type(player).__name__}")
        self._player = player
        player.attach(self.guild_id, self._voice_client)

    def handle_voice_state_update(
        self, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        """Translate the bot's own voice state changes into connection states."""
        if self.is_destroyed:
            return

        if after.channel is None:
            self._set_state(ConnectionState.DISCONNECTED)
            return

        self.channel_id = after.channel.id
        if self.state == ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.CONNECTING)
            self._ready_task = asyncio.create_task(
                self._await_reconnect(), name=f"discord-voice-ready-{self.guild_id}"
            )

    async def _await_reconnect(self) -> None:
        """Wait for discord.py to report the voice client connected again."""
        try:
            async with asyncio.timeout(self._ready_timeout):
                while not self.is_destroyed:
                    vc = self._guild.voice_client
                    if isinstance(vc, discord.VoiceClient) and vc.is_connected():
                        self._bind(vc)
                        if self.state in (ConnectionState.CONNECTING, ConnectionState.SIGNALLING):
                            self._set_state(ConnectionState.READY)
                        return
                    await asyncio.sleep(READY_POLL_INTERVAL)
        except TimeoutError:
            logger.warning(LogTemplates.VOICE_RECONNECT_FAILED, self.guild_id, self._ready_timeout)
            self.destroy()

    def _release(self) -> None:
        current = asyncio.current_task()
        for task in (self._connect_task, self._ready_task):
            if task is not None and task is not current and not task.done():
                task.cancel()

        if self._player is not None:
            self._player.detach()

        vc = self._voice_client or self._guild.voice_client
        self._voice_client = None
        if vc is not None:
            self._teardown_task = asyncio.get_running_loop().create_task(
                self._disconnect(vc), name=f"discord-voice-teardown-{self.guild_id}"
            )

    async def _disconnect(self, vc: Any) -> None:
        try:
            await vc.disconnect(force=True)
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR)


class DiscordVoiceTransport(VoiceTransport):
    """Creates discord.py backed connections, players and resources.

    The ``adapter`` passed to :meth:`join` is the ``discord.Guild`` to join in.
    """

    def __init__(self, bot: commands.Bot, settings: PlaybackSettings) -> None:
        self._bot = bot
        self._settings = settings
        self._connections: dict[int, DiscordVoiceConnection] = {}

    def get_connection(self, guild_id: int) -> DiscordVoiceConnection | None:
        return self._connections.get(guild_id)

    def join(self, guild_id: int, channel_id: int, adapter: Any) -> VoiceConnection:
        if not isinstance(adapter, discord.Guild):
            raise ConnectError(guild_id, ErrorMessages.VOICE_ADAPTER_NOT_GUILD)

        channel = adapter.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise ConnectError(
                guild_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        connection = DiscordVoiceConnection(
            adapter, channel, ready_timeout=self._settings.connect_timeout_s
        )
        self._connections[guild_id] = connection

        def forget(_old: ConnectionState, new: ConnectionState) -> None:
            if new == ConnectionState.DESTROYED and self._connections.get(guild_id) is connection:
                del self._connections[guild_id]

        connection.add_state_listener(forget)
        connection.start()
        return connection

    def handle_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Forward the bot's own voice state updates to its connection."""
        if self._bot.user is None or member.id != self._bot.user.id:
            return
        connection = self._connections.get(member.guild.id)
        if connection is not None:
            connection.handle_voice_state_update(before, after)

    def create_player(self) -> AudioPlayer:
        return DiscordAudioPlayer(asyncio.get_running_loop())

    def create_resource(self, stream: BufferedStream, *, volume: float) -> AudioResource:
        return DiscordAudioResource(
            stream,
            loop=asyncio.get_running_loop(),
            volume=volume,
            before_options=self._settings.ffmpeg_before_options,
            options=self._settings.ffmpeg_options,
        )

    def destroy_all(self) -> None:
        for connection in list(self._connections.values()):
            connection.destroy()
