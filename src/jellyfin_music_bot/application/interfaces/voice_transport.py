"""Port interfaces for the real-time voice transport.

A transport hands out connections (one per guild), players that decode and
send audio over a connection, and resources that wrap a byte stream for a
player. Connections and players report what happens to them: connections
through state listeners, players through an ordered stream of
:class:`PlayerSignal` values.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

from jellyfin_music_bot.domain.music.value_objects import (
    ConnectionState,
    PlayerSignal,
    PlayerStatus,
)
from jellyfin_music_bot.domain.shared.exceptions import ConnectError
from jellyfin_music_bot.domain.shared.messages import LogTemplates
from jellyfin_music_bot.domain.shared.types import ChannelIdField, DiscordSnowflake

if TYPE_CHECKING:
    from ...infrastructure.audio.stream_buffer import BufferedStream

logger = logging.getLogger(__name__)

StateListener = Callable[[ConnectionState, ConnectionState], None]


class VoiceConnection(ABC):
    """A voice connection whose lifecycle is owned by the connection itself.

    Concrete connections report transitions through :meth:`_set_state`;
    observers register with :meth:`add_state_listener` and are called
    synchronously with ``(old_state, new_state)``. ``DESTROYED`` is terminal.
    """

    def __init__(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> None:
        self.guild_id = guild_id
        self.channel_id = channel_id
        self._state = ConnectionState.CONNECTING
        self._listeners: list[StateListener] = []
        self._waiters: list[tuple[ConnectionState, asyncio.Future[None]]] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_destroyed(self) -> bool:
        return self._state == ConnectionState.DESTROYED

    def add_state_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _set_state(self, new_state: ConnectionState) -> None:
        old_state = self._state
        if new_state == old_state or old_state == ConnectionState.DESTROYED:
            return

        self._state = new_state
        logger.debug(
            LogTemplates.VOICE_STATE_CHANGED, self.guild_id, old_state.value, new_state.value
        )

        for waiting_for, future in list(self._waiters):
            if future.done():
                continue
            if waiting_for == new_state:
                future.set_result(None)
            elif new_state == ConnectionState.DESTROYED:
                future.set_exception(ConnectError(self.guild_id))

        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:
                logger.exception(LogTemplates.VOICE_STATE_LISTENER_ERROR, self.guild_id)

    async def wait_for(self, state: ConnectionState, timeout: float) -> None:
        """Wait until the connection enters *state*.

        Raises:
            TimeoutError: If *state* is not entered within *timeout* seconds.
            ConnectError: If the connection is destroyed first.
        """
        if self._state == state:
            return
        if self._state == ConnectionState.DESTROYED:
            raise ConnectError(self.guild_id)

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        entry = (state, future)
        self._waiters.append(entry)
        try:
            async with asyncio.timeout(timeout):
                await future
        finally:
            self._waiters.remove(entry)

    def destroy(self) -> None:
        """Tear the connection down. Synchronous and idempotent."""
        if self._state == ConnectionState.DESTROYED:
            return
        self._set_state(ConnectionState.DESTROYED)
        self._release()

    @abstractmethod
    def subscribe(self, player: AudioPlayer) -> None:
        """Route *player*'s audio output to this connection."""
        ...

    @abstractmethod
    def _release(self) -> None:
        """Release transport resources after the connection was destroyed."""
        ...


class AudioResource(ABC):
    """Decoder input wrapping a byte stream, with an output gain."""

    @property
    @abstractmethod
    def volume(self) -> float: ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying decoder and stream."""
        ...


class AudioPlayer(ABC):
    """Plays one resource at a time and publishes completion/error signals."""

    def __init__(self) -> None:
        self._signals: asyncio.Queue[PlayerSignal] = asyncio.Queue()

    @property
    @abstractmethod
    def status(self) -> PlayerStatus: ...

    @abstractmethod
    def play(self, resource: AudioResource) -> None:
        """Start *resource*, replacing whatever is playing without signalling for it."""
        ...

    @abstractmethod
    def stop(self) -> bool:
        """Stop output. Publishes ``FINISHED`` if something was playing."""
        ...

    @abstractmethod
    def pause(self) -> bool: ...

    @abstractmethod
    def unpause(self) -> bool: ...

    def _emit(self, signal: PlayerSignal) -> None:
        self._signals.put_nowait(signal)

    async def signals(self) -> AsyncIterator[PlayerSignal]:
        """Yield published signals in order, forever."""
        while True:
            yield await self._signals.get()


class VoiceTransport(ABC):
    """Factory for connections, players and resources."""

    @abstractmethod
    def join(
        self, guild_id: DiscordSnowflake, channel_id: ChannelIdField, adapter: Any
    ) -> VoiceConnection:
        """Start joining a voice channel and return the (not yet ready) connection.

        Raises:
            ConnectError: If the join cannot even be attempted.
        """
        ...

    @abstractmethod
    def create_player(self) -> AudioPlayer: ...

    @abstractmethod
    def create_resource(self, stream: BufferedStream, *, volume: float) -> AudioResource: ...
