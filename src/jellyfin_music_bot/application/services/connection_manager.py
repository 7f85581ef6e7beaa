"""Connection Manager - maps each guild to at most one live voice connection."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import ConnectionState, SessionPhase
from ...domain.shared.exceptions import ConnectError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.session import GuildSession, GuildSessionRegistry
    from ..interfaces.voice_transport import VoiceConnection, VoiceTransport

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Acquires, observes and tears down per-guild voice connections.

    Connect failures never raise out of this class: they are logged and
    reported as ``None``. Teardown, whatever its cause, runs through the
    destroy observer exactly once per connection.
    """

    def __init__(
        self,
        *,
        registry: GuildSessionRegistry,
        transport: VoiceTransport,
        settings: PlaybackSettings,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._settings = settings

        self._on_destroy: Callable[[DiscordSnowflake], Any] | None = None
        self._connecting: dict[DiscordSnowflake, asyncio.Task[VoiceConnection | None]] = {}
        self._monitors: dict[DiscordSnowflake, asyncio.Task[None]] = {}

    def set_on_destroy_callback(self, callback: Callable[[DiscordSnowflake], Any]) -> None:
        """Register the guild cleanup to run when a connection is destroyed."""
        self._on_destroy = callback

    def get_connection(self, guild_id: DiscordSnowflake) -> VoiceConnection | None:
        session = self._registry.get(guild_id)
        return session.connection if session is not None else None

    async def ensure_connection(
        self, guild_id: DiscordSnowflake, channel_id: ChannelIdField, adapter: Any
    ) -> VoiceConnection | None:
        """Return the guild's live connection, connecting to *channel_id* if needed.

        An existing connection is returned unchanged even if it sits in a
        different channel. Returns None when the connection could not become
        ready in time.

        Raises:
            ValueError: If *adapter* is missing.
        """
        if adapter is None:
            raise ValueError(ErrorMessages.VOICE_ADAPTER_REQUIRED)

        existing = self.get_connection(guild_id)
        if existing is not None and not existing.is_destroyed:
            return existing

        pending = self._connecting.get(guild_id)
        if pending is not None:
            logger.debug(LogTemplates.VOICE_JOIN_INFLIGHT, guild_id)
            return await asyncio.shield(pending)

        task = asyncio.create_task(
            self._connect(guild_id, channel_id, adapter), name=f"voice-connect-{guild_id}"
        )
        self._connecting[guild_id] = task
        task.add_done_callback(partial(self._forget_connect, guild_id))
        return await asyncio.shield(task)

    def _forget_connect(self, guild_id: DiscordSnowflake, task: asyncio.Task[Any]) -> None:
        if self._connecting.get(guild_id) is task:
            del self._connecting[guild_id]

    async def _connect(
        self, guild_id: DiscordSnowflake, channel_id: ChannelIdField, adapter: Any
    ) -> VoiceConnection | None:
        session = self._registry.get_or_create(guild_id)
        if session.phase == SessionPhase.IDLE:
            session.transition_to(SessionPhase.CONNECTING)

        try:
            connection = self._transport.join(guild_id, channel_id, adapter)
        except ConnectError as exc:
            logger.warning(LogTemplates.VOICE_CONNECT_FAILED, channel_id, guild_id, exc.message)
            self._abandon(guild_id, session)
            return None

        try:
            await connection.wait_for(ConnectionState.READY, self._settings.connect_timeout_s)
        except TimeoutError:
            logger.warning(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id, guild_id)
            connection.destroy()
            self._abandon(guild_id, session)
            return None
        except ConnectError as exc:
            logger.warning(LogTemplates.VOICE_CONNECT_FAILED, channel_id, guild_id, exc.message)
            connection.destroy()
            self._abandon(guild_id, session)
            return None
        except asyncio.CancelledError:
            connection.destroy()
            self._abandon(guild_id, session)
            raise

        if self._registry.get(guild_id) is not session:
            # Guild state was dropped while we were waiting
            session = self._registry.get_or_create(guild_id)
            session.transition_to(SessionPhase.CONNECTING)

        session.connection = connection
        session.transition_to(SessionPhase.READY)
        connection.add_state_listener(partial(self._on_state_change, guild_id, connection))
        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)
        return connection

    def _abandon(self, guild_id: DiscordSnowflake, session: GuildSession) -> None:
        """Undo a failed connect attempt."""
        if session.phase == SessionPhase.CONNECTING:
            session.transition_to(SessionPhase.IDLE)
        if session.is_empty and self._registry.get(guild_id) is session:
            self._registry.remove(guild_id)

    # === Lifecycle observers ===

    def _on_state_change(
        self,
        guild_id: DiscordSnowflake,
        connection: VoiceConnection,
        old_state: ConnectionState,
        new_state: ConnectionState,
    ) -> None:
        if new_state == ConnectionState.DISCONNECTED:
            self._start_disconnect_monitor(guild_id, connection)
        elif new_state == ConnectionState.DESTROYED:
            self._handle_destroyed(guild_id, connection)

    def _start_disconnect_monitor(
        self, guild_id: DiscordSnowflake, connection: VoiceConnection
    ) -> None:
        monitor = self._monitors.get(guild_id)
        if monitor is not None and not monitor.done():
            return
        logger.info(LogTemplates.VOICE_DISCONNECTED_WAITING, guild_id)
        self._monitors[guild_id] = asyncio.create_task(
            self._watch_disconnect(guild_id, connection), name=f"voice-disconnect-{guild_id}"
        )

    async def _watch_disconnect(
        self, guild_id: DiscordSnowflake, connection: VoiceConnection
    ) -> None:
        """Give the transport a grace period to start reconnecting on its own."""
        grace = self._settings.reconnect_grace_s
        waits = [
            asyncio.create_task(connection.wait_for(ConnectionState.SIGNALLING, grace)),
            asyncio.create_task(connection.wait_for(ConnectionState.CONNECTING, grace)),
        ]
        try:
            for entered in asyncio.as_completed(waits):
                try:
                    await entered
                except TimeoutError:
                    continue
                except ConnectError:
                    return
                logger.info(LogTemplates.VOICE_RECONNECTING, guild_id)
                return

            logger.warning(LogTemplates.VOICE_RECONNECT_FAILED, guild_id, grace)
            connection.destroy()
        finally:
            for wait in waits:
                if wait.done() and not wait.cancelled():
                    wait.exception()
                else:
                    wait.cancel()
            if self._monitors.get(guild_id) is asyncio.current_task():
                del self._monitors[guild_id]

    def _handle_destroyed(self, guild_id: DiscordSnowflake, connection: VoiceConnection) -> None:
        monitor = self._monitors.pop(guild_id, None)
        if monitor is not None and monitor is not asyncio.current_task():
            monitor.cancel()

        session = self._registry.get(guild_id)
        if session is None or session.connection is not connection:
            return

        session.connection = None
        session.transition_to(SessionPhase.TEARING_DOWN)
        if self._on_destroy is not None:
            try:
                self._on_destroy(guild_id)
            except Exception:
                logger.exception(LogTemplates.VOICE_CLEANUP_ERROR)
        self._registry.remove(guild_id)
        session.transition_to(SessionPhase.IDLE)
        logger.info(LogTemplates.VOICE_CONNECTION_CLEANED_UP, guild_id)

    # === Teardown ===

    def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Destroy the guild's connection. Returns whether one existed."""
        connection = self.get_connection(guild_id)
        if connection is None:
            logger.debug(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return False
        connection.destroy()
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        return True

    def disconnect_all(self) -> int:
        """Destroy every connection and abort in-flight connects (shutdown)."""
        for task in list(self._connecting.values()):
            task.cancel()
        count = 0
        for guild_id in self._registry.guild_ids():
            if self.disconnect(guild_id):
                count += 1
        return count
