"""Playback Session Manager - runs the per-guild random-play loop."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import PlayerSignal, PlayerStatus, SessionPhase
from ...domain.shared.exceptions import PlayerError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.music.entities import MediaItem
    from ...domain.music.session import GuildSession, GuildSessionRegistry
    from ...infrastructure.audio.stream_buffer import BufferedStream, StreamBuffer
    from ..interfaces.catalog import CatalogClient
    from ..interfaces.notifier import NowPlayingNotifier
    from ..interfaces.voice_transport import AudioPlayer, AudioResource, VoiceTransport

logger = logging.getLogger(__name__)


class PlaybackSessionManager:
    """Plays random items from the selected playlist, one after another, per guild.

    Iterations for a guild are strictly sequential: one is started by the
    user, by a scheduled advance after a track ended or failed, or by a
    retry after an iteration raised. An iteration never starts while
    another one is loading. Stopping is done by clearing the playlist
    selection; the next completed track then finds nothing to continue with.
    """

    def __init__(
        self,
        *,
        registry: GuildSessionRegistry,
        catalog: CatalogClient,
        stream_buffer: StreamBuffer,
        transport: VoiceTransport,
        notifier: NowPlayingNotifier | None,
        settings: PlaybackSettings,
    ) -> None:
        self._registry = registry
        self._catalog = catalog
        self._stream_buffer = stream_buffer
        self._transport = transport
        self._notifier = notifier
        self._settings = settings

    # === Selection ===

    def set_playlist(self, guild_id: DiscordSnowflake, playlist_id: str) -> None:
        session = self._registry.get_or_create(guild_id)
        session.playlist_id = playlist_id
        logger.info(LogTemplates.PLAYLIST_SELECTED, playlist_id, guild_id)

    def remove_playlist(self, guild_id: DiscordSnowflake) -> None:
        """Clear the playlist selection. The current track keeps playing."""
        session = self._registry.get(guild_id)
        if session is not None and session.playlist_id is not None:
            session.playlist_id = None
            logger.info(LogTemplates.PLAYLIST_CLEARED, guild_id)

    def set_output_channel(self, guild_id: DiscordSnowflake, channel: Any) -> None:
        session = self._registry.get_or_create(guild_id)
        session.output_channel = channel

    # === Accessors ===

    def get_player(self, guild_id: DiscordSnowflake) -> AudioPlayer | None:
        session = self._registry.get(guild_id)
        return session.player if session is not None else None

    def get_current_song(self, guild_id: DiscordSnowflake) -> MediaItem | None:
        session = self._registry.get(guild_id)
        return session.current_item if session is not None else None

    def get_phase(self, guild_id: DiscordSnowflake) -> SessionPhase:
        session = self._registry.get(guild_id)
        return session.phase if session is not None else SessionPhase.IDLE

    # === Play loop ===

    async def start(self, guild_id: DiscordSnowflake) -> None:
        """Start the loop for a guild that has a playlist and a connection."""
        await self.play_next(guild_id)

    async def play_next(self, guild_id: DiscordSnowflake) -> None:
        """Run one loop iteration: pick, announce, buffer and play a random item."""
        session = self._registry.get(guild_id)
        if session is None or session.playlist_id is None:
            logger.debug(LogTemplates.PLAYBACK_NO_PLAYLIST, guild_id)
            return
        if session.connection is None:
            logger.debug(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return
        if session.is_loading:
            logger.debug(LogTemplates.PLAYBACK_ALREADY_LOADING, guild_id)
            return

        session.cancel_advance()
        session.transition_to(SessionPhase.LOADING)
        playlist_id = session.playlist_id
        stream: BufferedStream | None = None
        resource: AudioResource | None = None

        try:
            item = await self._catalog.get_random_item(playlist_id)
            if not self._is_current(session):
                logger.info(LogTemplates.PLAYBACK_ITERATION_ABORTED, guild_id)
                return
            if item is None:
                logger.warning(LogTemplates.PLAYLIST_EMPTY, playlist_id, guild_id)
                session.transition_to(SessionPhase.READY)
                return

            session.current_item = item
            logger.info(LogTemplates.TRACK_SELECTED, item.name, item.artist, guild_id)
            logger.debug(
                LogTemplates.TRACK_DETAILS,
                item.album,
                item.duration_formatted,
                item.track_label or "-",
                item.media_type.value,
                item.container or "?",
                item.bitrate_kbps if item.bitrate_kbps is not None else "?",
            )

            if self._notifier is not None and session.output_channel is not None:
                await self._notifier.announce(session.output_channel, item)
                if not self._is_current(session):
                    logger.info(LogTemplates.PLAYBACK_ITERATION_ABORTED, guild_id)
                    return

            stream = await self._stream_buffer.open(item.stream_url)
            if not self._is_current(session):
                logger.info(LogTemplates.PLAYBACK_ITERATION_ABORTED, guild_id)
                return

            resource = self._transport.create_resource(stream, volume=self._settings.volume)
            stream = None  # closed through the resource from here on
            player = self._ensure_player(session)

            await asyncio.sleep(self._settings.preplay_delay_s)
            if not self._is_current(session):
                logger.info(LogTemplates.PLAYBACK_ITERATION_ABORTED, guild_id)
                return

            player.play(resource)
            resource = None  # owned by the player from here on
            session.transition_to(SessionPhase.PLAYING)
            logger.info(LogTemplates.PLAYBACK_STARTED, item.name, guild_id)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_ITERATION_FAILED, guild_id)
            if self._is_current(session):
                session.transition_to(SessionPhase.READY)
                self._schedule_advance(session, self._settings.retry_delay_s)
        finally:
            if resource is not None:
                resource.close()
            elif stream is not None:
                await stream.aclose()

    def _is_current(self, session: GuildSession) -> bool:
        """True while *session* is still registered and connected."""
        return (
            self._registry.get(session.guild_id) is session and session.connection is not None
        )

    def _ensure_player(self, session: GuildSession) -> AudioPlayer:
        if session.player is None:
            assert session.connection is not None
            player = self._transport.create_player()
            session.connection.subscribe(player)
            session.player = player
            session.pump_task = asyncio.create_task(
                self._pump_signals(session.guild_id, player),
                name=f"player-signals-{session.guild_id}",
            )
            logger.debug(LogTemplates.PLAYER_CREATED, session.guild_id)
        return session.player

    async def _pump_signals(self, guild_id: DiscordSnowflake, player: AudioPlayer) -> None:
        async for signal in player.signals():
            try:
                self._handle_signal(guild_id, signal)
            except Exception:
                logger.exception(LogTemplates.PLAYER_SIGNAL_HANDLER_ERROR, guild_id)

    def _handle_signal(self, guild_id: DiscordSnowflake, signal: PlayerSignal) -> None:
        session = self._registry.get(guild_id)
        if session is None:
            return

        if signal.is_error:
            error = PlayerError(guild_id, str(signal.error) if signal.error else None)
            logger.error(LogTemplates.PLAYBACK_ERROR, guild_id, error.message)
        else:
            logger.debug(LogTemplates.TRACK_FINISHED, guild_id)

        if session.playlist_id is None:
            # Nothing selected and nothing playing: leave the channel
            logger.info(LogTemplates.PLAYBACK_AUTO_LEAVE, guild_id)
            session.current_item = None
            if session.connection is not None:
                session.connection.destroy()
            return

        if session.is_loading:
            logger.debug(LogTemplates.PLAYBACK_ALREADY_LOADING, guild_id)
            return

        session.transition_to(SessionPhase.READY)
        self._schedule_advance(session, self._settings.advance_delay_s)

    def _schedule_advance(self, session: GuildSession, delay: float) -> None:
        session.cancel_advance()
        session.advance_task = asyncio.create_task(
            self._advance_after(session, delay), name=f"play-next-{session.guild_id}"
        )
        logger.debug(LogTemplates.PLAYBACK_ADVANCE_SCHEDULED, session.guild_id, delay)

    async def _advance_after(self, session: GuildSession, delay: float) -> None:
        await asyncio.sleep(delay)
        if session.advance_task is asyncio.current_task():
            session.advance_task = None
        if self._registry.get(session.guild_id) is not session:
            return
        await self.play_next(session.guild_id)

    # === Transport controls ===

    def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Clear the selection and stop the current track; the loop then leaves."""
        session = self._registry.get(guild_id)
        if session is None:
            return False
        self.remove_playlist(guild_id)
        session.cancel_advance()
        if session.player is None:
            return False
        # An idle player (between tracks) still counts as stopped
        session.player.stop()
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return True

    def skip(self, guild_id: DiscordSnowflake) -> bool:
        """Stop the current track; the end-of-track path picks the next one."""
        player = self.get_player(guild_id)
        if player is None:
            return False
        skipped = player.stop()
        if skipped:
            logger.info(LogTemplates.TRACK_SKIPPED, guild_id)
        return skipped

    def pause(self, guild_id: DiscordSnowflake) -> bool:
        player = self.get_player(guild_id)
        if player is None or player.status != PlayerStatus.PLAYING:
            return False
        paused = player.pause()
        if paused:
            logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
        return paused

    def resume(self, guild_id: DiscordSnowflake) -> bool:
        player = self.get_player(guild_id)
        if player is None or player.status != PlayerStatus.PAUSED:
            return False
        resumed = player.unpause()
        if resumed:
            logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
        return resumed

    # === Cleanup ===

    def cleanup(self, guild_id: DiscordSnowflake) -> None:
        """Drop all guild-scoped playback state. Never touches the connection."""
        session = self._registry.get(guild_id)
        if session is None:
            return

        session.cancel_advance()
        if session.pump_task is not None:
            session.pump_task.cancel()
            session.pump_task = None
        if session.player is not None:
            session.player.stop()
            session.player = None

        session.playlist_id = None
        session.current_item = None
        session.output_channel = None
        logger.info(LogTemplates.SESSION_CLEANED_UP, guild_id)
