"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the catalog client, stream buffer, voice
transport and the two session services.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx
    from discord.ext.commands import Bot

    from ..application.services.connection_manager import ConnectionManager
    from ..application.services.playback_service import PlaybackSessionManager
    from ..domain.music.session import GuildSessionRegistry
    from ..infrastructure.audio.stream_buffer import StreamBuffer
    from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
    from ..infrastructure.discord.services.now_playing_notifier import (
        DiscordNowPlayingNotifier,
    )
    from ..infrastructure.jellyfin.client import JellyfinCatalogClient
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Shared state
    _registry: GuildSessionRegistry | None = None
    _http_client: httpx.AsyncClient | None = None

    # Infrastructure adapters
    _catalog_client: JellyfinCatalogClient | None = None
    _stream_buffer: StreamBuffer | None = None
    _voice_transport: DiscordVoiceTransport | None = None
    _notifier: DiscordNowPlayingNotifier | None = None

    # Application services
    _connection_manager: ConnectionManager | None = None
    _playback_manager: PlaybackSessionManager | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Shared State ===

    @property
    def registry(self) -> GuildSessionRegistry:
        """Get the per-guild session registry shared by both services."""
        if self._registry is None:
            from ..domain.music.session import GuildSessionRegistry

            self._registry = GuildSessionRegistry()
        return self._registry

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get the HTTP client used for media streams and artwork."""
        if self._http_client is None:
            import httpx

            # Streams run for the length of a track; no overall timeout
            self._http_client = httpx.AsyncClient(timeout=None, follow_redirects=True)
        return self._http_client

    # === Infrastructure Adapters ===

    @property
    def catalog_client(self) -> JellyfinCatalogClient:
        """Get the Jellyfin catalog client."""
        if self._catalog_client is None:
            from ..infrastructure.jellyfin.client import JellyfinCatalogClient

            self._catalog_client = JellyfinCatalogClient(self.settings.jellyfin)
        return self._catalog_client

    @property
    def stream_buffer(self) -> StreamBuffer:
        """Get the pre-filling stream opener."""
        if self._stream_buffer is None:
            from ..infrastructure.audio.stream_buffer import StreamBuffer

            self._stream_buffer = StreamBuffer(self.http_client, self.settings.playback)
        return self._stream_buffer

    @property
    def voice_transport(self) -> DiscordVoiceTransport:
        """Get the discord.py voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(self.bot, self.settings.playback)
        return self._voice_transport

    @property
    def notifier(self) -> DiscordNowPlayingNotifier:
        """Get the now-playing notifier."""
        if self._notifier is None:
            from ..infrastructure.discord.services.now_playing_notifier import (
                DiscordNowPlayingNotifier,
            )
            from ..infrastructure.discord.views.control_view import PlaybackControlView

            self._notifier = DiscordNowPlayingNotifier(
                self.http_client,
                view_factory=lambda: PlaybackControlView(self.playback_manager),
            )
        return self._notifier

    # === Application Services ===

    @property
    def connection_manager(self) -> ConnectionManager:
        """Get the voice connection manager."""
        if self._connection_manager is None:
            from ..application.services.connection_manager import ConnectionManager

            self._connection_manager = ConnectionManager(
                registry=self.registry,
                transport=self.voice_transport,
                settings=self.settings.playback,
            )
            self._connection_manager.set_on_destroy_callback(self.playback_manager.cleanup)
        return self._connection_manager

    @property
    def playback_manager(self) -> PlaybackSessionManager:
        """Get the playback session manager."""
        if self._playback_manager is None:
            from ..application.services.playback_service import PlaybackSessionManager

            self._playback_manager = PlaybackSessionManager(
                registry=self.registry,
                catalog=self.catalog_client,
                stream_buffer=self.stream_buffer,
                transport=self.voice_transport,
                notifier=self.notifier,
                settings=self.settings.playback,
            )
        return self._playback_manager

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Build the service graph so wiring errors surface at startup."""
        _ = self.connection_manager
        _ = self.playback_manager

    async def shutdown(self) -> None:
        """Disconnect every guild and close HTTP clients."""
        if self._connection_manager is not None:
            self._connection_manager.disconnect_all()
        if self._voice_transport is not None:
            self._voice_transport.destroy_all()

        if self._catalog_client is not None:
            try:
                await self._catalog_client.aclose()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_CLOSE_ERROR, "catalog client", exc)

        if self._http_client is not None:
            try:
                await self._http_client.aclose()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_CLOSE_ERROR, "HTTP client", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
