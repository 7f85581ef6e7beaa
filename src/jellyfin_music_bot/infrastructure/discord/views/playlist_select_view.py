"""Playlist picker shown by ``/play``."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

import discord

from jellyfin_music_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from jellyfin_music_bot.infrastructure.discord.guards.voice_guards import (
    get_voice_channel,
    send_ephemeral,
)
from jellyfin_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView
from jellyfin_music_bot.utils.reply import truncate

if TYPE_CHECKING:
    from ....config.container import Container
    from ....domain.music.entities import Playlist

logger = logging.getLogger(__name__)

MAX_SELECT_OPTIONS = 25
_OPTION_LABEL_LIMIT = 100


class PlaylistSelect(discord.ui.Select["PlaylistSelectView"]):
    def __init__(self, playlists: Sequence[Playlist]) -> None:
        options = [
            discord.SelectOption(label=truncate(p.name, _OPTION_LABEL_LIMIT), value=p.id)
            for p in playlists[:MAX_SELECT_OPTIONS]
        ]
        super().__init__(
            placeholder=DiscordUIMessages.PLAYLIST_SELECT_PLACEHOLDER,
            min_values=1,
            max_values=1,
            options=options,
            custom_id="playlist_select",
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        assert self.view is not None
        await self.view.start_playlist(interaction, self.values[0])


class PlaylistSelectView(BaseInteractiveView):
    """Connects to the member's channel and starts the chosen playlist."""

    _background: ClassVar[set[asyncio.Task[None]]] = set()

    def __init__(
        self,
        *,
        playlists: Sequence[Playlist],
        container: Container,
        timeout: float = 120.0,
    ) -> None:
        super().__init__(timeout=timeout)
        self.container = container
        self._names = {p.id: p.name for p in playlists}
        self.add_item(PlaylistSelect(playlists))

    async def start_playlist(self, interaction: discord.Interaction, playlist_id: str) -> None:
        await interaction.response.defer()

        channel = await get_voice_channel(interaction)
        if channel is None:
            return
        assert interaction.guild is not None
        guild_id = interaction.guild.id

        connection = await self.container.connection_manager.ensure_connection(
            guild_id, channel.id, interaction.guild
        )
        if connection is None:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
            return

        playback = self.container.playback_manager
        try:
            playback.set_playlist(guild_id, playlist_id)
            # Notices go to the voice channel's built-in text chat
            playback.set_output_channel(guild_id, channel)

            self.stop()
            await interaction.edit_original_response(
                content=DiscordUIMessages.PLAYLIST_STARTED.format(
                    playlist_name=self._names.get(playlist_id, "Unknown")
                ),
                view=None,
            )
        except Exception:
            logger.exception(LogTemplates.COMMAND_START_PLAYBACK_FAILED, playlist_id, guild_id)
            try:
                await send_ephemeral(interaction, DiscordUIMessages.ERROR_START_PLAYBACK)
            except discord.HTTPException:
                logger.debug(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)
            return

        # The reply is already sent; the loop runs on its own from here
        self._spawn(guild_id)

    def _spawn(self, guild_id: int) -> None:
        task = asyncio.create_task(
            self.container.playback_manager.start(guild_id), name=f"playback-start-{guild_id}"
        )
        self._background.add(task)

        def _done(finished: asyncio.Task[None]) -> None:
            self._background.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    LogTemplates.COMMAND_BACKGROUND_START_FAILED,
                    guild_id,
                    exc_info=finished.exception(),
                )

        task.add_done_callback(_done)

    async def on_timeout(self) -> None:
        await self.expire(DiscordUIMessages.PLAYLIST_SELECT_EXPIRED)
