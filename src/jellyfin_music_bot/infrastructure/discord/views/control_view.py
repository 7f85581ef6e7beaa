"""Persistent pause / resume / skip / stop buttons attached to now-playing notices."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import discord

from jellyfin_music_bot.domain.shared.messages import LogTemplates
from jellyfin_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView

if TYPE_CHECKING:
    from ....application.services.playback_service import PlaybackSessionManager

logger = logging.getLogger(__name__)


class PlaybackControlView(BaseInteractiveView):
    """Transport controls that survive restarts.

    The view never times out and every button carries a fixed ``custom_id``,
    so one instance registered with ``bot.add_view`` serves every notice the
    bot has ever posted. Presses are acknowledged without a reply.
    """

    def __init__(self, playback_manager: PlaybackSessionManager) -> None:
        super().__init__(timeout=None)
        self._playback = playback_manager

    async def _run_control(
        self,
        interaction: discord.Interaction,
        name: str,
        action: Callable[[int], bool],
    ) -> None:
        await interaction.response.defer()
        guild_id = interaction.guild_id
        if guild_id is None:
            return

        logger.debug(LogTemplates.CONTROL_BUTTON_PRESSED, name, guild_id)
        try:
            action(guild_id)
        except Exception:
            logger.exception(LogTemplates.CONTROL_BUTTON_FAILED, name, guild_id)

    @discord.ui.button(
        emoji="⏸", style=discord.ButtonStyle.secondary, custom_id="music_pause"
    )
    async def pause_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlView]
    ) -> None:
        await self._run_control(interaction, "pause", self._playback.pause)

    @discord.ui.button(
        emoji="▶", style=discord.ButtonStyle.secondary, custom_id="music_resume"
    )
    async def resume_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlView]
    ) -> None:
        await self._run_control(interaction, "resume", self._playback.resume)

    @discord.ui.button(
        emoji="⏭", style=discord.ButtonStyle.secondary, custom_id="music_skip"
    )
    async def skip_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlView]
    ) -> None:
        await self._run_control(interaction, "skip", self._playback.skip)

    @discord.ui.button(
        emoji="⏹", style=discord.ButtonStyle.secondary, custom_id="music_stop"
    )
    async def stop_button(
        self, interaction: discord.Interaction, button: discord.ui.Button[PlaybackControlView]
    ) -> None:
        await self._run_control(interaction, "stop", self._playback.stop)
