"""Slash commands for choosing a playlist and controlling the radio."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from jellyfin_music_bot.domain.shared.exceptions import CatalogError
from jellyfin_music_bot.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from jellyfin_music_bot.infrastructure.discord.guards.voice_guards import (
    get_voice_channel,
    send_ephemeral,
)
from jellyfin_music_bot.infrastructure.discord.views.playlist_select_view import (
    PlaylistSelectView,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

_MESSAGE_LIMIT = 2000


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    # ─────────────────────────────────────────────────────────────────
    # Playlist Selection
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Pick a playlist and start random playback.")
    @app_commands.guild_only()
    async def play(self, interaction: discord.Interaction) -> None:
        if await get_voice_channel(interaction) is None:
            return

        await interaction.response.defer()
        try:
            playlists = await self.container.catalog_client.list_playlists()
        except CatalogError:
            logger.exception(LogTemplates.COMMAND_FETCH_PLAYLISTS_FAILED, interaction.guild_id)
            await interaction.followup.send(DiscordUIMessages.ERROR_FETCH_PLAYLISTS)
            return

        if not playlists:
            await interaction.followup.send(DiscordUIMessages.STATE_NO_PLAYLISTS)
            return

        view = PlaylistSelectView(playlists=playlists, container=self.container)
        message = await interaction.followup.send(
            DiscordUIMessages.PLAYLIST_SELECT_PROMPT, view=view, wait=True
        )
        view.set_message(message)

    @app_commands.command(name="playlists", description="List the available playlists.")
    async def playlists(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            playlists = await self.container.catalog_client.list_playlists()
        except CatalogError:
            logger.exception(LogTemplates.COMMAND_FETCH_PLAYLISTS_FAILED, interaction.guild_id)
            await interaction.followup.send(DiscordUIMessages.ERROR_FETCH_PLAYLISTS)
            return

        if not playlists:
            await interaction.followup.send(DiscordUIMessages.STATE_NO_PLAYLISTS)
            return

        lines = [DiscordUIMessages.PLAYLISTS_HEADER]
        lines.extend(
            DiscordUIMessages.PLAYLISTS_LINE.format(index=i, name=p.name, playlist_id=p.id)
            for i, p in enumerate(playlists, start=1)
        )
        content = "\n".join(lines)
        if len(content) > _MESSAGE_LIMIT:
            content = content[: _MESSAGE_LIMIT - 1] + "…"
        await interaction.followup.send(content)

    # ─────────────────────────────────────────────────────────────────
    # Playback Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip to another random track.")
    @app_commands.guild_only()
    async def skip(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None

        if self.container.playback_manager.skip(interaction.guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_SKIPPED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)

    @app_commands.command(name="stop", description="Stop playback after clearing the playlist.")
    @app_commands.guild_only()
    async def stop(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None

        if self.container.playback_manager.stop(interaction.guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)

    @app_commands.command(name="pause", description="Pause the current track.")
    @app_commands.guild_only()
    async def pause(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None

        if self.container.playback_manager.pause(interaction.guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_PAUSED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)

    @app_commands.command(name="resume", description="Resume paused playback.")
    @app_commands.guild_only()
    async def resume(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None

        if self.container.playback_manager.resume(interaction.guild_id):
            await interaction.response.send_message(DiscordUIMessages.ACTION_RESUMED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PAUSED)

    @app_commands.command(name="nowplaying", description="Show the current track.")
    @app_commands.guild_only()
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None

        item = self.container.playback_manager.get_current_song(interaction.guild_id)
        if item is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        await interaction.response.defer()
        embed, artwork = await self.container.notifier.render(item)
        if artwork is not None:
            await interaction.followup.send(embed=embed, file=artwork)
        else:
            await interaction.followup.send(embed=embed)

    # ─────────────────────────────────────────────────────────────────
    # Leave
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="leave", description="Disconnect from the voice channel.")
    @app_commands.guild_only()
    async def leave(self, interaction: discord.Interaction) -> None:
        assert interaction.guild_id is not None
        guild_id = interaction.guild_id

        if not self.container.connection_manager.disconnect(guild_id):
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE)
            return

        self.container.playback_manager.cleanup(guild_id)
        await interaction.response.send_message(DiscordUIMessages.ACTION_DISCONNECTED)

    # ─────────────────────────────────────────────────────────────────
    # Voice State
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        self.container.voice_transport.handle_voice_state_update(member, before, after)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
