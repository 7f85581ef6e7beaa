"""
Unit Tests for MusicCog

Tests for all slash commands:
- /play, /playlists, /skip, /stop, /pause, /resume, /nowplaying, /leave
- Voice-channel checks and catalog failures
- Voice state forwarding and cog setup

Uses pytest with async/await patterns and Discord interaction mocking.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from conftest import make_item

from jellyfin_music_bot.domain.music.entities import Playlist
from jellyfin_music_bot.domain.shared.exceptions import CatalogError
from jellyfin_music_bot.domain.shared.messages import DiscordUIMessages
from jellyfin_music_bot.infrastructure.discord.cogs.music_cog import MusicCog, setup
from jellyfin_music_bot.infrastructure.discord.views.playlist_select_view import (
    PlaylistSelectView,
)

GUILD_ID = 111111111

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.add_cog = AsyncMock()
    return bot


@pytest.fixture
def mock_container():
    """Create a mock DI container."""
    container = MagicMock()

    container.catalog_client = MagicMock()
    container.catalog_client.list_playlists = AsyncMock(
        return_value=[Playlist(id="p1", name="Road Trip"), Playlist(id="p2", name="Chill")]
    )

    # Playback manager controls are synchronous
    container.playback_manager = MagicMock()
    container.playback_manager.start = AsyncMock()

    container.connection_manager = MagicMock()
    container.notifier = MagicMock()
    container.notifier.render = AsyncMock()
    container.voice_transport = MagicMock()
    return container


@pytest.fixture
def mock_interaction():
    """Create a mock Discord Interaction."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock(return_value=MagicMock(id=123456))

    interaction.guild = MagicMock()
    interaction.guild.id = GUILD_ID
    interaction.guild_id = GUILD_ID

    member = MagicMock(spec=discord.Member)
    member.id = 333333333
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    member.voice.channel.id = 444444444
    interaction.user = member

    return interaction


@pytest.fixture
def cog(mock_bot, mock_container):
    return MusicCog(mock_bot, mock_container)


# =============================================================================
# /play
# =============================================================================


class TestPlayCommand:
    @pytest.mark.asyncio
    async def test_requires_voice_channel(self, cog, mock_container, mock_interaction):
        mock_interaction.user.voice = None

        await cog.play.callback(cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE, ephemeral=True
        )
        mock_container.catalog_client.list_playlists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sends_playlist_picker(self, cog, mock_interaction):
        message = MagicMock()
        mock_interaction.followup.send = AsyncMock(return_value=message)

        await cog.play.callback(cog, mock_interaction)

        mock_interaction.response.defer.assert_awaited_once()
        args, kwargs = mock_interaction.followup.send.call_args
        assert args == (DiscordUIMessages.PLAYLIST_SELECT_PROMPT,)
        assert kwargs["wait"] is True
        view = kwargs["view"]
        assert isinstance(view, PlaylistSelectView)
        assert view._message is message
        select = view.children[0]
        assert [o.value for o in select.options] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_catalog_error(self, cog, mock_container, mock_interaction):
        mock_container.catalog_client.list_playlists.side_effect = CatalogError("list_playlists")

        await cog.play.callback(cog, mock_interaction)

        mock_interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ERROR_FETCH_PLAYLISTS
        )

    @pytest.mark.asyncio
    async def test_no_playlists(self, cog, mock_container, mock_interaction):
        mock_container.catalog_client.list_playlists.return_value = []

        await cog.play.callback(cog, mock_interaction)

        mock_interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.STATE_NO_PLAYLISTS
        )


# =============================================================================
# /playlists
# =============================================================================


class TestPlaylistsCommand:
    @pytest.mark.asyncio
    async def test_lists_playlists_numbered(self, cog, mock_interaction):
        await cog.playlists.callback(cog, mock_interaction)

        content = mock_interaction.followup.send.call_args.args[0]
        lines = content.split("\n")
        assert lines[0] == DiscordUIMessages.PLAYLISTS_HEADER
        assert lines[1] == "1. **Road Trip** (ID: p1)"
        assert lines[2] == "2. **Chill** (ID: p2)"

    @pytest.mark.asyncio
    async def test_long_listing_is_truncated(self, cog, mock_container, mock_interaction):
        mock_container.catalog_client.list_playlists.return_value = [
            Playlist(id=f"id-{i}", name="x" * 80) for i in range(50)
        ]

        await cog.playlists.callback(cog, mock_interaction)

        content = mock_interaction.followup.send.call_args.args[0]
        assert len(content) == 2000
        assert content.endswith("…")

    @pytest.mark.asyncio
    async def test_catalog_error(self, cog, mock_container, mock_interaction):
        mock_container.catalog_client.list_playlists.side_effect = CatalogError("list_playlists")

        await cog.playlists.callback(cog, mock_interaction)

        mock_interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.ERROR_FETCH_PLAYLISTS
        )

    @pytest.mark.asyncio
    async def test_no_playlists(self, cog, mock_container, mock_interaction):
        mock_container.catalog_client.list_playlists.return_value = []

        await cog.playlists.callback(cog, mock_interaction)

        mock_interaction.followup.send.assert_awaited_once_with(
            DiscordUIMessages.STATE_NO_PLAYLISTS
        )


# =============================================================================
# Playback controls
# =============================================================================


class TestControlCommands:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command,method,message",
        [
            ("skip", "skip", DiscordUIMessages.ACTION_SKIPPED),
            ("stop", "stop", DiscordUIMessages.ACTION_STOPPED),
            ("pause", "pause", DiscordUIMessages.ACTION_PAUSED),
            ("resume", "resume", DiscordUIMessages.ACTION_RESUMED),
        ],
    )
    async def test_success(self, cog, mock_container, mock_interaction, command, method, message):
        getattr(mock_container.playback_manager, method).return_value = True

        await getattr(cog, command).callback(cog, mock_interaction)

        getattr(mock_container.playback_manager, method).assert_called_once_with(GUILD_ID)
        mock_interaction.response.send_message.assert_awaited_once_with(message)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "command,message",
        [
            ("skip", DiscordUIMessages.STATE_NOTHING_PLAYING),
            ("stop", DiscordUIMessages.STATE_NOTHING_PLAYING),
            ("pause", DiscordUIMessages.STATE_NOTHING_PLAYING),
            ("resume", DiscordUIMessages.STATE_NOTHING_PAUSED),
        ],
    )
    async def test_nothing_to_control(self, cog, mock_container, mock_interaction, command, message):
        getattr(mock_container.playback_manager, command).return_value = False

        await getattr(cog, command).callback(cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(message, ephemeral=True)


# =============================================================================
# /nowplaying
# =============================================================================


class TestNowPlayingCommand:
    @pytest.mark.asyncio
    async def test_nothing_playing(self, cog, mock_container, mock_interaction):
        mock_container.playback_manager.get_current_song.return_value = None

        await cog.nowplaying.callback(cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NOTHING_PLAYING, ephemeral=True
        )
        mock_container.notifier.render.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sends_embed_with_artwork(self, cog, mock_container, mock_interaction):
        item = make_item("a", "Song A")
        embed, artwork = discord.Embed(title="Song A"), MagicMock(spec=discord.File)
        mock_container.playback_manager.get_current_song.return_value = item
        mock_container.notifier.render.return_value = (embed, artwork)

        await cog.nowplaying.callback(cog, mock_interaction)

        mock_container.notifier.render.assert_awaited_once_with(item)
        mock_interaction.followup.send.assert_awaited_once_with(embed=embed, file=artwork)

    @pytest.mark.asyncio
    async def test_sends_embed_without_artwork(self, cog, mock_container, mock_interaction):
        embed = discord.Embed(title="Song A")
        mock_container.playback_manager.get_current_song.return_value = make_item("a")
        mock_container.notifier.render.return_value = (embed, None)

        await cog.nowplaying.callback(cog, mock_interaction)

        mock_interaction.followup.send.assert_awaited_once_with(embed=embed)


# =============================================================================
# /leave and listeners
# =============================================================================


class TestLeaveCommand:
    @pytest.mark.asyncio
    async def test_not_connected(self, cog, mock_container, mock_interaction):
        mock_container.connection_manager.disconnect.return_value = False

        await cog.leave.callback(cog, mock_interaction)

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NOT_CONNECTED_TO_VOICE, ephemeral=True
        )
        mock_container.playback_manager.cleanup.assert_not_called()

    @pytest.mark.asyncio
    async def test_disconnects_and_cleans_up(self, cog, mock_container, mock_interaction):
        mock_container.connection_manager.disconnect.return_value = True

        await cog.leave.callback(cog, mock_interaction)

        mock_container.connection_manager.disconnect.assert_called_once_with(GUILD_ID)
        mock_container.playback_manager.cleanup.assert_called_once_with(GUILD_ID)
        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ACTION_DISCONNECTED
        )


class TestListenersAndSetup:
    @pytest.mark.asyncio
    async def test_voice_state_update_forwarded(self, cog, mock_container):
        member, before, after = MagicMock(), MagicMock(), MagicMock()

        await cog.on_voice_state_update(member, before, after)

        mock_container.voice_transport.handle_voice_state_update.assert_called_once_with(
            member, before, after
        )

    @pytest.mark.asyncio
    async def test_setup_requires_container(self):
        bot = MagicMock(spec=["add_cog"])

        with pytest.raises(RuntimeError):
            await setup(bot)

    @pytest.mark.asyncio
    async def test_setup_adds_cog(self, mock_bot, mock_container):
        mock_bot.container = mock_container

        await setup(mock_bot)

        mock_bot.add_cog.assert_awaited_once()
        assert isinstance(mock_bot.add_cog.call_args.args[0], MusicCog)
