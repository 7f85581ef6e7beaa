"""Unit Tests for voice guard helpers (send_ephemeral, get_member, get_voice_channel)."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from jellyfin_music_bot.domain.shared.messages import DiscordUIMessages
from jellyfin_music_bot.infrastructure.discord.guards import (
    get_member,
    get_voice_channel,
    send_ephemeral,
)


@pytest.fixture
def interaction():
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.guild = MagicMock()

    member = MagicMock(spec=discord.Member)
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    interaction.user = member
    return interaction


class TestSendEphemeral:
    @pytest.mark.asyncio
    async def test_fresh_interaction_uses_response(self, interaction):
        await send_ephemeral(interaction, "hello")

        interaction.response.send_message.assert_awaited_once_with("hello", ephemeral=True)
        interaction.followup.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_responded_interaction_uses_followup(self, interaction):
        interaction.response.is_done.return_value = True

        await send_ephemeral(interaction, "hello")

        interaction.followup.send.assert_awaited_once_with("hello", ephemeral=True)


class TestGetMember:
    @pytest.mark.asyncio
    async def test_returns_member(self, interaction):
        assert await get_member(interaction) is interaction.user

    @pytest.mark.asyncio
    async def test_outside_guild(self, interaction):
        interaction.guild = None

        assert await get_member(interaction) is None
        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_SERVER_ONLY, ephemeral=True
        )

    @pytest.mark.asyncio
    async def test_non_member_user(self, interaction):
        interaction.user = MagicMock(spec=discord.User)

        assert await get_member(interaction) is None
        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_VERIFY_VOICE_FAILED, ephemeral=True
        )


class TestGetVoiceChannel:
    @pytest.mark.asyncio
    async def test_returns_channel(self, interaction):
        assert await get_voice_channel(interaction) is interaction.user.voice.channel

    @pytest.mark.asyncio
    @pytest.mark.parametrize("voice", [None, MagicMock(channel=None)])
    async def test_not_in_voice(self, interaction, voice):
        interaction.user.voice = voice

        assert await get_voice_channel(interaction) is None
        interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE, ephemeral=True
        )
