"""Builds and posts now-playing embeds with album artwork and transport controls."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import discord
import httpx

from jellyfin_music_bot.application.interfaces.notifier import NowPlayingNotifier
from jellyfin_music_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from jellyfin_music_bot.utils.reply import truncate

if TYPE_CHECKING:
    from ....domain.music.entities import MediaItem

logger = logging.getLogger(__name__)

AUDIO_COLOR = 0x00AE86
VIDEO_COLOR = 0x9B59B6
_FIELD_VALUE_LIMIT = 1024
ARTWORK_TIMEOUT_S = 10.0


class DiscordNowPlayingNotifier(NowPlayingNotifier):
    """Posts one silent notice per track to the guild's output channel.

    A notice that cannot be sent is logged and dropped; it never fails the
    track it announces.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        view_factory: Callable[[], discord.ui.View] | None = None,
    ) -> None:
        self._http = http_client
        self._view_factory = view_factory

    @staticmethod
    def build_now_playing_embed(item: MediaItem) -> discord.Embed:
        embed = discord.Embed(
            title=truncate(item.name, 256),
            color=VIDEO_COLOR if item.is_video else AUDIO_COLOR,
            timestamp=datetime.now(UTC),
        )
        embed.add_field(
            name=DiscordUIMessages.EMBED_FIELD_ARTIST,
            value=truncate(item.artist, _FIELD_VALUE_LIMIT),
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.EMBED_FIELD_ALBUM,
            value=truncate(item.album, _FIELD_VALUE_LIMIT),
            inline=True,
        )

        if item.duration_seconds:
            embed.add_field(
                name=DiscordUIMessages.EMBED_FIELD_DURATION,
                value=item.duration_formatted,
                inline=True,
            )
        if item.disc_number:
            embed.add_field(
                name=DiscordUIMessages.EMBED_FIELD_DISC, value=str(item.disc_number), inline=True
            )
        if item.index_number:
            embed.add_field(
                name=DiscordUIMessages.EMBED_FIELD_TRACK, value=str(item.index_number), inline=True
            )
        if item.year:
            embed.add_field(
                name=DiscordUIMessages.EMBED_FIELD_YEAR, value=str(item.year), inline=True
            )

        return embed

    async def fetch_artwork(self, item: MediaItem) -> discord.File | None:
        if not item.image_url:
            return None

        try:
            response = await self._http.get(item.image_url, timeout=ARTWORK_TIMEOUT_S)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(LogTemplates.NOTIFIER_ARTWORK_FAILED, item.image_url, exc)
            return None

        return discord.File(
            io.BytesIO(response.content), filename=DiscordUIMessages.EMBED_ARTWORK_FILENAME
        )

    async def render(self, item: MediaItem) -> tuple[discord.Embed, discord.File | None]:
        """Embed plus its artwork attachment, if the artwork could be fetched."""
        embed = self.build_now_playing_embed(item)
        artwork = await self.fetch_artwork(item)
        if artwork is not None:
            embed.set_thumbnail(url=f"attachment://{DiscordUIMessages.EMBED_ARTWORK_FILENAME}")
        return embed, artwork

    async def announce(self, channel: Any, item: MediaItem) -> None:
        embed, artwork = await self.render(item)

        kwargs: dict[str, Any] = {"embed": embed, "silent": True}
        if artwork is not None:
            kwargs["file"] = artwork
        if self._view_factory is not None:
            kwargs["view"] = self._view_factory()

        try:
            await channel.send(**kwargs)
        except discord.HTTPException as exc:
            logger.warning(LogTemplates.NOTIFIER_SEND_FAILED, item.name, exc)
