"""Base class for interactive Discord views with common patterns."""

from __future__ import annotations

import logging

import discord

from jellyfin_music_bot.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class BaseInteractiveView(discord.ui.View):
    """Base view that tracks the message it is attached to.

    Persistent views pass ``timeout=None``; short-lived prompts call
    :meth:`expire` from ``on_timeout``.
    """

    def __init__(self, *, timeout: float | None = 180.0) -> None:
        super().__init__(timeout=timeout)
        self._message: discord.Message | None = None

    def set_message(self, message: discord.Message) -> None:
        self._message = message

    def _disable_components(self) -> None:
        for item in self.children:
            if isinstance(item, discord.ui.Button | discord.ui.Select):
                item.disabled = True

    async def expire(self, content: str) -> None:
        """Grey out every component and replace the prompt text."""
        self._disable_components()
        if self._message is None:
            return
        try:
            await self._message.edit(content=content, view=self)
        except discord.HTTPException:
            logger.debug(LogTemplates.VIEW_EDIT_FAILED)
