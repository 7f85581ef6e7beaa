"""Per-guild session records and the process-wide registry that owns them."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from jellyfin_music_bot.domain.music.value_objects import SessionPhase
from jellyfin_music_bot.domain.shared.exceptions import InvalidOperationError
from jellyfin_music_bot.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...application.interfaces.voice_transport import AudioPlayer, VoiceConnection
    from .entities import MediaItem


@dataclass(eq=False)
class GuildSession:
    """Mutable playback state for a single guild.

    Fields are cleared independently; the whole record is dropped from the
    registry when the guild's voice connection is torn down. A player is
    never kept without a connection.
    """

    guild_id: DiscordSnowflake
    connection: VoiceConnection | None = None
    player: AudioPlayer | None = None
    playlist_id: str | None = None
    current_item: MediaItem | None = None
    output_channel: Any | None = None
    phase: SessionPhase = SessionPhase.IDLE

    # Loop bookkeeping
    advance_task: asyncio.Task[None] | None = None
    pump_task: asyncio.Task[None] | None = None

    @property
    def has_playlist(self) -> bool:
        return self.playlist_id is not None

    @property
    def is_loading(self) -> bool:
        return self.phase == SessionPhase.LOADING

    @property
    def is_empty(self) -> bool:
        """True when nothing worth keeping is left on the record."""
        return (
            self.connection is None
            and self.player is None
            and self.playlist_id is None
            and self.current_item is None
            and self.output_channel is None
        )

    def transition_to(self, new_phase: SessionPhase) -> None:
        """Move to *new_phase*, rejecting transitions the phase table forbids."""
        if new_phase == self.phase:
            return
        if not self.phase.can_transition_to(new_phase):
            raise InvalidOperationError(
                operation=f"transition to {new_phase.value}",
                current_state=self.phase.value,
            )
        self.phase = new_phase

    def cancel_advance(self) -> None:
        if self.advance_task is not None and not self.advance_task.done():
            self.advance_task.cancel()
        self.advance_task = None


class GuildSessionRegistry:
    """The single mapping of guild id to :class:`GuildSession`."""

    def __init__(self) -> None:
        self._sessions: dict[DiscordSnowflake, GuildSession] = {}

    def get(self, guild_id: DiscordSnowflake) -> GuildSession | None:
        return self._sessions.get(guild_id)

    def get_or_create(self, guild_id: DiscordSnowflake) -> GuildSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = GuildSession(guild_id=guild_id)
            self._sessions[guild_id] = session
        return session

    def remove(self, guild_id: DiscordSnowflake) -> GuildSession | None:
        return self._sessions.pop(guild_id, None)

    def guild_ids(self) -> list[DiscordSnowflake]:
        return list(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[GuildSession]:
        return iter(list(self._sessions.values()))
