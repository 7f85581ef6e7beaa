"""Catalog value objects for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from jellyfin_music_bot.domain.music.value_objects import MediaType
from jellyfin_music_bot.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
)


class Playlist(BaseModel):
    """A playlist as listed by the catalog."""

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    name: str
    type: str = "Playlist"


class MediaItem(BaseModel):
    """Immutable value object describing one playable catalog item."""

    model_config = ConfigDict(frozen=True)

    id: NonEmptyStr
    name: str
    artist: str
    album: str
    stream_url: HttpUrlStr
    image_url: HttpUrlStr | None = None
    media_type: MediaType = MediaType.AUDIO

    duration_seconds: DurationSeconds | None = None

    # Track position
    index_number: NonNegativeInt | None = None
    disc_number: NonNegativeInt | None = None

    # People and tags
    album_artist: str | None = None
    artists: tuple[str, ...] = Field(default_factory=tuple)
    composers: tuple[str, ...] = Field(default_factory=tuple)
    genres: tuple[str, ...] = Field(default_factory=tuple)

    # Release metadata
    year: int | None = None
    premiere_date: str | None = None
    community_rating: float | None = None
    official_rating: str | None = None

    # Technical fields (first audio stream)
    container: str | None = None
    bitrate: NonNegativeInt | None = None
    sample_rate: NonNegativeInt | None = None
    channels: NonNegativeInt | None = None

    overview: str | None = None
    sort_name: str | None = None

    @property
    def is_video(self) -> bool:
        return self.media_type == MediaType.VIDEO

    @property
    def duration_formatted(self) -> str:
        """Format duration as M:SS or H:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def track_label(self) -> str | None:
        """Human label such as "Disc 1 - Track 3", or None without a track number."""
        if not self.index_number:
            return None
        if self.disc_number:
            return f"Disc {self.disc_number} - Track {self.index_number}"
        return f"Track {self.index_number}"

    @property
    def bitrate_kbps(self) -> int | None:
        if not self.bitrate:
            return None
        return round(self.bitrate / 1000)
