"""Pydantic models for Jellyfin REST payloads.

Only the fields the bot uses are declared; everything else the server sends
is ignored. Field names follow Jellyfin's PascalCase JSON through aliases.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

TICKS_PER_SECOND: Final[int] = 10_000_000
VIDEO_ITEM_TYPES: Final[frozenset[str]] = frozenset(
    {"Video", "Movie", "Episode", "MusicVideo", "Trailer"}
)


class _JellyfinModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class MediaStreamDto(_JellyfinModel):
    """One entry of an item's ``MediaStreams``."""

    type: str | None = Field(default=None, alias="Type")
    bit_rate: int | None = Field(default=None, alias="BitRate")
    sample_rate: int | None = Field(default=None, alias="SampleRate")
    channels: int | None = Field(default=None, alias="Channels")


class BaseItemDto(_JellyfinModel):
    """A library item as returned by ``/Items`` and ``/Playlists/{id}/Items``."""

    id: str = Field(alias="Id")
    name: str | None = Field(default=None, alias="Name")
    type: str | None = Field(default=None, alias="Type")
    media_type: str | None = Field(default=None, alias="MediaType")

    album: str | None = Field(default=None, alias="Album")
    album_id: str | None = Field(default=None, alias="AlbumId")
    album_artist: str | None = Field(default=None, alias="AlbumArtist")
    album_primary_image_tag: str | None = Field(default=None, alias="AlbumPrimaryImageTag")
    artists: list[str] = Field(default_factory=list, alias="Artists")
    genres: list[str] = Field(default_factory=list, alias="Genres")
    image_tags: dict[str, str] = Field(default_factory=dict, alias="ImageTags")

    run_time_ticks: int | None = Field(default=None, alias="RunTimeTicks")
    index_number: int | None = Field(default=None, alias="IndexNumber")
    parent_index_number: int | None = Field(default=None, alias="ParentIndexNumber")

    production_year: int | None = Field(default=None, alias="ProductionYear")
    premiere_date: str | None = Field(default=None, alias="PremiereDate")
    community_rating: float | None = Field(default=None, alias="CommunityRating")
    official_rating: str | None = Field(default=None, alias="OfficialRating")

    container: str | None = Field(default=None, alias="Container")
    media_streams: list[MediaStreamDto] = Field(default_factory=list, alias="MediaStreams")

    overview: str | None = Field(default=None, alias="Overview")
    sort_name: str | None = Field(default=None, alias="SortName")

    @field_validator("artists", "genres", "media_streams", mode="before")
    @classmethod
    def _coerce_null_list(cls, v: Any) -> Any:
        """Jellyfin sends ``null`` for empty collections on some versions."""
        return [] if v is None else v

    @field_validator("image_tags", mode="before")
    @classmethod
    def _coerce_null_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_video(self) -> bool:
        return self.type in VIDEO_ITEM_TYPES or self.media_type == "Video"

    @property
    def duration_seconds(self) -> int | None:
        if not self.run_time_ticks:
            return None
        return self.run_time_ticks // TICKS_PER_SECOND

    @property
    def audio_stream(self) -> MediaStreamDto | None:
        return next((s for s in self.media_streams if s.type == "Audio"), None)


class ItemsResponse(_JellyfinModel):
    """Envelope of Jellyfin list endpoints."""

    items: list[BaseItemDto] = Field(default_factory=list, alias="Items")
    total_record_count: int | None = Field(default=None, alias="TotalRecordCount")

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_null_items(cls, v: Any) -> Any:
        return [] if v is None else v
