"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from recosphere.db.models import MediaType

UNKNOWN_TITLE = "Unknown"


def _clean_tags(value: list[str]) -> list[str]:
    cleaned = [token.strip() for token in value]
    if any(not token for token in cleaned):
        raise ValueError("Tags cannot be empty or whitespace-only")
    return cleaned


class FavoriteCreate(BaseModel):
    """Payload for saving a movie or TV show."""

    external_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[0-9]+$",
        description="Numeric TMDb identifier of the movie or show",
    )
    media_type: MediaType

    @field_validator("external_id", mode="before")
    @classmethod
    def _coerce_external_id(cls, value: object) -> object:
        # TMDb ids arrive as numbers from most clients.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class FavoriteUpdate(BaseModel):
    """Partial update payload; only fields that are sent get applied."""

    model_config = ConfigDict(extra="forbid")

    media_type: MediaType | None = None
    notes: str | None = Field(None, max_length=1024)
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return _clean_tags(value)

    def changes(self) -> dict[str, object]:
        """Return the explicitly supplied fields, dropping ``None`` where the column is required."""

        supplied = self.model_dump(exclude_unset=True)
        if supplied.get("media_type") is None:
            supplied.pop("media_type", None)
        if "tags" in supplied and supplied["tags"] is None:
            supplied["tags"] = []
        return supplied


class MediaMetadata(BaseModel):
    """Display fields resolved from the metadata provider."""

    title: str = UNKNOWN_TITLE
    poster_path: str | None = None
    genre_names: list[str] = Field(default_factory=list)


PLACEHOLDER_METADATA = MediaMetadata()


class EnrichedFavorite(MediaMetadata):
    """Read model returned by every favorites endpoint."""

    id: int
    user_id: str
    external_id: str
    media_type: MediaType
    added_at: datetime
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)


class FavoriteRemoved(BaseModel):
    message: str = "Favorite removed"


__all__ = [
    "EnrichedFavorite",
    "FavoriteCreate",
    "FavoriteRemoved",
    "FavoriteUpdate",
    "MediaMetadata",
    "PLACEHOLDER_METADATA",
    "UNKNOWN_TITLE",
]
