"""SQLAlchemy ORM model for a user's saved movies and TV shows.

A row only stores the TMDb reference; titles, posters and genres are looked up
at read time so the table never holds stale display metadata.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


def utcnow():
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class MediaType(str, enum.Enum):
    """Content kinds understood by the TMDb detail and genre endpoints."""

    MOVIE = "movie"
    TV = "tv"


class Favorite(Base):
    """A single movie or TV show saved by one user."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "external_id",
            name="uq_favorites_user_external",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(128),
        index=True,
        nullable=False,
        doc=(
            "Opaque identifier for the owning user, forwarded by the auth layer"
            " in front of the API."
        ),
    )
    external_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="TMDb identifier of the movie or show, stored as text.",
    )
    media_type: Mapped[MediaType] = mapped_column(
        Enum(
            MediaType,
            name="favorite_media_type",
            values_callable=lambda members: [member.value for member in members],
            native_enum=False,
            length=8,
        ),
        nullable=False,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    def __repr__(self) -> str:
        return (
            f"Favorite(id={self.id!r}, user_id={self.user_id!r}, "
            f"external_id={self.external_id!r}, media_type={self.media_type!r})"
        )
