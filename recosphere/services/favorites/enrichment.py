"""Conversion of stored favorites into enriched API payloads."""

from __future__ import annotations

from typing import Any

from recosphere.db.models import Favorite, MediaType
from recosphere.schemas.favorites import (
    PLACEHOLDER_METADATA,
    UNKNOWN_TITLE,
    EnrichedFavorite,
    MediaMetadata,
)
from recosphere.services.metadata import GenreCache, MetadataResult


class FavoritesEnricher:
    """Join a :class:`Favorite` row with the metadata resolved for it.

    Movies carry ``title`` while shows carry ``name``; detail payloads list
    ``genres`` as objects, while listing payloads only have ``genre_ids``,
    which are mapped through the :class:`GenreCache`.
    """

    def __init__(self, genres: GenreCache) -> None:
        self._genres = genres

    def metadata_from(self, media_type: MediaType, result: MetadataResult) -> MediaMetadata:
        if not result.ok:
            return PLACEHOLDER_METADATA

        data = result.data
        title = data.get("title") or data.get("name") or UNKNOWN_TITLE
        poster_path = data.get("poster_path")
        return MediaMetadata(
            title=str(title),
            poster_path=poster_path if isinstance(poster_path, str) else None,
            genre_names=self._genre_names(media_type, data),
        )

    def _genre_names(self, media_type: MediaType, data: dict[str, Any]) -> list[str]:
        genres = data.get("genres")
        if isinstance(genres, list):
            return [
                genre["name"]
                for genre in genres
                if isinstance(genre, dict) and isinstance(genre.get("name"), str)
            ]

        genre_ids = data.get("genre_ids")
        if isinstance(genre_ids, list):
            return self._genres.names_for(
                media_type, [genre_id for genre_id in genre_ids if isinstance(genre_id, int)]
            )
        return []

    def enrich(self, favorite: Favorite, result: MetadataResult) -> EnrichedFavorite:
        metadata = self.metadata_from(favorite.media_type, result)
        return EnrichedFavorite(
            id=favorite.id,
            user_id=favorite.user_id,
            external_id=favorite.external_id,
            media_type=favorite.media_type,
            added_at=favorite.added_at,
            notes=favorite.notes,
            tags=list(favorite.tags or []),
            title=metadata.title,
            poster_path=metadata.poster_path,
            genre_names=list(metadata.genre_names),
        )
