"""Process-wide genre id to name lookups."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from recosphere.db.models import MediaType
from recosphere.services.tmdb_client import ProviderUnavailable, TMDbClient

logger = logging.getLogger(__name__)

UNKNOWN_GENRE = "Unknown"


def _to_mapping(genres: list[dict[str, Any]]) -> dict[int, str]:
    mapping: dict[int, str] = {}
    for genre in genres:
        genre_id = genre.get("id")
        name = genre.get("name")
        if isinstance(genre_id, int) and isinstance(name, str):
            mapping[genre_id] = name
    return mapping


class GenreCache:
    """Genre maps for movies and TV, populated once by :meth:`initialize`.

    The maps are never refreshed afterwards. If loading fails both maps stay
    empty and every lookup answers ``"Unknown"``.
    """

    def __init__(self) -> None:
        self._maps: dict[MediaType, dict[int, str]] = {
            MediaType.MOVIE: {},
            MediaType.TV: {},
        }
        self._lock = asyncio.Lock()
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self, client: TMDbClient) -> None:
        """Fetch both genre lists concurrently and store them."""

        try:
            movie_genres, tv_genres = await asyncio.gather(
                client.fetch_genres(MediaType.MOVIE),
                client.fetch_genres(MediaType.TV),
            )
        except ProviderUnavailable as exc:
            logger.warning("Error fetching genres: %s", exc)
            maps: dict[MediaType, dict[int, str]] = {
                MediaType.MOVIE: {},
                MediaType.TV: {},
            }
        else:
            maps = {
                MediaType.MOVIE: _to_mapping(movie_genres),
                MediaType.TV: _to_mapping(tv_genres),
            }
            logger.info(
                "Loaded %d movie and %d TV genres",
                len(maps[MediaType.MOVIE]),
                len(maps[MediaType.TV]),
            )

        async with self._lock:
            self._maps = maps
            self._ready = True

    def name_for(self, media_type: MediaType, genre_id: int) -> str:
        return self._maps[MediaType(media_type)].get(genre_id, UNKNOWN_GENRE)

    def names_for(self, media_type: MediaType, genre_ids: Iterable[int]) -> list[str]:
        return [self.name_for(media_type, genre_id) for genre_id in genre_ids]

    def as_list(self, media_type: MediaType) -> list[dict[str, Any]]:
        mapping = self._maps[MediaType(media_type)]
        return [{"id": genre_id, "name": name} for genre_id, name in mapping.items()]
