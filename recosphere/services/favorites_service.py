"""Business logic powering the favorites API endpoints.

Persistence-oriented operations delegated to :class:`FavoritesPersistence`:
* ``list_for_user`` – the caller's favorites in insertion order.
* ``exists``/``create`` – duplicate detection and insertion.
* ``delete_owned``/``update_owned`` – single-statement, ownership-scoped mutations.

Metadata lookups go through :class:`MetadataFetcher` and are turned into the
read model by :class:`FavoritesEnricher`. Enrichment is best-effort: a
provider outage yields placeholder titles, never a failed request.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recosphere.db.connection import get_db
from recosphere.db.models import Favorite, MediaType
from recosphere.errors import DuplicateError, NotFoundError
from recosphere.schemas.favorites import EnrichedFavorite, FavoriteUpdate
from recosphere.services.dependencies import get_genre_cache, get_metadata_fetcher
from recosphere.services.favorites import FavoritesEnricher, FavoritesPersistence
from recosphere.services.metadata import GenreCache, MetadataFetcher

logger = logging.getLogger(__name__)


class FavoritesService:
    """Orchestrates persistence and metadata enrichment."""

    def __init__(
        self,
        *,
        persistence: FavoritesPersistence,
        fetcher: MetadataFetcher,
        enricher: FavoritesEnricher,
    ) -> None:
        self._persistence = persistence
        self._fetcher = fetcher
        self._enricher = enricher

    async def list_favorites(self, *, user_id: str) -> list[EnrichedFavorite]:
        favorites = await self._persistence.list_for_user(user_id)
        # gather preserves argument order, so output order matches storage order.
        return list(await asyncio.gather(*(self._enrich(item) for item in favorites)))

    async def add_favorite(
        self, *, user_id: str, external_id: str, media_type: MediaType
    ) -> EnrichedFavorite:
        if await self._persistence.exists(user_id, external_id):
            raise DuplicateError(user_id, external_id)

        favorite = await self._persistence.create(user_id, external_id, media_type)
        logger.info(
            "User %s added %s %s as favorite %s",
            user_id,
            favorite.media_type.value,
            external_id,
            favorite.id,
        )
        return await self._enrich(favorite)

    async def remove_favorite(self, *, user_id: str, favorite_id: int) -> None:
        if not await self._persistence.delete_owned(user_id, favorite_id):
            raise NotFoundError(favorite_id)
        logger.info("User %s removed favorite %s", user_id, favorite_id)

    async def update_favorite(
        self, *, user_id: str, favorite_id: int, patch: FavoriteUpdate
    ) -> EnrichedFavorite:
        favorite = await self._persistence.update_owned(
            user_id, favorite_id, patch.changes()
        )
        if favorite is None:
            raise NotFoundError(favorite_id)
        return await self._enrich(favorite)

    async def _enrich(self, favorite: Favorite) -> EnrichedFavorite:
        result = await self._fetcher.get_metadata(favorite.media_type, favorite.external_id)
        return self._enricher.enrich(favorite, result)


async def get_favorites_service(
    session: AsyncSession = Depends(get_db),
    fetcher: MetadataFetcher = Depends(get_metadata_fetcher),
    genres: GenreCache = Depends(get_genre_cache),
) -> FavoritesService:
    """FastAPI dependency that wires the orchestrator together."""

    return FavoritesService(
        persistence=FavoritesPersistence(session),
        fetcher=fetcher,
        enricher=FavoritesEnricher(genres),
    )
