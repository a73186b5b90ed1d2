"""Caching proxies for TMDb popular and trending listings.

Each listing is memoized under one key for the configured TTL. Unlike the
favorites workflow, provider failures are not absorbed here: there is nothing
to fall back to, so :class:`ProviderUnavailable` reaches the HTTP layer.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from recosphere.cache import TTLCache, discover_key
from recosphere.db.models import MediaType
from recosphere.services.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


class DiscoverService:
    def __init__(self, client: TMDbClient, cache: TTLCache) -> None:
        self._client = client
        self._cache = cache

    async def _memoized(
        self, key: str, loader: Callable[[], Awaitable[dict[str, Any]]]
    ) -> dict[str, Any]:
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        payload = await loader()
        await self._cache.set(key, payload)
        logger.debug("Cached %s for %.0fs", key, self._cache.ttl_seconds)
        return payload

    async def popular(self, media_type: MediaType) -> dict[str, Any]:
        media_type = MediaType(media_type)
        return await self._memoized(
            discover_key(f"popular:{media_type.value}"),
            lambda: self._client.fetch_popular(media_type),
        )

    async def trending(self) -> dict[str, Any]:
        return await self._memoized(
            discover_key("trending:all:day"),
            lambda: self._client.fetch_trending("day"),
        )


__all__ = ["DiscoverService"]
