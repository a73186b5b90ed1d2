"""TTL cache for TMDb detail payloads."""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

from recosphere.cache import CacheClient, TTLCache, metadata_key
from recosphere.db.models import MediaType

logger = logging.getLogger(__name__)


class MetadataCache:
    """Two-tier store for provider detail responses.

    The in-process :class:`TTLCache` is authoritative for this worker; when a
    :class:`CacheClient` is supplied, entries are also written to Redis so
    other workers can reuse them. Expired and missing entries look the same
    to callers.

    An entry read back from Redis is kept locally only for the lifetime Redis
    has left on it, so no tier serves a payload older than the TTL. Any Redis
    failure degrades to a miss or a skipped write.
    """

    def __init__(self, local: TTLCache, client: CacheClient | None = None) -> None:
        self._local = local
        self._client = client

    @property
    def ttl_seconds(self) -> float:
        return self._local.ttl_seconds

    async def get(self, media_type: MediaType, external_id: str) -> dict[str, Any] | None:
        key = metadata_key(MediaType(media_type).value, external_id)
        cached = await self._local.get(key)
        if cached is not None:
            return cached
        if self._client is None:
            return None

        try:
            shared = await self._client.get_json(key)
            if not isinstance(shared, dict):
                return None
            remaining = await self._client.remaining_ttl(key)
        except RedisError as exc:
            logger.debug("Shared metadata read failed for %s: %s", key, exc)
            return None

        if remaining is None or remaining <= 0:
            # Expiry unknown: serve once without extending its lifetime here.
            return shared
        await self._local.set(key, shared, ttl_seconds=remaining)
        return shared

    async def set(
        self, media_type: MediaType, external_id: str, payload: dict[str, Any]
    ) -> None:
        key = metadata_key(MediaType(media_type).value, external_id)
        await self._local.set(key, payload)
        if self._client is None:
            return
        try:
            await self._client.set_json(key, payload, ttl=int(self._local.ttl_seconds))
        except RedisError as exc:
            logger.debug("Shared metadata write skipped for %s: %s", key, exc)
