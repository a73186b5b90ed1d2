"""Cache-or-fetch lookups of TMDb detail payloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from recosphere.db.models import MediaType
from recosphere.services.tmdb_client import ProviderUnavailable, TMDbClient

from .cache import MetadataCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MetadataHit:
    """Provider payload, either fresh or served from the cache."""

    data: dict[str, Any]
    from_cache: bool = False
    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class MetadataMiss:
    """The provider could not be reached or answered with garbage."""

    reason: str
    ok: Literal[False] = field(default=False, init=False)


MetadataResult = MetadataHit | MetadataMiss


class MetadataFetcher:
    """Resolve ``(media_type, external_id)`` to provider metadata.

    Successful responses are cached for the cache's TTL. Failures are returned
    as :class:`MetadataMiss` and never cached, so the next call retries the
    provider immediately. This method never raises
    :class:`ProviderUnavailable`.
    """

    def __init__(self, client: TMDbClient, cache: MetadataCache) -> None:
        self._client = client
        self._cache = cache

    async def get_metadata(self, media_type: MediaType, external_id: str) -> MetadataResult:
        cached = await self._cache.get(media_type, external_id)
        if cached is not None:
            return MetadataHit(data=cached, from_cache=True)

        try:
            payload = await self._client.fetch_details(media_type, external_id)
        except ProviderUnavailable as exc:
            logger.warning(
                "Error fetching metadata for %s %s: %s",
                MediaType(media_type).value,
                external_id,
                exc.reason,
            )
            return MetadataMiss(reason=exc.reason)

        await self._cache.set(media_type, external_id, payload)
        return MetadataHit(data=payload)
