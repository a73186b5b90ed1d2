from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any

from redis.asyncio import Redis as RedisClient
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from recosphere.settings import get_settings

logger = logging.getLogger(__name__)

_DEFAULT_TTL_SECONDS = 3600
_METADATA_PREFIX = "tmdb:metadata"
_DISCOVER_PREFIX = "tmdb:discover"

_redis_client: RedisClient | None = None
_client_lock = asyncio.Lock()
_redis_disabled_until: float | None = None


class TTLCache:
    """In-process key/value store whose entries expire after a fixed TTL.

    Every read and write happens under an ``asyncio.Lock`` so concurrent
    request handlers never observe a half-applied eviction. ``clock`` is
    injectable to let tests advance time deterministically.
    """

    def __init__(
        self,
        ttl_seconds: float = _DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when missing or expired."""

        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, value = entry
            if expires_at <= self._clock():
                self._entries.pop(key, None)
                return None
            return value

    async def set(self, key: str, value: Any, *, ttl_seconds: float | None = None) -> None:
        """Store ``value``; ``ttl_seconds`` shortens the lifetime of this entry only."""

        ttl = self._ttl if ttl_seconds is None else min(float(ttl_seconds), self._ttl)
        async with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    async def evict(self, *keys: str) -> None:
        async with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def metadata_key(media_type: str, external_id: str) -> str:
    return f"{_METADATA_PREFIX}:{media_type}-{external_id}"


def discover_key(listing: str) -> str:
    return f"{_DISCOVER_PREFIX}:{listing}"


def _is_redis_connection_error(exc: BaseException) -> bool:
    return isinstance(exc, (RedisConnectionError, RedisTimeoutError, OSError))


async def get_redis() -> RedisClient | None:
    """Return the shared Redis client, or ``None`` while Redis is unavailable.

    A failed connection disables Redis for ``REDIS_RETRY_BACKOFF_SECONDS``;
    the next call after the cooldown tries again.
    """

    global _redis_client, _redis_disabled_until

    async with _client_lock:
        if _redis_client is not None:
            return _redis_client

        if _redis_disabled_until is not None and time.monotonic() < _redis_disabled_until:
            logger.debug("Redis connection in cooldown; skipping attempt.")
            return None

        active_settings = get_settings()
        client = RedisClient.from_url(
            active_settings.redis_url, decode_responses=True, encoding="utf-8"
        )
        try:
            await client.ping()
        except Exception as exc:
            if not _is_redis_connection_error(exc):
                raise
            logger.warning(
                "Redis connection failed: %s. Shared caching disabled for %.0fs.",
                exc,
                active_settings.redis_retry_backoff_seconds,
            )
            await client.aclose()
            _redis_disabled_until = (
                time.monotonic() + active_settings.redis_retry_backoff_seconds
            )
            return None

        _redis_client = client
        _redis_disabled_until = None
        logger.info("Redis connection established successfully")
        return _redis_client


class CacheClient:
    """JSON-encoding wrapper around Redis that degrades to a no-op.

    Connection failures are logged at debug level and treated as cache misses
    so the shared tier can never fail a request.
    """

    def __init__(self, redis: RedisClient | None) -> None:
        self._redis = redis

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def get_json(self, key: str) -> Any:
        if self._redis is None:
            return None
        try:
            payload = await self._redis.get(key)
        except Exception as exc:
            if _is_redis_connection_error(exc):
                logger.debug("Redis get failed for key %s: %s", key, exc)
                return None
            raise
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        encoded = json.dumps(value, default=str)
        try:
            await self._redis.set(key, encoded, ex=ttl or _DEFAULT_TTL_SECONDS)
        except Exception as exc:
            if _is_redis_connection_error(exc):
                logger.debug("Redis set failed for key %s: %s", key, exc)
                return
            raise

    async def remaining_ttl(self, key: str) -> float | None:
        """Seconds until ``key`` expires, or ``None`` when missing or persistent."""

        if self._redis is None:
            return None
        try:
            remaining_ms = await self._redis.pttl(key)
        except Exception as exc:
            if _is_redis_connection_error(exc):
                logger.debug("Redis pttl failed for key %s: %s", key, exc)
                return None
            raise
        if remaining_ms is None or remaining_ms < 0:
            return None
        return remaining_ms / 1000

    async def delete(self, *keys: str) -> None:
        if self._redis is None or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except Exception as exc:
            if _is_redis_connection_error(exc):
                logger.debug("Redis delete failed: %s", exc)
                return
            raise


async def get_cache_client() -> CacheClient:
    redis = await get_redis()
    return CacheClient(redis)


async def close_redis() -> None:
    """Close the global Redis connection gracefully."""

    global _redis_client, _redis_disabled_until
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    _redis_disabled_until = None


__all__ = [
    "CacheClient",
    "TTLCache",
    "close_redis",
    "discover_key",
    "get_cache_client",
    "get_redis",
    "metadata_key",
]
