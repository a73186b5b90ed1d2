"""Startup warmup so the first request does not pay for cold connections.

Each step logs and swallows its own failure: a missing Redis or an unreachable
TMDb degrades the service but must not prevent it from starting.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from recosphere.db.connection import begin_engine_transaction
from recosphere.services.metadata import GenreCache
from recosphere.services.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


async def warmup_database(resolve_engine: Callable[[], AsyncEngine] | None = None) -> None:
    """Open a pooled connection and issue ``SELECT 1``."""
    try:
        if resolve_engine is None:
            from recosphere.db.connection import get_engine as resolve_engine

        start = time.time()
        engine = resolve_engine()
        async with begin_engine_transaction(engine) as conn:
            await conn.execute(text("SELECT 1"))

        elapsed = (time.time() - start) * 1000
        logger.info("✓ Database connection warmed up (%.0fms)", elapsed)
    except Exception as e:
        logger.warning("Database warmup failed: %s", e)


async def warmup_redis() -> None:
    """Establish the Redis connection; a miss leaves caching in-process only."""
    from recosphere.cache import get_redis

    try:
        start = time.time()
        redis = await get_redis()

        if redis is None:
            logger.info("⚠ Redis warmup skipped (connection unavailable)")
            return

        elapsed = (time.time() - start) * 1000
        logger.info("✓ Redis connection warmed up (%.0fms)", elapsed)
    except Exception as e:
        logger.warning("Redis warmup failed: %s", e)


async def warmup_genres(genres: GenreCache, client: TMDbClient) -> None:
    """Load the genre maps; :meth:`GenreCache.initialize` never raises."""
    start = time.time()
    await genres.initialize(client)
    elapsed = (time.time() - start) * 1000
    logger.info("✓ Genre cache initialized (%.0fms)", elapsed)


async def warmup_all(
    *,
    genres: GenreCache,
    client: TMDbClient,
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    logger.info("=" * 60)
    logger.info("Warming up backend connections...")
    logger.info("=" * 60)

    start = time.time()

    await warmup_database(resolve_engine=resolve_engine)
    await warmup_redis()
    await warmup_genres(genres, client)

    total_elapsed = (time.time() - start) * 1000
    logger.info("=" * 60)
    logger.info("✓ Backend warmup complete (%.0fms)", total_elapsed)
    logger.info("=" * 60)
