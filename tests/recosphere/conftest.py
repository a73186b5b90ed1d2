"""Shared fixtures: an in-memory database, a scripted provider and the caches."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from recosphere.cache import TTLCache
from recosphere.db.models import Base
from recosphere.services.favorites import FavoritesEnricher, FavoritesPersistence
from recosphere.services.favorites_service import FavoritesService
from recosphere.services.metadata import GenreCache, MetadataCache, MetadataFetcher
from tests.recosphere.support.doubles import FakeClock, FakeTMDbClient


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session with freshly created tables."""
    pytest.importorskip("aiosqlite")
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> FakeTMDbClient:
    return FakeTMDbClient()


@pytest_asyncio.fixture
async def genre_cache(provider: FakeTMDbClient) -> GenreCache:
    genres = GenreCache()
    await genres.initialize(provider)
    return genres


@pytest.fixture
def metadata_cache(clock: FakeClock) -> MetadataCache:
    return MetadataCache(TTLCache(3600, clock=clock))


@pytest.fixture
def fetcher(provider: FakeTMDbClient, metadata_cache: MetadataCache) -> MetadataFetcher:
    return MetadataFetcher(provider, metadata_cache)


@pytest.fixture
def favorites_service(
    session: AsyncSession,
    fetcher: MetadataFetcher,
    genre_cache: GenreCache,
) -> FavoritesService:
    """Wire the service exactly like :func:`get_favorites_service` does."""

    return FavoritesService(
        persistence=FavoritesPersistence(session),
        fetcher=fetcher,
        enricher=FavoritesEnricher(genre_cache),
    )
