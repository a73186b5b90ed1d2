"""FastAPI dependency wiring for objects built during application startup.

The TMDb client and the metadata/genre/discover caches live on ``app.state``
for the lifetime of the process (see :func:`recosphere.main.lifespan`). These
accessors hand them to routers so tests can swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Request

from recosphere.services.discover_service import DiscoverService
from recosphere.services.metadata import GenreCache, MetadataFetcher


def get_metadata_fetcher(request: Request) -> MetadataFetcher:
    return request.app.state.metadata_fetcher


def get_genre_cache(request: Request) -> GenreCache:
    return request.app.state.genre_cache


def get_discover_service(request: Request) -> DiscoverService:
    return request.app.state.discover_service


__all__ = ["get_discover_service", "get_genre_cache", "get_metadata_fetcher"]
