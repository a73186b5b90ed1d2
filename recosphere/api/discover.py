"""Popular and trending listings proxied from TMDb with a one hour cache."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from recosphere.db.models import MediaType
from recosphere.schemas.discover import DiscoverPage
from recosphere.services.dependencies import get_discover_service
from recosphere.services.discover_service import DiscoverService

router = APIRouter()


@router.get("/popular/movies", response_model=DiscoverPage)
async def popular_movies(
    service: DiscoverService = Depends(get_discover_service),
) -> DiscoverPage:
    return DiscoverPage(**await service.popular(MediaType.MOVIE))


@router.get("/popular/tv", response_model=DiscoverPage)
async def popular_tv(
    service: DiscoverService = Depends(get_discover_service),
) -> DiscoverPage:
    return DiscoverPage(**await service.popular(MediaType.TV))


@router.get("/trending", response_model=DiscoverPage)
async def trending(
    service: DiscoverService = Depends(get_discover_service),
) -> DiscoverPage:
    """Return today's trending movies, shows and people."""

    return DiscoverPage(**await service.trending())
