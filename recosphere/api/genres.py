"""Genre lists served from the startup genre cache."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from recosphere.db.models import MediaType
from recosphere.schemas.discover import Genre, GenreListResponse
from recosphere.services.dependencies import get_genre_cache
from recosphere.services.metadata import GenreCache

router = APIRouter()


@router.get("", response_model=GenreListResponse)
async def list_genres(
    genres: GenreCache = Depends(get_genre_cache),
) -> GenreListResponse:
    return GenreListResponse(
        movie_genres=[Genre(**item) for item in genres.as_list(MediaType.MOVIE)],
        tv_genres=[Genre(**item) for item in genres.as_list(MediaType.TV)],
    )
