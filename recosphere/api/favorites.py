"""FastAPI router exposing CRUD operations for a user's favorites."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from recosphere.errors import DuplicateError, NotFoundError
from recosphere.schemas.favorites import (
    EnrichedFavorite,
    FavoriteCreate,
    FavoriteRemoved,
    FavoriteUpdate,
)
from recosphere.services.favorites_service import FavoritesService, get_favorites_service

router = APIRouter()

UserId = Annotated[
    str,
    Query(
        min_length=1,
        max_length=128,
        description="Identifier of the authenticated caller",
    ),
]


@router.get("", response_model=list[EnrichedFavorite])
async def list_favorites(
    user_id: UserId,
    service: FavoritesService = Depends(get_favorites_service),
) -> list[EnrichedFavorite]:
    """Return the caller's favorites with titles, posters and genres."""

    return await service.list_favorites(user_id=user_id)


@router.post(
    "",
    response_model=EnrichedFavorite,
    status_code=status.HTTP_201_CREATED,
)
async def add_favorite(
    payload: FavoriteCreate,
    user_id: UserId,
    service: FavoritesService = Depends(get_favorites_service),
) -> EnrichedFavorite:
    try:
        return await service.add_favorite(
            user_id=user_id,
            external_id=payload.external_id,
            media_type=payload.media_type,
        )
    except DuplicateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.delete("/{favorite_id}", response_model=FavoriteRemoved)
async def remove_favorite(
    favorite_id: int,
    user_id: UserId,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteRemoved:
    try:
        await service.remove_favorite(user_id=user_id, favorite_id=favorite_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FavoriteRemoved()


@router.api_route(
    "/{favorite_id}",
    methods=["PATCH", "PUT"],
    response_model=EnrichedFavorite,
)
async def update_favorite(
    favorite_id: int,
    payload: FavoriteUpdate,
    user_id: UserId,
    service: FavoritesService = Depends(get_favorites_service),
) -> EnrichedFavorite:
    """Apply a partial update; fields left out of the body stay untouched."""

    try:
        return await service.update_favorite(
            user_id=user_id,
            favorite_id=favorite_id,
            patch=payload,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
