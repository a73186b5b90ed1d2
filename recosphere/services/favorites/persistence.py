"""Database-oriented helpers for user favorites."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from recosphere.db.models import Favorite, MediaType
from recosphere.errors import DuplicateError

_PATCHABLE_COLUMNS = frozenset({"media_type", "notes", "tags"})


class FavoritesPersistence:
    """Encapsulates SQLAlchemy operations required by the favorites domain.

    Every statement that touches an existing row filters on both the row id
    and the owning ``user_id``, so ownership checks and mutations happen in a
    single statement.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: str) -> Sequence[Favorite]:
        """Return the user's favorites in insertion order."""

        query = (
            select(Favorite)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.id.asc())
        )
        result = await self._session.execute(query)
        return result.scalars().all()

    async def exists(self, user_id: str, external_id: str) -> bool:
        query = select(
            exists().where(
                Favorite.user_id == user_id,
                Favorite.external_id == external_id,
            )
        )
        result = await self._session.execute(query)
        return bool(result.scalar())

    async def get_owned(self, user_id: str, favorite_id: int) -> Favorite | None:
        query = (
            select(Favorite)
            .where(Favorite.id == favorite_id, Favorite.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(query)
        return result.scalars().one_or_none()

    async def create(
        self, user_id: str, external_id: str, media_type: MediaType
    ) -> Favorite:
        """Insert a favorite, mapping the unique-constraint race to ``DuplicateError``."""

        favorite = Favorite(
            user_id=user_id,
            external_id=external_id,
            media_type=MediaType(media_type),
            tags=[],
        )
        self._session.add(favorite)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateError(user_id, external_id) from exc
        return favorite

    async def delete_owned(self, user_id: str, favorite_id: int) -> bool:
        """Delete the favorite if ``user_id`` owns it; return whether a row went away."""

        statement = delete(Favorite).where(
            Favorite.id == favorite_id,
            Favorite.user_id == user_id,
        )
        result = await self._session.execute(statement)
        return result.rowcount > 0

    async def update_owned(
        self, user_id: str, favorite_id: int, changes: Mapping[str, Any]
    ) -> Favorite | None:
        """Apply ``changes`` to an owned favorite and return the refreshed row."""

        unknown = set(changes) - _PATCHABLE_COLUMNS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if changes:
            statement = (
                update(Favorite)
                .where(Favorite.id == favorite_id, Favorite.user_id == user_id)
                .values(**changes)
            )
            result = await self._session.execute(statement)
            if result.rowcount == 0:
                return None

        return await self.get_owned(user_id, favorite_id)
