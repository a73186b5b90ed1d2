from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Imported after ``Base`` so the model module can subclass it.
from .favorites import Favorite, MediaType  # noqa: E402

__all__ = ["Base", "Favorite", "MediaType"]
