"""Response models for genre lists and the popular/trending proxies."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Genre(BaseModel):
    id: int
    name: str


class GenreListResponse(BaseModel):
    movie_genres: list[Genre] = Field(default_factory=list)
    tv_genres: list[Genre] = Field(default_factory=list)


class DiscoverPage(BaseModel):
    """A TMDb listing page passed through verbatim.

    Extra keys are preserved so clients receive the provider payload unchanged.
    """

    model_config = ConfigDict(extra="allow")

    page: int = 1
    results: list[dict[str, Any]] = Field(default_factory=list)
    total_pages: int | None = None
    total_results: int | None = None


__all__ = ["DiscoverPage", "Genre", "GenreListResponse"]
