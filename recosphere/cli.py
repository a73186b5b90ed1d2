"""
Operator commands for RecoSphere.

Usage:
    recosphere serve --port 8000
    recosphere migrate
    recosphere genres --json
    recosphere favorites U1
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recosphere.cache import TTLCache
from recosphere.db.connection import dispose_engine, get_session_factory
from recosphere.db.models import MediaType
from recosphere.schemas.favorites import EnrichedFavorite
from recosphere.services.favorites import FavoritesEnricher, FavoritesPersistence
from recosphere.services.favorites_service import FavoritesService
from recosphere.services.metadata import GenreCache, MetadataCache, MetadataFetcher
from recosphere.services.tmdb_client import TMDbClient
from recosphere.settings import get_settings

if TYPE_CHECKING:
    from alembic.config import Config

console = Console()

_MIGRATIONS_DIR = Path(__file__).resolve().parent / "db" / "migrations"


def _alembic_config() -> Config:
    """Alembic settings for the migrations shipped inside the package."""
    from alembic.config import Config

    config = Config()
    config.set_main_option("script_location", str(_MIGRATIONS_DIR))
    return config


def _build_client() -> TMDbClient:
    return TMDbClient.from_settings()


async def collect_genres(client: TMDbClient) -> dict[str, list[dict[str, object]]]:
    genres = GenreCache()
    await genres.initialize(client)
    return {
        "movie": genres.as_list(MediaType.MOVIE),
        "tv": genres.as_list(MediaType.TV),
    }


async def collect_favorites(
    user_id: str,
    *,
    session_factory: async_sessionmaker[AsyncSession],
    client: TMDbClient,
) -> list[EnrichedFavorite]:
    """Enrich ``user_id``'s favorites the same way ``GET /favorites`` does."""

    active_settings = get_settings()
    genres = GenreCache()
    await genres.initialize(client)
    fetcher = MetadataFetcher(
        client, MetadataCache(TTLCache(active_settings.metadata_cache_ttl_seconds))
    )

    async with session_factory() as session:
        service = FavoritesService(
            persistence=FavoritesPersistence(session),
            fetcher=fetcher,
            enricher=FavoritesEnricher(genres),
        )
        return await service.list_favorites(user_id=user_id)


def render_favorites(user_id: str, favorites: Sequence[EnrichedFavorite]) -> Table:
    table = Table(
        "ID", "Type", "TMDb ID", "Title", "Genres", "Added", title=f"Favorites for {user_id}"
    )
    for item in favorites:
        table.add_row(
            str(item.id),
            item.media_type.value,
            item.external_id,
            item.title,
            ", ".join(item.genre_names),
            item.added_at.strftime("%Y-%m-%d"),
        )
    return table


@click.group()
def cli() -> None:
    """RecoSphere API management commands."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Restart on code changes (development only)")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the API under uvicorn."""
    import uvicorn

    uvicorn.run("recosphere.main:app", host=host, port=port, reload=reload)


@cli.command()
@click.option("--revision", default="head", show_default=True)
def migrate(revision: str) -> None:
    """Apply Alembic migrations to the configured database."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Database upgraded to {revision}")


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output genres as JSON")
def genres(output_json: bool) -> None:
    """Fetch and print the TMDb genre lists."""

    async def _run() -> dict[str, list[dict[str, object]]]:
        client = _build_client()
        try:
            return await collect_genres(client)
        finally:
            await client.aclose()

    result = asyncio.run(_run())

    if output_json:
        click.echo(json.dumps(result, indent=2))
        return

    for media_type, entries in result.items():
        table = Table("ID", "Name", title=f"{media_type.upper()} genres")
        for entry in entries:
            table.add_row(str(entry["id"]), str(entry["name"]))
        console.print(table)
    if not any(result.values()):
        console.print("[red]No genres loaded; check TMDB_ACCESS_TOKEN.[/red]")


@cli.command()
@click.argument("user_id")
@click.option("--json", "output_json", is_flag=True, help="Output favorites as JSON")
def favorites(user_id: str, output_json: bool) -> None:
    """Print a user's favorites with provider metadata."""

    async def _run() -> list[EnrichedFavorite]:
        client = _build_client()
        try:
            return await collect_favorites(
                user_id, session_factory=get_session_factory(), client=client
            )
        finally:
            await client.aclose()
            await dispose_engine()

    items = asyncio.run(_run())

    if output_json:
        click.echo(json.dumps([item.model_dump(mode="json") for item in items], indent=2))
        return

    console.print(render_favorites(user_id, items))
    console.print(f"[bold]Total favorites:[/bold] {len(items)}")


if __name__ == "__main__":
    cli()
