"""Route-level tests driving the FastAPI app through httpx's ASGI transport."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from recosphere.cache import TTLCache
from recosphere.db.connection import get_db
from recosphere.main import app
from recosphere.services.discover_service import DiscoverService
from recosphere.services.metadata import GenreCache, MetadataFetcher
from tests.recosphere.support.doubles import FakeTMDbClient


@pytest_asyncio.fixture
async def client(
    session: AsyncSession,
    provider: FakeTMDbClient,
    fetcher: MetadataFetcher,
    genre_cache: GenreCache,
) -> AsyncIterator[AsyncClient]:
    """Serve the app against the in-memory database and the scripted provider."""

    async def _override_db() -> AsyncIterator[AsyncSession]:
        yield session

    app.dependency_overrides[get_db] = _override_db
    app.state.metadata_fetcher = fetcher
    app.state.genre_cache = genre_cache
    app.state.discover_service = DiscoverService(provider, TTLCache(3600))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_add_then_duplicate_then_list(client: AsyncClient) -> None:
    created = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": 550, "media_type": "movie"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["external_id"] == "550"
    assert body["title"] == "Fight Club"
    assert body["genre_names"] == ["Drama"]

    duplicate = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": "550", "media_type": "movie"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error_type"] == "conflict"
    assert duplicate.json()["message"] == "Favorite already exists"

    listed = await client.get("/favorites", params={"user_id": "U1"})
    assert listed.status_code == 200
    assert [item["external_id"] for item in listed.json()] == ["550"]


@pytest.mark.asyncio
async def test_delete_of_other_users_favorite_returns_404(client: AsyncClient) -> None:
    created = await client.post(
        "/favorites",
        params={"user_id": "U2"},
        json={"external_id": "1399", "media_type": "tv"},
    )
    favorite_id = created.json()["id"]

    response = await client.delete(f"/favorites/{favorite_id}", params={"user_id": "U1"})

    assert response.status_code == 404
    assert response.json()["error_type"] == "not_found"
    remaining = await client.get("/favorites", params={"user_id": "U2"})
    assert [item["id"] for item in remaining.json()] == [favorite_id]


@pytest.mark.asyncio
async def test_delete_own_favorite(client: AsyncClient) -> None:
    created = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": "680", "media_type": "movie"},
    )

    response = await client.delete(
        f"/favorites/{created.json()['id']}", params={"user_id": "U1"}
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Favorite removed"}
    listed = await client.get("/favorites", params={"user_id": "U1"})
    assert listed.json() == []


@pytest.mark.parametrize("method", ["PATCH", "PUT"])
@pytest.mark.asyncio
async def test_update_favorite_notes_and_tags(client: AsyncClient, method: str) -> None:
    created = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": "550", "media_type": "movie"},
    )

    response = await client.request(
        method,
        f"/favorites/{created.json()['id']}",
        params={"user_id": "U1"},
        json={"notes": "first rule", "tags": ["cult"]},
    )

    assert response.status_code == 200
    assert response.json()["notes"] == "first rule"
    assert response.json()["tags"] == ["cult"]
    assert response.json()["title"] == "Fight Club"


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(client: AsyncClient) -> None:
    response = await client.patch(
        "/favorites/1", params={"user_id": "U1"}, json={"user_id": "U2"}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "validation_error"


@pytest.mark.asyncio
async def test_missing_user_id_is_a_validation_error(client: AsyncClient) -> None:
    response = await client.get("/favorites")

    assert response.status_code == 422
    payload = response.json()
    assert payload["errors"][0]["field"] == "query.user_id"
    assert payload["request_id"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
@pytest.mark.parametrize("external_id", ["../account", "abc", "550/videos", ""])
async def test_non_numeric_external_id_is_rejected(
    client: AsyncClient, external_id: str
) -> None:
    response = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": external_id, "media_type": "movie"},
    )

    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "body.external_id"

    listing = await client.get("/favorites", params={"user_id": "U1"})
    assert listing.json() == []


@pytest.mark.asyncio
async def test_invalid_media_type_is_rejected(client: AsyncClient) -> None:
    response = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": "550", "media_type": "podcast"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_genres_endpoint_lists_both_maps(client: AsyncClient) -> None:
    response = await client.get("/genres")

    assert response.status_code == 200
    payload = response.json()
    assert {"id": 18, "name": "Drama"} in payload["movie_genres"]
    assert {"id": 10765, "name": "Sci-Fi & Fantasy"} in payload["tv_genres"]


@pytest.mark.asyncio
async def test_popular_movies_are_served_from_cache(
    client: AsyncClient, provider: FakeTMDbClient
) -> None:
    first = await client.get("/popular/movies")
    second = await client.get("/popular/movies")
    tv = await client.get("/popular/tv")

    assert first.status_code == second.status_code == tv.status_code == 200
    assert first.json() == second.json()
    assert first.json()["results"][0]["id"] == 550
    assert provider.listing_calls == ["popular:movie", "popular:tv"]


@pytest.mark.asyncio
async def test_trending_passes_extra_fields_through(client: AsyncClient) -> None:
    response = await client.get("/trending")

    assert response.status_code == 200
    assert response.json()["results"][0]["media_type"] == "tv"


@pytest.mark.asyncio
async def test_provider_outage_on_listing_returns_502(
    client: AsyncClient, provider: FakeTMDbClient
) -> None:
    provider.fail = True

    response = await client.get("/trending")

    assert response.status_code == 502
    assert response.json()["error_type"] == "upstream_error"
    assert response.headers["Retry-After"] == "30"


@pytest.mark.asyncio
async def test_provider_outage_does_not_fail_favorites(
    client: AsyncClient, provider: FakeTMDbClient
) -> None:
    provider.fail = True

    created = await client.post(
        "/favorites",
        params={"user_id": "U1"},
        json={"external_id": "550", "media_type": "movie"},
    )
    listed = await client.get("/favorites", params={"user_id": "U1"})

    assert created.status_code == 201
    assert created.json()["title"] == "Unknown"
    assert [item["title"] for item in listed.json()] == ["Unknown"]
