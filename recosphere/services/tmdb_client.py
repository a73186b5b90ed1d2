"""Async client for the TMDb v3 REST API.

Only the handful of read-only endpoints the backend needs are wrapped. Every
failure mode (transport error, timeout, non-2xx status, body that is not a
JSON object) surfaces as :class:`ProviderUnavailable` so callers handle one
exception type.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from recosphere.db.models import MediaType
from recosphere.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

_NUMERIC_ID = re.compile(r"[0-9]+")


class ProviderUnavailable(RuntimeError):
    """The metadata provider could not produce a usable response."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"TMDb request to {path} failed: {reason}")
        self.path = path
        self.reason = reason


class TMDbClient:
    def __init__(
        self,
        *,
        access_token: str | None,
        base_url: str,
        timeout_seconds: float,
        language: str = "en-US",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._language = language
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        active_settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TMDbClient":
        active_settings = active_settings or get_settings()
        return cls(
            access_token=active_settings.tmdb_access_token,
            base_url=active_settings.tmdb_base_url,
            timeout_seconds=active_settings.tmdb_timeout_seconds,
            language=active_settings.tmdb_language,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, **params: Any) -> dict[str, Any]:
        query = {"language": self._language, **params}
        try:
            response = await self._client.get(path, params=query)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ProviderUnavailable(path, "timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                path, f"status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(path, type(exc).__name__) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderUnavailable(path, "malformed JSON body") from exc
        if not isinstance(payload, dict):
            raise ProviderUnavailable(path, "unexpected payload shape")
        return payload

    async def fetch_details(self, media_type: MediaType, external_id: str) -> dict[str, Any]:
        """Return the raw detail payload for a movie or TV show."""

        path = f"/{MediaType(media_type).value}/{external_id}"
        if not _NUMERIC_ID.fullmatch(external_id):
            raise ProviderUnavailable(path, "invalid id")
        return await self._get(path)

    async def fetch_genres(self, media_type: MediaType) -> list[dict[str, Any]]:
        """Return ``[{"id": ..., "name": ...}, ...]`` for the media type."""

        path = f"/genre/{MediaType(media_type).value}/list"
        payload = await self._get(path)
        genres = payload.get("genres")
        if not isinstance(genres, list):
            raise ProviderUnavailable(path, "missing genres list")
        return genres

    async def fetch_popular(self, media_type: MediaType, page: int = 1) -> dict[str, Any]:
        return await self._get(f"/{MediaType(media_type).value}/popular", page=page)

    async def fetch_trending(self, window: str = "day") -> dict[str, Any]:
        return await self._get(f"/trending/all/{window}")


__all__ = ["ProviderUnavailable", "TMDbClient"]
