"""Regression tests for startup warmup routines."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

import recosphere.cache as cache_module
import recosphere.warmup as warmup
from recosphere.db.models import MediaType
from recosphere.services.metadata import GenreCache
from tests.recosphere.support.doubles import FakeTMDbClient


class _DummyTransaction:
    """Async context manager standing in for ``engine.begin()``."""

    def __init__(self) -> None:
        self.connection: AsyncMock = AsyncMock()

    async def __aenter__(self) -> AsyncMock:
        return self.connection

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        return False


@pytest.mark.asyncio
async def test_warmup_database_executes_ping(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.INFO)
    dummy_txn = _DummyTransaction()
    sentinel_engine = object()
    seen: list[object] = []

    def _begin(engine: object) -> _DummyTransaction:
        seen.append(engine)
        return dummy_txn

    monkeypatch.setattr(warmup, "begin_engine_transaction", _begin)

    await warmup.warmup_database(resolve_engine=lambda: sentinel_engine)

    assert seen == [sentinel_engine]
    statement = dummy_txn.connection.execute.await_args.args[0]
    assert str(statement) == "SELECT 1"
    assert "Database connection warmed up" in caplog.text


@pytest.mark.asyncio
async def test_warmup_database_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    def _broken_engine() -> Any:
        raise RuntimeError("database offline")

    await warmup.warmup_database(resolve_engine=_broken_engine)

    assert "Database warmup failed: database offline" in caplog.text


@pytest.mark.asyncio
async def test_warmup_redis_skips_when_unavailable(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(cache_module, "get_redis", AsyncMock(return_value=None))

    await warmup.warmup_redis()

    assert "Redis warmup skipped" in caplog.text


@pytest.mark.asyncio
async def test_warmup_all_initializes_genres(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.INFO)
    monkeypatch.setattr(warmup, "begin_engine_transaction", lambda engine: _DummyTransaction())
    monkeypatch.setattr(cache_module, "get_redis", AsyncMock(return_value=None))
    genres = GenreCache()

    await warmup.warmup_all(
        genres=genres, client=FakeTMDbClient(), resolve_engine=lambda: object()
    )

    assert genres.ready is True
    assert "Backend warmup complete" in caplog.text


@pytest.mark.asyncio
async def test_warmup_genres_survives_provider_outage() -> None:
    genres = GenreCache()

    await warmup.warmup_genres(genres, FakeTMDbClient(fail=True))

    assert genres.ready is True
    assert genres.as_list(MediaType.MOVIE) == []
