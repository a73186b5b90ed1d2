"""Tests for application start-up helpers in :mod:`recosphere.main`."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy.exc import DatabaseError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from recosphere.main import (
    _database_failure_for,
    _sanitize_database_url,
    _validate_environment,
)
from recosphere.settings import AppSettings


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (
            "postgresql+psycopg://reco:secret@db:5432/recosphere",
            "postgresql+psycopg://reco:***@db:5432/recosphere",
        ),
        ("postgresql+psycopg://reco@db/recosphere", "postgresql+psycopg://reco@db/recosphere"),
        ("sqlite+aiosqlite:///./data/recosphere.db", "sqlite+aiosqlite:///./data/recosphere.db"),
        ("not-a-url", "not-a-url"),
    ],
)
def test_sanitize_database_url_hides_password(url: str, expected: str) -> None:
    assert _sanitize_database_url(url) == expected


def test_validate_environment_logs_warnings(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    for name in ("REDIS_URL", "CORS_ALLOW_ORIGINS", "TMDB_ACCESS_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    caplog.set_level(logging.WARNING)

    _validate_environment(AppSettings(_env_file=None))

    assert "Environment Configuration Warnings" in caplog.text
    assert "TMDB_ACCESS_TOKEN is not set" in caplog.text


def test_validate_environment_is_quiet_when_configured(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.WARNING)

    _validate_environment(
        AppSettings(
            _env_file=None,
            REDIS_URL="redis://cache:6379/0",
            CORS_ALLOW_ORIGINS="https://reco.example",
            TMDB_ACCESS_TOKEN="token",
        )
    )

    assert "Environment Configuration Warnings" not in caplog.text


@pytest.mark.parametrize(
    ("exc", "status_code", "retry_after"),
    [
        (OperationalError("SELECT 1", {}, Exception("server closed")), 503, 5),
        (IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed")), 409, None),
        (SQLAlchemyTimeoutError("QueuePool limit reached"), 504, 3),
        (DatabaseError("UPDATE", {}, Exception("disk I/O error")), 500, 3),
    ],
)
def test_database_failures_map_to_most_specific_status(
    exc: Exception, status_code: int, retry_after: int | None
) -> None:
    failure = _database_failure_for(exc)

    assert failure.status_code == status_code
    assert failure.retry_after == retry_after
