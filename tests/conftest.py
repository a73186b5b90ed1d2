"""Pytest configuration shared by every RecoSphere test module."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from recosphere import cache
from recosphere.settings import get_settings
from recosphere.utils.request_context import clear_request_id


@pytest.fixture(autouse=True)
def reset_process_state() -> Iterator[None]:
    """Drop cached settings, Redis globals and the request id between tests."""

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    cache._redis_client = None
    cache._redis_disabled_until = None
    clear_request_id()
