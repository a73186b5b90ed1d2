"""Tests for the structured error payload builders."""

from __future__ import annotations

import json

from recosphere.schemas.error import ErrorType, ValidationErrorDetail
from recosphere.utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    error_json_response,
)
from recosphere.utils.request_context import clear_request_id, set_request_id


def test_error_response_carries_request_id_from_context() -> None:
    token = set_request_id("req-42")
    try:
        payload = build_error_response(
            error_type=ErrorType.NOT_FOUND,
            message="Favorite not found",
            detail="Favorite not found",
            status_code=404,
            path="/favorites/3",
        )
    finally:
        clear_request_id(token)

    assert payload.request_id == "req-42"
    assert payload.error_type is ErrorType.NOT_FOUND
    assert payload.retry_after is None


def test_error_response_without_request_id() -> None:
    payload = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail="boom",
        status_code=500,
        path="/favorites",
    )

    assert payload.request_id is None


def test_error_json_response_sets_retry_after_header() -> None:
    payload = build_error_response(
        error_type=ErrorType.UPSTREAM_ERROR,
        message="Metadata provider unavailable",
        detail="TMDb request failed: timed out",
        status_code=502,
        path="/trending",
        retry_after=30,
        request_id="req-1",
    )

    response = error_json_response(payload)

    assert response.status_code == 502
    assert response.headers["Retry-After"] == "30"
    body = json.loads(response.body)
    assert body["error_type"] == "upstream_error"
    assert body["request_id"] == "req-1"


def test_validation_error_response_lists_fields() -> None:
    payload = build_validation_error_response(
        errors=[ValidationErrorDetail(field="body.media_type", message="bad enum")],
        message="Request validation failed",
        detail="1 validation error(s)",
        status_code=422,
        path="/favorites",
    )

    response = error_json_response(payload)

    assert "Retry-After" not in response.headers
    body = json.loads(response.body)
    assert body["error_type"] == "validation_error"
    assert body["errors"] == [
        {"field": "body.media_type", "message": "bad enum", "value": None}
    ]
