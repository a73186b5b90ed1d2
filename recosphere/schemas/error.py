"""Error payloads shared by every exception handler."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Categories surfaced to API clients."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATABASE_ERROR = "database_error"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_ERROR = "internal_error"
    TIMEOUT_ERROR = "timeout_error"


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "upstream_error",
                "message": "Metadata provider unavailable",
                "detail": "TMDb did not answer within 10 seconds",
                "status_code": 502,
                "timestamp": "2026-10-17T10:30:00Z",
                "request_id": "7d0c1b7e-1f5e-4d4f-9a8e-3f1f0c1a2b3c",
                "path": "/trending",
                "retry_after": 30,
            }
        }
    )

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = Field(None, description="Identifier echoed in X-Request-ID")
    path: str | None = Field(None, description="Request path that caused the error")
    retry_after: int | None = Field(None, description="Seconds to wait before retrying")


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    value: Any = None


class ValidationErrorResponse(ErrorResponse):
    """Error response carrying one entry per invalid field."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(default_factory=list)
