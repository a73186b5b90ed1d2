import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import (
    DatabaseError,
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)

from recosphere.cache import CacheClient, TTLCache, close_redis, get_redis
from recosphere.db.connection import dispose_engine, get_database_type, get_engine
from recosphere.db.models import Base
from recosphere.settings import AppSettings, get_settings

from .api import discover, favorites, genres
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.discover_service import DiscoverService
from .services.metadata import GenreCache, MetadataCache, MetadataFetcher
from .services.tmdb_client import ProviderUnavailable, TMDbClient
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    error_json_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log warnings for optional configuration that was left unset."""
    warnings = (active_settings or get_settings()).optional_config_warnings()

    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Hide the password portion of a database URL for logging."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)
    if "@" not in rest:
        return url

    auth, host_db = rest.split("@", 1)
    if ":" in auth:
        user, _ = auth.split(":", 1)
        return f"{scheme}://{user}:***@{host_db}"
    return f"{scheme}://{auth}@{host_db}"


async def _create_sqlite_schema() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the process-wide TMDb client and caches, then warm everything up."""
    _validate_environment()

    active_settings = get_settings()
    db_type = get_database_type()

    logger.info("=" * 60)
    logger.info("RecoSphere API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info("Database Type: %s", db_type.upper())
    logger.info(
        "Database URL: %s", _sanitize_database_url(active_settings.resolved_database_url)
    )
    if db_type == "sqlite":
        logger.info("SQLite mode - creating tables from ORM metadata")
        await _create_sqlite_schema()
    else:
        logger.info("PostgreSQL mode - ensure Alembic migrations are up to date")
    logger.info("=" * 60)

    client = TMDbClient.from_settings(active_settings)
    metadata_cache = MetadataCache(
        TTLCache(active_settings.metadata_cache_ttl_seconds),
        CacheClient(await get_redis()),
    )
    genre_cache = GenreCache()

    app.state.tmdb_client = client
    app.state.genre_cache = genre_cache
    app.state.metadata_fetcher = MetadataFetcher(client, metadata_cache)
    app.state.discover_service = DiscoverService(
        client, TTLCache(active_settings.discover_cache_ttl_seconds)
    )

    from recosphere.warmup import warmup_all

    await warmup_all(genres=genre_cache, client=client)

    yield

    logger.info("Shutting down RecoSphere API")
    await client.aclose()
    await close_redis()
    await dispose_engine()


app = FastAPI(
    title="RecoSphere API",
    version="0.1.0",
    description="Favorites, genres and discovery listings backed by TMDb.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = [3000, 4173, 5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


allow_origins = list(dict.fromkeys(_default_origins() + settings.cors_allow_origins))
logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag each request with an id echoed back in ``X-Request-ID``."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Render router-raised HTTP errors in the shared error shape."""
    error_type = {
        status.HTTP_404_NOT_FOUND: ErrorType.NOT_FOUND,
        status.HTTP_409_CONFLICT: ErrorType.CONFLICT,
    }.get(exc.status_code, ErrorType.INTERNAL_ERROR)

    payload = build_error_response(
        error_type=error_type,
        message=str(exc.detail),
        detail=str(exc.detail),
        status_code=exc.status_code,
        path=str(request.url.path),
    )
    return error_json_response(payload)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    payload = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )
    return error_json_response(payload)


@app.exception_handler(ProviderUnavailable)
async def provider_exception_handler(request: Request, exc: ProviderUnavailable):
    logger.error(
        "Metadata provider error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    payload = build_error_response(
        error_type=ErrorType.UPSTREAM_ERROR,
        message="Metadata provider unavailable",
        detail=f"TMDb request failed: {exc.reason}",
        status_code=status.HTTP_502_BAD_GATEWAY,
        path=str(request.url.path),
        retry_after=30,
    )
    return error_json_response(payload)


@dataclass(frozen=True)
class _DatabaseFailure:
    error_type: ErrorType
    status_code: int
    message: str
    detail: str
    retry_after: int | None = None


_CONNECTION_FAILURE = _DatabaseFailure(
    ErrorType.DATABASE_ERROR,
    status.HTTP_503_SERVICE_UNAVAILABLE,
    "Database connection failed",
    "Unable to connect to the database. Please try again later.",
    retry_after=5,
)

# Looked up along the exception's MRO, so the most specific entry wins.
_DATABASE_FAILURES: dict[type[Exception], _DatabaseFailure] = {
    OperationalError: _CONNECTION_FAILURE,
    DBAPIError: _CONNECTION_FAILURE,
    SQLAlchemyTimeoutError: _DatabaseFailure(
        ErrorType.TIMEOUT_ERROR,
        status.HTTP_504_GATEWAY_TIMEOUT,
        "Database query timeout",
        "The database query took too long to complete. Please try again.",
        retry_after=3,
    ),
    IntegrityError: _DatabaseFailure(
        ErrorType.CONFLICT,
        status.HTTP_409_CONFLICT,
        "Data integrity constraint violation",
        "The operation would violate a database constraint.",
    ),
    DatabaseError: _DatabaseFailure(
        ErrorType.DATABASE_ERROR,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database operation failed",
        "An error occurred while accessing the database. Please try again.",
        retry_after=3,
    ),
}


def _database_failure_for(exc: Exception) -> _DatabaseFailure:
    for cls in type(exc).__mro__:
        if cls in _DATABASE_FAILURES:
            return _DATABASE_FAILURES[cls]
    return _DATABASE_FAILURES[DatabaseError]


async def database_exception_handler(request: Request, exc: Exception):
    """Render SQLAlchemy failures; connection problems become a retryable 503."""
    failure = _database_failure_for(exc)
    logger.error(
        "%s for request %s to %s: %s",
        failure.message,
        get_request_id(),
        request.url.path,
        exc,
    )

    payload = build_error_response(
        error_type=failure.error_type,
        message=failure.message,
        detail=failure.detail,
        status_code=failure.status_code,
        path=str(request.url.path),
        retry_after=failure.retry_after,
    )
    return error_json_response(payload)


for _error_class in _DATABASE_FAILURES:
    app.add_exception_handler(_error_class, database_exception_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    payload = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=5,
    )
    return error_json_response(payload)


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
app.include_router(genres.router, prefix="/genres", tags=["genres"])
app.include_router(discover.router, tags=["discover"])
