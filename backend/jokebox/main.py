from contextlib import asynccontextmanager
import logging

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from jokebox.api.routes import api_router
from jokebox.api.shared.errors import install_exception_handlers
from jokebox.core import database
from jokebox.core.config import Settings, get_settings
from jokebox.core.retry import RetryPolicy
from jokebox.core.telemetry import configure_opentelemetry, instrument_fastapi
from jokebox.jobs.store_health import StoreHealthMonitor
from jokebox.persistence.repositories import JokeRepository
from jokebox.services.joke_cache import JokeCache
from jokebox.services.joke_service import JokeService

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-Id"


def _configure_sqlalchemy_logging(database_echo: bool) -> None:
    """
    Silence verbose SQLAlchemy logs unless echo is explicitly enabled.

    SQLAlchemy logs under several namespaces (engine + pool). We drop them to
    WARNING by default so statements and parameter dumps only show up when
    DATABASE_ECHO=true.
    """
    level = logging.INFO if database_echo else logging.WARNING
    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.engine.Engine",
        "sqlalchemy.pool",
        "sqlalchemy.pool.impl.AsyncAdaptedQueuePool",
    ):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = database_echo


def _install_request_id_middleware(app: FastAPI) -> None:
    """Ensure each response includes a stable X-Request-Id header."""

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER, str(uuid4()))
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def build_joke_service(settings: Settings) -> JokeService:
    """Wire the cache, the pooled store and the retry policy together."""
    return JokeService(
        cache=JokeCache(ttl_seconds=settings.jokes_cache_ttl_seconds),
        store=JokeRepository(database.engine),
        retry_policy=RetryPolicy(
            max_attempts=settings.store_retry_attempts,
            delay_seconds=settings.store_retry_delay_seconds,
            backoff="fixed",
        ),
    )


async def _dispose_engine() -> None:
    await database.engine.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    settings = get_settings()

    configure_opentelemetry(
        service_name=settings.otel_service_name,
        service_version=settings.otel_service_version,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        otlp_headers=settings.otel_exporter_otlp_headers,
        enabled=settings.otel_enabled,
    )

    monitor = StoreHealthMonitor(app.state.joke_service, settings)
    app.state.store_health_monitor = monitor
    await monitor.start()
    logger.info("Server is in %s mode", settings.environment)

    try:
        yield
    finally:
        await monitor.stop()
        if app.state.owns_engine:
            await _dispose_engine()


def create_app(joke_service: JokeService | None = None) -> FastAPI:
    """Application factory for FastAPI.

    Passing ``joke_service`` skips building the database-backed service.
    """
    settings = get_settings()
    app = FastAPI(
        title="Jokebox API",
        description="Serves jokes from a relational store through a stale-tolerant cache.",
        version="0.1.0",
        lifespan=lifespan,
    )

    _configure_sqlalchemy_logging(settings.database_echo)

    app.state.owns_engine = joke_service is None
    app.state.joke_service = joke_service or build_joke_service(settings)

    instrument_fastapi(app, enabled=settings.otel_enabled)
    _install_request_id_middleware(app)
    install_exception_handlers(app)

    allow_origins = settings.cors_allow_origins
    allow_origin_regex = settings.cors_allow_origin_regex
    if allow_origins or allow_origin_regex:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_origin_regex=allow_origin_regex,
            allow_credentials=bool(allow_origins),
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["ETag", "X-Cache-Status", "X-Data-Source", "Warning"],
        )

    app.include_router(api_router)

    return app


app = create_app()
