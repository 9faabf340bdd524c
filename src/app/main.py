"""FastAPI application factory.

Wires the meeting repository, the meeting/debug/health routers, request
logging, Prometheus metrics, CORS and optional Sentry. The repository is
attached to ``app.state`` when the app is created so request handlers work
even when the lifespan is not run (ASGI test transports).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from src.app.config import Settings, get_settings
from src.app.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.app.core.redis import close_redis, get_redis_pool
from src.app.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.app.api.v1.router import router as v1_router
from src.app.meetings.repository import MeetingRepository

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and Sentry on startup, close the Redis pool on shutdown."""
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    repo: MeetingRepository = app.state.meeting_repository
    logger.info(
        "app.started",
        environment=settings.ENVIRONMENT.value,
        store_configured=repo.configured,
        track_access=settings.TRACK_ACCESS,
    )

    yield

    await close_redis()
    logger.info("app.stopped")


def _cors_origins(settings: Settings) -> list[str]:
    if settings.CORS_ALLOWED_ORIGINS == "*":
        return ["*"]
    return [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]


def create_app(repository: MeetingRepository | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        repository: Meeting repository to serve from. Defaults to one over
            the shared Redis pool (unconfigured if REDIS_URL is empty).
    """
    settings = get_settings()

    app = FastAPI(
        title="Meeting Scheduler API",
        version="0.1.0",
        description="Share a link, collect availability for candidate meeting times",
        lifespan=lifespan,
    )

    if repository is None:
        repository = MeetingRepository(get_redis_pool(), track_access=settings.TRACK_ACCESS)
    app.state.meeting_repository = repository

    # Middleware is added in reverse order (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
