"""Prometheus metrics and Sentry integration.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics, labelled by
  route template so every meeting GUID shares one series
- track_store_operation(): context manager timing and counting Redis calls
  made by the meeting repository
- init_sentry(): Initialize Sentry for the FastAPI app
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

# ── Meeting Store Metrics ────────────────────────────────────────────────────

meeting_store_operations_total = Counter(
    "meeting_store_operations_total",
    "Meeting store operations by outcome",
    ["operation", "outcome"],
)

meeting_store_duration_seconds = Histogram(
    "meeting_store_duration_seconds",
    "Meeting store operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)


@asynccontextmanager
async def track_store_operation(operation: str) -> AsyncGenerator[dict[str, str], None]:
    """Count and time one repository operation.

    Usage:
        async with track_store_operation("get") as op:
            data = await redis.get(key)
            op["outcome"] = "hit" if data else "miss"

    The outcome defaults to "ok" and becomes "error" if the block raises.
    """
    tracker = {"outcome": "ok"}
    start_time = time.perf_counter()

    try:
        yield tracker
    except Exception:
        tracker["outcome"] = "error"
        raise
    finally:
        meeting_store_operations_total.labels(
            operation=operation,
            outcome=tracker["outcome"],
        ).inc()
        meeting_store_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )


# ── Metrics Middleware ───────────────────────────────────────────────────────


def _route_label(request: Request) -> str:
    """Matched route template (``/api/meeting/{guid}``), else "unmatched"."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and latency for every route except /metrics."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = _route_label(request)
        http_requests_total.labels(
            method=request.method,
            route=route,
            status_code=str(response.status_code),
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            route=route,
        ).observe(duration)

        return response


# ── Sentry Integration ───────────────────────────────────────────────────────


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK with meeting GUID tagging.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    import sentry_sdk
    import structlog
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration

    def before_send(event: dict, hint: dict) -> dict:
        """Tag events with the meeting GUID bound by the logging middleware."""
        guid = structlog.contextvars.get_contextvars().get("guid")
        if guid:
            event.setdefault("tags", {})["meeting_guid"] = guid
        return event

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        before_send=before_send,
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
