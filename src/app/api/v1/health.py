"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready) checks. Readiness
pings Redis; an unconfigured store reports "not_configured" and is treated
as not ready, since writes would fail.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.app.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No external dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


async def _check_dependencies(request: Request) -> dict:
    """Check Redis connectivity. Returns check results dict."""
    checks: dict = {"redis": "ok"}

    repo = getattr(request.app.state, "meeting_repository", None)
    if repo is None or not repo.configured:
        checks["redis"] = "not_configured"
        return checks

    try:
        if not await repo.ping():
            checks["redis"] = "error"
            checks["redis_error"] = "PING did not return PONG"
    except Exception as e:
        checks["redis"] = "error"
        checks["redis_error"] = str(e)

    return checks


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: returns 200 if Redis answers, 503 otherwise."""
    checks = await _check_dependencies(request)
    healthy = checks.get("redis") == "ok"

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "degraded",
            "checks": checks,
        },
    )
