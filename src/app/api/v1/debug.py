"""Store inspection endpoint.

Reports whether Redis is configured and reachable and, when it is, dumps
every stored meeting. Disabled with DEBUG_ENDPOINT_ENABLED=false.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from src.app.api.deps import get_meeting_repository
from src.app.config import get_settings
from src.app.meetings.repository import MeetingRepository

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["debug"])


@router.get("/debug")
async def debug_store(repo: MeetingRepository = Depends(get_meeting_repository)):
    settings = get_settings()
    if not settings.DEBUG_ENDPOINT_ENABLED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    try:
        connected = await repo.ping()
    except RedisError as exc:
        logger.warning("debug.store_unreachable", error=str(exc))
        connected = False

    try:
        data = await repo.snapshot() if connected else {}
    except Exception as exc:
        logger.exception("debug.store_dump_failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get Redis data", "details": str(exc)},
        )

    return {
        "status": "ready" if connected else "unavailable",
        "redisUrl": "Configured" if settings.redis_configured else "Not configured",
        "connected": connected,
        "data": data,
    }
