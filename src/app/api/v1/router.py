"""V1 API router -- aggregates all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.app.api.v1 import debug, health, meetings

router = APIRouter()

router.include_router(health.router)
router.include_router(meetings.router, prefix="/api")
router.include_router(debug.router, prefix="/api")
