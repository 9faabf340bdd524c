"""FastAPI dependency injection for shared resources.

The meeting repository is built once in the app lifespan and stored on
``app.state``; endpoints receive it through ``get_meeting_repository``.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.app.meetings.repository import MeetingRepository


async def get_meeting_repository(request: Request) -> MeetingRepository:
    """Retrieve MeetingRepository from app.state, 503 if not available."""
    repo = getattr(request.app.state, "meeting_repository", None)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Meeting repository not initialized",
        )
    return repo
