"""REST endpoints for reading and saving meetings by GUID.

GET returns the stored record or 404. POST and PUT both write the full
record and echo it back; they differ only in which verb the client chose
(new meeting vs. edit of a shared one). Any failure is reported as a 500
with a human-readable ``details`` string.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.app.api.deps import get_meeting_repository
from src.app.meetings.repository import MeetingRepository
from src.app.meetings.schemas import ErrorResponse, Meeting

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/meeting", tags=["meetings"])

_ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _server_error(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Server error", details=str(exc)).model_dump(),
    )


async def _read_meeting(request: Request) -> Meeting:
    """Parse the request body into a Meeting (raises on bad JSON or shape)."""
    data = await request.json()
    return Meeting.model_validate(data)


@router.get("/{guid}", response_model=Meeting, responses=_ERROR_RESPONSES)
async def get_meeting(
    guid: str,
    repo: MeetingRepository = Depends(get_meeting_repository),
):
    """Fetch a meeting by GUID."""
    try:
        meeting = await repo.get(guid)
    except Exception as exc:
        logger.exception("meeting.api_get_failed", guid=guid)
        return _server_error(exc)

    if meeting is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ErrorResponse(error="Meeting not found").model_dump(exclude_none=True),
        )
    return meeting


@router.post("/{guid}", response_model=Meeting, responses=_ERROR_RESPONSES)
async def create_meeting(
    guid: str,
    request: Request,
    repo: MeetingRepository = Depends(get_meeting_repository),
):
    """Store a brand-new meeting and echo it back."""
    try:
        meeting = await _read_meeting(request)
        await repo.create(guid, meeting)
    except Exception as exc:
        logger.exception("meeting.api_create_failed", guid=guid)
        return _server_error(exc)
    return meeting


@router.put("/{guid}", response_model=Meeting, responses=_ERROR_RESPONSES)
async def update_meeting(
    guid: str,
    request: Request,
    repo: MeetingRepository = Depends(get_meeting_repository),
):
    """Replace an existing meeting in full and echo it back."""
    try:
        meeting = await _read_meeting(request)
        await repo.update(guid, meeting)
    except Exception as exc:
        logger.exception("meeting.api_update_failed", guid=guid)
        return _server_error(exc)
    return meeting
