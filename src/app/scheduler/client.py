"""Async HTTP client for the meeting API.

Thin wrapper over httpx.AsyncClient speaking ``/api/meeting/{guid}``. There
is no retry here: a failed save is reported to the caller once and the next
edit sends the full record again anyway.
"""

from __future__ import annotations

import httpx
import structlog

from src.app.meetings.schemas import Meeting

logger = structlog.get_logger(__name__)


class MeetingClientError(Exception):
    """Non-success response from the meeting API."""

    def __init__(self, status_code: int, error: str, details: str | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.details = details
        message = f"HTTP {status_code}: {error}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> MeetingClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return cls(
            status_code=response.status_code,
            error=body.get("error") or response.reason_phrase,
            details=body.get("details"),
        )


class MeetingClient:
    """Client for fetching and saving meetings.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        timeout: Per-request timeout in seconds.
        http_client: Pre-built httpx.AsyncClient (tests pass one bound to an
            ASGI transport). When given, ``base_url`` and ``timeout`` are
            ignored and the caller owns its lifetime.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> MeetingClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    @staticmethod
    def _path(guid: str) -> str:
        return f"/api/meeting/{guid}"

    async def fetch(self, guid: str) -> Meeting | None:
        """GET a meeting. Returns None on 404.

        Raises:
            MeetingClientError: Any other non-2xx response, or a body that
                is not a meeting.
            httpx.HTTPError: Transport failure.
        """
        response = await self._http.get(self._path(guid))
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            raise MeetingClientError.from_response(response)
        return self._decode(response)

    async def create(self, guid: str, meeting: Meeting) -> Meeting:
        return await self._save("POST", guid, meeting)

    async def update(self, guid: str, meeting: Meeting) -> Meeting:
        return await self._save("PUT", guid, meeting)

    async def _save(self, method: str, guid: str, meeting: Meeting) -> Meeting:
        response = await self._http.request(
            method,
            self._path(guid),
            json=meeting.model_dump(mode="json"),
        )
        if response.is_error:
            raise MeetingClientError.from_response(response)
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Meeting:
        """Parse a success body, reporting non-meeting payloads as client errors."""
        try:
            return Meeting.model_validate(response.json())
        except ValueError as exc:
            # JSONDecodeError and pydantic's ValidationError are both ValueErrors
            raise MeetingClientError(
                status_code=response.status_code,
                error="Invalid response body",
                details=str(exc),
            ) from exc
