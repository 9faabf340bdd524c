"""Shared test fixtures.

Provides:
- InMemoryRedis: dict-backed stand-in for the redis.asyncio calls the
  meeting repository and sweep make (get/set/delete/ping/scan_iter/pipeline)
- repository fixtures over that double
- FastAPI app + async HTTP client with the repository preinstalled on app.state
"""

from __future__ import annotations

import fnmatch
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ResponseError

from src.app.main import create_app
from src.app.meetings.repository import MeetingRepository


# ── In-Memory Test Double ────────────────────────────────────────────────────


class _InMemoryPipeline:
    """Queues SETs and applies them on execute, MULTI/EXEC style."""

    def __init__(self, redis: InMemoryRedis) -> None:
        self._redis = redis
        self._ops: list[tuple[str, str]] = []

    async def __aenter__(self) -> _InMemoryPipeline:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._ops.clear()

    def set(self, key: str, value: str) -> _InMemoryPipeline:
        self._ops.append((key, value))
        return self

    async def execute(self, raise_on_error: bool = True) -> list:
        results: list = []
        for key, value in self._ops:
            if key in self._redis.failing_keys:
                error = ResponseError(f"simulated failure writing {key}")
                if raise_on_error:
                    raise error
                results.append(error)
                continue
            self._redis.data[key] = value
            results.append(True)
        self._ops.clear()
        return results


class InMemoryRedis:
    """In-memory Redis for testing without a server.

    Keys listed in ``failing_keys`` make writes to them fail the way a
    per-command error inside MULTI/EXEC does.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.failing_keys: set[str] = set()

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        if key in self.failing_keys:
            raise ResponseError(f"simulated failure writing {key}")
        self.data[key] = value
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        return True

    async def scan_iter(self, match: str = "*"):
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    def pipeline(self, transaction: bool = True) -> _InMemoryPipeline:
        return _InMemoryPipeline(self)


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def repo(fake_redis) -> MeetingRepository:
    return MeetingRepository(fake_redis, track_access=True)


@pytest.fixture
def app(repo):
    """FastAPI app with the in-memory repository installed."""
    return create_app(repository=repo)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
