"""Integration tests for the meeting API.

Uses the InMemoryRedis-backed repository from conftest and httpx AsyncClient
over ASGITransport. Covers GET/POST/PUT semantics, error mapping, the debug
dump, health checks and the metrics route.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.app.config import get_settings
from src.app.main import create_app
from src.app.meetings.repository import MeetingRepository


STANDUP = {"title": "Standup", "times": {"2024-01-01-09:00": ["Alice"]}}
STANDUP_TWO = {"title": "Standup", "times": {"2024-01-01-09:00": ["Alice", "Bob"]}}


async def _client_for(repo) -> AsyncClient:
    app = create_app(repository=repo)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def unconfigured_client():
    async with await _client_for(MeetingRepository(None)) as ac:
        yield ac


# ── Meeting CRUD ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_post_get_put_scenario(client):
    """POST echoes, GET returns it, PUT supersedes the slot list entirely."""
    response = await client.post("/api/meeting/abc", json=STANDUP)
    assert response.status_code == 200
    assert response.json() == STANDUP

    response = await client.get("/api/meeting/abc")
    assert response.status_code == 200
    assert response.json() == STANDUP

    response = await client.put("/api/meeting/abc", json=STANDUP_TWO)
    assert response.status_code == 200
    assert response.json() == STANDUP_TWO

    response = await client.get("/api/meeting/abc")
    assert response.json() == STANDUP_TWO
    assert response.json()["times"]["2024-01-01-09:00"] == ["Alice", "Bob"]


@pytest.mark.asyncio
async def test_put_drops_slots_missing_from_body(client):
    await client.post(
        "/api/meeting/abc",
        json={"title": "Standup", "times": {"2024-01-01-09:00": ["Alice"], "2024-01-02-09:00": ["Bob"]}},
    )
    await client.put("/api/meeting/abc", json={"title": "Renamed", "times": {}})

    response = await client.get("/api/meeting/abc")
    assert response.json() == {"title": "Renamed", "times": {}}


@pytest.mark.asyncio
async def test_get_unknown_meeting_is_404(client):
    response = await client.get("/api/meeting/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Meeting not found"}


@pytest.mark.asyncio
async def test_post_over_existing_guid_overwrites(client):
    await client.post("/api/meeting/abc", json=STANDUP)
    await client.post("/api/meeting/abc", json={"title": "Other", "times": {}})

    response = await client.get("/api/meeting/abc")
    assert response.json()["title"] == "Other"


@pytest.mark.asyncio
async def test_missing_fields_default(client):
    response = await client.post("/api/meeting/abc", json={})
    assert response.status_code == 200
    assert response.json() == {"title": "", "times": {}}


# ── Error Mapping ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_malformed_json_is_500(client):
    response = await client.post(
        "/api/meeting/abc",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Server error"
    assert body["details"]


@pytest.mark.asyncio
async def test_wrong_shape_is_500(client):
    response = await client.put("/api/meeting/abc", json={"title": "x", "times": {"k": "Alice"}})
    assert response.status_code == 500
    assert response.json()["error"] == "Server error"


@pytest.mark.asyncio
async def test_store_failure_on_write_is_500():
    redis = AsyncMock()
    redis.set.side_effect = RedisConnectionError("connection refused")
    async with await _client_for(MeetingRepository(redis, track_access=False)) as ac:
        response = await ac.post("/api/meeting/abc", json=STANDUP)

    assert response.status_code == 500
    assert response.json() == {"error": "Server error", "details": "connection refused"}


@pytest.mark.asyncio
async def test_store_failure_on_read_is_404():
    redis = AsyncMock()
    redis.get.side_effect = RedisConnectionError("connection refused")
    async with await _client_for(MeetingRepository(redis)) as ac:
        response = await ac.get("/api/meeting/abc")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unconfigured_store(unconfigured_client):
    response = await unconfigured_client.get("/api/meeting/abc")
    assert response.status_code == 404

    response = await unconfigured_client.post("/api/meeting/abc", json=STANDUP)
    assert response.status_code == 500
    assert "not configured" in response.json()["details"]


@pytest.mark.asyncio
async def test_repository_missing_is_503():
    app = create_app(repository=MeetingRepository(None))
    app.state.meeting_repository = None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/meeting/abc")
    assert response.status_code == 503


# ── Debug, Health, Metrics ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_debug_dump(client):
    await client.post("/api/meeting/abc", json=STANDUP)

    response = await client.get("/api/debug")

    assert response.status_code == 200
    body = response.json()
    assert body["connected"] is True
    assert body["data"]["keys"] == ["meeting:abc"]
    assert body["data"]["meetings"] == [{"key": "meeting:abc", "value": STANDUP}]


@pytest.mark.asyncio
async def test_debug_dump_unconfigured(unconfigured_client):
    response = await unconfigured_client.get("/api/debug")
    body = response.json()
    assert body["connected"] is False
    assert body["data"] == {}


@pytest.mark.asyncio
async def test_debug_dump_unreachable_store():
    redis = AsyncMock()
    redis.ping.side_effect = RedisConnectionError("connection refused")
    async with await _client_for(MeetingRepository(redis)) as ac:
        response = await ac.get("/api/debug")

    assert response.status_code == 200
    body = response.json()
    assert body["connected"] is False
    assert body["status"] == "unavailable"
    assert body["data"] == {}


@pytest.mark.asyncio
async def test_debug_dump_disabled(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "DEBUG_ENDPOINT_ENABLED", False)
    response = await client.get("/api/debug")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_readiness(client, unconfigured_client):
    response = await client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["redis"] == "ok"

    response = await unconfigured_client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["checks"]["redis"] == "not_configured"


@pytest.mark.asyncio
async def test_request_id_header_and_metrics(client):
    response = await client.get("/api/meeting/abc")
    assert response.headers.get("X-Request-ID")

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "meeting_store_operations_total" in response.text


@pytest.mark.asyncio
async def test_unmatched_paths_share_one_metrics_label(client):
    await client.get("/wp-admin/setup-config.php")

    response = await client.get("/metrics")

    assert 'route="unmatched"' in response.text
    assert "wp-admin" not in response.text


@pytest.mark.asyncio
async def test_incoming_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
