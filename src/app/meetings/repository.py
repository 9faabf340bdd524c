"""Meeting repository -- GUID-keyed persistence of Meeting records in Redis.

Layout:
    meeting:{guid}  -> JSON ``{"title": ..., "times": {...}}``
    access:{guid}   -> ISO-8601 UTC timestamp of the last read or write

Reads never raise: a missing key, an unconfigured store, a Redis failure or
an undecodable value all come back as None. Writes are unconditional full
replacements; store failures propagate to the caller. The access record is
best-effort and its failure is never reported as a failure of the primary
operation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError
from redis.exceptions import RedisError

from src.app.core.monitoring import track_store_operation
from src.app.meetings.schemas import Meeting

logger = structlog.get_logger(__name__)

MEETING_PREFIX = "meeting:"
ACCESS_PREFIX = "access:"


class StoreNotConfiguredError(RuntimeError):
    """Raised on a write when no Redis URL is configured."""

    def __init__(self) -> None:
        super().__init__("Meeting store is not configured (REDIS_URL is empty)")


def meeting_key(guid: str) -> str:
    return f"{MEETING_PREFIX}{guid}"


def access_key(guid: str) -> str:
    return f"{ACCESS_PREFIX}{guid}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MeetingRepository:
    """Get/create/update of Meeting records keyed by GUID.

    Args:
        redis: Async Redis client (``decode_responses=True``), or None when
            the store is not configured.
        track_access: Maintain ``access:{guid}`` on every read and write.
    """

    def __init__(self, redis: aioredis.Redis | None, track_access: bool = True) -> None:
        self._redis = redis
        self._track_access = track_access

    @property
    def configured(self) -> bool:
        return self._redis is not None

    # ── Reads ────────────────────────────────────────────────────────────

    async def get(self, guid: str) -> Meeting | None:
        """Fetch a meeting, or None if it is absent or cannot be read."""
        async with track_store_operation("get") as op:
            if self._redis is None:
                logger.warning("meeting.store_not_configured", guid=guid, operation="get")
                op["outcome"] = "unconfigured"
                return None

            try:
                data = await self._redis.get(meeting_key(guid))
            except RedisError as exc:
                logger.error("meeting.get_failed", guid=guid, error=str(exc))
                op["outcome"] = "unavailable"
                return None

            if data is None:
                logger.info("meeting.not_found", guid=guid)
                op["outcome"] = "miss"
                return None

            try:
                meeting = Meeting.model_validate_json(data)
            except ValidationError as exc:
                logger.error("meeting.decode_failed", guid=guid, error=str(exc))
                op["outcome"] = "corrupt"
                return None

            op["outcome"] = "hit"
            logger.debug("meeting.retrieved", guid=guid, slots=len(meeting.times))

        if self._track_access:
            await self._touch(guid)

        return meeting

    async def last_access(self, guid: str) -> datetime | None:
        """Timestamp of the last read or write, if one was recorded."""
        if self._redis is None:
            return None
        value = await self._redis.get(access_key(guid))
        if value is None:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning("meeting.access_record_invalid", guid=guid, value=value)
            return None

    async def list_guids(self) -> list[str]:
        """GUIDs of every stored meeting, sorted."""
        if self._redis is None:
            return []
        guids = [
            key[len(MEETING_PREFIX):]
            async for key in self._redis.scan_iter(match=f"{MEETING_PREFIX}*")
        ]
        return sorted(guids)

    async def snapshot(self) -> dict[str, Any]:
        """Dump every stored meeting for inspection.

        Undecodable values are reported as None rather than failing the dump.
        """
        if self._redis is None:
            return {}

        keys = [meeting_key(guid) for guid in await self.list_guids()]
        meetings = []
        for key in keys:
            raw = await self._redis.get(key)
            value = None
            if raw is not None:
                try:
                    value = Meeting.model_validate_json(raw).model_dump()
                except ValidationError:
                    logger.warning("meeting.snapshot_decode_failed", key=key)
            meetings.append({"key": key, "value": value})
        return {"keys": keys, "meetings": meetings}

    async def ping(self) -> bool:
        if self._redis is None:
            return False
        return bool(await self._redis.ping())

    # ── Writes ───────────────────────────────────────────────────────────

    async def create(self, guid: str, meeting: Meeting) -> None:
        """Store a new meeting. Overwrites any record already at this GUID."""
        await self._write("create", guid, meeting)

    async def update(self, guid: str, meeting: Meeting) -> None:
        """Replace a meeting in full. No merge with the stored record."""
        await self._write("update", guid, meeting)

    async def _write(self, operation: str, guid: str, meeting: Meeting) -> None:
        async with track_store_operation(operation):
            if self._redis is None:
                logger.warning("meeting.store_not_configured", guid=guid, operation=operation)
                raise StoreNotConfiguredError()

            payload = meeting.model_dump_json()
            logger.info(
                f"meeting.{operation}",
                guid=guid,
                title=meeting.title,
                slots=len(meeting.times),
            )

            try:
                if self._track_access:
                    await self._write_with_access(guid, payload)
                else:
                    await self._redis.set(meeting_key(guid), payload)
            except RedisError as exc:
                logger.error(f"meeting.{operation}_failed", guid=guid, error=str(exc))
                raise

    async def _write_with_access(self, guid: str, payload: str) -> None:
        """SET meeting and access record in one MULTI/EXEC.

        Only an error on the meeting SET is raised.
        """
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(meeting_key(guid), payload)
            pipe.set(access_key(guid), _now_iso())
            primary, access = await pipe.execute(raise_on_error=False)

        if isinstance(primary, Exception):
            raise primary
        if isinstance(access, Exception):
            logger.warning("meeting.access_record_failed", guid=guid, error=str(access))

    async def _touch(self, guid: str) -> None:
        """Refresh access:{guid}; failures are logged and dropped."""
        try:
            await self._redis.set(access_key(guid), _now_iso())
        except RedisError as exc:
            logger.warning("meeting.access_record_failed", guid=guid, error=str(exc))
