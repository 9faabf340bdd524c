"""Expiry sweep for meetings nobody has opened in a while.

Walks the ``access:{guid}`` side records written by MeetingRepository and
removes both the meeting and its access record once the last access is older
than the retention window. Meetings that never got an access record are left
alone.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis
import structlog

from src.app.meetings.repository import ACCESS_PREFIX, access_key, meeting_key

logger = structlog.get_logger(__name__)


async def sweep_stale_meetings(
    redis: aioredis.Redis,
    max_age: timedelta,
    now: datetime | None = None,
    dry_run: bool = False,
) -> list[str]:
    """Delete meetings whose last access is older than ``max_age``.

    Args:
        redis: Async Redis client (``decode_responses=True``).
        max_age: Retention window measured from the last access.
        now: Reference time, defaults to the current UTC time.
        dry_run: Report what would be swept without deleting anything.

    Returns:
        GUIDs of the swept (or, in dry-run mode, sweepable) meetings.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - max_age
    swept: list[str] = []

    async for key in redis.scan_iter(match=f"{ACCESS_PREFIX}*"):
        guid = key[len(ACCESS_PREFIX):]
        value = await redis.get(key)
        if value is None:
            continue
        try:
            last_access = datetime.fromisoformat(value)
        except ValueError:
            logger.warning("sweep.bad_timestamp", guid=guid, value=value)
            continue
        if last_access.tzinfo is None:
            last_access = last_access.replace(tzinfo=timezone.utc)

        if last_access >= cutoff:
            continue

        swept.append(guid)
        if dry_run:
            logger.info("sweep.would_delete", guid=guid, last_access=value)
            continue

        await redis.delete(meeting_key(guid), access_key(guid))
        logger.info("sweep.deleted", guid=guid, last_access=value)

    logger.info(
        "sweep.completed",
        swept=len(swept),
        dry_run=dry_run,
        cutoff=cutoff.isoformat(),
    )
    return swept
