#!/usr/bin/env python3
"""Delete meetings that have not been opened or saved within the retention window.

Usage:
    python scripts/sweep_meetings.py
    python scripts/sweep_meetings.py --days 7 --dry-run

Reads REDIS_URL and MEETING_RETENTION_DAYS from environment or .env file.
Meant to run from cron or a scheduled job.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import timedelta

# Ensure project root is on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def sweep(days: int, dry_run: bool) -> int:
    from src.app.api.middleware.logging import configure_structlog
    from src.app.core.redis import close_redis, get_redis_pool
    from src.app.meetings.cleanup import sweep_stale_meetings

    configure_structlog()
    redis = get_redis_pool()
    if redis is None:
        print("REDIS_URL is not set; nothing to sweep.")
        return 1

    try:
        swept = await sweep_stale_meetings(redis, timedelta(days=days), dry_run=dry_run)
    finally:
        await close_redis()

    verb = "Would delete" if dry_run else "Deleted"
    print(f"{verb} {len(swept)} meeting(s) idle for more than {days} day(s).")
    for guid in swept:
        print(f"  {guid}")
    return 0


def main() -> None:
    from src.app.config import get_settings

    parser = argparse.ArgumentParser(description="Sweep idle meetings from Redis")
    parser.add_argument(
        "--days",
        type=int,
        default=get_settings().MEETING_RETENTION_DAYS,
        help="Retention window in days since last access",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List idle meetings without deleting them",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(sweep(args.days, args.dry_run)))


if __name__ == "__main__":
    main()
