#!/usr/bin/env python3
"""CLI for creating and editing a shared meeting poll.

Usage:
    python scripts/schedule.py new --title "Standup" --name Alice --at "2024-12-10 09:00"
    python scripts/schedule.py show --id <guid>
    python scripts/schedule.py toggle --id <guid> --name Bob --slot 2024-12-10-09:00
    python scripts/schedule.py add --id <guid> --name Bob --at "2024-12-11 14:00"
    python scripts/schedule.py remove --id <guid> --name Bob --slot 2024-12-11-14:00
    python scripts/schedule.py rename --id <guid> --name Bob --title "Weekly sync"

Talks to SCHEDULER_API_URL (environment or .env), overridable with --api-url.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime

# Ensure project root is on sys.path so we can import src.app
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


def print_meeting(view) -> None:
    """Print the meeting grouped by date, one line per slot."""
    from src.app.meetings.slots import format_date, format_time

    print()
    print(view.title or "(untitled)")
    print("=" * 70)
    groups = view.grouped()
    if not groups:
        print("No times proposed yet.")
    for date, slots in groups:
        print(format_date(date))
        for slot in slots:
            mark = "x" if view.user_name and view.is_attending(slot.key) else " "
            names = ", ".join(slot.attendees) or "-"
            print(f"  [{mark}] {format_time(slot.time):<10} {slot.key:<18} {names}")
    print("=" * 70)
    print()


async def run(args: argparse.Namespace) -> int:
    from src.app.config import get_settings
    from src.app.scheduler import MeetingClient, SchedulerView

    settings = get_settings()
    api_url = args.api_url or settings.SCHEDULER_API_URL

    async with MeetingClient(base_url=api_url, timeout=settings.SCHEDULER_TIMEOUT) as client:
        view = SchedulerView(client, guid=getattr(args, "id", None))
        await view.load()

        if args.command != "new" and not view.title and not view.times:
            print(f"Meeting {view.guid} not found (or the server is unreachable).")
            return 1

        # Set directly: set_user_name would save the pre-edit record and race
        # the save of the edit below
        view.user_name = args.name or ""

        # Saves are fire-and-forget; drain between edits so they land in order
        if args.command == "new":
            view.set_title(args.title)
            for at in args.at or []:
                await view.drain()
                view.add_slot(datetime.fromisoformat(at))
        elif args.command == "toggle":
            view.toggle_attendance(args.slot)
        elif args.command == "add":
            view.add_slot(datetime.fromisoformat(args.at))
        elif args.command == "remove":
            view.remove_slot(args.slot)
        elif args.command == "rename":
            view.set_title(args.title)

        await view.drain()

        print_meeting(view)
        if args.command == "new":
            print(f"Share link: {view.share_url(api_url)}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Collect availability for a meeting")
    parser.add_argument("--api-url", default=None, help="Meeting API root URL")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a meeting")
    new.add_argument("--title", required=True)
    new.add_argument("--name", required=True, help="Your name")
    new.add_argument("--at", action="append", help="Proposed time, e.g. '2024-12-10 09:00'")

    show = sub.add_parser("show", help="Show a meeting")
    show.add_argument("--id", required=True)
    show.add_argument("--name", default=None, help="Highlight your availability")

    toggle = sub.add_parser("toggle", help="Flip your availability for a slot")
    toggle.add_argument("--id", required=True)
    toggle.add_argument("--name", required=True)
    toggle.add_argument("--slot", required=True, help="Slot key YYYY-MM-DD-HH:mm")

    add = sub.add_parser("add", help="Propose another time")
    add.add_argument("--id", required=True)
    add.add_argument("--name", required=True)
    add.add_argument("--at", required=True)

    remove = sub.add_parser("remove", help="Remove a proposed time")
    remove.add_argument("--id", required=True)
    remove.add_argument("--name", required=True)
    remove.add_argument("--slot", required=True)

    rename = sub.add_parser("rename", help="Change the meeting title")
    rename.add_argument("--id", required=True)
    rename.add_argument("--name", required=True)
    rename.add_argument("--title", required=True)

    args = parser.parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
