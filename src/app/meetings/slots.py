"""Slot key helpers.

A slot key is ``YYYY-MM-DD-HH:mm``: the date's three components and the
time, joined by hyphens. The format is fixed-width, so sorting keys as
strings sorts them chronologically, and the first three components give the
date bucket used for display.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

from src.app.meetings.schemas import TimeSlot

SLOT_KEY_FORMAT = "%Y-%m-%d-%H:%M"


def make_slot_key(when: datetime) -> str:
    """Build the slot key for a datetime.

    Timezone-aware values are normalised to UTC first; naive values are
    taken as they are.
    """
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.strftime(SLOT_KEY_FORMAT)


def parse_slot_key(key: str) -> datetime:
    """Parse a slot key back into a naive datetime.

    Raises:
        ValueError: If the key does not match ``YYYY-MM-DD-HH:mm``.
    """
    return datetime.strptime(key, SLOT_KEY_FORMAT)


def slot_date(key: str) -> str:
    """Date portion (``YYYY-MM-DD``) of a slot key."""
    year, month, day = key.split("-")[:3]
    return f"{year}-{month}-{day}"


def slot_time(key: str) -> str:
    """Time portion (``HH:mm``) of a slot key."""
    return key.split("-")[3]


def group_times_by_date(
    times: Mapping[str, list[str]],
) -> list[tuple[str, list[TimeSlot]]]:
    """Bucket slots by date for display.

    Dates come out in ascending order and the slots inside each date are
    ordered by their full key.
    """
    groups: dict[str, list[TimeSlot]] = {}
    for key, attendees in times.items():
        groups.setdefault(slot_date(key), []).append(
            TimeSlot(key=key, attendees=list(attendees))
        )
    return [
        (date, sorted(groups[date], key=lambda slot: slot.key))
        for date in sorted(groups)
    ]


def format_date(date: str) -> str:
    """``2024-12-10`` -> ``Tuesday, December 10, 2024``."""
    parsed = datetime.strptime(date, "%Y-%m-%d")
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def format_time(time: str) -> str:
    """``14:05`` -> ``2:05 PM``."""
    parsed = datetime.strptime(time, "%H:%M")
    hour = parsed.hour % 12 or 12
    return f"{hour}:{parsed:%M} {parsed:%p}"
