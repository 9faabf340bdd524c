"""Client-side scheduler state machine.

Holds the in-memory Meeting for one GUID and the current user's name.
Every edit mutates local state and then fires a save of the whole record in
the background. Saves are not queued or coalesced: overlapping requests are
allowed and whichever lands last at the server wins.

States:
    LOADING -- a GUID came from the share link and the fetch is pending
    READY   -- meeting loaded, or defaulted when there was nothing to load
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime
from enum import Enum

import httpx
import structlog

from src.app.meetings.schemas import Meeting, TimeSlot
from src.app.meetings.slots import group_times_by_date, make_slot_key
from src.app.scheduler.client import MeetingClient, MeetingClientError

logger = structlog.get_logger(__name__)


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"


class SchedulerView:
    """In-memory view model for a single meeting.

    Args:
        client: API client used to load and save the meeting.
        guid: GUID taken from the share link. When omitted, a fresh GUID is
            generated and the meeting is treated as new (saved with POST);
            otherwise edits are saved with PUT.
    """

    def __init__(self, client: MeetingClient, guid: str | None = None) -> None:
        self._client = client
        self.is_existing = guid is not None
        self.guid = guid or str(uuid.uuid4())
        self.state = ViewState.LOADING if self.is_existing else ViewState.READY
        self.title = ""
        self.times: dict[str, list[str]] = {}
        self.user_name = ""
        self._pending: set[asyncio.Task] = set()

    # ── Loading ──────────────────────────────────────────────────────────

    async def load(self) -> None:
        """Fetch the shared meeting, keeping the empty defaults on any failure."""
        if not self.is_existing:
            self.state = ViewState.READY
            return

        try:
            meeting = await self._client.fetch(self.guid)
        except (httpx.HTTPError, MeetingClientError) as exc:
            logger.error("scheduler.load_failed", guid=self.guid, error=str(exc))
            meeting = None

        if meeting is None:
            logger.info("scheduler.meeting_not_loaded", guid=self.guid)
        else:
            self.title = meeting.title
            self.times = {key: list(names) for key, names in meeting.times.items()}

        self.state = ViewState.READY

    # ── Edits ────────────────────────────────────────────────────────────

    def set_title(self, title: str) -> None:
        self.title = title
        self._persist()

    def set_user_name(self, name: str) -> None:
        self.user_name = name
        self._persist()

    def toggle_attendance(self, slot_key: str, name: str | None = None) -> None:
        """Add ``name`` to the slot if absent, remove it if present.

        ``name`` defaults to the current user.
        """
        name = self.user_name if name is None else name
        attendees = list(self.times.get(slot_key, []))
        if name in attendees:
            attendees.remove(name)
        else:
            attendees.append(name)
        self.times[slot_key] = attendees
        self._persist()

    def add_slot(self, when: datetime) -> str:
        """Propose a new time; the current user is its only attendee.

        An existing slot at the same key is replaced.
        """
        key = make_slot_key(when)
        self.times[key] = [self.user_name]
        self._persist()
        return key

    def remove_slot(self, slot_key: str) -> None:
        """Drop a slot and its attendees. Unknown keys are ignored."""
        self.times.pop(slot_key, None)
        self._persist()

    # ── Display ──────────────────────────────────────────────────────────

    def grouped(self) -> list[tuple[str, list[TimeSlot]]]:
        return group_times_by_date(self.times)

    def is_attending(self, slot_key: str, name: str | None = None) -> bool:
        name = self.user_name if name is None else name
        return name in self.times.get(slot_key, [])

    def share_url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/?id={self.guid}"

    def to_meeting(self) -> Meeting:
        return Meeting(
            title=self.title,
            times={key: list(names) for key, names in self.times.items()},
        )

    # ── Persistence ──────────────────────────────────────────────────────

    @property
    def can_save(self) -> bool:
        return bool(self.title) and bool(self.user_name)

    def _persist(self) -> None:
        """Schedule a background save of the whole meeting."""
        if self.state is not ViewState.READY or not self.can_save:
            return
        task = asyncio.get_running_loop().create_task(self._save(self.to_meeting()))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save(self, meeting: Meeting) -> None:
        method = "PUT" if self.is_existing else "POST"
        try:
            if self.is_existing:
                await self._client.update(self.guid, meeting)
            else:
                await self._client.create(self.guid, meeting)
        except (httpx.HTTPError, MeetingClientError) as exc:
            logger.error(
                "scheduler.save_failed",
                guid=self.guid,
                method=method,
                error=str(exc),
            )
            return
        logger.debug("scheduler.saved", guid=self.guid, method=method)

    @property
    def pending_saves(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every in-flight save to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
