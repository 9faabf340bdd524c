"""Pydantic v2 schemas for the meeting domain.

A Meeting is the only persisted record: a title plus a mapping from slot key
(``YYYY-MM-DD-HH:mm``) to the names of people who can attend that slot.
Identity is extrinsic -- the GUID lives in the store key, not on the record.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Meeting(BaseModel):
    """Persisted meeting record ``{title, times}``."""

    title: str = ""
    times: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Slot key -> attendee names, in toggle order",
    )


class TimeSlot(BaseModel):
    """One slot of a meeting as shown in the grouped view."""

    key: str
    attendees: list[str] = Field(default_factory=list)

    @property
    def time(self) -> str:
        return self.key.split("-")[3]


class ErrorResponse(BaseModel):
    """Error body returned by the meeting API."""

    error: str
    details: str | None = None
