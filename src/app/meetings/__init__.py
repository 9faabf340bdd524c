"""Meeting domain -- the Meeting record, slot key helpers, and the Redis repository."""

from src.app.meetings.repository import MeetingRepository, StoreNotConfiguredError
from src.app.meetings.schemas import Meeting, TimeSlot

__all__ = ["Meeting", "MeetingRepository", "StoreNotConfiguredError", "TimeSlot"]
