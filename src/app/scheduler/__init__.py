"""Scheduler client -- API client and the view model that drives it."""

from src.app.scheduler.client import MeetingClient, MeetingClientError
from src.app.scheduler.view import SchedulerView, ViewState

__all__ = ["MeetingClient", "MeetingClientError", "SchedulerView", "ViewState"]
