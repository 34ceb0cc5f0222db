"""Core functionality for time tracking."""

from timesheet.core.models import Project, TimeEntry, effective_duration
from timesheet.core.session import Idle, Running, Stopped, TimerSession
from timesheet.core.tracker import TimeTracker

__all__ = [
    "Project",
    "TimeEntry",
    "effective_duration",
    "Idle",
    "Running",
    "Stopped",
    "TimerSession",
    "TimeTracker",
]
