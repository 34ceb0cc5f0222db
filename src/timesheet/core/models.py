"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

FALLBACK_COLOR = "#6B7280"


def _new_id() -> str:
    return str(uuid4())


def coerce_component(value: Any) -> int:
    """Coerce one hours/minutes/seconds input to a non-negative integer.

    Non-numeric and negative input becomes 0. Values above 59 are kept.
    """
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return max(0, number)


def to_seconds(hours: Any, minutes: Any, seconds: Any) -> int:
    """Combine duration components into a total number of seconds."""
    return (
        coerce_component(hours) * 3600
        + coerce_component(minutes) * 60
        + coerce_component(seconds)
    )


@dataclass
class Project:
    """Project that time is tracked against.

    Attributes:
        id: Opaque identifier
        name: Display name
        color: Display color (#RRGGBB)
        created_at: Creation timestamp
    """

    name: str
    color: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        """Create Project from dictionary (JSON deserialization)."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            color=data.get("color") or FALLBACK_COLOR,
            created_at=_parse_timestamp(data.get("createdAt")) or datetime.now(),
        )


@dataclass
class TimeEntry:
    """A timed work session against one project.

    Attributes:
        id: Opaque identifier
        project_id: Project the time belongs to (may dangle after deletion)
        project_name: Project name snapshot taken when the entry was created
        start_time: When the timer started
        end_time: When the timer stopped (None while running)
        duration: Measured seconds, fixed at stop time
        date: Calendar day of start_time (YYYY-MM-DD)
        is_running: Whether the timer is still ticking
        edited_duration: Manual override of duration (None if never edited)
    """

    project_id: str
    project_name: str
    start_time: datetime
    id: str = field(default_factory=_new_id)
    end_time: Optional[datetime] = None
    duration: int = 0
    date: str = ""
    is_running: bool = False
    edited_duration: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.date:
            self.date = self.start_time.date().isoformat()

    @property
    def effective_duration(self) -> int:
        """Seconds to use for display and totals."""
        return effective_duration(self)

    @property
    def hours(self) -> float:
        """Effective duration in hours."""
        return self.effective_duration / 3600

    @property
    def edited(self) -> bool:
        """Check whether the measured duration has been overridden."""
        return self.edited_duration is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
            "date": self.date,
            "isRunning": self.is_running,
        }
        if self.edited_duration is not None:
            data["editedDuration"] = self.edited_duration
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (JSON deserialization)."""
        edited = data.get("editedDuration")
        return cls(
            id=str(data["id"]),
            project_id=str(data["projectId"]),
            project_name=data.get("projectName", ""),
            start_time=_parse_timestamp(data["startTime"]) or datetime.now(),
            end_time=_parse_timestamp(data.get("endTime")),
            duration=int(data.get("duration") or 0),
            date=data.get("date", ""),
            is_running=bool(data.get("isRunning", False)),
            edited_duration=int(edited) if edited is not None else None,
        )


def effective_duration(entry: TimeEntry) -> int:
    """Return the edited duration if one was set, else the measured one."""
    if entry.edited_duration is not None:
        return entry.edited_duration
    return entry.duration


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # Browser exports use a trailing Z
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        # Everything in memory is naive local time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
