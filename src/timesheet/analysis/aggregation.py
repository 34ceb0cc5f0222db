"""Filtering, pagination and time-bucketed summaries of time entries.

Every function here is pure and recomputes its result from the entries it
is given. All durations go through ``effective_duration``.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence, TypeVar

from timesheet.core.models import FALLBACK_COLOR, Project, TimeEntry, effective_duration

T = TypeVar("T")

ALL_PROJECTS = "all"
DEFAULT_PAGE_SIZE = 10
DEFAULT_DAILY_DAYS = 30
DEFAULT_WEEKLY_WEEKS = 8


def filter_entries(
    entries: Iterable[TimeEntry],
    project_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[TimeEntry]:
    """Filter entries by project and inclusive date range.

    Args:
        entries: Entries to filter
        project_id: Exact project ID, or None/"all" for every project
        date_from: Earliest day (YYYY-MM-DD), inclusive
        date_to: Latest day (YYYY-MM-DD), inclusive

    Returns:
        Matching entries in their original order
    """
    filtered = list(entries)

    if project_id and project_id != ALL_PROJECTS:
        filtered = [e for e in filtered if e.project_id == project_id]

    # Zero-padded ISO days compare correctly as strings
    if date_from:
        filtered = [e for e in filtered if e.date >= date_from]
    if date_to:
        filtered = [e for e in filtered if e.date <= date_to]

    return filtered


def sort_entries(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    """Most recent day first; entries on the same day keep their order."""
    return sorted(entries, key=lambda e: e.date, reverse=True)


def history_view(
    entries: Iterable[TimeEntry],
    project_id: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[TimeEntry]:
    """Filtered and sorted entries as shown in the history list."""
    return sort_entries(filter_entries(entries, project_id, date_from, date_to))


@dataclass
class Page:
    """One page of a longer list."""

    items: list
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def start_index(self) -> int:
        """1-based position of the first item, 0 for an empty page."""
        if not self.items:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        if not self.items:
            return 0
        return self.start_index + len(self.items) - 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """Slice out one page.

    Args:
        items: Full list
        page: 1-based page number; pages outside the range are empty
        page_size: Items per page

    Raises:
        ValueError: If page_size is less than 1
    """
    if page_size < 1:
        raise ValueError(f"Page size must be at least 1, got {page_size}")

    if page < 1:
        chunk: list = []
    else:
        start = (page - 1) * page_size
        chunk = list(items[start : start + page_size])

    return Page(items=chunk, page=page, page_size=page_size, total_count=len(items))


def total_seconds(entries: Iterable[TimeEntry]) -> int:
    return sum(effective_duration(e) for e in entries)


def total_hours(entries: Iterable[TimeEntry]) -> float:
    return total_seconds(entries) / 3600


def day_total_seconds(entries: Iterable[TimeEntry], day: date) -> int:
    """Total seconds recorded on one calendar day."""
    key = day.isoformat()
    return sum(effective_duration(e) for e in entries if e.date == key)


@dataclass
class DayBucket:
    """Time recorded on one day, with a per-project breakdown."""

    date: str
    seconds: int = 0
    by_project: dict[str, int] = field(default_factory=dict)

    @property
    def hours(self) -> float:
        return self.seconds / 3600


def daily_series(
    entries: Iterable[TimeEntry], limit: int = DEFAULT_DAILY_DAYS
) -> list[DayBucket]:
    """Group entries by day.

    Returns:
        Buckets in ascending date order, keeping only the latest ``limit`` days
        that have entries
    """
    buckets: dict[str, DayBucket] = {}
    for entry in entries:
        bucket = buckets.setdefault(entry.date, DayBucket(date=entry.date))
        seconds = effective_duration(entry)
        bucket.seconds += seconds
        bucket.by_project[entry.project_name] = (
            bucket.by_project.get(entry.project_name, 0) + seconds
        )

    ordered = sorted(buckets.values(), key=lambda b: b.date)
    return ordered[-limit:] if limit > 0 else []


def average_daily_hours(days: Sequence[DayBucket]) -> float:
    """Mean hours per day over the given buckets (0 if there are none)."""
    if not days:
        return 0.0
    return sum(d.hours for d in days) / len(days)


@dataclass
class ProjectBucket:
    """Time recorded against one project."""

    project_id: str
    name: str
    color: str
    seconds: int = 0
    entries: int = 0

    @property
    def hours(self) -> float:
        return self.seconds / 3600

    def share(self, total: int) -> float:
        """Percentage of ``total`` seconds taken by this project."""
        if total <= 0:
            return 0.0
        return self.seconds / total * 100


def project_series(
    entries: Iterable[TimeEntry], projects: Optional[Iterable[Project]] = None
) -> list[ProjectBucket]:
    """Group entries by project ID.

    Buckets are labelled with the project's current name, or with the most
    recent name snapshot when the project no longer exists. Deleted projects
    get the fallback color.

    Returns:
        Buckets sorted by time, largest first
    """
    known = {p.id: p for p in (projects or [])}
    buckets: dict[str, ProjectBucket] = {}
    newest: dict[str, datetime] = {}

    for entry in entries:
        bucket = buckets.get(entry.project_id)
        if bucket is None:
            newest[entry.project_id] = entry.start_time
            project = known.get(entry.project_id)
            bucket = ProjectBucket(
                project_id=entry.project_id,
                name=project.name if project else entry.project_name,
                color=project.color if project else FALLBACK_COLOR,
            )
            buckets[entry.project_id] = bucket
        elif entry.project_id not in known and entry.start_time > newest[entry.project_id]:
            newest[entry.project_id] = entry.start_time
            bucket.name = entry.project_name

        bucket.seconds += effective_duration(entry)
        bucket.entries += 1

    return sorted(buckets.values(), key=lambda b: b.seconds, reverse=True)


@dataclass
class WeekBucket:
    """Time recorded in one week."""

    week_start: str
    seconds: int = 0

    @property
    def hours(self) -> float:
        return self.seconds / 3600


def start_of_week(day: date, week_start: str = "sunday") -> date:
    """First day of the week containing ``day``."""
    if week_start == "monday":
        offset = day.weekday()
    else:
        offset = (day.weekday() + 1) % 7
    return day - timedelta(days=offset)


def weekly_series(
    entries: Iterable[TimeEntry],
    limit: int = DEFAULT_WEEKLY_WEEKS,
    week_start: str = "sunday",
) -> list[WeekBucket]:
    """Group entries by week.

    Returns:
        Buckets in ascending order, keeping only the latest ``limit`` weeks
        that have entries
    """
    totals: dict[str, int] = defaultdict(int)
    for entry in entries:
        key = start_of_week(date.fromisoformat(entry.date), week_start).isoformat()
        totals[key] += effective_duration(entry)

    ordered = [WeekBucket(week_start=k, seconds=v) for k, v in sorted(totals.items())]
    return ordered[-limit:] if limit > 0 else []


def format_clock(seconds: int) -> str:
    """Format seconds as HH:MM:SS."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_duration(seconds: Optional[int]) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds is None:
        return "ongoing"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"
