"""Timer session state machine.

A session is always exactly one of three states:

* ``Idle``: nothing is being timed.
* ``Running``: an entry is ticking; it has a start time and no end time.
* ``Stopped``: an entry has been stopped and is staged. Its duration may be
  edited before it is saved into the entry store or discarded.

Only the start time of a running entry is stored. Elapsed time is always
recomputed from the wall clock, so reloading mid-session is harmless.
"""

import logging
import math
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, Union

from timesheet.core.models import Project, TimeEntry, effective_duration, to_seconds

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class Idle:
    """No active or staged session."""


@dataclass(frozen=True)
class Running:
    """Timer is ticking for ``entry``."""

    entry: TimeEntry


@dataclass(frozen=True)
class Stopped:
    """Timer stopped; ``entry`` is staged until saved or discarded."""

    entry: TimeEntry


SessionState = Union[Idle, Running, Stopped]


def session_from_entry(entry: Optional[TimeEntry]) -> SessionState:
    """Rebuild a session state from the stored current entry.

    Args:
        entry: Entry from the current-entry slot, or None

    Returns:
        Matching session state

    Raises:
        ValueError: If the entry's running flag contradicts its end time
    """
    if entry is None:
        return Idle()
    if entry.is_running:
        if entry.end_time is not None:
            raise ValueError(f"Running entry {entry.id} already has an end time")
        return Running(entry)
    if entry.end_time is None:
        raise ValueError(f"Stopped entry {entry.id} has no end time")
    return Stopped(entry)


def elapsed_seconds(start: datetime, now: datetime) -> int:
    """Whole seconds between two timestamps, never negative."""
    return max(0, math.floor((now - start).total_seconds()))


class TimerSession:
    """Controls the single running or staged time entry."""

    def __init__(self, state: Optional[SessionState] = None, clock: Clock = datetime.now):
        """Initialize timer session.

        Args:
            state: Initial state. Defaults to Idle.
            clock: Callable returning the current time
        """
        self._state: SessionState = state if state is not None else Idle()
        self.clock = clock

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def entry(self) -> Optional[TimeEntry]:
        """The running or staged entry, if any."""
        if isinstance(self._state, (Running, Stopped)):
            return self._state.entry
        return None

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def is_running(self) -> bool:
        return isinstance(self._state, Running)

    @property
    def is_stopped(self) -> bool:
        return isinstance(self._state, Stopped)

    def start(self, project: Project) -> Optional[TimeEntry]:
        """Start timing a project.

        Starting from Stopped abandons the staged entry.

        Returns:
            New running entry, or None if a timer is already running
        """
        if isinstance(self._state, Running):
            logger.warning("Timer already running, ignoring start")
            return None

        if isinstance(self._state, Stopped):
            logger.info(f"Discarding unsaved entry {self._state.entry.id}")

        now = self.clock()
        entry = TimeEntry(
            project_id=project.id,
            project_name=project.name,
            start_time=now,
            duration=0,
            date=now.date().isoformat(),
            is_running=True,
        )
        self._state = Running(entry)
        logger.info(f"Started timer for {project.name}")
        return entry

    def stop(self) -> Optional[TimeEntry]:
        """Stop the running timer and stage its entry.

        Returns:
            Stopped entry, or None if nothing was running
        """
        if not isinstance(self._state, Running):
            logger.warning("No timer running, ignoring stop")
            return None

        end_time = self.clock()
        entry = replace(
            self._state.entry,
            end_time=end_time,
            duration=elapsed_seconds(self._state.entry.start_time, end_time),
            is_running=False,
        )
        self._state = Stopped(entry)
        logger.info(f"Stopped timer after {entry.duration}s")
        return entry

    def edit_duration(self, hours: Any, minutes: Any, seconds: Any) -> Optional[TimeEntry]:
        """Override the duration of the staged entry.

        Returns:
            Updated entry, or None if there is no stopped entry
        """
        if not isinstance(self._state, Stopped):
            logger.warning("No stopped entry, ignoring duration edit")
            return None

        entry = replace(
            self._state.entry, edited_duration=to_seconds(hours, minutes, seconds)
        )
        self._state = Stopped(entry)
        return entry

    def save(self) -> Optional[TimeEntry]:
        """Release the staged entry for committing and return to Idle.

        Returns:
            Staged entry, or None if there is no stopped entry
        """
        if not isinstance(self._state, Stopped):
            logger.warning("No stopped entry, ignoring save")
            return None

        entry = self._state.entry
        self._state = Idle()
        return entry

    def discard(self) -> bool:
        """Drop the staged entry without saving it.

        Returns:
            True if an entry was discarded
        """
        if not isinstance(self._state, Stopped):
            return False

        logger.info(f"Discarding unsaved entry {self._state.entry.id}")
        self._state = Idle()
        return True

    def elapsed(self, now: Optional[datetime] = None) -> int:
        """Seconds to show on the clock.

        Running sessions are measured against the wall clock; stopped ones
        show the staged entry's effective duration.
        """
        if isinstance(self._state, Running):
            return elapsed_seconds(self._state.entry.start_time, now or self.clock())
        if isinstance(self._state, Stopped):
            return effective_duration(self._state.entry)
        return 0

    def to_entry(self) -> Optional[TimeEntry]:
        """Entry to persist in the current-entry slot (None when idle)."""
        return self.entry


def ticks(
    session: TimerSession,
    interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    limit: Optional[int] = None,
) -> Iterator[int]:
    """Yield the elapsed seconds once per interval while the timer runs.

    Reads only; the session is never modified.

    Args:
        session: Session to watch
        interval: Seconds between ticks
        sleep: Sleep function
        limit: Stop after this many ticks (None for no limit)
    """
    count = 0
    while session.is_running and (limit is None or count < limit):
        yield session.elapsed()
        count += 1
        if limit is not None and count >= limit:
            break
        sleep(interval)
