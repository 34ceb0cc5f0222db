"""Core time tracking engine."""

import logging
from datetime import datetime
from typing import Any, Optional

from timesheet.core.entries import EntryStore
from timesheet.core.models import Project, TimeEntry
from timesheet.core.registry import PALETTE, ProjectRegistry, default_projects
from timesheet.core.session import Clock, Idle, SessionState, TimerSession, session_from_entry
from timesheet.core.storage import StorageManager

logger = logging.getLogger(__name__)


class TimeTracker:
    """Core time tracking functionality.

    Holds projects, saved entries and the timer session in memory and writes
    every change straight through to storage.
    """

    def __init__(self, storage: Optional[StorageManager] = None, clock: Clock = datetime.now):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
            clock: Callable returning the current time
        """
        self.storage = storage or StorageManager()

        projects = self.storage.load_projects()
        if projects is None:
            projects = default_projects()
            self.storage.save_projects(projects)
            logger.info("Initialized default projects")

        self.projects = ProjectRegistry(projects)
        self.entries = EntryStore(self.storage.load_entries())
        self.session = TimerSession(self._load_session(), clock=clock)

    def _load_session(self) -> SessionState:
        entry = self.storage.load_current_entry()
        try:
            return session_from_entry(entry)
        except ValueError as e:
            logger.error(f"Ignoring inconsistent current entry: {e}")
            self.storage.clear_current_entry()
            return Idle()

    def _flush_projects(self) -> None:
        self.storage.save_projects(self.projects.to_list())

    def _flush_entries(self) -> None:
        self.storage.save_entries(self.entries.to_list())

    def _flush_session(self) -> None:
        self.storage.save_current_entry(self.session.to_entry())

    # Projects

    def add_project(self, name: str, color: str = PALETTE[0]) -> Optional[Project]:
        project = self.projects.add(name, color)
        if project:
            self._flush_projects()
        return project

    def update_project(self, project_id: str, name: str, color: str) -> Optional[Project]:
        """Rename and recolor a project, refreshing the name on its entries."""
        project = self.projects.update(project_id, name, color)
        if project is None:
            return None

        renamed = self.entries.rename_project(project_id, project.name)
        self._flush_projects()
        if renamed:
            self._flush_entries()
            logger.info(f"Renamed project on {renamed} entries")
        return project

    def delete_project(self, project_id: str) -> bool:
        deleted = self.projects.delete(project_id)
        if deleted:
            self._flush_projects()
        return deleted

    # Timer

    def start(self, project_id: str) -> Optional[TimeEntry]:
        """Start the timer for a project.

        Returns:
            Running entry, or None if the project is unknown or a timer
            is already running
        """
        project = self.projects.get(project_id)
        if project is None:
            logger.warning(f"Cannot start timer for unknown project {project_id}")
            return None

        entry = self.session.start(project)
        if entry:
            self._flush_session()
        return entry

    def stop(self) -> Optional[TimeEntry]:
        entry = self.session.stop()
        if entry:
            self._flush_session()
        return entry

    def edit_current_duration(
        self, hours: Any, minutes: Any, seconds: Any
    ) -> Optional[TimeEntry]:
        entry = self.session.edit_duration(hours, minutes, seconds)
        if entry:
            self._flush_session()
        return entry

    def save(self) -> Optional[TimeEntry]:
        """Commit the stopped entry to the entry store.

        Returns:
            Saved entry, or None if there was no stopped entry
        """
        entry = self.session.save()
        if entry is None:
            return None

        self.entries.append(entry)
        self._flush_entries()
        self._flush_session()
        return entry

    def discard(self) -> bool:
        discarded = self.session.discard()
        if discarded:
            self._flush_session()
        return discarded

    def status(self) -> Optional[TimeEntry]:
        """Get the running or staged entry, if any."""
        return self.session.entry

    def elapsed(self, now: Optional[datetime] = None) -> int:
        return self.session.elapsed(now)

    # Entries

    def get_entries(self) -> list[TimeEntry]:
        return self.entries.to_list()

    def update_entry(self, entry_id: str, **changes: Any) -> Optional[TimeEntry]:
        entry = self.entries.update(entry_id, **changes)
        if entry:
            self._flush_entries()
        return entry

    def edit_entry_duration(
        self, entry_id: str, hours: Any, minutes: Any, seconds: Any
    ) -> Optional[TimeEntry]:
        entry = self.entries.edit_duration(entry_id, hours, minutes, seconds)
        if entry:
            self._flush_entries()
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry by ID.

        Returns:
            True if deleted, False if not found
        """
        deleted = self.entries.delete(entry_id)
        if deleted:
            self._flush_entries()
        return deleted
