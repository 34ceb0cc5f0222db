"""Committed time entry store."""

import logging
from dataclasses import fields
from typing import Any, Iterator, Optional

from timesheet.core.models import TimeEntry, to_seconds

logger = logging.getLogger(__name__)

_ENTRY_FIELDS = {f.name for f in fields(TimeEntry)}


class EntryStore:
    """Ordered list of saved time entries."""

    def __init__(self, entries: Optional[list[TimeEntry]] = None):
        self._entries: list[TimeEntry] = list(entries or [])

    def __iter__(self) -> Iterator[TimeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self) -> list[TimeEntry]:
        return list(self._entries)

    def get(self, entry_id: str) -> Optional[TimeEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def append(self, entry: TimeEntry) -> None:
        self._entries.append(entry)
        logger.info(f"Saved entry {entry.id} ({entry.project_name})")

    def update(self, entry_id: str, **changes: Any) -> Optional[TimeEntry]:
        """Merge field values into an existing entry.

        Args:
            entry_id: ID of entry to edit
            **changes: TimeEntry attribute names and their new values

        Returns:
            Updated entry, or None if not found

        Raises:
            TypeError: If a field name is not a TimeEntry attribute
        """
        unknown = set(changes) - _ENTRY_FIELDS
        if unknown:
            raise TypeError(f"Unknown entry fields: {', '.join(sorted(unknown))}")

        entry = self.get(entry_id)
        if entry is None:
            logger.warning(f"Ignoring update of unknown entry {entry_id}")
            return None

        for name, value in changes.items():
            setattr(entry, name, value)

        logger.info(f"Updated entry {entry_id}: {', '.join(sorted(changes))}")
        return entry

    def edit_duration(
        self, entry_id: str, hours: Any, minutes: Any, seconds: Any
    ) -> Optional[TimeEntry]:
        """Override the duration of a saved entry, keeping the measured one."""
        return self.update(entry_id, edited_duration=to_seconds(hours, minutes, seconds))

    def delete(self, entry_id: str) -> bool:
        """Delete an entry by ID.

        Returns:
            True if deleted, False if not found
        """
        original_count = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]

        if len(self._entries) == original_count:
            logger.warning(f"Ignoring delete of unknown entry {entry_id}")
            return False

        logger.info(f"Deleted entry {entry_id}")
        return True

    def rename_project(self, project_id: str, name: str) -> int:
        """Refresh the project name snapshot on every entry of a project.

        Returns:
            Number of entries changed
        """
        count = 0
        for entry in self._entries:
            if entry.project_id == project_id:
                entry.project_name = name
                count += 1
        return count
