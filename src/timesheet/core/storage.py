"""JSON key-value storage with atomic writes."""

import json
import logging
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from timesheet.core.models import Project, TimeEntry

logger = logging.getLogger(__name__)

PROJECTS_KEY = "timesheet-projects"
ENTRIES_KEY = "timesheet-entries"
CURRENT_ENTRY_KEY = "timesheet-current-entry"

KEYS = (PROJECTS_KEY, ENTRIES_KEY, CURRENT_ENTRY_KEY)


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way.

    Args:
        file_obj: File object to unlock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Synchronous key-value store holding one JSON document per key."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.timesheet/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".timesheet" / "data"

        self.data_dir = Path(data_dir)
        self.backup_dir = self.data_dir.parent / "backups"
        self.log_dir = self.data_dir.parent / "logs"

        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file backing a key."""
        return self.data_dir / f"{key}.json"

    def _write_json_atomic(self, file_path: Path, value: Any) -> None:
        """Write JSON file atomically using temporary file and rename.

        Args:
            file_path: Target file path
            value: JSON-serializable value
        """
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                json.dump(value, f, indent=2, ensure_ascii=False)

                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(file_path)

        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def _read_json(self, file_path: Path) -> Any:
        """Read JSON file with a shared lock."""
        with open(file_path, encoding="utf-8") as f:
            _lock_file(f, exclusive=False)
            try:
                return json.load(f)
            finally:
                _unlock_file(f)

    # Raw key-value operations

    def has(self, key: str) -> bool:
        """Check whether a key is present."""
        return self.path_for(key).exists()

    def get(self, key: str) -> Any:
        """Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            Decoded value, or None if the key is absent

        Raises:
            ValueError: If the stored document is not valid JSON
        """
        file_path = self.path_for(key)
        if not file_path.exists():
            return None

        try:
            value = self._read_json(file_path)
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupted data in '{key}': {e}")

        logger.debug(f"Loaded {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under a key."""
        self._write_json_atomic(self.path_for(key), value)
        logger.debug(f"Saved {key}")

    def remove(self, key: str) -> None:
        """Remove a key. Does nothing if the key is absent."""
        file_path = self.path_for(key)
        if file_path.exists():
            file_path.unlink()
            logger.debug(f"Removed {key}")

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        backup_path.mkdir(parents=True, exist_ok=True)

        for key in KEYS:
            file_path = self.path_for(key)
            if file_path.exists():
                shutil.copy2(file_path, backup_path / file_path.name)

        logger.info(f"Backup written to {backup_path}")
        return backup_path

    # Typed slots

    def load_projects(self) -> Optional[list[Project]]:
        """Load projects, or None if the slot has never been written."""
        rows = self.get(PROJECTS_KEY)
        if rows is None:
            return None
        return [Project.from_dict(row) for row in rows]

    def save_projects(self, projects: list[Project]) -> None:
        self.set(PROJECTS_KEY, [p.to_dict() for p in projects])

    def load_entries(self) -> list[TimeEntry]:
        """Load committed entries in stored order."""
        rows = self.get(ENTRIES_KEY) or []
        return [TimeEntry.from_dict(row) for row in rows]

    def save_entries(self, entries: list[TimeEntry]) -> None:
        self.set(ENTRIES_KEY, [e.to_dict() for e in entries])

    def load_current_entry(self) -> Optional[TimeEntry]:
        """Load the running or staged entry, if any."""
        data = self.get(CURRENT_ENTRY_KEY)
        if data is None:
            return None
        return TimeEntry.from_dict(data)

    def save_current_entry(self, entry: Optional[TimeEntry]) -> None:
        """Write the current entry, removing the slot when there is none."""
        if entry is None:
            self.remove(CURRENT_ENTRY_KEY)
        else:
            self.set(CURRENT_ENTRY_KEY, entry.to_dict())

    def clear_current_entry(self) -> None:
        self.remove(CURRENT_ENTRY_KEY)
