"""Tests for storage manager."""

import json
import tempfile
from datetime import datetime
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from timesheet.core.models import Project, TimeEntry
from timesheet.core.storage import (
    CURRENT_ENTRY_KEY,
    ENTRIES_KEY,
    PROJECTS_KEY,
    StorageManager,
)


@pytest.fixture  # type: ignore[misc]
def temp_storage() -> StorageManager:
    """Create a storage manager with temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield StorageManager(Path(tmpdir) / "data")


def make_entry(**overrides: object) -> TimeEntry:
    values: dict = {
        "project_id": "1",
        "project_name": "Design",
        "start_time": datetime(2024, 1, 1, 9, 0, 0),
        "end_time": datetime(2024, 1, 1, 10, 0, 0),
        "duration": 3600,
    }
    values.update(overrides)
    return TimeEntry(**values)


class TestKeyValue:
    """Test raw key-value operations."""

    def test_initialization_creates_data_dir(self, temp_storage: StorageManager) -> None:
        """Test initialization creates data dir."""
        assert temp_storage.data_dir.exists()

    def test_missing_key_reads_as_none(self, temp_storage: StorageManager) -> None:
        """Test missing key reads as none."""
        assert temp_storage.get(PROJECTS_KEY) is None
        assert temp_storage.has(PROJECTS_KEY) is False

    def test_set_and_get(self, temp_storage: StorageManager) -> None:
        """Test set and get."""
        temp_storage.set("some-key", {"a": [1, 2, 3]})

        assert temp_storage.has("some-key")
        assert temp_storage.get("some-key") == {"a": [1, 2, 3]}
        assert temp_storage.path_for("some-key").name == "some-key.json"

    def test_set_leaves_no_temp_file(self, temp_storage: StorageManager) -> None:
        """Test that the atomic write cleans up after itself."""
        temp_storage.set("some-key", [1])
        assert not list(temp_storage.data_dir.glob("*.tmp"))

    def test_remove(self, temp_storage: StorageManager) -> None:
        """Test remove."""
        temp_storage.set("some-key", 1)
        temp_storage.remove("some-key")

        assert temp_storage.get("some-key") is None

    def test_remove_missing_key_is_harmless(self, temp_storage: StorageManager) -> None:
        """Test remove missing key is harmless."""
        temp_storage.remove("never-written")

    def test_corrupted_file_raises(self, temp_storage: StorageManager) -> None:
        """Test corrupted file raises."""
        temp_storage.path_for(ENTRIES_KEY).write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match=ENTRIES_KEY):
            temp_storage.get(ENTRIES_KEY)

    def test_backup(self, temp_storage: StorageManager) -> None:
        """Test backup."""
        temp_storage.save_projects([Project(name="Design", color="#10B981")])
        temp_storage.save_entries([make_entry()])

        backup_path = temp_storage.backup("snapshot")

        assert backup_path == temp_storage.backup_dir / "snapshot"
        assert (backup_path / f"{PROJECTS_KEY}.json").exists()
        assert (backup_path / f"{ENTRIES_KEY}.json").exists()
        assert not (backup_path / f"{CURRENT_ENTRY_KEY}.json").exists()


class TestTypedSlots:
    """Test project, entry and current-entry slots."""

    def test_projects_absent_until_saved(self, temp_storage: StorageManager) -> None:
        """Test that an unwritten slot is distinguishable from an empty list."""
        assert temp_storage.load_projects() is None

        temp_storage.save_projects([])
        assert temp_storage.load_projects() == []

    def test_save_and_load_projects(self, temp_storage: StorageManager) -> None:
        """Test save and load projects."""
        projects = [
            Project(id="1", name="Design", color="#10B981"),
            Project(id="2", name="Build", color="#3B82F6"),
        ]
        temp_storage.save_projects(projects)

        loaded = temp_storage.load_projects()

        assert loaded is not None
        assert [p.id for p in loaded] == ["1", "2"]
        assert loaded[0].name == "Design"
        assert loaded[0].created_at == projects[0].created_at

    def test_save_and_load_entries_keeps_order(self, temp_storage: StorageManager) -> None:
        """Test save and load entries keeps order."""
        entries = [
            make_entry(id="b", start_time=datetime(2024, 1, 2, 9, 0, 0)),
            make_entry(id="a", edited_duration=60),
        ]
        temp_storage.save_entries(entries)

        loaded = temp_storage.load_entries()

        assert [e.id for e in loaded] == ["b", "a"]
        assert loaded[1].edited_duration == 60
        assert loaded[1].duration == 3600

    def test_entries_empty_when_absent(self, temp_storage: StorageManager) -> None:
        """Test entries empty when absent."""
        assert temp_storage.load_entries() == []

    def test_entries_file_shape(self, temp_storage: StorageManager) -> None:
        """Test that the stored document is a list of camelCase objects."""
        temp_storage.save_entries([make_entry(id="x")])

        with open(temp_storage.path_for(ENTRIES_KEY), encoding="utf-8") as f:
            raw = json.load(f)

        assert isinstance(raw, list)
        assert raw[0]["projectId"] == "1"
        assert raw[0]["isRunning"] is False

    def test_current_entry_round_trip(self, temp_storage: StorageManager) -> None:
        """Test current entry round trip."""
        entry = make_entry(end_time=None, duration=0, is_running=True)
        temp_storage.save_current_entry(entry)

        loaded = temp_storage.load_current_entry()

        assert loaded is not None
        assert loaded.id == entry.id
        assert loaded.is_running is True

    def test_saving_no_current_entry_removes_slot(self, temp_storage: StorageManager) -> None:
        """Test saving no current entry removes slot."""
        temp_storage.save_current_entry(make_entry())
        temp_storage.save_current_entry(None)

        assert temp_storage.has(CURRENT_ENTRY_KEY) is False
        assert temp_storage.load_current_entry() is None

    def test_clear_current_entry(self, temp_storage: StorageManager) -> None:
        """Test clear current entry."""
        temp_storage.save_current_entry(make_entry())
        temp_storage.clear_current_entry()

        assert temp_storage.has(CURRENT_ENTRY_KEY) is False
