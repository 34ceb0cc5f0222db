"""Tests for the project registry."""

import pytest

from timesheet.core.models import FALLBACK_COLOR, Project
from timesheet.core.registry import PALETTE, ProjectRegistry, default_projects, is_valid_color


@pytest.fixture
def registry() -> ProjectRegistry:
    return ProjectRegistry(
        [
            Project(id="1", name="Design", color="#10B981"),
            Project(id="2", name="Build", color="#3B82F6"),
        ]
    )


class TestProjectRegistry:
    """Test ProjectRegistry."""

    def test_add_appends_project(self, registry: ProjectRegistry) -> None:
        """Test add appends project."""
        project = registry.add("Research", "#8B5CF6")

        assert project is not None
        assert project.name == "Research"
        assert project.color == "#8B5CF6"
        assert [p.name for p in registry] == ["Design", "Build", "Research"]

    def test_add_trims_name(self, registry: ProjectRegistry) -> None:
        """Test add trims name."""
        project = registry.add("  Research  ", "#8B5CF6")
        assert project is not None
        assert project.name == "Research"

    def test_add_blank_name_is_ignored(self, registry: ProjectRegistry) -> None:
        """Test add blank name is ignored."""
        assert registry.add("   ", "#8B5CF6") is None
        assert len(registry) == 2

    def test_add_uses_first_palette_color_by_default(self, registry: ProjectRegistry) -> None:
        """Test add uses first palette color by default."""
        project = registry.add("Research")
        assert project is not None
        assert project.color == PALETTE[0]

    def test_add_allows_duplicate_names(self, registry: ProjectRegistry) -> None:
        """Test add allows duplicate names."""
        first = registry.add("Design", "#10B981")
        assert first is not None
        assert first.id != "1"
        assert len(registry) == 3

    def test_update(self, registry: ProjectRegistry) -> None:
        """Test update."""
        updated = registry.update("1", "Product Design", "#EC4899")

        assert updated is not None
        assert registry.get("1") is updated
        assert updated.name == "Product Design"
        assert updated.color == "#EC4899"

    def test_update_unknown_id_is_ignored(self, registry: ProjectRegistry) -> None:
        """Test update unknown id is ignored."""
        assert registry.update("missing", "Name", "#000000") is None
        assert [p.name for p in registry] == ["Design", "Build"]

    def test_delete(self, registry: ProjectRegistry) -> None:
        """Test delete."""
        assert registry.delete("1") is True
        assert registry.get("1") is None
        assert len(registry) == 1

    def test_delete_unknown_id(self, registry: ProjectRegistry) -> None:
        """Test delete unknown id."""
        assert registry.delete("missing") is False
        assert len(registry) == 2

    def test_find_by_id_or_name(self, registry: ProjectRegistry) -> None:
        """Test find by id or name."""
        assert registry.find("2") is registry.get("2")
        assert registry.find("Design") is registry.get("1")
        assert registry.find("Nope") is None

    def test_color_for_deleted_project(self, registry: ProjectRegistry) -> None:
        """Test color for deleted project."""
        assert registry.color_for("1") == "#10B981"
        registry.delete("1")
        assert registry.color_for("1") == FALLBACK_COLOR


def test_default_projects() -> None:
    """Test default projects."""
    projects = default_projects()

    assert [(p.id, p.name, p.color) for p in projects] == [
        ("1", "Software Engineering", "#3B82F6"),
        ("2", "UI/UX Design", "#10B981"),
        ("3", "Project Management", "#F97316"),
    ]


@pytest.mark.parametrize(
    "color,valid",
    [("#3B82F6", True), ("#abcdef", True), ("3B82F6", False), ("#FFF", False), ("#GGGGGG", False)],
)
def test_is_valid_color(color: str, valid: bool) -> None:
    """Test is valid color."""
    assert is_valid_color(color) is valid
