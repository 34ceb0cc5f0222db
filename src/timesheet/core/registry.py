"""Project registry."""

import logging
import re
from datetime import datetime
from typing import Iterator, Optional

from timesheet.core.models import FALLBACK_COLOR, Project

logger = logging.getLogger(__name__)

PALETTE = [
    "#3B82F6",
    "#10B981",
    "#F97316",
    "#EF4444",
    "#8B5CF6",
    "#06B6D4",
    "#84CC16",
    "#F59E0B",
    "#EC4899",
    "#6B7280",
]

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def is_valid_color(color: str) -> bool:
    """Check that a color is a #RRGGBB string."""
    return bool(_HEX_COLOR.match(color))


def default_projects() -> list[Project]:
    """Projects offered on first run, before anything has been saved."""
    now = datetime.now()
    return [
        Project(id="1", name="Software Engineering", color="#3B82F6", created_at=now),
        Project(id="2", name="UI/UX Design", color="#10B981", created_at=now),
        Project(id="3", name="Project Management", color="#F97316", created_at=now),
    ]


class ProjectRegistry:
    """Ordered, in-memory list of projects."""

    def __init__(self, projects: Optional[list[Project]] = None):
        self._projects: list[Project] = list(projects or [])

    def __iter__(self) -> Iterator[Project]:
        return iter(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    def to_list(self) -> list[Project]:
        return list(self._projects)

    def get(self, project_id: str) -> Optional[Project]:
        """Get project by ID.

        Args:
            project_id: Project ID

        Returns:
            Project or None if not found
        """
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def find(self, id_or_name: str) -> Optional[Project]:
        """Resolve a project by ID, then by exact name."""
        project = self.get(id_or_name)
        if project:
            return project
        for candidate in self._projects:
            if candidate.name == id_or_name:
                return candidate
        return None

    def color_for(self, project_id: str) -> str:
        """Display color for a project ID, with a fallback for deleted projects."""
        project = self.get(project_id)
        return project.color if project else FALLBACK_COLOR

    def add(self, name: str, color: str = PALETTE[0]) -> Optional[Project]:
        """Append a new project.

        Args:
            name: Display name (surrounding whitespace is trimmed)
            color: Display color

        Returns:
            Created project, or None if the name is blank
        """
        name = name.strip()
        if not name:
            logger.warning("Ignoring project with empty name")
            return None

        project = Project(name=name, color=color)
        self._projects.append(project)
        logger.info(f"Added project {project.id}: {name}")
        return project

    def update(self, project_id: str, name: str, color: str) -> Optional[Project]:
        """Rename and recolor a project.

        Returns:
            Updated project, or None if the ID is unknown or the name is blank
        """
        project = self.get(project_id)
        name = name.strip()
        if project is None or not name:
            logger.warning(f"Ignoring update of project {project_id}")
            return None

        project.name = name
        project.color = color
        logger.info(f"Updated project {project_id}: {name}")
        return project

    def delete(self, project_id: str) -> bool:
        """Remove a project record. Entries that reference it are not touched.

        Returns:
            True if deleted, False if not found
        """
        original_count = len(self._projects)
        self._projects = [p for p in self._projects if p.id != project_id]

        if len(self._projects) == original_count:
            logger.warning(f"Ignoring delete of unknown project {project_id}")
            return False

        logger.info(f"Deleted project {project_id}")
        return True
