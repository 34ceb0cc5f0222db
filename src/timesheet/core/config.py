"""Configuration management for Timesheet."""

import copy
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]


class ConfigManager:
    """Manage application configuration."""

    DEFAULT_CONFIG = {
        "version": "1.0",
        "general": {
            "data_dir": "~/.timesheet/data",
            "week_start": "sunday",
        },
        "history": {
            "page_size": 10,
        },
        "charts": {
            "daily_days": 30,
            "weekly_weeks": 8,
        },
        "timer": {
            "tick_interval": 1.0,
        },
        "projects": {
            "default_color": "#3B82F6",
        },
        "display": {
            "show_seconds": True,
        },
        "advanced": {
            "backup_on_start": False,
            "log_level": "WARNING",
        },
    }

    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "version": {"type": "string"},
            "general": {
                "type": "object",
                "properties": {
                    "data_dir": {"type": "string"},
                    "week_start": {"type": "string", "enum": ["monday", "sunday"]},
                },
            },
            "history": {
                "type": "object",
                "properties": {
                    "page_size": {"type": "integer", "minimum": 1, "maximum": 500},
                },
            },
            "charts": {
                "type": "object",
                "properties": {
                    "daily_days": {"type": "integer", "minimum": 1, "maximum": 366},
                    "weekly_weeks": {"type": "integer", "minimum": 1, "maximum": 104},
                },
            },
            "timer": {
                "type": "object",
                "properties": {
                    "tick_interval": {"type": "number", "exclusiveMinimum": 0, "maximum": 60},
                },
            },
            "projects": {
                "type": "object",
                "properties": {
                    "default_color": {"type": "string", "pattern": "^#[0-9A-Fa-f]{6}$"},
                },
            },
            "display": {
                "type": "object",
                "properties": {
                    "show_seconds": {"type": "boolean"},
                },
            },
            "advanced": {
                "type": "object",
                "properties": {
                    "backup_on_start": {"type": "boolean"},
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                },
            },
        },
        "required": ["version"],
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Load the config file, creating it with defaults on first use.

        Args:
            config_path: Path to config file. Defaults to ~/.timesheet/config.yml

        Raises:
            ValueError: If the existing file fails validation. The file is
                moved aside to ``config.yml.backup`` and defaults are written.
        """
        self.config_path = Path(config_path or Path.home() / ".timesheet" / "config.yml")
        self._config: dict[str, Any] = copy.deepcopy(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            self.save()
            return

        with open(self.config_path, encoding="utf-8") as f:
            _overlay(self._config, yaml.safe_load(f) or {})

        try:
            self.validate()
        except ValueError as e:
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.replace(backup_path)
            self.reset()
            raise ValueError(f"{e}. Old config backed up to {backup_path}, defaults restored")

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``charts.weekly_weeks``.

        Returns ``default`` when any part of the path is missing.
        """
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key and save.

        Raises:
            ValueError: If the new value fails validation. Nothing is saved
                and the previous value is kept.
        """
        updated = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        node = updated
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

        self._check(updated)
        self._config = updated
        self.save()

    def validate(self) -> bool:
        """Validate the loaded settings.

        Raises:
            ValueError: If a setting is out of range or of the wrong type
        """
        self._check(self._config)
        return True

    def _check(self, candidate: dict[str, Any]) -> None:
        try:
            validate(instance=candidate, schema=self.CONFIG_SCHEMA)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e.message}")

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)

    def reset(self) -> None:
        """Restore and save the default settings."""
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """List every leaf setting as a dotted key, in file order."""
        return list(_leaf_keys(self._config))

    @property
    def data_dir(self) -> Path:
        """Configured data directory with ~ expanded."""
        return Path(self.get("general.data_dir")).expanduser()


def _overlay(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Recursively copy ``override`` onto ``base`` so unset keys keep defaults."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _overlay(base[key], value)
        else:
            base[key] = value


def _leaf_keys(node: dict[str, Any], prefix: str = "") -> Iterator[str]:
    for key, value in node.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaf_keys(value, f"{dotted}.")
        else:
            yield dotted
