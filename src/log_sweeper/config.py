"""Configuration management for the log sweeper."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


class SweepConfigError(ValueError):
    """Raised when the sweep cannot start because of a configuration problem."""


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean from YAML or string input.

    Args:
        value: Raw value (bool, int, str or None).
        default: Value returned when ``value`` is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def _parse_days(value: Any) -> int:
    """Parse a whole number of days, rejecting booleans and fractions."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise SweepConfigError(f"keep must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SweepConfigError(f"keep must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class SweepConfig:
    """Options for a single sweep run."""

    # Root directory to walk
    directory: Path = Path(".")

    # Filename regex, must contain a (?P<date>...) group
    match: str = ""

    # strptime format applied to the date group
    layout: str = ""

    # Retention window in days
    keep_days: int = 0

    dry_run: bool = False

    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/log-sweeper/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> SweepConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None; a missing
                default file yields the built-in defaults.

        Returns:
            Loaded configuration.

        Raises:
            SweepConfigError: If an explicit file is missing or the file is invalid.

        """
        if config_path is None:
            config_path = cls.get_config_path()
            if not config_path.exists():
                return cls()
        elif not config_path.exists():
            raise SweepConfigError(f"Config file not found: {config_path}")

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SweepConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise SweepConfigError(f"Config file must contain a mapping: {config_path}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> SweepConfig:
        """Create config from dictionary."""
        values: dict[str, Any] = {}

        # Empty keys mean "use the default"
        if data.get("dir") is not None:
            values["directory"] = Path(os.path.expanduser(str(data["dir"])))
        if data.get("match") is not None:
            values["match"] = str(data["match"])
        if data.get("layout") is not None:
            values["layout"] = str(data["layout"])
        if data.get("keep") is not None:
            values["keep_days"] = _parse_days(data["keep"])
        if "dry" in data:
            values["dry_run"] = parse_bool(data["dry"], False)

        if "logging" in data:
            logging_cfg = data["logging"] or {}
            if not isinstance(logging_cfg, dict):
                raise SweepConfigError("logging must be a mapping")
            if logging_cfg.get("file"):
                values["log_file"] = Path(os.path.expanduser(str(logging_cfg["file"])))
            if logging_cfg.get("level") is not None:
                values["log_level"] = str(logging_cfg["level"]).upper()

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> SweepConfig:
        """Return a copy where every non-None override replaces the current value."""
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate_log_level(self) -> int:
        """Resolve ``log_level`` to a numeric ``logging`` level.

        Raises:
            SweepConfigError: If the level name is unknown.

        """
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            raise SweepConfigError(f"Invalid log_level: {self.log_level!r}")
        return level

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "dir": str(self.directory),
            "match": self.match,
            "layout": self.layout,
            "keep": self.keep_days,
            "dry": self.dry_run,
            "logging": {
                "file": str(self.log_file) if self.log_file else None,
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
