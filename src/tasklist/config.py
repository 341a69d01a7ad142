"""Configuration loader for tasklist (global + project TOML over built-in defaults)."""

from __future__ import annotations

import copy
import logging
import os
import platform
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Python <3.11
    import tomli as tomllib  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "general": {
        "log_level": "warning",
        "log_file": "",
    },
    "storage": {
        "tasks_file": "tasks.json",
    },
}


class ConfigLoader:
    """
    Loads configuration with priority resolution.

    Priority (highest → lowest):
    1. Project config (.tasklist/config.toml)
    2. Global config (~/.config/tasklist/config.toml)
    3. Built-in defaults

    Missing files are skipped; nothing is written to disk.
    """

    def __init__(
        self,
        global_dir: Optional[Path] = None,
        project_dir: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.cwd = cwd or Path.cwd()
        self.global_dir = global_dir or self.get_global_config_dir()
        self.project_dir = project_dir or self.get_project_config_dir(self.cwd)

        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self._load_all()

    # ------------------------------------------------------------------ #
    # Public getters
    # ------------------------------------------------------------------ #
    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-separated key."""
        value: Any = self.config
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    @property
    def tasks_file(self) -> Path:
        """Tasks file path, relative paths resolved against the working directory."""
        path = Path(str(self.get("storage.tasks_file", "tasks.json"))).expanduser()
        return path if path.is_absolute() else self.cwd / path

    @property
    def log_level(self) -> int:
        name = str(self.get("general.log_level", "warning")).upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            logger.warning("Unknown log level %r, using WARNING", name)
            return logging.WARNING
        return level

    @property
    def log_file(self) -> Optional[Path]:
        """Log file path resolved like tasks_file, or None when file logging is off."""
        raw = self.get("general.log_file", "")
        if not raw:
            return None
        path = Path(str(raw)).expanduser()
        return path if path.is_absolute() else self.cwd / path

    # ------------------------------------------------------------------ #
    # Load/merge helpers
    # ------------------------------------------------------------------ #
    def _load_all(self) -> None:
        """Load all configuration files with proper priority."""
        self._load_file(self.global_dir / "config.toml")
        if self.project_dir:
            self._load_file(self.project_dir / "config.toml")

    def _load_file(self, config_file: Path) -> None:
        if not config_file.is_file():
            return
        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.error("Ignoring config file %s: %s", config_file, exc)
            return
        self._deep_merge(self.config, data)
        logger.debug("Loaded config from %s", config_file)

    # ------------------------------------------------------------------ #
    # Static paths/helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def get_global_config_dir() -> Path:
        """Get platform-specific global config directory following XDG conventions."""
        if platform.system() == "Windows":
            base = Path(os.environ.get("APPDATA", "~\\AppData\\Roaming")).expanduser()
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
        return base / "tasklist"

    @staticmethod
    def get_project_config_dir(start: Path) -> Optional[Path]:
        """Find .tasklist directory in the given or parent directories."""
        for parent in [start] + list(start.parents):
            config_dir = parent / ".tasklist"
            if config_dir.is_dir():
                return config_dir
        return None

    def _deep_merge(self, base: dict, override: dict) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value


Config = ConfigLoader

__all__ = ["ConfigLoader", "Config", "DEFAULT_CONFIG"]
