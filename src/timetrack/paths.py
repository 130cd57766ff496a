"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "timetrack"
CONFIG_FILE_NAME = "config.toml"
ACTIVITY_FILE_NAME = "activities"
ENTRY_FILE_NAME = "entries"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False)


def get_data_dir(override: Optional[Path] = None) -> Path:
    """Return the base directory for persistent data."""
    path = Path(override) if override else Path(_dirs().user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_activity_file_path(data_dir: Optional[Path] = None) -> Path:
    return get_data_dir(data_dir) / ACTIVITY_FILE_NAME


def get_entry_file_path(data_dir: Optional[Path] = None) -> Path:
    return get_data_dir(data_dir) / ENTRY_FILE_NAME


def get_config_path() -> Path:
    return Path(_dirs().user_config_path) / CONFIG_FILE_NAME
