"""
FILE: taskflow/config.py
PURPOSE: Settings loaded from TASKFLOW_* environment variables
EXPORTS:
  - Settings (frozen dataclass)
  - load_settings() -> Settings
DEPENDENCIES:
  - os, pathlib, dataclasses (stdlib)
NOTES:
  - One Settings object per process, built by the CLI/REPL entry points
  - Bad numeric values fall back to defaults instead of failing startup
  - TASKFLOW_HOME holds the database (taskflow.db)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .core.constants import DEFAULT_RECURRENCE_INTERVAL, DEFAULT_UNDO_DEPTH

ENV_PREFIX = "TASKFLOW"
DEFAULT_HOME = Path.home() / ".taskflow"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_log_level(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip().upper()
    level = logging.getLevelName(raw) if raw else default
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class Settings:
    home: Path
    recurrence_interval: float
    undo_depth: int
    log_level: int
    log_file: Optional[Path]

    @property
    def db_path(self) -> Path:
        return self.home / "taskflow.db"


def load_settings() -> Settings:
    """Read the environment into a Settings object."""
    interval = _env_float(_k("RECURRENCE_INTERVAL"), DEFAULT_RECURRENCE_INTERVAL)
    undo_depth = _env_int(_k("UNDO_DEPTH"), DEFAULT_UNDO_DEPTH)
    return Settings(
        home=_env_path(_k("HOME"), DEFAULT_HOME),
        recurrence_interval=interval if interval > 0 else DEFAULT_RECURRENCE_INTERVAL,
        undo_depth=undo_depth if undo_depth > 0 else DEFAULT_UNDO_DEPTH,
        log_level=_env_log_level(_k("LOG_LEVEL"), logging.WARNING),
        log_file=_env_path(_k("LOG_FILE"), None),
    )
