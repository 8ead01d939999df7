"""
FILE: taskflow/logging_setup.py
PURPOSE: Process-wide logging configuration for the CLI and REPL
EXPORTS:
  - setup_logging(level, log_file) -> None
DEPENDENCIES:
  - logging (stdlib)
  - rich.logging (RichHandler for the console)
NOTES:
  - Call once, early, from an entry point; library modules only do
    logging.getLogger(__name__)
  - Console output goes to stderr so --json/--raw stdout stays clean
  - Third-party loggers only reach the console at ERROR and above
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


class _ConsoleNoiseFilter(logging.Filter):
    """Keep taskflow logs; let other libraries through only on errors."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("taskflow"):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(level: int = logging.WARNING, log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Console level (TASKFLOW_LOG_LEVEL)
        log_file: Optional file receiving everything at DEBUG
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove handlers from an earlier call to avoid duplicates
    for handler in list(root.handlers):
        if getattr(handler, "_taskflow", False):
            root.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.addFilter(_ConsoleNoiseFilter())
    console_handler._taskflow = True
    root.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler._taskflow = True
        root.addHandler(file_handler)

    logging.captureWarnings(True)
