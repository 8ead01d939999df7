"""
FILE: taskflow/repl/__init__.py
PURPOSE: REPL package for interactive task management
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - taskflow.core.service (TaskStore)
NOTES:
  - Entry point for interactive mode
  - Provides autocomplete, command history and background recurrence
"""

from .main import main

__all__ = ["main"]
