"""
FILE: taskflow/cli/commands/__init__.py
PURPOSE: CLI command modules
"""

# Export all command handlers for easy importing
from .tasks import (
    add,
    ls,
    edit,
    rm,
    status,
    priority,
    archive,
    due,
    note,
    recur,
    move,
)
from .workflow import (
    clear_completed,
    stats,
    export,
    tick,
)
from .projects import (
    project_add,
    project_ls,
    project_rm,
    project_rename,
    project_color,
)
from .system import (
    version,
    repl,
)

__all__ = [
    "add",
    "ls",
    "edit",
    "rm",
    "status",
    "priority",
    "archive",
    "due",
    "note",
    "recur",
    "move",
    "clear_completed",
    "stats",
    "export",
    "tick",
    "project_add",
    "project_ls",
    "project_rm",
    "project_rename",
    "project_color",
    "version",
    "repl",
]
