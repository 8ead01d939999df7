"""
FILE: taskflow/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .tasks import (
    handle_add_command,
    handle_ls_command,
    handle_edit_command,
    handle_rm_command,
    handle_status_command,
    handle_priority_command,
    handle_archive_command,
    handle_due_command,
    handle_note_command,
    handle_recur_command,
    handle_move_command,
)
from .workflow import (
    handle_clear_completed_command,
    handle_undo_command,
    handle_stats_command,
    handle_export_command,
    handle_tick_command,
)
from .projects import (
    handle_use_command,
    handle_project_add_command,
    handle_project_ls_command,
    handle_project_rm_command,
    handle_project_rename_command,
    handle_project_color_command,
    handle_project_command,
)
from .system import (
    handle_search_command,
    handle_sort_command,
    handle_archived_command,
    handle_help_command,
    handle_clear_command,
)

__all__ = [
    "handle_add_command",
    "handle_ls_command",
    "handle_edit_command",
    "handle_rm_command",
    "handle_status_command",
    "handle_priority_command",
    "handle_archive_command",
    "handle_due_command",
    "handle_note_command",
    "handle_recur_command",
    "handle_move_command",
    "handle_clear_completed_command",
    "handle_undo_command",
    "handle_stats_command",
    "handle_export_command",
    "handle_tick_command",
    "handle_use_command",
    "handle_project_add_command",
    "handle_project_ls_command",
    "handle_project_rm_command",
    "handle_project_rename_command",
    "handle_project_color_command",
    "handle_project_command",
    "handle_search_command",
    "handle_sort_command",
    "handle_archived_command",
    "handle_help_command",
    "handle_clear_command",
]
