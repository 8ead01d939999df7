"""
FILE: taskflow/cli/main.py
PURPOSE: Typer-based CLI for one-shot task management commands
EXPORTS:
  - app (Typer application)
  - main() (entry point)
  - open_store() -> TaskStore
  - print_json(text) - Unwrapped JSON to stdout
  - resolve_task(store, task_id) -> (Project, Task)
  - resolve_project(store, ref) -> Project
  - version() / repl() - System commands
  - add() / ls() / edit() / rm() / status() / priority() / archive()
    / due() / note() / recur() / move() - Task commands
  - clear_completed() / stats() / export() / tick() - Workflow commands
  - project_add() / project_ls() / project_rm() / project_rename()
    / project_color() - Project commands
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - taskflow.core.service (TaskStore)
  - taskflow.core.exceptions (error handling)
  - taskflow.config / taskflow.logging_setup (settings, logging)
NOTES:
  - Data commands support --json and --raw flags
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - Each invocation loads the store from disk and writes through on change
  - Undo history is per session, so `undo` lives in the REPL only
"""

import sys
from typing import Optional, Tuple

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console

from ..config import load_settings
from ..logging_setup import setup_logging
from ..core.service import TaskStore
from ..core.models import Project, Task
from ..core.exceptions import PersistenceError

# Typer app setup
app = typer.Typer(
    name="taskflow",
    help="Personal task and project tracker",
    add_completion=False,
)

# Project sub-command group
project_app = typer.Typer(
    name="project",
    help="Project management commands",
)
app.add_typer(project_app, name="project")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Version
__version__ = "0.1.0"


def _report_persistence_error(error: PersistenceError) -> None:
    error_console.print(f"[yellow]Warning:[/yellow] changes not saved: {error}")


def print_json(text: str) -> None:
    """Print JSON to stdout unwrapped and without markup or highlighting."""
    console.print(text, soft_wrap=True, markup=False, highlight=False, emoji=False)


def open_store() -> TaskStore:
    """
    Configure logging and load the store described by the environment.

    Persistence failures are reported on stderr; the command still succeeds.
    """
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    return TaskStore.load(
        settings.db_path,
        undo_depth=settings.undo_depth,
        on_persistence_error=_report_persistence_error,
    )


def resolve_task(store: TaskStore, task_id: str) -> Tuple[Project, Task]:
    """Find a task by id anywhere, or exit with an error."""
    found = store.find_task(task_id)
    if not found:
        error_console.print(f"[red]Error:[/red] Task {task_id} not found")
        raise typer.Exit(1)
    return found


def resolve_project(store: TaskStore, ref: Optional[str]) -> Project:
    """
    Find a project by id or (case-insensitive) name, or exit with an error.

    With no ref, the first project is used.
    """
    if ref is None:
        projects = store.projects
        if not projects:
            error_console.print("[red]Error:[/red] No projects yet. Create one with 'taskflow project add <name>'")
            raise typer.Exit(1)
        return projects[0]

    project = store.get_project(ref) or store.find_project_by_name(ref)
    if not project:
        error_console.print(f"[red]Error:[/red] Project '{ref}' not found")
        raise typer.Exit(1)
    return project


@app.callback(invoke_without_command=True)
def default_command(ctx: typer.Context):
    """
    Default callback - launches REPL when no command is specified.
    """
    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        try:
            repl_main()
        except Exception as e:
            error_console.print(f"[red]Error starting REPL:[/red] {e}")
            raise typer.Exit(1)


# Import command modules to register commands with app
# Commands are decorated with @app.command() in their modules
from .commands import (  # noqa: E402
    # System commands
    version,
    repl,
    # Task commands
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
    # Workflow commands
    clear_completed,
    stats,
    export,
    tick,
    # Project commands
    project_add,
    project_ls,
    project_rm,
    project_rename,
    project_color,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
