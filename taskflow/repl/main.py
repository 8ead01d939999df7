"""
FILE: taskflow/repl/main.py
PURPOSE: Interactive REPL for task management with prompt-toolkit
EXPORTS:
  - REPLContext - Session state (store, working project, view options)
  - repl_context - The session's REPLContext
  - execute_command(result) -> bool
  - run_repl() - Main REPL loop
  - main() - Entry point for REPL mode
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - taskflow.core.service (TaskStore)
  - taskflow.core.scheduler (background recurrence)
  - taskflow.repl.parser (command parsing)
  - taskflow.repl.completer (autocomplete)
NOTES:
  - One TaskStore for the whole session, so undo history lives here
  - The recurrence scheduler ticks on a daemon thread while the loop runs
  - Bottom toolbar shows the active task count and rotating tips
  - Search, archived view and due sort are session state, never persisted
  - Ctrl+D or "exit"/"quit" to exit
"""

import sys
from dataclasses import dataclass
from typing import List, Optional

# Fix Windows console encoding for Unicode characters
# Only wrap if not already wrapped to prevent issues
if sys.platform == "win32":
    import io
    if not isinstance(sys.stdout, io.TextIOWrapper) or sys.stdout.encoding != 'utf-8':
        try:
            sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
        except (AttributeError, ValueError):
            pass  # Already wrapped or unavailable
    if not isinstance(sys.stderr, io.TextIOWrapper) or sys.stderr.encoding != 'utf-8':
        try:
            sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')
        except (AttributeError, ValueError):
            pass  # Already wrapped or unavailable

import logging

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console

from ..config import load_settings
from ..logging_setup import setup_logging
from ..core.exceptions import PersistenceError
from ..core.models import Project
from ..core.scheduler import RecurrenceScheduler
from ..core.service import TaskStore
from ..core.view import ViewOptions
from .parser import ParseResult, parse_command
from .completer import create_completer

logger = logging.getLogger(__name__)

# Rich console for formatted output
console = Console()


# --- REPL Context (Session State) ---


@dataclass
class REPLContext:
    """
    Session state for the REPL.

    Attributes:
        store: The session's task store (set by run_repl)
        current_project_id: Working project for add/ls, or None for all
        query: Case-insensitive search filter for task text
        show_archived: Show only archived tasks instead of only active ones
        sort_by_due: Sort listings by due date instead of manual order
    """
    store: Optional[TaskStore] = None
    current_project_id: Optional[str] = None
    query: str = ""
    show_archived: bool = False
    sort_by_due: bool = False

    @property
    def current_project(self) -> Optional[Project]:
        if self.store is None or self.current_project_id is None:
            return None
        return self.store.get_project(self.current_project_id)

    def view_options(self) -> ViewOptions:
        return ViewOptions(
            query=self.query,
            show_archived=self.show_archived,
            sort_by_due=self.sort_by_due,
        )

    def visible_projects(self) -> List[Project]:
        """Projects in view: the working project, or all of them."""
        if self.store is None:
            return []
        projects = self.store.projects
        if self.current_project_id is not None:
            projects = [p for p in projects if p.id == self.current_project_id]
        return projects

    def reset_view(self) -> None:
        self.query = ""
        self.show_archived = False
        self.sort_by_due = False

    def get_prompt(self) -> str:
        """
        Generate prompt string based on current context.

        Returns:
            Prompt like "taskflow> " or "taskflow:[Home | archived]> "
        """
        parts = []

        project = self.current_project
        if project:
            parts.append(project.name)
        if self.show_archived:
            parts.append("archived")
        if self.query:
            parts.append(f"/{self.query}")

        if parts:
            return f"taskflow:[{' | '.join(parts)}]> "
        return "taskflow> "


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()


def format_prompt() -> HTML:
    """
    Create formatted prompt text with context and colors.

    Returns:
        HTML prompt with cyan project, magenta archived marker and yellow search
    """
    parts = []

    project = repl_context.current_project
    if project:
        parts.append(f"<cyan>{_escape(project.name)}</cyan>")
    if repl_context.show_archived:
        parts.append("<ansibrightmagenta>archived</ansibrightmagenta>")
    if repl_context.query:
        parts.append(f"<ansiyellow>/{_escape(repl_context.query)}</ansiyellow>")

    if parts:
        return HTML(f"<b>taskflow:[{' | '.join(parts)}]&gt; </b>")
    return HTML("<b>taskflow&gt; </b>")


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


# Rotating tips for bottom toolbar
_TOOLBAR_TIPS = [
    "💡 Tip: 'status <id>' cycles todo → progress → done",
    "💡 Tip: 'use <project>' sets where new tasks go",
    "💡 Tip: 'search <text>' filters every listing",
    "💡 Tip: 'sort due' puts overdue tasks first",
    "💡 Tip: 'undo' brings back tasks removed by clear-completed",
    "💡 Tip: 'recur <id> weekly --day fri' repeats every Friday",
    "💡 Tip: Press Ctrl+D or type 'exit' to quit",
]
_tip_index = 0


def get_bottom_toolbar() -> HTML:
    """
    Create bottom toolbar showing the active task count and a rotating tip.

    Returns:
        HTML formatted toolbar
    """
    try:
        store = repl_context.store
        active = store.active_task_count() if store else 0
        tip = _TOOLBAR_TIPS[_tip_index % len(_TOOLBAR_TIPS)]
        sort_mode = "due date" if repl_context.sort_by_due else "manual"
        toolbar_text = f"📋 {active} active | ↕ {sort_mode} | {_escape(tip)}"
        return HTML(f"<style bg='#444444' fg='#ffffff'> {toolbar_text} </style>")
    except Exception:
        logger.debug("Toolbar rendering failed", exc_info=True)
        return HTML("<style bg='#444444' fg='#ffffff'> TaskFlow </style>")


# Import command handlers from command modules
from .commands import (  # noqa: E402
    # Task handlers
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
    # Workflow handlers
    handle_clear_completed_command,
    handle_undo_command,
    handle_stats_command,
    handle_export_command,
    handle_tick_command,
    # Project handlers
    handle_use_command,
    handle_project_command,
    # System handlers
    handle_search_command,
    handle_sort_command,
    handle_archived_command,
    handle_help_command,
    handle_clear_command,
)


def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Args:
        result: Parsed command from parser

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    # Empty command (just Enter pressed)
    if not command:
        return True

    handlers = {
        "add": handle_add_command,
        "ls": handle_ls_command,
        "edit": handle_edit_command,
        "rm": handle_rm_command,
        "status": handle_status_command,
        "priority": handle_priority_command,
        "archive": handle_archive_command,
        "due": handle_due_command,
        "note": handle_note_command,
        "recur": handle_recur_command,
        "move": handle_move_command,
        "clear-completed": handle_clear_completed_command,
        "undo": handle_undo_command,
        "stats": handle_stats_command,
        "export": handle_export_command,
        "tick": handle_tick_command,
        "use": handle_use_command,
        "project": handle_project_command,
        "search": handle_search_command,
        "sort": handle_sort_command,
        "archived": handle_archived_command,
        "help": handle_help_command,
        "clear": handle_clear_command,
    }

    handler = handlers.get(command)
    if handler:
        handler(result)
        # Add whitespace after command output for readability
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


def _report_persistence_error(error: PersistenceError) -> None:
    console.print(f"[yellow]Warning:[/yellow] changes not saved: {error}")


def run_repl() -> None:
    """
    Main REPL loop.

    Loads the store, starts the recurrence scheduler and reads commands
    until Ctrl+D or "exit". The scheduler is stopped on the way out.
    """
    global _tip_index

    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)

    store = TaskStore.load(
        settings.db_path,
        undo_depth=settings.undo_depth,
        on_persistence_error=_report_persistence_error,
    )
    repl_context.store = store
    scheduler = RecurrenceScheduler(store, settings.recurrence_interval)

    # In piped/test environments, skip prompt_toolkit entirely
    has_tty = sys.stdin.isatty() and sys.stdout.isatty()

    session = None
    use_simple_input = not has_tty

    if has_tty:
        try:
            session = PromptSession(
                history=InMemoryHistory(),
                completer=create_completer(repl_context),
                complete_while_typing=True,
                bottom_toolbar=get_bottom_toolbar,
            )
        except Exception as e:
            console.print(f"[yellow]Warning:[/yellow] Running in simple input mode: {e}")
            use_simple_input = True

    console.print("[bold cyan]TaskFlow REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if use_simple_input:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    # Catch up on anything that came due while we were away
    spawned = scheduler.tick()
    if spawned:
        console.print(f"[green]↻[/green] {len(spawned)} recurring task(s) added")
        console.print()
    scheduler.start()

    try:
        while True:
            try:
                if use_simple_input or session is None:
                    user_input = input(repl_context.get_prompt())
                else:
                    try:
                        user_input = session.prompt(format_prompt())
                    except (KeyboardInterrupt, EOFError):
                        raise
                    except Exception as e:
                        console.print(f"[yellow]Switching to simple input mode: {e}[/yellow]")
                        use_simple_input = True
                        user_input = input(repl_context.get_prompt())

                result = parse_command(user_input)

                if not execute_command(result):
                    break

                _tip_index += 1

            except KeyboardInterrupt:
                console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
                continue
            except EOFError:
                console.print()
                console.print("[dim]Goodbye![/dim]")
                break
            except Exception as e:
                # Unexpected error - show but don't crash
                logger.exception("Command failed: %s", e)
                console.print(f"[red]Unexpected error:[/red] {e}")
    finally:
        scheduler.stop()


def main() -> None:
    """
    Entry point for REPL mode.

    Called when user runs: taskflow repl (or just taskflow)
    """
    try:
        run_repl()
    except Exception as e:
        console.print(f"[red]Fatal error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
