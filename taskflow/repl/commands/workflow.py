"""
FILE: taskflow/repl/commands/workflow.py
PURPOSE: Collection-wide command handlers for REPL (clear-completed, undo, stats, export, tick)
"""

from pathlib import Path

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core.analytics import compute_analytics
from ...core.scheduler import RecurrenceScheduler
from ...formatting import TaskFormatter, export_markdown


def handle_clear_completed_command(result: ParseResult) -> None:
    """
    Handle 'clear-completed' command - remove done, non-archived tasks.

    Undo with 'undo'.
    """
    removed = repl_context.store.clear_completed()
    if removed:
        console.print(f"[green]✓ Cleared {removed} completed task(s)[/green] [dim](undo to restore)[/dim]")
    else:
        console.print("[dim]No completed tasks to clear[/dim]")


def handle_undo_command(result: ParseResult) -> None:
    """
    Handle 'undo' command - restore the last snapshot.

    Usage:
        undo
    """
    store = repl_context.store
    snapshot = store.undo_log.peek()
    if store.undo():
        console.print(f"[green]✓ Undid {snapshot.operation.replace('_', ' ')}[/green]")
    else:
        console.print("[yellow]Nothing to undo[/yellow]")


def handle_stats_command(result: ParseResult) -> None:
    """Handle 'stats' command - show analytics for all projects."""
    store = repl_context.store
    analytics = compute_analytics(store.projects, store.now())
    console.print(TaskFormatter.create_analytics_table(analytics))
    if analytics.project_stats:
        console.print(TaskFormatter.create_project_stats_table(analytics))


def handle_export_command(result: ParseResult) -> None:
    """
    Handle 'export' command - markdown export to screen or file.

    Usage:
        export
        export --output tasks.md
    """
    store = repl_context.store
    text = export_markdown(store.projects, store.now())
    output = result.flag_value("output") or (result.args[0] if result.args else None)

    if output is None:
        console.print(text, markup=False, highlight=False)
        return

    try:
        Path(output).expanduser().write_text(text, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error:[/red] Could not write {output}: {e}")
        return
    console.print(f"[green]✓ Exported to {output}[/green]")


def handle_tick_command(result: ParseResult) -> None:
    """Handle 'tick' command - run a recurrence check right now."""
    spawned = RecurrenceScheduler(repl_context.store).tick()
    if not spawned:
        console.print("[dim]No recurring tasks due[/dim]")
        return
    for task in spawned:
        console.print(f"[green]↻[/green] Spawned {task.id}: {escape(task.text)}")
