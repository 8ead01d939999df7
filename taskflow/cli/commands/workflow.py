"""
FILE: taskflow/cli/commands/workflow.py
PURPOSE: Collection-wide commands (clear_completed, stats, export, tick)
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..main import app, console, error_console, open_store, print_json
from ...core.analytics import compute_analytics
from ...core.exceptions import TaskflowError
from ...core.scheduler import RecurrenceScheduler
from ...formatting import TaskFormatter, export_markdown


@app.command("clear-completed")
def clear_completed(
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Remove every completed, non-archived task from all projects.

    Archived tasks are kept even when done. Use 'undo' in the REPL to
    bring cleared tasks back within the same session.

    Example:
        taskflow clear-completed
    """
    try:
        store = open_store()
        removed = store.clear_completed()
        if raw:
            console.print(f"Cleared {removed} task(s)")
        else:
            console.print(f"[green]✓[/green] Cleared {removed} completed task(s)")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def stats(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show completion analytics across all projects.

    Totals skip archived tasks. 'Completed this week' counts done tasks
    (archived ones included) created in the last 7 days.
    """
    try:
        store = open_store()
        analytics = compute_analytics(store.projects, store.now())

        if json_output:
            print_json(json.dumps(analytics.to_dict(), indent=2, ensure_ascii=False))
        elif raw:
            console.print(
                f"total={analytics.total_tasks} done={analytics.completed_tasks} "
                f"progress={analytics.in_progress_tasks} todo={analytics.todo_tasks} "
                f"overdue={analytics.overdue_tasks} rate={analytics.completion_rate}% "
                f"week={analytics.completed_this_week}"
            )
            for stat in analytics.project_stats:
                console.print(f"{stat.name}: {stat.task_count} task(s), {stat.completion_rate}%", markup=False)
        else:
            console.print(TaskFormatter.create_analytics_table(analytics))
            if analytics.project_stats:
                console.print(TaskFormatter.create_project_stats_table(analytics))

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
):
    """
    Export all active tasks as markdown.

    Example:
        taskflow export
        taskflow export -o tasks.md
    """
    try:
        store = open_store()
        text = export_markdown(store.projects, store.now())

        if output is None:
            typer.echo(text, nl=False)
            return

        try:
            output.write_text(text, encoding="utf-8")
        except OSError as e:
            error_console.print(f"[red]Error:[/red] Could not write {output}: {e}")
            raise typer.Exit(1)
        console.print(f"[green]✓[/green] Exported to {output}")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def tick(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Run one recurrence check now and spawn any due recurring tasks.

    Handy from cron when the REPL is not running.
    """
    try:
        store = open_store()
        spawned = RecurrenceScheduler(store).tick()

        if json_output:
            print_json(json.dumps([t.to_dict() for t in spawned], indent=2, ensure_ascii=False))
        elif not spawned:
            console.print("[dim]No recurring tasks due[/dim]")
        else:
            for task in spawned:
                console.print(f"[green]↻[/green] Spawned {task.id}: {escape(task.text)}")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
