"""
FILE: taskflow/cli/commands/tasks.py
PURPOSE: Task commands (add, ls, edit, rm, status, priority, archive, due, note, recur, move)
"""

from typing import Optional

import typer
from rich.markup import escape

from ..main import app, console, error_console, open_store, print_json, resolve_project, resolve_task
from ...core.constants import VALID_RECURRENCES
from ...core.dates import parse_due_input, weekday_from_name
from ...core.exceptions import TaskflowError, ValidationError
from ...core.view import ViewOptions, build_view
from ...formatting import TaskFormatter, due_label, recurrence_label


def _print_task(task, message: str, json_output: bool, raw: bool) -> None:
    if json_output:
        print_json(task.to_json())
    elif raw:
        console.print(f"{task.id}: {task.text}", markup=False)
    else:
        console.print(f"[green]✓ {message} [bold]#{task.id}[/bold]:[/green] {escape(task.text)}")


@app.command()
def add(
    text: str = typer.Argument(..., help="Task text"),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project id or name (default: first project)"),
    depends: Optional[str] = typer.Option(None, "--depends", "-d", help="Comma-separated ids of tasks this one depends on"),
    recurring: Optional[str] = typer.Option(None, "--recurring", "-r", help="daily, weekly or monthly"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new task.

    Example:
        taskflow add "Call the notary"
        taskflow add "Water plants" --project Home --recurring weekly
        taskflow add "Sign contract" --depends 1718000000000,1718000000001
    """
    try:
        store = open_store()
        project = resolve_project(store, project_ref)
        dependencies = [d.strip() for d in depends.split(",") if d.strip()] if depends else []

        task = store.add_task(project.id, text, dependencies=dependencies, recurring=recurring)
        _print_task(task, f"Created task in {escape(project.name)}", json_output, raw)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def ls(
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Only this project (id or name)"),
    search: str = typer.Option("", "--search", "-s", help="Case-insensitive text filter"),
    archived: bool = typer.Option(False, "--archived", help="Show archived tasks instead of active ones"),
    sort_due: bool = typer.Option(False, "--sort-due", help="Sort by due date, overdue first"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List tasks (active ones by default).

    Example:
        taskflow ls
        taskflow ls --project Home --sort-due
        taskflow ls --search invoice --archived
    """
    try:
        store = open_store()
        projects = store.projects
        if project_ref is not None:
            project = resolve_project(store, project_ref)
            projects = [p for p in projects if p.id == project.id]

        now = store.now()
        views = build_view(
            projects,
            ViewOptions(query=search, show_archived=archived, sort_by_due=sort_due),
            now,
        )
        count = sum(len(v.tasks) for v in views)

        if json_output:
            print_json(TaskFormatter.to_json_array(views))

        elif raw:
            for view in views:
                for item in view.tasks:
                    task = item.task
                    marker = {"done": "x", "progress": "~"}.get(task.status, " ")
                    label = due_label(task, now)
                    suffix = f" ({label})" if label else ""
                    console.print(f"{task.id}: [{marker}] {task.text}{suffix}", markup=False)

        else:
            if not count:
                console.print("[dim]No tasks found[/dim]")
                return
            title = "Archived tasks" if archived else "Tasks"
            console.print(TaskFormatter.create_table(views, now, title=title))
            console.print(f"\n[dim]Total: {count} task(s)[/dim]")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def edit(
    task_id: str = typer.Argument(..., help="Task ID"),
    text: str = typer.Argument(..., help="New task text"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Update task text.

    Example:
        taskflow edit 1718000000000 "Call the notary before noon"
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        task = store.update_task(project.id, task_id, text=text)
        _print_task(task, "Updated task", json_output, raw)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def rm(
    task_ids: str = typer.Argument(..., help="Task ID(s) to delete (comma-separated)"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Delete one or more tasks permanently. Unknown ids are skipped.

    Example:
        taskflow rm 1718000000000
        taskflow rm 1718000000000,1718000000001
    """
    try:
        store = open_store()
        deleted = 0
        for task_id in [i.strip() for i in task_ids.split(",") if i.strip()]:
            found = store.find_task(task_id)
            if not found:
                error_console.print(f"[yellow]Skipped:[/yellow] Task {task_id} not found")
                continue
            project, task = found
            store.delete_task(project.id, task_id)
            deleted += 1
            if raw:
                console.print(f"Deleted task {task_id}: {escape(task.text)}")
            else:
                console.print(f"[red]✗[/red] Deleted task {task_id}: {escape(task.text)}")

        if not deleted:
            raise typer.Exit(1)

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def status(
    task_id: str = typer.Argument(..., help="Task ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Advance task status: todo -> progress -> done -> todo.

    Example:
        taskflow status 1718000000000
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        task = store.toggle_status(project.id, task_id)
        _print_task(task, f"Status is now {task.status} for", json_output, raw)

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def priority(
    task_id: str = typer.Argument(..., help="Task ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Cycle task priority: low -> medium -> high -> low.
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        task = store.cycle_priority(project.id, task_id)
        _print_task(task, f"Priority is now {task.priority} for", json_output, raw)

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def archive(
    task_id: str = typer.Argument(..., help="Task ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Archive a task, or restore it if already archived.
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        task = store.toggle_archive(project.id, task_id)
        _print_task(task, "Archived" if task.archived else "Restored", json_output, raw)

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def due(
    task_id: str = typer.Argument(..., help="Task ID"),
    when: str = typer.Argument(..., help="today, tomorrow, next-week, a weekday, YYYY-MM-DD or none"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Set or remove a task's due date. Removing it also removes recurrence.

    Example:
        taskflow due 1718000000000 tomorrow
        taskflow due 1718000000000 fri
        taskflow due 1718000000000 2026-12-24
        taskflow due 1718000000000 none
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        now = store.now()
        due_date = parse_due_input(when, now)

        if due_date is None:
            task = store.clear_due_date(project.id, task_id)
            _print_task(task, "Removed due date from", json_output, raw)
        else:
            task = store.set_due_date(project.id, task_id, due_date)
            _print_task(task, f"Due {due_label(task, now)}:", json_output, raw)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def note(
    task_id: str = typer.Argument(..., help="Task ID"),
    text: str = typer.Argument("", help="Note text (empty to remove)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Attach a note to a task.
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        task = store.set_notes(project.id, task_id, text)
        _print_task(task, "Saved note on" if task.notes else "Removed note from", json_output, raw)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def recur(
    task_id: str = typer.Argument(..., help="Task ID"),
    cadence: str = typer.Argument(..., help=f"{', '.join(VALID_RECURRENCES)} or none"),
    day: Optional[str] = typer.Option(None, "--day", help="Weekday for weekly tasks (also sets the due date)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Make a task recurring, or stop it recurring.

    Example:
        taskflow recur 1718000000000 daily
        taskflow recur 1718000000000 weekly --day wed
        taskflow recur 1718000000000 none
    """
    try:
        store = open_store()
        project, _ = resolve_task(store, task_id)
        cadence = cadence.strip().lower()

        if day is not None:
            weekday = weekday_from_name(day)
            if cadence != "weekly" or weekday is None:
                error_console.print("[red]Error:[/red] --day needs 'weekly' and a weekday like mon or friday")
                raise typer.Exit(1)
            task = store.set_weekly_on(project.id, task_id, weekday)
        else:
            task = store.set_recurring(project.id, task_id, None if cadence == "none" else cadence)

        label = recurrence_label(task)
        _print_task(task, f"Repeats {label}:" if label else "No longer repeats:", json_output, raw)

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def move(
    task_id: str = typer.Argument(..., help="Task to move"),
    target_id: str = typer.Argument(..., help="Task whose slot it takes"),
):
    """
    Reorder a task within its project by moving it into another task's slot.

    Both tasks must be in the same project.

    Example:
        taskflow move 1718000000003 1718000000000
    """
    try:
        store = open_store()
        project, task = resolve_task(store, task_id)
        if not store.reorder_task(project.id, task_id, target_id):
            error_console.print(
                f"[yellow]Nothing moved:[/yellow] task {target_id} is not another task in {escape(project.name)}"
            )
            raise typer.Exit(1)
        console.print(f"[green]✓ Moved[/green] {escape(task.text)}")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
