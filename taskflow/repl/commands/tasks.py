"""
FILE: taskflow/repl/commands/tasks.py
PURPOSE: Task command handlers for REPL
"""

from typing import Optional, Tuple

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core.constants import VALID_RECURRENCES
from ...core.dates import parse_due_input, weekday_from_name
from ...core.exceptions import TaskflowError, ValidationError
from ...core.models import Project, Task
from ...core.view import build_view
from ...formatting import TaskFormatter, due_label, recurrence_label


def find_task(task_id: str) -> Optional[Tuple[Project, Task]]:
    """Look up a task anywhere in the store, printing an error if it is missing."""
    found = repl_context.store.find_task(task_id)
    if not found:
        console.print(f"[red]Error:[/red] Task {task_id} not found")
    return found


def resolve_project(ref: Optional[str]) -> Optional[Project]:
    """
    Project for a command: explicit ref (id or name), else the working
    project, else the first project.
    """
    store = repl_context.store
    if ref:
        project = store.get_project(ref) or store.find_project_by_name(ref)
        if not project:
            console.print(f"[red]Error:[/red] Project '{ref}' not found")
        return project

    project = repl_context.current_project
    if project:
        return project

    projects = store.projects
    if not projects:
        console.print("[red]Error:[/red] No projects yet. Create one with 'project add <name>'")
        return None
    return projects[0]


def _usage(message: str, usage: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    console.print(f"[dim]Usage: {usage}[/dim]")


def handle_add_command(result: ParseResult) -> None:
    """
    Handle 'add' command - create new task.

    Usage:
        add Call the notary
        add "Water plants" --recurring weekly
        add "Sign contract" --project Home --depends 1718000000000
    """
    if not result.args:
        _usage("Task text required", "add <text> [--project <name>] [--depends <ids>] [--recurring <cadence>]")
        return

    project = resolve_project(result.flag_value("project"))
    if not project:
        return

    depends = result.flag_value("depends") or ""
    dependencies = [d.strip() for d in depends.split(",") if d.strip()]

    try:
        task = repl_context.store.add_task(
            project.id,
            result.text(),
            dependencies=dependencies,
            recurring=result.flag_value("recurring"),
        )
        console.print(
            f"[green]✓ Created task [bold]#{task.id}[/bold] in [cyan]{escape(project.name)}[/cyan]:[/green] {escape(task.text)}"
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
    except TaskflowError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")


def handle_ls_command(result: ParseResult) -> None:
    """
    Handle 'ls' command - list tasks in the current view.

    Respects the working project, search text, archived toggle and sort
    mode. --project overrides the working project for this listing.

    Usage:
        ls
        ls --project Home
    """
    store = repl_context.store
    project_ref = result.flag_value("project")

    if project_ref:
        project = resolve_project(project_ref)
        if not project:
            return
        projects = [p for p in store.projects if p.id == project.id]
    else:
        projects = repl_context.visible_projects()

    now = store.now()
    views = build_view(projects, repl_context.view_options(), now)
    count = sum(len(v.tasks) for v in views)

    if not count:
        if repl_context.query:
            console.print(f"[dim]No tasks match '{repl_context.query}'[/dim]")
        else:
            console.print("[dim]No tasks found[/dim]")
        return

    title = "Archived tasks" if repl_context.show_archived else "Tasks"
    console.print(TaskFormatter.create_table(views, now, title=title))
    console.print(f"[dim]{count} task(s)[/dim]")


def handle_edit_command(result: ParseResult) -> None:
    """
    Handle 'edit' command - update task text.

    Usage:
        edit 1718000000000 Call the notary before noon
    """
    if len(result.args) < 2:
        _usage("Task id and new text required", "edit <id> <text>")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    try:
        updated = repl_context.store.update_task(project.id, task.id, text=result.text(1))
        console.print(f"[green]✓ Updated task [bold]#{updated.id}[/bold]:[/green] {escape(updated.text)}")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")


def handle_rm_command(result: ParseResult) -> None:
    """
    Handle 'rm' command - delete one or more tasks.

    Usage:
        rm 1718000000000
        rm 1718000000000,1718000000001
    """
    if not result.args:
        _usage("Task id required", "rm <id>[,<id>...]")
        return

    ids = [i.strip() for i in ",".join(result.args).split(",") if i.strip()]
    deleted = 0
    with repl_context.store.batch() as store:
        for task_id in ids:
            found = find_task(task_id)
            if not found:
                continue
            project, task = found
            store.delete_task(project.id, task_id)
            deleted += 1
            console.print(f"[red]✗[/red] Deleted task {task_id}: {escape(task.text)}")

    if deleted > 1:
        console.print(f"[dim]{deleted} tasks deleted[/dim]")


def handle_status_command(result: ParseResult) -> None:
    """
    Handle 'status' command - advance status todo → progress → done → todo.

    Usage:
        status 1718000000000
    """
    if not result.args:
        _usage("Task id required", "status <id>")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    updated = repl_context.store.toggle_status(project.id, task.id)
    if updated.status == "done":
        console.print(f"[green]✓ Done:[/green] [strike]{escape(updated.text)}[/strike]")
    else:
        console.print(f"[cyan]{updated.status}[/cyan]: {escape(updated.text)}")


def handle_priority_command(result: ParseResult) -> None:
    """Handle 'priority' command - cycle low → medium → high → low."""
    if not result.args:
        _usage("Task id required", "priority <id>")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    updated = repl_context.store.cycle_priority(project.id, task.id)
    console.print(f"Priority [bold]{updated.priority}[/bold]: {escape(updated.text)}")


def handle_archive_command(result: ParseResult) -> None:
    """Handle 'archive' command - archive a task, or restore an archived one."""
    if not result.args:
        _usage("Task id required", "archive <id>")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    updated = repl_context.store.toggle_archive(project.id, task.id)
    verb = "Archived" if updated.archived else "Restored"
    console.print(f"[green]✓ {verb}:[/green] {escape(updated.text)}")


def handle_due_command(result: ParseResult) -> None:
    """
    Handle 'due' command - set or remove a due date.

    Removing the due date also removes recurrence.

    Usage:
        due 1718000000000 tomorrow
        due 1718000000000 fri
        due 1718000000000 2026-12-24
        due 1718000000000 none
    """
    if len(result.args) < 2:
        _usage("Task id and date required", "due <id> today|tomorrow|next-week|<weekday>|YYYY-MM-DD|none")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found
    store = repl_context.store

    try:
        now = store.now()
        due_date = parse_due_input(result.args[1], now)
        if due_date is None:
            updated = store.clear_due_date(project.id, task.id)
            console.print(f"[green]✓ Removed due date:[/green] {escape(updated.text)}")
        else:
            updated = store.set_due_date(project.id, task.id, due_date)
            console.print(f"[green]✓ Due {due_label(updated, now)}:[/green] {escape(updated.text)}")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")


def handle_note_command(result: ParseResult) -> None:
    """
    Handle 'note' command - attach a note, or remove it with no text.

    Usage:
        note 1718000000000 Bring the signed copy
        note 1718000000000
    """
    if not result.args:
        _usage("Task id required", "note <id> [text]")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    updated = repl_context.store.set_notes(project.id, task.id, result.text(1))
    if updated.notes:
        console.print(f"[green]✓ Note saved:[/green] {escape(updated.text)}")
    else:
        console.print(f"[green]✓ Note removed:[/green] {escape(updated.text)}")


def handle_recur_command(result: ParseResult) -> None:
    """
    Handle 'recur' command - set or remove a repeat cadence.

    Usage:
        recur 1718000000000 daily
        recur 1718000000000 weekly --day wed
        recur 1718000000000 none
    """
    if len(result.args) < 2:
        _usage("Task id and cadence required", f"recur <id> {'|'.join(VALID_RECURRENCES)}|none [--day <weekday>]")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found
    store = repl_context.store
    cadence = result.args[1].lower()
    day = result.flag_value("day")

    try:
        if day is not None:
            weekday = weekday_from_name(day)
            if cadence != "weekly" or weekday is None:
                console.print("[red]Error:[/red] --day needs 'weekly' and a weekday like mon or friday")
                return
            updated = store.set_weekly_on(project.id, task.id, weekday)
        else:
            updated = store.set_recurring(project.id, task.id, None if cadence == "none" else cadence)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    label = recurrence_label(updated)
    if label:
        console.print(f"[green]↻ Repeats {label}:[/green] {escape(updated.text)}")
    else:
        console.print(f"[green]✓ No longer repeats:[/green] {escape(updated.text)}")


def handle_move_command(result: ParseResult) -> None:
    """
    Handle 'move' command - move a task into another task's slot.

    Usage:
        move 1718000000003 1718000000000
    """
    if len(result.args) < 2:
        _usage("Two task ids required", "move <id> <target id>")
        return

    found = find_task(result.args[0])
    if not found:
        return
    project, task = found

    if repl_context.store.reorder_task(project.id, task.id, result.args[1]):
        console.print(f"[green]✓ Moved:[/green] {escape(task.text)}")
    else:
        console.print(f"[yellow]Nothing moved:[/yellow] {result.args[1]} is not another task in {escape(project.name)}")
