"""
FILE: taskflow/repl/commands/projects.py
PURPOSE: Project command handlers for REPL
"""

from rich.markup import escape

from ..main import console, repl_context
from ..parser import ParseResult
from ...core.constants import COLOR_NAMES
from ...core.exceptions import TaskflowError, ValidationError
from ...formatting import TaskFormatter
from .tasks import resolve_project


# Helper function
def ask_confirmation(message: str) -> bool:
    """Ask user for confirmation (y/n)."""
    response = input(f"{message} (y/n): ").strip().lower()
    return response in ('y', 'yes')


def handle_use_command(result: ParseResult) -> None:
    """
    Handle 'use' command - set the working project.

    Usage:
        use Home
        use none
    """
    if not result.args:
        project = repl_context.current_project
        if project:
            console.print(f"Current project: [cyan]{escape(project.name)}[/cyan]")
        else:
            console.print("[dim]No working project (showing all projects)[/dim]")
        return

    ref = result.text()
    if ref.lower() in ("none", "clear", "all"):
        repl_context.current_project_id = None
        console.print("✓ Cleared working project")
        return

    project = resolve_project(ref)
    if project:
        repl_context.current_project_id = project.id
        console.print(f"✓ Working in [cyan]{escape(project.name)}[/cyan]")


def handle_project_add_command(result: ParseResult) -> None:
    """
    Handle 'project add' command - create new project.

    Usage:
        project add Home
        project add "Side gig"
    """
    if not result.args:
        console.print("[red]Error:[/red] Project name required")
        console.print("[dim]Usage: project add <name>[/dim]")
        return

    try:
        project = repl_context.store.create_project(result.text())
        console.print(f"[green]✓ Created project:[/green] [cyan]{project.id}[/cyan]: {escape(project.name)}")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
    except TaskflowError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")


def handle_project_ls_command(result: ParseResult) -> None:
    """Handle 'project ls' command - list projects with status counts."""
    projects = repl_context.store.projects
    if not projects:
        console.print("[dim]No projects found[/dim]")
        return
    console.print(TaskFormatter.create_project_table(projects))


def handle_project_rm_command(result: ParseResult) -> None:
    """
    Handle 'project rm' command - delete a project and its tasks.

    Usage:
        project rm "Side gig"
    """
    if not result.args:
        console.print("[red]Error:[/red] Project required")
        console.print("[dim]Usage: project rm <id|name>[/dim]")
        return

    project = resolve_project(result.text())
    if not project:
        return

    if project.tasks and not ask_confirmation(
        f"Delete '{project.name}' and its {len(project.tasks)} task(s)?"
    ):
        console.print("[dim]Cancelled[/dim]")
        return

    repl_context.store.delete_project(project.id)
    if repl_context.current_project_id == project.id:
        repl_context.current_project_id = None
    console.print(f"[red]✗[/red] Deleted project {project.id}: {escape(project.name)}")


def handle_project_rename_command(result: ParseResult) -> None:
    """
    Handle 'project rename' command.

    Usage:
        project rename Home "Home & Garden"
    """
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Project and new name required")
        console.print("[dim]Usage: project rename <id|name> <new name>[/dim]")
        return

    project = resolve_project(result.args[0])
    if not project:
        return

    try:
        renamed = repl_context.store.rename_project(project.id, result.text(1))
        console.print(f"[green]✓ Renamed[/green] {escape(project.name)} → [cyan]{escape(renamed.name)}[/cyan]")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")


def handle_project_color_command(result: ParseResult) -> None:
    """
    Handle 'project color' command.

    Usage:
        project color Home teal
    """
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Project and color required")
        console.print(f"[dim]Colors: {', '.join(COLOR_NAMES)}[/dim]")
        return

    project = resolve_project(result.args[0])
    if not project:
        return

    color = result.args[1].strip().lower()
    try:
        updated = repl_context.store.recolor_project(project.id, COLOR_NAMES.get(color, color))
        console.print(f"[green]✓[/green] {escape(updated.name)} is now {updated.color}")
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")


def handle_project_command(result: ParseResult) -> None:
    """
    Handle 'project' command - dispatch to subcommands.

    Usage:
        project add <name>
        project ls
        project rm <id|name>
        project rename <id|name> <new name>
        project color <id|name> <color>
    """
    if not result.args:
        handle_project_ls_command(result)
        return

    subcommands = {
        "add": handle_project_add_command,
        "ls": handle_project_ls_command,
        "rm": handle_project_rm_command,
        "rename": handle_project_rename_command,
        "color": handle_project_color_command,
    }

    subcommand = result.args[0].lower()
    handler = subcommands.get(subcommand)
    if not handler:
        console.print(f"[red]Error:[/red] Unknown project subcommand '{subcommand}'")
        console.print(f"[dim]Available: {', '.join(subcommands)}[/dim]")
        return

    handler(ParseResult(
        command=f"project {subcommand}",
        args=result.args[1:],
        flags=result.flags,
        raw_input=result.raw_input,
    ))
