"""
FILE: taskflow/cli/commands/projects.py
PURPOSE: Project management commands (project_add, project_ls, project_rm, project_rename, project_color)
"""

import json

import typer
from rich.markup import escape

from ..main import console, error_console, open_store, print_json, project_app, resolve_project
from ...core.constants import COLOR_NAMES
from ...core.exceptions import TaskflowError, ValidationError
from ...formatting import TaskFormatter


def _resolve_color(color: str) -> str:
    """Accept 'teal' as well as 'bg-teal-500'."""
    color = color.strip().lower()
    return COLOR_NAMES.get(color, color)


@project_app.command("add")
def project_add(
    name: str = typer.Argument(..., help="Project name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new project.

    Example:
        taskflow project add "Home"
        taskflow project add "Side gig" --json
    """
    try:
        store = open_store()
        project = store.create_project(name)

        if json_output:
            print_json(project.to_json())
        elif raw:
            console.print(f"{project.id}: {escape(project.name)}")
        else:
            console.print(f"[green]✓[/green] Created project {project.id}: {escape(project.name)}")

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@project_app.command("ls")
def project_ls(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List all projects.

    Example:
        taskflow project ls
        taskflow project ls --json
    """
    try:
        store = open_store()
        projects = store.projects

        if json_output:
            projects_data = [
                {
                    "id": p.id,
                    "name": p.name,
                    "color": p.color,
                    "taskCount": len(p.tasks),
                }
                for p in projects
            ]
            print_json(json.dumps(projects_data, indent=2, ensure_ascii=False))

        elif raw:
            for project in projects:
                console.print(f"{project.id}: {project.name}", markup=False)

        else:
            if not projects:
                console.print("[dim]No projects found[/dim]")
                return
            console.print(TaskFormatter.create_project_table(projects))
            console.print(f"\n[dim]Total: {len(projects)} project(s)[/dim]")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@project_app.command("rm")
def project_rm(
    project_ref: str = typer.Argument(..., help="Project id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """
    Delete a project and all of its tasks.

    Example:
        taskflow project rm "Side gig"
        taskflow project rm 1718000000000 --yes
    """
    try:
        store = open_store()
        project = resolve_project(store, project_ref)

        if not yes and project.tasks:
            confirmed = typer.confirm(
                f"Delete '{project.name}' and its {len(project.tasks)} task(s)?"
            )
            if not confirmed:
                console.print("[dim]Cancelled[/dim]")
                raise typer.Exit(0)

        store.delete_project(project.id)
        console.print(f"[red]✗[/red] Deleted project {project.id}: {escape(project.name)}")

    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@project_app.command("rename")
def project_rename(
    project_ref: str = typer.Argument(..., help="Project id or name"),
    name: str = typer.Argument(..., help="New project name"),
):
    """
    Rename a project.

    Example:
        taskflow project rename Home "Home & Garden"
    """
    try:
        store = open_store()
        project = resolve_project(store, project_ref)
        renamed = store.rename_project(project.id, name)
        console.print(f"[green]✓[/green] Renamed {escape(project.name)} → {escape(renamed.name)}")

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@project_app.command("color")
def project_color(
    project_ref: str = typer.Argument(..., help="Project id or name"),
    color: str = typer.Argument(..., help=f"One of: {', '.join(COLOR_NAMES)}"),
):
    """
    Change a project's color.

    Example:
        taskflow project color Home teal
        taskflow project color Home bg-orange-500
    """
    try:
        store = open_store()
        project = resolve_project(store, project_ref)
        updated = store.recolor_project(project.id, _resolve_color(color))
        console.print(f"[green]✓[/green] {escape(updated.name)} is now {updated.color}")

    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except TaskflowError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
