"""
FILE: taskflow/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output, plus markdown export
EXPORTS:
  - STATUS_GLYPHS / PRIORITY_GLYPHS: Export glyphs
  - due_label(task, now) -> Optional[str]
  - recurrence_label(task) -> Optional[str]
  - TaskFormatter: Rich tables and JSON for tasks/projects/analytics
  - export_markdown(projects, now) -> str
DEPENDENCIES:
  - rich (table formatting)
  - json (JSON serialization)
  - taskflow.core.models (Task, Project)
  - taskflow.core.view (ProjectView)
  - taskflow.core.analytics (Analytics)
NOTES:
  - Centralized formatting logic for consistency
  - export_markdown is stateless: projects (and a date for the header) in,
    text out; archived tasks are left out
"""

import json
from datetime import datetime, timedelta
from typing import List, Optional

from rich.markup import escape
from rich.table import Table

from .core.analytics import Analytics, project_status_counts
from .core.constants import WEEKDAY_NAMES, RECUR_WEEKLY
from .core.dates import is_same_day, parse_timestamp
from .core.models import Task, Project
from .core.view import ProjectView


STATUS_GLYPHS = {"done": "✅", "progress": "🔄", "todo": "⭕"}
PRIORITY_GLYPHS = {"high": "🔴", "medium": "🟡", "low": "🟢"}

# Rich styles for table cells
STATUS_STYLES = {"todo": "yellow", "progress": "blue", "done": "green"}
PRIORITY_STYLES = {"high": "red", "medium": "yellow", "low": "dim"}


def short_date(dt: datetime) -> str:
    """'Oct 9' style date (no zero padding)."""
    return f"{dt:%b} {dt.day}"


def due_label(task: Task, now: datetime) -> Optional[str]:
    """
    Human label for a task's due date.

    Returns:
        "Today", "Tomorrow", "Overdue", "Mon D", or None without a due date
    """
    if not task.due_date:
        return None
    due = parse_timestamp(task.due_date)
    if is_same_day(due, now):
        return "Today"
    if is_same_day(due, now + timedelta(days=1)):
        return "Tomorrow"
    if due < now:
        return "Overdue"
    return short_date(due)


def recurrence_label(task: Task) -> Optional[str]:
    """'daily', 'monthly', 'weekly' or the weekday name for weekly-on-day tasks."""
    if not task.recurring:
        return None
    if task.recurring == RECUR_WEEKLY and task.recurring_day is not None:
        return WEEKDAY_NAMES[task.recurring_day % 7]
    return task.recurring


class TaskFormatter:
    """Centralized task display formatting."""

    @staticmethod
    def create_table(views: List[ProjectView], now: datetime, title: str = "Tasks") -> Table:
        """
        Create Rich table for a filtered/sorted view.

        Args:
            views: Output of build_view()
            now: Reference time for due labels
            title: Table title

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Project", style="magenta")
        table.add_column("Status")
        table.add_column("Task", style="white")
        table.add_column("Priority")
        table.add_column("Due")
        table.add_column("Repeats", style="green")
        table.add_column("Deps", justify="right", style="dim")

        for view in views:
            for item in view.tasks:
                task = item.task
                status_style = STATUS_STYLES.get(task.status, "white")
                priority_style = PRIORITY_STYLES.get(task.priority, "white")

                due = due_label(task, now) or "-"
                if item.is_overdue:
                    due = f"[red]{due}[/red]"
                elif item.is_today:
                    due = f"[bold bright_magenta]{due}[/bold bright_magenta]"

                text = escape(task.text)
                if task.status == "done":
                    text = f"[strike dim]{text}[/strike dim]"
                if task.notes:
                    text += " 📝"

                table.add_row(
                    task.id,
                    escape(view.name),
                    f"[{status_style}]{task.status}[/{status_style}]",
                    text,
                    f"[{priority_style}]{task.priority}[/{priority_style}]",
                    due,
                    recurrence_label(task) or "",
                    str(len(task.dependencies)) if task.dependencies else "",
                )

        return table

    @staticmethod
    def create_project_table(projects: List[Project]) -> Table:
        table = Table(title="Projects", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Color", style="dim")
        table.add_column("Todo", justify="right", style="yellow")
        table.add_column("In progress", justify="right", style="blue")
        table.add_column("Done", justify="right", style="green")

        for project in projects:
            counts = project_status_counts(project)
            table.add_row(
                project.id,
                escape(project.name),
                project.color,
                str(counts["todo"]),
                str(counts["progress"]),
                str(counts["done"]),
            )

        return table

    @staticmethod
    def create_analytics_table(analytics: Analytics) -> Table:
        table = Table(title="Analytics", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Total tasks", str(analytics.total_tasks))
        table.add_row("Completed", f"[green]{analytics.completed_tasks}[/green]")
        table.add_row("In progress", f"[blue]{analytics.in_progress_tasks}[/blue]")
        table.add_row("Todo", f"[yellow]{analytics.todo_tasks}[/yellow]")
        table.add_row("Overdue", f"[red]{analytics.overdue_tasks}[/red]")
        table.add_row("Completion rate", f"{analytics.completion_rate}%")
        table.add_row("Completed this week", str(analytics.completed_this_week))
        return table

    @staticmethod
    def create_project_stats_table(analytics: Analytics) -> Table:
        table = Table(title="Projects Overview", show_header=True, header_style="bold cyan")
        table.add_column("Project", style="white")
        table.add_column("Tasks", justify="right")
        table.add_column("Complete", justify="right", style="green")
        for stat in analytics.project_stats:
            table.add_row(escape(stat.name), str(stat.task_count), f"{stat.completion_rate}%")
        return table

    @staticmethod
    def to_json_array(views: List[ProjectView]) -> str:
        """
        Convert a view to a JSON array of tasks.

        Each task carries its project id and the derived isToday flag.
        """
        tasks_data = []
        for view in views:
            for item in view.tasks:
                data = item.task.to_dict()
                data["projectId"] = view.project_id
                data["isToday"] = item.is_today
                tasks_data.append(data)
        return json.dumps(tasks_data, indent=2, ensure_ascii=False)


def export_markdown(projects: List[Project], now: Optional[datetime] = None) -> str:
    """
    Render the project collection as a markdown document.

    Args:
        projects: Project collection
        now: Date for the "Generated on" line (defaults to now)

    Returns:
        Markdown text: one "##" section per project, one bullet per
        non-archived task
    """
    now = now or datetime.now()
    lines = ["# TaskFlow Export", "", f"Generated on: {now.month}/{now.day}/{now.year}", ""]

    for project in projects:
        lines.append(f"## {project.name}")
        lines.append("")
        active_tasks = project.active_tasks

        if not active_tasks:
            lines.append("*No active tasks*")
            lines.append("")
            continue

        for task in active_tasks:
            status = STATUS_GLYPHS.get(task.status, STATUS_GLYPHS["todo"])
            priority = PRIORITY_GLYPHS.get(task.priority, PRIORITY_GLYPHS["low"])
            due = f" (Due: {short_date(parse_timestamp(task.due_date))})" if task.due_date else ""
            recurring = f" [{task.recurring}]" if task.recurring else ""

            lines.append(f"- {status} {task.text} {priority}{due}{recurring}")
            if task.notes:
                lines.append(f"  *Note: {task.notes}*")
        lines.append("")

    return "\n".join(lines) + "\n"
