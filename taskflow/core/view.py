"""
FILE: taskflow/core/view.py
PURPOSE: Filter/sort projection of the project collection for display
EXPORTS:
  - TaskView (dataclass)
  - ProjectView (dataclass)
  - ViewOptions (dataclass)
  - matches_search(task, query) -> bool
  - sort_by_due_date(tasks, now) -> List[Task]
  - build_view(projects, options, now) -> List[ProjectView]
DEPENDENCIES:
  - functools (cmp_to_key)
  - taskflow.core.models (Project, Task)
  - taskflow.core.dates (timestamp parsing, same-day check)
NOTES:
  - Pure: recomputed on every read, never mutates or caches
  - Archive filter is exclusive: only archived OR only non-archived tasks
  - Due sort: no due date last; overdue and not done first; then ascending
    due date; equal keys keep input order (sorted() is stable)
  - is_today is derived at query time and never persisted
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import cmp_to_key
from typing import List, Optional

from .constants import STATUS_DONE
from .dates import is_same_day, parse_timestamp
from .models import Project, Task


@dataclass
class TaskView:
    """A task as presented, with query-time derived flags."""

    task: Task
    is_today: bool = False
    is_overdue: bool = False


@dataclass
class ProjectView:
    project_id: str
    name: str
    color: str
    tasks: List[TaskView] = field(default_factory=list)


@dataclass
class ViewOptions:
    """
    Presentation toggles.

    Attributes:
        query: Case-insensitive substring to match against task text
        show_archived: True = only archived tasks, False = only active ones
        sort_by_due: Reorder tasks by due date (see module notes)
    """
    query: str = ""
    show_archived: bool = False
    sort_by_due: bool = False


def matches_search(task: Task, query: str) -> bool:
    """Empty query matches everything."""
    return query.lower() in task.text.lower()


def _is_overdue(task: Task, now: datetime) -> bool:
    return (
        task.due_date is not None
        and task.status != STATUS_DONE
        and parse_timestamp(task.due_date) < now
    )


def sort_by_due_date(tasks: List[Task], now: datetime) -> List[Task]:
    """Return tasks ordered for the "sort by due date" toggle."""

    def compare(a: Task, b: Task) -> int:
        if not a.due_date and not b.due_date:
            return 0
        if not a.due_date:
            return 1
        if not b.due_date:
            return -1

        overdue_a = _is_overdue(a, now)
        overdue_b = _is_overdue(b, now)
        if overdue_a and not overdue_b:
            return -1
        if overdue_b and not overdue_a:
            return 1

        date_a = parse_timestamp(a.due_date)
        date_b = parse_timestamp(b.due_date)
        return (date_a > date_b) - (date_a < date_b)

    return sorted(tasks, key=cmp_to_key(compare))


def build_view(
    projects: List[Project],
    options: Optional[ViewOptions] = None,
    now: Optional[datetime] = None,
) -> List[ProjectView]:
    """
    Project collection -> filtered, optionally sorted presentation.

    Every project appears, even when none of its tasks match.
    """
    options = options or ViewOptions()
    now = now or datetime.now()

    views = []
    for project in projects:
        tasks = [
            t
            for t in project.tasks
            if matches_search(t, options.query) and t.archived == options.show_archived
        ]
        if options.sort_by_due:
            tasks = sort_by_due_date(tasks, now)

        views.append(
            ProjectView(
                project_id=project.id,
                name=project.name,
                color=project.color,
                tasks=[
                    TaskView(
                        task=t,
                        is_today=bool(t.due_date) and is_same_day(parse_timestamp(t.due_date), now),
                        is_overdue=_is_overdue(t, now),
                    )
                    for t in tasks
                ],
            )
        )
    return views
