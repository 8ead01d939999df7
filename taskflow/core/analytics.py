"""
FILE: taskflow/core/analytics.py
PURPOSE: Read-only summary statistics over a project collection
EXPORTS:
  - ProjectStat (dataclass)
  - Analytics (dataclass)
  - percent(part, whole) -> int
  - compute_analytics(projects, now) -> Analytics
  - project_status_counts(project) -> Dict[str, int]
  - active_task_count(projects) -> int
DEPENDENCIES:
  - dataclasses (stdlib)
  - taskflow.core.models (Project, Task)
  - taskflow.core.dates (timestamp parsing)
NOTES:
  - Pure functions of (projects, now); nothing is cached or mutated
  - Archived tasks are excluded everywhere except completed_this_week
  - completed_this_week counts done tasks CREATED in the last 7 days; there is
    no completion timestamp, and changing the rule would change user-visible
    numbers
  - Percentages round half up (12.5 -> 13), not Python's banker's rounding
"""

import math
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List

from .constants import STATUS_DONE, STATUS_PROGRESS, STATUS_TODO
from .dates import parse_timestamp
from .models import Project, Task


@dataclass
class ProjectStat:
    """Per-project slice of the analytics."""

    project_id: str
    name: str
    task_count: int
    completion_rate: int


@dataclass
class Analytics:
    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    todo_tasks: int = 0
    overdue_tasks: int = 0
    completed_this_week: int = 0
    completion_rate: int = 0
    project_stats: List[ProjectStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def percent(part: int, whole: int) -> int:
    """Round-half-up percentage; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def _is_overdue(task: Task, now: datetime) -> bool:
    if not task.due_date or task.status == STATUS_DONE:
        return False
    return parse_timestamp(task.due_date) < now


def compute_analytics(projects: List[Project], now: datetime) -> Analytics:
    """
    Aggregate counts and rates for the analytics dashboard.

    Args:
        projects: Project collection snapshot
        now: Reference time for overdue / this-week checks

    Returns:
        Analytics with project_stats sorted by task count, descending
        (ties keep collection order)
    """
    all_tasks = [t for p in projects for t in p.tasks]
    active = [t for t in all_tasks if not t.archived]

    completed = sum(1 for t in active if t.status == STATUS_DONE)
    week_ago = now - timedelta(days=7)

    stats = []
    for project in projects:
        project_active = project.active_tasks
        project_done = sum(1 for t in project_active if t.status == STATUS_DONE)
        stats.append(
            ProjectStat(
                project_id=project.id,
                name=project.name,
                task_count=len(project_active),
                completion_rate=percent(project_done, len(project_active)),
            )
        )
    stats.sort(key=lambda s: s.task_count, reverse=True)

    return Analytics(
        total_tasks=len(active),
        completed_tasks=completed,
        in_progress_tasks=sum(1 for t in active if t.status == STATUS_PROGRESS),
        todo_tasks=sum(1 for t in active if t.status == STATUS_TODO),
        overdue_tasks=sum(1 for t in active if _is_overdue(t, now)),
        completed_this_week=sum(
            1
            for t in all_tasks
            if t.status == STATUS_DONE
            and t.created_at
            and parse_timestamp(t.created_at) >= week_ago
        ),
        completion_rate=percent(completed, len(active)),
        project_stats=stats,
    )


def project_status_counts(project: Project) -> Dict[str, int]:
    """todo/progress/done counts among a project's non-archived tasks."""
    counts = {STATUS_TODO: 0, STATUS_PROGRESS: 0, STATUS_DONE: 0}
    for task in project.active_tasks:
        counts[task.status] = counts.get(task.status, 0) + 1
    return counts


def active_task_count(projects: List[Project]) -> int:
    """Tasks still on someone's plate: not archived, not done."""
    return sum(
        1 for p in projects for t in p.tasks if not t.archived and t.status != STATUS_DONE
    )
