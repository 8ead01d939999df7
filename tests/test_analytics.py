"""Tests for analytics aggregation."""

from datetime import timedelta

import pytest

from taskflow.core.analytics import (
    active_task_count,
    compute_analytics,
    percent,
    project_status_counts,
)
from taskflow.core.models import Project, Task


def _task(clock, task_id, status="todo", archived=False, days_old=0, due_in=None):
    return Task(
        id=task_id,
        text=f"Task {task_id}",
        created_at=(clock.now - timedelta(days=days_old)).isoformat(),
        status=status,
        archived=archived,
        due_date=(clock.now + timedelta(days=due_in)).isoformat() if due_in is not None else None,
    )


def test_half_done_is_fifty_percent(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(clock, "a", "done"),
            _task(clock, "b", "done"),
            _task(clock, "c", "todo"),
            _task(clock, "d", "progress"),
        ],
    )

    analytics = compute_analytics([project], clock.now)

    assert analytics.total_tasks == 4
    assert analytics.completed_tasks == 2
    assert analytics.in_progress_tasks == 1
    assert analytics.todo_tasks == 1
    assert analytics.completion_rate == 50


def test_empty_collection_is_zero_percent(clock):
    analytics = compute_analytics([Project(id="1", name="Empty", color="bg-red-500")], clock.now)

    assert analytics.total_tasks == 0
    assert analytics.completion_rate == 0
    assert analytics.project_stats[0].completion_rate == 0
    assert compute_analytics([], clock.now).completion_rate == 0


@pytest.mark.parametrize(
    "part, whole, expected",
    [(1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1), (1, 400, 0), (0, 5, 0), (5, 5, 100), (3, 0, 0)],
)
def test_percent_rounds_half_up(part, whole, expected):
    assert percent(part, whole) == expected


def test_archived_tasks_are_excluded_from_totals(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(clock, "a", "done", archived=True),
            _task(clock, "b", "todo"),
        ],
    )

    analytics = compute_analytics([project], clock.now)

    assert analytics.total_tasks == 1
    assert analytics.completed_tasks == 0
    assert analytics.completion_rate == 0


def test_completed_this_week_uses_creation_date_and_counts_archived(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(clock, "recent", "done", days_old=2),
            _task(clock, "recent-archived", "done", archived=True, days_old=6),
            _task(clock, "old", "done", days_old=8),
            _task(clock, "recent-todo", "todo", days_old=1),
        ],
    )

    assert compute_analytics([project], clock.now).completed_this_week == 2


def test_overdue_counts_only_unfinished_active_tasks(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(clock, "late", "todo", due_in=-1),
            _task(clock, "late-done", "done", due_in=-1),
            _task(clock, "late-archived", "progress", archived=True, due_in=-1),
            _task(clock, "future", "todo", due_in=3),
            _task(clock, "no-due", "todo"),
        ],
    )

    assert compute_analytics([project], clock.now).overdue_tasks == 1


def test_project_stats_sorted_by_count_with_stable_ties(clock):
    projects = [
        Project(id="a", name="A", color="bg-blue-500", tasks=[_task(clock, "a1")]),
        Project(id="b", name="B", color="bg-blue-500", tasks=[_task(clock, "b1"), _task(clock, "b2", "done")]),
        Project(id="c", name="C", color="bg-blue-500", tasks=[_task(clock, "c1")]),
        Project(id="d", name="D", color="bg-blue-500"),
    ]

    stats = compute_analytics(projects, clock.now).project_stats

    assert [s.name for s in stats] == ["B", "A", "C", "D"]
    assert stats[0].completion_rate == 50
    assert stats[0].task_count == 2


def test_to_dict_is_json_friendly(clock):
    data = compute_analytics(
        [Project(id="1", name="Home", color="bg-blue-500", tasks=[_task(clock, "a")])], clock.now
    ).to_dict()

    assert data["total_tasks"] == 1
    assert data["project_stats"][0]["name"] == "Home"


def test_status_counts_and_active_count(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(clock, "a", "todo"),
            _task(clock, "b", "progress"),
            _task(clock, "c", "done"),
            _task(clock, "d", "todo", archived=True),
        ],
    )

    assert project_status_counts(project) == {"todo": 1, "progress": 1, "done": 1}
    assert active_task_count([project]) == 2
