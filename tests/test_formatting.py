"""Tests for display labels, JSON output and markdown export."""

import json
from datetime import datetime, timedelta

from rich.console import Console

from taskflow.core.analytics import compute_analytics
from taskflow.core.models import Project, Task
from taskflow.core.view import build_view
from taskflow.formatting import TaskFormatter, due_label, export_markdown, recurrence_label


def _task(**kwargs):
    defaults = dict(id="1", text="Task", created_at="2026-10-14T09:30:00")
    defaults.update(kwargs)
    return Task(**defaults)


def test_due_labels(clock):
    now = clock.now
    assert due_label(_task(), now) is None
    assert due_label(_task(due_date=datetime(2026, 10, 14).isoformat()), now) == "Today"
    assert due_label(_task(due_date=datetime(2026, 10, 15).isoformat()), now) == "Tomorrow"
    assert due_label(_task(due_date=datetime(2026, 10, 10).isoformat()), now) == "Overdue"
    assert due_label(_task(due_date=datetime(2026, 11, 3).isoformat()), now) == "Nov 3"


def test_recurrence_labels():
    assert recurrence_label(_task()) is None
    assert recurrence_label(_task(recurring="daily")) == "daily"
    assert recurrence_label(_task(recurring="weekly", recurring_day=3)) == "Wed"
    assert recurrence_label(_task(recurring="monthly")) == "monthly"


def test_export_markdown_layout():
    projects = [
        Project(
            id="1",
            name="Real Estate Dubai",
            color="bg-blue-500",
            tasks=[
                _task(id="a", text="Visit apartment", status="done", priority="high",
                      due_date="2026-10-09T00:00:00", recurring="weekly", notes="Bring keys"),
                _task(id="b", text="Call agent", status="progress", priority="low"),
                _task(id="c", text="Archived one", archived=True),
            ],
        ),
        Project(id="2", name="Real Estate Germany", color="bg-green-500"),
    ]

    text = export_markdown(projects, datetime(2026, 10, 9, 15, 0))

    assert text == (
        "# TaskFlow Export\n"
        "\n"
        "Generated on: 10/9/2026\n"
        "\n"
        "## Real Estate Dubai\n"
        "\n"
        "- ✅ Visit apartment 🔴 (Due: Oct 9) [weekly]\n"
        "  *Note: Bring keys*\n"
        "- 🔄 Call agent 🟢\n"
        "\n"
        "## Real Estate Germany\n"
        "\n"
        "*No active tasks*\n"
        "\n"
    )


def test_export_project_with_only_archived_tasks_has_no_active_tasks():
    project = Project(
        id="1", name="Home", color="bg-blue-500", tasks=[_task(archived=True)]
    )
    assert "*No active tasks*" in export_markdown([project], datetime(2026, 1, 2))


def test_to_json_array_adds_project_and_today_flag(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[_task(id="t", due_date=(clock.now + timedelta(hours=1)).isoformat())],
    )

    data = json.loads(TaskFormatter.to_json_array(build_view([project], now=clock.now)))

    assert data[0]["id"] == "t"
    assert data[0]["projectId"] == "1"
    assert data[0]["isToday"] is True
    assert data[0]["dueDate"] == "2026-10-14T10:30:00"


def test_tables_render(clock):
    project = Project(
        id="1",
        name="Home",
        color="bg-blue-500",
        tasks=[
            _task(id="t1", text="Fix sink", status="done", notes="Call plumber"),
            _task(id="t2", text="Paint fence", due_date="2026-10-01T00:00:00", dependencies=["t1"]),
        ],
    )
    console = Console(record=True, width=140)

    console.print(TaskFormatter.create_table(build_view([project], now=clock.now), clock.now))
    console.print(TaskFormatter.create_project_table([project]))
    analytics = compute_analytics([project], clock.now)
    console.print(TaskFormatter.create_analytics_table(analytics))
    console.print(TaskFormatter.create_project_stats_table(analytics))

    output = console.export_text()
    assert "Fix sink" in output
    assert "Overdue" in output
    assert "Completion rate" in output
    assert "50%" in output


def test_tables_show_markup_in_names_literally(clock):
    project = Project(
        id="1",
        name="[bold]Home",
        color="bg-blue-500",
        tasks=[_task(id="t1", text="[red]x"), _task(id="t2", text="a[/b]")],
    )
    console = Console(record=True, width=140)

    console.print(TaskFormatter.create_table(build_view([project], now=clock.now), clock.now))
    console.print(TaskFormatter.create_project_table([project]))
    console.print(TaskFormatter.create_project_stats_table(compute_analytics([project], clock.now)))

    output = console.export_text()
    assert "[red]x" in output
    assert "a[/b]" in output
    assert "[bold]Home" in output
