"""Tests for the undo log."""

import pytest

from taskflow.core.models import Project
from taskflow.core.undo import UndoLog


def _projects(name):
    return [Project(id="1", name=name, color="bg-blue-500")]


def test_push_and_pop_are_last_in_first_out():
    log = UndoLog()
    log.push("first", _projects("A"), "2026-10-14T09:00:00")
    log.push("second", _projects("B"), "2026-10-14T09:01:00")

    assert len(log) == 2
    assert log.peek().operation == "second"
    assert log.pop().projects[0].name == "B"
    assert log.pop().projects[0].name == "A"
    assert log.pop() is None
    assert not log.can_undo()


def test_snapshots_are_copies():
    projects = _projects("Original")
    log = UndoLog()
    log.push("op", projects, "2026-10-14T09:00:00")

    projects[0].name = "Changed later"

    assert log.pop().projects[0].name == "Original"


def test_depth_is_capped_dropping_oldest():
    log = UndoLog(max_depth=3)
    for i in range(5):
        log.push(f"op{i}", _projects(str(i)), "2026-10-14T09:00:00")

    assert len(log) == 3
    assert [log.pop().operation for _ in range(3)] == ["op4", "op3", "op2"]


def test_clear_and_invalid_depth():
    log = UndoLog()
    log.push("op", _projects("A"), "2026-10-14T09:00:00")
    log.clear()
    assert len(log) == 0

    with pytest.raises(ValueError):
        UndoLog(max_depth=0)


def test_store_undo_depth_is_configurable(clock):
    from taskflow.core.service import TaskStore, seed_projects

    store = TaskStore(seed_projects(), clock=clock, persist=False, undo_depth=2)
    for _ in range(4):
        store.clear_completed()

    assert store.undo_log.max_depth == 2
    assert len(store.undo_log) == 2
