"""Tests for TaskStore: projects, tasks, validation, persistence."""

import random
from collections import Counter
from datetime import datetime

import pytest

from taskflow.core import repository
from taskflow.core.constants import CREATION_PALETTE, PROJECT_PALETTE, STORAGE_KEY
from taskflow.core.exceptions import PersistenceError, ValidationError
from taskflow.core.service import TaskStore, seed_projects


# --- Loading ---


def test_load_seeds_and_persists_when_nothing_stored(temp_db, clock):
    store = TaskStore.load(temp_db, clock=clock)

    assert [p.name for p in store.projects] == ["Real Estate Dubai", "Real Estate Germany"]
    assert [p.id for p in store.projects] == ["1", "2"]
    assert repository.load_projects(temp_db) == seed_projects()


def test_load_restores_saved_state(temp_db, store):
    project = store.create_project("Home")
    store.add_task(project.id, "Fix sink")

    reloaded = TaskStore.load(temp_db)

    assert reloaded.projects == store.projects


def test_load_falls_back_to_seed_on_malformed_blob(temp_db, caplog):
    repository.write_blob(STORAGE_KEY, "this is not json", temp_db)

    store = TaskStore.load(temp_db)

    assert [p.id for p in store.projects] == ["1", "2"]
    assert "malformed" in caplog.text


def test_load_falls_back_when_task_is_missing_required_keys(temp_db):
    repository.write_blob(
        STORAGE_KEY, '[{"id": "1", "name": "X", "color": "bg-red-500", "tasks": [{"id": "t"}]}]', temp_db
    )

    store = TaskStore.load(temp_db)

    assert [p.name for p in store.projects] == ["Real Estate Dubai", "Real Estate Germany"]


# --- Projects ---


def test_create_project_trims_and_picks_creation_color(memory_store):
    project = memory_store.create_project("  Home  ")

    assert project.name == "Home"
    assert project.color in CREATION_PALETTE
    assert project.tasks == []
    assert memory_store.projects[-1].id == project.id


def test_create_project_rejects_blank_name(memory_store):
    before = memory_store.projects
    with pytest.raises(ValidationError):
        memory_store.create_project("   ")
    assert memory_store.projects == before


def test_delete_project_removes_its_tasks(memory_store):
    memory_store.add_task("1", "Visit apartment")

    assert memory_store.delete_project("1") is True
    assert [p.id for p in memory_store.projects] == ["2"]
    assert memory_store.delete_project("1") is False


def test_rename_and_recolor_project(memory_store):
    assert memory_store.rename_project("2", "Germany").name == "Germany"
    assert memory_store.recolor_project("2", "bg-teal-500").color == "bg-teal-500"
    assert "bg-teal-500" in PROJECT_PALETTE

    with pytest.raises(ValidationError):
        memory_store.recolor_project("2", "bg-black-500")
    with pytest.raises(ValidationError):
        memory_store.rename_project("2", "")

    assert memory_store.rename_project("missing", "Name") is None


def test_find_project_by_name_is_case_insensitive(memory_store):
    assert memory_store.find_project_by_name("real estate dubai").id == "1"
    assert memory_store.find_project_by_name("nope") is None


# --- Tasks ---


def test_add_task_defaults(memory_store, clock):
    task = memory_store.add_task("1", "  Call the notary  ")

    assert task.text == "Call the notary"
    assert task.status == "todo"
    assert task.priority == "medium"
    assert task.archived is False
    assert task.due_date is None
    assert task.dependencies == []
    assert task.created_at == clock.now.isoformat()
    assert task.id.isdigit()
    assert memory_store.get_project("1").tasks[-1].id == task.id


def test_add_task_validation_leaves_state_untouched(memory_store):
    before = memory_store.projects

    with pytest.raises(ValidationError):
        memory_store.add_task("1", "   ")
    with pytest.raises(ValidationError):
        memory_store.add_task("1", "Task", recurring="yearly")
    with pytest.raises(ValidationError):
        memory_store.add_task("missing", "Task")

    assert memory_store.projects == before


def test_ids_are_unique_when_clock_stands_still(memory_store):
    ids = [memory_store.add_task("1", f"Task {i}").id for i in range(5)]
    ids.append(memory_store.create_project("Another").id)

    assert len(set(ids)) == len(ids)


def test_add_task_dependencies_are_deduplicated(memory_store):
    task = memory_store.add_task("1", "Sign", dependencies=["a", "b", "a", 7])
    assert task.dependencies == ["a", "b", "7"]


def test_update_task_merges_fields(memory_store):
    task = memory_store.add_task("1", "Visit")

    updated = memory_store.update_task(
        "1", task.id, priority="high", due_date=datetime(2026, 10, 20), notes="  keys  "
    )

    assert updated.priority == "high"
    assert updated.due_date == "2026-10-20T00:00:00"
    assert updated.notes == "keys"
    assert updated.text == "Visit"


def test_update_task_unknown_ids_are_noops(memory_store):
    before = memory_store.projects

    assert memory_store.update_task("1", "missing", text="X") is None
    assert memory_store.update_task("missing", "missing", text="X") is None
    assert memory_store.delete_task("1", "missing") is False

    assert memory_store.projects == before


@pytest.mark.parametrize(
    "fields",
    [
        {"status": "finished"},
        {"priority": "urgent"},
        {"text": ""},
        {"recurring": "hourly"},
        {"recurring_day": 7},
        {"recurring_day": True},
        {"due_date": "not a date"},
        {"archived": "yes"},
        {"id": "other"},
        {"created_at": "2020-01-01T00:00:00"},
        {"colour": "red"},
    ],
)
def test_update_task_rejects_invalid_fields(memory_store, fields):
    task = memory_store.add_task("1", "Visit")
    before = memory_store.projects

    with pytest.raises(ValidationError):
        memory_store.update_task("1", task.id, **{"notes": "changed", **fields})

    assert memory_store.projects == before


def test_toggle_status_cycles_back_after_three(memory_store):
    task = memory_store.add_task("1", "Visit")

    seen = [memory_store.toggle_status("1", task.id).status for _ in range(3)]

    assert seen == ["progress", "done", "todo"]


def test_cycle_priority_cycles_back_after_three(memory_store):
    task = memory_store.add_task("1", "Visit")

    seen = [memory_store.cycle_priority("1", task.id).priority for _ in range(3)]

    assert seen == ["high", "low", "medium"]


def test_toggle_archive(memory_store):
    task = memory_store.add_task("1", "Visit")

    assert memory_store.toggle_archive("1", task.id).archived is True
    assert memory_store.toggle_archive("1", task.id).archived is False


def test_clear_due_date_also_clears_recurrence(memory_store):
    task = memory_store.add_task("1", "Water plants")
    memory_store.set_weekly_on("1", task.id, 5)

    cleared = memory_store.clear_due_date("1", task.id)

    assert cleared.due_date is None
    assert cleared.recurring is None
    assert cleared.recurring_day is None


def test_set_weekly_on_sets_next_weekday_at_midnight(memory_store):
    """Frozen clock is a Wednesday; Friday is two days out."""
    task = memory_store.add_task("1", "Water plants")

    updated = memory_store.set_weekly_on("1", task.id, 5)

    assert updated.recurring == "weekly"
    assert updated.recurring_day == 5
    assert updated.due_date == "2026-10-16T00:00:00"

    with pytest.raises(ValidationError):
        memory_store.set_weekly_on("1", task.id, 9)


# --- Reordering ---


def _ids(store, project_id):
    return [t.id for t in store.get_project(project_id).tasks]


def test_reorder_moves_task_into_target_slot(memory_store):
    a, b, c, d = (memory_store.add_task("1", name).id for name in "abcd")

    assert memory_store.reorder_task("1", d, b) is True
    assert _ids(memory_store, "1") == [a, d, b, c]

    assert memory_store.reorder_task("1", a, c) is True
    assert _ids(memory_store, "1") == [d, b, c, a]


def test_reorder_preserves_membership(memory_store):
    ids = [memory_store.add_task("1", f"Task {i}").id for i in range(6)]
    rng = random.Random(3)

    for _ in range(20):
        source, target = rng.sample(ids, 2)
        memory_store.reorder_task("1", source, target)
        assert Counter(_ids(memory_store, "1")) == Counter(ids)


def test_reorder_across_projects_changes_nothing(memory_store):
    a = memory_store.add_task("1", "Dubai task").id
    b = memory_store.add_task("2", "Germany task").id
    before = memory_store.projects

    assert memory_store.reorder_task("1", a, b) is False
    assert memory_store.reorder_task("2", a, b) is False
    assert memory_store.reorder_task("1", a, a) is False

    assert memory_store.projects == before


# --- Snapshots, undo, persistence ---


def test_projects_returns_a_copy(memory_store):
    snapshot = memory_store.projects
    snapshot[0].name = "Hacked"
    snapshot[0].tasks.append(None)

    assert memory_store.projects[0].name == "Real Estate Dubai"
    assert memory_store.projects[0].tasks == []


def test_clear_completed_and_undo(memory_store):
    keep = memory_store.add_task("1", "Still todo")
    done = memory_store.add_task("1", "Finished")
    archived_done = memory_store.add_task("2", "Archived and finished")
    memory_store.update_task("1", done.id, status="done")
    memory_store.update_task("2", archived_done.id, status="done", archived=True)
    before = memory_store.projects

    assert memory_store.clear_completed() == 1
    assert _ids(memory_store, "1") == [keep.id]
    assert _ids(memory_store, "2") == [archived_done.id]

    assert memory_store.undo() is True
    assert memory_store.projects == before
    assert memory_store.undo() is False


def test_active_task_count(memory_store):
    a = memory_store.add_task("1", "A")
    b = memory_store.add_task("1", "B")
    memory_store.add_task("2", "C")
    memory_store.update_task("1", a.id, status="done")
    memory_store.toggle_archive("1", b.id)

    assert memory_store.active_task_count() == 1


def test_every_mutation_is_written_through(store, temp_db):
    task = store.add_task("1", "Visit")
    assert repository.load_projects(temp_db) == store.projects

    store.toggle_status("1", task.id)
    assert repository.load_projects(temp_db)[0].tasks[0].status == "progress"


def test_batch_persists_once(store, temp_db, monkeypatch):
    calls = []
    original = repository.save_projects
    monkeypatch.setattr(
        repository, "save_projects", lambda projects, db_path=None: calls.append(1) or original(projects, db_path)
    )

    with store.batch():
        store.add_task("1", "A")
        store.add_task("1", "B")
        assert calls == []

    assert calls == [1]
    assert len(repository.load_projects(temp_db)[0].tasks) == 2


def test_persistence_failure_keeps_in_memory_state(tmp_path, clock):
    blocked = tmp_path / "blocked.db"
    blocked.mkdir()
    reported = []
    store = TaskStore(
        seed_projects(), db_path=blocked, clock=clock, on_persistence_error=reported.append
    )

    task = store.add_task("1", "Survives")

    assert store.find_task(task.id)[1].text == "Survives"
    assert isinstance(store.last_persistence_error, PersistenceError)
    assert len(reported) == 1


def test_filesystem_failure_on_write_is_reported_not_raised(tmp_path, clock):
    """A regular file where the data directory should be."""
    (tmp_path / "afile").write_text("not a directory")
    reported = []
    store = TaskStore(
        seed_projects(),
        db_path=tmp_path / "afile" / "taskflow.db",
        clock=clock,
        on_persistence_error=reported.append,
    )

    task = store.add_task("1", "Survives")

    assert store.find_task(task.id)[1].text == "Survives"
    assert isinstance(store.last_persistence_error, PersistenceError)
    assert len(reported) == 1


def test_load_falls_back_to_seed_when_data_directory_is_unusable(tmp_path, caplog):
    (tmp_path / "afile").write_text("not a directory")

    store = TaskStore.load(tmp_path / "afile" / "taskflow.db")

    assert [p.id for p in store.projects] == ["1", "2"]
    assert "Could not read stored data" in caplog.text
    assert isinstance(store.last_persistence_error, PersistenceError)


def test_load_falls_back_when_timestamp_has_wrong_type(temp_db):
    repository.write_blob(
        STORAGE_KEY,
        '[{"id": "1", "name": "X", "color": "bg-red-500", "tasks": '
        '[{"id": "t", "text": "Feed cat", "createdAt": 1700000000000, "status": "done", "recurring": "daily"}]}]',
        temp_db,
    )

    store = TaskStore.load(temp_db)

    assert [p.name for p in store.projects] == ["Real Estate Dubai", "Real Estate Germany"]


@pytest.mark.parametrize("name", [5, None, ["Home"]])
def test_project_names_must_be_text(memory_store, name):
    before = memory_store.projects

    with pytest.raises(ValidationError):
        memory_store.create_project(name)
    with pytest.raises(ValidationError):
        memory_store.rename_project("1", name)

    assert memory_store.projects == before


@pytest.mark.parametrize(
    "kwargs",
    [
        {"text": 5},
        {"text": None},
        {"text": "Task", "dependencies": "abc"},
        {"text": "Task", "dependencies": 42},
    ],
)
def test_add_task_rejects_wrong_types(memory_store, kwargs):
    before = memory_store.projects

    with pytest.raises(ValidationError):
        memory_store.add_task("1", **kwargs)

    assert memory_store.projects == before


@pytest.mark.parametrize(
    "fields",
    [{"text": 5}, {"notes": 5}, {"notes": ["a"]}, {"dependencies": "abc"}, {"dependencies": 3}],
)
def test_update_task_rejects_wrong_types(memory_store, fields):
    task = memory_store.add_task("1", "Visit", dependencies=["x"])
    before = memory_store.projects

    with pytest.raises(ValidationError):
        memory_store.update_task("1", task.id, **fields)

    assert memory_store.projects == before
