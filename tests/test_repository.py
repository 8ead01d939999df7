"""Tests for the SQLite blob repository."""

import pytest

from taskflow.core import repository
from taskflow.core.constants import STORAGE_KEY
from taskflow.core.exceptions import PersistenceError
from taskflow.core.models import Project, Task


def test_load_returns_none_when_nothing_saved(temp_db):
    assert repository.load_projects(temp_db) is None


def test_save_then_load_round_trip(temp_db):
    projects = [
        Project(
            id="1",
            name="Home",
            color="bg-teal-500",
            tasks=[Task(id="10", text="Fix sink", created_at="2026-10-14T09:30:00", notes=None)],
        ),
        Project(id="2", name="Empty", color="bg-red-500"),
    ]

    repository.save_projects(projects, temp_db)
    loaded = repository.load_projects(temp_db)

    assert loaded == projects


def test_save_overwrites_previous_blob(temp_db):
    repository.save_projects([Project(id="1", name="First", color="bg-blue-500")], temp_db)
    repository.save_projects([], temp_db)

    assert repository.load_projects(temp_db) == []


def test_default_path_is_used_when_none_given(temp_db):
    """DB_PATH is looked up at call time so tests can redirect it."""
    repository.save_projects([Project(id="1", name="Home", color="bg-blue-500")])

    assert temp_db.exists()
    assert repository.load_projects()[0].name == "Home"


def test_blob_is_stored_under_storage_key(temp_db):
    repository.save_projects([], temp_db)

    assert repository.read_blob(STORAGE_KEY, temp_db) == "[]"
    assert repository.read_blob("somethingElse", temp_db) is None


def test_malformed_blob_raises_value_error(temp_db):
    repository.write_blob(STORAGE_KEY, "{not json", temp_db)
    with pytest.raises(ValueError):
        repository.load_projects(temp_db)

    repository.write_blob(STORAGE_KEY, '{"id": "1"}', temp_db)
    with pytest.raises(ValueError):
        repository.load_projects(temp_db)


def test_unwritable_location_raises_persistence_error(tmp_path):
    """A directory where the database file should be can't be opened."""
    blocked = tmp_path / "blocked.db"
    blocked.mkdir()

    with pytest.raises(PersistenceError) as exc_info:
        repository.write_blob(STORAGE_KEY, "[]", blocked)

    assert exc_info.value.key == STORAGE_KEY


def test_filesystem_errors_become_persistence_errors(tmp_path):
    """The parent of the database path is a regular file."""
    (tmp_path / "afile").write_text("not a directory")
    db_path = tmp_path / "afile" / "taskflow.db"

    with pytest.raises(PersistenceError):
        repository.write_blob(STORAGE_KEY, "[]", db_path)
    with pytest.raises(PersistenceError):
        repository.load_projects(db_path)
