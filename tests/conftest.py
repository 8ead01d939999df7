"""Shared pytest configuration and fixtures for tests."""

import sys
import io
import random
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from taskflow.core import repository  # noqa: E402
from taskflow.core.service import TaskStore, seed_projects  # noqa: E402


# Wednesday, mid-morning
FROZEN_NOW = datetime(2026, 10, 14, 9, 30)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Point the default database at tmp_path so no test touches ~/.taskflow."""
    db_path = tmp_path / "taskflow.db"
    monkeypatch.setattr(repository, "DB_PATH", db_path)
    monkeypatch.setattr(repository, "DB_DIR", tmp_path)
    yield db_path


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def store(temp_db, clock):
    """Seeded store persisting to the temp database."""
    return TaskStore(
        seed_projects(),
        db_path=temp_db,
        clock=clock,
        rng=random.Random(7),
    )


@pytest.fixture
def memory_store(clock):
    """Seeded store that never touches disk."""
    return TaskStore(seed_projects(), clock=clock, persist=False, rng=random.Random(7))
