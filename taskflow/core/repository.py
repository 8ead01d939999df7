"""
FILE: taskflow/core/repository.py
PURPOSE: Persistence adapter: the project collection as one blob in SQLite
EXPORTS:
  - get_connection(db_path) -> Connection
  - init_database(conn) -> None
  - read_blob(key, db_path) -> str | None
  - write_blob(key, value, db_path) -> None
  - serialize_projects(projects) -> str
  - deserialize_projects(blob) -> List[Project]
  - load_projects(db_path) -> List[Project] | None
  - save_projects(projects, db_path) -> None
DEPENDENCIES:
  - sqlite3 (stdlib)
  - json (stdlib)
  - pathlib (stdlib)
  - taskflow.core.models (Project)
  - taskflow.core.exceptions (PersistenceError)
NOTES:
  - Database stored at ~/.taskflow/taskflow.db unless a path is passed in
  - The store is an opaque key-value table; the whole collection lives under
    STORAGE_KEY as a JSON array
  - sqlite3 and filesystem failures are wrapped in PersistenceError
  - Malformed JSON is NOT handled here; deserialize_projects raises and the
    task store decides how to recover
"""

import json
import logging
import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .constants import STORAGE_KEY
from .models import Project
from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


# Database file location (cross-platform)
DB_DIR = Path.home() / ".taskflow"
DB_PATH = DB_DIR / "taskflow.db"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS blobs (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Get SQLite connection to the TaskFlow database.

    Creates the parent directory if it doesn't exist.
    Enables row_factory for dict-like row access.
    Initializes the schema on first connection.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row

    init_database(conn)

    return conn


def init_database(conn: sqlite3.Connection) -> None:
    """Create the blob table if missing. Safe to call multiple times."""
    conn.execute(SCHEMA_SQL)
    conn.commit()


def read_blob(key: str, db_path: Optional[Path] = None) -> Optional[str]:
    """
    Fetch a blob by key.

    Returns:
        Stored string, or None if the key has never been written

    Raises:
        PersistenceError: If the database can't be read
    """
    try:
        with closing(get_connection(db_path)) as conn:
            row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
    except (sqlite3.Error, OSError) as e:
        raise PersistenceError(f"Could not read '{key}': {e}", key=key) from e

    return row["value"] if row else None


def write_blob(key: str, value: str, db_path: Optional[Path] = None) -> None:
    """
    Insert or replace a blob.

    Raises:
        PersistenceError: If the write fails (disk full, read-only file, ...)
    """
    now = datetime.now().isoformat()
    try:
        with closing(get_connection(db_path)) as conn:
            conn.execute(
                """
                INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, value, now),
            )
            conn.commit()
    except (sqlite3.Error, OSError) as e:
        raise PersistenceError(f"Could not write '{key}': {e}", key=key) from e


def serialize_projects(projects: List[Project]) -> str:
    """Project collection -> JSON array text (nulls kept explicit)."""
    return json.dumps([p.to_dict() for p in projects], ensure_ascii=False)


def deserialize_projects(blob: str) -> List[Project]:
    """
    JSON array text -> project collection.

    Raises:
        ValueError / KeyError / TypeError: If the blob is malformed
    """
    data = json.loads(blob)
    if not isinstance(data, list):
        raise ValueError("Stored projects must be a JSON array")
    return [Project.from_dict(item) for item in data]


def load_projects(db_path: Optional[Path] = None) -> Optional[List[Project]]:
    """
    Load the persisted project collection.

    Returns:
        List of projects, or None if nothing has been persisted yet
    """
    blob = read_blob(STORAGE_KEY, db_path)
    if blob is None:
        return None
    return deserialize_projects(blob)


def save_projects(projects: List[Project], db_path: Optional[Path] = None) -> None:
    """Persist the full project collection under STORAGE_KEY."""
    write_blob(STORAGE_KEY, serialize_projects(projects), db_path)
    logger.debug("Saved %d project(s) to %s", len(projects), db_path or DB_PATH)
