"""
FILE: taskflow/core/service.py
PURPOSE: Task store: owns the project collection and enforces its invariants
EXPORTS:
  - TaskStore (class)
  - seed_projects() -> List[Project]
DEPENDENCIES:
  - taskflow.core.models (Task, Project)
  - taskflow.core.repository (load_projects, save_projects)
  - taskflow.core.undo (UndoLog)
  - taskflow.core.dates (timestamp helpers)
  - taskflow.core.exceptions (ValidationError, PersistenceError)
  - threading (store lock)
NOTES:
  - All business rules live here; CLI/REPL/scheduler call these methods
  - Unknown project/task ids in update/delete/reorder paths are no-ops,
    never errors (stale ids from the scheduler or double invocations)
  - ValidationError aborts the operation before anything is mutated
  - Every successful mutation is written through to the repository;
    a PersistenceError is logged and kept in last_persistence_error but
    never reverts the in-memory state
  - One re-entrant lock guards the whole collection; batch() holds it
    across several operations and persists once at the end
  - Time comes from the injected clock so recurrence/overdue logic is testable
"""

import copy
import logging
import random
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from . import repository
from .constants import (
    CREATION_PALETTE,
    DEFAULT_UNDO_DEPTH,
    PRIORITY_CYCLE,
    PROJECT_PALETTE,
    RECUR_WEEKLY,
    STATUS_CYCLE,
    STATUS_DONE,
    VALID_PRIORITIES,
    VALID_RECURRENCES,
    VALID_STATUSES,
)
from .dates import next_weekday, parse_timestamp, start_of_day, to_iso
from .exceptions import PersistenceError, ValidationError
from .models import Project, Task, TASK_FIELD_KEYS
from .undo import UndoLog

logger = logging.getLogger(__name__)


# Fields update_task() may change
UPDATABLE_FIELDS = frozenset(TASK_FIELD_KEYS) - {"id", "created_at"}


def seed_projects() -> List[Project]:
    """Demo dataset used when nothing has been persisted yet."""
    return [
        Project(id="1", name="Real Estate Dubai", color="bg-blue-500"),
        Project(id="2", name="Real Estate Germany", color="bg-green-500"),
    ]


class TaskStore:
    """
    In-memory owner of the project collection.

    Args:
        projects: Initial collection (copied). Defaults to empty.
        db_path: Database file for write-through persistence
            (None = repository default)
        clock: Returns "now" as a naive local datetime
        persist: Set False to keep the store purely in memory
        undo_depth: Maximum number of undo snapshots kept
        rng: Random source for project colors
        on_persistence_error: Called with the PersistenceError when a write fails
    """

    def __init__(
        self,
        projects: Optional[List[Project]] = None,
        *,
        db_path: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
        persist: bool = True,
        undo_depth: int = DEFAULT_UNDO_DEPTH,
        rng: Optional[random.Random] = None,
        on_persistence_error: Optional[Callable[[PersistenceError], None]] = None,
    ):
        self._projects: List[Project] = copy.deepcopy(projects) if projects else []
        self.db_path = db_path
        self.clock = clock
        self.persist_enabled = persist
        self.undo_log = UndoLog(undo_depth)
        self._rng = rng or random.Random()
        self.on_persistence_error = on_persistence_error
        self.last_persistence_error: Optional[PersistenceError] = None

        self.lock = threading.RLock()
        self._batch_depth = 0
        self._dirty = False
        self._last_id_ms = 0

    @classmethod
    def load(cls, db_path: Optional[Path] = None, **kwargs) -> "TaskStore":
        """
        Build a store from persisted state.

        Falls back to the demo seed when nothing is stored or the stored blob
        is malformed; no partial recovery is attempted.
        """
        store = cls(db_path=db_path, **kwargs)
        try:
            projects = repository.load_projects(db_path)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Stored data is malformed, starting from seed data: %s", e)
            projects = None
        except PersistenceError as e:
            logger.error("Could not read stored data, starting from seed data: %s", e)
            projects = None

        if projects is None:
            logger.info("No usable stored state; seeding demo projects")
            store._projects = seed_projects()
            store._persist()
        else:
            store._projects = projects
            logger.info(
                "Loaded %d project(s), %d task(s)",
                len(projects),
                sum(len(p.tasks) for p in projects),
            )
        return store

    # --- Internals ---

    def now(self) -> datetime:
        return self.clock()

    def _now_iso(self) -> str:
        return to_iso(self.clock())

    def new_id(self, suffix: str = "") -> str:
        """
        Millisecond timestamp id, bumped until unique across the collection.

        The bump keeps ids unique even when the clock stands still.
        """
        with self.lock:
            existing = {p.id for p in self._projects}
            existing.update(t.id for p in self._projects for t in p.tasks)

            candidate_ms = max(int(self.clock().timestamp() * 1000), self._last_id_ms + 1)
            while f"{candidate_ms}{suffix}" in existing:
                candidate_ms += 1
            self._last_id_ms = candidate_ms
            return f"{candidate_ms}{suffix}"

    def _project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self._projects if p.id == project_id), None)

    def _persist(self) -> None:
        """Write-through after a mutation (deferred while inside batch())."""
        if self._batch_depth:
            self._dirty = True
            return
        self._dirty = False
        if not self.persist_enabled:
            return
        try:
            repository.save_projects(self._projects, self.db_path)
        except PersistenceError as e:
            self.last_persistence_error = e
            logger.warning("Persisting projects failed, keeping in-memory state: %s", e)
            if self.on_persistence_error:
                self.on_persistence_error(e)
        else:
            self.last_persistence_error = None

    @contextmanager
    def batch(self) -> Iterator["TaskStore"]:
        """Hold the store lock across several operations and persist once."""
        with self.lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0 and self._dirty:
                    self._persist()

    # --- Reads ---

    @property
    def projects(self) -> List[Project]:
        """Deep-copied snapshot of the whole collection."""
        with self.lock:
            return copy.deepcopy(self._projects)

    def get_project(self, project_id: str) -> Optional[Project]:
        with self.lock:
            project = self._project(project_id)
            return copy.deepcopy(project) if project else None

    def find_project_by_name(self, name: str) -> Optional[Project]:
        """Case-insensitive name lookup."""
        with self.lock:
            project = next(
                (p for p in self._projects if p.name.lower() == name.strip().lower()), None
            )
            return copy.deepcopy(project) if project else None

    def find_task(self, task_id: str) -> Optional[Tuple[Project, Task]]:
        """
        Locate a task anywhere in the collection.

        Returns:
            (project, task) copies, or None if no project holds task_id
        """
        with self.lock:
            for project in self._projects:
                task = project.find_task(task_id)
                if task:
                    return copy.deepcopy(project), copy.deepcopy(task)
        return None

    def active_task_count(self) -> int:
        """Tasks that are neither archived nor done."""
        with self.lock:
            return sum(
                1
                for p in self._projects
                for t in p.tasks
                if not t.archived and t.status != STATUS_DONE
            )

    # --- Projects ---

    def create_project(self, name: str) -> Project:
        """
        Create a new project with a random color from the creation palette.

        Raises:
            ValidationError: If name is blank after trimming
        """
        name = _required_text(name, "name", "Project name")

        with self.lock:
            project = Project(
                id=self.new_id(),
                name=name,
                color=self._rng.choice(CREATION_PALETTE),
            )
            self._projects.append(project)
            self._persist()
            return copy.deepcopy(project)

    def delete_project(self, project_id: str) -> bool:
        """Remove a project and all its tasks. Returns False if it didn't exist."""
        with self.lock:
            project = self._project(project_id)
            if not project:
                return False
            self._projects.remove(project)
            self._persist()
            return True

    def rename_project(self, project_id: str, name: str) -> Optional[Project]:
        """
        Raises:
            ValidationError: If name is blank after trimming
        """
        name = _required_text(name, "name", "Project name")

        with self.lock:
            project = self._project(project_id)
            if not project:
                return None
            project.name = name
            self._persist()
            return copy.deepcopy(project)

    def recolor_project(self, project_id: str, color: str) -> Optional[Project]:
        """
        Raises:
            ValidationError: If color is not in the project palette
        """
        if color not in PROJECT_PALETTE:
            raise ValidationError(
                f"Invalid color '{color}'. Must be one of: {', '.join(PROJECT_PALETTE)}",
                field="color",
            )

        with self.lock:
            project = self._project(project_id)
            if not project:
                return None
            project.color = color
            self._persist()
            return copy.deepcopy(project)

    # --- Tasks ---

    def add_task(
        self,
        project_id: str,
        text: str,
        dependencies: Iterable[str] = (),
        recurring: Optional[str] = None,
    ) -> Task:
        """
        Append a new task to a project.

        Raises:
            ValidationError: If text is blank, the project doesn't exist,
                or recurring is not a known cadence
        """
        text = _required_text(text, "text", "Task text")
        if recurring is not None and recurring not in VALID_RECURRENCES:
            raise ValidationError(
                f"Invalid recurrence '{recurring}'. Must be one of: {', '.join(VALID_RECURRENCES)}",
                field="recurring",
            )
        ids = _unique_ids(dependencies)

        with self.lock:
            project = self._project(project_id)
            if not project:
                raise ValidationError(f"Project {project_id} not found", field="project_id")

            task = Task(
                id=self.new_id(),
                text=text,
                created_at=self._now_iso(),
                dependencies=ids,
                recurring=recurring,
            )
            project.tasks.append(task)
            self._persist()
            return copy.deepcopy(task)

    def insert_task(self, project_id: str, task: Task) -> Optional[Task]:
        """
        Append a fully built task (used for recurrence successors).

        Returns None if the project no longer exists.

        Raises:
            ValidationError: If the task id is already used
        """
        with self.lock:
            project = self._project(project_id)
            if not project:
                return None
            if any(t.id == task.id for p in self._projects for t in p.tasks):
                raise ValidationError(f"Task id {task.id} already exists", field="id")
            project.tasks.append(copy.deepcopy(task))
            self._persist()
            return copy.deepcopy(task)

    def update_task(self, project_id: str, task_id: str, **fields: Any) -> Optional[Task]:
        """
        Merge fields into a task.

        Args:
            project_id: Project owning the task
            task_id: Task to update
            **fields: Attribute names from Task (text, status, due_date, ...)

        Returns:
            Updated task copy, or None if project/task doesn't exist (no-op)

        Raises:
            ValidationError: On any invalid field; nothing is changed
        """
        changes = _validate_task_fields(fields)

        with self.lock:
            project = self._project(project_id)
            task = project.find_task(task_id) if project else None
            if not task:
                logger.debug("update_task: %s/%s not found, ignoring", project_id, task_id)
                return None
            for attr, value in changes.items():
                setattr(task, attr, value)
            self._persist()
            return copy.deepcopy(task)

    def delete_task(self, project_id: str, task_id: str) -> bool:
        """Remove a task. Returns False if it didn't exist."""
        with self.lock:
            project = self._project(project_id)
            index = project.task_index(task_id) if project else -1
            if index < 0:
                return False
            del project.tasks[index]
            self._persist()
            return True

    def reorder_task(self, project_id: str, from_task_id: str, to_task_id: str) -> bool:
        """
        Move from_task into to_task's slot within one project.

        Both tasks must live in project_id; otherwise (including cross-project
        requests) nothing changes. Membership never changes, only order.

        Returns:
            True if the sequence changed
        """
        if from_task_id == to_task_id:
            return False

        with self.lock:
            project = self._project(project_id)
            if not project:
                return False
            old_index = project.task_index(from_task_id)
            new_index = project.task_index(to_task_id)
            if old_index < 0 or new_index < 0:
                return False

            task = project.tasks.pop(old_index)
            project.tasks.insert(new_index, task)
            self._persist()
            return True

    # --- Convenience wrappers over update_task ---

    def _current(self, project_id: str, task_id: str) -> Optional[Task]:
        project = self._project(project_id)
        return project.find_task(task_id) if project else None

    def toggle_status(self, project_id: str, task_id: str) -> Optional[Task]:
        """todo -> progress -> done -> todo"""
        with self.lock:
            task = self._current(project_id, task_id)
            if not task:
                return None
            return self.update_task(project_id, task_id, status=STATUS_CYCLE[task.status])

    def cycle_priority(self, project_id: str, task_id: str) -> Optional[Task]:
        """low -> medium -> high -> low"""
        with self.lock:
            task = self._current(project_id, task_id)
            if not task:
                return None
            return self.update_task(project_id, task_id, priority=PRIORITY_CYCLE[task.priority])

    def toggle_archive(self, project_id: str, task_id: str) -> Optional[Task]:
        with self.lock:
            task = self._current(project_id, task_id)
            if not task:
                return None
            return self.update_task(project_id, task_id, archived=not task.archived)

    def set_notes(self, project_id: str, task_id: str, notes: Optional[str]) -> Optional[Task]:
        return self.update_task(project_id, task_id, notes=notes)

    def set_recurring(
        self, project_id: str, task_id: str, recurring: Optional[str]
    ) -> Optional[Task]:
        """Set or remove (None) the recurrence cadence."""
        return self.update_task(project_id, task_id, recurring=recurring)

    def set_due_date(
        self, project_id: str, task_id: str, due: Optional[datetime]
    ) -> Optional[Task]:
        return self.update_task(project_id, task_id, due_date=due)

    def clear_due_date(self, project_id: str, task_id: str) -> Optional[Task]:
        """Remove the due date together with any recurrence."""
        return self.update_task(
            project_id, task_id, due_date=None, recurring=None, recurring_day=None
        )

    def set_weekly_on(self, project_id: str, task_id: str, day: int) -> Optional[Task]:
        """
        Make a task recur weekly on `day` (Sunday=0) and due on its next occurrence.

        The due date is midnight of the next such weekday, one week out if
        today already is that weekday.
        """
        if not _is_weekday(day):
            raise ValidationError("Weekday must be between 0 (Sun) and 6 (Sat)", field="recurring_day")
        due = start_of_day(next_weekday(self.clock(), day))
        return self.update_task(
            project_id, task_id, due_date=due, recurring=RECUR_WEEKLY, recurring_day=day
        )

    # --- Bulk operations and undo ---

    def push_undo(self, operation: str) -> None:
        """Snapshot the collection so the next undo() returns to this point."""
        with self.lock:
            self.undo_log.push(operation, self._projects, self._now_iso())

    def clear_completed(self) -> int:
        """
        Remove every done, non-archived task from every project (undoable).

        Returns:
            Number of tasks removed
        """
        with self.lock:
            self.push_undo("clear_completed")
            removed = 0
            for project in self._projects:
                kept = [t for t in project.tasks if t.status != STATUS_DONE or t.archived]
                removed += len(project.tasks) - len(kept)
                project.tasks = kept
            self._persist()
            logger.info("Cleared %d completed task(s)", removed)
            return removed

    def undo(self) -> bool:
        """
        Restore the most recent undo snapshot.

        Returns:
            False if there was nothing to undo
        """
        with self.lock:
            snapshot = self.undo_log.pop()
            if snapshot is None:
                return False
            self._projects = copy.deepcopy(snapshot.projects)
            self._persist()
            logger.info("Undid %s (snapshot from %s)", snapshot.operation, snapshot.timestamp)
            return True


# --- Validation helpers ---


def _required_text(value: Any, field: str, label: str) -> str:
    """Trimmed, non-blank string or ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be text", field=field)
    value = value.strip()
    if not value:
        raise ValidationError(f"{label} cannot be empty", field=field)
    return value


def _unique_ids(ids: Iterable[str]) -> List[str]:
    """
    Stringify and de-duplicate ids, keeping first-seen order.

    Raises:
        ValidationError: If ids is a bare string or not a collection
    """
    if ids is None:
        return []
    if isinstance(ids, (str, bytes)):
        raise ValidationError("Dependencies must be a list of task ids", field="dependencies")
    try:
        return list(dict.fromkeys(str(i) for i in ids))
    except TypeError:
        raise ValidationError("Dependencies must be a list of task ids", field="dependencies")


def _is_weekday(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6


def _timestamp_value(name: str, value: Any) -> Optional[str]:
    """Accept datetime, ISO string or None; return the stored string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, str):
        try:
            parse_timestamp(value)
        except ValueError:
            raise ValidationError(f"Invalid timestamp for {name}: '{value}'", field=name)
        return value
    raise ValidationError(f"Invalid timestamp for {name}: {value!r}", field=name)


def _validate_task_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize update_task() fields.

    Returns:
        Attribute -> value mapping safe to apply as-is

    Raises:
        ValidationError: On the first invalid field
    """
    changes: Dict[str, Any] = {}
    for name, value in fields.items():
        if name in ("id", "created_at"):
            raise ValidationError(f"Task field '{name}' cannot be changed", field=name)
        if name not in UPDATABLE_FIELDS:
            raise ValidationError(f"Unknown task field '{name}'", field=name)

        if name == "text":
            value = _required_text(value, name, "Task text")
        elif name == "status":
            if value not in VALID_STATUSES:
                raise ValidationError(
                    f"Invalid status '{value}'. Must be one of: {', '.join(VALID_STATUSES)}",
                    field=name,
                )
        elif name == "priority":
            if value not in VALID_PRIORITIES:
                raise ValidationError(
                    f"Invalid priority '{value}'. Must be one of: {', '.join(VALID_PRIORITIES)}",
                    field=name,
                )
        elif name == "recurring":
            if value is not None and value not in VALID_RECURRENCES:
                raise ValidationError(
                    f"Invalid recurrence '{value}'. Must be one of: {', '.join(VALID_RECURRENCES)}",
                    field=name,
                )
        elif name == "recurring_day":
            if value is not None and not _is_weekday(value):
                raise ValidationError("Weekday must be between 0 (Sun) and 6 (Sat)", field=name)
        elif name in ("due_date", "last_recurred_at"):
            value = _timestamp_value(name, value)
        elif name == "archived":
            if not isinstance(value, bool):
                raise ValidationError("archived must be true or false", field=name)
        elif name == "dependencies":
            value = _unique_ids(value)
        elif name == "notes":
            if value is not None and not isinstance(value, str):
                raise ValidationError("Notes must be text", field=name)
            value = (value or "").strip() or None

        changes[name] = value
    return changes
