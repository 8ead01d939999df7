"""
FILE: taskflow/core/models.py
PURPOSE: Domain models for projects and tasks
EXPORTS:
  - Task (dataclass)
  - Project (dataclass)
DEPENDENCIES:
  - dataclasses (stdlib)
  - json (stdlib)
  - typing (stdlib)
NOTES:
  - All models have from_dict() / to_dict() for blob (de)serialization
  - All models have to_json() for CLI output
  - Stored keys are camelCase (dueDate, createdAt, ...) to match the blob format
  - Optional fields use None and are written as explicit null, never omitted
  - Timestamps stored as ISO-8601 strings
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

from .constants import STATUS_TODO, PRIORITY_MEDIUM


# Python attribute name -> stored key
TASK_FIELD_KEYS = {
    "id": "id",
    "text": "text",
    "status": "status",
    "priority": "priority",
    "due_date": "dueDate",
    "created_at": "createdAt",
    "archived": "archived",
    "dependencies": "dependencies",
    "recurring": "recurring",
    "recurring_day": "recurringDay",
    "last_recurred_at": "lastRecurredAt",
    "notes": "notes",
}


def _timestamp_field(data: Dict[str, Any], key: str, required: bool = False) -> Optional[str]:
    """Stored timestamp value; only ISO strings (or null when optional) are accepted."""
    value = data[key] if required else data.get(key)
    if value is None and not required:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{key} must be an ISO-8601 string, got {type(value).__name__}")
    return value


@dataclass
class Task:
    """A unit of work owned by exactly one project."""

    id: str
    text: str
    created_at: str
    status: str = STATUS_TODO
    priority: str = PRIORITY_MEDIUM
    due_date: Optional[str] = None
    archived: bool = False
    dependencies: List[str] = field(default_factory=list)
    recurring: Optional[str] = None
    recurring_day: Optional[int] = None
    last_recurred_at: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """
        Build a Task from its stored form.

        Raises KeyError when a required key (id, text, createdAt) is missing
        and TypeError when a timestamp is not a string.
        Optional keys may be absent in data written by older versions.
        """
        return cls(
            id=str(data["id"]),
            text=data["text"],
            created_at=_timestamp_field(data, "createdAt", required=True),
            status=data.get("status") or STATUS_TODO,
            priority=data.get("priority") or PRIORITY_MEDIUM,
            due_date=_timestamp_field(data, "dueDate"),
            archived=bool(data.get("archived", False)),
            dependencies=[str(dep) for dep in (data.get("dependencies") or [])],
            recurring=data.get("recurring"),
            recurring_day=data.get("recurringDay"),
            last_recurred_at=_timestamp_field(data, "lastRecurredAt"),
            notes=data.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Stored form with every key present."""
        data = {key: getattr(self, attr) for attr, key in TASK_FIELD_KEYS.items()}
        data["dependencies"] = list(self.dependencies)
        return data

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


@dataclass
class Project:
    """A named container owning an ordered sequence of tasks."""

    id: str
    name: str
    color: str
    tasks: List[Task] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            color=data["color"],
            tasks=[Task.from_dict(t) for t in data.get("tasks") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "tasks": [t.to_dict() for t in self.tasks],
        }

    def to_json(self) -> str:
        """Serialize project to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def task_index(self, task_id: str) -> int:
        """Position of task_id in this project's sequence, or -1."""
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        return -1

    @property
    def active_tasks(self) -> List[Task]:
        """Non-archived tasks, in sequence order."""
        return [t for t in self.tasks if not t.archived]
