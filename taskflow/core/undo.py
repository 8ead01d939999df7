"""
FILE: taskflow/core/undo.py
PURPOSE: Snapshot-based undo history for destructive bulk operations
EXPORTS:
  - UndoSnapshot (dataclass)
  - UndoLog (class)
DEPENDENCIES:
  - dataclasses (stdlib)
  - copy (stdlib)
  - typing (stdlib)
  - taskflow.core.models (Project)
NOTES:
  - Stores full deep copies of the project collection
  - Bounded depth: oldest snapshots are dropped first
  - Session-scoped (not persisted)
  - No redo
"""

import copy
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from .constants import DEFAULT_UNDO_DEPTH
from .models import Project


@dataclass
class UndoSnapshot:
    """
    A copy of the project collection taken before an undoable operation.

    Attributes:
        operation: Name of the operation that triggered the snapshot
        projects: Deep copy of the collection at that moment
        timestamp: When the snapshot was taken (ISO-8601)
    """
    operation: str
    projects: List[Project]
    timestamp: str


class UndoLog:
    """
    Bounded stack of project-collection snapshots.

    push() before an undoable mutation, pop() to get the state to restore.
    """

    def __init__(self, max_depth: int = DEFAULT_UNDO_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._stack: Deque[UndoSnapshot] = deque(maxlen=max_depth)

    @property
    def max_depth(self) -> int:
        return self._stack.maxlen

    def push(self, operation: str, projects: List[Project], timestamp: str) -> None:
        """Record a snapshot. The caller's list is copied, not aliased."""
        self._stack.append(
            UndoSnapshot(
                operation=operation,
                projects=copy.deepcopy(projects),
                timestamp=timestamp,
            )
        )

    def pop(self) -> Optional[UndoSnapshot]:
        """Remove and return the most recent snapshot, or None if empty."""
        if not self._stack:
            return None
        return self._stack.pop()

    def peek(self) -> Optional[UndoSnapshot]:
        return self._stack[-1] if self._stack else None

    def can_undo(self) -> bool:
        """Check if there's a snapshot to restore."""
        return bool(self._stack)

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)
