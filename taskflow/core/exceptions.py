"""
FILE: taskflow/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - TaskflowError (base exception)
  - ValidationError
  - PersistenceError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from TaskflowError for easy catching
  - Unknown project/task ids are NOT errors in update/delete paths;
    the store treats them as no-ops
  - PersistenceError is raised by the repository and reported by the store,
    never propagated out of a mutation
"""


class TaskflowError(Exception):
    """Base exception for all TaskFlow errors."""
    pass


class ValidationError(TaskflowError):
    """Input validation failed (blank text, unknown enum value, ...)."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class PersistenceError(TaskflowError):
    """Reading or writing the persisted blob failed."""

    def __init__(self, message: str, key: str = None):
        self.key = key
        super().__init__(message)
