"""Exceptions raised by the task store and reported by the console."""

from __future__ import annotations


class TaskListError(Exception):
    """Base exception for tasklist errors."""


class TaskFileParseError(TaskListError):
    """Raised when the tasks file exists but does not hold a valid task list."""


class PersistenceError(TaskListError):
    """Raised when the tasks file cannot be written."""


class ValidationError(TaskListError):
    """Raised when a command argument is missing or malformed."""


class TaskNotFoundError(TaskListError):
    """Raised when no task has the requested id."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task ID not found: {task_id}")
        self.task_id = task_id


class UserDeclined(TaskListError):
    """Raised when the user answers no to a confirmation prompt."""
