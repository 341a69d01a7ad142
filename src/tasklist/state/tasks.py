"""Task records and the persisted task store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..errors import TaskFileParseError, TaskNotFoundError, UserDeclined, ValidationError
from .persistence import Persistence

logger = logging.getLogger(__name__)

# Asks the user a yes/no question, returns True on yes.
Confirm = Callable[[str], bool]


class Task:
    """Represents a single task."""

    def __init__(self, id: int, title: str, done: bool = False) -> None:
        self.id = id
        self.title = title
        self.done = done

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, title={self.title!r}, done={self.done!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "title": self.title, "done": self.done}

    @staticmethod
    def from_dict(data: Any) -> "Task":
        """Create from dictionary, raising TaskFileParseError on bad entries."""
        if not isinstance(data, dict):
            raise TaskFileParseError(f"task entry is not an object: {data!r}")
        task_id = data.get("id")
        title = data.get("title")
        done = data.get("done", False)
        # bool is an int subclass, reject it explicitly
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise TaskFileParseError(f"task id must be an integer: {task_id!r}")
        if not isinstance(title, str):
            raise TaskFileParseError(f"task {task_id} title must be a string: {title!r}")
        if not isinstance(done, bool):
            raise TaskFileParseError(f"task {task_id} done flag must be a boolean: {done!r}")
        return Task(id=task_id, title=title, done=done)


class TaskStore:
    """Ordered task collection mirrored to a JSON file.

    Every mutation that changes state rewrites the whole file. A failed write
    raises PersistenceError after the in-memory change has been applied.
    """

    def __init__(self, tasks_file: Union[str, Path] = "tasks.json") -> None:
        self.tasks_file = Path(tasks_file)
        self.tasks: List[Task] = []
        self.load()

    def __len__(self) -> int:
        return len(self.tasks)

    def load(self) -> None:
        """Load tasks from disk, falling back to an empty list on bad files."""
        try:
            entries = Persistence.load_json_list(self.tasks_file)
            tasks = [Task.from_dict(entry) for entry in entries]
        except TaskFileParseError as exc:
            logger.error("Error parsing tasks file: %s", exc)
            self.tasks = []
            return
        except OSError as exc:
            logger.error("Error while reading tasks file: %s", exc)
            self.tasks = []
            return

        if [task.id for task in tasks] != list(range(1, len(tasks) + 1)):
            logger.warning("Task ids in %s are not sequential, renumbering", self.tasks_file)
            self._renumber(tasks)
        self.tasks = tasks
        logger.debug("Loaded %d task(s) from %s", len(self.tasks), self.tasks_file)

    def save(self) -> None:
        """Save tasks to disk."""
        Persistence.save_json(self.tasks_file, [task.to_dict() for task in self.tasks])
        logger.debug("Saved %d task(s) to %s", len(self.tasks), self.tasks_file)

    def add(self, title: str) -> Task:
        """Append a new task and persist it."""
        title = title.strip()
        if not title:
            raise ValidationError("Please provide a task title.")
        task = Task(id=len(self.tasks) + 1, title=title)
        self.tasks.append(task)
        self.save()
        return task

    def get(self, task_id: int) -> Optional[Task]:
        """Get task by ID."""
        return next((task for task in self.tasks if task.id == task_id), None)

    def list_all(self) -> List[Task]:
        """List all tasks."""
        return list(self.tasks)

    def set_done(self, task_id: int, value: bool) -> Tuple[Task, bool]:
        """Set the done flag. Returns the task and whether it changed."""
        task = self._require(task_id)
        if task.done == value:
            return task, False
        task.done = value
        self.save()
        return task, True

    def mark_done(self, task_id: int) -> Tuple[Task, bool]:
        return self.set_done(task_id, True)

    def mark_undone(self, task_id: int) -> Tuple[Task, bool]:
        return self.set_done(task_id, False)

    def delete(self, task_id: int, confirm: Confirm) -> Task:
        """Remove a task after confirmation and renumber the rest."""
        task = self._require(task_id)
        if not confirm(f"Are you sure you want to delete Task {task.id}: {task.title}?"):
            raise UserDeclined("Delete cancelled.")
        removed = Task(id=task.id, title=task.title, done=task.done)
        self.tasks = [t for t in self.tasks if t is not task]
        self._renumber(self.tasks)
        self.save()
        return removed

    def reset(self, confirm: Confirm) -> int:
        """Remove every task after confirmation. Returns how many were removed."""
        if not confirm("Are you sure you want to delete all tasks?"):
            raise UserDeclined("Reset cancelled.")
        removed = len(self.tasks)
        self.tasks = []
        self.save()
        return removed

    def _require(self, task_id: int) -> Task:
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    def _renumber(tasks: List[Task]) -> None:
        for index, task in enumerate(tasks):
            task.id = index + 1
