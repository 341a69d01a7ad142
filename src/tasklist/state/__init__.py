"""State management modules."""

from .persistence import Persistence
from .tasks import Confirm, Task, TaskStore

__all__ = ["Persistence", "Confirm", "Task", "TaskStore"]
