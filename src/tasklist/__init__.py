"""tasklist - interactive command-line task list."""

__version__ = "0.1.0"
__author__ = "tasklist Contributors"

from .config import Config
from .state.tasks import Task, TaskStore

__all__ = ["Config", "Task", "TaskStore"]
