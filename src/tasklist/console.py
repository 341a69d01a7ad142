"""Interactive console loop for tasklist."""

from __future__ import annotations

import re
from typing import Callable, List, Optional

try:
    import readline  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover - platform dependent
    readline = None

import click

from .errors import PersistenceError, TaskNotFoundError, UserDeclined, ValidationError
from .state.tasks import Task, TaskStore

PROMPT = "> "
WELCOME = "Welcome to tasklist (type 'help' for commands, 'exit' to quit)"

HELP_LINES = [
    ("add <title>", "add new task"),
    ("list", "list all tasks"),
    ("done <id>", "mark as done"),
    ("uncheck <id>", "mark as not done"),
    ("delete <id>", "delete the task"),
    ("reset", "clear the list"),
    ("help", "show this help"),
    ("exit", "quit"),
]

MISSING_ARG = {
    "done": "Please provide the task ID to mark as done.",
    "uncheck": "Please provide the task ID to uncheck.",
    "delete": "Please provide the task ID to delete.",
}


TASK_ID_RE = re.compile(r"-?[0-9]+")


def parse_task_id(raw: str) -> int:
    """Parse a task id argument, raising ValidationError if it isn't a plain decimal number."""
    # int() alone would also take "1_0", "+1" and non-ASCII digits
    if not TASK_ID_RE.fullmatch(raw):
        raise ValidationError(f"Task ID must be a number: {raw}")
    return int(raw)


class ConsoleSession:
    """Line-oriented command loop over a TaskStore."""

    def __init__(self, store: TaskStore, read_line: Optional[Callable[[], str]] = None) -> None:
        self.store = store
        self._read_line = read_line or input

    def run(self) -> None:
        """Read and dispatch commands until exit or end of input."""
        click.echo(WELCOME)
        while True:
            click.echo(PROMPT, nl=False)
            try:
                line = self._read_line()
            except (KeyboardInterrupt, EOFError):
                click.echo()
                return

            if not self.handle_line(line):
                return

    def handle_line(self, line: str) -> bool:
        """Handle one input line. Returns False to exit loop."""
        args = line.split()
        if not args:
            return True

        cmd = args[0].lower()
        rest = args[1:]

        if cmd == "exit" and not rest:
            click.echo("Goodbye!")
            return False

        try:
            self._dispatch(cmd, args[0], rest)
        except (ValidationError, TaskNotFoundError, UserDeclined) as exc:
            click.echo(str(exc))
        except PersistenceError as exc:
            click.echo(
                self._warn(f"Warning: could not save tasks ({exc}). Changes are kept in memory only.")
            )
        return True

    def confirm(self, question: str) -> bool:
        """Ask a y/n question; anything but y/yes (or end of input) is a no."""
        click.echo(f"{question} (y/n): ", nl=False)
        try:
            answer = self._read_line()
        except (KeyboardInterrupt, EOFError):
            click.echo()
            return False
        return answer.strip().lower() in ("y", "yes")

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #
    def _dispatch(self, cmd: str, token: str, rest: List[str]) -> None:
        if cmd == "help":
            self._print_help()
        elif cmd == "add":
            self._cmd_add(rest)
        elif cmd == "list":
            self._print_tasks(self.store.list_all())
        elif cmd == "done":
            self._cmd_set_done(self._task_id_arg(cmd, rest), True)
        elif cmd == "uncheck":
            self._cmd_set_done(self._task_id_arg(cmd, rest), False)
        elif cmd == "delete":
            self._cmd_delete(self._task_id_arg(cmd, rest))
        elif cmd == "reset":
            self._cmd_reset()
        elif cmd == "exit":
            click.echo("The exit command takes no arguments.")
        else:
            click.echo(f"Unknown command: {token}")

    def _cmd_add(self, rest: List[str]) -> None:
        task = self.store.add(" ".join(rest))
        click.echo(f"Added Task: {task.title}")

    def _cmd_set_done(self, task_id: int, value: bool) -> None:
        task, changed = self.store.set_done(task_id, value)
        if value and not changed:
            click.echo(f"Task {task.id} is already marked as done.")
        elif value:
            click.echo(f"Marked Task {task.id} as done: {task.title}")
        elif not changed:
            click.echo(f"Task {task.id} is not marked as done.")
        else:
            click.echo(f"Marked Task {task.id} as not done: {task.title}")

    def _cmd_delete(self, task_id: int) -> None:
        task = self.store.delete(task_id, self.confirm)
        click.echo(f"Deleted Task {task.id}: {task.title}")

    def _cmd_reset(self) -> None:
        self.store.reset(self.confirm)
        click.echo("All tasks have been deleted and reset the list.")

    @staticmethod
    def _task_id_arg(cmd: str, rest: List[str]) -> int:
        if not rest:
            raise ValidationError(MISSING_ARG[cmd])
        return parse_task_id(rest[0])

    # ------------------------------------------------------------------ #
    # Output helpers
    # ------------------------------------------------------------------ #
    def _print_help(self) -> None:
        click.echo("Commands:")
        for usage, text in HELP_LINES:
            click.echo(f"  {usage:15} {text}")

    def _print_tasks(self, tasks: List[Task]) -> None:
        if not tasks:
            click.echo("No tasks found.")
            return

        click.echo("Task List:")
        for task in tasks:
            click.echo(self._task_line(task))

    @staticmethod
    def _task_line(task: Task) -> str:
        marker = click.style("[x]", fg="bright_green") if task.done else "[ ]"
        return f"{task.id}. {marker} {task.title}"

    @staticmethod
    def _warn(text: str) -> str:
        return click.style(text, fg="bright_yellow")


def run_console(store: TaskStore) -> None:
    """Helper to run an interactive session over the given store."""
    ConsoleSession(store).run()
