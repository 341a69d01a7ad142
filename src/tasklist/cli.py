"""tasklist CLI entry point."""

from __future__ import annotations

import logging

import click

from . import __version__
from .config import Config
from .console import run_console
from .logging_setup import setup_logging
from .state.tasks import TaskStore

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__)
def main() -> None:
    """Interactive task list. Type 'help' at the prompt for commands."""
    config = Config()
    setup_logging(console_level=config.log_level, log_file=config.log_file)
    logger.debug("Using tasks file %s", config.tasks_file)

    store = TaskStore(config.tasks_file)
    run_console(store)


if __name__ == "__main__":
    main()
