# pyright: standard

"""dated-backup: dated_backup/__logger__.py
A common logger rendering through a shared rich console.

The progress display and the log handler share ``cons`` so log records are
printed above the live progress bar instead of tearing it.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Initialize basic console and handler
cons = Console()
rich_handler = RichHandler(console=cons, show_path=False)


def create_logger(level="INFO", console=None) -> None:
    """Helper function to setup logging for a run.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        console: Optional console to render into (tests pass a recording one)
    """
    # pylint: disable=global-statement
    global cons, rich_handler

    if console is not None:
        cons = console
    rich_handler = RichHandler(console=cons, show_path=False, log_time_format="[%X]")

    logging.basicConfig(
        format="%(message)s",
        datefmt="%H:%M:%S",
        level=level,
        handlers=[rich_handler],
        force=True,
    )


def get_console() -> Console:
    """Return the console currently used by the log handler."""
    return cons
