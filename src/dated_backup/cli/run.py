"""Run command: Execute all configured backup tasks."""

import argparse
import logging
import sys
from datetime import datetime
from typing import Callable, Optional

from rich.console import Console

from .. import __util__
from ..__logger__ import create_logger, get_console
from ..config import Config, find_config_file, load_config
from ..core import (
    DEFAULT_LOCK_PATH,
    InstanceLock,
    ProcessRunner,
    ProgressReporter,
    RunReport,
    TaskExecutor,
    build_plan,
)
from .common import get_log_level

logger = logging.getLogger(__name__)


def execute_run(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments
        console: Console for logs and progress (default: shared console)

    Returns:
        Exit code: 0 when the run completed, even with failed tasks;
        1 for fatal errors
    """
    create_logger(get_log_level(args), console=console)

    lock_path = getattr(args, "lock_file", None) or DEFAULT_LOCK_PATH
    try:
        with InstanceLock(lock_path):
            config_path = find_config_file(getattr(args, "config", None))
            logger.debug("Loading configuration from: %s", config_path)
            config, warnings = load_config(config_path)

            for warning in warnings:
                logger.warning("Config: %s", warning)

            run_backups(config, console=console)
    except __util__.FatalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def run_backups(
    config: Config,
    runner: Optional[ProcessRunner] = None,
    clock: Callable[[], datetime] = datetime.now,
    console: Optional[Console] = None,
) -> RunReport:
    """Run every planned task in order and return the report.

    Task failures are recorded and the run continues. Fatal errors
    (:class:`~dated_backup.__util__.DestinationError`) propagate. The
    start and finish headings and the summary go straight to the console so
    they are shown at every verbosity.
    """
    console = console or get_console()
    _heading(console, f"Started at {__util__.timestamp()}")

    tasks, total = build_plan(config)
    logger.info("Processing %d task(s)", len(tasks))

    report = RunReport()
    with ProgressReporter(total, console=console) as progress:
        executor = TaskExecutor(runner or ProcessRunner(), progress, clock=clock)
        for task in tasks:
            report.add(executor.execute(task))

    _heading(console, f"Finished at {__util__.timestamp()}")
    report.print_summary(console)
    return report


def _heading(console: Console, caption: str) -> None:
    console.print(__util__.log_heading(caption), markup=False, highlight=False)
