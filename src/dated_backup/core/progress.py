"""Task progress display.

The overall bar counts whole tasks; rsync transfer progress parsed from the
running command's output is shown on an auxiliary row underneath and never
moves the overall counter.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TimeElapsedColumn,
)

from .. import __logger__

logger = logging.getLogger(__name__)

# e.g. "   1,234,567  42%    1.50MB/s    0:00:07 (xfr#1, to-chk=3/5)"
TRANSFER_RE = re.compile(
    r"(\d+)%\s+([\d.]+[kKMGT]?B)/s\s+(\d+:\d{2}(?::\d{2})?)(?:\s+ETA)?"
)


@dataclass(frozen=True)
class TransferProgress:
    """In-flight transfer state parsed from one output line."""

    percent: int
    speed: str
    eta: str

    def describe(self) -> str:
        return f"Progress: {self.percent}% at {self.speed}/s, ETA: {self.eta}"


def parse_transfer_progress(line: str) -> Optional[TransferProgress]:
    """Extract (percent, speed, eta) from an rsync ``--progress`` line."""
    match = TRANSFER_RE.search(line)
    if not match:
        return None
    percent, speed, eta = match.groups()
    return TransferProgress(int(percent), speed, eta)


class ProgressReporter:
    """Owns the completed/total task counters and their rendering."""

    def __init__(self, total: int, console: Optional[Console] = None) -> None:
        self.total = total
        self.completed = 0
        self.last_transfer: Optional[TransferProgress] = None
        self._progress = Progress(
            "[progress.description]{task.description}",
            BarColumn(),
            MofNCompleteColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            SpinnerColumn(),
            TimeElapsedColumn(),
            console=console or __logger__.get_console(),
            transient=True,
        )
        self._overall_id = self._progress.add_task(
            "[green]Backup Progress", total=total
        )
        self._transfer_id = self._progress.add_task("", total=100, visible=False)

    def __enter__(self) -> "ProgressReporter":
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self._progress.stop()

    def advance(self) -> None:
        """Count one finished task and redraw."""
        self.completed += 1
        self.last_transfer = None
        self._progress.update(self._overall_id, completed=self.completed)
        self._progress.update(self._transfer_id, visible=False, completed=0)

    def message(self, text: str, level: int = logging.INFO) -> None:
        """Print a status line above the bar without moving the counter."""
        logger.log(level, text)

    def transfer(self, state: TransferProgress) -> None:
        """Show sub-task transfer progress beneath the overall bar."""
        self.last_transfer = state
        self._progress.update(
            self._transfer_id,
            description=f"[cyan]{state.describe()}",
            completed=state.percent,
            visible=True,
        )

    def on_output(self, line: str) -> None:
        """Output callback for copy commands."""
        state = parse_transfer_progress(line)
        if state is not None:
            self.transfer(state)
