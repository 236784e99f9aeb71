"""Per-task outcomes and the end-of-run summary."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console


class Outcome(Enum):
    """Terminal outcome of a task."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class TaskResult:
    """Result of a single task.

    Attributes:
        label: Identifier copied from the task
        outcome: Terminal outcome
        error: Captured error text for failures and skip reasons
        destination: Dated destination, once prepared
        warning: Post-processing warning that did not fail the task
    """

    label: str
    outcome: Outcome
    error: str = ""
    destination: Optional[Path] = None
    warning: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED


@dataclass
class RunReport:
    """Ordered task results of one run."""

    results: list[TaskResult] = field(default_factory=list)

    def add(self, result: TaskResult) -> None:
        self.results.append(result)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def succeeded(self) -> int:
        return self._count(Outcome.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def total(self) -> int:
        return len(self.results)

    def failures(self) -> list[TaskResult]:
        return [r for r in self.results if r.outcome is Outcome.FAILED]

    def summary_lines(self) -> list[str]:
        lines = [
            f"{self.succeeded} succeeded, {self.failed} failed, "
            f"{self.skipped} skipped ({self.total} task(s))"
        ]
        for result in self.failures():
            error = result.error.strip().splitlines()
            lines.append(f"  failed: {result.label}: {error[0] if error else 'unknown error'}")
        for result in self.results:
            if result.warning:
                lines.append(f"  warning: {result.label}: {result.warning}")
        return lines

    def print_summary(self, console: Console) -> None:
        """Print the summary; failures in red, warnings in yellow."""
        lines = self.summary_lines()
        style = "bold red" if self.failed else "bold green"
        console.print(f"Completed: {lines[0]}", style=style, markup=False, highlight=False)
        for line in lines[1:]:
            style = "red" if line.startswith("  failed:") else "yellow"
            console.print(line, style=style, markup=False, highlight=False)
