"""Execute one backup task against the external tools.

Each task walks ``PENDING -> PREPARING -> RUNNING -> POST_PROCESS`` and ends
``COMPLETED``, ``FAILED`` or ``SKIPPED``. Command failures become a failed
:class:`TaskResult`; a destination directory that cannot be created raises
:class:`DestinationError` and aborts the run.
"""

import logging
import shlex
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from .. import __util__
from ..__util__ import CommandError, DestinationError
from .plan import Task, TaskKind
from .process import ProcessRunner
from .progress import ProgressReporter
from .report import Outcome, TaskResult

logger = logging.getLogger(__name__)

RSYNC_FLAGS = [
    "-avz",
    "--progress",
    "--delete",
    "--no-links",
    "--safe-links",
    "--copy-unsafe-links",
]

MYSQLDUMP_FLAGS = ["--single-transaction", "--quick", "--skip-lock-tables"]

SUPPORTED_ENGINES = frozenset({"mysql", "mariadb"})


class TaskState(Enum):
    """Lifecycle of a task."""

    PENDING = "pending"
    PREPARING = "preparing"
    RUNNING = "running"
    POST_PROCESS = "post_process"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


def build_copy_command(task: Task, destination: Path) -> list[str]:
    """rsync argv mirroring ``source/`` into ``destination/``.

    Symlinks are not copied as links; links leaving the source tree are
    copied as their target's content, links inside it are kept.
    """
    source = f"{task.source.rstrip('/')}/"
    cmd = ["rsync", *RSYNC_FLAGS]
    if task.kind is TaskKind.REMOTE_COPY:
        ssh = task.ssh
        cmd += ["-e", f"ssh -p {int(ssh.port)}"]
        source = f"{ssh.username}@{ssh.host}:{source}"
    return cmd + [source, f"{destination}/"]


def build_dump_command(task: Task) -> list[str]:
    """ssh argv running mysqldump on the server, dump on stdout.

    The remote command line is assembled with ``shlex`` quoting; the
    password travels in ``MYSQL_PWD`` rather than on mysqldump's argv.
    """
    db = task.database
    ssh = task.ssh
    dump = shlex.join(
        [
            "mysqldump",
            f"--host={db.host}",
            f"--user={db.user}",
            *MYSQLDUMP_FLAGS,
            task.source,
        ]
    )
    if db.password:
        dump = f"MYSQL_PWD={shlex.quote(db.password)} {dump}"
    return ["ssh", "-p", str(int(ssh.port)), f"{ssh.username}@{ssh.host}", dump]


class TaskExecutor:
    """Runs tasks one at a time, reporting to a ProgressReporter."""

    def __init__(
        self,
        runner: ProcessRunner,
        progress: ProgressReporter,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.runner = runner
        self.progress = progress
        self.clock = clock
        self.state = TaskState.PENDING

    def _enter(self, task: Task, state: TaskState) -> None:
        logger.debug("%s: %s -> %s", task.label, self.state.value, state.value)
        self.state = state

    def execute(self, task: Task) -> TaskResult:
        """Run one task and return its result.

        Raises:
            DestinationError: If the dated destination cannot be created
        """
        self.state = TaskState.PENDING
        self.progress.message(f"Preparing to backup: {task.label}")

        if task.kind is TaskKind.REMOTE_DATABASE_DUMP:
            result = self._dump(task)
        else:
            result = self._copy(task)

        self._enter(task, _terminal_state(result.outcome))
        self.progress.advance()
        return result

    def prepare_destination(self, task: Task) -> Path:
        """Create ``target/<name>/<timestamp>`` using the clock read now."""
        self._enter(task, TaskState.PREPARING)
        destination = __util__.dated_destination(task.target, task.name, self.clock())
        if not destination.is_dir():
            try:
                destination.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DestinationError(destination, e.strerror or e) from e
        return destination

    def _copy(self, task: Task) -> TaskResult:
        if task.kind is TaskKind.LOCAL_COPY and not Path(task.source).is_dir():
            reason = f"Source directory '{task.source}' does not exist, skipping"
            self.progress.message(f"Warning: {reason}", logging.WARNING)
            return TaskResult(task.label, Outcome.SKIPPED, error=reason)

        destination = self.prepare_destination(task)
        kind = "Local" if task.kind is TaskKind.LOCAL_COPY else "Remote"
        self.progress.message(
            f"Starting {kind.lower()} backup: {task.label} -> {destination}"
        )

        self._enter(task, TaskState.RUNNING)
        try:
            self.runner.run(
                build_copy_command(task, destination),
                on_output=self.progress.on_output,
            )
        except CommandError as e:
            self.progress.message(
                f"Error: {kind} backup failed: {task.label} -> {destination}\n{e.stderr}",
                logging.ERROR,
            )
            return TaskResult(task.label, Outcome.FAILED, e.stderr, destination)

        self._enter(task, TaskState.POST_PROCESS)
        self.progress.message(f"{kind} backup completed: {task.label} -> {destination}")
        return TaskResult(task.label, Outcome.SUCCEEDED, destination=destination)

    def _dump(self, task: Task) -> TaskResult:
        destination = self.prepare_destination(task)
        backup_file = destination / f"{task.source}.sql"
        self.progress.message(f"Backing up {task.label} to local {destination}")

        self._enter(task, TaskState.RUNNING)
        engine = task.database.engine
        if engine.lower() not in SUPPORTED_ENGINES:
            return self._dump_failed(
                task, destination, f"Unsupported database engine: {engine}"
            )

        try:
            out = open(backup_file, "wb")
        except OSError as e:
            return self._dump_failed(task, destination, f"Cannot open output file: {e}")

        with out:
            try:
                self.runner.run(build_dump_command(task), stdout=out)
            except CommandError as e:
                return self._dump_failed(task, destination, e.stderr)

        self._enter(task, TaskState.POST_PROCESS)
        self.progress.message("Compressing backup...")
        warning = self.compress(backup_file)
        self.progress.message(
            f"Backup completed: {task.label} -> {destination}/{task.source}.sql.gz"
        )
        return TaskResult(
            task.label, Outcome.SUCCEEDED, destination=destination, warning=warning
        )

    def _dump_failed(self, task: Task, destination: Path, error: str) -> TaskResult:
        self.progress.message(
            f"Error: Backup failed for {task.label}: {error}", logging.ERROR
        )
        return TaskResult(task.label, Outcome.FAILED, error, destination)

    def compress(self, backup_file: Path) -> str:
        """gzip the dump in place; return a warning text on failure."""
        if not backup_file.is_file():
            return ""
        try:
            self.runner.run(["gzip", str(backup_file)])
        except CommandError as e:
            warning = f"Compression failed: {e.stderr}"
            self.progress.message(f"Warning: {warning}", logging.WARNING)
            return warning
        return ""


def _terminal_state(outcome: Outcome) -> TaskState:
    return {
        Outcome.SUCCEEDED: TaskState.COMPLETED,
        Outcome.FAILED: TaskState.FAILED,
        Outcome.SKIPPED: TaskState.SKIPPED,
    }[outcome]
