"""Core backup orchestration for dated-backup.

Instance locking, task planning, process execution, progress accounting
and the run report, organized into focused modules.
"""

from .executor import TaskExecutor, TaskState, build_copy_command, build_dump_command
from .lock import DEFAULT_LOCK_PATH, InstanceLock
from .plan import Task, TaskKind, build_plan, build_tasks, count_tasks
from .process import ProcessRunner
from .progress import ProgressReporter, TransferProgress, parse_transfer_progress
from .report import Outcome, RunReport, TaskResult

__all__ = [
    "InstanceLock",
    "DEFAULT_LOCK_PATH",
    "ProcessRunner",
    "ProgressReporter",
    "TransferProgress",
    "parse_transfer_progress",
    "Task",
    "TaskKind",
    "build_plan",
    "build_tasks",
    "count_tasks",
    "TaskExecutor",
    "TaskState",
    "build_copy_command",
    "build_dump_command",
    "Outcome",
    "RunReport",
    "TaskResult",
]
