"""Expand a configuration into the ordered list of backup tasks.

Order is local pairs first, then server by server: the server's folder
paths, then database by database, database name by database name, local
path by local path. Progress output follows this order exactly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .. import __util__
from ..config import Config, DatabaseConfig, SSHConfig


class TaskKind(Enum):
    """Kind of backup work."""

    LOCAL_COPY = "local_copy"
    REMOTE_COPY = "remote_copy"
    REMOTE_DATABASE_DUMP = "remote_database_dump"


@dataclass(frozen=True)
class Task:
    """One unit of backup work.

    For copies ``source`` is the folder to mirror; for dumps it is the
    database name. ``target`` is always the local directory receiving the
    dated destination.
    """

    kind: TaskKind
    source: str
    target: str
    ssh: Optional[SSHConfig] = None
    database: Optional[DatabaseConfig] = None

    @property
    def name(self) -> str:
        """Folder name under ``target`` (source basename or database name)."""
        if self.kind is TaskKind.REMOTE_DATABASE_DUMP:
            return self.source
        return __util__.base_name(self.source)

    @property
    def label(self) -> str:
        """Human readable identifier used in messages and the report."""
        if self.kind is TaskKind.LOCAL_COPY or self.ssh is None:
            return self.source
        return f"{self.ssh.host}:{self.source}"


def count_tasks(config: Config) -> int:
    """Total number of tasks for the progress denominator.

    Never returns 0: an empty plan still reports a total of 1.
    """
    count = len(config.enabled_local_paths())
    for server in config.enabled_servers():
        count += len(server.paths)
        for db in server.databases:
            count += len(db.database_names) * len(db.paths)
    return count or 1


def build_tasks(config: Config) -> list[Task]:
    """Enumerate tasks in execution order."""
    tasks = [
        Task(TaskKind.LOCAL_COPY, pair.source, pair.target)
        for pair in config.enabled_local_paths()
    ]

    for server in config.enabled_servers():
        for pair in server.paths:
            tasks.append(
                Task(TaskKind.REMOTE_COPY, pair.source, pair.target, ssh=server.ssh)
            )
        for db in server.databases:
            for db_name in db.database_names:
                for local_path in db.paths:
                    tasks.append(
                        Task(
                            TaskKind.REMOTE_DATABASE_DUMP,
                            db_name,
                            local_path,
                            ssh=server.ssh,
                            database=db,
                        )
                    )
    return tasks


def build_plan(config: Config) -> tuple[list[Task], int]:
    """Return ``(tasks, total)``; the total is computed before enumeration."""
    total = count_tasks(config)
    return build_tasks(config), total
