# pyright: standard

"""dated-backup: dated_backup/__util__.py
Common utility code shared between modules.
"""

import time
from datetime import datetime
from pathlib import Path

DATE_FORMAT = "%Y-%m-%d__%H_%M_%S"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class FatalError(Exception):
    """Error that aborts the whole run."""


class AlreadyRunningError(FatalError):
    """Another process holds the instance lock."""


class DestinationError(FatalError):
    """A dated destination directory could not be created."""

    def __init__(self, path, reason) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to create target directory '{path}': {reason}")


class TaskError(Exception):
    """Error isolated to a single backup task."""


class CommandError(TaskError):
    """An external command failed to spawn or wrote to standard error."""

    def __init__(self, argv, stderr) -> None:
        self.argv = list(argv)
        self.stderr = stderr
        super().__init__(stderr)


def log_heading(caption) -> str:
    """Formatted heading for logging output sections."""
    return f"{f'--[ {caption} ]':-<50}"


def timestamp(when=None) -> str:
    """Human readable local timestamp for start/finish lines."""
    if when is None:
        return time.strftime(LOG_TIME_FORMAT)
    return when.strftime(LOG_TIME_FORMAT)


def date_folder(when: datetime) -> str:
    """Name of the per-run folder, e.g. ``2024-01-02__03_04_05``."""
    return when.strftime(DATE_FORMAT)


def base_name(path) -> str:
    """Last path component, ignoring trailing slashes."""
    return Path(str(path).rstrip("/") or "/").name


def dated_destination(target, name, when: datetime) -> Path:
    """Return ``target/<name>/<YYYY-MM-DD__HH_MM_SS>``."""
    return Path(target) / name / date_folder(when)
