"""Single-instance enforcement.

A run holds an exclusive, non-blocking lock on a well-known file for its
whole duration. The live lock is the source of truth; a stale file left by
a killed process does not block the next run.
"""

import logging
from pathlib import Path

from filelock import FileLock, Timeout

from ..__util__ import AlreadyRunningError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_PATH = Path("/tmp/dated-backup.lock")


class InstanceLock:
    """Scoped process-wide mutual exclusion.

    Usage::

        with InstanceLock():
            run_backups()
    """

    def __init__(self, path=DEFAULT_LOCK_PATH) -> None:
        self.path = Path(path)
        self._lock = FileLock(str(self.path), timeout=0)

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def acquire(self) -> "InstanceLock":
        """Take the lock or fail immediately.

        Raises:
            AlreadyRunningError: If another process holds the lock
        """
        try:
            self._lock.acquire()
        except Timeout:
            raise AlreadyRunningError(
                f"Another instance of the script is already running (lock: {self.path})"
            ) from None
        logger.debug("Acquired instance lock %s", self.path)
        return self

    def release(self) -> None:
        """Delete the lock file and release the lock. Safe to call twice."""
        if not self._lock.is_locked:
            return
        # unlink while still holding so a newcomer never locks the doomed inode
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove lock file %s: %s", self.path, e)
        self._lock.release(force=True)
        logger.debug("Released instance lock %s", self.path)

    def __enter__(self) -> "InstanceLock":
        return self.acquire()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()
