"""Run external commands one at a time.

The child gets no standard input. Standard error is captured in full and
standard output is either written to a file or handed to a callback line by
line. A command counts as failed when it cannot be spawned or when it wrote
anything to standard error, whatever its exit status. If the run is
interrupted while a child is alive, the child is terminated before the
interrupt propagates.
"""

import io
import logging
import shlex
import subprocess
import tempfile
from typing import IO, Callable, Optional, Sequence

from ..__util__ import CommandError

logger = logging.getLogger(__name__)

OutputHandler = Callable[[str], None]

STOP_GRACE_SECONDS = 5.0


class ProcessRunner:
    """Spawn external commands and apply the stderr failure policy."""

    def run(
        self,
        argv: Sequence[str],
        stdout: Optional[IO[bytes]] = None,
        on_output: Optional[OutputHandler] = None,
    ) -> str:
        """Run ``argv`` to completion.

        Args:
            argv: Command and arguments, passed without a shell
            stdout: Binary file receiving standard output (dump tasks)
            on_output: Called with each output line (copy tasks); ``\\r``
                terminated progress updates count as lines

        Returns:
            Collected standard output (empty when redirected to a file)

        Raises:
            CommandError: If spawning fails or anything was written to stderr
        """
        argv = [str(a) for a in argv]
        logger.debug("Executing: %s", shlex.join(argv))

        output = []
        # stderr goes to a temp file so a chatty child cannot fill a pipe
        # while we block on stdout
        with tempfile.TemporaryFile() as err_file:
            try:
                with subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=stdout if stdout is not None else subprocess.PIPE,
                    stderr=err_file,
                ) as proc:
                    try:
                        if proc.stdout is not None:
                            for line in _text_lines(proc.stdout):
                                output.append(line)
                                if on_output is not None:
                                    on_output(line)
                        returncode = proc.wait()
                    except BaseException:
                        # signal or Ctrl-C: the child must not outlive the lock
                        _stop(proc)
                        raise
            except OSError as e:
                logger.debug("Failed to spawn %s: %s", argv[0], e)
                raise CommandError(argv, f"Failed to execute {argv[0]}: {e}") from e

            err_file.seek(0)
            stderr = err_file.read().decode("utf-8", "replace")

        logger.debug("%s exited with status %d", argv[0], returncode)
        if stderr:
            raise CommandError(argv, stderr)
        return "".join(output)


def _stop(proc: subprocess.Popen) -> None:
    """Terminate a child, killing it if it ignores SIGTERM."""
    if proc.poll() is not None:
        return
    logger.debug("Terminating %s (pid %d)", proc.args[0], proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=STOP_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _text_lines(raw: IO[bytes]):
    """Yield decoded lines, splitting on ``\\n``, ``\\r`` and ``\\r\\n``."""
    with io.TextIOWrapper(raw, encoding="utf-8", errors="replace", newline=None) as text:
        yield from text
