"""Tests for the external process runner."""

import sys
import time

import pytest

from dated_backup.__util__ import CommandError, TaskError
from dated_backup.core import process
from dated_backup.core.process import ProcessRunner


def py(code):
    """argv running a Python snippet in a child interpreter."""
    return [sys.executable, "-c", code]


@pytest.fixture
def runner():
    return ProcessRunner()


class TestProcessRunner:
    """Tests for ProcessRunner.run."""

    def test_returns_stdout(self, runner):
        """Test collected standard output is returned."""
        assert runner.run(py("print('hello')")) == "hello\n"

    def test_lines_delivered_to_callback(self, runner):
        """Test each output line reaches the callback."""
        lines = []
        runner.run(py("print('one'); print('two')"), on_output=lines.append)
        assert lines == ["one\n", "two\n"]

    def test_carriage_return_splits_lines(self, runner):
        """Test rsync-style \\r progress updates arrive as separate lines."""
        lines = []
        code = "import sys; sys.stdout.write(' 10% 1.00MB/s 0:00:09\\r 55% 2.00MB/s 0:00:04\\r'); sys.stdout.write('done\\n')"
        runner.run(py(code), on_output=lines.append)
        assert len(lines) == 3
        assert "10%" in lines[0]
        assert "55%" in lines[1]
        assert lines[2].strip() == "done"

    def test_stdout_to_file(self, runner, tmp_path):
        """Test standard output can be redirected to a file."""
        target = tmp_path / "dump.sql"
        with open(target, "wb") as out:
            result = runner.run(py("print('CREATE TABLE t (id INT);')"), stdout=out)
        assert result == ""
        assert target.read_text() == "CREATE TABLE t (id INT);\n"

    def test_no_stdin(self, runner):
        """Test the child sees an empty standard input."""
        out = runner.run(py("import sys; print(repr(sys.stdin.read()))"))
        assert out.strip() == "''"

    def test_stderr_fails_despite_zero_exit(self, runner):
        """Test any stderr output is a failure, whatever the exit status."""
        code = "import sys; sys.stderr.write('Warning: deprecated option\\n'); sys.exit(0)"
        with pytest.raises(CommandError) as exc:
            runner.run(py(code))
        assert "deprecated option" in exc.value.stderr
        assert exc.value.argv[0] == sys.executable

    def test_nonzero_exit_without_stderr_succeeds(self, runner):
        """Test the exit status alone does not decide failure."""
        assert runner.run(py("print('partial'); raise SystemExit(3)")) == "partial\n"

    def test_spawn_failure(self, runner, tmp_path):
        """Test a command that cannot be spawned raises CommandError."""
        with pytest.raises(CommandError, match="Failed to execute"):
            runner.run([str(tmp_path / "no-such-program")])

    def test_command_error_is_task_error(self):
        """Test CommandError belongs to the recoverable taxonomy."""
        assert issubclass(CommandError, TaskError)

    def test_large_stderr_does_not_block(self, runner):
        """Test a child flooding stderr while writing stdout completes."""
        code = "import sys; sys.stderr.write('e' * 200000); print('out')"
        lines = []
        with pytest.raises(CommandError) as exc:
            runner.run(py(code), on_output=lines.append)
        assert lines == ["out\n"]
        assert len(exc.value.stderr) == 200000

    def test_interrupt_terminates_child(self, runner):
        """Test an interrupt while streaming stops the child before unwinding."""
        code = "import time; print('started', flush=True); time.sleep(30)"

        def interrupt(line):
            raise KeyboardInterrupt

        start = time.monotonic()
        with pytest.raises(KeyboardInterrupt):
            runner.run(py(code), on_output=interrupt)
        assert time.monotonic() - start < 10

    def test_child_ignoring_sigterm_is_killed(self, runner, monkeypatch):
        """Test a child that ignores SIGTERM is killed after the grace period."""
        monkeypatch.setattr(process, "STOP_GRACE_SECONDS", 0.5)
        code = (
            "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); "
            "print('started', flush=True); time.sleep(30)"
        )

        def interrupt(line):
            raise SystemExit(143)

        start = time.monotonic()
        with pytest.raises(SystemExit):
            runner.run(py(code), on_output=interrupt)
        assert time.monotonic() - start < 10
