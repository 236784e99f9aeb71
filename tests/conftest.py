"""Pytest configuration and shared fixtures."""

import gzip
import io
import json
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from dated_backup.__util__ import CommandError
from dated_backup.core import ProgressReporter

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5)


class FakeRunner:
    """Stand-in for ProcessRunner recording every argv.

    ``errors`` maps a program name to the stderr text it "writes";
    ``fail_when(argv)`` may return stderr text for finer control.
    gzip is emulated so compression leaves a real ``.gz`` behind.
    """

    def __init__(self, errors=None, dump=b"-- MySQL dump\n", output_lines=(), fail_when=None):
        self.calls = []
        self.errors = dict(errors or {})
        self.fail_when = fail_when
        self.dump = dump
        self.output_lines = list(output_lines)

    def programs(self):
        return [argv[0] for argv in self.calls]

    def run(self, argv, stdout=None, on_output=None):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        error = self.errors.get(argv[0])
        if error is None and self.fail_when is not None:
            error = self.fail_when(argv)
        if error:
            raise CommandError(argv, error)
        if stdout is not None:
            stdout.write(self.dump)
        if argv[0] == "gzip":
            path = Path(argv[1])
            gz = path.with_name(path.name + ".gz")
            gz.write_bytes(gzip.compress(path.read_bytes()))
            path.unlink()
        for line in self.output_lines:
            if on_output is not None:
                on_output(line)
        return "".join(self.output_lines)


@pytest.fixture
def fake_runner():
    """A FakeRunner where every command succeeds."""
    return FakeRunner()


@pytest.fixture
def fixed_clock():
    """Clock always reading 2024-01-02 03:04:05."""
    return lambda: FIXED_TIME


@pytest.fixture
def console():
    """Console recording into a string buffer."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)


@pytest.fixture
def progress(console):
    """ProgressReporter rendering into the recording console."""
    with ProgressReporter(10, console=console) as reporter:
        yield reporter


@pytest.fixture
def sample_config_data(tmp_path):
    """Configuration exercising every section."""
    return {
        "local": {
            "enabled": True,
            "paths": [
                {"source": str(tmp_path / "docs"), "target": str(tmp_path / "out")},
                {"source": str(tmp_path / "photos"), "target": str(tmp_path / "out")},
            ],
        },
        "remote": {
            "enabled": True,
            "servers": [
                {
                    "ssh": {"username": "backup", "host": "files.example.com", "port": 2222},
                    "paths": [{"source": "/var/www", "target": str(tmp_path / "remote")}],
                },
                {
                    "ssh": {"username": "backup", "host": "db.example.com"},
                    "databases": [
                        {
                            "engine": "mysql",
                            "host": "10.0.0.5",
                            "user": "dump",
                            "password": "secret",
                            "database_names": ["shop", "blog"],
                            "paths": [str(tmp_path / "db1"), str(tmp_path / "db2")],
                        }
                    ],
                },
            ],
        },
    }


@pytest.fixture
def write_config(tmp_path):
    """Write a config dict as ``config.json`` in a directory."""

    def _write(data, directory=None, name="config.json"):
        path = (directory or tmp_path) / name
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def config_file(write_config, sample_config_data):
    """A config.json with the sample configuration."""
    return write_config(sample_config_data)


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with scripted failures."""
    return FakeRunner
