"""Command line interface for dated-backup."""

from .run import execute_run, run_backups

__all__ = ["execute_run", "run_backups"]
