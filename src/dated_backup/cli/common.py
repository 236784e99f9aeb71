"""Shared CLI utilities and argument parsers."""

import argparse

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Every option is optional; without arguments the run reads
    ``config.json`` from the working directory.
    """
    parser = argparse.ArgumentParser(
        prog="dated-backup",
        description="Back up folders and databases into dated directories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_verbosity_args(parser)
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file (default: ./config.json)",
    )
    parser.add_argument(
        "--lock-file",
        metavar="FILE",
        help="Path of the single-instance lock file",
    )
    return parser


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"
