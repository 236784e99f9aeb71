# pyright: standard

"""dated-backup: dated_backup/__main__.py.

Back up local folders, remote folders and remote MySQL databases into
dated directories, as described by ./config.json.
"""

import signal
import sys

from .cli.common import create_parser
from .cli.run import execute_run


def _raise_exit(signum, _frame) -> None:
    """Turn termination signals into SystemExit so cleanup handlers run."""
    raise SystemExit(128 + signum)


def install_signal_handlers() -> None:
    signal.signal(signal.SIGTERM, _raise_exit)
    signal.signal(signal.SIGHUP, _raise_exit)


def main(argv=None) -> int:
    """Main function."""
    args = create_parser().parse_args(argv)
    install_signal_handlers()
    try:
        return execute_run(args)
    except KeyboardInterrupt:
        print("Interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
