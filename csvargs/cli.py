"""CLI entrypoint and logging/argument utilities for csvargs.

Usage
-----
csvargs [--no-header] [--log-level LEVEL] TEMPLATE FILE...

Renders ``TEMPLATE`` (a Jinja2 template with the current record bound as
``row``) for every record of every ``FILE`` and runs the result through the
shell. Exit status is ``0`` when every row succeeded, ``1`` when any row or
file failed and ``2`` when the run could not start (bad template, no files,
bad arguments).

Examples
--------
>>> main(["echo {{ row.name }}", "people.csv"])  # doctest: +SKIP
0
"""

from __future__ import annotations

import argparse
import logging
import sys

from csvargs import __version__
from csvargs.config import (
    DEFAULT_LOG_LEVEL,
    EXIT_FATAL,
    LOG_FORMAT,
    LOG_LEVELS,
    PROGRAM_NAME,
)
from csvargs.exceptions import TemplateError
from csvargs.pipeline.driver import RowPipeline
from csvargs.pipeline.reporting import print_report

logger = logging.getLogger(__name__)


def configure_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure root logging to stderr.

    Removes existing root handlers and installs a single stream handler
    using ``LOG_FORMAT``. Safe to call repeatedly.

    Parameters
    ----------
    log_level : str, optional
        Logging level name (e.g. ``"INFO"``). Unknown names fall back to
        ``WARNING``.
    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``csvargs`` command."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Process CSV files with Jinja2 templates and execute commands",
    )
    parser.add_argument(
        "template",
        metavar="TEMPLATE",
        help="Jinja2 template string; the current record is bound as 'row'",
    )
    parser.add_argument(
        "files",
        metavar="FILE",
        nargs="*",
        help="CSV files to process, in order",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="CSV files do NOT have a header row; fields are addressed as row['0'], row['1'], ...",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=DEFAULT_LOG_LEVEL,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run csvargs and return the process exit status.

    Parameters
    ----------
    argv : list[str] | None
        Arguments without the program name; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        ``0`` on full success, ``1`` if any row or file failed, ``2`` if
        the run was aborted before processing.
    """
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)
    configure_logging(args.log_level)

    if not args.files:
        print("Error: At least one CSV file must be provided", file=sys.stderr)
        return EXIT_FATAL

    try:
        pipeline = RowPipeline(args.template, has_header=not args.no_header)
    except TemplateError as exc:
        logger.debug("Template rejected: %s", exc.to_dict())
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_FATAL

    result = pipeline.run(args.files)
    print_report(result)
    return result.exit_code


def entry_point() -> None:
    """Console-script entry: run :func:`main` and exit with its status."""
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    entry_point()
