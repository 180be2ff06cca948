"""Failure report for a finished run.

Formats every failed row and every abandoned file as one line on the error
stream, followed by a summary. Output goes through a Rich ``Console`` bound
to stderr. Lines are built as ``rich.text.Text`` so that brackets in file
names or command output are never read as markup.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from .driver import FileFailure, RowOutcome, RunResult


def format_row_failure(outcome: RowOutcome) -> str:
    """Return ``FILE:ROW: CATEGORY: DETAIL`` for a failed row.

    Examples
    --------
    >>> from csvargs.pipeline.driver import OutcomeKind, RowOutcome
    >>> format_row_failure(RowOutcome("a.csv", 2, 3, OutcomeKind.COMMAND_FAILURE, 1, "boom"))
    'a.csv:2: CommandFailure: boom'
    """
    return f"{outcome.file}:{outcome.row_number}: {outcome.kind.value}: {outcome.detail}"


def format_file_failure(failure: FileFailure) -> str:
    """Return ``FILE: FileError: DETAIL (after N rows)`` for an abandoned file."""
    line = f"{failure.file}: FileError: {failure.detail}"
    if failure.rows_processed:
        line += f" (after {failure.rows_processed} rows)"
    return line


def format_summary(result: RunResult) -> str:
    """Return a one-line count of succeeded and failed rows and failed files."""
    return (
        f"{result.succeeded_count} rows succeeded, "
        f"{len(result.failed_rows)} rows failed, "
        f"{len(result.file_failures)} files failed"
    )


def print_report(result: RunResult, console: Console | None = None) -> None:
    """Write the failure report for ``result``.

    Nothing is written when the run fully succeeded.

    Parameters
    ----------
    result : RunResult
        Finished run.
    console : Console | None, optional
        Target console; defaults to a console on stderr.
    """
    if result.ok:
        return
    console = console or Console(stderr=True, highlight=False)
    for outcome in result.failed_rows:
        console.print(Text(format_row_failure(outcome), style="red"), soft_wrap=True)
    for failure in result.file_failures:
        console.print(Text(format_file_failure(failure), style="bold red"), soft_wrap=True)
    console.print(Text(format_summary(result), style="yellow"), soft_wrap=True)
