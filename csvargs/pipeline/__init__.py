"""Row pipeline package.

Public API of the CSV-to-command pipeline, re-exported from the sibling
modules:

- ``rows``: row model and binding (:func:`bind`, :class:`Row`)
- ``csv_reader``: lazy record streaming (:class:`CsvRecordStream`)
- ``templating``: template compile and render
- ``executor``: shell execution (:func:`execute_command`)
- ``driver``: orchestration and results (:class:`RowPipeline`)
- ``reporting``: failure report output

Examples
--------
>>> from csvargs.pipeline import run_pipeline
>>> result = run_pipeline("echo {{ row.name }}", ["people.csv"])  # doctest: +SKIP
"""

from .csv_reader import CsvRecordStream, RawRecord
from .driver import (
    FileFailure,
    OutcomeKind,
    RowOutcome,
    RowPipeline,
    RunResult,
    run_pipeline,
)
from .executor import ExecutionResult, execute_command
from .reporting import print_report
from .rows import Row, RowBinding, RowKind, bind, check_width
from .templating import compile_template, extract_row_references, render_command

__all__ = [
    "CsvRecordStream",
    "ExecutionResult",
    "FileFailure",
    "OutcomeKind",
    "RawRecord",
    "Row",
    "RowBinding",
    "RowKind",
    "RowOutcome",
    "RowPipeline",
    "RunResult",
    "bind",
    "check_width",
    "compile_template",
    "execute_command",
    "extract_row_references",
    "print_report",
    "render_command",
    "run_pipeline",
]
