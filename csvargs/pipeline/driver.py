"""Row pipeline driver: CSV rows to rendered commands to executed processes.

Reads every listed file in order, binds each record to a row, renders the
template for it and runs the resulting command, recording one
:class:`RowOutcome` per data row in an explicitly passed :class:`RunResult`.

Failure policy
--------------
- Template compile failure raises ``TemplateError`` from
  :class:`RowPipeline` construction, before any file is opened.
- ``FileError`` (open, decode, read, duplicate header) stops the current
  file; rows already run stay recorded and the next file is processed.
- Row-scoped failures (shape, parse, render, launch, non-zero exit) are
  recorded and the next row runs.

Rows run strictly one after another: row N's command starts only after row
N-1's has finished.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from csvargs.config import EXIT_OK, EXIT_ROWS_FAILED
from csvargs.exceptions import (
    AppError,
    CommandFailure,
    FileError,
    LaunchError,
    RecordParseError,
    RenderError,
    RowShapeError,
)

from .csv_reader import CsvRecordStream, RawRecord
from .executor import ExecutionResult, execute_command
from .rows import bind, check_width
from .templating import compile_template, extract_row_references, render_command

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    """Category of a row outcome as shown in the failure report."""

    SUCCESS = "Success"
    COMMAND_FAILURE = "CommandFailure"
    RENDER_FAILURE = "RenderFailure"
    ROW_SHAPE_ERROR = "RowShapeError"
    PARSE_ERROR = "ParseError"
    LAUNCH_ERROR = "LaunchError"


ROW_SCOPED_ERRORS: dict[type[AppError], OutcomeKind] = {
    CommandFailure: OutcomeKind.COMMAND_FAILURE,
    RenderError: OutcomeKind.RENDER_FAILURE,
    RowShapeError: OutcomeKind.ROW_SHAPE_ERROR,
    RecordParseError: OutcomeKind.PARSE_ERROR,
    LaunchError: OutcomeKind.LAUNCH_ERROR,
}


@dataclass(frozen=True)
class RowOutcome:
    """Result of processing one data row.

    Attributes
    ----------
    file : str
        File the row came from, as given on the command line.
    row_number : int
        1-based data row number; a consumed header is not counted.
    line_number : int
        Physical line on which the record ended.
    kind : OutcomeKind
        Success or failure category.
    exit_code : int | None
        Command exit status when the command ran.
    detail : str
        Failure message; empty on success.
    """

    file: str
    row_number: int
    line_number: int
    kind: OutcomeKind
    exit_code: int | None = None
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True)
class FileFailure:
    """A file whose remaining rows were abandoned."""

    file: str
    detail: str
    rows_processed: int = 0


@dataclass
class RunResult:
    """Accumulated outcomes of a run, in execution order."""

    outcomes: list[RowOutcome] = field(default_factory=list)
    file_failures: list[FileFailure] = field(default_factory=list)

    def record(self, outcome: RowOutcome) -> None:
        self.outcomes.append(outcome)

    def record_file_failure(self, failure: FileFailure) -> None:
        self.file_failures.append(failure)

    @property
    def failed_rows(self) -> list[RowOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def ok(self) -> bool:
        """True when every row succeeded and no file was abandoned."""
        return not self.file_failures and all(o.succeeded for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.ok else EXIT_ROWS_FAILED


Executor = Callable[[str], ExecutionResult]


class RowPipeline:
    """Compiled template plus header policy, applied file by file.

    Parameters
    ----------
    template_text : str
        User template; compiled once here.
    has_header : bool, optional
        Whether the first record of each file holds field names.
    executor : Callable[[str], ExecutionResult], optional
        Runs one command. Defaults to :func:`execute_command`.

    Raises
    ------
    TemplateError
        If ``template_text`` does not compile.

    Examples
    --------
    >>> pipeline = RowPipeline("echo {{ row.name }}")
    >>> result = pipeline.run(["people.csv"])  # doctest: +SKIP
    >>> result.exit_code  # doctest: +SKIP
    0
    """

    def __init__(
        self,
        template_text: str,
        has_header: bool = True,
        *,
        executor: Executor | None = None,
    ) -> None:
        self.template = compile_template(template_text)
        self.references = extract_row_references(template_text)
        self.has_header = has_header
        self._execute: Executor = executor or execute_command

    def run(
        self, files: Iterable[str | Path], result: RunResult | None = None
    ) -> RunResult:
        """Process ``files`` in order and return the accumulated result."""
        result = result if result is not None else RunResult()
        for path in files:
            self.process_file(path, result)
        logger.info(
            "Run finished: %d rows succeeded, %d rows failed, %d files failed",
            result.succeeded_count,
            len(result.failed_rows),
            len(result.file_failures),
        )
        return result

    def process_file(self, path: str | Path, result: RunResult) -> None:
        """Stream one file through the pipeline, recording into ``result``.

        A ``FileError`` is recorded as a :class:`FileFailure` and not raised.
        """
        name = str(path)
        processed = 0
        logger.info("Processing %s", name)
        try:
            with CsvRecordStream(Path(path), self.has_header) as stream:
                header = stream.read_header()
                if header is not None:
                    self._warn_unknown_references(name, header)
                width = len(header) if header is not None else None
                for row_number, record in enumerate(stream, start=1):
                    if width is None and record.cells is not None:
                        width = len(record.cells)
                    outcome = self.process_record(name, row_number, record, header, width)
                    result.record(outcome)
                    processed += 1
        except FileError as exc:
            logger.info("%s: %s", name, exc.message)
            result.record_file_failure(FileFailure(name, exc.message, processed))
            return
        logger.info("Finished %s: %d rows", name, processed)

    def process_record(
        self,
        file: str,
        row_number: int,
        record: RawRecord,
        header: Sequence[str] | None,
        width: int | None,
    ) -> RowOutcome:
        """Bind, render and execute a single record.

        Row-scoped errors are converted into a failed :class:`RowOutcome`.
        """
        try:
            if record.error is not None:
                raise record.error
            assert record.cells is not None
            if header is None and width is not None:
                check_width(record.cells, width)
            row = bind(record.cells, header)
            command = render_command(self.template, row)
            logger.info("Executing row %d of %s: %s", row_number, file, command)
            execution = self._execute(command)
            if not execution.succeeded:
                raise CommandFailure(execution.exit_code, execution.stderr)
        except AppError as exc:
            kind = ROW_SCOPED_ERRORS.get(type(exc))
            if kind is None:
                raise
            logger.info("%s row %d: %s: %s", file, row_number, kind.value, exc.message)
            return RowOutcome(
                file,
                row_number,
                record.line_number,
                kind,
                exit_code=getattr(exc, "exit_code", None),
                detail=exc.message,
            )
        return RowOutcome(
            file, row_number, record.line_number, OutcomeKind.SUCCESS, exit_code=0
        )

    def _warn_unknown_references(self, file: str, header: Sequence[str]) -> None:
        missing = [name for name in self.references if name not in header]
        if missing:
            logger.warning(
                "%s: template references fields missing from the header: %s",
                file,
                ", ".join(missing),
            )


def run_pipeline(
    template_text: str,
    files: Iterable[str | Path],
    has_header: bool = True,
    *,
    executor: Executor | None = None,
) -> RunResult:
    """Compile ``template_text`` and run it over ``files``.

    Raises
    ------
    TemplateError
        If the template does not compile; no file is opened in that case.
    """
    pipeline = RowPipeline(template_text, has_header, executor=executor)
    return pipeline.run(files)
