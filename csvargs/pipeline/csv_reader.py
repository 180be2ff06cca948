"""CSV record streaming with header-mode policy.

This module wraps the standard library ``csv`` tokenizer and turns one file
into a lazy, single-pass stream of raw records. It is responsible for:

- opening and closing the file (``FileError`` when that fails);
- decoding UTF-8 one line at a time, so a bad byte stops the file only
  after the records before it have been emitted;
- consuming the first successfully parsed record as the header when header
  mode is enabled;
- converting tokenizer errors into record-level ``RecordParseError`` values
  so the rest of the file is still read.

Boundaries
----------
- Does not bind rows or check widths; see ``rows.py``.
- Only one record is materialized at a time. A fresh stream must be opened
  to read a file again.

Examples
--------
>>> from pathlib import Path
>>> with CsvRecordStream(Path("people.csv"), has_header=True) as stream:
...     header = stream.read_header()
...     for record in stream:
...         print(record.line_number, record.cells)
"""

from __future__ import annotations

import codecs
import csv
import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO

from csvargs.config import CSV_DELIMITER, CSV_ENCODING, CSV_QUOTECHAR
from csvargs.exceptions import FileError, RecordParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawRecord:
    """One record as produced by the tokenizer.

    Attributes
    ----------
    line_number : int
        Physical line of the file on which the record ended.
    cells : tuple[str, ...] | None
        Cell values, or ``None`` when the record could not be parsed.
    error : RecordParseError | None
        Tokenizer failure for this record, if any.
    """

    line_number: int
    cells: tuple[str, ...] | None = None
    error: RecordParseError | None = None


class CsvRecordStream:
    """Lazy record stream over a single CSV file.

    Parameters
    ----------
    path : Path
        CSV file to read.
    has_header : bool
        Whether the first parsed record holds field names.

    Notes
    -----
    Use as a context manager; the file handle is released on exit even when
    iteration stops early because of a file-scoped error.
    """

    def __init__(self, path: Path, has_header: bool) -> None:
        self.path = Path(path)
        self.has_header = has_header
        self.header: tuple[str, ...] | None = None
        self._handle: IO[bytes] | None = None
        self._records: Iterator[RawRecord] | None = None
        self._pending: list[RawRecord] = []
        self._header_read = False

    def __enter__(self) -> CsvRecordStream:
        try:
            self._handle = self.path.open("rb")
        except OSError as exc:
            raise FileError(
                f"Failed to open file: {self.path}: {exc.strerror or exc}",
                context={"file": str(self.path)},
            ) from exc
        self._records = self._parse(self._decode_lines(self._handle))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying file handle if it is open."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def read_header(self) -> tuple[str, ...] | None:
        """Consume and return the header record when header mode is enabled.

        Records that fail to parse before the first good record are kept and
        emitted ahead of the data records, so they are still reported.

        Returns
        -------
        tuple[str, ...] | None
            Field names, or ``None`` in no-header mode or for an empty file.

        Raises
        ------
        FileError
            If the header names the same field more than once, or the file
            cannot be read.
        """
        if self._header_read:
            return self.header
        self._header_read = True
        if not self.has_header:
            return None
        for record in self._require_records():
            if record.error is not None:
                self._pending.append(record)
                continue
            assert record.cells is not None
            duplicates = sorted(
                name for name, count in Counter(record.cells).items() if count > 1
            )
            if duplicates:
                raise FileError(
                    f"Duplicate header fields in {self.path}: {', '.join(duplicates)}",
                    context={"file": str(self.path), "fields": duplicates},
                )
            self.header = record.cells
            logger.debug("Header for %s: %s", self.path, ", ".join(self.header))
            break
        return self.header

    def __iter__(self) -> Iterator[RawRecord]:
        if not self._header_read:
            self.read_header()
        while self._pending:
            yield self._pending.pop(0)
        yield from self._require_records()

    def _require_records(self) -> Iterator[RawRecord]:
        if self._records is None:
            raise RuntimeError("CsvRecordStream must be entered before reading")
        return self._records

    def _decode_lines(self, handle: Iterable[bytes]) -> Iterator[str]:
        """Decode the file one physical line at a time.

        Lines before an undecodable one are yielded first, so their records
        are processed before the ``FileError`` is raised.
        """
        decoder = codecs.getincrementaldecoder(CSV_ENCODING)()
        line_number = 0
        try:
            for line_number, raw in enumerate(handle, start=1):
                yield decoder.decode(raw)
            decoder.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise FileError(
                f"Failed to decode {self.path} as UTF-8 on line {line_number}: "
                f"{exc.reason}",
                context={"file": str(self.path), "line": line_number},
            ) from exc

    def _parse(self, lines: Iterable[str]) -> Iterator[RawRecord]:
        reader = csv.reader(
            lines, delimiter=CSV_DELIMITER, quotechar=CSV_QUOTECHAR, strict=True
        )
        while True:
            try:
                cells = next(reader)
            except StopIteration:
                return
            except csv.Error as exc:
                yield RawRecord(
                    reader.line_num,
                    error=RecordParseError(
                        f"Malformed CSV near line {reader.line_num}: {exc}",
                        context={"file": str(self.path), "line": reader.line_num},
                    ),
                )
                continue
            except OSError as exc:
                raise FileError(
                    f"Failed to read file: {self.path}: {exc.strerror or exc}",
                    context={"file": str(self.path)},
                ) from exc
            if not cells:
                continue
            yield RawRecord(reader.line_num, cells=tuple(cells))
