"""Row model: one CSV record exposed to templates by name or by position.

A row is a tagged value rather than a class hierarchy. ``Row.kind`` says
whether the cells are keyed by header field names (``RowKind.NAMED``) or by
their stringified zero-based position (``RowKind.INDEXED``). Consumers only
ever call :meth:`Row.lookup`, never branch on the kind themselves.

Boundaries
----------
- No I/O; rows are built from cells already read by ``csv_reader``.
- Shape checks raise :class:`csvargs.exceptions.RowShapeError`, which the
  driver records against the row and then moves on.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from csvargs.exceptions import RowShapeError


class RowKind(enum.Enum):
    """How the cells of a row are addressed."""

    NAMED = "named"
    INDEXED = "indexed"


@dataclass(frozen=True)
class Row:
    """A single CSV record.

    Attributes
    ----------
    kind : RowKind
        Addressing mode of the row.
    fields : tuple[tuple[str, str], ...]
        Ordered ``(key, value)`` pairs. For indexed rows the keys are
        ``"0"``, ``"1"``, ...
    """

    kind: RowKind
    fields: tuple[tuple[str, str], ...]

    def lookup(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None`` when absent.

        Named rows match field names exactly (case-sensitive). Indexed rows
        accept only the canonical decimal form of an in-bounds position, so
        ``"01"`` and ``"-1"`` are not found.

        Examples
        --------
        >>> bind(["Alice", ""], ["name", "email"]).lookup("email")
        ''
        >>> bind(["Alice"]).lookup("0")
        'Alice'
        >>> bind(["Alice"]).lookup("1") is None
        True
        """
        if self.kind is RowKind.INDEXED:
            if not (key.isascii() and key.isdigit()) or str(int(key)) != key:
                return None
            position = int(key)
            if position >= len(self.fields):
                return None
            return self.fields[position][1]
        for name, value in self.fields:
            if name == key:
                return value
        return None

    def keys(self) -> list[str]:
        """Return the lookup keys in column order."""
        return [name for name, _value in self.fields]

    def __len__(self) -> int:
        return len(self.fields)


def check_width(cells: Sequence[str], expected: int) -> None:
    """Raise ``RowShapeError`` unless ``cells`` has exactly ``expected`` items.

    Parameters
    ----------
    cells : Sequence[str]
        Cells of the record under test.
    expected : int
        Width fixed by the header or by the first data record.

    Raises
    ------
    RowShapeError
        If the widths differ.
    """
    if len(cells) != expected:
        raise RowShapeError(
            f"Expected {expected} fields, found {len(cells)}",
            context={"expected": expected, "found": len(cells)},
        )


def bind(cells: Sequence[str], header: Sequence[str] | None = None) -> Row:
    """Build a :class:`Row` from raw cells and an optional header.

    Parameters
    ----------
    cells : Sequence[str]
        Cell values of one record, in column order.
    header : Sequence[str] | None, optional
        Field names taken from the first record of the file. When ``None``
        the row is indexed by position.

    Returns
    -------
    Row
        A named row when ``header`` is given, otherwise an indexed row.

    Raises
    ------
    RowShapeError
        If ``header`` is given and its length differs from ``cells``.
    """
    if header is None:
        return Row(
            RowKind.INDEXED,
            tuple((str(position), value) for position, value in enumerate(cells)),
        )
    check_width(cells, len(header))
    return Row(RowKind.NAMED, tuple(zip(header, cells)))


class RowBinding:
    """Read-only adapter exposing a :class:`Row` to the template engine.

    Jinja2 resolves ``row.name`` by trying attribute access first and then
    falling back to subscription, and ``row['name']`` the other way round.
    The adapter keeps no public attributes so every name falls through to
    :meth:`__getitem__`, which answers from :meth:`Row.lookup`.
    """

    __slots__ = ("__row",)

    def __init__(self, row: Row) -> None:
        self.__row = row

    def __getitem__(self, key: Any) -> str:
        if isinstance(key, int) and not isinstance(key, bool):
            key = str(key)
        if not isinstance(key, str):
            raise KeyError(key)
        value = self.__row.lookup(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.__row.lookup(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.__row.keys())

    def __len__(self) -> int:
        return len(self.__row)

    def __repr__(self) -> str:
        return f"RowBinding({dict(self.__row.fields)!r})"
