"""A1-style reference parsing and cell/range lookup against a workbook.

Lookups never raise: a bad reference or out-of-bounds table turns into the
``#REF!`` sentinel for single cells and ``None`` for ranges.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence

from gridcalc.formulas.errors import REF
from gridcalc.formulas.values import to_number

if TYPE_CHECKING:
    from gridcalc.models import Cell

Table = Sequence[Sequence["Cell"]]
Workbook = Sequence[Table]

# Reads the value of a located cell; the evaluator supplies one that
# evaluates unresolved formula cells on demand.
CellReader = Callable[["Cell", int], Any]

_REF_RE = re.compile(r"^(\$?)([A-Za-z]+)(\$?)(\d+)$")


@dataclass(frozen=True)
class Coordinate:
    """Zero-based cell position.

    The absolute flags record ``$`` markers; lookups ignore them.
    """

    row: int
    col: int
    absolute_row: bool = False
    absolute_col: bool = False


def column_index(letters: str) -> int:
    """Convert column letter(s) to 0-based index.  A=0, B=1, ..., Z=25, AA=26."""
    idx = 0
    for ch in letters.upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def column_letters(idx: int) -> str:
    """Convert 0-based column index to letter(s).  0=A, 25=Z, 26=AA."""
    result = ""
    n = idx + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        result = chr(65 + rem) + result
    return result


def make_reference(row: int, col: int) -> str:
    """Build a cell reference from 0-based row/col."""
    return f"{column_letters(col)}{row + 1}"


def parse_reference(text: str) -> Coordinate | None:
    """Parse ``[$]LETTERS[$]DIGITS`` into a Coordinate, or None if malformed."""
    if not isinstance(text, str):
        return None
    m = _REF_RE.match(text.strip())
    if not m:
        return None
    col_abs, letters, row_abs, digits = m.groups()
    row = int(digits) - 1
    if row < 0:
        return None
    return Coordinate(
        row=row,
        col=column_index(letters),
        absolute_row=row_abs == "$",
        absolute_col=col_abs == "$",
    )


def parse_range(range_text: str) -> tuple[Coordinate, Coordinate] | None:
    """Split ``A1:B2`` into its two corners, or None if either is malformed."""
    if not isinstance(range_text, str):
        return None
    parts = range_text.upper().split(":")
    if len(parts) != 2:
        return None
    start, end = parse_reference(parts[0]), parse_reference(parts[1])
    if start is None or end is None:
        return None
    return start, end


def expand_coordinates(range_text: str) -> list[Coordinate] | None:
    """Expand a range into its coordinates in row-major order.

    Corner order does not matter: ``B2:A1`` covers the same cells as ``A1:B2``.
    """
    corners = parse_range(range_text)
    if corners is None:
        return None
    start, end = corners
    return [
        Coordinate(row, col)
        for row in range(min(start.row, end.row), max(start.row, end.row) + 1)
        for col in range(min(start.col, end.col), max(start.col, end.col) + 1)
    ]


def cell_value(cell: Cell, table_id: int = 0) -> Any:
    """The resolved value of a resolved cell, else its raw value."""
    return cell.resolved_value if cell.resolved else cell.value


def _table(workbook: Workbook, table_id: Any) -> Table | None:
    if not isinstance(table_id, int) or isinstance(table_id, bool):
        return None
    if table_id < 0 or table_id >= len(workbook):
        return None
    return workbook[table_id]


def _cell_at(table: Table, coord: Coordinate) -> Cell | None:
    if coord.row >= len(table):
        return None
    row = table[coord.row]
    if row is None or coord.col >= len(row):
        return None
    return row[coord.col]


def expand_range(
    range_text: str,
    workbook: Workbook,
    table_id: int,
    read: CellReader = cell_value,
) -> list[int | float] | None:
    """Return the numeric values inside a range.

    Returns ``None`` when the range text is malformed or the table index is
    out of bounds.  Missing, blank and non-numeric cells are skipped.
    """
    table = _table(workbook, table_id)
    if table is None:
        return None
    coords = expand_coordinates(range_text)
    if coords is None:
        return None
    values: list[int | float] = []
    for coord in coords:
        cell = _cell_at(table, coord)
        if cell is None:
            continue
        number = to_number(read(cell, table_id))
        if number is not None:
            values.append(number)
    return values


def get_cell_value(
    ref: str,
    workbook: Workbook,
    table_id: int,
    read: CellReader = cell_value,
) -> Any:
    """Return the value of one cell, or ``#REF!`` if it cannot be located."""
    table = _table(workbook, table_id)
    if table is None:
        return REF
    coord = parse_reference(ref)
    if coord is None:
        return REF
    cell = _cell_at(table, coord)
    if cell is None:
        return REF
    return read(cell, table_id)
