"""Pydantic models for workbook cells and resolution output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Cell(BaseModel):
    """One grid cell.

    ``value`` is the raw content (a literal or a ``=`` formula) and is never
    overwritten; the other fields are derived by a resolution pass.  Keys
    are camelCase on the wire; unknown input keys are kept.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    value: Any = None
    excel_format: str | None = Field(default=None, alias="excelFormat")
    resolved: bool = False
    resolved_value: Any = Field(default=None, alias="resolvedValue")
    display_value: str | None = Field(default=None, alias="displayValue")
    text_color: str | None = Field(default=None, alias="textColor")

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unset optional properties."""
        out = self.model_dump(by_alias=True)
        for key in ("excelFormat", "textColor"):
            if out.get(key) is None:
                out.pop(key, None)
        return out


class FormulaCell(Cell):
    """A resolved formula cell together with its position."""

    table: int
    row: int
    col: int

    @classmethod
    def from_cell(cls, cell: Cell, table: int, row: int, col: int) -> FormulaCell:
        data = cell.model_dump()
        data.update(table=table, row=row, col=col)
        return cls(**data)


class FormattedValue(BaseModel):
    """Result of formatting one value for display."""

    display_value: str
    text_color: str | None = None


Table = list[list[Cell]]


def to_cell(raw: Any) -> Cell:
    """Accept a Cell, a cell dict, or a bare value."""
    if isinstance(raw, Cell):
        return raw
    if isinstance(raw, dict):
        return Cell.model_validate(raw)
    return Cell(value=raw)


def _is_single_table(tables: list) -> bool:
    """True when *tables* is one table (rows of cells) rather than a list of tables."""
    for table in tables:
        if not table:
            continue
        first_row = table[0] if isinstance(table, list) else None
        return not isinstance(first_row, list)
    return False


def normalize_workbook(data: Any) -> list[Table]:
    """Normalize input into a list of tables of rows of Cells.

    Accepts a list of tables, or a mapping whose ``tables`` key holds either
    a list of tables or a single table.  Cell objects already present are
    reused, so resolution updates them in place.

    Raises:
        ValueError: If *data* has neither shape.
    """
    if isinstance(data, dict):
        if "tables" not in data:
            raise ValueError("Workbook mapping must have a 'tables' key")
        tables = data["tables"] or []
        if not isinstance(tables, list):
            raise ValueError("'tables' must be a list")
        if _is_single_table(tables):
            tables = [tables]
    elif isinstance(data, list):
        tables = data
    else:
        raise ValueError(f"Unsupported workbook type: {type(data).__name__}")

    workbook: list[Table] = []
    for t_idx, table in enumerate(tables):
        if not isinstance(table, list):
            raise ValueError(f"Table {t_idx} must be a list of rows")
        rows: Table = []
        for row in table:
            if row is None:
                rows.append([])
                continue
            if not isinstance(row, list):
                raise ValueError(f"Table {t_idx} has a row that is not a list")
            rows.append([to_cell(c) for c in row])
        workbook.append(rows)
    return workbook
