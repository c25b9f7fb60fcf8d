"""Workbook resolution: evaluate every formula cell and compute display values.

Cells are visited table-major, then row-major.  Visiting order carries no
meaning: a formula that references a cell not yet visited evaluates that
cell's formula on demand.
"""

from __future__ import annotations

from typing import Any

from gridcalc.config import DEFAULT_CONFIG
from gridcalc.formatting import ExcelFormatter, Formatter, display_text
from gridcalc.formulas.errors import CIRCULAR, DIV0, REF, is_sentinel
from gridcalc.formulas.evaluator import evaluate_formula, is_formula
from gridcalc.formulas.references import make_reference
from gridcalc.formulas.values import numeric_string_to_number
from gridcalc.logging.events import (
    FORMULA_CIRCULAR,
    FORMULA_DIV_ZERO,
    FORMULA_EVAL_ERROR,
    FORMULA_REF_ERROR,
    EventLevel,
    EventType,
    emit,
    emit_info,
    make_cell_event,
)
from gridcalc.models import Cell, FormulaCell, Table, normalize_workbook

_ERROR_CODES = {
    REF: FORMULA_REF_ERROR,
    DIV0: FORMULA_DIV_ZERO,
    CIRCULAR: FORMULA_CIRCULAR,
}


class WorkbookResult:
    """Container for the outputs of a resolution pass.

    Attributes:
        tables: The resolved tables (rows of Cells).
        formulas: One entry per formula cell, with its position.
    """

    def __init__(self, tables: list[Table], formulas: list[FormulaCell]) -> None:
        self.tables = tables
        self.formulas = formulas

    def to_dict(self) -> dict[str, Any]:
        """Serialize as ``{"tables": ..., "formulas": ...}`` with camelCase cell keys."""
        return {
            "tables": [
                [[cell.to_dict() for cell in row] for row in table]
                for table in self.tables
            ],
            "formulas": [f.to_dict() for f in self.formulas],
        }


def _is_percent_format(format_string: str | None) -> bool:
    return bool(format_string) and "%" in format_string


def _apply_display(cell: Cell, value: Any, formatter: Formatter) -> None:
    if cell.excel_format:
        formatted = formatter.format(value, cell.excel_format)
        cell.display_value = formatted.display_value
        if formatted.text_color:
            cell.text_color = formatted.text_color
    else:
        cell.display_value = display_text(value)


def _report_sentinel(value: str, formula: str, table: int, row: int, col: int) -> None:
    event_type = EventType.circular_reference if value == CIRCULAR else EventType.formula_error
    emit(
        make_cell_event(
            event_type,
            EventLevel.warning,
            f"{make_reference(row, col)} in table {table} evaluated to {value}",
            table=table,
            row=row,
            col=col,
            error_code=_ERROR_CODES.get(value, FORMULA_EVAL_ERROR),
            extra={"formula": formula},
        )
    )


def resolve_cell(
    cell: Cell,
    tables: list[Table],
    table_id: int,
    formatter: Formatter,
    percent_display_scaling: bool = True,
) -> Any:
    """Resolve one cell in place and return its resolved value."""
    if not is_formula(cell.value):
        cell.resolved = True
        cell.resolved_value = cell.value
        _apply_display(cell, cell.value, formatter)
        return cell.resolved_value

    result = evaluate_formula(cell.value, tables, table_id, set())
    cell.resolved = True
    cell.resolved_value = numeric_string_to_number(result)

    display = cell.resolved_value
    if (
        percent_display_scaling
        and _is_percent_format(cell.excel_format)
        and isinstance(display, (int, float))
        and not isinstance(display, bool)
    ):
        display = display / 100
    _apply_display(cell, display, formatter)
    return cell.resolved_value


def resolve_workbook(
    data: Any,
    formatter: Formatter | None = None,
    config: dict[str, Any] | None = None,
) -> WorkbookResult:
    """Resolve every cell of a workbook.

    Args:
        data: A list of tables, or a mapping with a ``tables`` key (see
            ``normalize_workbook``).  Cell objects in the input are updated
            in place.
        formatter: Display formatter; defaults to ``ExcelFormatter``.
        config: Settings as returned by ``load_config()``.

    Returns:
        A WorkbookResult holding the resolved tables and the formula cells.

    Raises:
        ValueError: If *data* is not a recognizable workbook.
    """
    cfg = dict(DEFAULT_CONFIG)
    if config:
        cfg.update(config)
    formatter = formatter or ExcelFormatter()
    scaling = bool(cfg.get("percent_display_scaling", True))

    tables = normalize_workbook(data)
    emit_info(
        EventType.resolve_started,
        f"Resolving {len(tables)} table(s)",
        {"tables": len(tables)},
    )

    formulas: list[FormulaCell] = []
    error_count = 0
    for t_idx, table in enumerate(tables):
        for r_idx, row in enumerate(table):
            for c_idx, cell in enumerate(row):
                value = resolve_cell(cell, tables, t_idx, formatter, scaling)
                if not is_formula(cell.value):
                    continue
                if is_sentinel(value):
                    error_count += 1
                    _report_sentinel(value, cell.value, t_idx, r_idx, c_idx)
                formulas.append(FormulaCell.from_cell(cell, t_idx, r_idx, c_idx))

    emit_info(
        EventType.resolve_completed,
        f"Resolved {len(formulas)} formula(s), {error_count} error(s)",
        {"tables": len(tables), "formulas": len(formulas), "errors": error_count},
    )
    return WorkbookResult(tables, formulas)
