"""Date formula functions: DATE, TODAY."""

from __future__ import annotations

import datetime
from typing import Any

from gridcalc.formulas.errors import FormulaFunctionError
from gridcalc.formulas.values import to_number


def _whole(value: Any, func_name: str, label: str) -> int:
    number = to_number(value)
    if number is None:
        raise FormulaFunctionError(func_name, f"{func_name}: {label} must be numeric, got {value!r}")
    return int(number)


def fn_date(args: list) -> datetime.date:
    """DATE(year, month, day) -- construct a date.

    Months and days outside their usual range roll over the way a
    spreadsheet does: DATE(2024, 13, 1) => 2025-01-01, DATE(2024, 3, 0)
    => 2024-02-29.
    """
    if len(args) != 3:
        raise FormulaFunctionError("DATE", "DATE requires exactly 3 arguments (year, month, day)")
    year = _whole(args[0], "DATE", "year")
    month = _whole(args[1], "DATE", "month")
    day = _whole(args[2], "DATE", "day")
    total_months = year * 12 + (month - 1)
    try:
        first = datetime.date(total_months // 12, total_months % 12 + 1, 1)
        return first + datetime.timedelta(days=day - 1)
    except (ValueError, OverflowError) as exc:
        raise FormulaFunctionError("DATE", f"Invalid date: {exc}") from exc


def fn_today(args: list) -> datetime.date:
    """TODAY() -- the current local date."""
    if args:
        raise FormulaFunctionError("TODAY", "TODAY takes no arguments")
    return datetime.date.today()


DATE_FUNCTIONS: dict[str, Any] = {
    "DATE": fn_date,
    "TODAY": fn_today,
}
