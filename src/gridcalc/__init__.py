"""gridcalc -- spreadsheet formula evaluation over a workbook of tables.

Usage::

    from gridcalc import resolve_workbook

    result = resolve_workbook([[[{"value": 2}, {"value": "=A1*3"}]]])
    print(result.tables[0][0][1].resolved_value)  # 6
"""

__version__ = "0.1.0"

from gridcalc.formulas import evaluate_formula, parse_formula, parse_reference
from gridcalc.models import Cell, FormattedValue, FormulaCell
from gridcalc.workbook import WorkbookResult, resolve_workbook

__all__ = [
    "__version__",
    "Cell",
    "FormattedValue",
    "FormulaCell",
    "WorkbookResult",
    "evaluate_formula",
    "parse_formula",
    "parse_reference",
    "resolve_workbook",
]
