"""Spreadsheet formula parsing, reference resolution and evaluation.

Public API::

    from gridcalc.formulas import parse_formula, evaluate_formula, parse_reference
"""

from gridcalc.formulas.errors import (
    CIRCULAR,
    DIV0,
    ERROR,
    REF,
    SENTINELS,
    FormulaError,
    FormulaFunctionError,
    FormulaParseError,
    is_sentinel,
)
from gridcalc.formulas.evaluator import evaluate_ast, evaluate_formula, is_formula
from gridcalc.formulas.functions import FUNCTIONS, flatten_args
from gridcalc.formulas.nodes import (
    BinaryOpNode,
    CellRefNode,
    FunctionCallNode,
    LiteralNode,
    Node,
    RangeRefNode,
)
from gridcalc.formulas.parser import parse_formula
from gridcalc.formulas.references import (
    Coordinate,
    column_index,
    column_letters,
    expand_coordinates,
    expand_range,
    get_cell_value,
    parse_reference,
)

__all__ = [
    "BinaryOpNode",
    "CIRCULAR",
    "CellRefNode",
    "Coordinate",
    "DIV0",
    "ERROR",
    "FUNCTIONS",
    "FormulaError",
    "FormulaFunctionError",
    "FormulaParseError",
    "FunctionCallNode",
    "LiteralNode",
    "Node",
    "REF",
    "RangeRefNode",
    "SENTINELS",
    "column_index",
    "column_letters",
    "evaluate_ast",
    "evaluate_formula",
    "expand_coordinates",
    "expand_range",
    "flatten_args",
    "get_cell_value",
    "is_formula",
    "is_sentinel",
    "parse_formula",
    "parse_reference",
]
