"""Tree-walking evaluator for formula expressions over a workbook of tables.

References are resolved on demand: when a formula points at a cell whose
own formula has not been resolved yet, that formula is evaluated in place,
sharing the caller's in-progress set.  A formula key (table index plus
formula text) that is already in progress yields ``#CIRCULAR!``.

Nothing is memoized between evaluations; each reference redoes its full
resolution chain.  Every evaluation step converts its own failures into a
sentinel, so sentinels travel up the tree as ordinary values and become
``#ERROR!`` only when an arithmetic operator cannot coerce them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from gridcalc.formulas.errors import (
    CIRCULAR,
    DIV0,
    ENGINE_ERRORS,
    ERROR,
    FormulaError,
)
from gridcalc.formulas.functions import get_function
from gridcalc.formulas.nodes import (
    BinaryOpNode,
    CellRefNode,
    FunctionCallNode,
    LiteralNode,
    Node,
    RangeRefNode,
)
from gridcalc.formulas.parser import FORMULA_MARKER, parse_formula
from gridcalc.formulas.references import Workbook, expand_range, get_cell_value
from gridcalc.formulas.values import is_blank, to_number

logger = logging.getLogger(__name__)

Parser = Callable[[str], Node]


def formula_key(table_id: int, formula_text: str) -> str:
    """Identity of a formula evaluation for cycle detection."""
    return f"{table_id}:{formula_text}"


def is_formula(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(FORMULA_MARKER)


def evaluate_formula(
    formula_text: Any,
    workbook: Workbook,
    table_id: int,
    in_progress: set[str] | None = None,
    parser: Parser = parse_formula,
) -> Any:
    """Evaluate a formula string in the context of one table.

    Args:
        formula_text: Cell content.  Anything that is not a string starting
            with ``=`` is returned unchanged.
        workbook: The tables, each a list of rows of cells.
        table_id: Index of the table bare references resolve against.
        in_progress: Formula keys being evaluated further up the current
            call chain.  Pass ``None`` at the top level.
        parser: Turns formula text into an expression tree.

    Returns:
        The computed value, or an error sentinel.
    """
    if not is_formula(formula_text):
        return formula_text

    if in_progress is None:
        in_progress = set()
    key = formula_key(table_id, formula_text)
    if key in in_progress:
        logger.debug("circular reference at %s", key)
        return CIRCULAR

    in_progress.add(key)
    try:
        tree = parser(formula_text)
        return Evaluation(workbook, table_id, in_progress, parser).evaluate(tree)
    except ENGINE_ERRORS as exc:
        logger.debug("formula %r failed: %s", formula_text, exc)
        return ERROR
    finally:
        in_progress.discard(key)


def evaluate_ast(
    node: Node | None,
    workbook: Workbook,
    table_id: int,
    in_progress: set[str] | None = None,
    parser: Parser = parse_formula,
) -> Any:
    """Evaluate an already-parsed expression tree against a table."""
    if in_progress is None:
        in_progress = set()
    return Evaluation(workbook, table_id, in_progress, parser).evaluate(node)


class Evaluation:
    """Context for one formula evaluation: workbook, current table, cycle set.

    Also serves as the argument context handed to formula functions.
    """

    def __init__(
        self,
        workbook: Workbook,
        table_id: int,
        in_progress: set[str],
        parser: Parser = parse_formula,
    ) -> None:
        self.workbook = workbook
        self.table_id = table_id
        self.in_progress = in_progress
        self.parser = parser

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def evaluate(self, node: Node | None) -> Any:
        """Evaluate *node*, converting any failure into a sentinel."""
        try:
            return self._dispatch(node)
        except ENGINE_ERRORS as exc:
            logger.debug("evaluation of %r failed: %s", node, exc)
            return ERROR

    def _dispatch(self, node: Node | None) -> Any:
        if isinstance(node, BinaryOpNode):
            return self._binary_op(node)
        if isinstance(node, FunctionCallNode):
            return get_function(node.name)(node.args, self)
        if isinstance(node, CellRefNode):
            return self.cell_value(node)
        if isinstance(node, RangeRefNode):
            return self.range_values(node)
        if isinstance(node, LiteralNode):
            return node.value
        return ERROR

    def _binary_op(self, node: BinaryOpNode) -> Any:
        # A range is a value list for aggregates, never an operand.
        if isinstance(node.left, RangeRefNode) or isinstance(node.right, RangeRefNode):
            return ERROR
        left = _operand(self.evaluate(node.left))
        right = _operand(self.evaluate(node.right))
        if left is None or right is None:
            return ERROR

        op = node.operator
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if right == 0:
                return DIV0
            return left / right
        if op == "^":
            result = float(left) ** right
            if isinstance(result, complex):
                return ERROR
            return result
        if op == "=":
            return left == right
        if op == "<>":
            return left != right
        if op == "<":
            return left < right
        if op == ">":
            return left > right
        if op == "<=":
            return left <= right
        if op == ">=":
            return left >= right
        raise FormulaError(f"Unknown operator: {op!r}")

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _table_for(self, node: CellRefNode | RangeRefNode) -> int:
        return node.table_id if node.table_id is not None else self.table_id

    def read_cell(self, cell: Any, table_id: int) -> Any:
        """Value of a located cell, evaluating an unresolved formula in place."""
        if cell.resolved:
            return cell.resolved_value
        if is_formula(cell.value):
            return evaluate_formula(
                cell.value, self.workbook, table_id, self.in_progress, self.parser
            )
        return cell.value

    def cell_value(self, node: CellRefNode) -> Any:
        return get_cell_value(
            node.reference, self.workbook, self._table_for(node), read=self.read_cell
        )

    def range_values(self, node: RangeRefNode) -> list[Any] | None:
        return expand_range(
            node.reference, self.workbook, self._table_for(node), read=self.read_cell
        )


def _operand(value: Any) -> int | float | None:
    """Coerce an operator operand: blanks count as 0, non-numbers fail."""
    if is_blank(value):
        return 0
    return to_number(value)
