"""Lark-based parser turning formula text into the typed expression tree.

Supports:
- Numbers, ``"strings"``, ``TRUE`` / ``FALSE``
- Cell references: ``B2``, ``$B$2`` (case-insensitive letters)
- Ranges: ``A1:B3``
- Cross-table references by zero-based table index: ``T1!B2``, ``T1!A1:A3``
- Function calls, ``+ - * / ^``, comparisons, unary minus, postfix ``%``
"""

from __future__ import annotations

from lark import Lark, Token, Transformer

from gridcalc.formulas.errors import FormulaParseError
from gridcalc.formulas.nodes import (
    BinaryOpNode,
    CellRefNode,
    FunctionCallNode,
    LiteralNode,
    Node,
    RangeRefNode,
)

FORMULA_MARKER = "="

# LALR(1) grammar.
# Operator precedence (lowest to highest):
#   1. Comparison: > < >= <= = <>
#   2. Addition/subtraction: + -
#   3. Multiplication/division: * /
#   4. Unary plus/minus: + -
#   5. Exponentiation: ^ (right-associative)
#   6. Postfix percent: %  (3% = 0.03)
#   7. Atoms: number, bool, string, function call, reference, parenthesized expr
GRAMMAR = r"""
start: "=" expr

?expr: comparison

?comparison: addition
    | comparison ">" addition   -> gt
    | comparison "<" addition   -> lt
    | comparison ">=" addition  -> gte
    | comparison "<=" addition  -> lte
    | comparison "=" addition   -> eq
    | comparison "<>" addition  -> neq

?addition: multiplication
    | addition "+" multiplication  -> add
    | addition "-" multiplication  -> sub

?multiplication: unary
    | multiplication "*" unary  -> mul
    | multiplication "/" unary  -> div

?unary: exponentiation
    | "-" unary  -> neg
    | "+" unary  -> pos

?exponentiation: postfix
    | postfix "^" unary  -> pow

?postfix: atom
    | postfix "%"  -> percent

?atom: NUMBER                   -> number
    | BOOL                      -> boolean
    | ESCAPED_STRING            -> string
    | NAME "(" args ")"         -> func_call
    | TABLE_RANGE_REF           -> table_range_ref
    | TABLE_CELL_REF            -> table_cell_ref
    | RANGE_REF                 -> range_ref
    | CELL_REF                  -> cell_ref
    | "(" expr ")"

args: expr ("," expr)*
    |

BOOL.2: "TRUE" | "FALSE"

// Cross-table refs: T1!A1 and T1!A1:B2 (zero-based table index)
TABLE_RANGE_REF.5: /[Tt][0-9]+!\$?[A-Za-z]+\$?[0-9]+:\$?[A-Za-z]+\$?[0-9]+/
TABLE_CELL_REF.4: /[Tt][0-9]+!\$?[A-Za-z]+\$?[0-9]+/

RANGE_REF.3: /\$?[A-Za-z]+\$?[0-9]+:\$?[A-Za-z]+\$?[0-9]+/
CELL_REF.2: /\$?[A-Za-z]+\$?[0-9]+/

NAME.1: /[A-Za-z_][A-Za-z0-9_]*/

%import common.NUMBER
%import common.ESCAPED_STRING
%import common.WS
%ignore WS
"""

_parser = Lark(GRAMMAR, parser="lalr", start="start")

_BINARY_RULES = {
    "add": "+",
    "sub": "-",
    "mul": "*",
    "div": "/",
    "pow": "^",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
    "eq": "=",
    "neq": "<>",
}


def split_table_ref(token_str: str) -> tuple[int, str]:
    """Split a ``T<index>!REF`` token into (table_id, reference).

    Examples:
        ``"T1!B2"`` -> ``(1, "B2")``
        ``"t0!a1:b3"`` -> ``(0, "A1:B3")``
    """
    bang = token_str.index("!")
    return int(token_str[1:bang]), token_str[bang + 1:].upper()


def _parse_number(token: Token) -> int | float:
    s = str(token)
    if "." in s or "e" in s or "E" in s:
        return float(s)
    return int(s)


class _NodeBuilder(Transformer):
    """Convert the lark parse tree into expression tree nodes."""

    def start(self, children: list) -> Node:
        return children[0]

    def number(self, children: list) -> LiteralNode:
        return LiteralNode(_parse_number(children[0]))

    def boolean(self, children: list) -> LiteralNode:
        return LiteralNode(str(children[0]) == "TRUE")

    def string(self, children: list) -> LiteralNode:
        raw = str(children[0])
        return LiteralNode(raw[1:-1].replace('\\"', '"').replace("\\\\", "\\"))

    def cell_ref(self, children: list) -> CellRefNode:
        return CellRefNode(str(children[0]).upper())

    def range_ref(self, children: list) -> RangeRefNode:
        return RangeRefNode(str(children[0]).upper())

    def table_cell_ref(self, children: list) -> CellRefNode:
        table_id, ref = split_table_ref(str(children[0]))
        return CellRefNode(ref, table_id=table_id)

    def table_range_ref(self, children: list) -> RangeRefNode:
        table_id, ref = split_table_ref(str(children[0]))
        return RangeRefNode(ref, table_id=table_id)

    def args(self, children: list) -> tuple[Node, ...]:
        return tuple(children)

    def func_call(self, children: list) -> FunctionCallNode:
        return FunctionCallNode(str(children[0]), children[1])

    def neg(self, children: list) -> Node:
        operand = children[0]
        if isinstance(operand, LiteralNode) and isinstance(operand.value, (int, float)) \
                and not isinstance(operand.value, bool):
            return LiteralNode(-operand.value)
        return BinaryOpNode("-", LiteralNode(0), operand)

    def pos(self, children: list) -> Node:
        return children[0]

    def percent(self, children: list) -> BinaryOpNode:
        return BinaryOpNode("/", children[0], LiteralNode(100))

    def __default__(self, data, children, meta):
        if data in _BINARY_RULES:
            return BinaryOpNode(_BINARY_RULES[data], children[0], children[1])
        return super().__default__(data, children, meta)


_builder = _NodeBuilder()


def parse_formula(text: str) -> Node:
    """Parse a formula string (must start with ``=``) into an expression tree.

    Args:
        text: The formula text, e.g. ``"=SUM(A1:A3) * T1!B2"``.

    Returns:
        The root node.

    Raises:
        FormulaParseError: If the formula has invalid syntax.
    """
    text = text.strip()
    if not text.startswith(FORMULA_MARKER):
        raise FormulaParseError("Formula must start with '='", position=0)
    try:
        tree = _parser.parse(text)
        return _builder.transform(tree)
    except Exception as exc:
        # Extract position info from Lark exception if available
        pos = getattr(exc, "column", None)
        raise FormulaParseError(str(exc), position=pos) from exc
