"""Built-in formula functions and the fixed function registry.

Every registry entry is called as ``fn(args, ctx)`` with the *unevaluated*
argument nodes and the evaluation context; each entry decides how to turn
its arguments into values.  Aggregates (SUM, AVERAGE, COUNT, MAX, MIN) go
through ``flatten_args()``, scalar helpers (IF, DATE, TODAY) evaluate each
argument once.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Protocol

from gridcalc.formulas.errors import ERROR, FormulaFunctionError
from gridcalc.formulas.fn_date import DATE_FUNCTIONS
from gridcalc.formulas.nodes import CellRefNode, Node, RangeRefNode
from gridcalc.formulas.values import to_number


class ArgumentContext(Protocol):
    """What a function needs from the evaluator to resolve its arguments."""

    def evaluate(self, node: Node) -> Any:
        ...

    def cell_value(self, node: CellRefNode) -> Any:
        ...

    def range_values(self, node: RangeRefNode) -> list[Any] | None:
        ...


FormulaFunction = Callable[[tuple[Node, ...], ArgumentContext], Any]


# ---------------------------------------------------------------------------
# Argument flattening
# ---------------------------------------------------------------------------


def flatten_args(args: Iterable[Node], ctx: ArgumentContext) -> list[Any]:
    """Resolve argument nodes into one flat list of values, in argument order.

    Ranges contribute their numeric values (nothing if the range is
    invalid), cell references contribute one value each, and any other
    node is evaluated; list results are spliced in.
    """
    values: list[Any] = []
    for arg in args:
        if isinstance(arg, RangeRefNode):
            values.extend(ctx.range_values(arg) or [])
        elif isinstance(arg, CellRefNode):
            values.append(ctx.cell_value(arg))
        else:
            result = ctx.evaluate(arg)
            if isinstance(result, list):
                values.extend(result)
            else:
                values.append(result)
    return values


def numeric_values(values: Iterable[Any]) -> list[int | float]:
    """Keep the numeric-coercible values, converted to numbers."""
    out: list[int | float] = []
    for v in values:
        number = to_number(v)
        if number is not None:
            out.append(number)
    return out


# ---------------------------------------------------------------------------
# Aggregates (operate on flattened values)
# ---------------------------------------------------------------------------


def fn_sum(values: list) -> int | float:
    return sum(numeric_values(values))


def fn_average(values: list) -> int | float:
    """Mean of the numeric values; 0 when there are none."""
    numbers = numeric_values(values)
    if not numbers:
        return 0
    return sum(numbers) / len(numbers)


def fn_count(values: list) -> int:
    """Count numbers and numeric-looking text.  Booleans are not counted."""
    return sum(1 for v in values if not isinstance(v, bool) and to_number(v) is not None)


def fn_max(values: list) -> Any:
    numbers = numeric_values(values)
    if not numbers:
        return ERROR
    return max(numbers)


def fn_min(values: list) -> Any:
    numbers = numeric_values(values)
    if not numbers:
        return ERROR
    return min(numbers)


# ---------------------------------------------------------------------------
# Scalar helpers (operate on evaluated arguments)
# ---------------------------------------------------------------------------


def fn_if(args: list) -> Any:
    """IF(condition, when_true [, when_false])."""
    if len(args) < 2 or len(args) > 3:
        raise FormulaFunctionError("IF", "IF requires 2-3 arguments")
    if args[0]:
        return args[1]
    if len(args) == 3:
        return args[2]
    return False


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def _aggregate(fn: Callable[[list], Any]) -> FormulaFunction:
    def call(args: tuple[Node, ...], ctx: ArgumentContext) -> Any:
        return fn(flatten_args(args, ctx))

    call.__name__ = fn.__name__
    call.__doc__ = fn.__doc__
    return call


def _scalar(fn: Callable[[list], Any]) -> FormulaFunction:
    def call(args: tuple[Node, ...], ctx: ArgumentContext) -> Any:
        return fn([ctx.evaluate(arg) for arg in args])

    call.__name__ = fn.__name__
    call.__doc__ = fn.__doc__
    return call


AGGREGATE_FUNCTIONS: dict[str, Callable[[list], Any]] = {
    "SUM": fn_sum,
    "AVERAGE": fn_average,
    "COUNT": fn_count,
    "MAX": fn_max,
    "MIN": fn_min,
}

SCALAR_FUNCTIONS: dict[str, Callable[[list], Any]] = {
    "IF": fn_if,
    **DATE_FUNCTIONS,
}


def _build_registry() -> Mapping[str, FormulaFunction]:
    table: dict[str, FormulaFunction] = {}
    for name, fn in AGGREGATE_FUNCTIONS.items():
        table[name] = _aggregate(fn)
    for name, fn in SCALAR_FUNCTIONS.items():
        table[name] = _scalar(fn)
    return MappingProxyType(table)


# Built once; names are case-sensitive.
FUNCTIONS: Mapping[str, FormulaFunction] = _build_registry()


def get_function(name: str) -> FormulaFunction:
    """Look up a function by its exact name.

    Raises:
        FormulaFunctionError: If no function is registered under *name*.
    """
    if name not in FUNCTIONS:
        raise FormulaFunctionError(name)
    return FUNCTIONS[name]
