"""Error sentinels and exception types for formula parsing and evaluation.

Sentinels are the values a failed evaluation produces.  The exception
types are raised inside the engine and turned into ``#ERROR!`` by the
evaluation step that raised them, so no exception reaches the caller of
``evaluate_formula()``.
"""

from __future__ import annotations

ERROR = "#ERROR!"
REF = "#REF!"
DIV0 = "#DIV/0!"
CIRCULAR = "#CIRCULAR!"

SENTINELS: frozenset[str] = frozenset({ERROR, REF, DIV0, CIRCULAR})


def is_sentinel(value: object) -> bool:
    """Return True if *value* is one of the error sentinel strings."""
    return isinstance(value, str) and value in SENTINELS


class FormulaError(Exception):
    """Base class for all formula-related errors."""


class FormulaParseError(FormulaError):
    """Syntax error in a formula expression.

    Attributes:
        position: Character position where the error was detected.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        full = f"Formula parse error: {message}"
        if position is not None:
            full += f" (at position {position})"
        super().__init__(full)


class FormulaFunctionError(FormulaError):
    """Unknown function or wrong number of arguments.

    Attributes:
        func_name: The function that caused the error.
    """

    def __init__(self, func_name: str, message: str | None = None) -> None:
        self.func_name = func_name
        msg = message or f"Unknown function: {func_name!r}"
        super().__init__(msg)


# Exceptions an evaluation step converts to a sentinel instead of propagating.
ENGINE_ERRORS = (
    FormulaError,
    ArithmeticError,
    ValueError,
    TypeError,
    RecursionError,
)
