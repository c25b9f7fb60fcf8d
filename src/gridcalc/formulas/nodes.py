"""Expression tree produced by the parser and walked by the evaluator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class LiteralNode:
    """A constant: number, string, or boolean."""

    value: Any


@dataclass(frozen=True)
class CellRefNode:
    """A single cell reference such as ``B2`` or ``T1!$B$2``.

    ``table_id`` overrides the current table when set.
    """

    reference: str
    table_id: int | None = None


@dataclass(frozen=True)
class RangeRefNode:
    """A rectangular range such as ``A1:B3`` or ``T0!A1:A9``."""

    reference: str
    table_id: int | None = None


@dataclass(frozen=True)
class FunctionCallNode:
    name: str
    args: tuple[Node, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BinaryOpNode:
    operator: str
    left: Node
    right: Node


Node = Union[LiteralNode, CellRefNode, RangeRefNode, FunctionCallNode, BinaryOpNode]
