"""AST node definitions for the XL language."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from xl.source import Span

# ── Operators ────────────────────────────────────────────────────


class UnaryOperator(Enum):
    NEGATE = "negate"
    AFFIRM = "affirm"
    PRE_INCREMENT = "preincrement"
    PRE_DECREMENT = "predecrement"
    POST_INCREMENT = "postincrement"
    POST_DECREMENT = "postdecrement"

    @property
    def symbol(self) -> str:
        return _UNARY_SYMBOLS[self]

    @property
    def is_postfix(self) -> bool:
        return self in (UnaryOperator.POST_INCREMENT, UnaryOperator.POST_DECREMENT)


_UNARY_SYMBOLS: dict[UnaryOperator, str] = {
    UnaryOperator.NEGATE: "-",
    UnaryOperator.AFFIRM: "+",
    UnaryOperator.PRE_INCREMENT: "++",
    UnaryOperator.PRE_DECREMENT: "--",
    UnaryOperator.POST_INCREMENT: "++",
    UnaryOperator.POST_DECREMENT: "--",
}


class BinaryOperator(Enum):
    """Binary operators; the value names the builtin function they call."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    ASSIGN = "assign"

    @property
    def symbol(self) -> str:
        return _BINARY_SYMBOLS[self]


_BINARY_SYMBOLS: dict[BinaryOperator, str] = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
    BinaryOperator.ASSIGN: "=",
}


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class LiteralExpr:
    text: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IdentifierExpr:
    name: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryExpr:
    operand: Expr
    operator: UnaryOperator
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryExpr:
    lhs: Expr
    rhs: Expr
    operator: BinaryOperator
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CommaExpr:
    """Pairs argument expressions; chains lean right."""

    left: Node
    right: Expr


@dataclass(frozen=True)
class ArrowExpr:
    left: Expr
    right: Expr


@dataclass(frozen=True)
class TypeExpr:
    """``target:type`` in a function signature."""

    target: IdentifierExpr
    type_name: IdentifierExpr


@dataclass(frozen=True)
class FunctionSignature:
    parameters: tuple[TypeExpr, ...]
    return_types: tuple[IdentifierExpr, ...]


@dataclass(frozen=True)
class FunctionDeclaration:
    signature: FunctionSignature
    body: Expr
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CallExpr:
    callee: str
    arguments: Node  # EmptyNode, a single Expr, or a CommaExpr chain
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ExpressionList:
    """A ``{ ... }`` block; its value is the value of its last expression."""

    body: tuple[Expr, ...]


Expr = Union[
    LiteralExpr, IdentifierExpr, UnaryExpr, BinaryExpr, CommaExpr, ArrowExpr,
    TypeExpr, FunctionSignature, FunctionDeclaration, CallExpr, ExpressionList,
]


# ── Structural carriers ──────────────────────────────────────────

T = TypeVar("T")


@dataclass(frozen=True)
class EmptyNode:
    pass


@dataclass(frozen=True)
class NodeList(Generic[T]):
    nodes: tuple[T, ...]


EMPTY = EmptyNode()

Node = Union[Expr, EmptyNode, NodeList]

_LOCATED = (LiteralExpr, IdentifierExpr, UnaryExpr, BinaryExpr, FunctionDeclaration, CallExpr)


def located(node: Node, span: Span) -> Node:
    """Attach ``span`` to a node that can carry one and has none yet."""
    if isinstance(node, _LOCATED) and node.span is None:
        return replace(node, span=span)
    return node
