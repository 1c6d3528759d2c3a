"""Composable parse rules.

A parse rule is any callable taking the shared ParseContext and returning a
node. The primitives below are small frozen dataclasses so a grammar can be
declared as data rather than written as recursive-descent methods:

    Compose(RequireNode(Expr, "lhs"), Require(Expr, 6, "rhs"), make_plus)

Rules are generic over the node type they produce, so a type checker sees
that e.g. a Compose of a TypeExpr sequence and an IdentifierExpr sequence
yields a FunctionSignature.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from xl.ast_nodes import EmptyNode, NodeList
from xl.errors import ParseError
from xl.formatter import sexpr
from xl.tokens import SYMBOLS, Token, TokenKind

if TYPE_CHECKING:
    from xl.ast_nodes import Node
    from xl.parser import ParseContext
    from xl.source import Span

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")
T_co = TypeVar("T_co", covariant=True)


class ParseRule(Protocol[T_co]):
    def __call__(self, context: ParseContext) -> T_co: ...


def require(node: Node | None, kind: Any, message: str, span: Span | None = None) -> Any:
    """Return ``node`` if it belongs to ``kind`` (a class or union), else fail."""
    if not isinstance(node, kind):
        if node is None or isinstance(node, EmptyNode):
            got = "nothing"
        else:
            got = f"{type(node).__name__} '{sexpr(node)}'"
        raise ParseError(f"{message} (got {got})", span)
    return node


def describe(kind: Any) -> str:
    if isinstance(kind, type):
        return kind.__name__
    return "an expression"


@dataclass(frozen=True)
class Constant(Generic[T]):
    """Ignore the input and always yield ``value``."""

    value: T

    def __call__(self, context: ParseContext) -> T:
        return self.value


@dataclass(frozen=True)
class FromToken(Generic[T]):
    """Build a node from the token that triggered the rule."""

    convert: Callable[[Token], T]

    def __call__(self, context: ParseContext) -> T:
        return self.convert(context.current_token)


@dataclass(frozen=True)
class PassThrough:
    """Yield the node already produced earlier in the same parse step."""

    def __call__(self, context: ParseContext) -> Node:
        return context.current_node


@dataclass(frozen=True)
class Require(Generic[T]):
    """Parse at ``precedence`` and insist on the ``kind`` node family."""

    kind: Any
    precedence: int
    message: str

    def __call__(self, context: ParseContext) -> T:
        node = context.parse(self.precedence)
        return require(node, self.kind, self.message, context.current_token.span)


@dataclass(frozen=True)
class RequireNode(Generic[T]):
    """Insist that the already-produced node belongs to ``kind``."""

    kind: Any
    message: str

    def __call__(self, context: ParseContext) -> T:
        return require(
            context.current_node, self.kind, self.message, context.current_token.span,
        )


@dataclass(frozen=True)
class RequireWithTerminator(Generic[T]):
    """Apply ``required``, then consume exactly one ``terminator`` token."""

    required: Require[T]
    terminator: TokenKind

    def __call__(self, context: ParseContext) -> T:
        node = self.required(context)
        symbol = SYMBOLS.get(self.terminator, self.terminator.name)
        context.tokens.expect(
            self.terminator,
            f"expected {describe(self.required.kind)} followed by '{symbol}'",
        )
        return node


@dataclass(frozen=True)
class Convert(Generic[T, R]):
    rule: ParseRule[T]
    convert: Callable[[T], R]

    def __call__(self, context: ParseContext) -> R:
        return self.convert(self.rule(context))


@dataclass(frozen=True)
class Compose(Generic[T, U, R]):
    """Apply ``left`` then ``right`` to the same context and combine them."""

    left: ParseRule[T]
    right: ParseRule[U]
    combine: Callable[[T, U], R]

    def __call__(self, context: ParseContext) -> R:
        left = self.left(context)
        right = self.right(context)
        return self.combine(left, right)


@dataclass(frozen=True)
class Sequence(Generic[T]):
    """Apply ``element`` until ``done`` reports the sequence has ended.

    ``done`` usually consumes the closing token when it sees it.
    """

    element: ParseRule[T]
    done: Callable[[ParseContext], bool]

    def __call__(self, context: ParseContext) -> NodeList[T]:
        nodes: list[T] = []
        while not self.done(context):
            nodes.append(self.element(context))
        return NodeList(tuple(nodes))


@dataclass(frozen=True)
class Skip(Generic[T]):
    """Consume any run of ``kind`` tokens, then apply ``rule``."""

    kind: TokenKind
    rule: ParseRule[T]

    def __call__(self, context: ParseContext) -> T:
        while context.tokens.consume_if(self.kind):
            pass
        return self.rule(context)
