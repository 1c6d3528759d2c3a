"""The XL grammar: binding powers and parse rules per token kind.

Binding powers (left, right):

    COMMA        (2, 1)     right-leaning argument pairs
    ARROW        (1, 2)
    ASSIGN       (4, 3)     right-associative
    PLUS MINUS   (5, 6)     left-associative; prefix sign binds at 10
    STAR SLASH   (7, 8)     left-associative
    ++ --        (11, 11)   postfix (left) and prefix (right) step
    LPAREN       (13, 0)    call on an identifier; grouping resets to 0
    LBRACE FN    (None, 0)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from xl.ast_nodes import (
    EMPTY,
    ArrowExpr,
    BinaryExpr,
    BinaryOperator,
    CallExpr,
    CommaExpr,
    Expr,
    ExpressionList,
    FunctionDeclaration,
    FunctionSignature,
    IdentifierExpr,
    LiteralExpr,
    Node,
    NodeList,
    TypeExpr,
    UnaryExpr,
    UnaryOperator,
)
from xl.errors import UnexpectedTokenError
from xl.grammar import BindingPower, Grammar
from xl.rules import (
    Compose,
    Constant,
    Convert,
    FromToken,
    PassThrough,
    Require,
    RequireNode,
    RequireWithTerminator,
    Sequence,
    Skip,
)
from xl.tokens import SYMBOLS, TokenKind

if TYPE_CHECKING:
    from xl.parser import ParseContext

# ── Binding powers ───────────────────────────────────────────────

ATOM = BindingPower(None, None)
END_OF_LINE = BindingPower(None, 0)
COMMA = BindingPower(2, 1)
ARROW = BindingPower(1, 2)
ASSIGNMENT = BindingPower(4, 3)
PLUS_MINUS = BindingPower(5, 6)
MULT_DIV = BindingPower(7, 8)
SIGNED = BindingPower(None, 10)
PRE_STEP = BindingPower(None, 11)
POST_STEP = BindingPower(11, None)
STEP = BindingPower(POST_STEP.left, PRE_STEP.right)
PARENS = BindingPower(13, 0)
BRACES = BindingPower(None, 0)
FUNCTION = BindingPower(None, 0)

# Floor for each half of `name:Type`; above every infix operator except calls.
TYPE_ANNOTATION = 12


# ── Helpers ──────────────────────────────────────────────────────


def _unary(op: UnaryOperator) -> Callable[[Expr], UnaryExpr]:
    return lambda operand: UnaryExpr(operand, op)


def _binary(op: BinaryOperator) -> Callable[[Expr, Expr], BinaryExpr]:
    return lambda lhs, rhs: BinaryExpr(lhs, rhs, op)


def _prefix(op: UnaryOperator, power: BindingPower, name: str) -> Convert[Expr, UnaryExpr]:
    assert power.right is not None
    return Convert(
        Require(Expr, power.right, f"Must provide an expression for {name}"),
        _unary(op),
    )


def _postfix(op: UnaryOperator, name: str) -> Convert[Expr, UnaryExpr]:
    return Convert(RequireNode(Expr, f"Must provide an expression for {name}"), _unary(op))


def _infix(op: BinaryOperator, power: BindingPower, name: str) -> Compose[Expr, Expr, BinaryExpr]:
    assert power.right is not None
    return Compose(
        RequireNode(Expr, f"Must provide an expression for lhs argument to {name}"),
        Require(Expr, power.right, f"Must provide an expression for rhs argument to {name}"),
        _binary(op),
    )


def _consumes(kind: TokenKind) -> Callable[[ParseContext], bool]:
    return lambda context: context.tokens.consume_if(kind)


def _peeks(kind: TokenKind) -> Callable[[ParseContext], bool]:
    return lambda context: context.tokens.peek_is(kind)


def _closes(kind: TokenKind) -> Callable[[ParseContext], bool]:
    """Skip line breaks, then consume ``kind`` if it is next."""
    def done(context: ParseContext) -> bool:
        tokens = context.tokens
        while tokens.consume_if(TokenKind.NEWLINE):
            pass
        if tokens.at_end():
            raise UnexpectedTokenError(
                f"expected '{SYMBOLS[kind]}' before end of input", tokens.peek().span,
            )
        return tokens.consume_if(kind)
    return done


# ── Prefix rules ─────────────────────────────────────────────────

_next_line = Skip(
    TokenKind.NEWLINE,
    Require(Node, END_OF_LINE.right, "Expected an expression on the next line"),
)

_literal = FromToken(lambda tok: LiteralExpr(tok.value))
_identifier = FromToken(lambda tok: IdentifierExpr(tok.value))

_negative = _prefix(UnaryOperator.NEGATE, SIGNED, "negative-signed")
_positive = _prefix(UnaryOperator.AFFIRM, SIGNED, "positive-signed")
_pre_increment = _prefix(UnaryOperator.PRE_INCREMENT, PRE_STEP, "pre-increment")
_pre_decrement = _prefix(UnaryOperator.PRE_DECREMENT, PRE_STEP, "pre-decrement")

_parenthesized = RequireWithTerminator(
    Require(Expr, PARENS.right, "Must provide an expression inside parentheses"),
    TokenKind.RPAREN,
)

_expression_list = Convert(
    Sequence(
        Require(Expr, BRACES.right,
                "All elements of an expression list enclosed by { } must be an expression"),
        _closes(TokenKind.RBRACE),
    ),
    lambda body: ExpressionList(body.nodes),
)

_type_expression_message = "Function definition type expression must be of the form identifier:type"

_parameter_type = Compose(
    RequireWithTerminator(
        Require(IdentifierExpr, TYPE_ANNOTATION, _type_expression_message),
        TokenKind.COLON,
    ),
    Require(IdentifierExpr, TYPE_ANNOTATION, _type_expression_message),
    TypeExpr,
)

_return_type = Require(
    IdentifierExpr, TYPE_ANNOTATION, "Function definition return type(s) must be identifiers",
)


def _make_signature(
    parameters: NodeList[TypeExpr], return_types: NodeList[IdentifierExpr],
) -> FunctionSignature:
    return FunctionSignature(parameters.nodes, return_types.nodes)


_function_signature = Compose(
    Sequence(_parameter_type, _consumes(TokenKind.ARROW)),
    Sequence(_return_type, _peeks(TokenKind.LBRACE)),
    _make_signature,
)

_function_declaration = Compose(
    _function_signature,
    Require(Expr, FUNCTION.right, "A function implementation must be an expression"),
    FunctionDeclaration,
)


# ── Infix rules ──────────────────────────────────────────────────

_add = _infix(BinaryOperator.ADD, PLUS_MINUS, "plus")
_subtract = _infix(BinaryOperator.SUBTRACT, PLUS_MINUS, "minus")
_multiply = _infix(BinaryOperator.MULTIPLY, MULT_DIV, "multiply")
_divide = _infix(BinaryOperator.DIVIDE, MULT_DIV, "divide")
_assign = _infix(BinaryOperator.ASSIGN, ASSIGNMENT, "assignment")

_post_increment = _postfix(UnaryOperator.POST_INCREMENT, "post-increment")
_post_decrement = _postfix(UnaryOperator.POST_DECREMENT, "post-decrement")

_comma = Compose(
    PassThrough(),
    Require(Expr, COMMA.right, "Must provide an expression after ','"),
    CommaExpr,
)

_arrow = Compose(
    RequireNode(Expr, "Must provide an expression before '->'"),
    Require(Expr, ARROW.right, "Must provide an expression after '->'"),
    ArrowExpr,
)

_argument_list = RequireWithTerminator(
    Require(Expr, PARENS.right, "Error parsing function call arguments"),
    TokenKind.RPAREN,
)


def _call_arguments(context: ParseContext) -> Node:
    """``()`` yields no arguments; otherwise an expression or comma chain."""
    if context.tokens.consume_if(TokenKind.RPAREN):
        return EMPTY
    return _argument_list(context)


_function_call = Compose(
    RequireNode(IdentifierExpr, "Function to be called must be an identifier"),
    _call_arguments,
    lambda callee, arguments: CallExpr(callee.name, arguments, callee.span),
)


# ── Registration ─────────────────────────────────────────────────


def create_grammar() -> Grammar:
    """Build the XL grammar."""
    grammar = Grammar()
    grammar.register(TokenKind.EOF, ATOM, prefix=Constant(EMPTY))
    grammar.register(TokenKind.NEWLINE, END_OF_LINE, prefix=_next_line)
    grammar.register(TokenKind.NUMBER, ATOM, prefix=_literal)
    grammar.register(TokenKind.IDENTIFIER, ATOM, prefix=_identifier)
    grammar.register(TokenKind.PLUS, PLUS_MINUS, prefix=_positive, infix=_add)
    grammar.register(TokenKind.MINUS, PLUS_MINUS, prefix=_negative, infix=_subtract)
    grammar.register(TokenKind.STAR, MULT_DIV, infix=_multiply)
    grammar.register(TokenKind.SLASH, MULT_DIV, infix=_divide)
    grammar.register(TokenKind.PLUS_PLUS, STEP, prefix=_pre_increment, infix=_post_increment)
    grammar.register(TokenKind.MINUS_MINUS, STEP, prefix=_pre_decrement, infix=_post_decrement)
    grammar.register(TokenKind.ASSIGN, ASSIGNMENT, infix=_assign)
    grammar.register(TokenKind.COMMA, COMMA, infix=_comma)
    grammar.register(TokenKind.ARROW, ARROW, infix=_arrow)
    grammar.register(TokenKind.COLON, ATOM)
    grammar.register(TokenKind.LPAREN, PARENS, prefix=_parenthesized, infix=_function_call)
    grammar.register(TokenKind.RPAREN, ATOM)
    grammar.register(TokenKind.LBRACE, BRACES, prefix=_expression_list)
    grammar.register(TokenKind.RBRACE, ATOM)
    grammar.register(TokenKind.FN, FUNCTION, prefix=_function_declaration)
    return grammar


XL_GRAMMAR = create_grammar()
