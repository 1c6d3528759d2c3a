"""Precedence-climbing parse engine.

The engine is grammar-independent: all XL syntax lives in the rules and
binding powers registered on a Grammar (see xl.syntax).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from xl.ast_nodes import EmptyNode, Node, located
from xl.grammar import Grammar
from xl.lexer import Lexer, TokenStream
from xl.tokens import Token

logger = logging.getLogger(__name__)


class ParseContext:
    """State shared by every rule applied during one parse."""

    def __init__(self, parser: Parser, tokens: TokenStream) -> None:
        self.parser = parser
        self.tokens = tokens
        self.current_token: Token = None  # type: ignore[assignment]
        self.current_node: Node = None  # type: ignore[assignment]

    def parse(self, min_precedence: int) -> Node:
        return self.parser.parse_expression(min_precedence)


class Parser:
    """Parses a token stream into a list of top-level XL nodes."""

    def __init__(
        self,
        tokens: Iterable[Token],
        grammar: Grammar | None = None,
    ) -> None:
        if grammar is None:
            from xl.syntax import XL_GRAMMAR
            grammar = XL_GRAMMAR
        self.grammar = grammar
        self.tokens = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
        self.context = ParseContext(self, self.tokens)

    def parse(self) -> list[Node]:
        """Parse top-level expressions until the token stream is exhausted."""
        nodes: list[Node] = []
        while not self.tokens.at_end():
            node = self.parse_expression(0)
            if not isinstance(node, EmptyNode):
                nodes.append(node)
        return nodes

    def parse_expression(self, min_precedence: int) -> Node:
        # Each node is located at the token whose rule built it.
        context = self.context
        token = self.tokens.next()
        rule = self.grammar.prefix_rule(token)
        context.current_token = token
        logger.debug("prefix %s (min %d)", token, min_precedence)
        node = located(rule(context), token.span)

        while True:
            left = self.grammar.binding_power(self.tokens.peek()).left
            if left is None or left < min_precedence:
                break
            token = self.tokens.next()
            rule = self.grammar.infix_rule(token)
            context.current_token = token
            context.current_node = node
            logger.debug("infix %s (left %d, min %d)", token, left, min_precedence)
            node = located(rule(context), token.span)

        context.current_node = node
        return node


def parse_source(source: str, filename: str = "<stdin>") -> list[Node]:
    """Lex and parse XL source text."""
    return Parser(Lexer(source, filename).tokens()).parse()
