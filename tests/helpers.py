"""Shared test helpers for the XL test suite."""

from __future__ import annotations

from xl.ast_nodes import Node
from xl.formatter import sexpr
from xl.interpreter import Interpreter
from xl.lexer import Lexer
from xl.parser import Parser


def parse(source: str) -> list[Node]:
    """Lex and parse source, return the top-level nodes."""
    return Parser(Lexer(source, "<test>").tokens()).parse()


def parse_one(source: str) -> Node:
    """Parse source that must hold exactly one top-level expression."""
    nodes = parse(source)
    assert len(nodes) == 1, [sexpr(n) for n in nodes]
    return nodes[0]


def tree(source: str) -> str:
    """Parse source and render each top-level node as a prefix tree."""
    return " ; ".join(sexpr(n) for n in parse(source))


def run(source: str, interpreter: Interpreter | None = None) -> list[str]:
    """Evaluate source and return the rendered value of each expression."""
    out: list[str] = []
    (interpreter or Interpreter()).execute(parse(source), out.append)
    return out


def value_of(source: str) -> int:
    """Evaluate source and return the payload of the last value."""
    values = Interpreter().evaluate(parse(source))
    return values[-1].payload  # type: ignore[return-value]
