"""Tests for the XL tree renderer and source formatter."""

from __future__ import annotations

import pytest

from xl.ast_nodes import (
    ArrowExpr,
    FunctionDeclaration,
    FunctionSignature,
    IdentifierExpr,
    LiteralExpr,
    NodeList,
    TypeExpr,
)
from xl.formatter import XLFormatter, sexpr
from xl.interpreter import Interpreter

from tests.helpers import parse, run


def _format(source: str) -> str:
    return XLFormatter().format(parse(source))


class TestSexpr:
    def test_type_expression(self):
        node = TypeExpr(IdentifierExpr("x"), IdentifierExpr("Number"))
        assert sexpr(node) == "x:Number"

    def test_arrow(self):
        assert sexpr(ArrowExpr(IdentifierExpr("a"), IdentifierExpr("b"))) == "(-> a b)"

    def test_node_list(self):
        assert sexpr(NodeList((LiteralExpr("1"), LiteralExpr("2")))) == "1, 2"

    def test_unknown_node(self):
        with pytest.raises(TypeError):
            sexpr("not a node")  # type: ignore[arg-type]


class TestFormatter:
    def test_arithmetic(self):
        assert _format("1 + 2 * 3") == "(1 + (2 * 3))\n"

    def test_assignment(self):
        assert _format("x = 3 * (4 + 9)") == "x = (3 * (4 + 9))\n"

    def test_nested_assignment(self):
        assert _format("x = y = 3") == "x = (y = 3)\n"

    def test_unary(self):
        assert _format("-3 + x++") == "(-(3) + (x)++)\n"

    def test_calls(self):
        assert _format("f(1, 2)\ng()") == "f(1, 2)\ng()\n"

    def test_single_line_function(self):
        assert _format("f = fn x:Number -> Number { x + 10 }") == (
            "f = fn x:Number -> Number { (x + 10) }\n"
        )

    def test_bare_body_is_wrapped(self):
        node = FunctionDeclaration(
            FunctionSignature((), (IdentifierExpr("Number"),)), LiteralExpr("3"),
        )
        assert XLFormatter().format([node]) == "fn -> Number { 3 }\n"

    def test_multi_line_function(self):
        source = "f = fn n:Number -> Number {\n  m = n * 2\n  m + 1\n}"
        assert _format(source) == (
            "f = fn n:Number -> Number {\n"
            "    m = (n * 2)\n"
            "    (m + 1)\n"
            "}\n"
        )

    def test_empty_block(self):
        assert _format("{ }") == "{ }\n"

    def test_custom_indent(self):
        nodes = parse("{\n1\n2\n}")
        assert XLFormatter(indent="  ").format(nodes) == "{\n  1\n  2\n}\n"


class TestReparse:
    @pytest.mark.parametrize("source", [
        "3 * 4 + 6 - 8 / 2",
        "-3 + +4",
        "x = 3\n2+++x",
        "x = 3\nx---2",
        "x = y = 7\nx * y",
        "f = fn x:Number y:Number -> Number { x + y }\nf(3, 4)",
        "f = fn -> Number {\n  a = 2\n  a * 8\n}\nf()",
        "f = fn a:Number b:Number c:Number -> Number { a * b + c }\nf(2, 3, 14)",
    ])
    def test_formatted_source_evaluates_the_same(self, source):
        formatted = _format(source)
        assert run(formatted, Interpreter()) == run(source, Interpreter())
