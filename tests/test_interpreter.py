"""Tests for the XL interpreter."""

from __future__ import annotations

import pytest

from xl.ast_nodes import EMPTY
from xl.errors import (
    DivisionByZeroError,
    InvalidNodeError,
    MalformedLiteralError,
    TypeMismatchError,
    UnboundIdentifierError,
    UnknownTypeError,
    UnresolvedSignatureError,
)
from xl.interpreter import INT_MAX, INT_MIN, Function, Interpreter, RuntimeState, Value, wrap
from xl.types import NUMBER, UNIT, TypeList

from tests.helpers import parse, run, value_of


class TestArithmetic:
    @pytest.mark.parametrize("source, expected", [
        ("1 + 2", "3: Number"),
        ("1 + 2 * 3", "7: Number"),
        ("4 * 1 + 2 * 3", "10: Number"),
        ("3 * 4 + 6 - 8 / 2", "14: Number"),
        ("-3 + 4", "1: Number"),
        ("3 + +4", "7: Number"),
        ("(3 + 4) * 2", "14: Number"),
        ("++4", "5: Number"),
        ("--4", "3: Number"),
        ("4++", "4: Number"),
        ("4--", "4: Number"),
    ])
    def test_expressions(self, source, expected):
        assert run(source) == [expected]

    def test_operand_order(self):
        assert value_of("10 - 4") == 6
        assert value_of("8 / 2") == 4
        assert value_of("2 - 10") == -8

    def test_division_truncates_toward_zero(self):
        assert value_of("7 / 2") == 3
        assert value_of("-7 / 2") == -3
        assert value_of("7 / -2") == -3
        assert value_of("-7 / -2") == 3

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZeroError) as exc_info:
            run("4 / 0")
        assert exc_info.value.diagnostic.code == "E400"

    def test_overflow_wraps(self):
        assert value_of("9223372036854775807 + 1") == INT_MIN
        assert value_of("x = 9223372036854775807\n++x") == INT_MIN

    def test_literal_out_of_range(self):
        with pytest.raises(MalformedLiteralError) as exc_info:
            run("9223372036854775808")
        assert exc_info.value.diagnostic.code == "E305"

    def test_wrap(self):
        assert wrap(INT_MAX) == INT_MAX
        assert wrap(INT_MAX + 1) == INT_MIN
        assert wrap(INT_MIN - 1) == INT_MAX


class TestVariables:
    @pytest.mark.parametrize("source, output, x", [
        ("x = 3 + 4", ["7: Number"], 7),
        ("x = 3 + 4\nx * 2", ["7: Number", "14: Number"], 7),
        ("x = 3 + 4\n++x", ["7: Number", "8: Number"], 8),
        ("x = 3 + 4\n--x", ["7: Number", "6: Number"], 6),
        ("x = 3 + 4\nx++", ["7: Number", "7: Number"], 8),
        ("x = 3 + 4\nx--", ["7: Number", "7: Number"], 6),
        ("x = 3\n2+++x", ["3: Number", "5: Number"], 3),
        ("x = 3\nx---2", ["3: Number", "1: Number"], 2),
    ])
    def test_assignment_and_steps(self, source, output, x):
        interpreter = Interpreter()
        assert run(source, interpreter) == output
        assert str(interpreter.state.environment.lookup("x")) == f"{x}: Number"

    def test_chained_assignment(self):
        interpreter = Interpreter()
        assert run("x = y = 4", interpreter) == ["4: Number"]
        assert interpreter.state.environment.lookup("y").payload == 4

    def test_left_operand_evaluated_first(self):
        assert value_of("x = 3\nx++ + x") == 7

    def test_unbound_identifier(self):
        with pytest.raises(UnboundIdentifierError) as exc_info:
            run("y + 1")
        assert exc_info.value.diagnostic.code == "E302"
        assert "'y'" in str(exc_info.value)

    def test_assign_to_non_identifier(self):
        with pytest.raises(InvalidNodeError) as exc_info:
            run("3 = 4")
        assert exc_info.value.diagnostic.code == "E304"


class TestFunctions:
    def test_declaration(self):
        interpreter = Interpreter()
        output = run("f = fn x:Number y:Number -> Number { x + y }", interpreter)
        fn = interpreter.state.functions.resolve("f", TypeList((NUMBER, NUMBER)))
        assert str(fn.signature) == "(Number, Number -> Number)"
        assert output == ["(Number, Number -> Number): (Number, Number -> Number)"]

    def test_call(self):
        source = "f = fn x:Number y:Number -> Number { x + y }\nf(3, 4)"
        assert run(source)[-1] == "7: Number"

    def test_no_parameters(self):
        assert run("f = fn -> Number { 3 }\nf()")[-1] == "3: Number"

    def test_arguments_bound_in_declared_order(self):
        source = "f = fn a:Number b:Number c:Number -> Number { a * b + c }\nf(2, 3, 14)"
        assert value_of(source) == 20
        assert value_of("f = fn a:Number b:Number -> Number { a - b }\nf(10, 4)") == 6

    def test_expression_list_body(self):
        source = (
            "f = fn n:Number -> Number {\n"
            "    m = n * 2\n"
            "    m + 10\n"
            "}\n"
            "f(3)\n"
        )
        assert value_of(source) == 16

    def test_parameters_are_global(self):
        interpreter = Interpreter()
        run("f = fn x:Number y:Number -> Number { x + y }\nf(3, 4)", interpreter)
        assert interpreter.state.environment.lookup("x").payload == 3
        assert interpreter.state.environment.lookup("y").payload == 4

    def test_overloads_by_parameter_type(self):
        source = (
            "f = fn x:Number -> Number { x * 2 }\n"
            "f = fn x:Number y:Number -> Number { x + y }\n"
            "f(5)\n"
            "f(5, 6)\n"
        )
        assert run(source)[-2:] == ["10: Number", "11: Number"]

    def test_redeclaration_replaces(self):
        source = (
            "f = fn x:Number -> Number { x * 2 }\n"
            "f = fn x:Number -> Number { x * 3 }\n"
            "f(5)\n"
        )
        assert value_of(source) == 15

    def test_builtins_callable_by_name(self):
        assert value_of("add(3, 4)") == 7
        assert value_of("subtract(10, 4)") == 6
        assert value_of("preincrement(1)") == 2

    def test_call_in_expression(self):
        assert value_of("sq = fn n:Number -> Number { n * n }\n1 + sq(3) * 2") == 19

    def test_unresolved_signature(self):
        source = "f = fn x:Number y:Number -> Number { x + y }\nf(3)"
        with pytest.raises(UnresolvedSignatureError) as exc_info:
            run(source)
        diag = exc_info.value.diagnostic
        assert diag.code == "E301"
        assert "'f'" in diag.message
        assert diag.notes == ["'f' is defined for (Number, Number -> Number)"]

    def test_undefined_function(self):
        with pytest.raises(UnresolvedSignatureError) as exc_info:
            run("g(1)")
        assert exc_info.value.diagnostic.notes == ["no function named 'g' is defined"]

    def test_unknown_parameter_type(self):
        with pytest.raises(UnknownTypeError):
            run("fn x:Text -> Number { x }")

    def test_unknown_return_type(self):
        with pytest.raises(UnknownTypeError):
            run("fn x:Number -> Text { x }")

    def test_unit_parameter_rejected(self):
        interpreter = Interpreter()
        with pytest.raises(TypeMismatchError) as exc_info:
            run("f = fn u:Unit -> Number { 1 }\nf()", interpreter)
        diag = exc_info.value.diagnostic
        assert diag.message == "parameter 'u' cannot have type Unit"
        assert diag.labels[0].span.start_col == 10
        assert "f" not in interpreter.state.functions
        assert interpreter.state.stack == []

    def test_unit_argument_rejected(self):
        interpreter = Interpreter()
        with pytest.raises(TypeMismatchError, match="cannot pass a Unit value to 'f'"):
            run("f = fn -> Number { 1 }\nf({ })", interpreter)
        assert interpreter.state.stack == []

    def test_function_operand_rejected(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            run("f = fn -> Number { 1 }\n-f")
        assert exc_info.value.diagnostic.code == "E300"

    def test_function_in_arithmetic_unresolved(self):
        with pytest.raises(UnresolvedSignatureError):
            run("f = fn -> Number { 1 }\nf + 1")

    def test_function_value_registered_under_name(self):
        interpreter = Interpreter()
        run("g = fn -> Number { 1 }", interpreter)
        value = interpreter.state.environment.lookup("g")
        assert isinstance(value.payload, Function)
        assert value.payload.name == "g"
        assert "g" in interpreter.state.functions


class TestExpressionLists:
    def test_value_is_last_expression(self):
        assert run("{\n1\n2\n}") == ["2: Number"]

    def test_empty_is_unit(self):
        assert run("{ }") == ["(): Unit"]
        assert Interpreter().evaluate(parse("{ }"))[0].type == UNIT

    def test_assign_block(self):
        assert value_of("x = {\n  a = 3\n  a * 4\n}\nx") == 12


class TestInvalidNodes:
    def test_comma_outside_call(self):
        with pytest.raises(InvalidNodeError) as exc_info:
            run("(1, 2)")
        assert "CommaExpr" in str(exc_info.value)

    def test_arrow(self):
        with pytest.raises(InvalidNodeError):
            run("a -> b")

    def test_empty_node(self):
        with pytest.raises(InvalidNodeError):
            Interpreter().evaluate([EMPTY])


class TestInterpreterApi:
    def test_run(self):
        values = Interpreter().run("x = 2\nx * 21")
        assert [v.payload for v in values] == [2, 42]

    def test_execute_sink(self):
        out: list[str] = []
        Interpreter().execute(parse("1\n2 + 3"), out.append)
        assert out == ["1: Number", "5: Number"]

    def test_execute_stops_at_first_error(self):
        out: list[str] = []
        with pytest.raises(DivisionByZeroError):
            Interpreter().execute(parse("1\n1 / 0\n3"), out.append)
        assert out == ["1: Number"]

    def test_stack_cleared_after_error(self):
        interpreter = Interpreter()
        interpreter.state.stack.append(Value(1, NUMBER))
        with pytest.raises(DivisionByZeroError):
            interpreter.run("4 / 0")
        assert interpreter.state.stack == []

    def test_state_persists_across_runs(self):
        state = RuntimeState.with_builtins()
        Interpreter(state).run("x = 5")
        assert Interpreter(state).run("x * 2")[0].payload == 10


class TestErrorLocations:
    def _location(self, error: pytest.ExceptionInfo) -> tuple[int, int]:
        span = error.value.diagnostic.labels[0].span
        return span.start_line, span.start_col

    def test_unbound_identifier(self):
        with pytest.raises(UnboundIdentifierError) as exc_info:
            run("x = 1\nx + yy")
        assert self._location(exc_info) == (2, 5)
        assert exc_info.value.diagnostic.labels[0].span.end_col == 6

    def test_builtin_error_located_at_operator(self):
        with pytest.raises(DivisionByZeroError) as exc_info:
            run("x = 0\n1 + 4 / x")
        assert self._location(exc_info) == (2, 7)

    def test_error_in_function_body(self):
        source = "f = fn n:Number -> Number {\n  n / 0\n}\n1 + f(2)"
        with pytest.raises(DivisionByZeroError) as exc_info:
            run(source)
        assert self._location(exc_info) == (2, 5)

    def test_unresolved_call_located_at_callee(self):
        with pytest.raises(UnresolvedSignatureError) as exc_info:
            run("1 + g(1)")
        assert self._location(exc_info) == (1, 5)

    def test_literal_out_of_range(self):
        with pytest.raises(MalformedLiteralError) as exc_info:
            run("1 +  9223372036854775808")
        assert self._location(exc_info) == (1, 6)

    def test_unknown_type_located_at_name(self):
        with pytest.raises(UnknownTypeError) as exc_info:
            run("fn x:Text -> Number { x }")
        assert self._location(exc_info) == (1, 6)

    def test_only_one_label(self):
        with pytest.raises(DivisionByZeroError) as exc_info:
            run("(4 / 0) * 2")
        assert len(exc_info.value.diagnostic.labels) == 1
