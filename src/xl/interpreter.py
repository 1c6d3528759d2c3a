"""Tree-walking interpreter for XL.

Operators are sugar over function calls: ``a - b`` resolves the function
``subtract`` by its parameter type ``(Number, Number)`` and invokes it the
same way a user-declared function is invoked.

Calling convention: arguments are pushed onto the operand stack in
reverse, so an implementation pops them in declared order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import assert_never

from xl.ast_nodes import (
    ArrowExpr,
    BinaryExpr,
    BinaryOperator,
    CallExpr,
    CommaExpr,
    EmptyNode,
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
from xl.errors import (
    DivisionByZeroError,
    EvaluationError,
    InvalidNodeError,
    MalformedLiteralError,
    TypeMismatchError,
    UnboundIdentifierError,
    UnresolvedSignatureError,
    XLError,
)
from xl.formatter import sexpr
from xl.parser import parse_source
from xl.types import (
    NUMBER,
    UNIT,
    Parameter,
    Signature,
    SimpleType,
    Type,
    TypeList,
    TypeRegistry,
    combine,
)

logger = logging.getLogger(__name__)

INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1

ANONYMOUS = "<anonymous>"


def wrap(n: int) -> int:
    """Wrap an integer to the signed 64-bit range."""
    return (n - INT_MIN) % (1 << 64) + INT_MIN


# ── Values ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Value:
    payload: int | Function | tuple[()]
    type: Type

    def __str__(self) -> str:
        return f"{self.payload}: {self.type}"


UNIT_VALUE = Value((), UNIT)


def number(n: int) -> Value:
    return Value(wrap(n), NUMBER)


# ── Functions ───────────────────────────────────────────────────

OperandStack = list[Value]


@dataclass(frozen=True)
class Builtin:
    """Native implementation operating directly on the operand stack."""

    operation: Callable[[OperandStack], Value]

    def __call__(self, function: Function, interpreter: Interpreter) -> Value:
        return self.operation(interpreter.state.stack)


@dataclass(frozen=True)
class InterpretedBody:
    """Implementation of a function declared in XL source.

    Arguments are type-checked and bound as global variables under their
    parameter names before the body is evaluated.
    """

    body: Expr

    def __call__(self, function: Function, interpreter: Interpreter) -> Value:
        state = interpreter.state
        for param in function.signature.parameters:
            arg = state.stack.pop()
            if arg.type != param.type:
                raise TypeMismatchError(
                    f"argument '{param.name}' of '{function.name}' expects "
                    f"{param.type}, got {arg.type}",
                )
            state.environment.assign(param.name, arg)
        return interpreter.evaluate_expression(self.body)


Implementation = Builtin | InterpretedBody


@dataclass(frozen=True)
class Function:
    name: str
    signature: Signature
    implementation: Implementation = field(repr=False)

    def __str__(self) -> str:
        return str(self.signature)


# ── Runtime state ───────────────────────────────────────────────


class Environment:
    """Global variable bindings; there is no block scoping."""

    def __init__(self) -> None:
        self._values: dict[str, Value] = {}

    def lookup(self, name: str) -> Value:
        value = self._values.get(name)
        if value is None:
            raise UnboundIdentifierError(f"unbound identifier '{name}'")
        return value

    def get(self, name: str) -> Value | None:
        return self._values.get(name)

    def assign(self, name: str, value: Value) -> None:
        self._values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._values


class FunctionTable:
    """Functions keyed by name, then by parameter type."""

    def __init__(self) -> None:
        self._functions: dict[str, dict[Type, Function]] = {}

    def register(self, function: Function) -> None:
        """Register ``function``, replacing any with the same parameter type."""
        overloads = self._functions.setdefault(function.name, {})
        overloads[function.signature.parameter_type] = function

    def resolve(self, name: str, parameter_type: Type) -> Function:
        overloads = self._functions.get(name, {})
        function = overloads.get(parameter_type)
        if function is None:
            if overloads:
                notes = [f"'{name}' is defined for {f.signature}" for f in overloads.values()]
            else:
                notes = [f"no function named '{name}' is defined"]
            raise UnresolvedSignatureError(
                f"could not find function '{name}' taking ({parameter_type})",
                notes=notes,
            )
        return function

    def signatures(self, name: str) -> list[Signature]:
        return [f.signature for f in self._functions.get(name, {}).values()]

    def __contains__(self, name: str) -> bool:
        return name in self._functions


@dataclass
class RuntimeState:
    """Everything an interpreter mutates while evaluating."""

    environment: Environment = field(default_factory=Environment)
    functions: FunctionTable = field(default_factory=FunctionTable)
    types: TypeRegistry = field(default_factory=TypeRegistry)
    stack: OperandStack = field(default_factory=list)

    @classmethod
    def with_builtins(cls) -> RuntimeState:
        state = cls()
        for function in _builtins():
            state.functions.register(function)
        return state


# ── Builtins ────────────────────────────────────────────────────


def _divide(left: int, right: int) -> int:
    if right == 0:
        raise DivisionByZeroError("division by zero")
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def _binary(operation: Callable[[int, int], int]) -> Builtin:
    def body(stack: OperandStack) -> Value:
        left = stack.pop()
        right = stack.pop()
        return number(operation(left.payload, right.payload))  # type: ignore[arg-type]
    return Builtin(body)


def _step(delta: int) -> Builtin:
    def body(stack: OperandStack) -> Value:
        return number(stack.pop().payload + delta)  # type: ignore[operator]
    return Builtin(body)


def _builtins() -> list[Function]:
    pair = Signature(TypeList((NUMBER, NUMBER)), NUMBER)
    single = Signature(NUMBER, NUMBER)
    return [
        Function(BinaryOperator.ADD.value, pair, _binary(lambda a, b: a + b)),
        Function(BinaryOperator.SUBTRACT.value, pair, _binary(lambda a, b: a - b)),
        Function(BinaryOperator.MULTIPLY.value, pair, _binary(lambda a, b: a * b)),
        Function(BinaryOperator.DIVIDE.value, pair, _binary(_divide)),
        Function(UnaryOperator.PRE_INCREMENT.value, single, _step(1)),
        Function(UnaryOperator.PRE_DECREMENT.value, single, _step(-1)),
        Function(UnaryOperator.POST_INCREMENT.value, single, _step(1)),
        Function(UnaryOperator.POST_DECREMENT.value, single, _step(-1)),
    ]


# ── Interpreter ─────────────────────────────────────────────────


def _arguments(node: Node) -> list[Node]:
    """Flatten a right-leaning comma chain into the argument list."""
    match node:
        case EmptyNode():
            return []
        case CommaExpr(left=left, right=right):
            return _arguments(left) + _arguments(right)
    return [node]


class Interpreter:
    """Evaluates parsed XL nodes against one RuntimeState."""

    def __init__(self, state: RuntimeState | None = None) -> None:
        self.state = state if state is not None else RuntimeState.with_builtins()

    # ── Public API ─────────────────────────────────────────────

    def run(self, source: str, filename: str = "<stdin>") -> list[Value]:
        """Parse and evaluate source text."""
        return self.evaluate(parse_source(source, filename))

    def evaluate(self, nodes: Iterable[Node]) -> list[Value]:
        """Evaluate top-level nodes in order, returning one value each."""
        return [self.evaluate_node(node) for node in nodes]

    def execute(self, nodes: Iterable[Node], sink: Callable[[str], object]) -> None:
        """Evaluate top-level nodes, passing each rendered value to ``sink``."""
        for node in nodes:
            sink(str(self.evaluate_node(node)))

    def evaluate_node(self, node: Node) -> Value:
        try:
            return self.evaluate_expression(node)
        except XLError:
            self.state.stack.clear()
            raise

    def call(self, function: Function, arguments: list[Value]) -> Value:
        self.state.stack.extend(reversed(arguments))
        logger.debug("call %s%s with %s", function.name, function.signature,
                     ", ".join(str(a) for a in arguments))
        return function.implementation(function, self)

    # ── Dispatch ───────────────────────────────────────────────

    def evaluate_expression(self, node: Node) -> Value:
        try:
            return self._dispatch(node)
        except EvaluationError as error:
            error.locate(getattr(node, "span", None))
            raise

    def _dispatch(self, node: Node) -> Value:
        match node:
            case LiteralExpr(text=text):
                return self._literal(text)
            case IdentifierExpr(name=name):
                return self.state.environment.lookup(name)
            case UnaryExpr():
                return self._unary(node)
            case BinaryExpr(operator=BinaryOperator.ASSIGN):
                return self._assign(node)
            case BinaryExpr():
                return self._binary(node)
            case FunctionDeclaration():
                return self._declare(node)
            case CallExpr(callee=callee, arguments=arguments):
                values = [self.evaluate_expression(a) for a in _arguments(arguments)]
                return self._invoke(callee, values)
            case ExpressionList(body=body):
                value = UNIT_VALUE
                for expr in body:
                    value = self.evaluate_expression(expr)
                return value
            case CommaExpr() | ArrowExpr() | TypeExpr() | FunctionSignature():
                raise InvalidNodeError(
                    f"cannot evaluate {type(node).__name__} '{sexpr(node)}' on its own",
                )
            case EmptyNode() | NodeList():
                raise InvalidNodeError(f"cannot evaluate {type(node).__name__}")
            case _:
                assert_never(node)

    # ── Node kinds ─────────────────────────────────────────────

    def _literal(self, text: str) -> Value:
        if not (text.isascii() and text.isdigit()):
            raise MalformedLiteralError(f"malformed number literal '{text}'")
        n = int(text)
        if n > INT_MAX:
            raise MalformedLiteralError(
                f"number literal '{text}' does not fit in 64 bits",
                notes=[f"the largest number is {INT_MAX}"],
            )
        return Value(n, NUMBER)

    def _unary(self, node: UnaryExpr) -> Value:
        op = node.operator
        operand = self.evaluate_expression(node.operand)
        if operand.type != NUMBER:
            raise TypeMismatchError(
                f"operator '{op.symbol}' expects a Number, got {operand.type} "
                f"in '{sexpr(node)}'",
            )
        match op:
            case UnaryOperator.NEGATE:
                return number(-operand.payload)  # type: ignore[operator]
            case UnaryOperator.AFFIRM:
                return operand
        result = self._invoke(op.value, [operand])
        if isinstance(node.operand, IdentifierExpr):
            logger.debug("assign %s = %s", node.operand.name, result)
            self.state.environment.assign(node.operand.name, result)
        return operand if op.is_postfix else result

    def _binary(self, node: BinaryExpr) -> Value:
        lhs = self.evaluate_expression(node.lhs)
        rhs = self.evaluate_expression(node.rhs)
        return self._invoke(node.operator.value, [lhs, rhs])

    def _assign(self, node: BinaryExpr) -> Value:
        target = node.lhs
        if not isinstance(target, IdentifierExpr):
            raise InvalidNodeError(
                f"can only assign to an identifier, got '{sexpr(target)}'",
            )
        value = self.evaluate_expression(node.rhs)
        if isinstance(value.payload, Function):
            function = replace(value.payload, name=target.name)
            self.state.functions.register(function)
            value = Value(function, value.type)
        logger.debug("assign %s = %s", target.name, value)
        self.state.environment.assign(target.name, value)
        return value

    def _declare(self, node: FunctionDeclaration) -> Value:
        types = self.state.types
        parameters: list[Parameter] = []
        for p in node.signature.parameters:
            ty = types.lookup(p.type_name.name, p.type_name.span)
            if ty == UNIT:
                raise TypeMismatchError(
                    f"parameter '{p.target.name}' cannot have type Unit",
                    p.type_name.span,
                    notes=["a function without parameters is declared as 'fn -> ...'"],
                )
            parameters.append(Parameter(p.target.name, ty))
        return_types = [types.lookup(r.name, r.span) for r in node.signature.return_types]
        signature = Signature.of(parameters, return_types)
        function = Function(ANONYMOUS, signature, InterpretedBody(node.body))
        return Value(function, SimpleType(str(signature)))

    def _invoke(self, name: str, arguments: list[Value]) -> Value:
        if any(a.type == UNIT for a in arguments):
            raise TypeMismatchError(f"cannot pass a Unit value to '{name}'")
        parameter_type = combine(a.type for a in arguments)
        function = self.state.functions.resolve(name, parameter_type)
        return self.call(function, arguments)
