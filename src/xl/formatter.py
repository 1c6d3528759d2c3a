"""AST renderers for XL.

``sexpr`` renders the prefix tree form used in diagnostics, tests and
``xl parse``. ``XLFormatter`` renders fully parenthesised XL source that
parses back to a tree evaluating to the same values; it is not a
byte-for-byte round trip of the original text.
"""

from __future__ import annotations

from collections.abc import Iterable

from xl.ast_nodes import (
    ArrowExpr,
    BinaryExpr,
    BinaryOperator,
    CallExpr,
    CommaExpr,
    EmptyNode,
    ExpressionList,
    FunctionDeclaration,
    FunctionSignature,
    IdentifierExpr,
    LiteralExpr,
    Node,
    NodeList,
    TypeExpr,
    UnaryExpr,
)


def _signature(sig: FunctionSignature, render) -> str:
    parts = [render(p) for p in sig.parameters]
    parts.append("->")
    parts.extend(r.name for r in sig.return_types)
    return " ".join(parts)


def sexpr(node: Node) -> str:
    """Render a node as a prefix tree, e.g. ``(+ 1 (* 2 3))``."""
    match node:
        case LiteralExpr(text=text):
            return text
        case IdentifierExpr(name=name):
            return name
        case UnaryExpr(operand=operand, operator=op):
            if op.is_postfix:
                return f"({sexpr(operand)}){op.symbol}"
            return f"{op.symbol}({sexpr(operand)})"
        case BinaryExpr(lhs=lhs, rhs=rhs, operator=op):
            return f"({op.symbol} {sexpr(lhs)} {sexpr(rhs)})"
        case CommaExpr(left=left, right=right):
            return f"{sexpr(left)}, {sexpr(right)}"
        case ArrowExpr(left=left, right=right):
            return f"(-> {sexpr(left)} {sexpr(right)})"
        case TypeExpr(target=target, type_name=type_name):
            return f"{target.name}:{type_name.name}"
        case FunctionSignature():
            return _signature(node, sexpr)
        case FunctionDeclaration(signature=sig, body=body):
            return f"fn {sexpr(sig)} {sexpr(body)}"
        case CallExpr(callee=callee, arguments=arguments):
            return f"({callee} ({sexpr(arguments)}))"
        case ExpressionList(body=body):
            if not body:
                return "{ }"
            return "{ " + ", ".join(sexpr(e) for e in body) + " }"
        case EmptyNode():
            return ""
        case NodeList(nodes=nodes):
            return ", ".join(sexpr(n) for n in nodes)
    raise TypeError(f"cannot render {node!r}")


class XLFormatter:
    """Format parsed XL nodes back to source text."""

    def __init__(self, indent: str = "    ") -> None:
        self.indent = indent

    # ── Public API ─────────────────────────────────────────────

    def format(self, nodes: Iterable[Node]) -> str:
        """Format top-level nodes, one per line."""
        return "".join(self.format_node(n) + "\n" for n in nodes)

    def format_node(self, node: Node, depth: int = 0) -> str:
        """Format a node in statement position, ``depth`` blocks deep."""
        match node:
            case BinaryExpr(lhs=lhs, rhs=rhs, operator=BinaryOperator.ASSIGN):
                return f"{self._expr(lhs, depth)} = {self._expr(rhs, depth)}"
        return self._expr(node, depth)

    # ── Expressions ────────────────────────────────────────────

    def _expr(self, node: Node, depth: int) -> str:
        match node:
            case LiteralExpr(text=text):
                return text
            case IdentifierExpr(name=name):
                return name
            case UnaryExpr(operand=operand, operator=op):
                if op.is_postfix:
                    return f"({self._expr(operand, depth)}){op.symbol}"
                return f"{op.symbol}({self._expr(operand, depth)})"
            case BinaryExpr(operator=BinaryOperator.ASSIGN):
                return f"({self.format_node(node, depth)})"
            case BinaryExpr(lhs=lhs, rhs=rhs, operator=op):
                return f"({self._expr(lhs, depth)} {op.symbol} {self._expr(rhs, depth)})"
            case CommaExpr(left=left, right=right):
                return f"{self._expr(left, depth)}, {self._expr(right, depth)}"
            case ArrowExpr(left=left, right=right):
                return f"({self._expr(left, depth)} -> {self._expr(right, depth)})"
            case TypeExpr(target=target, type_name=type_name):
                return f"{target.name}:{type_name.name}"
            case FunctionSignature():
                return _signature(node, lambda n: self._expr(n, depth))
            case FunctionDeclaration(signature=sig, body=body):
                # The return types only end at `{`.
                if not isinstance(body, ExpressionList):
                    body = ExpressionList((body,))
                return f"fn {self._expr(sig, depth)} {self._block(body, depth)}"
            case CallExpr(callee=callee, arguments=arguments):
                return f"{callee}({self._expr(arguments, depth)})"
            case ExpressionList():
                return self._block(node, depth)
            case EmptyNode():
                return ""
            case NodeList(nodes=nodes):
                return ", ".join(self._expr(n, depth) for n in nodes)
        raise TypeError(f"cannot format {node!r}")

    def _block(self, block: ExpressionList, depth: int) -> str:
        if not block.body:
            return "{ }"
        if len(block.body) == 1:
            return "{ " + self.format_node(block.body[0], depth + 1) + " }"
        pad = self.indent * (depth + 1)
        lines = [pad + self.format_node(e, depth + 1) for e in block.body]
        return "{\n" + "\n".join(lines) + "\n" + self.indent * depth + "}"
