"""Runtime type and signature model for XL.

These are distinct from the AST TypeExpr nodes (which are syntactic).
Types compare structurally: two simple types are equal when their names
are, two type lists when their components are, in order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from xl.errors import UnknownTypeError

if TYPE_CHECKING:
    from xl.source import Span

# ── Types ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SimpleType:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TypeList:
    """Ordered composite of several parameter or return types."""

    components: tuple[Type, ...]

    @property
    def name(self) -> str:
        return ", ".join(c.name for c in self.components)

    def __str__(self) -> str:
        return self.name


Type = SimpleType | TypeList


# ── Built-in type constants ─────────────────────────────────────

NUMBER = SimpleType("Number")
UNIT = SimpleType("Unit")


def combine(types: Iterable[Type]) -> Type:
    """Unit for no types, the type itself for one, otherwise a TypeList."""
    types = tuple(types)
    if not types:
        return UNIT
    if len(types) == 1:
        return types[0]
    return TypeList(types)


# ── Signatures ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Parameter:
    name: str
    type: Type


@dataclass(frozen=True)
class Signature:
    """Parameter and return type of a function.

    Parameter names are carried for binding only; they take no part in
    equality, so ``fn a:Number -> Number`` and ``fn b:Number -> Number``
    have the same signature.
    """

    parameter_type: Type
    return_type: Type
    parameters: tuple[Parameter, ...] = field(default=(), compare=False)

    @classmethod
    def of(cls, parameters: Iterable[Parameter], return_types: Iterable[Type]) -> Signature:
        parameters = tuple(parameters)
        return cls(
            combine(p.type for p in parameters),
            combine(return_types),
            parameters,
        )

    def __str__(self) -> str:
        return f"({self.parameter_type} -> {self.return_type})"


# ── Registry ────────────────────────────────────────────────────


class TypeRegistry:
    """Maps type names usable in signatures to their types."""

    def __init__(self) -> None:
        self._types: dict[str, Type] = {}
        self.register(NUMBER)
        self.register(UNIT)

    def register(self, ty: Type, name: str | None = None) -> None:
        self._types[name or ty.name] = ty

    def lookup(self, name: str, span: Span | None = None) -> Type:
        ty = self._types.get(name)
        if ty is None:
            raise UnknownTypeError(
                f"unknown type '{name}'", span,
                notes=[f"known types: {', '.join(sorted(self._types))}"],
            )
        return ty

    def __contains__(self, name: str) -> bool:
        return name in self._types
