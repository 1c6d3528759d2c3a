"""Precedence table and rule registry consulted by the parse engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from xl.errors import MissingBindingPowerError, MissingRuleError

if TYPE_CHECKING:
    from xl.ast_nodes import Node
    from xl.rules import ParseRule
    from xl.tokens import Token, TokenKind


class BindingPower(NamedTuple):
    """(left, right) binding powers of a token kind.

    ``left is None``: the token never continues a left operand.
    ``right is None``: the token's rules never recurse on a right operand.
    """

    left: int | None
    right: int | None


@dataclass
class Grammar:
    """Maps token kinds to binding powers and prefix/infix rules."""

    binding_powers: dict[TokenKind, BindingPower] = field(default_factory=dict)
    prefix_rules: dict[TokenKind, ParseRule[Node]] = field(default_factory=dict)
    infix_rules: dict[TokenKind, ParseRule[Node]] = field(default_factory=dict)

    def register(
        self,
        kind: TokenKind,
        power: BindingPower,
        *,
        prefix: ParseRule[Node] | None = None,
        infix: ParseRule[Node] | None = None,
    ) -> None:
        if kind in self.binding_powers:
            raise ValueError(f"a parser rule has already been registered for {kind.name}")
        self.binding_powers[kind] = power
        if prefix is not None:
            self.prefix_rules[kind] = prefix
        if infix is not None:
            self.infix_rules[kind] = infix

    def binding_power(self, token: Token) -> BindingPower:
        power = self.binding_powers.get(token.kind)
        if power is None:
            raise MissingBindingPowerError(
                f"no binding power registered for {token}", token.span,
            )
        return power

    def prefix_rule(self, token: Token) -> ParseRule[Node]:
        rule = self.prefix_rules.get(token.kind)
        if rule is None:
            raise MissingRuleError(f"no prefix rule for {token}", token.span)
        return rule

    def infix_rule(self, token: Token) -> ParseRule[Node]:
        rule = self.infix_rules.get(token.kind)
        if rule is None:
            raise MissingRuleError(f"no infix rule for {token}", token.span)
        return rule
