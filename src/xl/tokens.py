"""Token kinds and token representation for the XL lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from xl.source import Span


class TokenKind(Enum):
    # Keywords
    FN = auto()

    # Literals
    NUMBER = auto()

    # Operators
    PLUS = auto()
    PLUS_PLUS = auto()
    MINUS = auto()
    MINUS_MINUS = auto()
    STAR = auto()
    SLASH = auto()
    ASSIGN = auto()
    ARROW = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    COLON = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Whitespace
    NEWLINE = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span

    def __str__(self) -> str:
        if self.kind in (TokenKind.EOF, TokenKind.NEWLINE):
            return self.kind.name
        return f"{self.kind.name} ({self.value!r})"


KEYWORDS: dict[str, TokenKind] = {
    "fn": TokenKind.FN,
}

# Source spelling of each fixed token, used in diagnostics.
SYMBOLS: dict[TokenKind, str] = {
    TokenKind.FN: "fn",
    TokenKind.PLUS: "+",
    TokenKind.PLUS_PLUS: "++",
    TokenKind.MINUS: "-",
    TokenKind.MINUS_MINUS: "--",
    TokenKind.STAR: "*",
    TokenKind.SLASH: "/",
    TokenKind.ASSIGN: "=",
    TokenKind.ARROW: "->",
    TokenKind.LPAREN: "(",
    TokenKind.RPAREN: ")",
    TokenKind.LBRACE: "{",
    TokenKind.RBRACE: "}",
    TokenKind.COMMA: ",",
    TokenKind.COLON: ":",
}

NEWLINE_SUPPRESSED_AFTER: frozenset[TokenKind] = frozenset({
    TokenKind.COMMA,
    TokenKind.PLUS,
    TokenKind.MINUS,
    TokenKind.STAR,
    TokenKind.SLASH,
    TokenKind.ASSIGN,
    TokenKind.ARROW,
    TokenKind.COLON,
    TokenKind.LPAREN,
})
