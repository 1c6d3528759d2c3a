"""Lexer for the XL language.

Produces tokens lazily from source text. Newlines end expressions, except
where the innermost open bracket is a parenthesis and after tokens that
cannot end an expression.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from xl.errors import LexicalError, UnexpectedTokenError
from xl.source import Span
from xl.tokens import (
    KEYWORDS,
    NEWLINE_SUPPRESSED_AFTER,
    SYMBOLS,
    Token,
    TokenKind,
)

_SINGLE_CHAR: dict[str, TokenKind] = {
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '*': TokenKind.STAR,
    '/': TokenKind.SLASH,
    '=': TokenKind.ASSIGN,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    ',': TokenKind.COMMA,
    ':': TokenKind.COLON,
}

_TWO_CHAR: dict[str, TokenKind] = {
    '++': TokenKind.PLUS_PLUS,
    '--': TokenKind.MINUS_MINUS,
    '->': TokenKind.ARROW,
}


class Lexer:
    """Tokenizes XL source code."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.brackets: list[TokenKind] = []
        self.prev_kind: TokenKind | None = None

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        return list(self.tokens())

    def tokens(self) -> Iterator[Token]:
        """Yield tokens one at a time, ending with a single EOF token."""
        while True:
            self._skip_spaces()
            if self.pos >= len(self.source):
                break
            ch = self.source[self.pos]
            if ch == '\n':
                tok = self._lex_newline()
                if tok is not None:
                    yield tok
            elif ch == '/' and self._peek(1) == '/':
                self._skip_line_comment()
            elif ch.isdigit():
                yield self._lex_number()
            elif ch.isalpha() or ch == '_':
                yield self._lex_identifier()
            else:
                yield self._lex_operator_or_punct()

        yield self._emit(TokenKind.EOF, "", self.line, self.col)

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _is_ident_char(self) -> bool:
        ch = self.source[self.pos]
        return ch.isalnum() or ch == '_'

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = max(start_col, self.col - 1)
        span = Span(self.filename, start_line, start_col, start_line, end_col)
        self.prev_kind = kind
        return Token(kind, value, span)

    def _skip_spaces(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] in ' \t\r':
            self._advance()

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self._advance()

    # ── Newlines ─────────────────────────────────────────────────

    def _lex_newline(self) -> Token | None:
        start_line = self.line
        start_col = self.col
        self._advance()
        if self.prev_kind in NEWLINE_SUPPRESSED_AFTER:
            return None
        if self.brackets and self.brackets[-1] == TokenKind.LPAREN:
            return None
        return self._emit(TokenKind.NEWLINE, "\n", start_line, start_col)

    # ── Numbers and identifiers ──────────────────────────────────

    def _lex_number(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self.source[self.pos].isdigit():
            text.append(self._advance())
        return self._emit(TokenKind.NUMBER, ''.join(text), start_line, start_col)

    def _lex_identifier(self) -> Token:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self._is_ident_char():
            text.append(self._advance())
        word = ''.join(text)
        kind = KEYWORDS.get(word, TokenKind.IDENTIFIER)
        return self._emit(kind, word, start_line, start_col)

    # ── Operators and punctuation ────────────────────────────────

    def _lex_operator_or_punct(self) -> Token:
        start_line = self.line
        start_col = self.col

        two = self.source[self.pos:self.pos + 2]
        if two in _TWO_CHAR:
            self._advance()
            self._advance()
            return self._emit(_TWO_CHAR[two], two, start_line, start_col)

        ch = self._advance()
        kind = _SINGLE_CHAR.get(ch)
        if kind is None:
            raise LexicalError(
                f"unexpected character: {ch!r}",
                Span(self.filename, start_line, start_col, start_line, start_col),
            )
        match kind:
            case TokenKind.LPAREN | TokenKind.LBRACE:
                self.brackets.append(kind)
            case TokenKind.RPAREN | TokenKind.RBRACE:
                if self.brackets:
                    self.brackets.pop()
        return self._emit(kind, ch, start_line, start_col)


class TokenStream:
    """One-token-lookahead view over a token iterator.

    Once the underlying tokens are exhausted, ``next`` keeps returning the
    final EOF token.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = iter(tokens)
        self._lookahead: Token | None = None
        self._last: Token | None = None

    def _fill(self) -> Token:
        if self._lookahead is None:
            tok = next(self._tokens, None)
            if tok is None:
                if self._last is None or self._last.kind != TokenKind.EOF:
                    raise ValueError("token stream must end with an EOF token")
                tok = self._last
            self._lookahead = tok
        return self._lookahead

    def next(self) -> Token:
        tok = self._fill()
        self._lookahead = None
        self._last = tok
        return tok

    def peek(self) -> Token:
        return self._fill()

    def peek_is(self, kind: TokenKind) -> bool:
        return self.peek().kind == kind

    def consume_if(self, kind: TokenKind) -> bool:
        """Consume the next token iff it has the given kind."""
        if self.peek_is(kind):
            self.next()
            return True
        return False

    def expect(self, kind: TokenKind, message: str | None = None) -> Token:
        """Consume and return the next token, which must have the given kind."""
        tok = self.peek()
        if tok.kind != kind:
            expected = message or f"expected '{SYMBOLS.get(kind, kind.name)}'"
            raise UnexpectedTokenError(f"{expected} (got {tok})", tok.span)
        return self.next()

    def at_end(self) -> bool:
        return self.peek_is(TokenKind.EOF)
