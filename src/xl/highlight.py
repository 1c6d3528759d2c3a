"""Pygments lexer for the XL language."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import NullFormatter, TerminalFormatter
from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    Text,
)


class XLLexer(RegexLexer):
    """Pygments lexer for XL source."""

    name = "XL"
    aliases = ["xl"]
    filenames = ["*.xl"]
    mimetypes = ["text/x-xl"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Line comments (// ...)
            (r"//.*$", Comment.Single),
            # Numbers
            (r"[0-9]+", Number.Integer),
            # Function keyword
            (words(("fn",), prefix=r"\b", suffix=r"\b"), Keyword.Declaration),
            # Built-in types
            (words(("Number", "Unit"), prefix=r"\b", suffix=r"\b"), Keyword.Type),
            # Parameter declarations (name:Type)
            (r"([A-Za-z_][A-Za-z0-9_]*)(:)", bygroups(Name.Variable, Punctuation)),
            # Function calls
            (r"[A-Za-z_][A-Za-z0-9_]*(?=\()", Name.Function),
            # Identifiers
            (r"[A-Za-z_][A-Za-z0-9_]*", Name),
            # Operators (multi-char before single-char)
            (r"\+\+|--|->", Operator),
            (r"[+\-*/=]", Operator),
            # Punctuation
            (r"[(),{}:]", Punctuation),
        ],
    }


def highlight_source(source: str, *, color: bool = True) -> str:
    """Render XL source for the terminal, with ANSI colours if ``color``."""
    formatter = TerminalFormatter() if color else NullFormatter()
    return highlight(source, XLLexer(), formatter)
