"""Diagnostics, Rust-style rendering, and the XL error hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from xl.source import SourceText, Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics as rustc-style text, optionally with ANSI colour.

    Labels quote their source line. Text registered with ``add_source`` is
    used first; any other file named by a span is read from disk once.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceText | None] = {}

    def add_source(self, source: SourceText) -> None:
        """Make in-memory text (REPL entries, strings) available to labels."""
        self._sources[source.filename] = source

    def render(self, diag: Diagnostic) -> str:
        accent = _COLORS[diag.severity]
        lines = [
            self._paint(f"{diag.severity.value}[{diag.code}]", accent)
            + self._paint(f": {diag.message}", _BOLD)
        ]
        for label in diag.labels:
            lines.extend(self._label(label, accent))
        lines.extend(f"  {self._paint('=', _BLUE)} note: {note}" for note in diag.notes)
        return "\n".join(lines)

    def _label(self, label: DiagnosticLabel, accent: str) -> list[str]:
        span = label.span
        bar = self._paint("   |", _BLUE)
        lines = [f"  {self._paint('-->', _BLUE)} {span}", f"  {bar}"]
        quoted = self._line(span.file, span.start_line)
        if quoted is not None:
            gutter = self._paint(f"{span.start_line:>4} |", _BLUE)
            lines.append(f"  {gutter} {quoted}")
            if span.start_line == span.end_line:
                width = max(1, span.end_col - span.start_col + 1)
                indent = " " * (span.start_col - 1)
                lines.append(f"  {bar} {indent}{self._paint('^' * width, accent)}")
        if label.message:
            lines.append(f"  {bar}   {self._paint(label.message, accent)}")
        return lines

    def _line(self, filename: str, number: int) -> str | None:
        if filename not in self._sources:
            self._sources[filename] = _read_source(filename)
        source = self._sources[filename]
        if source is None or not 1 <= number <= len(source.lines):
            return None
        return source.line_at(number)

    def _paint(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text


def _read_source(filename: str) -> SourceText | None:
    try:
        return SourceText(Path(filename).read_text(), filename)
    except OSError:
        return None


class XLError(Exception):
    """Fatal parse or evaluation failure carrying a single diagnostic."""

    code = "E000"

    def __init__(
        self,
        message: str,
        span: Span | None = None,
        *,
        notes: list[str] | None = None,
    ) -> None:
        labels = [DiagnosticLabel(span)] if span is not None else []
        self.diagnostic = Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=message,
            labels=labels,
            notes=list(notes or []),
        )
        super().__init__(message)

    def locate(self, span: Span | None) -> None:
        """Point the diagnostic at ``span`` unless it already has a location."""
        if span is not None and not self.diagnostic.labels:
            self.diagnostic.labels.append(DiagnosticLabel(span))


# ── Parse errors ─────────────────────────────────────────────────


class ParseError(XLError):
    """Lexical, structural, or grammar-shape error; aborts the parse."""

    code = "E200"


class LexicalError(ParseError):
    code = "E100"


class UnexpectedTokenError(ParseError):
    """A required token is missing or a different one was found."""

    code = "E101"


class MissingRuleError(ParseError):
    """No prefix or infix rule is registered for a token kind."""

    code = "E102"


class MissingBindingPowerError(ParseError):
    code = "E103"


# ── Evaluation errors ────────────────────────────────────────────


class EvaluationError(XLError):
    code = "E300"


class TypeMismatchError(EvaluationError):
    code = "E300"


class UnresolvedSignatureError(EvaluationError):
    code = "E301"


class UnboundIdentifierError(EvaluationError):
    code = "E302"


class UnknownTypeError(EvaluationError):
    code = "E303"


class InvalidNodeError(EvaluationError):
    """The node cannot be evaluated in the position it appears in."""

    code = "E304"


class MalformedLiteralError(EvaluationError):
    code = "E305"


class DivisionByZeroError(EvaluationError):
    code = "E400"
