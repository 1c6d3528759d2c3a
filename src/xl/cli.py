"""XL command line: run, parse, highlight, and an interactive REPL."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from xl import __version__
from xl.config import XLConfig, discover_config
from xl.errors import DiagnosticRenderer, LexicalError, XLError
from xl.formatter import XLFormatter, sexpr
from xl.interpreter import Interpreter
from xl.lexer import Lexer
from xl.parser import parse_source
from xl.source import SourceText
from xl.tokens import TokenKind

_OPENERS = {TokenKind.LPAREN, TokenKind.LBRACE}
_CLOSERS = {TokenKind.RPAREN, TokenKind.RBRACE}


def _report(error: XLError, renderer: DiagnosticRenderer) -> None:
    click.echo(renderer.render(error.diagnostic), err=True)


def _is_complete(text: str) -> bool:
    """True once every bracket opened in ``text`` has been closed."""
    depth = 0
    try:
        for tok in Lexer(text, "<repl>").tokens():
            if tok.kind in _OPENERS:
                depth += 1
            elif tok.kind in _CLOSERS:
                depth -= 1
    except LexicalError:
        # Let evaluation report it.
        return True
    return depth <= 0


@click.group()
@click.version_option(__version__, prog_name="xl")
@click.option("--verbose", "-v", is_flag=True, help="Trace parsing and evaluation.")
def main(verbose: bool) -> None:
    """The XL expression language."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
        )


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--quiet", "-q", is_flag=True, help="Do not print expression values.")
def run(file: str, quiet: bool) -> None:
    """Evaluate an XL source file."""
    config = discover_config(Path(file))
    renderer = DiagnosticRenderer(color=config.output.color)
    source = Path(file).read_text()
    echo = config.output.echo and not quiet

    try:
        nodes = parse_source(source, file)
        Interpreter().execute(nodes, click.echo if echo else lambda _: None)
    except XLError as e:
        _report(e, renderer)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--source", "as_source", is_flag=True, help="Print re-parseable XL source.")
def parse(file: str, as_source: bool) -> None:
    """Print the parse tree of an XL source file."""
    config = discover_config(Path(file))
    source = Path(file).read_text()

    try:
        nodes = parse_source(source, file)
    except XLError as e:
        _report(e, DiagnosticRenderer(color=config.output.color))
        raise SystemExit(1)

    if as_source:
        click.echo(XLFormatter().format(nodes), nl=False)
        return
    for node in nodes:
        click.echo(sexpr(node))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def highlight(file: str) -> None:
    """Print an XL source file with syntax highlighting."""
    from xl.highlight import highlight_source

    config = discover_config(Path(file))
    source = Path(file).read_text()
    click.echo(highlight_source(source, color=config.output.color), nl=False)


@main.command()
def repl() -> None:
    """Start an interactive XL session."""
    config = discover_config()
    _repl(config)


def _repl(config: XLConfig) -> None:
    interpreter = Interpreter()
    renderer = DiagnosticRenderer(color=config.output.color)
    entry = 0

    while True:
        lines: list[str] = []
        prompt = config.repl.prompt
        while True:
            try:
                line = click.prompt(prompt, default="", show_default=False, prompt_suffix="")
            except click.Abort:
                click.echo()
                return
            if not lines and line.strip() == "quit":
                return
            lines.append(line)
            if _is_complete("\n".join(lines)):
                break
            prompt = config.repl.continuation

        text = "\n".join(lines)
        if not text.strip():
            continue
        entry += 1
        source = SourceText(text, f"<repl:{entry}>")
        renderer.add_source(source)
        try:
            interpreter.execute(parse_source(text, source.filename), click.echo)
        except XLError as e:
            _report(e, renderer)
