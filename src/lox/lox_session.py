"""
The Lox pipeline for one compilation unit: scan → parse → resolve → interpret.

A `LoxSession` owns one `ErrorReporter` and one `Interpreter`, so globals,
classes and closures defined by one unit stay visible to the next. That is
what the REPL relies on; a script run is simply a session with one unit.

Example:
    >>> session = LoxSession()
    >>> session.run('print "hi";')
    hi
    >>> session.reporter.had_error
    False
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TextIO

from lox import lox_ast as ast
from lox.lox_errors import ErrorReporter, LoxRuntimeError
from lox.lox_interpreter import Interpreter, stringify
from lox.lox_lexer import Token, scan
from lox.lox_parser import Parser
from lox.lox_resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass
class CompiledUnit:
    """The front-end products of one compilation unit."""

    tokens: list[Token]
    statements: list[ast.Stmt]


class LoxSession:
    """Runs Lox source units against a persistent interpreter.

    Args:
        out (TextIO | None): Destination for `print` output (default stdout).
        err (TextIO | None): Destination for diagnostics (default stderr).
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self.reporter = ErrorReporter(stream=err)
        self.interpreter = Interpreter(self.reporter, out)

    def compile(self, source: str) -> CompiledUnit | None:
        """Scan, parse and resolve `source`.

        Returns None when any lexical, syntax or resolution error was reported.
        """
        tokens = scan(source, self.reporter)
        logger.debug("scanned %d tokens", len(tokens))
        statements = Parser(tokens, self.reporter).parse()
        logger.debug("parsed %d top-level statements", len(statements))
        if self.reporter.had_error:
            return None

        Resolver(self.interpreter, self.reporter).resolve(statements)
        if self.reporter.had_error:
            logger.debug("resolution failed; unit will not run")
            return None
        return CompiledUnit(tokens, statements)

    def run(self, source: str) -> bool:
        """Compile and execute one unit. Returns True if it ran to completion."""
        unit = self.compile(source)
        if unit is None:
            return False
        return self.interpreter.interpret(unit.statements)

    def evaluate_expression(self, source: str) -> tuple[bool, str | None]:
        """Evaluate `source` if it is exactly one expression.

        Returns:
            `(False, None)` without reporting anything when `source` is not a
            lone expression, so the caller can fall back to `run()`.
            `(True, text)` with the printed form of the value otherwise;
            `text` is None if resolving or evaluating it reported an error.
        """
        quiet = ErrorReporter(stream=io.StringIO())
        expr = Parser(scan(source, quiet), quiet).parse_expr_entrypoint()
        if expr is None or quiet.had_error:
            return False, None

        Resolver(self.interpreter, self.reporter).resolve([ast.Expression(expr, line=expr.line)])
        if self.reporter.had_error:
            return True, None
        try:
            return True, stringify(self.interpreter.evaluate(expr))
        except LoxRuntimeError as error:
            self.reporter.runtime_error(error)
            return True, None

    def reset_errors(self) -> None:
        self.reporter.reset()


def run_source(source: str, out: TextIO | None = None, err: TextIO | None = None) -> LoxSession:
    """Run a whole program in a fresh session and return the session for inspection."""
    session = LoxSession(out=out, err=err)
    session.run(source)
    return session


__all__ = ["CompiledUnit", "LoxSession", "run_source"]
