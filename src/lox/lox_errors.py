"""
Error taxonomy and reporting channel for the Lox pipeline.

Every phase (scan, parse, resolve, run) reports through one `ErrorReporter`,
which formats each problem as a line+message diagnostic, writes it to its
error stream and keeps it for the driver to inspect.

Classes:
    LoxError: Base class for all Lox exceptions.
    ParseError: Raised inside the parser to unwind to the nearest statement boundary.
    LoxRuntimeError: Raised by the interpreter; carries the offending token.
    Diagnostic: One reported problem.
    ErrorReporter: Accumulates and prints diagnostics.

Example:
    >>> reporter = ErrorReporter(stream=io.StringIO())
    >>> reporter.error(3, "Unexpected character.")
    >>> reporter.diagnostics[0].render()
    '[line 3] Error: Unexpected character.'
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

from lox.lox_constants import TokenType

if TYPE_CHECKING:
    from lox.lox_lexer import Token


class LoxError(Exception):
    """Base class for errors raised by the Lox toolchain.

    Attributes:
        line (int | None): Source line the error refers to, if known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class ParseError(LoxError):
    "a grammar violation; caught by the parser, which then synchronizes"


class LoxRuntimeError(LoxError):
    """A runtime failure tied to the token that triggered it.

    Aborts the remainder of the current top-level `interpret()` call.
    """

    def __init__(self, token: Token, message: str) -> None:
        super().__init__(message, token.line)
        self.token = token


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem.

    Attributes:
        line (int): Source line.
        message (str): Human-readable message.
        where (str): Location suffix, e.g. `" at 'x'"`, `" at end"` or `""`.
        phase (str): `"static"` for scan/parse/resolve problems, `"runtime"` otherwise.
    """

    line: int
    message: str
    where: str = ""
    phase: str = "static"

    def render(self) -> str:
        if self.phase == "runtime":
            return f"{self.message}\n[line {self.line}]"
        return f"[line {self.line}] Error{self.where}: {self.message}"


@dataclass
class ErrorReporter:
    """Collects diagnostics from every phase of the pipeline.

    Args:
        stream (TextIO | None): Where rendered diagnostics are written.
            Defaults to `sys.stderr` at report time.

    Attributes:
        diagnostics (list[Diagnostic]): Everything reported so far, in order.
        had_error (bool): True once any static (scan/parse/resolve) error was reported.
        had_runtime_error (bool): True once a runtime error was reported.
    """

    stream: TextIO | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    had_error: bool = False
    had_runtime_error: bool = False

    def error(self, line: int, message: str) -> None:
        """Report a problem that is not anchored to a token (lexical errors)."""
        self._report(Diagnostic(line, message))

    def token_error(self, token: Token, message: str) -> None:
        """Report a problem at a specific token (syntax and resolution errors)."""
        if token.type == TokenType.EOF:
            where = " at end"
        else:
            where = f" at '{token.lexeme}'"
        self._report(Diagnostic(token.line, message, where))

    def runtime_error(self, error: LoxRuntimeError) -> None:
        self.had_runtime_error = True
        self._emit(Diagnostic(error.token.line, error.message, phase="runtime"))

    def reset(self) -> None:
        """Forget static errors so a REPL session can accept the next entry."""
        self.had_error = False
        self.had_runtime_error = False
        self.diagnostics.clear()

    def messages(self) -> list[str]:
        return [d.render() for d in self.diagnostics]

    def _report(self, diagnostic: Diagnostic) -> None:
        self.had_error = True
        self._emit(diagnostic)

    def _emit(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        stream = self.stream if self.stream is not None else sys.stderr
        print(diagnostic.render(), file=stream)


__all__ = [
    "Diagnostic",
    "ErrorReporter",
    "LoxError",
    "LoxRuntimeError",
    "ParseError",
]
