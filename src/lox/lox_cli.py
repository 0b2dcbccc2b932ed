"""
Lox CLI Entrypoint.

This module provides the command-line interface for running Lox programs.

Features:
    - Read source from a file or an inline string.
    - Run it through scan → parse → resolve → interpret.
    - Inspect the front end instead of running: token dump, s-expression AST,
      JSON AST, or canonical re-emitted source.
    - Launch an interactive REPL when called with no arguments.

Example usage:
    lox hello.lox
    lox -s "print 1 + 2;"
    lox hello.lox --tokens
    lox hello.lox --ast
    lox hello.lox -e
    lox --repl

Exit codes:
    0   success
    64  usage error (e.g. unreadable source file)
    65  lexical, syntax or resolution error
    70  runtime error

Functions:
    run_lox(source, is_string=False, ...) -> int:
        Executes the pipeline and returns the exit code.

    main() -> None:
        Parses CLI arguments and exits with the code from `run_lox`.
"""

import argparse
import json
import logging
import os
import sys

from lox.lox_session import LoxSession
from lox.lox_transpile import Transpiler

EXIT_OK = 0
EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70


def configure_logging(debug: bool) -> None:
    if debug or os.environ.get("LOX_DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def run_lox(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    show_ast: bool = False,
    emit: bool = False,
    as_json: bool = False,
) -> int:
    """
    Run the Lox toolchain on a file or a string.

    Args:
        source (str): The Lox source code or path to a source file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): Print the scanned tokens instead of running.
        show_ast (bool): Print the s-expression form of the AST instead of running.
        emit (bool): Print canonical Lox source for the program instead of running.
        as_json (bool): Print the AST serialized as JSON instead of running.

    Returns:
        int: The process exit code.
    """
    if not is_string:
        try:
            with open(source, encoding="utf-8") as f:
                source = f.read()
        except OSError as e:
            print(f"[error] >>> Cannot read {source}: {e}", file=sys.stderr)
            return EXIT_USAGE

    session = LoxSession()
    inspecting = tokens or show_ast or emit or as_json
    if not inspecting:
        session.run(source)
    else:
        unit = session.compile(source)
        if unit is not None:
            if tokens:
                for tok in unit.tokens:
                    print(tok)
            if show_ast:
                print(Transpiler("sexpr").transpile(unit.statements))
            if as_json:
                print(json.dumps([s.to_dict() for s in unit.statements], indent=2))
            if emit:
                print(Transpiler("lox").transpile(unit.statements))

    if session.reporter.had_error:
        return EXIT_STATIC_ERROR
    if session.reporter.had_runtime_error:
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


def main() -> None:
    """
    Entry point for the Lox CLI.

    Launches the REPL if no arguments are passed or `--repl` is given;
    otherwise runs the source and exits with the pipeline's exit code.
    """
    if len(sys.argv) == 1:
        from lox.lox_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="lox")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument("--tokens", action="store_true", help="Dump scanned tokens")
    parser.add_argument("--ast", action="store_true", help="Dump the AST as s-expressions")
    parser.add_argument("--json", action="store_true", help="Dump the AST as JSON")
    parser.add_argument(
        "-e", "--emit", action="store_true", help="Print canonical Lox source"
    )
    parser.add_argument("--repl", action="store_true", help="Launch interactive REPL")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    configure_logging(args.debug)

    if args.repl or args.source is None:
        from lox.lox_repl import start_repl

        start_repl()
        return
    sys.exit(
        run_lox(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            show_ast=args.ast,
            emit=args.emit,
            as_json=args.json,
        )
    )


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
