import io
import traceback

from lox.lox_session import LoxSession
from lox.lox_transpile import Transpiler


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def read_entry() -> str | None:
    """Read one entry, continuing with `... ` while braces are unbalanced.

    Returns None when the user asks to leave.
    """
    src_lines: list[str] = []
    brace_count = 0
    while True:
        prompt = ">>> " if not src_lines else "... "
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def run_entry(session: LoxSession, src: str, verbose: bool = False) -> None:
    """Run one REPL entry. A lone expression has its value echoed."""
    handled, text = session.evaluate_expression(src)
    if handled:
        if text is not None:
            print(text)
        return
    if verbose:
        unit = session.compile(src)
        if unit is None:
            return
        print(f"[ast] >>> {Transpiler('sexpr').transpile(unit.statements)}")
        session.interpreter.interpret(unit.statements)
        return
    session.run(src)


def start_repl(verbose: bool = False, session: LoxSession | None = None) -> None:
    print("Lox REPL. Type 'exit' or 'quit' to leave.")
    if session is None:
        session = LoxSession()

    while True:
        try:
            src = read_entry()
            if src is None:
                print("Exiting Lox REPL.")
                return
            if not src or src.startswith("//"):
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            try:
                run_entry(session, src, verbose)
            except Exception:
                print_traceback()
            finally:
                # A bad entry must not poison the rest of the session.
                session.reset_errors()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Lox REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
