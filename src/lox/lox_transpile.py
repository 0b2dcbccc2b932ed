"""
Provides the `Transpiler` class and emitter interface for rendering Lox ASTs as text.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters. Requires `_visit` and `get_output`.
    - LoxEmitter: Canonical Lox source (re-parseable).
    - SExprEmitter: Parenthesized prefix form for inspecting trees.
    - Transpiler: Picks an emitter by target name and feeds it statements.

Example:
    >>> Transpiler("lox").transpile(statements)
    'print 1 + 2;'
    >>> Transpiler("sexpr").transpile(statements)
    '(print (+ 1 2))'

Raises:
    ValueError: If the target is not supported.
    TypeError: If the input contains something other than statement nodes.
"""

from typing import Protocol

from lox import lox_ast as ast
from lox.emitters.lox_emitter import LoxEmitter
from lox.emitters.sexpr_emitter import SExprEmitter


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all Lox emitters."""

    def _visit(self, node: ast.Stmt) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EMITTERS: dict[str, type[Emitter]] = {
    "lox": LoxEmitter,
    "source": LoxEmitter,
    "sexpr": SExprEmitter,
    "ast": SExprEmitter,
}


class Transpiler:
    """Dispatches Lox statements to the emitter for a target.

    Attributes:
        emitter (Emitter): The emitter instance for the chosen target.
    """

    def __init__(self, target: str = "lox") -> None:
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown transpilation target: {target!r}")
        self.target = target
        self.emitter: Emitter = EMITTERS[target]()

    def transpile(self, statements: list[ast.Stmt]) -> str:
        if not all(isinstance(node, ast.Stmt) for node in statements):
            raise TypeError("All items must be Stmt nodes.")
        for node in statements:
            self.emitter._visit(node)
        return self.emitter.get_output()


__all__ = ["EMITTERS", "Emitter", "Transpiler"]
