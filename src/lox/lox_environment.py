"""
Lexical environments for the Lox interpreter.

An `Environment` maps names to values and links to at most one enclosing
environment. Chains are shared, never copied: a closure keeps a reference to
the environment it was defined in, so that environment outlives the call
that created it for as long as the closure does.
"""

from __future__ import annotations

from typing import Any

from lox.lox_errors import LoxRuntimeError
from lox.lox_lexer import Token


class Environment:
    """One scope in the chain.

    Attributes:
        values (dict[str, Any]): Bindings owned by this scope.
        enclosing (Environment | None): Parent scope; None for the global scope.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.values: dict[str, Any] = {}
        self.enclosing = enclosing

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(depth={depth}, names={sorted(self.values)})"

    def define(self, name: str, value: Any) -> None:
        """Bind `name` in this scope, replacing any existing binding here."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look `name` up through the chain, innermost first."""
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any) -> None:
        """Rebind an existing `name` in the nearest scope that has it.

        Never creates a binding.
        """
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise RuntimeError(f"No scope at distance {distance} from {env!r}.")
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        self.ancestor(distance).values[name.lexeme] = value


__all__ = ["Environment"]
