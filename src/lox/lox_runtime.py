"""
Runtime object model for Lox.

Classes:
    LoxCallable: The callable contract (`arity()` and `call()`), satisfied by
        native functions, user functions and classes. Host code can register
        any object that implements it.
    NativeFunction: Wraps a Python callable as a Lox function.
    LoxFunction: A user-defined function or method together with its closure.
    LoxClass: A class with a method table and an optional superclass.
    LoxInstance: An object with a class and its own field table.
    ReturnSignal: The result a `return` statement hands back to the nearest
        call boundary. It is a value, not an exception.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from lox import lox_ast as ast
from lox.lox_environment import Environment
from lox.lox_errors import LoxRuntimeError
from lox.lox_lexer import Token

if TYPE_CHECKING:
    from lox.lox_interpreter import Interpreter


@runtime_checkable
class LoxCallable(Protocol):
    """Protocol for everything a Lox call expression can invoke."""

    def arity(self) -> int: ...  # pragma: no cover

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any: ...  # pragma: no cover


@dataclass(frozen=True)
class ReturnSignal:
    value: Any = None


class NativeFunction:
    """A host-provided function, e.g. `clock`.

    Args:
        name (str): Name it is bound to in the global scope.
        params (int): Number of arguments it expects.
        fn (Callable[..., Any]): Called with the Lox argument values.
    """

    def __init__(self, name: str, params: int, fn: Callable[..., Any]) -> None:
        self.name = name
        self.params = params
        self.fn = fn

    def arity(self) -> int:
        return self.params

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        return self.fn(*arguments)

    def __str__(self) -> str:
        return "<native fn>"

    def __repr__(self) -> str:
        return f"NativeFunction({self.name!r}, {self.params})"


class LoxFunction:
    """A function value: a declaration plus the environment it closes over.

    Attributes:
        declaration (ast.Function): Parameters and body.
        closure (Environment): Environment active where the function was defined.
        is_initializer (bool): True for a class's `init` method.
    """

    def __init__(
        self, declaration: ast.Function, closure: Environment, is_initializer: bool = False
    ) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def bind(self, instance: LoxInstance) -> LoxFunction:
        """Return a copy of this method whose `this` is `instance`.

        The original function value is left untouched.
        """
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        result = interpreter.execute_block(self.declaration.body, environment)

        # init always yields the instance, even after a bare `return;`.
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if result is not None:
            return result.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"LoxFunction({self.name!r}, arity={self.arity()})"


class LoxClass:
    """A class value. Calling it constructs a `LoxInstance`.

    Attributes:
        name (str): Class name.
        superclass (LoxClass | None): Parent class, if any.
        methods (dict[str, LoxFunction]): Methods declared directly on this class.
    """

    def __init__(
        self,
        name: str,
        superclass: LoxClass | None,
        methods: dict[str, LoxFunction],
    ) -> None:
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> LoxFunction | None:
        """Nearest definition wins, walking up the superclass chain."""
        klass: LoxClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: Interpreter, arguments: list[Any]) -> Any:
        instance = LoxInstance(self)
        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"LoxClass({self.name!r})"


class LoxInstance:
    """An instance: a class reference plus fields created on first assignment."""

    def __init__(self, klass: LoxClass) -> None:
        self.klass = klass
        self.fields: dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        """Fields shadow methods; methods are bound to this instance on the way out."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.klass.name} instance"

    def __repr__(self) -> str:
        return f"LoxInstance({self.klass.name!r}, fields={sorted(self.fields)})"


__all__ = [
    "LoxCallable",
    "LoxClass",
    "LoxFunction",
    "LoxInstance",
    "NativeFunction",
    "ReturnSignal",
]
