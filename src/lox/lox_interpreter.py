"""
Tree-walking evaluator for resolved Lox programs.

The `Interpreter` executes statements against a chain of `Environment`s.
Its only mutable control state is `environment`, the current scope, which is
saved and restored around every block and call.

Key behaviors:
    - `+` adds two numbers or concatenates two strings; every other arithmetic
      and comparison operator requires numbers.
    - `==`/`!=` never fail: nil equals only nil, values of different types are unequal.
    - nil and false are falsy; everything else (0, "") is truthy.
    - Variables the resolver located are read and written at their exact
      scope distance; the rest go straight to the global scope.
    - `return` travels back to the call boundary as a `ReturnSignal` result,
      threaded through block, if and while execution.

Usage:
    >>> interp = Interpreter()
    >>> Resolver(interp).resolve(statements)
    >>> interp.interpret(statements)
"""

from __future__ import annotations

import logging
import math
import sys
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any, TextIO

from lox import lox_ast as ast
from lox.lox_constants import TokenType
from lox.lox_environment import Environment
from lox.lox_errors import ErrorReporter, LoxRuntimeError
from lox.lox_lexer import Token
from lox.lox_runtime import (
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    NativeFunction,
    ReturnSignal,
)

logger = logging.getLogger(__name__)

T = TokenType

# Each Lox call costs a handful of Python frames.
RECURSION_LIMIT = 10_000


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # Python treats True == 1.0; Lox does not.
    if type(a) is not type(b):
        return False
    return bool(a == b)


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def stringify(value: Any) -> str:
    """Convert a runtime value to the text `print` writes."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def divide(left: float, right: float) -> float:
    """IEEE division: x/0 is ±Infinity, 0/0 is NaN."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def check_number_operand(operator: Token, operand: Any) -> float:
    if isinstance(operand, float):
        return operand
    raise LoxRuntimeError(operator, "Operand must be a number.")


def check_number_operands(operator: Token, left: Any, right: Any) -> tuple[float, float]:
    if isinstance(left, float) and isinstance(right, float):
        return left, right
    raise LoxRuntimeError(operator, "Operands must be numbers.")


_ARITHMETIC: dict[TokenType, Callable[[float, float], Any]] = {
    T.MINUS: lambda a, b: a - b,
    T.STAR: lambda a, b: a * b,
    T.SLASH: divide,
    T.GREATER: lambda a, b: a > b,
    T.GREATER_EQUAL: lambda a, b: a >= b,
    T.LESS: lambda a, b: a < b,
    T.LESS_EQUAL: lambda a, b: a <= b,
}


class Interpreter:
    """Evaluates Lox statements.

    Args:
        reporter (ErrorReporter | None): Receives runtime errors.
        out (TextIO | None): Destination for `print`; `sys.stdout` when None.

    Attributes:
        globals (Environment): The root scope, pre-seeded with native functions.
        environment (Environment): The scope currently executing.
        locals (dict[int, int]): `node_id` -> scope distance, filled by the resolver.
    """

    def __init__(self, reporter: ErrorReporter | None = None, out: TextIO | None = None) -> None:
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.out = out
        self.globals = Environment()
        self.environment = self.globals
        self.locals: dict[int, int] = {}
        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        self.define_native("clock", 0, time.time)

    def define_native(self, name: str, arity: int, fn: Callable[..., Any]) -> NativeFunction:
        """Register a host function in the global scope."""
        native = NativeFunction(name, arity, fn)
        self.globals.define(name, native)
        return native

    def resolve(self, expr: ast.Expr, depth: int) -> None:
        self.locals[expr.node_id] = depth

    def interpret(self, statements: list[ast.Stmt]) -> bool:
        """Run a compilation unit. Returns False if a runtime error aborted it."""
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            logger.debug("runtime error at line %s: %s", error.token.line, error.message)
            self.reporter.runtime_error(error)
            return False
        return True

    # ------------
    #  Statements
    # ------------

    def execute(self, stmt: ast.Stmt) -> ReturnSignal | None:
        match stmt:
            case ast.Expression(expression=expression):
                self.evaluate(expression)
            case ast.Print(expression=expression):
                value = self.evaluate(expression)
                print(stringify(value), file=self.out if self.out is not None else sys.stdout)
            case ast.Var(name=name, initializer=initializer):
                value = None
                if initializer is not None:
                    value = self.evaluate(initializer)
                self.environment.define(name.lexeme, value)
            case ast.Block(statements=statements):
                return self.execute_block(statements, Environment(self.environment))
            case ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                if else_branch is not None:
                    return self.execute(else_branch)
            case ast.While(condition=condition, body=body):
                while is_truthy(self.evaluate(condition)):
                    result = self.execute(body)
                    if result is not None:
                        return result
            case ast.Function(name=name):
                self.environment.define(name.lexeme, LoxFunction(stmt, self.environment))
            case ast.Return(value=value):
                return ReturnSignal(None if value is None else self.evaluate(value))
            case ast.Class():
                self.execute_class(stmt)
            case _:
                raise TypeError(f"Unknown statement node: {stmt!r}")
        return None

    def execute_block(
        self, statements: list[ast.Stmt], environment: Environment
    ) -> ReturnSignal | None:
        """Run `statements` in `environment`, restoring the previous scope on every exit."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                result = self.execute(statement)
                if result is not None:
                    return result
            return None
        finally:
            self.environment = previous

    def execute_class(self, stmt: ast.Class) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        method_env = self.environment
        if superclass is not None:
            method_env = Environment(self.environment)
            method_env.define("super", superclass)

        methods = {
            method.name.lexeme: LoxFunction(method, method_env, method.name.lexeme == "init")
            for method in stmt.methods
        }
        klass = LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    # -------------
    #  Expressions
    # -------------

    def evaluate(self, expr: ast.Expr) -> Any:
        match expr:
            case ast.Literal(value=value):
                return value
            case ast.Grouping(expression=inner):
                return self.evaluate(inner)
            case ast.Unary():
                return self.evaluate_unary(expr)
            case ast.Binary():
                return self.evaluate_binary(expr)
            case ast.Logical(left=left, operator=operator, right=right):
                value = self.evaluate(left)
                if operator.type == T.OR:
                    if is_truthy(value):
                        return value
                elif not is_truthy(value):
                    return value
                return self.evaluate(right)
            case ast.Variable(name=name):
                return self.look_up_variable(name, expr)
            case ast.Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr.node_id)
                if distance is not None:
                    self.environment.assign_at(distance, name, value)
                else:
                    self.globals.assign(name, value)
                return value
            case ast.Call():
                return self.evaluate_call(expr)
            case ast.Get(object=obj, name=name):
                target = self.evaluate(obj)
                if isinstance(target, LoxInstance):
                    return target.get(name)
                raise LoxRuntimeError(name, "Only instances have properties.")
            case ast.Set(object=obj, name=name, value=value_expr):
                target = self.evaluate(obj)
                if not isinstance(target, LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have fields.")
                value = self.evaluate(value_expr)
                target.set(name, value)
                return value
            case ast.This(keyword=keyword):
                return self.look_up_variable(keyword, expr)
            case ast.Super():
                return self.evaluate_super(expr)
            case _:
                raise TypeError(f"Unknown expression node: {expr!r}")

    def evaluate_unary(self, expr: ast.Unary) -> Any:
        right = self.evaluate(expr.right)
        if expr.operator.type == T.BANG:
            return not is_truthy(right)
        return -check_number_operand(expr.operator, right)

    def evaluate_binary(self, expr: ast.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        match operator.type:
            case T.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")
            case T.EQUAL_EQUAL:
                return is_equal(left, right)
            case T.BANG_EQUAL:
                return not is_equal(left, right)
            case _:
                a, b = check_number_operands(operator, left, right)
                return _ARITHMETIC[operator.type](a, b)

    def evaluate_call(self, expr: ast.Call) -> Any:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def evaluate_super(self, expr: ast.Super) -> Any:
        distance = self.locals[expr.node_id]
        superclass: LoxClass = self.environment.get_at(distance, "super")
        # `this` lives in the scope just inside the one holding `super`.
        instance: LoxInstance = self.environment.get_at(distance - 1, "this")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(instance)

    def look_up_variable(self, name: Token, expr: ast.Expr) -> Any:
        distance = self.locals.get(expr.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)


__all__ = [
    "Interpreter",
    "divide",
    "format_number",
    "is_equal",
    "is_truthy",
    "stringify",
]
