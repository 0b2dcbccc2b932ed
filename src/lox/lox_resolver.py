"""
Static scope resolution for Lox programs.

The resolver walks the parsed statements once, before execution, and records
for every local variable reference (variable read, assignment, `this`,
`super`) how many scopes lie between the use and the declaration. References
it cannot find in any enclosing scope are left unrecorded and treated as
globals at run time.

It also rejects programs that are well-formed but meaningless:

    - declaring the same name twice in one local scope
    - reading a local inside its own initializer (`var a = a;`)
    - `return` at top level, or `return <value>` inside `init`
    - `this` outside a class, `super` outside a subclass
    - a class inheriting from itself

Every problem is reported and resolution continues, so one pass surfaces them all.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Protocol

from lox import lox_ast as ast
from lox.lox_errors import ErrorReporter
from lox.lox_lexer import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class ResolutionSink(Protocol):
    """Anything that can receive scope distances (normally the Interpreter)."""

    def resolve(self, expr: ast.Expr, depth: int) -> None: ...  # pragma: no cover


class Resolver:
    """Computes scope distances and validates contextual keywords.

    Attributes:
        sink (ResolutionSink): Receives `(expr, depth)` for every local reference.
        reporter (ErrorReporter): Receives static errors.
        scopes (list[dict[str, bool]]): Innermost scope last. A name maps to
            False while declared but not yet initialized, True once defined.
    """

    def __init__(self, sink: ResolutionSink, reporter: ErrorReporter | None = None) -> None:
        self.sink = sink
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.scopes: list[dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, statements: list[ast.Stmt]) -> None:
        for statement in statements:
            self.resolve_stmt(statement)

    # ------------
    #  Statements
    # ------------

    def resolve_stmt(self, stmt: ast.Stmt) -> None:
        match stmt:
            case ast.Block(statements=statements):
                self.begin_scope()
                self.resolve(statements)
                self.end_scope()
            case ast.Class():
                self.resolve_class(stmt)
            case ast.Expression(expression=expression) | ast.Print(expression=expression):
                self.resolve_expr(expression)
            case ast.Function(name=name):
                self.declare(name)
                self.define(name)
                self.resolve_function(stmt, FunctionType.FUNCTION)
            case ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                self.resolve_expr(condition)
                self.resolve_stmt(then_branch)
                if else_branch is not None:
                    self.resolve_stmt(else_branch)
            case ast.Return(keyword=keyword, value=value):
                if self.current_function == FunctionType.NONE:
                    self.reporter.token_error(keyword, "Can't return from top-level code.")
                if value is not None:
                    if self.current_function == FunctionType.INITIALIZER:
                        self.reporter.token_error(
                            keyword, "Can't return a value from an initializer."
                        )
                    self.resolve_expr(value)
            case ast.Var(name=name, initializer=initializer):
                self.declare(name)
                if initializer is not None:
                    self.resolve_expr(initializer)
                self.define(name)
            case ast.While(condition=condition, body=body):
                self.resolve_expr(condition)
                self.resolve_stmt(body)
            case _:
                raise TypeError(f"Unknown statement node: {stmt!r}")

    def resolve_class(self, stmt: ast.Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        superclass = stmt.superclass
        if superclass is not None and stmt.name.lexeme == superclass.name.lexeme:
            self.reporter.token_error(superclass.name, "A class can't inherit from itself.")

        if superclass is not None:
            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(superclass)
            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            declaration = FunctionType.METHOD
            if method.name.lexeme == "init":
                declaration = FunctionType.INITIALIZER
            self.resolve_function(method, declaration)
        self.end_scope()

        if superclass is not None:
            self.end_scope()
        self.current_class = enclosing_class

    def resolve_function(self, function: ast.Function, type_: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = type_
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()
        self.current_function = enclosing_function

    # -------------
    #  Expressions
    # -------------

    def resolve_expr(self, expr: ast.Expr) -> None:
        match expr:
            case ast.Assign(name=name, value=value):
                self.resolve_expr(value)
                self.resolve_local(expr, name)
            case ast.Binary(left=left, right=right) | ast.Logical(left=left, right=right):
                self.resolve_expr(left)
                self.resolve_expr(right)
            case ast.Call(callee=callee, arguments=arguments):
                self.resolve_expr(callee)
                for argument in arguments:
                    self.resolve_expr(argument)
            case ast.Get(object=obj):
                self.resolve_expr(obj)
            case ast.Grouping(expression=inner):
                self.resolve_expr(inner)
            case ast.Literal():
                pass
            case ast.Set(object=obj, value=value):
                self.resolve_expr(value)
                self.resolve_expr(obj)
            case ast.Super(keyword=keyword):
                if self.current_class == ClassType.NONE:
                    self.reporter.token_error(keyword, "Can't use 'super' outside of a class.")
                elif self.current_class != ClassType.SUBCLASS:
                    self.reporter.token_error(
                        keyword, "Can't use 'super' in a class with no superclass."
                    )
                self.resolve_local(expr, keyword)
            case ast.This(keyword=keyword):
                if self.current_class == ClassType.NONE:
                    self.reporter.token_error(keyword, "Can't use 'this' outside of a class.")
                    return
                self.resolve_local(expr, keyword)
            case ast.Unary(right=right):
                self.resolve_expr(right)
            case ast.Variable(name=name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.reporter.token_error(
                        name, "Can't read local variable in its own initializer."
                    )
                self.resolve_local(expr, name)
            case _:
                raise TypeError(f"Unknown expression node: {expr!r}")

    # --------
    #  Scopes
    # --------

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.token_error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: ast.Expr, name: Token) -> None:
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.sink.resolve(expr, depth)
                return
        # Not found: assumed global.


def resolve(
    statements: list[ast.Stmt], sink: ResolutionSink, reporter: ErrorReporter | None = None
) -> None:
    Resolver(sink, reporter).resolve(statements)


__all__ = ["ClassType", "FunctionType", "ResolutionSink", "Resolver", "resolve"]
