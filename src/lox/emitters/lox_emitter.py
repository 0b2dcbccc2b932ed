"""
Renders Lox ASTs back into Lox source code.

This module defines the `LoxEmitter` class, which turns a parsed statement list
into canonical, indented Lox source. Scanning and parsing the output again
yields an equivalent program, so the emitter doubles as a formatter and as a
serializer for ASTs.

Behavior:
    - Emits one statement per line with four-space indentation inside blocks.
    - Grouping nodes become parentheses; no other parentheses are added, since
      parsed trees already carry every grouping they need.
    - Desugared `for` loops come out as their `while` form.
    - Numbers are written in plain decimal (`1`, `2.5`, `1000000000000000000000`),
      never in exponent form, which Lox cannot scan.

Raises:
    - `NotImplementedError`: If a node kind has no emitter.
"""

from typing import Any

from lox import lox_ast as ast
from lox.lox_interpreter import format_number


def format_literal(value: Any) -> str:
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return format_number(value)
    return f'"{value}"'


class LoxEmitter:
    """Emits Lox source from Lox AST nodes.

    Attributes:
        lines (list[str]): Accumulated lines of emitted source.
        indent (int): Current indentation level.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent = 0

    def indent_str(self) -> str:
        return "    " * self.indent

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def _line(self, text: str) -> None:
        self.lines.append(f"{self.indent_str()}{text}")

    def _visit(self, node: ast.Stmt) -> None:
        meth = getattr(self, f"emit_{node.kind}", None)
        if meth is None:
            raise NotImplementedError(f"LoxEmitter: no emitter for {node.kind}")
        meth(node)

    # -------------
    #  Expressions
    # -------------

    def emit_expr(self, node: ast.Expr) -> str:
        method = getattr(self, f"emit_expr_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No expression emitter for kind '{node.kind}'")
        return str(method(node))

    def emit_expr_literal(self, node: ast.Literal) -> str:
        return format_literal(node.value)

    def emit_expr_grouping(self, node: ast.Grouping) -> str:
        return f"({self.emit_expr(node.expression)})"

    def emit_expr_unary(self, node: ast.Unary) -> str:
        return f"{node.operator.lexeme}{self.emit_expr(node.right)}"

    def emit_expr_binary(self, node: ast.Binary) -> str:
        left = self.emit_expr(node.left)
        right = self.emit_expr(node.right)
        return f"{left} {node.operator.lexeme} {right}"

    emit_expr_logical = emit_expr_binary

    def emit_expr_variable(self, node: ast.Variable) -> str:
        return node.name.lexeme

    def emit_expr_assign(self, node: ast.Assign) -> str:
        return f"{node.name.lexeme} = {self.emit_expr(node.value)}"

    def emit_expr_call(self, node: ast.Call) -> str:
        args = ", ".join(self.emit_expr(a) for a in node.arguments)
        return f"{self.emit_expr(node.callee)}({args})"

    def emit_expr_get(self, node: ast.Get) -> str:
        return f"{self.emit_expr(node.object)}.{node.name.lexeme}"

    def emit_expr_set(self, node: ast.Set) -> str:
        target = f"{self.emit_expr(node.object)}.{node.name.lexeme}"
        return f"{target} = {self.emit_expr(node.value)}"

    def emit_expr_this(self, node: ast.This) -> str:
        return "this"

    def emit_expr_super(self, node: ast.Super) -> str:
        return f"super.{node.method.lexeme}"

    # ------------
    #  Statements
    # ------------

    def emit_expression(self, node: ast.Expression) -> None:
        self._line(f"{self.emit_expr(node.expression)};")

    def emit_print(self, node: ast.Print) -> None:
        self._line(f"print {self.emit_expr(node.expression)};")

    def emit_var(self, node: ast.Var) -> None:
        if node.initializer is None:
            self._line(f"var {node.name.lexeme};")
        else:
            self._line(f"var {node.name.lexeme} = {self.emit_expr(node.initializer)};")

    def emit_return(self, node: ast.Return) -> None:
        if node.value is None:
            self._line("return;")
        else:
            self._line(f"return {self.emit_expr(node.value)};")

    def emit_block(self, node: ast.Block) -> None:
        self._line("{")
        self._emit_body(node.statements)
        self._line("}")

    def _emit_body(self, statements: list[ast.Stmt]) -> None:
        self.indent += 1
        for stmt in statements:
            self._visit(stmt)
        self.indent -= 1

    def _emit_branch(self, header: str, body: ast.Stmt) -> None:
        """Emit `header` followed by a braced block or an indented single statement."""
        if isinstance(body, ast.Block):
            self._line(f"{header} {{")
            self._emit_body(body.statements)
            self._line("}")
        else:
            self._line(header)
            self._emit_body([body])

    def emit_if(self, node: ast.If) -> None:
        self._emit_branch(f"if ({self.emit_expr(node.condition)})", node.then_branch)
        if node.else_branch is not None:
            self._emit_branch("else", node.else_branch)

    def emit_while(self, node: ast.While) -> None:
        self._emit_branch(f"while ({self.emit_expr(node.condition)})", node.body)

    def _emit_function(self, node: ast.Function, prefix: str) -> None:
        params = ", ".join(p.lexeme for p in node.params)
        self._line(f"{prefix}{node.name.lexeme}({params}) {{")
        self._emit_body(node.body)
        self._line("}")

    def emit_function(self, node: ast.Function) -> None:
        self._emit_function(node, "fun ")

    def emit_class(self, node: ast.Class) -> None:
        header = f"class {node.name.lexeme}"
        if node.superclass is not None:
            header += f" < {node.superclass.name.lexeme}"
        self._line(f"{header} {{")
        self.indent += 1
        for method in node.methods:
            self._emit_function(method, "")
        self.indent -= 1
        self._line("}")
