"""
Renders Lox ASTs as parenthesized prefix expressions for debugging.

    1 + 2 * (3 - x)   →   (+ 1 (* 2 (group (- 3 x))))
    print a.b(c);     →   (print (call (. a b) c))

Each top-level statement becomes one line of output.
"""

from lox import lox_ast as ast
from lox.emitters.lox_emitter import format_literal


class SExprEmitter:
    """Emits one s-expression per top-level statement.

    Attributes:
        lines (list[str]): Accumulated output lines.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def _visit(self, node: ast.Stmt) -> None:
        self.lines.append(self.emit_stmt(node))

    def parenthesize(self, name: str, *parts: str) -> str:
        return "(" + " ".join((name,) + parts) + ")"

    # -------------
    #  Expressions
    # -------------

    def emit_expr(self, node: ast.Expr) -> str:
        match node:
            case ast.Literal(value=value):
                return format_literal(value)
            case ast.Grouping(expression=inner):
                return self.parenthesize("group", self.emit_expr(inner))
            case ast.Unary(operator=op, right=right):
                return self.parenthesize(op.lexeme, self.emit_expr(right))
            case ast.Binary(left=left, operator=op, right=right) | ast.Logical(
                left=left, operator=op, right=right
            ):
                return self.parenthesize(op.lexeme, self.emit_expr(left), self.emit_expr(right))
            case ast.Variable(name=name):
                return name.lexeme
            case ast.Assign(name=name, value=value):
                return self.parenthesize("=", name.lexeme, self.emit_expr(value))
            case ast.Call(callee=callee, arguments=arguments):
                return self.parenthesize(
                    "call", self.emit_expr(callee), *(self.emit_expr(a) for a in arguments)
                )
            case ast.Get(object=obj, name=name):
                return self.parenthesize(".", self.emit_expr(obj), name.lexeme)
            case ast.Set(object=obj, name=name, value=value):
                return self.parenthesize(
                    "=", self.parenthesize(".", self.emit_expr(obj), name.lexeme),
                    self.emit_expr(value),
                )
            case ast.This():
                return "this"
            case ast.Super(method=method):
                return self.parenthesize("super", method.lexeme)
        raise NotImplementedError(f"No expression emitter for kind '{node.kind}'")

    # ------------
    #  Statements
    # ------------

    def emit_stmt(self, node: ast.Stmt) -> str:
        match node:
            case ast.Expression(expression=expr):
                return self.parenthesize(";", self.emit_expr(expr))
            case ast.Print(expression=expr):
                return self.parenthesize("print", self.emit_expr(expr))
            case ast.Var(name=name, initializer=None):
                return self.parenthesize("var", name.lexeme)
            case ast.Var(name=name, initializer=init):
                return self.parenthesize("var", name.lexeme, self.emit_expr(init))
            case ast.Return(value=None):
                return "(return)"
            case ast.Return(value=value):
                return self.parenthesize("return", self.emit_expr(value))
            case ast.Block(statements=statements):
                return self.parenthesize("block", *(self.emit_stmt(s) for s in statements))
            case ast.If(condition=cond, then_branch=then, else_branch=None):
                return self.parenthesize("if", self.emit_expr(cond), self.emit_stmt(then))
            case ast.If(condition=cond, then_branch=then, else_branch=other):
                return self.parenthesize(
                    "if-else", self.emit_expr(cond), self.emit_stmt(then), self.emit_stmt(other)
                )
            case ast.While(condition=cond, body=body):
                return self.parenthesize("while", self.emit_expr(cond), self.emit_stmt(body))
            case ast.Function():
                return self.emit_function(node)
            case ast.Class(name=name, superclass=superclass, methods=methods):
                head = [name.lexeme]
                if superclass is not None:
                    head += ["<", superclass.name.lexeme]
                return self.parenthesize(
                    "class", *head, *(self.emit_function(m) for m in methods)
                )
        raise NotImplementedError(f"SExprEmitter: no emitter for {node.kind}")

    def emit_function(self, node: ast.Function) -> str:
        params = "(" + " ".join(p.lexeme for p in node.params) + ")"
        return self.parenthesize(
            "fun", node.name.lexeme + params, *(self.emit_stmt(s) for s in node.body)
        )
