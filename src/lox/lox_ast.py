"""
Defines the abstract syntax tree (AST) node set for the Lox programming language.

The node set is closed: twelve expression variants and nine statement variants,
one per grammar production. Passes (resolver, interpreter, emitters) dispatch
on the variant, either with `match` or on the `kind` tag.

Classes:
    ASTNode: Common base. Every node has a `kind` tag, a source `line` and a
        `node_id` that is unique for the lifetime of the process. The resolver
        keys its scope-distance table on `node_id`, so two structurally equal
        references at different positions stay distinct.
    Expr: Base for expression variants.
    Stmt: Base for statement variants.

Each node can be serialized with `to_dict()`, suitable for JSON output or debugging:

    {"kind": "binary", "line": 1, "left": {...}, "operator": "+", "right": {...}}

`line` and `node_id` never take part in equality, so hand-built nodes compare
equal to parsed ones.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from lox.lox_lexer import Token

ASTDict = dict[str, Any]

_node_ids = itertools.count(1)


def _next_node_id() -> int:
    return next(_node_ids)


@dataclass
class ASTNode:
    kind: ClassVar[str] = "node"

    line: int = field(default=0, kw_only=True, compare=False)
    node_id: int = field(
        default_factory=_next_node_id, kw_only=True, compare=False, repr=False
    )

    def to_dict(self) -> ASTDict:
        out: ASTDict = {"kind": self.kind, "line": self.line}
        for f in fields(self):
            if f.name in ("line", "node_id"):
                continue
            out[f.name] = _serialize(getattr(self, f.name))
        return out


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, Token):
        return value.lexeme
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


# -------------
#  Expressions
# -------------


@dataclass
class Expr(ASTNode):
    pass


@dataclass
class Assign(Expr):
    kind: ClassVar[str] = "assign"
    name: Token
    value: Expr


@dataclass
class Binary(Expr):
    kind: ClassVar[str] = "binary"
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Call(Expr):
    kind: ClassVar[str] = "call"
    callee: Expr
    paren: Token
    arguments: list[Expr]


@dataclass
class Get(Expr):
    kind: ClassVar[str] = "get"
    object: Expr
    name: Token


@dataclass
class Grouping(Expr):
    kind: ClassVar[str] = "grouping"
    expression: Expr


@dataclass
class Literal(Expr):
    kind: ClassVar[str] = "literal"
    value: Any


@dataclass
class Logical(Expr):
    kind: ClassVar[str] = "logical"
    left: Expr
    operator: Token
    right: Expr


@dataclass
class Set(Expr):
    kind: ClassVar[str] = "set"
    object: Expr
    name: Token
    value: Expr


@dataclass
class Super(Expr):
    kind: ClassVar[str] = "super"
    keyword: Token
    method: Token


@dataclass
class This(Expr):
    kind: ClassVar[str] = "this"
    keyword: Token


@dataclass
class Unary(Expr):
    kind: ClassVar[str] = "unary"
    operator: Token
    right: Expr


@dataclass
class Variable(Expr):
    kind: ClassVar[str] = "variable"
    name: Token


# ------------
#  Statements
# ------------


@dataclass
class Stmt(ASTNode):
    pass


@dataclass
class Block(Stmt):
    kind: ClassVar[str] = "block"
    statements: list[Stmt]


@dataclass
class Function(Stmt):
    kind: ClassVar[str] = "function"
    name: Token
    params: list[Token]
    body: list[Stmt]


@dataclass
class Class(Stmt):
    kind: ClassVar[str] = "class"
    name: Token
    superclass: Variable | None
    methods: list[Function]


@dataclass
class Expression(Stmt):
    kind: ClassVar[str] = "expression"
    expression: Expr


@dataclass
class If(Stmt):
    kind: ClassVar[str] = "if"
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass
class Print(Stmt):
    kind: ClassVar[str] = "print"
    expression: Expr


@dataclass
class Return(Stmt):
    kind: ClassVar[str] = "return"
    keyword: Token
    value: Expr | None


@dataclass
class Var(Stmt):
    kind: ClassVar[str] = "var"
    name: Token
    initializer: Expr | None


@dataclass
class While(Stmt):
    kind: ClassVar[str] = "while"
    condition: Expr
    body: Stmt


__all__ = [
    "ASTDict",
    "ASTNode",
    "Assign",
    "Binary",
    "Block",
    "Call",
    "Class",
    "Expr",
    "Expression",
    "Function",
    "Get",
    "Grouping",
    "If",
    "Literal",
    "Logical",
    "Print",
    "Return",
    "Set",
    "Stmt",
    "Super",
    "This",
    "Unary",
    "Var",
    "Variable",
    "While",
]
