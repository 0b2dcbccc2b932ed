"""
Lox Language Parser

Parses Lox source tokens into a list of statement nodes.

This module implements a recursive-descent parser over the flat token list
produced by `lox.lox_lexer`. Expression precedence, lowest to highest:

    assignment → or → and → equality → comparison → term → factor → unary → call → primary

Supported Constructs
--------------------
- Declarations: `class Name < Super { method() {...} }`, `fun name(a, b) {...}`, `var x = e;`
- Statements: `print`, `return`, `if`/`else`, `while`, `for`, `{ ... }` blocks, expression statements
- Expressions: assignment (right-associative, rewritten from variable/property targets),
  `or`/`and`, comparison and arithmetic operators, unary `!`/`-`, call and `.name` chains,
  `this`, `super.method`, literals and grouping

`for` loops are desugared here into `while` loops wrapped in blocks; no `for`
node exists.

Parser Behavior
---------------
- Errors are reported through the `ErrorReporter`, never raised to the caller.
- After a syntax error the parser discards tokens up to the next statement
  boundary and resumes, so every syntax error in a unit is surfaced in one pass.
- Exceeding 255 parameters or arguments is reported but does not abort parsing.

Entry Points
------------
- `parse()`: Parse a full program into a list of statements.
- `parse_expr_entrypoint()`: Parse a lone expression filling the whole input (REPL mode).
"""

from __future__ import annotations

from lox import lox_ast as ast
from lox.lox_constants import MAX_ARGUMENTS, STATEMENT_START, TokenType
from lox.lox_errors import ErrorReporter, ParseError
from lox.lox_lexer import Token

T = TokenType


class Parser:
    """
    Lox Parser Class

    Attributes
    ----------
    tokens : list[Token]
        The input token stream, terminated by an EOF token.
    position : int
        Current index into the token stream.
    reporter : ErrorReporter
        Receives every syntax error.
    """

    def __init__(self, tokens: list[Token], reporter: ErrorReporter | None = None) -> None:
        if not tokens or tokens[-1].type != T.EOF:
            last_line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token(T.EOF, "", None, last_line)]
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.reporter = reporter if reporter is not None else ErrorReporter()

    # ---------------
    #  Token helpers
    # ---------------

    def current(self) -> Token:
        return self.tokens[self.position]

    def previous(self) -> Token:
        return self.tokens[self.position - 1]

    def is_at_end(self) -> bool:
        return self.current().type == T.EOF

    def advance(self) -> Token:
        if not self.is_at_end():
            self.position += 1
        return self.previous()

    def check(self, type_: TokenType) -> bool:
        return not self.is_at_end() and self.current().type == type_

    def match(self, *types: TokenType) -> Token | None:
        for type_ in types:
            if self.check(type_):
                return self.advance()
        return None

    def consume(self, type_: TokenType, message: str) -> Token:
        if self.check(type_):
            return self.advance()
        raise self.error(self.current(), message)

    def error(self, token: Token, message: str) -> ParseError:
        """Reports a syntax error and returns (not raises) the exception to unwind with."""
        self.reporter.token_error(token, message)
        return ParseError(message, token.line)

    def synchronize(self) -> None:
        """Discard tokens until a statement boundary."""
        self.advance()
        while not self.is_at_end():
            if self.previous().type == T.SEMICOLON:
                return
            if self.current().type in STATEMENT_START:
                return
            self.advance()

    # --------------
    #  Entry points
    # --------------

    def parse(self) -> list[ast.Stmt]:
        """Parse a full Lox program and return its top-level statements.

        Declarations that failed to parse are dropped from the result; the
        reporter's `had_error` tells the caller whether that happened.
        """
        statements: list[ast.Stmt] = []
        while not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expr_entrypoint(self) -> ast.Expr | None:
        """Parse input that is exactly one expression, as typed at the REPL.

        Returns None (after reporting) when the input is not a lone expression.
        """
        try:
            expr = self.parse_expression()
            if not self.is_at_end():
                raise self.error(self.current(), "Expect end of expression.")
            return expr
        except ParseError:
            return None

    # --------------
    #  Declarations
    # --------------

    def parse_declaration(self) -> ast.Stmt | None:
        try:
            if self.match(T.CLASS):
                return self.parse_class()
            if self.match(T.FUN):
                return self.parse_function("function")
            if self.match(T.VAR):
                return self.parse_var()
            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_class(self) -> ast.Class:
        """Parse `class Name (< Super)? { method* }` after the `class` keyword."""
        name = self.consume(T.IDENTIFIER, "Expect class name.")
        superclass = None
        if self.match(T.LESS):
            super_name = self.consume(T.IDENTIFIER, "Expect superclass name.")
            superclass = ast.Variable(super_name, line=super_name.line)
        self.consume(T.LEFT_BRACE, "Expect '{' before class body.")
        methods: list[ast.Function] = []
        while not self.check(T.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.parse_function("method"))
        self.consume(T.RIGHT_BRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, methods, line=name.line)

    def parse_function(self, kind: str) -> ast.Function:
        """Parse a function or method declaration.

        `kind` ("function" or "method") only changes the wording of error messages.
        """
        name = self.consume(T.IDENTIFIER, f"Expect {kind} name.")
        self.consume(T.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.current(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(T.IDENTIFIER, "Expect parameter name."))
                if not self.match(T.COMMA):
                    break
        self.consume(T.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(T.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self.parse_block()
        return ast.Function(name, params, body, line=name.line)

    def parse_var(self) -> ast.Var:
        name = self.consume(T.IDENTIFIER, "Expect variable name.")
        initializer = None
        if self.match(T.EQUAL):
            initializer = self.parse_expression()
        self.consume(T.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer, line=name.line)

    # ------------
    #  Statements
    # ------------

    def parse_statement(self) -> ast.Stmt:
        if self.match(T.FOR):
            return self.parse_for()
        if self.match(T.IF):
            return self.parse_if()
        if self.match(T.PRINT):
            return self.parse_print()
        if self.match(T.RETURN):
            return self.parse_return()
        if self.match(T.WHILE):
            return self.parse_while()
        if brace := self.match(T.LEFT_BRACE):
            return ast.Block(self.parse_block(), line=brace.line)
        return self.parse_expression_statement()

    def parse_for(self) -> ast.Stmt:
        """Parse a `for` loop and desugar it into `{ init; while (cond) { body; incr; } }`."""
        keyword = self.previous()
        self.consume(T.LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: ast.Stmt | None
        if self.match(T.SEMICOLON):
            initializer = None
        elif self.match(T.VAR):
            initializer = self.parse_var()
        else:
            initializer = self.parse_expression_statement()

        condition = None
        if not self.check(T.SEMICOLON):
            condition = self.parse_expression()
        self.consume(T.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(T.RIGHT_PAREN):
            increment = self.parse_expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.parse_statement()
        line = keyword.line
        if increment is not None:
            body = ast.Block(
                [body, ast.Expression(increment, line=increment.line)], line=line
            )
        if condition is None:
            condition = ast.Literal(True, line=line)
        body = ast.While(condition, body, line=line)
        if initializer is not None:
            body = ast.Block([initializer, body], line=line)
        return body

    def parse_if(self) -> ast.If:
        keyword = self.previous()
        self.consume(T.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch = None
        if self.match(T.ELSE):
            else_branch = self.parse_statement()
        return ast.If(condition, then_branch, else_branch, line=keyword.line)

    def parse_print(self) -> ast.Print:
        keyword = self.previous()
        value = self.parse_expression()
        self.consume(T.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value, line=keyword.line)

    def parse_return(self) -> ast.Return:
        keyword = self.previous()
        value = None
        if not self.check(T.SEMICOLON):
            value = self.parse_expression()
        self.consume(T.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value, line=keyword.line)

    def parse_while(self) -> ast.While:
        keyword = self.previous()
        self.consume(T.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expression()
        self.consume(T.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.parse_statement()
        return ast.While(condition, body, line=keyword.line)

    def parse_block(self) -> list[ast.Stmt]:
        """Parse declarations up to the closing `}` (the `{` is already consumed)."""
        statements: list[ast.Stmt] = []
        while not self.check(T.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(T.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_expression_statement(self) -> ast.Expression:
        expr = self.parse_expression()
        self.consume(T.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr, line=expr.line)

    # -------------
    #  Expressions
    # -------------

    def parse_expression(self) -> ast.Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> ast.Expr:
        expr = self.parse_or()
        if equals := self.match(T.EQUAL):
            value = self.parse_assignment()
            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value, line=expr.line)
            if isinstance(expr, ast.Get):
                return ast.Set(expr.object, expr.name, value, line=expr.line)
            # Reported but not raised: the parser is not confused.
            self.error(equals, "Invalid assignment target.")
        return expr

    def parse_or(self) -> ast.Expr:
        expr = self.parse_and()
        while operator := self.match(T.OR):
            right = self.parse_and()
            expr = ast.Logical(expr, operator, right, line=operator.line)
        return expr

    def parse_and(self) -> ast.Expr:
        expr = self.parse_equality()
        while operator := self.match(T.AND):
            right = self.parse_equality()
            expr = ast.Logical(expr, operator, right, line=operator.line)
        return expr

    def _parse_binary(self, operand: str, *operators: TokenType) -> ast.Expr:
        next_level = getattr(self, operand)
        expr: ast.Expr = next_level()
        while operator := self.match(*operators):
            right = next_level()
            expr = ast.Binary(expr, operator, right, line=operator.line)
        return expr

    def parse_equality(self) -> ast.Expr:
        return self._parse_binary("parse_comparison", T.BANG_EQUAL, T.EQUAL_EQUAL)

    def parse_comparison(self) -> ast.Expr:
        return self._parse_binary(
            "parse_term", T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL
        )

    def parse_term(self) -> ast.Expr:
        return self._parse_binary("parse_factor", T.MINUS, T.PLUS)

    def parse_factor(self) -> ast.Expr:
        return self._parse_binary("parse_unary", T.SLASH, T.STAR)

    def parse_unary(self) -> ast.Expr:
        if operator := self.match(T.BANG, T.MINUS):
            right = self.parse_unary()
            return ast.Unary(operator, right, line=operator.line)
        return self.parse_call()

    def parse_call(self) -> ast.Expr:
        """Parse a primary followed by any chain of `(args)` and `.name` suffixes."""
        expr = self.parse_primary()
        while True:
            if self.match(T.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(T.DOT):
                name = self.consume(T.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name, line=name.line)
            else:
                return expr

    def finish_call(self, callee: ast.Expr) -> ast.Call:
        arguments: list[ast.Expr] = []
        if not self.check(T.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.current(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.parse_expression())
                if not self.match(T.COMMA):
                    break
        paren = self.consume(T.RIGHT_PAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, arguments, line=paren.line)

    def parse_primary(self) -> ast.Expr:
        tok = self.current()
        if self.match(T.FALSE):
            return ast.Literal(False, line=tok.line)
        if self.match(T.TRUE):
            return ast.Literal(True, line=tok.line)
        if self.match(T.NIL):
            return ast.Literal(None, line=tok.line)
        if self.match(T.NUMBER, T.STRING):
            return ast.Literal(tok.literal, line=tok.line)
        if self.match(T.SUPER):
            self.consume(T.DOT, "Expect '.' after 'super'.")
            method = self.consume(T.IDENTIFIER, "Expect superclass method name.")
            return ast.Super(tok, method, line=tok.line)
        if self.match(T.THIS):
            return ast.This(tok, line=tok.line)
        if self.match(T.IDENTIFIER):
            return ast.Variable(tok, line=tok.line)
        if self.match(T.LEFT_PAREN):
            expr = self.parse_expression()
            self.consume(T.RIGHT_PAREN, "Expect ')' after expression.")
            return ast.Grouping(expr, line=tok.line)
        raise self.error(tok, "Expect expression.")


def parse(tokens: list[Token], reporter: ErrorReporter | None = None) -> list[ast.Stmt]:
    return Parser(tokens, reporter).parse()


__all__ = ["Parser", "parse"]
