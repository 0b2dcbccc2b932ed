"""
Lexical analyzer for the Lox programming language.

This module converts raw source text into a flat token sequence:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single immutable token with type, lexeme, literal value and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and `//` line comments
    - Recognizes one- and two-character operators (`!`, `!=`, `=`, `==`, `<`, `<=`, `>`, `>=`)
    - Recognizes:
        * Identifiers and keywords (maximal munch: `orchid` is an identifier, not `or`)
        * Numbers with an optional fractional part (`1`, `1.5`; `1.` scans as `1` then `.`)
        * Strings delimited by `"`, which may span lines
    - Reports unterminated strings and unexpected characters, then keeps scanning

Example:
    >>> lexer = Lexer(CharacterStream("print 42;"))
    >>> [t.type for t in lexer.scan_tokens()]
    [PRINT, NUMBER, SEMICOLON, EOF]

Exports:
    - CharacterStream
    - Token
    - Lexer
    - scan
"""

from dataclasses import dataclass
from typing import Any

from lox.lox_constants import KEYWORDS, SINGLE_CHAR_TOKENS, TWO_CHAR_OPERATORS, TokenType
from lox.lox_errors import ErrorReporter


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            IndexError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise IndexError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def match(self, expected: str) -> bool:
        """Consumes the next character only if it equals `expected`."""
        if self.peek() != expected:
            return False
        self.next()
        return True

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


@dataclass(frozen=True)
class Token:
    """Represents a single lexical token in the Lox language.

    Attributes:
        type (TokenType): The lexical category.
        lexeme (str): The exact source text the token was scanned from.
        literal (Any): The runtime value for NUMBER (float) and STRING (str) tokens, else None.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    type: TokenType
    lexeme: str
    literal: Any = None
    line: int = 1
    col: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.lexeme!r})"

    def __str__(self) -> str:
        literal = "null" if self.literal is None else self.literal
        return f"{self.type} {self.lexeme} {literal}"


def is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_alpha_numeric(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)


class Lexer:
    """Lexical analyzer for the Lox language.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects.
    Problems are reported to the `ErrorReporter`; scanning never stops early.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        reporter (ErrorReporter): Receives lexical errors.
    """

    def __init__(
        self, stream: CharacterStream, reporter: ErrorReporter | None = None
    ) -> None:
        self.stream = stream
        self.reporter = reporter if reporter is not None else ErrorReporter()

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and `//` comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "/" and self.peek(1) == "/":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances through the stream until the end of a comment line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def scan_tokens(self) -> list[Token]:
        """Scans the whole stream. The result always ends with exactly one EOF token."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TokenType.EOF:
                return tokens

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Unrecognized characters and unterminated strings are reported and
        skipped, so this always makes progress and eventually yields EOF.
        """
        while True:
            self.skip_whitespace()
            if self.stream.end_of_file():
                return Token(TokenType.EOF, "", None, self.stream.line, self.stream.column)
            tok = self.scan_token()
            if tok is not None:
                return tok

    def scan_token(self) -> Token | None:
        line, col = self.stream.line, self.stream.column
        ch = self.advance()

        # 1. Identifier or keyword
        if is_alpha(ch):
            ident = ch
            while is_alpha_numeric(self.peek()):
                ident += self.advance()
            return Token(KEYWORDS.get(ident, TokenType.IDENTIFIER), ident, None, line, col)

        # 2. Number
        if is_digit(ch):
            num = ch
            while is_digit(self.peek()):
                num += self.advance()
            if self.peek() == "." and is_digit(self.peek(1)):
                num += self.advance()
                while is_digit(self.peek()):
                    num += self.advance()
            return Token(TokenType.NUMBER, num, float(num), line, col)

        # 3. String
        if ch == '"':
            start = self.stream.position
            while not self.stream.end_of_file() and self.peek() != '"':
                self.advance()
            val = self.stream.source[start : self.stream.position]
            if self.stream.end_of_file():
                self.reporter.error(self.stream.line, "Unterminated string.")
                return None
            self.advance()
            return Token(TokenType.STRING, f'"{val}"', val, line, col)

        # 4. Operators and punctuation
        if ch in TWO_CHAR_OPERATORS:
            single, double = TWO_CHAR_OPERATORS[ch]
            if self.stream.match("="):
                return Token(double, ch + "=", None, line, col)
            return Token(single, ch, None, line, col)
        if ch == "/":
            return Token(TokenType.SLASH, ch, None, line, col)
        if ch in SINGLE_CHAR_TOKENS:
            return Token(SINGLE_CHAR_TOKENS[ch], ch, None, line, col)

        # 5. Unknown character
        self.reporter.error(line, "Unexpected character.")
        return None


def scan(source: str, reporter: ErrorReporter | None = None) -> list[Token]:
    """Scans a whole compilation unit into tokens terminated by one EOF token."""
    return Lexer(CharacterStream(source), reporter).scan_tokens()


__all__ = ["CharacterStream", "Lexer", "Token", "scan"]
