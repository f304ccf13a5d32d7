"""
DSL Lexer
=========

Turns raw workflow DSL text into a token stream. Comments and newlines are
emitted as tokens so callers can inspect them; the parser discards them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from n8n_dsl.config.logging import get_logger
from n8n_dsl.core.errors import LexError
from n8n_dsl.models.schemas import Severity, ValidationIssue

logger = get_logger(__name__)


class TokenType(str, Enum):
    """Token kinds produced by the lexer."""
    # Literals
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    IDENTIFIER = "IDENTIFIER"

    # Keywords
    WORKFLOW = "WORKFLOW"
    PARAM = "PARAM"
    VAR = "VAR"
    NODE = "NODE"
    MODULE = "MODULE"
    CONNECT = "CONNECT"

    # Punctuation
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    COMMA = "COMMA"
    COLON = "COLON"
    SEMICOLON = "SEMICOLON"
    EQUALS = "EQUALS"
    ARROW = "ARROW"
    DOT = "DOT"

    # Logical operators
    OR = "OR"
    AND = "AND"

    # Special
    TEMPLATE_START = "TEMPLATE_START"
    NEWLINE = "NEWLINE"
    COMMENT = "COMMENT"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its 1-based source position."""
    type: TokenType
    value: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.type.value}({self.value!r}) at {self.line}:{self.column}"


KEYWORDS = {
    "workflow": TokenType.WORKFLOW,
    "param": TokenType.PARAM,
    "var": TokenType.VAR,
    "node": TokenType.NODE,
    "module": TokenType.MODULE,
    "connect": TokenType.CONNECT,
    "true": TokenType.BOOLEAN,
    "false": TokenType.BOOLEAN,
}

SINGLE_CHAR_TOKENS = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    "=": TokenType.EQUALS,
    ".": TokenType.DOT,
}

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "/": "/",
}

# Characters that show up in loosely quoted content; skipped with a warning.
SKIPPABLE_CHARS = {"*", "?", "\\", "|", "&"}


class Lexer:
    """Single-use tokenizer for one DSL source string."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1
        self.warnings: List[ValidationIssue] = []
        self.logger: Any = logger.bind(component="lexer")  # structlog.BoundLoggerBase

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole source.

        Returns:
            Token list ending with an EOF token

        Raises:
            LexError: On unterminated literals or unrecognized characters
        """
        tokens: List[Token] = []
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            token = self._next_token()
            if token is not None:
                tokens.append(token)

        tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return tokens

    def _next_token(self) -> Optional[Token]:
        char = self._current()
        line, column = self.line, self.column

        if char == "\n":
            self._advance()
            return Token(TokenType.NEWLINE, "\n", line, column)

        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return Token(SINGLE_CHAR_TOKENS[char], char, line, column)

        nxt = self._peek()

        if char == "-" and nxt == ">":
            self._advance(2)
            return Token(TokenType.ARROW, "->", line, column)

        if char == "$" and nxt == "{":
            self._advance(2)
            return Token(TokenType.TEMPLATE_START, "${", line, column)

        if char == "|" and nxt == "|":
            self._advance(2)
            return Token(TokenType.OR, "||", line, column)

        if char == "&" and nxt == "&":
            self._advance(2)
            return Token(TokenType.AND, "&&", line, column)

        if char == "/" and nxt == "/":
            return self._read_line_comment()

        if char == "/" and nxt == "*":
            return self._read_block_comment()

        if char == '"' and nxt == '"' and self._peek(2) == '"':
            return self._read_multiline_string()

        if char in ('"', "'"):
            return self._read_string(char)

        if char.isdigit() and char.isascii():
            return self._read_number()

        if char == "-" and nxt.isdigit() and nxt.isascii():
            return self._read_number()

        if self._is_identifier_start(char):
            return self._read_identifier()

        if char in SKIPPABLE_CHARS:
            message = f"Skipping unexpected character '{char}'"
            self.logger.warning(message, line=line, column=column)
            self.warnings.append(
                ValidationIssue(
                    message=message, line=line, column=column, severity=Severity.WARNING
                )
            )
            self._advance()
            return None

        raise LexError(f"Unexpected character '{char}'", line, column)

    # Readers

    def _read_string(self, quote: str) -> Token:
        line, column = self.line, self.column
        self._advance()
        chars: List[str] = []

        while not self._at_end():
            char = self._current()
            if char == quote:
                self._advance()
                return Token(TokenType.STRING, "".join(chars), line, column)
            if char == "\\":
                self._advance()
                if self._at_end():
                    break
                escaped = self._current()
                self._advance()
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)
                self._advance()

        raise LexError("Unterminated string", line, column)

    def _read_multiline_string(self) -> Token:
        line, column = self.line, self.column
        self._advance(3)
        start = self.position

        while not self._at_end():
            if self.source.startswith('"""', self.position):
                value = self.source[start : self.position]
                self._advance(3)
                return Token(TokenType.STRING, value.strip(), line, column)
            self._advance()

        raise LexError("Unterminated multi-line string", line, column)

    def _read_number(self) -> Token:
        line, column = self.line, self.column
        start = self.position
        if self._current() == "-":
            self._advance()
        self._consume_digits()
        if self._current() == "." and self._peek().isdigit():
            self._advance()
            self._consume_digits()
        return Token(TokenType.NUMBER, self.source[start : self.position], line, column)

    def _read_identifier(self) -> Token:
        line, column = self.line, self.column
        start = self.position
        while not self._at_end() and self._is_identifier_part(self._current()):
            self._advance()
        value = self.source[start : self.position]
        token_type = KEYWORDS.get(value.lower(), TokenType.IDENTIFIER)
        return Token(token_type, value, line, column)

    def _read_line_comment(self) -> Token:
        line, column = self.line, self.column
        self._advance(2)
        start = self.position
        while not self._at_end() and self._current() != "\n":
            self._advance()
        return Token(TokenType.COMMENT, self.source[start : self.position].strip(), line, column)

    def _read_block_comment(self) -> Token:
        line, column = self.line, self.column
        self._advance(2)
        start = self.position
        while not self._at_end():
            if self.source.startswith("*/", self.position):
                value = self.source[start : self.position]
                self._advance(2)
                return Token(TokenType.COMMENT, value.strip(), line, column)
            self._advance()
        raise LexError("Unterminated block comment", line, column)

    # Cursor helpers

    def _current(self) -> str:
        return self.source[self.position] if self.position < len(self.source) else ""

    def _peek(self, offset: int = 1) -> str:
        index = self.position + offset
        return self.source[index] if index < len(self.source) else ""

    def _at_end(self) -> bool:
        return self.position >= len(self.source)

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self._at_end():
                return
            if self.source[self.position] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.position += 1

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._current() in (" ", "\t", "\r"):
            self._advance()

    def _consume_digits(self) -> None:
        while not self._at_end() and self._current().isdigit() and self._current().isascii():
            self._advance()

    @staticmethod
    def _is_identifier_start(char: str) -> bool:
        return char.isascii() and (char.isalpha() or char == "_")

    @staticmethod
    def _is_identifier_part(char: str) -> bool:
        return char.isascii() and (char.isalnum() or char == "_")


def tokenize(source: str) -> List[Token]:
    """
    Tokenize DSL source.

    Args:
        source: Raw DSL text

    Returns:
        Token list ending with an EOF token
    """
    return Lexer(source).tokenize()
