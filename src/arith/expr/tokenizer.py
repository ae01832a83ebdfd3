"""
Tokenizer (lexer) for the expression language.

Converts expression strings into a lazy stream of tokens for the parser.
Lexical errors do not raise: the stream ends with a single ERROR token
whose value is the error message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Special
    EOF = "EOF"
    ERROR = "ERROR"

    # Delimiters
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"

    # Operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"

    # Literals and names
    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"


@dataclass(frozen=True)
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "{EOF}"
        if self.type == TokenType.ERROR:
            return f"{{ERROR {self.value}}}"
        return f"{{{self.type.value} {quote(self.value)}}}"


SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
}

# Returned by _next() at end of input. Fails every character class test.
_EOF = ""


def quote(text: str) -> str:
    """Quotes text in double quotes, escaping non-printable characters."""
    return '"' + repr(text)[1:-1].replace('"', '\\"') + '"'


def _is_space(ch: str) -> bool:
    # U+001C..U+001F are str.isspace() separators but not Unicode White_Space
    return ch.isspace() and not "\x1c" <= ch <= "\x1f"


class Tokenizer:
    """Tokenizer for expression strings."""

    def __init__(self, source: str):
        self._source = source
        self._start = 0  # start position of the current token
        self._position = 0  # current position in the input
        self._width = 0  # width of the last character read (0 at end)

    def tokens(self) -> Iterator[Token]:
        """Yields tokens up to and including the terminal EOF or ERROR token."""
        while True:
            token = self._scan_token()
            yield token
            if token.type in (TokenType.EOF, TokenType.ERROR):
                return

    # ============================================================
    # Cursor Helpers
    # ============================================================

    def _next(self) -> str:
        if self._position >= len(self._source):
            self._width = 0
            return _EOF
        ch = self._source[self._position]
        self._width = 1
        self._position += 1
        return ch

    def _peek(self) -> str:
        ch = self._next()
        self._backup()
        return ch

    def _backup(self) -> None:
        self._position -= self._width

    def _ignore(self) -> None:
        self._start = self._position

    def _emit(self, token_type: TokenType) -> Token:
        token = Token(token_type, self._source[self._start : self._position], self._start)
        self._start = self._position
        return token

    def _error(self, message: str) -> Token:
        return Token(TokenType.ERROR, message, self._start)

    # ============================================================
    # Scanning
    # ============================================================

    def _scan_token(self) -> Token:
        # Skip whitespace
        while True:
            ch = self._next()
            if ch == _EOF:
                self._ignore()
                return self._emit(TokenType.EOF)
            if not _is_space(ch):
                self._backup()
                self._ignore()
                break

        ch = self._next()
        if ch.isalpha():
            return self._scan_identifier()
        if ch.isdecimal():
            return self._scan_number()

        token_type = SINGLE_CHAR_TOKENS.get(ch)
        if token_type is not None:
            return self._emit(token_type)

        return self._error(f"invalid token: {quote(ch)}")

    def _scan_identifier(self) -> Token:
        while self._peek().isalpha():
            self._next()
        return self._emit(TokenType.IDENTIFIER)

    def _scan_number(self) -> Token:
        # Integer part
        while self._peek().isdecimal():
            self._next()

        # Optional fractional part
        if self._peek() == ".":
            self._next()
            while self._peek().isdecimal():
                self._next()

        return self._emit(TokenType.NUMBER)


def tokenize(source: str) -> Iterator[Token]:
    """
    Tokenizes an expression string lazily.

    Args:
        source: The expression string to tokenize

    Returns:
        Iterator over tokens, ending with exactly one EOF token, or with a
        single ERROR token if the input holds an invalid character
    """
    return Tokenizer(source).tokens()
