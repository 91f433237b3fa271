"""Lexer: raw characters to an eagerly built token list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorKind, LexError
from . import constants

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    # Operators and punctuation
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    LESS = "<"
    GREATER = ">"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    ASSIGN = "="
    SEMI = ";"
    COMMA = ","
    # Reserved words
    IF = "if"
    ELSE = "else"
    WHILE = "while"
    FUNCTION = "function"
    RETURN = "return"
    # Other
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    EOF = "EOF"


SINGLE_CHARACTER_TOKENS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in (
        TokenKind.PLUS,
        TokenKind.MINUS,
        TokenKind.STAR,
        TokenKind.SLASH,
        TokenKind.PERCENT,
        TokenKind.LESS,
        TokenKind.GREATER,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.RBRACE,
        TokenKind.ASSIGN,
        TokenKind.SEMI,
        TokenKind.COMMA,
    )
}

RESERVED_WORD_TOKENS: dict[str, TokenKind] = {
    word: TokenKind(word) for word in constants.RESERVED_WORDS
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str | int | None = None

    def __str__(self) -> str:
        if self.value is None:
            return self.kind.value
        return f"{self.kind.value}({self.value})"


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Scans a source string one token at a time.

    Identifiers are an ASCII letter followed by ASCII letters or digits;
    numbers are runs of ASCII digits. Any other non-whitespace character
    raises :class:`LexError` with its line and column.
    """

    def __init__(self, source: str):
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def _peek(self) -> str:
        return self._source[self._pos] if self._pos < len(self._source) else ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _skip_whitespace(self):
        while self._peek() and self._peek().isspace():
            self._advance()

    def next_token(self) -> Token:
        self._skip_whitespace()
        ch = self._peek()
        if not ch:
            return Token(TokenKind.EOF)

        kind = SINGLE_CHARACTER_TOKENS.get(ch)
        if kind is not None:
            self._advance()
            return Token(kind)

        if _is_alpha(ch):
            text = ""
            while self._peek() and (_is_alpha(self._peek()) or _is_digit(self._peek())):
                text += self._advance()
            reserved = RESERVED_WORD_TOKENS.get(text)
            if reserved is not None:
                return Token(reserved)
            return Token(TokenKind.IDENTIFIER, text)

        if _is_digit(ch):
            value = 0
            while self._peek() and _is_digit(self._peek()):
                value = value * 10 + int(self._advance())
            return Token(TokenKind.NUMBER, value)

        raise LexError(
            ErrorKind.UNRECOGNIZED_CHARACTER,
            f"{ch!r} at line {self._line}, column {self._column}",
        )


def tokenize(source: str) -> list[Token]:
    """Produce the full token list, terminated by exactly one EOF token."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.kind == TokenKind.EOF:
            break
    logger.info("Lexed %d tokens", len(tokens))
    return tokens
