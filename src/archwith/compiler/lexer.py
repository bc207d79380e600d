# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for directive text.

Converts a directive string such as ``from(pathlib.PurePath), via(AsString)``
into a sequence of tokens for the directive parser. Directive text is short,
so the scanner matches one compiled alternation per token and tracks line
and column numbers for error messages.
"""

import enum
import re
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the directive lexer."""

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    DOT = "."
    COLON = ":"
    EQUALS = "="

    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A token of directive text.

    Attributes:
        type: The kind of token.
        value: Source text, or the decoded content for STRING tokens.
        line: 1-based line of the first character.
        column: 1-based column of the first character.
    """

    type: TokenType
    value: str
    line: int
    column: int


class LexerError(Exception):
    """Raised for characters that cannot start a token and for malformed string literals.

    Attributes:
        message: The error message without location.
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


def tokenize(source: str) -> list[Token]:
    """Split directive text into tokens.

    Whitespace and ``#`` comments are dropped. String literals are
    double-quoted and support the escapes ``\\n``, ``\\t``, ``\\\\`` and ``\\"``.

    Args:
        source: The directive text of one type or field.

    Returns:
        The tokens in source order, always terminated by one EOF token.

    Raises:
        LexerError: On an unexpected character or a malformed string literal.
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    line_start = 0

    while pos < len(source):
        column = pos - line_start + 1
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            if source[pos] == '"':
                raise LexerError("Unterminated string literal", line, column)
            raise LexerError(f"Unexpected character: {source[pos]!r}", line, column)

        text = match.group()
        kind = match.lastgroup
        if kind == "string":
            tokens.append(Token(TokenType.STRING, _decode_string(text, line, column), line, column))
        elif kind == "identifier":
            tokens.append(Token(TokenType.IDENTIFIER, text, line, column))
        elif kind == "symbol":
            tokens.append(Token(TokenType(text), text, line, column))

        newlines = text.count("\n")
        if newlines:
            line += newlines
            line_start = pos + text.rindex("\n") + 1
        pos = match.end()

    tokens.append(Token(TokenType.EOF, "", line, pos - line_start + 1))
    return tokens


# ################
# Implementation
# ################

_TOKEN_RE = re.compile(
    r"""
      (?P<blank>[ \t\r\n]+|\#[^\n]*)
    | (?P<string>"(?:[^"\\\n]|\\[^\n])*")
    | (?P<identifier>[^\W\d]\w*)
    | (?P<symbol>[()\[\],.:=])
    """,
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(.)")

_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "\\": "\\",
    '"': '"',
}


def _decode_string(literal: str, line: int, column: int) -> str:
    """Strip the quotes of *literal* and resolve its escape sequences."""

    def replace(match: re.Match[str]) -> str:
        escaped = match.group(1)
        if escaped not in _ESCAPES:
            # +1 for the opening quote
            raise LexerError(f"Invalid escape sequence: '\\{escaped}'", line, column + 1 + match.start(1))
        return _ESCAPES[escaped]

    return _ESCAPE_RE.sub(replace, literal[1:-1])
