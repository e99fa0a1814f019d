"""Lexer/tokenizer for the exprforge expression language.

Converts expression strings into a stream of tokens for the parser. A single
scanner regex with one named group per token class does the matching;
operator tokens are looked up by their symbol, which is also the
TokenType's value.

Token classes:
- Literals: NUMBER (source text kept verbatim), BOOLEAN
- Identifiers: IDENTIFIER (variable, constant and function names)
- Operators and punctuation: one TokenType per symbol
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from exprforge.errors import LexerError


class TokenType(Enum):
    """Token types; operator members are valued by their canonical symbol."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    IDENTIFIER = "identifier"

    EQ = "=="
    NEQ = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="

    AND = "&&"
    OR = "||"
    NOT = "!"

    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"

    QUESTION = "?"
    COLON = ":"

    LPAREN = "("
    RPAREN = ")"
    COMMA = ","

    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: Source text for numbers, identifiers and operators; True or
            False for boolean keywords; None at EOF
        position: Character offset in the source string
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str | bool | None
    position: int
    line: int = 1
    column: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


# Alternation order matters: two-character operators before their prefixes
SCANNER = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<symbol>==|!=|<=|>=|&&|\|\||[-+*/%<>!?:(),])
    """,
    re.VERBOSE,
)

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")

# Word operators and literals, matched case-insensitively
KEYWORDS: dict[str, tuple[TokenType, bool | None]] = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
    "and": (TokenType.AND, None),
    "or": (TokenType.OR, None),
    "not": (TokenType.NOT, None),
}


def is_keyword(name: str) -> bool:
    return name.lower() in KEYWORDS


class Lexer:
    """Tokenizer for the expression language.

    Usage:
        tokens = Lexer("a + b * 2 > limit && !done").tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self._line_start = 0

    @property
    def column(self) -> int:
        return self.position - self._line_start + 1

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Scan past whitespace and return the next token."""
        while self.position < len(self.source):
            match = SCANNER.match(self.source, self.position)
            if match is None:
                raise LexerError(
                    f"Unexpected character '{self.source[self.position]}'",
                    self.position,
                    self.line,
                    self.column,
                )

            text = match.group()
            if match.lastgroup == "space":
                self._skip(text)
                continue

            token = self._make_token(match.lastgroup, text)
            self.position = match.end()
            return token

        return Token(TokenType.EOF, None, self.position, self.line, self.column)

    def _make_token(self, kind: str | None, text: str) -> Token:
        value: str | bool | None = text
        if kind == "number":
            token_type = TokenType.NUMBER
        elif kind == "name":
            token_type, keyword_value = KEYWORDS.get(
                text.lower(), (TokenType.IDENTIFIER, None)
            )
            if token_type == TokenType.BOOLEAN:
                value = keyword_value
        else:
            token_type = TokenType(text)
        return Token(token_type, value, self.position, self.line, self.column)

    def _skip(self, whitespace: str) -> None:
        """Move past whitespace, tracking line breaks."""
        newlines = whitespace.count("\n")
        if newlines:
            self.line += newlines
            self._line_start = self.position + whitespace.rindex("\n") + 1
        self.position += len(whitespace)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)
