"""
Jack Token Definitions

Defines the token kinds and the Token class for lexical analysis.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """Token kinds of the Jack language.

    The values double as the element names used by the XML token listing.
    """

    KEYWORD = "keyword"
    SYMBOL = "symbol"
    IDENTIFIER = "identifier"
    INT_CONST = "integerConstant"
    STRING_CONST = "stringConstant"

    # Engine sentinel, never produced by the lexer
    EOF = "eof"


KEYWORDS = frozenset({
    'class', 'constructor', 'function', 'method',
    'field', 'static', 'var',
    'int', 'char', 'boolean', 'void',
    'true', 'false', 'null', 'this',
    'let', 'do', 'if', 'else', 'while', 'return',
})

SYMBOLS = frozenset('{}()[].,;+-*/&|<>=~')

# Largest value an integer constant may hold (15-bit, non-negative)
MAX_INT = 32767

# Binary operators and the VM command each one compiles to.
# '*' and '/' have no VM primitive and go through the OS Math class.
BINARY_OPS = {
    '+': 'add',
    '-': 'sub',
    '&': 'and',
    '|': 'or',
    '<': 'lt',
    '>': 'gt',
    '=': 'eq',
}

BINARY_CALLS = {
    '*': 'Math.multiply',
    '/': 'Math.divide',
}

UNARY_OPS = {
    '-': 'neg',
    '~': 'not',
}

KEYWORD_CONSTANTS = frozenset({'true', 'false', 'null', 'this'})

PRIMITIVE_TYPES = frozenset({'int', 'char', 'boolean'})


@dataclass(frozen=True)
class Token:
    """A single token read from Jack source code."""

    type: TokenType
    lexeme: str
    value: Any
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "end of input"
        return f"{self.type.value} {self.lexeme!r}"

    def is_keyword(self, *words: str) -> bool:
        """Check if this is a keyword, optionally one of ``words``."""
        return self.type == TokenType.KEYWORD and (not words or self.value in words)

    def is_symbol(self, *chars: str) -> bool:
        """Check if this is a symbol, optionally one of ``chars``."""
        return self.type == TokenType.SYMBOL and (not chars or self.value in chars)

    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER

    def is_binary_op(self) -> bool:
        return self.type == TokenType.SYMBOL and (
            self.value in BINARY_OPS or self.value in BINARY_CALLS
        )

    def is_unary_op(self) -> bool:
        return self.type == TokenType.SYMBOL and self.value in UNARY_OPS

    def is_type(self) -> bool:
        """Check if this token can name a variable type."""
        return self.is_keyword(*PRIMITIVE_TYPES) or self.is_identifier()
