"""
Token definitions for the Kaleo lexer.

Kaleo has a deliberately tiny token vocabulary:
- Reserved words (def, extern, if/then/else, for/in, var, unary, binary)
- Identifiers (alphanumeric, starting with a letter)
- Numbers (always float64)
- Single-character operators (everything else that isn't whitespace)

There are no multi-character operators. Parentheses, commas and the
statement separator ';' all travel as OPERATOR tokens.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """Enumeration of all token types in Kaleo."""

    EOF = auto()                    # End of input (synthesized by the parser)

    # Definitions
    DEF = auto()                    # def
    EXTERN = auto()                 # extern

    # Control flow
    IF = auto()                     # if
    THEN = auto()                   # then
    ELSE = auto()                   # else
    FOR = auto()                    # for
    IN = auto()                     # in

    # Local bindings
    VAR = auto()                    # var

    # Operator overloading
    UNARY = auto()                  # unary
    BINARY = auto()                 # binary

    # Primary
    IDENTIFIER = auto()             # foo, x1
    NUMBER = auto()                 # 1, 4.0, .5

    # Any other single character: + - * < ( ) , ; ! | ...
    OPERATOR = auto()


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for the spans attached to AST nodes.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Kaleo language.

    Contains the token type, lexeme (raw text), semantic value
    and source location.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # float for NUMBER, str for IDENTIFIER/OPERATOR
    location: SourceLocation

    def __str__(self) -> str:
        if self.type in (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.OPERATOR):
            return f"{self.type.name}({self.value!r})"
        return self.type.name

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a reserved word."""
        return KEYWORDS.get(self.lexeme) == self.type

    @property
    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER

    def is_operator(self, symbol: Optional[str] = None) -> bool:
        """Check if this token is an operator, optionally a specific one."""
        if self.type != TokenType.OPERATOR:
            return False
        return symbol is None or self.value == symbol


# Reserved words. Matching is exact: "define" or "iff" are identifiers.
KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "else": TokenType.ELSE,
    "for": TokenType.FOR,
    "in": TokenType.IN,
    "var": TokenType.VAR,
    "unary": TokenType.UNARY,
    "binary": TokenType.BINARY,
}

# Characters that may appear in a numeric literal
NUMBER_CHARS = frozenset("0123456789.")

COMMENT_CHAR = "#"
