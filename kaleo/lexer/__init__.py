"""
Kaleo Lexer Package

Lazy, single-pass tokenizer for the Kaleo language.

Key Features:
- Tokens produced on demand (the lexer is an iterator)
- '#' line comments
- Float-only numeric literals, malformed ones reported as LexerError
- Single-character operators, so user-defined operators need no lexer changes
- Source location tracking on every token
"""

from .tokens import Token, TokenType, SourceLocation, KEYWORDS
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "KEYWORDS",
    "Diagnostic",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
]
