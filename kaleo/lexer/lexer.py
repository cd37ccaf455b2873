"""
Kaleo Lexer - turns source text into tokens, one at a time.

The lexer is an iterator: nothing is scanned until the parser asks for the
next token, and a lexer that has been partially consumed cannot be rewound.
"""

import logging
from typing import Iterator, List

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, NUMBER_CHARS, COMMENT_CHAR
from .errors import create_invalid_number_error

logger = logging.getLogger(__name__)


class Lexer:
    """
    Kaleo lexical analyzer.

    Yields tokens lazily. Whitespace and '#' line comments are skipped.
    Exhaustion is signalled with StopIteration; no EOF token is produced.
    """

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source text
            filename: Name used in source locations
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        self._skip_whitespace_and_comments()

        if self.pos >= len(self.source):
            raise StopIteration

        token = self._next_token()
        logger.debug("token %s at %s", token, token.location)
        return token

    def tokenize(self) -> List[Token]:
        """
        Drain the remaining input into a list.

        Returns:
            List of tokens, without an EOF marker

        Raises:
            LexerError: On the first malformed literal
        """
        return list(self)

    def _next_token(self) -> Token:
        """Scan one token starting at the current position."""
        location = self._location()
        current_char = self.source[self.pos]

        if current_char.isalpha():
            return self._tokenize_identifier_or_keyword(location)

        if current_char in NUMBER_CHARS:
            return self._tokenize_number(location)

        self._advance()
        return Token(TokenType.OPERATOR, current_char, current_char, location)

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        start_pos = self.pos
        while self.pos < len(self.source) and self.source[self.pos].isalnum():
            self._advance()

        lexeme = self.source[start_pos:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        """Greedily take [0-9.]* and convert it, so '1.2.3' is one bad literal."""
        start_pos = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in NUMBER_CHARS:
            self._advance()

        lexeme = self.source[start_pos:self.pos]
        try:
            value = float(lexeme)
        except ValueError:
            raise create_invalid_number_error(
                lexeme,
                location,
                "Numeric literals are digits with at most one decimal point"
            ) from None

        return Token(TokenType.NUMBER, lexeme, value, location)

    def _skip_whitespace_and_comments(self):
        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char.isspace():
                self._advance()
                continue

            # Line comment runs through end-of-line (or end-of-input)
            if char == COMMENT_CHAR:
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
                continue

            break

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename).tokenize()


def tokenize_file(filepath: str) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath)
