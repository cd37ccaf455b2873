"""
Error handling for the Kaleo parser.

There is no recovery: the first ParseError aborts the current parse call.
The helpers below keep the messages consistent across the parser.
"""

from typing import Optional, List, Union

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )
        self.token = token

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


class DeclarationError(ParseError):
    """
    A prototype that is well-formed syntactically but not acceptable:
    wrong operand count for an operator overload, or a precedence literal
    outside the allowed range.
    """
    pass


PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P005": "Invalid expression",
    "P010": "Unexpected end of input",
    "P013": "Wrong operand count for operator overload",
    "P014": "Operator precedence out of range",
}


def describe_expected(expected: Union[TokenType, str]) -> str:
    """Human-readable name for what the parser wanted to see."""
    if isinstance(expected, TokenType):
        if expected == TokenType.IDENTIFIER:
            return "identifier"
        if expected == TokenType.NUMBER:
            return "number"
        if expected == TokenType.EOF:
            return "end of input"
        return f"'{expected.name.lower()}'"
    return expected


def describe_token(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    if token.type == TokenType.IDENTIFIER:
        return f"identifier '{token.lexeme}'"
    if token.type == TokenType.NUMBER:
        return f"number {token.lexeme}"
    if token.type == TokenType.OPERATOR:
        return f"'{token.lexeme}'"
    return f"keyword '{token.lexeme}'"


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Union[TokenType, str], found: Token) -> ParseError:
    """Create an error for an unexpected token."""
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(describe_expected(expected), found.location)

    expected_str = describe_expected(expected)
    found_str = describe_token(found)

    return ParseError(
        message=f"Expected {expected_str}, found {found_str}",
        location=found.location,
        token=found,
        code="P001",
        help_text=f"The parser expected to see {expected_str} at this position, but found {found_str} instead."
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error("an expression", found.location)

    return ParseError(
        message=f"Unknown token {describe_token(found)} when expecting an expression",
        location=found.location,
        token=found,
        code="P005",
        help_text="Expressions start with a number, an identifier, '(', 'if', 'for', 'var' or a prefix operator.",
    )


def create_unexpected_eof_error(expected: str, location: SourceLocation) -> ParseError:
    """Create an error for unexpected end of input."""
    return ParseError(
        message=f"Unexpected end of input, expected {expected}",
        location=location,
        code="P010",
        help_text=f"The parser reached the end of the input while expecting {expected}.",
        suggestions=[f"Add the missing {expected}", "Check for incomplete definitions"]
    )


def create_operator_arity_error(symbol: str, kind: str, expected: int, found: int,
                                location: SourceLocation) -> DeclarationError:
    """Create an error for an operator overload with the wrong parameter count."""
    plural = "s" if expected != 1 else ""
    return DeclarationError(
        message=f"{kind.capitalize()} operator '{symbol}' must take exactly {expected} parameter{plural}, got {found}",
        location=location,
        code="P013",
        help_text=f"A {kind} operator overload is declared as '{kind}{symbol}' followed by {expected} parameter name{plural}."
    )


def create_precedence_range_error(value: float, minimum: int, maximum: int,
                                  location: SourceLocation) -> DeclarationError:
    """Create an error for a binary operator precedence outside the allowed range."""
    return DeclarationError(
        message=f"Invalid precedence {value:g}: must be {minimum}..{maximum}",
        location=location,
        code="P014",
        help_text="Built-in operators use '<' 10, '+' and '-' 20, '*' 40.",
    )
