"""
Kaleo Front End Package

Lexer and parser for Kaleo, a small expression language in the style of
Kaleidoscope, where every value is a 64-bit float and programs can define
their own prefix and infix operators.

Architecture:
    kaleo/
    ├── lexer/           # Lazy tokenization
    ├── parser/          # Precedence-climbing parser, AST, operator table
    └── backend/         # Backend interface and a tree-walking evaluator
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer, LexerError
from .parser import Parser, ParseSession, OperatorTable, ParseError, DeclarationError
from .backend import Backend, Evaluator, BackendError

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "ParseSession",
    "OperatorTable",
    "Backend",
    "Evaluator",

    # Errors
    "LexerError",
    "ParseError",
    "DeclarationError",
    "BackendError",

    # Version info
    "__version__",
    "__license__",
]
