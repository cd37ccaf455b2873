"""
Kaleo Parser Package

Recursive-descent parser with precedence climbing for the Kaleo language.

Key Features:
- Precedence climbing over a per-session, user-extensible operator table
- Prefix operators parsed from any non-grouping operator character
- if/then/else, for/in and var/in expression forms
- Structural AST nodes with source spans
- Fail-fast diagnostics (no error recovery)
"""

from .ast_nodes import *
from .operators import OperatorTable, NOT_AN_OPERATOR, DEFAULT_PRECEDENCES
from .parser import Parser, parse_string, parse_file
from .session import ParseSession
from .errors import ParseError, DeclarationError

__all__ = [
    # Core parser
    "Parser",
    "ParseSession",
    "OperatorTable",
    "NOT_AN_OPERATOR",
    "DEFAULT_PRECEDENCES",
    "parse_string",
    "parse_file",

    # AST nodes
    "AST", "ASTNode", "ASTNodeType", "SourceSpan",
    "Program", "Prototype", "Function", "Expression",
    "NumberLiteral", "VariableReference", "UnaryOp", "BinaryOp", "Call",
    "Conditional", "Loop", "LocalBindings",
    "UnaryOperator", "BinaryOperator",
    "ANONYMOUS_FUNCTION_NAME", "walk",

    # Error handling
    "ParseError", "DeclarationError",
]
