"""
Errors raised by backends while consuming the AST.

Modeled on the parser's diagnostics: each error carries a Diagnostic and the
offending node, whose span (when it has one) becomes the reported location.
"""

from typing import Optional, List

from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import ASTNode


class BackendError(Exception):
    """Base class for failures while declaring, defining or emitting code."""

    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        node: Optional[ASTNode] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.node = node
        location = node.span.start if node is not None and node.span is not None else None
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=self.code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class DuplicatePrototypeError(BackendError):
    code = "B001"


class UnboundVariableError(BackendError):
    code = "B002"


class UnknownCalleeError(BackendError):
    code = "B003"


class ArityMismatchError(BackendError):
    code = "B004"


class InvalidAssignmentError(BackendError):
    code = "B005"


BACKEND_ERROR_CODES = {
    "B001": "Duplicate prototype",
    "B002": "Unbound variable",
    "B003": "Unknown callee",
    "B004": "Arity mismatch",
    "B005": "Invalid assignment target",
}
