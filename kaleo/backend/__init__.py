"""
Kaleo Backend Package

The interface the parser's output is fed to, plus a tree-walking evaluator
that implements it.
"""

from .base import Backend, EMITTERS
from .evaluator import Evaluator, default_externals
from .errors import (
    BackendError, DuplicatePrototypeError, UnboundVariableError,
    UnknownCalleeError, ArityMismatchError, InvalidAssignmentError,
    BACKEND_ERROR_CODES,
)

__all__ = [
    "Backend",
    "EMITTERS",
    "Evaluator",
    "default_externals",
    "BackendError",
    "DuplicatePrototypeError",
    "UnboundVariableError",
    "UnknownCalleeError",
    "ArityMismatchError",
    "InvalidAssignmentError",
    "BACKEND_ERROR_CODES",
]
