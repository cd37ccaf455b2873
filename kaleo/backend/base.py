"""
The interface between the parser and whatever consumes its output.

A backend receives top-level items one at a time, in source order, and walks
function bodies through ``emit``. Dispatch is a table keyed on the closed
``ASTNodeType`` tag set; the table is checked for completeness when this
module is imported, so adding an expression variant without teaching the
backends about it fails immediately.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Set

from ..parser.ast_nodes import (
    ASTNodeType, EXPRESSION_NODE_TYPES, Program, Prototype, Function, Expression,
    NumberLiteral, VariableReference, UnaryOp, BinaryOp, Call, Conditional,
    Loop, LocalBindings,
)
from .errors import DuplicatePrototypeError

logger = logging.getLogger(__name__)


def _check_exhaustive(table: Dict[ASTNodeType, str]) -> Dict[ASTNodeType, str]:
    missing = EXPRESSION_NODE_TYPES.difference(table)
    if missing:
        names = ", ".join(sorted(node_type.value for node_type in missing))
        raise RuntimeError(f"Backend dispatch table does not handle: {names}")
    return table


EMITTERS = _check_exhaustive({
    ASTNodeType.NUMBER_LITERAL: "emit_number",
    ASTNodeType.VARIABLE_REFERENCE: "emit_variable_read",
    ASTNodeType.UNARY_OP: "emit_unary",
    ASTNodeType.BINARY_OP: "emit_binary",
    ASTNodeType.CALL: "emit_call",
    ASTNodeType.CONDITIONAL: "emit_conditional",
    ASTNodeType.LOOP: "emit_loop",
    ASTNodeType.LOCAL_BINDINGS: "emit_local_bindings",
})


class Backend(ABC):
    """
    Base class for AST consumers.

    Keeps the prototype registry shared by every backend: a named function
    may only be defined once, while the anonymous top-level function can be
    redefined for every bare expression.
    """

    def __init__(self):
        self.prototypes: Dict[str, Prototype] = {}
        self.defined: Set[str] = set()

    def run(self, program: Program) -> List[Any]:
        """Feed every item of ``program`` to the backend, in order."""
        return [self.visit_top(item) for item in program.items]

    def visit_top(self, item) -> Any:
        if isinstance(item, Function):
            return self._define(item)
        if isinstance(item, Prototype):
            return self._declare(item)
        raise TypeError(f"Not a top-level item: {item!r}")

    def _declare(self, prototype: Prototype) -> Any:
        """
        Record an extern. Repeating an extern with the same number of
        parameters is allowed; redeclaring a defined function, or changing
        the parameter count, is not.
        """
        name = prototype.name
        existing = self.prototypes.get(name)
        if existing is not None:
            if name in self.defined:
                raise DuplicatePrototypeError(
                    f"Prototype {name} already exists",
                    prototype,
                    help_text=f"{name} is already defined; it cannot be redeclared as an extern."
                )
            if len(existing.params) != len(prototype.params):
                raise DuplicatePrototypeError(
                    f"Prototype {name} already exists with {len(existing.params)} parameter(s)",
                    prototype,
                    help_text="A repeated extern must keep the same number of parameters."
                )
        self.prototypes[name] = prototype
        logger.debug("declared %s(%s)", name, " ".join(prototype.params))
        return self.declare(prototype)

    def _define(self, function: Function) -> Any:
        name = function.name
        if name in self.prototypes and not function.is_anonymous:
            raise DuplicatePrototypeError(
                f"Prototype {name} already exists",
                function.prototype,
                help_text="Functions cannot be redefined; choose another name."
            )

        # Recorded before define() so the body can call itself
        previous = self.prototypes.get(name)
        self.prototypes[name] = function.prototype
        logger.debug("defining %s(%s)", name, " ".join(function.prototype.params))
        try:
            handle = self.define(function)
        except Exception:
            if previous is None:
                del self.prototypes[name]
            else:
                self.prototypes[name] = previous
            raise

        if not function.is_anonymous:
            self.defined.add(name)
        return handle

    def emit(self, expr: Expression) -> Any:
        """Dispatch ``expr`` to the matching ``emit_*`` method."""
        method_name = EMITTERS.get(getattr(expr, "node_type", None))
        if method_name is None:
            raise TypeError(f"Not an expression node: {expr!r}")
        return getattr(self, method_name)(expr)

    # Capability set

    @abstractmethod
    def declare(self, prototype: Prototype) -> Any:
        """Make an external function known; return a backend handle."""

    @abstractmethod
    def define(self, function: Function) -> Any:
        """Materialize a function definition; return a backend handle."""

    @abstractmethod
    def emit_number(self, node: NumberLiteral) -> Any:
        pass

    @abstractmethod
    def emit_variable_read(self, node: VariableReference) -> Any:
        pass

    @abstractmethod
    def emit_call(self, node: Call) -> Any:
        pass

    @abstractmethod
    def emit_conditional(self, node: Conditional) -> Any:
        pass

    @abstractmethod
    def emit_loop(self, node: Loop) -> Any:
        pass

    @abstractmethod
    def emit_unary(self, node: UnaryOp) -> Any:
        pass

    @abstractmethod
    def emit_binary(self, node: BinaryOp) -> Any:
        pass

    @abstractmethod
    def emit_local_bindings(self, node: LocalBindings) -> Any:
        pass
