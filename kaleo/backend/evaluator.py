"""
Tree-walking reference backend.

Interprets function bodies directly with Python floats. Every definition is
resolved when it is defined: variables, callees, operators and argument
counts are checked against what is known at that point. Named definitions
are then stored; each ``__anon_expr`` is evaluated immediately and its value
is returned from ``define``.
"""

import sys
import math
import logging
import functools
from typing import Callable, Dict, FrozenSet, List, Optional, TextIO

from ..parser.ast_nodes import (
    Prototype, Function, Expression, NumberLiteral, VariableReference, UnaryOp,
    BinaryOp, Call, Conditional, Loop, LocalBindings,
)
from ..parser.operators import ASSIGNMENT_OPERATOR
from .base import Backend
from .errors import (
    UnboundVariableError, UnknownCalleeError, ArityMismatchError,
    InvalidAssignmentError,
)

logger = logging.getLogger(__name__)

HostFunction = Callable[..., float]

DEFAULT_LOOP_STEP = 1.0
DEFAULT_VAR_VALUE = 0.0


def _is_true(value: float) -> bool:
    """Ordered not-equal to zero: NaN counts as false."""
    return value == value and value != 0.0


def _less_than(a: float, b: float) -> float:
    # Unordered comparison: a NaN operand yields true
    return 1.0 if not a >= b else 0.0


def _libm(function: HostFunction) -> HostFunction:
    """Report domain errors as NaN and overflow as infinity, like C's libm."""

    @functools.wraps(function)
    def wrapper(*args):
        try:
            return function(*args)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    return wrapper


def _log(x: float) -> float:
    if x == 0.0:
        return -math.inf
    return math.log(x)


def default_externals(output: TextIO) -> Dict[str, HostFunction]:
    """Host functions an ``extern`` can bind to out of the box."""

    def putchard(x):
        # putchar() writes its argument converted to unsigned char
        if math.isfinite(x):
            output.write(chr(int(x) & 0xFF))
        return 0.0

    def printd(x):
        output.write(f"{x:f}\n")
        return 0.0

    return {
        "sin": _libm(math.sin),
        "cos": _libm(math.cos),
        "sqrt": _libm(math.sqrt),
        "exp": _libm(math.exp),
        "log": _libm(_log),
        "fabs": math.fabs,
        "putchard": putchard,
        "printd": printd,
    }


class Evaluator(Backend):
    """
    Evaluates Kaleo programs.

    Args:
        externals: Extra host functions, merged over the defaults
        output: Stream written by ``putchard`` and ``printd``
    """

    BUILTIN_BINARY = {
        "+": lambda a, b: a + b,
        "-": lambda a, b: a - b,
        "*": lambda a, b: a * b,
        "<": _less_than,
    }

    def __init__(self, externals: Optional[Dict[str, HostFunction]] = None,
                 output: Optional[TextIO] = None):
        super().__init__()
        self.output = output if output is not None else sys.stdout
        self.externals = default_externals(self.output)
        if externals:
            self.externals.update(externals)
        self.functions: Dict[str, Function] = {}
        self.frames: List[Dict[str, float]] = [{}]

    @property
    def scope(self) -> Dict[str, float]:
        return self.frames[-1]

    # Top-level items

    def declare(self, prototype: Prototype) -> Prototype:
        return prototype

    def define(self, function: Function):
        self._resolve(function.body, frozenset(function.prototype.params))
        if function.is_anonymous:
            value = self._invoke(function, [], function.prototype)
            logger.debug("%s evaluated to %r", function.name, value)
            return value
        self.functions[function.name] = function
        return function

    # Expressions

    def emit_number(self, node: NumberLiteral) -> float:
        return node.value

    def emit_variable_read(self, node: VariableReference) -> float:
        try:
            return self.scope[node.name]
        except KeyError:
            raise UnboundVariableError(f"Unknown variable name {node.name}", node) from None

    def emit_call(self, node: Call) -> float:
        self._check_callee(node)
        args = [self.emit(arg) for arg in node.args]
        return self._call(node.callee, args, node)

    def emit_conditional(self, node: Conditional) -> float:
        if _is_true(self.emit(node.condition)):
            return self.emit(node.then_branch)
        return self.emit(node.else_branch)

    def emit_loop(self, node: Loop) -> float:
        scope = self.scope
        start = self.emit(node.start)
        shadowed = scope.get(node.variable)
        scope[node.variable] = start
        try:
            while True:
                self.emit(node.body)
                step = self.emit(node.step) if node.step is not None else DEFAULT_LOOP_STEP
                end = self.emit(node.end)
                scope[node.variable] = scope[node.variable] + step
                if not _is_true(end):
                    break
        finally:
            self._restore(scope, node.variable, shadowed)
        return 0.0

    def emit_unary(self, node: UnaryOp) -> float:
        operand = self.emit(node.operand)
        name = self._check_unary(node)
        return self._call(name, [operand], node)

    def emit_binary(self, node: BinaryOp) -> float:
        if node.opcode == ASSIGNMENT_OPERATOR:
            return self._assign(node)

        left = self.emit(node.left)
        right = self.emit(node.right)
        builtin = self.BUILTIN_BINARY.get(node.opcode)
        if builtin is not None:
            return builtin(left, right)

        name = self._check_binary(node)
        return self._call(name, [left, right], node)

    def emit_local_bindings(self, node: LocalBindings) -> float:
        scope = self.scope
        shadowed = []
        try:
            for name, init in node.bindings:
                value = self.emit(init) if init is not None else DEFAULT_VAR_VALUE
                shadowed.append((name, scope.get(name)))
                scope[name] = value
            return self.emit(node.body)
        finally:
            for name, previous in reversed(shadowed):
                self._restore(scope, name, previous)

    # Name resolution

    def _resolve(self, node: Expression, bound: FrozenSet[str]) -> None:
        """Check every name used in ``node`` without evaluating anything."""
        if isinstance(node, NumberLiteral):
            return
        if isinstance(node, VariableReference):
            if node.name not in bound:
                raise UnboundVariableError(f"Unknown variable name {node.name}", node)
        elif isinstance(node, UnaryOp):
            self._resolve(node.operand, bound)
            self._check_unary(node)
        elif isinstance(node, BinaryOp):
            if node.opcode == ASSIGNMENT_OPERATOR:
                self._check_assignment_target(node, bound)
                self._resolve(node.right, bound)
                return
            self._resolve(node.left, bound)
            self._resolve(node.right, bound)
            if node.opcode not in self.BUILTIN_BINARY:
                self._check_binary(node)
        elif isinstance(node, Call):
            self._check_callee(node)
            for arg in node.args:
                self._resolve(arg, bound)
        elif isinstance(node, Conditional):
            for child in node.children():
                self._resolve(child, bound)
        elif isinstance(node, Loop):
            self._resolve(node.start, bound)
            inner = bound | {node.variable}
            self._resolve(node.end, inner)
            if node.step is not None:
                self._resolve(node.step, inner)
            self._resolve(node.body, inner)
        elif isinstance(node, LocalBindings):
            for name, init in node.bindings:
                if init is not None:
                    self._resolve(init, bound)
                bound = bound | {name}
            self._resolve(node.body, bound)
        else:
            raise TypeError(f"Not an expression node: {node!r}")

    def _check_callee(self, node: Call) -> Prototype:
        prototype = self.prototypes.get(node.callee)
        if prototype is None:
            raise UnknownCalleeError(f"Unknown function referenced: {node.callee}", node)
        if len(prototype.params) != len(node.args):
            raise ArityMismatchError(
                f"Incorrect number of arguments passed to {node.callee}: "
                f"expected {len(prototype.params)}, got {len(node.args)}",
                node
            )
        return prototype

    def _check_unary(self, node: UnaryOp) -> str:
        name = Prototype.unary_function_name(node.opcode)
        if name not in self.prototypes:
            raise UnknownCalleeError(f"Unknown unary operator {node.opcode}", node)
        return name

    def _check_binary(self, node: BinaryOp) -> str:
        name = Prototype.binary_function_name(node.opcode)
        if name not in self.prototypes:
            raise UnknownCalleeError(f"Unknown binary operator {node.opcode}", node)
        return name

    @staticmethod
    def _check_assignment_target(node: BinaryOp, bound) -> None:
        target = node.left
        if not isinstance(target, VariableReference):
            raise InvalidAssignmentError(
                "Destination of '=' must be a variable", node,
                help_text="Only plain variable names can be assigned to."
            )
        if target.name not in bound:
            raise UnboundVariableError(f"Unknown variable name {target.name}", target)

    # Helpers

    def _assign(self, node: BinaryOp) -> float:
        self._check_assignment_target(node, self.scope)
        value = self.emit(node.right)
        self.scope[node.left.name] = value
        return value

    def _call(self, name: str, args: List[float], node) -> float:
        function = self.functions.get(name)
        if function is not None:
            return self._invoke(function, args, node)
        host = self.externals.get(name)
        if host is None:
            raise UnknownCalleeError(
                f"No definition or host function for {name}", node,
                help_text=f"Available host functions: {', '.join(sorted(self.externals))}"
            )
        return float(host(*args))

    def _invoke(self, function: Function, args: List[float], node) -> float:
        params = function.prototype.params
        if len(params) != len(args):
            raise ArityMismatchError(
                f"Incorrect number of arguments passed to {function.name}: "
                f"expected {len(params)}, got {len(args)}",
                node
            )
        self.frames.append(dict(zip(params, args)))
        try:
            return self.emit(function.body)
        finally:
            self.frames.pop()

    @staticmethod
    def _restore(scope: Dict[str, float], name: str, previous: Optional[float]) -> None:
        if previous is None:
            scope.pop(name, None)
        else:
            scope[name] = previous
