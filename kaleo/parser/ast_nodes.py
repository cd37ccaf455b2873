"""
Abstract Syntax Tree node definitions for Kaleo.

The node set is closed: every node reports its variant through a
``node_type`` tag drawn from ``ASTNodeType``, and consumers dispatch on that
tag (see ``kaleo.backend.base``) instead of on per-node visitor methods.

Nodes compare structurally. Source spans ride along for diagnostics but are
excluded from equality, so a hand-built tree equals a parsed one.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from ..lexer.tokens import SourceLocation

__all__ = [
    "ANONYMOUS_FUNCTION_NAME", "UNARY_FUNCTION_PREFIX", "BINARY_FUNCTION_PREFIX",
    "ASTNodeType", "EXPRESSION_NODE_TYPES", "SourceSpan",
    "ASTNode", "Expression", "UnaryOperator", "BinaryOperator", "OperatorDescriptor",
    "NumberLiteral", "VariableReference", "UnaryOp", "BinaryOp", "Call",
    "Conditional", "Loop", "LocalBindings",
    "Prototype", "Function", "Item", "Program", "walk", "AST",
]


# Name of the zero-argument function wrapping a top-level bare expression.
# Identifiers are alphanumeric only, so user code can never spell it.
ANONYMOUS_FUNCTION_NAME = "__anon_expr"

UNARY_FUNCTION_PREFIX = "unary"
BINARY_FUNCTION_PREFIX = "binary"


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Items
    PROTOTYPE = "Prototype"
    FUNCTION = "Function"

    # Expressions
    NUMBER_LITERAL = "NumberLiteral"
    VARIABLE_REFERENCE = "VariableReference"
    UNARY_OP = "UnaryOp"
    BINARY_OP = "BinaryOp"
    CALL = "Call"
    CONDITIONAL = "Conditional"
    LOOP = "Loop"
    LOCAL_BINDINGS = "LocalBindings"


EXPRESSION_NODE_TYPES = frozenset({
    ASTNodeType.NUMBER_LITERAL,
    ASTNodeType.VARIABLE_REFERENCE,
    ASTNodeType.UNARY_OP,
    ASTNodeType.BINARY_OP,
    ASTNodeType.CALL,
    ASTNodeType.CONDITIONAL,
    ASTNodeType.LOOP,
    ASTNodeType.LOCAL_BINDINGS,
})


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


def _span():
    return field(default=None, compare=False, repr=False)


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]
    span: Optional[SourceSpan]

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all direct child nodes, in source order."""
        pass

    def __str__(self) -> str:
        if self.span is None:
            return self.node_type.value
        return f"{self.node_type.value}@{self.span}"


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Operator descriptors
# ============================================================================

@dataclass(frozen=True)
class UnaryOperator:
    """Marks a prototype as a user-defined prefix operator."""
    symbol: str


@dataclass(frozen=True)
class BinaryOperator:
    """Marks a prototype as a user-defined infix operator with its precedence."""
    symbol: str
    precedence: int


OperatorDescriptor = Union[UnaryOperator, BinaryOperator]


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class NumberLiteral(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.NUMBER_LITERAL

    value: float
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class VariableReference(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_REFERENCE

    name: str
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class UnaryOp(Expression):
    """Prefix operator application, e.g. ``!x``."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.UNARY_OP

    opcode: str
    operand: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return [self.operand]


@dataclass
class BinaryOp(Expression):
    """Infix operator application, e.g. ``a + b``."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.BINARY_OP

    opcode: str
    left: Expression
    right: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass
class Call(Expression):
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CALL

    callee: str
    args: List[Expression] = field(default_factory=list)
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return list(self.args)


@dataclass
class Conditional(Expression):
    """``if <condition> then <then_branch> else <else_branch>``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONDITIONAL

    condition: Expression
    then_branch: Expression
    else_branch: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return [self.condition, self.then_branch, self.else_branch]


@dataclass
class Loop(Expression):
    """
    ``for <variable> = <start>, <end> [, <step>] in <body>``

    A missing step stays None here; the backend picks the default.
    """
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LOOP

    variable: str
    start: Expression
    end: Expression
    step: Optional[Expression]
    body: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        children = [self.start, self.end]
        if self.step is not None:
            children.append(self.step)
        children.append(self.body)
        return children


@dataclass
class LocalBindings(Expression):
    """``var a = 1, b in <body>``"""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.LOCAL_BINDINGS

    bindings: List[Tuple[str, Optional[Expression]]]
    body: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        children = [init for _, init in self.bindings if init is not None]
        children.append(self.body)
        return children


# ============================================================================
# Items (top-level declarations)
# ============================================================================

@dataclass
class Prototype(ASTNode):
    """Function signature: name, parameter names and optional operator role."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROTOTYPE

    name: str
    params: List[str] = field(default_factory=list)
    operator: Optional[OperatorDescriptor] = None
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return []

    @staticmethod
    def unary_function_name(symbol: str) -> str:
        return UNARY_FUNCTION_PREFIX + symbol

    @staticmethod
    def binary_function_name(symbol: str) -> str:
        return BINARY_FUNCTION_PREFIX + symbol

    @property
    def is_unary_op(self) -> bool:
        return isinstance(self.operator, UnaryOperator)

    @property
    def is_binary_op(self) -> bool:
        return isinstance(self.operator, BinaryOperator)

    @property
    def is_anonymous(self) -> bool:
        return self.name == ANONYMOUS_FUNCTION_NAME


@dataclass
class Function(ASTNode):
    """A prototype together with its single body expression."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION

    prototype: Prototype
    body: Expression
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return [self.prototype, self.body]

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_anonymous(self) -> bool:
        return self.prototype.is_anonymous


Item = Union[Prototype, Function]


@dataclass
class Program(ASTNode):
    """Root AST node: the ordered top-level items of one parse call."""
    node_type: ClassVar[ASTNodeType] = ASTNodeType.PROGRAM

    items: List[Item] = field(default_factory=list)
    span: Optional[SourceSpan] = _span()

    def children(self) -> List[ASTNode]:
        return list(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index: int) -> Item:
        return self.items[index]


def walk(node: ASTNode):
    """Yield ``node`` and all of its descendants, depth-first, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


# Alias for the main AST type
AST = Program
