"""
Binary operator precedence table.

One table belongs to one parsing session. Declaring ``def binary<op> N``
writes into it, and every later expression in the same session sees the new
operator. Separate sessions must use separate tables.
"""

import logging
from typing import Dict, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)


# Returned for symbols that cannot continue an infix expression.
NOT_AN_OPERATOR = -1

DEFAULT_PRECEDENCES: Mapping[str, int] = {
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
}

ASSIGNMENT_OPERATOR = "="
ASSIGNMENT_PRECEDENCE = 2

# Used when ``def binary<op>`` gives no explicit precedence
DEFAULT_BINARY_PRECEDENCE = 30
MIN_USER_PRECEDENCE = 1
MAX_USER_PRECEDENCE = 100


class OperatorTable:
    """
    Mutable mapping from a single-character operator to its precedence.

    Higher numbers bind tighter. There is deliberately no removal.
    """

    def __init__(self, precedences: Optional[Mapping[str, int]] = None):
        self._precedences: Dict[str, int] = {}
        for symbol, precedence in (precedences or {}).items():
            self.set(symbol, precedence)

    @classmethod
    def with_defaults(cls, with_assignment: bool = False) -> 'OperatorTable':
        """
        Create a table seeded with the built-in operators.

        Args:
            with_assignment: Also register '=' at ASSIGNMENT_PRECEDENCE
        """
        table = cls(DEFAULT_PRECEDENCES)
        if with_assignment:
            table.set(ASSIGNMENT_OPERATOR, ASSIGNMENT_PRECEDENCE)
        return table

    def get(self, symbol: str) -> int:
        """Return the precedence of ``symbol``, or NOT_AN_OPERATOR."""
        return self._precedences.get(symbol, NOT_AN_OPERATOR)

    def set(self, symbol: str, precedence: int):
        """Register or overwrite the precedence of ``symbol``."""
        if len(symbol) != 1:
            raise ValueError(f"Operators are single characters, got {symbol!r}")
        if isinstance(precedence, bool) or not isinstance(precedence, int):
            raise ValueError(f"Precedence must be an integer, got {precedence!r}")
        if precedence < MIN_USER_PRECEDENCE:
            raise ValueError(f"Precedence must be at least 1, got {precedence}")

        previous = self._precedences.get(symbol)
        self._precedences[symbol] = precedence
        if previous is None:
            logger.debug("registered operator %r with precedence %d", symbol, precedence)
        elif previous != precedence:
            logger.debug("operator %r precedence changed %d -> %d", symbol, previous, precedence)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._precedences

    def __len__(self) -> int:
        return len(self._precedences)

    def __iter__(self) -> Iterator[str]:
        return iter(self._precedences)

    def as_dict(self) -> Dict[str, int]:
        """Snapshot of the current registrations."""
        return dict(self._precedences)

    def __repr__(self) -> str:
        return f"OperatorTable({self._precedences!r})"
