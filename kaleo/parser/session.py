"""
Multi-call parsing session.

An interactive front end parses one line (or one buffer) at a time, but
operator definitions made on one line must be honoured on the next. The
session owns the OperatorTable that carries them across calls; each call
still gets its own Lexer and Parser.
"""

import logging

from ..lexer import Lexer
from .ast_nodes import Program
from .operators import OperatorTable
from .parser import Parser

logger = logging.getLogger(__name__)


class ParseSession:
    """
    Owns one OperatorTable for the lifetime of a session.

    Sessions are independent: two sessions never see each other's operator
    definitions.
    """

    def __init__(self, with_assignment: bool = False, filename: str = "<input>"):
        """
        Args:
            with_assignment: Predefine '=' as a low-precedence binary operator
            filename: Name used in source locations
        """
        self.operators = OperatorTable.with_defaults(with_assignment=with_assignment)
        self.filename = filename
        self.calls = 0

    def parse(self, text: str) -> Program:
        """
        Parse one complete unit of input with a fresh token source.

        Raises:
            ParseError: On the first syntax or declaration error; no partial
                Program is returned
            LexerError: On a malformed literal
        """
        self.calls += 1
        parser = Parser(Lexer(text, self.filename), self.operators, self.filename)
        program = parser.parse()
        logger.debug("call %d parsed %d item(s)", self.calls, len(program.items))
        return program
