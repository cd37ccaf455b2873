"""
Kaleo recursive-descent parser.

Expressions are parsed by precedence climbing over a mutable OperatorTable,
with a prefix-operator extension: any operator character that can't start a
primary expression is treated as a unary opcode. Defining ``binary<op>``
extends the table, so the grammar changes while the input is being read.

Every decision is made from a single token of lookahead; there is no
backtracking and no error recovery.
"""

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..lexer.tokens import Token, TokenType, SourceLocation
from .ast_nodes import (
    ANONYMOUS_FUNCTION_NAME, SourceSpan, Program, Item, Prototype, Function,
    Expression, NumberLiteral, VariableReference, UnaryOp, BinaryOp, Call,
    Conditional, Loop, LocalBindings, UnaryOperator, BinaryOperator,
)
from .operators import (
    OperatorTable, DEFAULT_BINARY_PRECEDENCE, MIN_USER_PRECEDENCE, MAX_USER_PRECEDENCE,
)
from .errors import (
    create_unexpected_token_error, create_invalid_expression_error,
    create_operator_arity_error, create_precedence_range_error,
)

logger = logging.getLogger(__name__)


STATEMENT_SEPARATOR = ";"

# Operator characters that never act as a prefix opcode
NON_PREFIX_OPERATORS = frozenset("(,")


class Parser:
    """
    Kaleo parser.

    Pulls tokens from any iterable (normally a live Lexer), one at a time.
    """

    def __init__(self, tokens: Iterable[Token], operators: Optional[OperatorTable] = None,
                 filename: str = "<input>"):
        """
        Initialize parser with a token source.

        Args:
            tokens: Token iterable; consumed lazily and never rewound
            operators: Precedence table to read and extend. A fresh default
                table is created when omitted.
            filename: Used for the location of the synthesized end-of-input
        """
        self._tokens: Iterator[Token] = iter(tokens)
        self.operators = operators if operators is not None else OperatorTable.with_defaults()
        self.filename = filename

        self._current: Optional[Token] = None
        self._last: Optional[Token] = None

        # Tokens that start a primary expression
        self.prefix_parsers: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.IDENTIFIER: self._parse_identifier_expression,
            TokenType.NUMBER: self._parse_number,
            TokenType.IF: self._parse_conditional,
            TokenType.FOR: self._parse_loop,
            TokenType.VAR: self._parse_local_bindings,
        }

    def parse(self) -> Program:
        """
        Parse the whole token stream.

        Returns:
            Program holding the top-level items in source order

        Raises:
            ParseError: On the first syntax or declaration error
            LexerError: If the token source fails
        """
        items: List[Item] = []
        start_location = self._peek().location

        while True:
            token = self._peek()

            if token.type == TokenType.EOF:
                break
            elif token.type == TokenType.DEF:
                item = self._parse_definition()
            elif token.type == TokenType.EXTERN:
                item = self._parse_extern()
            elif token.is_operator(STATEMENT_SEPARATOR):
                self._advance()
                continue
            else:
                item = self._parse_top_level_expression()

            logger.debug("parsed %s %r", item.node_type.value, item.name)
            items.append(item)

        return Program(items, SourceSpan(start_location, self._peek().location))

    # Top-level items

    def _parse_definition(self) -> Function:
        """def <prototype> <expression>"""
        start_token = self._consume(TokenType.DEF)
        prototype = self._parse_prototype()
        body = self._parse_expression()

        # Registered only once the whole definition has parsed
        if isinstance(prototype.operator, BinaryOperator):
            self.operators.set(prototype.operator.symbol, prototype.operator.precedence)
            logger.debug("binary operator %r now has precedence %d",
                         prototype.operator.symbol, prototype.operator.precedence)

        return Function(prototype, body, self._span_from(start_token))

    def _parse_extern(self) -> Prototype:
        """extern <prototype>"""
        self._consume(TokenType.EXTERN)
        return self._parse_prototype()

    def _parse_top_level_expression(self) -> Function:
        """Wrap a bare expression into the anonymous zero-argument function."""
        body = self._parse_expression()
        prototype = Prototype(ANONYMOUS_FUNCTION_NAME, [], None, body.span)
        return Function(prototype, body, body.span)

    def _parse_prototype(self) -> Prototype:
        """
        Parse one of:
            name(params)
            unary<op>(param)
            binary<op> [precedence](lhs rhs)
        """
        start_token = self._peek()
        operator = None

        if start_token.type == TokenType.IDENTIFIER:
            name = self._advance().value
        elif start_token.type == TokenType.UNARY:
            self._advance()
            symbol = self._consume(TokenType.OPERATOR, "operator character after 'unary'").value
            name = Prototype.unary_function_name(symbol)
            operator = UnaryOperator(symbol)
        elif start_token.type == TokenType.BINARY:
            self._advance()
            symbol = self._consume(TokenType.OPERATOR, "operator character after 'binary'").value
            name = Prototype.binary_function_name(symbol)
            operator = BinaryOperator(symbol, self._parse_binary_precedence())
        else:
            raise create_unexpected_token_error("function name in prototype", start_token)

        self._consume_operator("(")
        params = []
        while self._check(TokenType.IDENTIFIER):
            params.append(self._advance().value)
        self._consume_operator(")", "parameter name or ')'")

        span = self._span_from(start_token)
        if isinstance(operator, UnaryOperator) and len(params) != 1:
            raise create_operator_arity_error(operator.symbol, "unary", 1, len(params), start_token.location)
        if isinstance(operator, BinaryOperator) and len(params) != 2:
            raise create_operator_arity_error(operator.symbol, "binary", 2, len(params), start_token.location)

        return Prototype(name, params, operator, span)

    def _parse_binary_precedence(self) -> int:
        if not self._check(TokenType.NUMBER):
            return DEFAULT_BINARY_PRECEDENCE

        token = self._advance()
        if not MIN_USER_PRECEDENCE <= token.value <= MAX_USER_PRECEDENCE:
            raise create_precedence_range_error(
                token.value, MIN_USER_PRECEDENCE, MAX_USER_PRECEDENCE, token.location
            )
        return int(token.value)

    # Expressions

    def _parse_expression(self) -> Expression:
        lhs = self._parse_unary()
        return self._parse_binary_rhs(0, lhs)

    def _parse_unary(self) -> Expression:
        """A prefix opcode applied to another unary term, or a primary."""
        token = self._peek()
        if token.type != TokenType.OPERATOR or token.value in NON_PREFIX_OPERATORS:
            return self._parse_primary()

        self._advance()
        operand = self._parse_unary()
        return UnaryOp(token.value, operand, self._span_from(token))

    def _parse_binary_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing.

        Keeps folding ``lhs <op> rhs`` while the next operator binds at least
        as tightly as ``min_precedence``. An operator that binds tighter than
        the one just consumed is absorbed into ``rhs`` first, which gives
        left-associativity for equal precedences.
        """
        while True:
            token = self._peek()
            if token.type != TokenType.OPERATOR:
                return lhs

            precedence = self.operators.get(token.value)
            if precedence < min_precedence:
                return lhs

            self._advance()
            rhs = self._parse_unary()

            next_token = self._peek()
            if next_token.type == TokenType.OPERATOR and precedence < self.operators.get(next_token.value):
                rhs = self._parse_binary_rhs(precedence + 1, rhs)

            span = SourceSpan(lhs.span.start, rhs.span.end) if lhs.span and rhs.span else None
            lhs = BinaryOp(token.value, lhs, rhs, span)

    def _parse_primary(self) -> Expression:
        token = self._peek()

        if token.is_operator("("):
            return self._parse_grouping()

        prefix_parser = self.prefix_parsers.get(token.type)
        if prefix_parser is None:
            raise create_invalid_expression_error(token)
        return prefix_parser()

    def _parse_number(self) -> NumberLiteral:
        token = self._advance()
        return NumberLiteral(token.value, self._span_from(token))

    def _parse_grouping(self) -> Expression:
        """( expression )"""
        self._advance()
        expr = self._parse_expression()
        self._consume_operator(")")
        return expr

    def _parse_identifier_expression(self) -> Expression:
        """A variable reference, or a call when followed by '('."""
        name_token = self._advance()
        if not self._check_operator("("):
            return VariableReference(name_token.value, self._span_from(name_token))

        self._advance()
        args = []
        if not self._check_operator(")"):
            while True:
                args.append(self._parse_expression())
                if self._check_operator(")"):
                    break
                self._consume_operator(",", "')' or ',' in argument list")
        self._consume_operator(")")

        return Call(name_token.value, args, self._span_from(name_token))

    def _parse_conditional(self) -> Conditional:
        """if <expr> then <expr> else <expr>"""
        start_token = self._consume(TokenType.IF)
        condition = self._parse_expression()
        self._consume(TokenType.THEN)
        then_branch = self._parse_expression()
        self._consume(TokenType.ELSE)
        else_branch = self._parse_expression()

        return Conditional(condition, then_branch, else_branch, self._span_from(start_token))

    def _parse_loop(self) -> Loop:
        """for <ident> = <start>, <end> [, <step>] in <body>"""
        start_token = self._consume(TokenType.FOR)
        variable = self._consume(TokenType.IDENTIFIER, "loop variable after 'for'").value
        self._consume_operator("=")
        start = self._parse_expression()
        self._consume_operator(",")
        end = self._parse_expression()

        step = None
        if self._match_operator(","):
            step = self._parse_expression()

        self._consume(TokenType.IN)
        body = self._parse_expression()

        return Loop(variable, start, end, step, body, self._span_from(start_token))

    def _parse_local_bindings(self) -> LocalBindings:
        """var <ident> [= <expr>] {, <ident> [= <expr>]} in <body>"""
        start_token = self._consume(TokenType.VAR)

        bindings = []
        while True:
            name = self._consume(TokenType.IDENTIFIER, "variable name").value
            initializer = None
            if self._match_operator("="):
                initializer = self._parse_expression()
            bindings.append((name, initializer))

            if not self._match_operator(","):
                break

        self._consume(TokenType.IN)
        body = self._parse_expression()

        return LocalBindings(bindings, body, self._span_from(start_token))

    # Utility methods

    def _peek(self) -> Token:
        """Return current token without consuming."""
        if self._current is None:
            try:
                self._current = next(self._tokens)
            except StopIteration:
                self._current = Token(TokenType.EOF, "", None, self._eof_location())
        return self._current

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._peek()
        if token.type != TokenType.EOF:
            self._current = None
        self._last = token
        return token

    def _previous(self) -> Token:
        return self._last if self._last is not None else self._peek()

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _check_operator(self, symbol: str) -> bool:
        return self._peek().is_operator(symbol)

    def _match_operator(self, symbol: str) -> bool:
        if self._check_operator(symbol):
            self._advance()
            return True
        return False

    def _consume(self, token_type: TokenType, expected: Optional[str] = None) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        raise create_unexpected_token_error(expected or token_type, self._peek())

    def _consume_operator(self, symbol: str, expected: Optional[str] = None) -> Token:
        if self._check_operator(symbol):
            return self._advance()
        raise create_unexpected_token_error(expected or f"'{symbol}'", self._peek())

    def _span_from(self, start_token: Token) -> SourceSpan:
        return SourceSpan(start_token.location, self._previous().location)

    def _eof_location(self) -> SourceLocation:
        last = self._last
        if last is None:
            return SourceLocation(self.filename, 1, 1, 0)
        return SourceLocation(last.location.filename, last.location.line,
                              last.location.column + len(last.lexeme),
                              last.location.offset + len(last.lexeme))


def parse_string(source: str, filename: str = "<string>",
                 operators: Optional[OperatorTable] = None) -> Program:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        operators: Table to read and extend; a fresh default table if omitted

    Raises:
        ParseError: If parsing fails
        LexerError: If lexing fails
    """
    from ..lexer import Lexer

    parser = Parser(Lexer(source, filename), operators, filename)
    return parser.parse()


def parse_file(filepath: str, operators: Optional[OperatorTable] = None) -> Program:
    """
    Convenience function to parse a source file.

    Raises:
        ParseError: If parsing fails
        LexerError: If lexing fails
        IOError: If file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath, operators)
