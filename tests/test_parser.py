"""
Test suite for the Kaleo parser.

Tests cover:
- Top-level items (def, extern, bare expressions)
- Precedence climbing and associativity
- Prefix operators and user-defined binary operators
- if/then/else, for/in and var/in
- Declaration checks, syntax errors and source spans
- Parse sessions and operator table isolation
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleo.lexer import tokenize_string
from kaleo.parser import (
    Parser, ParseSession, OperatorTable, parse_string, ParseError, DeclarationError,
    Program, Prototype, Function, NumberLiteral, VariableReference, UnaryOp, BinaryOp,
    Call, Conditional, Loop, LocalBindings, BinaryOperator, UnaryOperator,
    ANONYMOUS_FUNCTION_NAME, ASTNodeType,
)
from kaleo.parser.ast_nodes import walk


def num(value):
    return NumberLiteral(float(value))


def var(name):
    return VariableReference(name)


def anon(body):
    return Function(Prototype(ANONYMOUS_FUNCTION_NAME, []), body)


class ParserTestCase(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.session = ParseSession()

    def _parse(self, code: str) -> Program:
        return self.session.parse(code)

    def _expr(self, code: str):
        """Parse a single bare expression and return its body."""
        program = self._parse(code)
        self.assertEqual(len(program), 1)
        self.assertTrue(program[0].is_anonymous)
        return program[0].body


class TestTopLevel(ParserTestCase):

    def test_extern(self):
        program = self._parse("extern sin(a);")
        self.assertEqual(program.items, [Prototype("sin", ["a"])])
        self.assertIsNone(program[0].operator)

    def test_definition_with_call(self):
        program = self._parse("def foo(x y) x+foo(y, 4.0);")
        self.assertEqual(len(program), 1)
        self.assertEqual(
            program[0],
            Function(
                Prototype("foo", ["x", "y"]),
                BinaryOp("+", var("x"), Call("foo", [var("y"), num(4)])),
            ),
        )

    def test_trailing_expression_becomes_anonymous(self):
        program = self._parse("def foo(x y) x+y y;")
        self.assertEqual(program.items, [
            Function(Prototype("foo", ["x", "y"]), BinaryOp("+", var("x"), var("y"))),
            anon(var("y")),
        ])
        self.assertEqual(program[1].name, ANONYMOUS_FUNCTION_NAME)
        self.assertEqual(program[1].prototype.params, [])

    def test_unmatched_paren_fails(self):
        with self.assertRaises(ParseError):
            self._parse("def foo(x y) x+y );")

    def test_empty_and_separators(self):
        self.assertEqual(len(self._parse("")), 0)
        self.assertEqual(len(self._parse(";;; # nothing\n;")), 0)

    def test_items_in_order(self):
        program = self._parse("extern cos(x); def f() 1; f(); 2")
        self.assertEqual(
            [item.node_type for item in program],
            [ASTNodeType.PROTOTYPE, ASTNodeType.FUNCTION, ASTNodeType.FUNCTION, ASTNodeType.FUNCTION],
        )
        self.assertEqual(program[1].prototype.params, [])
        self.assertEqual(program[2].body, Call("f", []))

    def test_parser_accepts_token_list(self):
        program = Parser(tokenize_string("1+2")).parse()
        self.assertEqual(program.items, [anon(BinaryOp("+", num(1), num(2)))])


class TestExpressions(ParserTestCase):

    def test_precedence(self):
        self.assertEqual(
            self._expr("1+2*3"),
            BinaryOp("+", num(1), BinaryOp("*", num(2), num(3))),
        )
        self.assertEqual(
            self._expr("1*2+3"),
            BinaryOp("+", BinaryOp("*", num(1), num(2)), num(3)),
        )

    def test_left_associative(self):
        self.assertEqual(
            self._expr("1-2-3"),
            BinaryOp("-", BinaryOp("-", num(1), num(2)), num(3)),
        )

    def test_mixed_levels(self):
        self.assertEqual(
            self._expr("a<b+c*d-e"),
            BinaryOp(
                "<",
                var("a"),
                BinaryOp("-", BinaryOp("+", var("b"), BinaryOp("*", var("c"), var("d"))), var("e")),
            ),
        )

    def test_grouping(self):
        self.assertEqual(
            self._expr("(1+2)*3"),
            BinaryOp("*", BinaryOp("+", num(1), num(2)), num(3)),
        )

    def test_prefix_operators(self):
        self.assertEqual(self._expr("!-x"), UnaryOp("!", UnaryOp("-", var("x"))))
        self.assertEqual(
            self._expr("-x*y"),
            BinaryOp("*", UnaryOp("-", var("x")), var("y")),
        )

    def test_call_arguments(self):
        self.assertEqual(self._expr("f()"), Call("f", []))
        self.assertEqual(
            self._expr("f(1, g(x), a+b)"),
            Call("f", [num(1), Call("g", [var("x")]), BinaryOp("+", var("a"), var("b"))]),
        )

    def test_conditional(self):
        self.assertEqual(
            self._expr("if x < 3 then 1 else 2"),
            Conditional(BinaryOp("<", var("x"), num(3)), num(1), num(2)),
        )

    def test_loop_with_step(self):
        self.assertEqual(
            self._expr("for i = 1, i < n, 2 in putchard(i)"),
            Loop("i", num(1), BinaryOp("<", var("i"), var("n")), num(2), Call("putchard", [var("i")])),
        )

    def test_loop_without_step(self):
        loop = self._expr("for i = 0, i < 10 in i")
        self.assertIsInstance(loop, Loop)
        self.assertIsNone(loop.step)
        self.assertEqual(loop.body, var("i"))

    def test_local_bindings(self):
        self.assertEqual(
            self._expr("var a = 1, b in a + b"),
            LocalBindings([("a", num(1)), ("b", None)], BinaryOp("+", var("a"), var("b"))),
        )

    def test_assignment_when_enabled(self):
        session = ParseSession(with_assignment=True)
        program = session.parse("var a in a = 3 + 4")
        self.assertEqual(
            program[0].body,
            LocalBindings([("a", None)], BinaryOp("=", var("a"), BinaryOp("+", num(3), num(4)))),
        )

    def test_assignment_is_not_infix_by_default(self):
        # '=' is unregistered: the first expression stops at 'x' and '=' then
        # starts a new one as a prefix opcode
        program = self._parse("x = 3")
        self.assertEqual(program.items, [anon(var("x")), anon(UnaryOp("=", num(3)))])


class TestUserOperators(ParserTestCase):

    def test_binary_definition_registers_precedence(self):
        program = self._parse("def binary> 10 (LHS RHS) RHS < LHS; 1 > 2 + 3")
        prototype = program[0].prototype
        self.assertEqual(prototype.name, "binary>")
        self.assertEqual(prototype.operator, BinaryOperator(">", 10))
        self.assertTrue(prototype.is_binary_op)
        self.assertEqual(self.session.operators.get(">"), 10)
        self.assertEqual(
            program[1].body,
            BinaryOp(">", num(1), BinaryOp("+", num(2), num(3))),
        )

    def test_registration_persists_across_calls(self):
        self._parse("def binary> 10 (LHS RHS) RHS < LHS;")
        program = self._parse("a * b > c")
        self.assertEqual(
            program[0].body,
            BinaryOp(">", BinaryOp("*", var("a"), var("b")), var("c")),
        )

    def test_unregistered_operator_terminates_expression(self):
        program = self._parse("a | b")
        self.assertEqual(program.items, [anon(var("a")), anon(UnaryOp("|", var("b")))])

    def test_registration_happens_after_body(self):
        program = self._parse("def binary| 5 (a b) a | b")
        self.assertEqual(program[0].body, var("a"))
        self.assertEqual(program[1], anon(UnaryOp("|", var("b"))))
        self.assertEqual(self.session.operators.get("|"), 5)

    def test_default_binary_precedence(self):
        self._parse("def binary| (a b) a")
        self.assertEqual(self.session.operators.get("|"), 30)

    def test_precedence_is_truncated(self):
        program = self._parse("def binary| 7.9 (a b) a")
        self.assertEqual(program[0].prototype.operator.precedence, 7)
        self.assertEqual(self.session.operators.get("|"), 7)

    def test_precedence_bounds(self):
        self._parse("def binary& 1 (a b) a")
        self._parse("def binary| 100 (a b) a")
        self.assertEqual(self.session.operators.get("|"), 100)
        for source in ["def binary^ 0 (a b) a", "def binary^ 101 (a b) a"]:
            with self.subTest(source=source):
                with self.assertRaises(DeclarationError) as ctx:
                    self._parse(source)
                self.assertEqual(ctx.exception.code, "P014")
        self.assertNotIn("^", self.session.operators)

    def test_extern_does_not_register(self):
        program = self._parse("extern binary| 5 (a b)")
        self.assertEqual(program[0].operator, BinaryOperator("|", 5))
        self.assertNotIn("|", self.session.operators)

    def test_unary_definition(self):
        program = self._parse("def unary!(v) if v then 0 else 1; !x")
        prototype = program[0].prototype
        self.assertEqual(prototype.name, "unary!")
        self.assertEqual(prototype.operator, UnaryOperator("!"))
        self.assertTrue(prototype.is_unary_op)
        self.assertEqual(program[1].body, UnaryOp("!", var("x")))

    def test_overload_arity(self):
        cases = [
            "def unary!(a b) a",
            "def unary!() 1",
            "def binary| (a) a",
            "def binary| 5 (a b c) a",
        ]
        for source in cases:
            with self.subTest(source=source):
                with self.assertRaises(DeclarationError) as ctx:
                    self._parse(source)
                self.assertEqual(ctx.exception.code, "P013")

    def test_sessions_are_isolated(self):
        other = ParseSession()
        self.session.parse("def binary| 5 (a b) a")
        self.assertEqual(len(other.parse("a | b")), 2)
        self.assertEqual(len(self.session.parse("a | b")), 1)

    def test_parse_string_with_shared_table(self):
        table = OperatorTable.with_defaults()
        parse_string("def binary% 40 (a b) a", operators=table)
        program = parse_string("x % y", operators=table)
        self.assertEqual(program[0].body, BinaryOp("%", var("x"), var("y")))


class TestErrors(ParserTestCase):

    def test_bad_prototype_name(self):
        with self.assertRaises(ParseError) as ctx:
            self._parse("def 1(x) x")
        self.assertEqual(ctx.exception.code, "P001")
        self.assertIn("function name", ctx.exception.message)

    def test_unexpected_end_of_input(self):
        for source in ["def foo(x", "if x then 1", "1 +", "extern"]:
            with self.subTest(source=source):
                with self.assertRaises(ParseError) as ctx:
                    self._parse(source)
                self.assertEqual(ctx.exception.code, "P010")

    def test_bad_argument_separator(self):
        with self.assertRaises(ParseError) as ctx:
            self._parse("foo(1 2)")
        self.assertEqual(ctx.exception.code, "P001")
        self.assertIn("')' or ','", ctx.exception.message)

    def test_unknown_token_in_expression(self):
        with self.assertRaises(ParseError) as ctx:
            self._parse("then")
        self.assertEqual(ctx.exception.code, "P005")
        self.assertIn("Unknown token", str(ctx.exception))

    def test_missing_in(self):
        with self.assertRaises(ParseError):
            self._parse("for i = 1, 2 do")
        with self.assertRaises(ParseError):
            self._parse("var a = 1 a")

    def test_session_usable_after_error(self):
        with self.assertRaises(ParseError):
            self._parse("def f(x) x; def g(")
        program = self._parse("def g(y) y")
        self.assertEqual(program[0].name, "g")
        self.assertEqual(self.session.calls, 2)

    def test_error_location(self):
        with self.assertRaises(ParseError) as ctx:
            self._parse("def f(x)\n  foo(1 2)")
        self.assertEqual(ctx.exception.location.line, 2)
        self.assertEqual(ctx.exception.location.column, 9)


class TestSpans(ParserTestCase):

    def test_spans_point_at_source(self):
        program = self._parse("def foo(x) x + 1")
        function = program[0]
        self.assertEqual((function.span.start.line, function.span.start.column), (1, 1))
        self.assertEqual(function.prototype.span.start.column, 5)
        self.assertEqual(function.body.span.start.column, 12)
        self.assertEqual(function.body.span.end.column, 16)
        self.assertEqual(function.body.right.span.start.column, 16)

    def test_spans_ignored_by_equality(self):
        parsed = self._expr("1 + 2")
        self.assertIsNotNone(parsed.span)
        self.assertEqual(parsed, BinaryOp("+", num(1), num(2)))

    def test_walk_preorder(self):
        program = self._parse("def f(x) if x then g(x) else 1")
        self.assertEqual(
            [node.node_type for node in walk(program)],
            [
                ASTNodeType.PROGRAM, ASTNodeType.FUNCTION, ASTNodeType.PROTOTYPE,
                ASTNodeType.CONDITIONAL, ASTNodeType.VARIABLE_REFERENCE,
                ASTNodeType.CALL, ASTNodeType.VARIABLE_REFERENCE, ASTNodeType.NUMBER_LITERAL,
            ],
        )


class TestPackageExports(unittest.TestCase):

    def test_parser_package_exports_only_public_names(self):
        import kaleo.parser
        from kaleo.parser import ast_nodes

        for name in ["ABC", "abstractmethod", "dataclass", "field", "List", "Optional", "Enum"]:
            with self.subTest(name=name):
                self.assertFalse(hasattr(kaleo.parser, name))
        for name in ast_nodes.__all__:
            with self.subTest(name=name):
                self.assertIs(getattr(kaleo.parser, name), getattr(ast_nodes, name))


if __name__ == '__main__':
    unittest.main()
