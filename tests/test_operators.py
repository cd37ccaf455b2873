"""
Test suite for the binary operator precedence table.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleo.parser.operators import (
    OperatorTable, NOT_AN_OPERATOR, DEFAULT_PRECEDENCES, ASSIGNMENT_PRECEDENCE,
)


class TestOperatorTable(unittest.TestCase):
    """Test cases for OperatorTable."""

    def test_defaults(self):
        table = OperatorTable.with_defaults()
        self.assertEqual(table.as_dict(), {"<": 10, "+": 20, "-": 20, "*": 40})
        self.assertEqual(table.as_dict(), dict(DEFAULT_PRECEDENCES))
        self.assertNotIn("=", table)

    def test_assignment_is_opt_in(self):
        table = OperatorTable.with_defaults(with_assignment=True)
        self.assertEqual(table.get("="), ASSIGNMENT_PRECEDENCE)
        self.assertEqual(len(table), 5)

    def test_unknown_symbol_is_sentinel(self):
        table = OperatorTable.with_defaults()
        for symbol in [")", ";", ",", "|", "x"]:
            with self.subTest(symbol=symbol):
                self.assertEqual(table.get(symbol), NOT_AN_OPERATOR)
        self.assertLess(NOT_AN_OPERATOR, 1)

    def test_set_and_overwrite(self):
        table = OperatorTable.with_defaults()
        table.set(">", 10)
        self.assertEqual(table.get(">"), 10)
        table.set(">", 15)
        self.assertEqual(table.get(">"), 15)
        self.assertIn(">", list(table))

    def test_rejects_bad_registrations(self):
        table = OperatorTable()
        with self.assertRaises(ValueError):
            table.set("==", 10)
        with self.assertRaises(ValueError):
            table.set("", 10)
        with self.assertRaises(ValueError):
            table.set("|", 0)
        with self.assertRaises(ValueError):
            table.set("|", -1)
        with self.assertRaises(ValueError):
            table.set("|", 2.5)
        with self.assertRaises(ValueError):
            table.set("|", True)
        self.assertEqual(len(table), 0)

    def test_tables_are_independent(self):
        first = OperatorTable.with_defaults()
        second = OperatorTable.with_defaults()
        first.set("|", 5)
        self.assertEqual(second.get("|"), NOT_AN_OPERATOR)
        self.assertEqual(DEFAULT_PRECEDENCES.get("|"), None)


if __name__ == '__main__':
    unittest.main()
