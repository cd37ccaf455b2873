#!/usr/bin/env python3
"""
Main test runner for the Kaleo front end.

Runs a quick end-to-end pipeline check, then the unittest suites under tests/.
"""

import io
import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def check_pipeline():
    """Parse and evaluate a small program through a session."""

    print("Kaleo Test Suite")
    print("=" * 60)

    try:
        from kaleo.parser import ParseSession
        from kaleo.backend import Evaluator
        print("All modules imported successfully")
    except ImportError as e:
        print(f"Failed to import kaleo modules: {e}")
        return False

    print("Testing parse + evaluate pipeline...")
    source = """
    # Logical not and a low-precedence sequencing operator
    def unary!(v) if v then 0 else 1;
    def binary : 1 (x y) y;

    def fib(n) if n < 3 then 1 else fib(n-1) + fib(n-2);
    extern putchard(c);
    putchard(75) : fib(10);
    """

    try:
        session = ParseSession()
        program = session.parse(source)
        print(f"  Parsed {len(program)} top-level items")

        output = io.StringIO()
        results = Evaluator(output=output).run(program)
        print(f"  Last expression evaluated to {results[-1]!r}")
        if results[-1] != 55.0 or output.getvalue() != "K":
            print("  Unexpected result")
            return False
    except Exception as e:
        print(f"Pipeline check FAILED: {e}")
        import traceback
        traceback.print_exc()
        return False

    print("Pipeline check PASSED")
    print()
    return True


def run_all_tests():
    """Discover and run every suite in tests/."""
    if not check_pipeline():
        return False

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
