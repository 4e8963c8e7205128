"""Unit tests for calculus operations."""

import math
import unittest

from turunan_pkg.calculus import (
    numerical_derivative,
    resolve_derivative,
    symbolic_derivative,
)
from turunan_pkg.evaluator import SYNTAX_MESSAGE
from turunan_pkg.types import INVALID


class TestNumericalDerivative(unittest.TestCase):
    """Test central differences."""

    def test_square(self):
        self.assertAlmostEqual(numerical_derivative("x^2", 3), 6.0, delta=1e-3)

    def test_sine(self):
        for x in (-2.0, 0.0, 0.5, 3.0):
            self.assertAlmostEqual(numerical_derivative("sin(x)", x), math.cos(x), delta=1e-6)

    def test_custom_step(self):
        self.assertAlmostEqual(numerical_derivative("x^3", 1, h=1e-3), 3.0, delta=1e-5)

    def test_undefined_neighbourhood(self):
        self.assertIs(numerical_derivative("1/x", 0), INVALID)
        self.assertIs(numerical_derivative("sqrt(x)", 0), INVALID)

    def test_abs_corner_is_zero_not_invalid(self):
        self.assertEqual(numerical_derivative("abs(x)", 0), 0.0)


class TestSymbolicDerivative(unittest.TestCase):
    """Test symbolic differentiation."""

    def test_trig(self):
        result = symbolic_derivative("sin(x)")
        self.assertTrue(result.ok)
        self.assertEqual(result.derivative, "cos(x)")
        self.assertEqual(result.method, "symbolic")

    def test_polynomial(self):
        result = symbolic_derivative("x^2")
        self.assertEqual(result.derivative, "2*x")

    def test_abs_gives_sign(self):
        result = symbolic_derivative("abs(x)")
        self.assertTrue(result.ok)
        self.assertEqual(result.derivative, "sign(x)")

    def test_syntax_error(self):
        result = symbolic_derivative("x +* 2")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, SYNTAX_MESSAGE)


class TestResolveDerivative(unittest.TestCase):
    """Test choosing the companion derivative."""

    def test_supplied_wins(self):
        result = resolve_derivative("x^2", supplied=" 2*x ")
        self.assertEqual((result.derivative, result.method), ("2*x", "supplied"))

    def test_auto_is_symbolic(self):
        result = resolve_derivative("x^3")
        self.assertEqual(result.method, "symbolic")
        self.assertEqual(result.derivative, "3*x**2")

    def test_numeric_mode(self):
        result = resolve_derivative("x^3", mode="numeric")
        self.assertTrue(result.ok)
        self.assertIsNone(result.derivative)
        self.assertEqual(result.method, "numeric")

    def test_auto_falls_back_to_numeric(self):
        result = resolve_derivative("x +* 2", mode="auto")
        self.assertTrue(result.ok)
        self.assertEqual(result.method, "numeric")

    def test_symbolic_failure_is_reported(self):
        result = resolve_derivative("x +* 2", mode="symbolic")
        self.assertFalse(result.ok)
        self.assertEqual(result.to_dict(), {"ok": False, "error": SYNTAX_MESSAGE})


if __name__ == "__main__":
    unittest.main()
