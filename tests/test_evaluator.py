"""Tests for the evaluator adapter and the expression backend."""

import copy
import math
import pickle
import unittest

import pytest

from turunan_pkg.backend import SympyBackend, clear_caches, get_default_backend
from turunan_pkg.evaluator import ExpressionEvaluator, evaluate, probe
from turunan_pkg.sampler import sample
from turunan_pkg.types import INVALID, Domain, ExpressionInvalidError, ParseError, is_invalid


class ExplodingBackend:
    """Backend that parses anything but fails every evaluation."""

    def __init__(self):
        self.calls = 0

    def parse(self, expr):
        return expr

    def evaluate(self, expr, bindings):
        self.calls += 1
        raise RuntimeError("backend exploded")

    def differentiate(self, ast, var):
        raise NotImplementedError

    def simplify(self, ast):
        return ast


class TestEvaluate(unittest.TestCase):
    """Test single-point evaluation."""

    def test_defined_points(self):
        self.assertEqual(evaluate("x^2", 3), 9.0)
        self.assertAlmostEqual(evaluate("sin(x)", math.pi / 2), 1.0)
        self.assertAlmostEqual(evaluate("e^x", 1), math.e)
        self.assertAlmostEqual(evaluate("sec(x)", 0), 1.0)
        self.assertEqual(evaluate("abs(x)", -2), 2.0)

    def test_undefined_points_are_invalid(self):
        self.assertIs(evaluate("1/x", 0), INVALID)
        self.assertIs(evaluate("sqrt(x)", -1), INVALID)
        self.assertIs(evaluate("log(x)", 0), INVALID)
        self.assertIs(evaluate("asin(x)", 2), INVALID)

    def test_overflow_is_invalid(self):
        self.assertIs(evaluate("exp(x)", 1000), INVALID)

    def test_parse_failure_is_invalid(self):
        self.assertIs(evaluate("sin(", 1), INVALID)
        self.assertIs(evaluate("", 1), INVALID)

    def test_power_tower_is_invalid(self):
        self.assertIs(evaluate("9^9^9^9", 1), INVALID)
        self.assertIs(evaluate("x^(9^9^9)", 1), INVALID)

    def test_invalid_is_not_zero(self):
        self.assertTrue(is_invalid(INVALID))
        self.assertFalse(is_invalid(0.0))
        self.assertNotEqual(INVALID, 0.0)

    def test_invalid_survives_copy_and_pickle(self):
        self.assertIs(copy.deepcopy(INVALID), INVALID)
        self.assertIs(pickle.loads(pickle.dumps(INVALID)), INVALID)

    def test_bound_evaluator(self):
        f = ExpressionEvaluator("x^3 - x")
        self.assertEqual(f(2), 6.0)
        self.assertIs(f(float("nan")), INVALID)


class TestInjectedBackend(unittest.TestCase):
    """A backend that raises must never make the core raise."""

    def test_evaluate_swallows_backend_errors(self):
        backend = ExplodingBackend()
        self.assertIs(evaluate("x", 1, backend), INVALID)
        self.assertEqual(backend.calls, 1)

    def test_sampler_drops_everything(self):
        samples = sample("x", "1", Domain(0, 1), resolution=10, backend=ExplodingBackend())
        self.assertEqual(len(samples), 0)

    def test_probe_fails(self):
        with self.assertRaises(ExpressionInvalidError) as ctx:
            probe("x", Domain(0, 1), ExplodingBackend())
        self.assertEqual(ctx.exception.code, "PROBE_FAILED")


class TestProbe:
    """Test whole-expression sanity checks."""

    def test_defined_at_probe_point(self):
        probe("x^2")

    def test_undefined_at_one_but_defined_elsewhere(self):
        # sqrt(-x) is undefined at x = 1 but fine on the negative half
        probe("sqrt(-x)", Domain(-10, 10))

    def test_undefined_at_one_without_domain(self):
        with pytest.raises(ExpressionInvalidError):
            probe("sqrt(-x)")


class TestSympyBackend:
    """Test the default backend directly."""

    def test_parse_error_type(self):
        with pytest.raises(ParseError):
            SympyBackend().parse("import os")

    def test_evaluate_accepts_parsed_expression(self):
        backend = SympyBackend()
        ast = backend.parse("x^2 + 1")
        assert backend.evaluate(ast, {"x": 2}) == 5.0

    def test_non_real_result_raises(self):
        with pytest.raises((TypeError, ValueError)):
            SympyBackend().evaluate("sqrt(-1 - x^2)", {"x": 0})

    def test_differentiate_only_x(self):
        backend = SympyBackend()
        with pytest.raises(ParseError):
            backend.differentiate(backend.parse("x"), "t")

    def test_default_backend_is_shared(self):
        assert get_default_backend() is get_default_backend()

    def test_clear_caches(self):
        evaluate("x^2", 1)
        clear_caches()
        assert evaluate("x^2", 2) == 4.0
