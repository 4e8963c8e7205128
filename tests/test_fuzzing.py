"""Fuzzing tests: random input must never make the core raise."""

import math
import random
import string
import unittest

from turunan_pkg.evaluator import evaluate
from turunan_pkg.parser import preprocess
from turunan_pkg.session import VisualizerSession
from turunan_pkg.types import INVALID, ValidationError

ATOMS = ["x", "2", "0", "-1", "pi", "e", "0.5"]
FUNCTIONS = ["sin", "cos", "tan", "log", "sqrt", "exp", "asin", "abs", "sec"]
OPERATORS = ["+", "-", "*", "/", "^"]


def _random_expression(rng, depth=0):
    if depth > 3 or rng.random() < 0.3:
        return rng.choice(ATOMS)
    if rng.random() < 0.4:
        return f"{rng.choice(FUNCTIONS)}({_random_expression(rng, depth + 1)})"
    left = _random_expression(rng, depth + 1)
    right = _random_expression(rng, depth + 1)
    return f"({left}){rng.choice(OPERATORS)}({right})"


class TestParserFuzzing(unittest.TestCase):
    """Fuzz test parser with random inputs."""

    def test_random_strings(self):
        """Preprocessing either succeeds or raises ValidationError."""
        rng = random.Random(1234)
        for _ in range(200):
            random_str = "".join(rng.choices(string.printable, k=rng.randint(1, 80)))
            try:
                preprocess(random_str)
            except ValidationError:
                pass

    def test_malformed_expressions(self):
        for expr in ["(((", ")))", "x++", "x**", "*/x", "", "   ", "sin()", "^^"]:
            self.assertIs(evaluate(expr, 1.0), INVALID)


class TestEvaluatorFuzzing(unittest.TestCase):
    """Random well-formed expressions at random points."""

    def test_result_is_finite_or_invalid(self):
        rng = random.Random(42)
        for _ in range(150):
            expr = _random_expression(rng)
            x = rng.uniform(-20, 20)
            value = evaluate(expr, x)
            if value is not INVALID:
                self.assertIsInstance(value, float)
                self.assertTrue(math.isfinite(value), f"{expr} at {x} gave {value}")

    def test_session_never_raises(self):
        rng = random.Random(7)
        session = VisualizerSession(resolution=40)
        for _ in range(30):
            session.set_expression(_random_expression(rng))
            session.set_domain(rng.uniform(-30, 0), rng.uniform(-5, 30))
            session.wheel(rng.choice([-1, 1]))
            session.highlight_at(rng.uniform(-10, 10))
            session.frame()


if __name__ == "__main__":
    unittest.main()
