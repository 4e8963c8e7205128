"""Test error codes raised and returned by various functions."""

import unittest

from turunan_pkg.calculus import resolve_derivative
from turunan_pkg.evaluator import PROBE_MESSAGE, SYNTAX_MESSAGE, probe
from turunan_pkg.parser import preprocess
from turunan_pkg.presets import get_preset
from turunan_pkg.sampler import sample
from turunan_pkg.types import (
    Domain,
    DomainError,
    ExpressionInvalidError,
    ValidationError,
)


class TestErrorCodes(unittest.TestCase):
    """Test that functions report appropriate error codes."""

    def test_empty_input_error_code(self):
        with self.assertRaises(ValidationError) as ctx:
            preprocess("   ")
        self.assertEqual(ctx.exception.code, "EMPTY_INPUT")

    def test_too_long_error_code(self):
        with self.assertRaises(ValidationError) as ctx:
            preprocess("x" * 10001)
        self.assertEqual(ctx.exception.code, "TOO_LONG")
        self.assertIn("too long", str(ctx.exception).lower())

    def test_forbidden_token_error_code(self):
        with self.assertRaises(ValidationError) as ctx:
            preprocess("__import__('os')")
        self.assertEqual(ctx.exception.code, "FORBIDDEN_TOKEN")
        self.assertIn("forbidden", str(ctx.exception).lower())

    def test_unbalanced_error_code(self):
        with self.assertRaises(ValidationError) as ctx:
            preprocess("sin(x")
        self.assertEqual(ctx.exception.code, "UNBALANCED")

    def test_probe_parse_failure(self):
        with self.assertRaises(ExpressionInvalidError) as ctx:
            probe("sin(")
        self.assertEqual(ctx.exception.code, "PARSE_FAILED")
        self.assertEqual(ctx.exception.message, SYNTAX_MESSAGE)

    def test_probe_nowhere_defined(self):
        with self.assertRaises(ExpressionInvalidError) as ctx:
            probe("log(-1 - x^2)", Domain(-10, 10))
        self.assertEqual(ctx.exception.code, "PROBE_FAILED")
        self.assertEqual(ctx.exception.message, PROBE_MESSAGE)

    def test_bad_resolution(self):
        for resolution in (0, -5, 2.5, True):
            with self.assertRaises(ValidationError) as ctx:
                sample("x", None, (-1, 1), resolution)
            self.assertEqual(ctx.exception.code, "INVALID_RESOLUTION")

    def test_degenerate_domain(self):
        for lo, hi in ((1, 1), (2, -2), (0, float("inf")), (float("nan"), 1)):
            with self.assertRaises(DomainError) as ctx:
                Domain(lo, hi)
            self.assertEqual(ctx.exception.code, "DEGENERATE_DOMAIN")

    def test_unknown_mode(self):
        with self.assertRaises(ValidationError) as ctx:
            resolve_derivative("x^2", mode="guess")
        self.assertEqual(ctx.exception.code, "INVALID_MODE")

    def test_unknown_preset(self):
        with self.assertRaises(ValidationError) as ctx:
            get_preset("power")
        self.assertEqual(ctx.exception.code, "UNKNOWN_PRESET")
        with self.assertRaises(ValidationError):
            get_preset("trig", 7)


if __name__ == "__main__":
    unittest.main()
