"""Tests for fixed-resolution sampling."""

import math

import pytest

from turunan_pkg.sampler import sample
from turunan_pkg.types import Domain, DomainError, SampleSet


class TestSample:
    """Test the sampler pass."""

    def test_sine_against_cosine(self):
        samples = sample("sin(x)", "cos(x)", (-math.pi, math.pi), resolution=100)
        assert isinstance(samples, SampleSet)
        assert len(samples) == 101
        for s in samples:
            assert s.y == pytest.approx(math.sin(s.x), abs=1e-12)
            assert s.dy == pytest.approx(math.cos(s.x), abs=1e-6)

    def test_numeric_derivative_when_none_supplied(self):
        samples = sample("sin(x)", None, (-math.pi, math.pi), resolution=50)
        for s in samples:
            assert s.dy == pytest.approx(math.cos(s.x), abs=1e-6)

    def test_grid_endpoints_and_order(self):
        samples = sample("x", "1", Domain(-2, 2), resolution=8)
        assert samples.xs[0] == -2.0
        assert samples.xs[-1] == pytest.approx(2.0)
        assert samples.xs == sorted(samples.xs)

    def test_idempotent(self):
        first = sample("x^2 * sin(x)", None, (-3, 3), resolution=40)
        second = sample("x^2 * sin(x)", None, (-3, 3), resolution=40)
        assert first == second

    def test_pole_dropped(self):
        samples = sample("1/x", "-1/x^2", (-1, 1), resolution=4, ceiling=None)
        assert 0.0 not in samples.xs
        assert len(samples) == 4
        assert all(math.isfinite(y) for y in samples.ys)

    def test_display_ceiling(self):
        samples = sample("1/x", "-1/x^2", (-1, 1), resolution=1000)
        assert len(samples) < 1001
        assert all(abs(y) <= 100 for y in samples.ys)

    def test_ceiling_disabled(self):
        samples = sample("x^3", "3*x^2", (-10, 10), resolution=20, ceiling=0)
        assert max(samples.ys) == pytest.approx(1000.0)

    def test_undefined_derivative_defaults(self):
        samples = sample("sqrt(x)", "1/(2*sqrt(x))", (0, 1), resolution=4)
        first = samples[0]
        assert first.x == 0.0
        assert first.y == 0.0
        assert first.dy == 0.0
        assert first.dy_valid is False
        assert all(s.dy_valid for s in samples[1:])

    def test_half_defined_function(self):
        samples = sample("log(x)", "1/x", (-1, 1), resolution=10)
        assert all(x > 0 for x in samples.xs)

    def test_degenerate_domain(self):
        with pytest.raises(DomainError):
            sample("x", None, (1, 1))

    def test_prefix_and_dicts(self):
        samples = sample("x", "1", (0, 1), resolution=4)
        head = samples.prefix(2)
        assert len(head) == 2
        assert head.expression == "x"
        assert len(samples.prefix(99)) == 5
        assert samples.to_dicts()[0] == {"x": 0.0, "y": 0.0, "dy": 1.0, "dy_valid": True}
