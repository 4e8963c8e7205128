"""Test that API functions return typed dataclasses."""

from turunan_pkg.api import (
    derivative,
    evaluate_at,
    plot,
    sample_function,
    tangent,
    validate_function,
)
from turunan_pkg.types import (
    DerivativeResult,
    EvalResult,
    PlotResult,
    SampleResult,
    TangentResult,
)


class TestAPITypedReturns:
    """Test that all API functions return typed dataclasses."""

    def test_evaluate_at(self):
        result = evaluate_at("x^2", 3)
        assert isinstance(result, EvalResult)
        assert result.ok is True
        assert result.value == 9.0
        assert result.to_dict() == {"ok": True, "x": 3, "value": 9.0}

    def test_evaluate_at_undefined(self):
        result = evaluate_at("1/x", 0)
        assert isinstance(result, EvalResult)
        assert result.ok is False
        assert result.value is None
        assert "undefined" in result.error

    def test_derivative(self):
        result = derivative("sin(x)")
        assert isinstance(result, DerivativeResult)
        assert result.derivative == "cos(x)"
        assert result.method == "symbolic"

    def test_derivative_bad_mode(self):
        result = derivative("sin(x)", mode="guess")
        assert isinstance(result, DerivativeResult)
        assert result.ok is False

    def test_validate_function(self):
        assert validate_function("x^2") == (True, None)
        ok, error = validate_function("sin(")
        assert ok is False
        assert error == "Invalid function. Please check your syntax."
        ok, error = validate_function("x", (2, 2))
        assert ok is False

    def test_sample_function(self):
        result = sample_function("x^2", (-1, 1), resolution=4)
        assert isinstance(result, SampleResult)
        assert result.ok is True
        assert [p["y"] for p in result.points] == [1.0, 0.25, 0.0, 0.25, 1.0]
        assert result.derivative == "2*x"
        assert result.dropped == 0
        data = result.to_dict()
        assert data["count"] == 5
        assert data["domain"] == [-1.0, 1.0]

    def test_sample_function_counts_dropped(self):
        result = sample_function("1/x", (-1, 1), resolution=4, ceiling=None)
        assert result.ok is True
        assert result.dropped == 1

    def test_sample_function_error(self):
        result = sample_function("sqrt(-1 - x^2)", (-1, 1))
        assert isinstance(result, SampleResult)
        assert result.ok is False
        assert result.to_dict() == {"ok": False, "error": "Warning: Function may be invalid"}

    def test_sample_function_bad_resolution(self):
        result = sample_function("x", (-1, 1), resolution=0)
        assert result.ok is False

    def test_tangent(self):
        result = tangent("x^2", 1, "2*x")
        assert isinstance(result, TangentResult)
        assert (result.slope, result.intercept) == (2.0, -1.0)
        assert result.to_dict()["segment"] == [[-1.0, -3.0], [3.0, 5.0]]

    def test_tangent_undefined(self):
        result = tangent("log(x)", -1)
        assert isinstance(result, TangentResult)
        assert result.ok is False
        assert "error" in result.to_dict()

    def test_plot_ascii(self):
        result = plot("sin(x)", ascii=True)
        assert isinstance(result, PlotResult)
        assert result.ok is True
        assert result.result.startswith("ASCII plot:")

    def test_plot_error(self):
        result = plot("sin(", ascii=True)
        assert isinstance(result, PlotResult)
        assert result.ok is False
        result = plot("x", domain=(1, -1), ascii=True)
        assert result.ok is False
