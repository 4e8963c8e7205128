"""Public API for Turunan - returns structured objects without side effects."""

from __future__ import annotations

from .backend import ExpressionBackend
from .calculus import resolve_derivative
from .config import DERIVATIVE_MODE, DISPLAY_CEILING, RESOLUTION, TANGENT_HALF_WIDTH
from .evaluator import evaluate, probe
from .logging_config import get_logger
from .sampler import sample
from .tangent import points_on_segment, tangent_at
from .types import (
    INVALID,
    DerivativeResult,
    Domain,
    EvalResult,
    ExpressionInvalidError,
    PlotResult,
    SampleResult,
    TangentResult,
    ValidationError,
)

logger = get_logger("api")


def evaluate_at(
    expression: str, x: float, backend: ExpressionBackend | None = None
) -> EvalResult:
    """Evaluate a function of x at one point.

    Example:
        >>> from turunan_pkg.api import evaluate_at
        >>> evaluate_at("x^2", 3).value
        9.0
        >>> evaluate_at("1/x", 0).ok
        False
    """
    value = evaluate(expression, x, backend)
    if value is INVALID:
        return EvalResult(ok=False, x=x, error=f"Function is undefined at x = {x}")
    return EvalResult(ok=True, x=x, value=value)


def derivative(
    expression: str,
    supplied: str | None = None,
    mode: str = DERIVATIVE_MODE,
    backend: ExpressionBackend | None = None,
) -> DerivativeResult:
    """Find the derivative that would be plotted for ``expression``.

    Example:
        >>> from turunan_pkg.api import derivative
        >>> derivative("sin(x)").derivative
        'cos(x)'
        >>> derivative("x^3", mode="numeric").method
        'numeric'
    """
    try:
        return resolve_derivative(expression, supplied, mode, backend)
    except ValidationError as e:
        logger.info("Derivative request rejected: %s", e.message)
        return DerivativeResult(ok=False, error=e.message)


def validate_function(
    expression: str,
    domain: tuple[float, float] | None = None,
    backend: ExpressionBackend | None = None,
) -> tuple[bool, str | None]:
    """Check that an expression parses and is defined somewhere.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        probe(expression, Domain.of(domain) if domain else None, backend)
        return True, None
    except ExpressionInvalidError as e:
        return False, e.message
    except ValidationError as e:
        return False, e.message


def sample_function(
    expression: str,
    domain: tuple[float, float],
    supplied_derivative: str | None = None,
    resolution: int = RESOLUTION,
    ceiling: float | None = DISPLAY_CEILING,
    mode: str = DERIVATIVE_MODE,
    backend: ExpressionBackend | None = None,
) -> SampleResult:
    """Sample a function and its derivative over a domain.

    Example:
        >>> from turunan_pkg.api import sample_function
        >>> result = sample_function("x^2", (-1, 1), resolution=4)
        >>> [p["y"] for p in result.points]
        [1.0, 0.25, 0.0, 0.25, 1.0]
    """
    try:
        dom = Domain.of(domain)
        probe(expression, dom, backend)
        resolved = resolve_derivative(expression, supplied_derivative, mode, backend)
        if not resolved.ok:
            return SampleResult(ok=False, error=resolved.error)
        samples = sample(
            expression, resolved.derivative, dom, resolution, ceiling, backend
        )
    except (ExpressionInvalidError, ValidationError) as e:
        return SampleResult(ok=False, error=e.message)
    return SampleResult(
        ok=True,
        expression=expression,
        derivative=resolved.derivative,
        domain=dom.as_tuple(),
        points=samples.to_dicts(),
        dropped=resolution + 1 - len(samples),
    )


def tangent(
    expression: str,
    x0: float,
    supplied_derivative: str | float | None = None,
    half_width: float = TANGENT_HALF_WIDTH,
    backend: ExpressionBackend | None = None,
) -> TangentResult:
    """Tangent line of ``expression`` at ``x0``.

    Example:
        >>> from turunan_pkg.api import tangent
        >>> result = tangent("x^2", 1, "2*x")
        >>> (result.slope, result.intercept)
        (2.0, -1.0)
    """
    spec = tangent_at(expression, supplied_derivative, x0, backend)
    if spec is None:
        return TangentResult(ok=False, error=f"Function is undefined at x = {x0}")
    return TangentResult(
        ok=True,
        point=spec.point,
        slope=spec.slope,
        intercept=spec.intercept,
        degenerate=spec.degenerate,
        segment=points_on_segment(spec, half_width),
    )


def plot(
    expression: str,
    domain: tuple[float, float] = (-10, 10),
    supplied_derivative: str | None = None,
    tangent_at_x: float | None = None,
    output: str | None = None,
    ascii: bool = False,
) -> PlotResult:
    """Render a function, its derivative and an optional tangent.

    Args:
        expression: Function text
        domain: (min, max) to plot over
        supplied_derivative: Derivative text (default: derived automatically)
        tangent_at_x: Draw the tangent at this x
        output: PNG path (default: a temporary file)
        ascii: Return an ASCII plot instead of writing a PNG

    Returns:
        PlotResult with the file path or ASCII text
    """
    from .plotting import plot_session
    from .session import VisualizerSession

    session = VisualizerSession()
    if not session.set_domain(*domain):
        return PlotResult(ok=False, error=session.message)
    if not session.set_expression(expression, supplied_derivative):
        return PlotResult(ok=False, error=session.message)
    if tangent_at_x is not None:
        session.highlight_at(tangent_at_x)
    return plot_session(session, output=output, ascii=ascii)
