"""Tangent lines in mathematical space."""

from __future__ import annotations

import math
from numbers import Real

from .backend import ExpressionBackend
from .calculus import numerical_derivative
from .config import TANGENT_HALF_WIDTH
from .evaluator import evaluate
from .logging_config import get_logger
from .types import INVALID, Point, TangentSpec

logger = get_logger("tangent")


def tangent_at(
    expr: str,
    derivative: str | float | None,
    x0: float,
    backend: ExpressionBackend | None = None,
) -> TangentSpec | None:
    """Tangent to ``expr`` at ``x0``.

    ``derivative`` may be derivative text, a precomputed slope, or None for a
    central-difference slope. An undefined slope falls back to 0 and the
    result is marked ``degenerate``.

    Returns:
        TangentSpec, or None when f(x0) itself is undefined
    """
    y0 = evaluate(expr, x0, backend)
    if y0 is INVALID:
        return None

    if derivative is None:
        slope = numerical_derivative(expr, x0, backend=backend)
    elif isinstance(derivative, Real):
        slope = float(derivative) if math.isfinite(derivative) else INVALID
    else:
        slope = evaluate(derivative, x0, backend)

    degenerate = slope is INVALID
    if degenerate:
        logger.debug("Undefined slope for %r at x=%r, using 0", expr, x0)
        slope = 0.0
    return TangentSpec(
        point=float(x0),
        slope=slope,
        intercept=y0 - slope * x0,
        degenerate=degenerate,
    )


def points_on_segment(
    spec: TangentSpec, half_width: float = TANGENT_HALF_WIDTH
) -> tuple[Point, Point]:
    """Endpoints of the short local segment at ``point ± half_width``."""
    x1 = spec.point - half_width
    x2 = spec.point + half_width
    return (x1, spec.value_at(x1)), (x2, spec.value_at(x2))


def points_across(spec: TangentSpec, lo: float, hi: float) -> tuple[Point, Point]:
    """Endpoints of the tangent line across a whole visible range."""
    return (lo, spec.value_at(lo)), (hi, spec.value_at(hi))
