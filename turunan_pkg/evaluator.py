"""Expression evaluator adapter.

Wraps the backend so that a single evaluation never raises: every failure
(parse error, sqrt of a negative, log of zero, division by zero, overflow,
complex or non-finite result) comes back as ``INVALID``.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from .backend import ExpressionBackend, get_default_backend
from .config import PROBE_COUNT, PROBE_POINT, VARIABLE_NAME
from .logging_config import get_logger, safe_log
from .types import (
    INVALID,
    Domain,
    ExpressionInvalidError,
    MaybeReal,
    ParseError,
    ValidationError,
)

logger = get_logger("evaluator")

SYNTAX_MESSAGE = "Invalid function. Please check your syntax."
PROBE_MESSAGE = "Warning: Function may be invalid"


def evaluate(
    expr: Any, x: float, backend: ExpressionBackend | None = None
) -> MaybeReal:
    """Evaluate ``expr`` at ``x``.

    Args:
        expr: Function text (or an object the backend understands)
        x: Point to evaluate at
        backend: Expression backend (default: shared SympyBackend)

    Returns:
        A finite float, or INVALID
    """
    backend = backend or get_default_backend()
    try:
        value = float(backend.evaluate(expr, {VARIABLE_NAME: float(x)}))
    except Exception as e:
        if logger.isEnabledFor(logging.DEBUG):
            safe_log(
                "evaluator",
                "debug",
                "Evaluation failed: %s",
                e,
                extra={"expression": expr, "x": x},
            )
        return INVALID
    if not math.isfinite(value):
        return INVALID
    return value


class ExpressionEvaluator:
    """Callable bound to one expression: ``ExpressionEvaluator("x^2")(3) == 9.0``."""

    def __init__(self, expression: Any, backend: ExpressionBackend | None = None):
        self.expression = expression
        self.backend = backend or get_default_backend()

    def __call__(self, x: float) -> MaybeReal:
        return evaluate(self.expression, x, self.backend)

    def __repr__(self) -> str:
        return f"ExpressionEvaluator({self.expression!r})"


def _probe_points(domain: Domain | None) -> list[float]:
    points = [PROBE_POINT]
    if domain is not None and PROBE_COUNT > 0:
        step = domain.width / (PROBE_COUNT + 1)
        points.extend(domain.x_min + i * step for i in range(1, PROBE_COUNT + 1))
    return points


def probe(
    expr: str,
    domain: Domain | None = None,
    backend: ExpressionBackend | None = None,
) -> None:
    """Sanity-check a whole expression before it is sampled.

    The expression must parse, and must evaluate to a real number at the
    probe point or at one of ``PROBE_COUNT`` evenly spaced points inside
    ``domain``.

    Raises:
        ExpressionInvalidError: With code PARSE_FAILED or PROBE_FAILED
    """
    backend = backend or get_default_backend()
    try:
        backend.parse(expr)
    except (ParseError, ValidationError) as e:
        logger.warning("Rejected expression %r: %s", expr, e)
        raise ExpressionInvalidError(SYNTAX_MESSAGE, "PARSE_FAILED") from e
    except Exception as e:
        logger.warning("Backend failed to parse %r", expr, exc_info=True)
        raise ExpressionInvalidError(SYNTAX_MESSAGE, "PARSE_FAILED") from e

    for point in _probe_points(domain):
        if evaluate(expr, point, backend) is not INVALID:
            return
    logger.warning("Expression %r is undefined at every probe point", expr)
    raise ExpressionInvalidError(PROBE_MESSAGE, "PROBE_FAILED")
