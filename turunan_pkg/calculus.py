"""Derivative operations: central differences and symbolic differentiation."""

from __future__ import annotations

import math
from typing import Any

from .backend import ExpressionBackend, get_default_backend
from .config import DERIVATIVE_MODE, DERIVATIVE_STEP, VARIABLE_NAME
from .evaluator import SYNTAX_MESSAGE, evaluate
from .logging_config import get_logger
from .types import INVALID, DerivativeResult, MaybeReal, ParseError, ValidationError

logger = get_logger("calculus")

DERIVATIVE_MODES = ("auto", "symbolic", "numeric")


def numerical_derivative(
    expr: Any,
    x: float,
    h: float = DERIVATIVE_STEP,
    backend: ExpressionBackend | None = None,
) -> MaybeReal:
    """Central-difference estimate of f'(x).

    Computes ``(f(x+h) - f(x-h)) / (2h)`` with a fixed step. Truncation error
    is O(h**2); the estimate is meaningless within ``2h`` of a point where f
    itself is undefined.

    Args:
        expr: Function text
        x: Point to differentiate at
        h: Step size (default: DERIVATIVE_STEP)
        backend: Expression backend

    Returns:
        A finite float, or INVALID if either side is undefined
    """
    forward = evaluate(expr, x + h, backend)
    if forward is INVALID:
        return INVALID
    backward = evaluate(expr, x - h, backend)
    if backward is INVALID:
        return INVALID
    slope = (forward - backward) / (2 * h)
    if not math.isfinite(slope):
        return INVALID
    return slope


def symbolic_derivative(
    expr: str, backend: ExpressionBackend | None = None
) -> DerivativeResult:
    """Differentiate an expression with respect to x and simplify the result.

    Args:
        expr: Function text (e.g., "x^2 * sin(x)")
        backend: Expression backend

    Returns:
        DerivativeResult with the simplified derivative text
    """
    backend = backend or get_default_backend()
    try:
        ast = backend.parse(expr)
        simplified = backend.simplify(backend.differentiate(ast, VARIABLE_NAME))
    except (ParseError, ValidationError) as e:
        logger.info("Cannot differentiate %r: %s", expr, e)
        return DerivativeResult(ok=False, error=SYNTAX_MESSAGE)
    except (ValueError, TypeError, AttributeError, NotImplementedError) as e:
        logger.info("Symbolic differentiation of %r failed: %s", expr, e)
        return DerivativeResult(ok=False, error=f"Differentiation error: {e}")
    except Exception as e:
        logger.error(f"Unexpected differentiation error: {e}", exc_info=True)
        return DerivativeResult(ok=False, error="Differentiation failed unexpectedly")

    # The derivative text is evaluated later, so it has to parse again
    text = str(simplified)
    try:
        backend.parse(text)
    except (ParseError, ValidationError) as e:
        logger.info("Simplified derivative %r is not plottable: %s", text, e)
        return DerivativeResult(
            ok=False, error=f"Derivative could not be simplified to a plottable form: {text}"
        )
    return DerivativeResult(ok=True, derivative=text, method="symbolic")


def resolve_derivative(
    expr: str,
    supplied: str | None = None,
    mode: str = DERIVATIVE_MODE,
    backend: ExpressionBackend | None = None,
) -> DerivativeResult:
    """Choose the companion derivative used for sampling.

    A supplied derivative always wins. Otherwise ``"auto"`` and
    ``"symbolic"`` ask the backend; ``"numeric"``, or a symbolic failure in
    ``"auto"`` mode, yields ``derivative=None`` which tells the sampler to
    use central differences.

    Returns:
        DerivativeResult; ``ok=False`` only when ``mode="symbolic"`` fails
    """
    if mode not in DERIVATIVE_MODES:
        raise ValidationError(
            f"Unknown derivative mode '{mode}' (expected one of {', '.join(DERIVATIVE_MODES)})",
            "INVALID_MODE",
        )
    if supplied is not None and supplied.strip():
        return DerivativeResult(ok=True, derivative=supplied.strip(), method="supplied")
    if mode == "numeric":
        return DerivativeResult(ok=True, derivative=None, method="numeric")

    result = symbolic_derivative(expr, backend)
    if result.ok or mode == "symbolic":
        return result
    logger.info("Falling back to numerical derivative for %r", expr)
    return DerivativeResult(ok=True, derivative=None, method="numeric")
