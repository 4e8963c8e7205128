"""Fixed-resolution sampling of a function and its derivative over a domain."""

from __future__ import annotations

from .backend import ExpressionBackend, get_default_backend
from .calculus import numerical_derivative
from .config import DISPLAY_CEILING, RESOLUTION
from .evaluator import evaluate
from .logging_config import get_logger
from .types import INVALID, Domain, Sample, SampleSet, ValidationError

logger = get_logger("sampler")


def _check_resolution(resolution: int) -> int:
    if isinstance(resolution, bool) or not isinstance(resolution, int):
        raise ValidationError(
            f"Resolution must be an integer (got {resolution!r})", "INVALID_RESOLUTION"
        )
    if resolution <= 0:
        raise ValidationError(
            f"Resolution must be positive (got {resolution})", "INVALID_RESOLUTION"
        )
    return resolution


def sample(
    expr: str,
    derivative_expr: str | None,
    domain: Domain | tuple[float, float],
    resolution: int = RESOLUTION,
    ceiling: float | None = DISPLAY_CEILING,
    backend: ExpressionBackend | None = None,
) -> SampleSet:
    """Sample ``expr`` and its derivative on ``resolution + 1`` grid points.

    Points where f is undefined or non-finite are dropped, as are points with
    ``|f(x)| > ceiling`` (pass ``None`` or a non-positive ceiling to keep
    them). An undefined derivative does not drop the point: ``dy`` becomes
    0.0 and ``dy_valid`` is False.

    Args:
        expr: Function text
        derivative_expr: Derivative text, or None for central differences
        domain: Domain or (min, max) pair
        resolution: Number of intervals
        ceiling: Display ceiling for |y|
        backend: Expression backend

    Returns:
        A new SampleSet ordered by x

    Raises:
        ValidationError: If resolution is not a positive integer
        DomainError: If domain is degenerate
    """
    domain = Domain.of(domain)
    resolution = _check_resolution(resolution)
    backend = backend or get_default_backend()
    clamp = ceiling is not None and ceiling > 0

    step = domain.width / resolution
    samples: list[Sample] = []
    undefined = 0
    clipped = 0
    for i in range(resolution + 1):
        x = domain.x_min + i * step
        y = evaluate(expr, x, backend)
        if y is INVALID:
            undefined += 1
            continue
        if clamp and abs(y) > ceiling:
            clipped += 1
            continue
        if derivative_expr is not None:
            dy = evaluate(derivative_expr, x, backend)
        else:
            dy = numerical_derivative(expr, x, backend=backend)
        if dy is INVALID:
            samples.append(Sample(x=x, y=y, dy=0.0, dy_valid=False))
        else:
            samples.append(Sample(x=x, y=y, dy=dy))

    logger.debug(
        "Sampled: %d kept, %d undefined, %d above ceiling",
        len(samples),
        undefined,
        clipped,
        extra={"expression": expr, "domain": domain.as_tuple()},
    )
    return SampleSet(
        samples=tuple(samples),
        expression=expr,
        derivative=derivative_expr,
        domain=domain,
        resolution=resolution,
    )
