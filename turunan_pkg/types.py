"""Data model, result dataclasses and exceptions shared by every module."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Union


class _InvalidType:
    """Sentinel for a value that could not be computed at a point.

    Distinct from ``0.0`` (a real zero derivative) and from NaN, which is never
    allowed to leak out of the evaluator.
    """

    _instance: _InvalidType | None = None

    def __new__(cls) -> _InvalidType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INVALID"

    def __reduce__(self):
        return (_InvalidType, ())

    def __copy__(self) -> _InvalidType:
        return self

    def __deepcopy__(self, memo: dict) -> _InvalidType:
        return self


INVALID = _InvalidType()

MaybeReal = Union[float, _InvalidType]
Point = tuple[float, float]


def is_invalid(value: Any) -> bool:
    """Return True if value is the INVALID sentinel."""
    return value is INVALID


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(Exception):
    """Raised when the expression backend cannot parse an expression."""

    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ExpressionInvalidError(Exception):
    """Raised when a whole expression is unusable (parse or probe failure)."""

    def __init__(self, message: str, code: str = "EXPRESSION_INVALID"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class DomainError(ValidationError):
    """Raised for empty, inverted or non-finite domains."""

    def __init__(self, message: str, code: str = "DEGENERATE_DOMAIN"):
        super().__init__(message, code)


class ViewportError(ValidationError):
    """Raised for viewport sizes that leave no drawable area."""

    def __init__(self, message: str, code: str = "DEGENERATE_VIEWPORT"):
        super().__init__(message, code)


@dataclass(frozen=True)
class Domain:
    """Requested mathematical x-extent, ``x_min < x_max``."""

    x_min: float
    x_max: float

    def __post_init__(self) -> None:
        try:
            lo = float(self.x_min)
            hi = float(self.x_max)
        except (TypeError, ValueError) as e:
            raise DomainError(f"Domain bounds must be numbers: {e}") from e
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise DomainError("Domain bounds must be finite")
        if lo >= hi:
            raise DomainError(
                f"Domain minimum must be below maximum (got [{lo}, {hi}])"
            )
        object.__setattr__(self, "x_min", lo)
        object.__setattr__(self, "x_max", hi)

    @classmethod
    def of(cls, value: Domain | tuple[float, float] | list[float]) -> Domain:
        """Coerce a (min, max) pair into a Domain."""
        if isinstance(value, Domain):
            return value
        try:
            lo, hi = value
        except (TypeError, ValueError) as e:
            raise DomainError("Domain must be a (min, max) pair") from e
        return cls(lo, hi)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def center(self) -> float:
        return (self.x_min + self.x_max) / 2

    def as_tuple(self) -> tuple[float, float]:
        return (self.x_min, self.x_max)


@dataclass(frozen=True)
class Sample:
    """One evaluated grid point."""

    x: float
    y: MaybeReal
    dy: MaybeReal
    dy_valid: bool = True


@dataclass(frozen=True)
class SampleSet:
    """Ordered, immutable result of one sampler pass."""

    samples: tuple[Sample, ...]
    expression: str
    derivative: str | None
    domain: Domain
    resolution: int

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __getitem__(self, index):
        return self.samples[index]

    def prefix(self, count: int) -> SampleSet:
        """Return a new SampleSet holding the first ``count`` samples."""
        count = max(0, min(int(count), len(self.samples)))
        return replace(self, samples=self.samples[:count])

    @property
    def xs(self) -> list[float]:
        return [s.x for s in self.samples]

    @property
    def ys(self) -> list[float]:
        return [s.y for s in self.samples]

    @property
    def dys(self) -> list[float]:
        return [s.dy for s in self.samples]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [
            {"x": s.x, "y": s.y, "dy": s.dy, "dy_valid": s.dy_valid}
            for s in self.samples
        ]


@dataclass
class ViewportState:
    """Zoom factor plus pan offset (dx in math units, dy in pixels)."""

    zoom: float = 1.0
    pan_dx: float = 0.0
    pan_dy: float = 0.0


@dataclass(frozen=True)
class TangentSpec:
    """Line ``y = slope*x + intercept`` touching the curve at ``point``."""

    point: float
    slope: float
    intercept: float
    degenerate: bool = False  # slope fell back to 0

    def value_at(self, x: float) -> float:
        return self.slope * x + self.intercept

    @property
    def y0(self) -> float:
        return self.value_at(self.point)


@dataclass
class AnimationState:
    progress: float = 0.0
    running: bool = False
    speed: float = 1.0
    last_timestamp: float | None = None
    generation: int = 0  # bumped once per reset


@dataclass
class EvalResult:
    """Result of evaluating an expression at one x."""

    ok: bool
    x: float | None = None
    value: float | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.x is not None:
            result_dict["x"] = self.x
        if self.value is not None:
            result_dict["value"] = self.value
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict


@dataclass
class DerivativeResult:
    """Result of deriving the companion derivative of an expression."""

    ok: bool
    derivative: str | None = None
    method: str | None = None  # "supplied", "symbolic" or "numeric"
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.derivative is not None:
            result_dict["derivative"] = self.derivative
        if self.method is not None:
            result_dict["method"] = self.method
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"DerivativeResult(ok=False, error={self.error!r})"
        return (
            f"DerivativeResult(ok=True, derivative={self.derivative!r}, "
            f"method={self.method!r})"
        )


@dataclass
class SampleResult:
    """Result of sampling a function over a domain."""

    ok: bool
    expression: str | None = None
    derivative: str | None = None
    domain: tuple[float, float] | None = None
    points: list[dict[str, Any]] = field(default_factory=list)
    dropped: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.error is not None:
            result_dict["error"] = self.error
            return result_dict
        result_dict["expression"] = self.expression
        result_dict["derivative"] = self.derivative
        result_dict["domain"] = list(self.domain) if self.domain else None
        result_dict["count"] = len(self.points)
        result_dict["dropped"] = self.dropped
        result_dict["points"] = self.points
        return result_dict


@dataclass
class TangentResult:
    """Result of computing a tangent line."""

    ok: bool
    point: float | None = None
    slope: float | None = None
    intercept: float | None = None
    degenerate: bool = False
    segment: tuple[tuple[float, float], tuple[float, float]] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if not self.ok:
            result_dict["error"] = self.error
            return result_dict
        result_dict.update(
            {
                "point": self.point,
                "slope": self.slope,
                "intercept": self.intercept,
                "degenerate": self.degenerate,
            }
        )
        if self.segment is not None:
            result_dict["segment"] = [list(p) for p in self.segment]
        return result_dict


@dataclass
class PlotResult:
    """Result of rendering a plot (file path or ASCII text in ``result``)."""

    ok: bool
    result: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict
