"""Mapping between mathematical coordinates and viewport pixels.

Horizontal zoom and pan act in math space: zoom divides the base domain width
and ``pan_dx`` shifts its center. Vertically there is no domain, only a fixed
span (±10 at zoom 1) scaled by the zoom factor, and ``pan_dy`` is applied
directly in pixels after projection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .config import (
    PADDING,
    VERTICAL_SPAN,
    WHEEL_STEP,
    ZOOM_MAX,
    ZOOM_MIN,
    ZOOM_STEP,
)
from .logging_config import get_logger
from .types import Domain, Point, ViewportError, ViewportState

logger = get_logger("viewport")


@dataclass
class AxisTicks:
    """Tick positions for the rendering layer: (value, pixel) pairs."""

    x: list[tuple[float, float]] = field(default_factory=list)
    y: list[tuple[float, float]] = field(default_factory=list)
    x_axis_py: float = 0.0  # pixel row of y = 0
    y_axis_px: float = 0.0  # pixel column of x = 0


def _check_size(width: float, height: float | None, padding: float) -> None:
    if width - 2 * padding <= 0:
        raise ViewportError(
            f"Viewport width {width} leaves no room inside padding {padding}"
        )
    if height is not None and height - 2 * padding <= 0:
        raise ViewportError(
            f"Viewport height {height} leaves no room inside padding {padding}"
        )


class Viewport:
    """Zoom/pan state over a base domain plus the coordinate transforms."""

    def __init__(
        self,
        base_domain: Domain | tuple[float, float],
        state: ViewportState | None = None,
        vertical_span: float = VERTICAL_SPAN,
        zoom_bounds: tuple[float, float] = (ZOOM_MIN, ZOOM_MAX),
    ):
        zoom_min, zoom_max = zoom_bounds
        if not (0 < zoom_min <= zoom_max):
            raise ValueError(f"Invalid zoom bounds: {zoom_bounds}")
        if vertical_span <= 0:
            raise ValueError(f"Vertical span must be positive: {vertical_span}")
        self.base_domain = Domain.of(base_domain)
        self.state = state or ViewportState()
        self.vertical_span = vertical_span
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.state.zoom = self._clamp_zoom(self.state.zoom, fallback=1.0)

    def __repr__(self) -> str:
        return (
            f"Viewport(base={self.base_domain.as_tuple()}, zoom={self.state.zoom}, "
            f"pan=({self.state.pan_dx}, {self.state.pan_dy}))"
        )

    @property
    def zoom(self) -> float:
        return self.state.zoom

    def _clamp_zoom(self, zoom: float, fallback: float) -> float:
        try:
            zoom = float(zoom)
        except (TypeError, ValueError):
            zoom = math.nan
        if not math.isfinite(zoom):
            logger.warning("Ignoring non-finite zoom %r", zoom)
            zoom = fallback
        return max(self.zoom_min, min(self.zoom_max, zoom))

    # Mutators -----------------------------------------------------------

    def set_zoom(self, zoom: float) -> float:
        """Set the zoom factor, clamped into the configured bounds."""
        self.state.zoom = self._clamp_zoom(zoom, fallback=self.state.zoom)
        return self.state.zoom

    def zoom_by(self, delta: float) -> float:
        return self.set_zoom(self.state.zoom + delta)

    def zoom_in(self) -> float:
        return self.zoom_by(ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.zoom_by(-ZOOM_STEP)

    def wheel(self, delta_y: float) -> float:
        """Apply one wheel notch: scrolling down zooms out, up zooms in."""
        return self.zoom_by(-WHEEL_STEP if delta_y > 0 else WHEEL_STEP)

    def pan_by(self, dx: float, dy: float = 0.0) -> None:
        """Shift the view by ``dx`` math units and ``dy`` pixels."""
        if not (math.isfinite(dx) and math.isfinite(dy)):
            logger.warning("Ignoring non-finite pan (%r, %r)", dx, dy)
            return
        self.state.pan_dx += dx
        self.state.pan_dy += dy

    def drag(
        self, dx_px: float, dy_px: float, width: float, padding: float = PADDING
    ) -> None:
        """Pan by a pointer drag measured in pixels.

        Dragging right moves the view left in math space, so the curve follows
        the pointer.
        """
        _check_size(width, None, padding)
        lo, hi = self.effective_range()
        x_scale = (width - 2 * padding) / (hi - lo)
        self.pan_by(-dx_px / x_scale, dy_px)

    def reset(self) -> None:
        """Back to zoom 1 and no pan."""
        self.state.zoom = self._clamp_zoom(1.0, fallback=1.0)
        self.state.pan_dx = 0.0
        self.state.pan_dy = 0.0

    def set_base_domain(self, domain: Domain | tuple[float, float]) -> Domain:
        """Replace the base domain; a degenerate domain raises DomainError."""
        self.base_domain = Domain.of(domain)
        return self.base_domain

    # Queries ------------------------------------------------------------

    def effective_range(self) -> tuple[float, float]:
        """Visible x-interval after zoom and horizontal pan."""
        zoomed_width = self.base_domain.width / self.state.zoom
        center = self.base_domain.center + self.state.pan_dx
        return (center - zoomed_width / 2, center + zoomed_width / 2)

    def effective_domain(self) -> Domain:
        return Domain(*self.effective_range())

    def scales(
        self, width: float, height: float, padding: float = PADDING
    ) -> tuple[float, float]:
        """Pixels per math unit, (x_scale, y_scale)."""
        _check_size(width, height, padding)
        lo, hi = self.effective_range()
        x_scale = (width - 2 * padding) / (hi - lo)
        y_scale = (height - 2 * padding) / self.vertical_span * self.state.zoom
        return x_scale, y_scale

    def to_viewport(
        self, point: Point, width: float, height: float, padding: float = PADDING
    ) -> Point:
        """Map a math-space (x, y) to pixel (px, py); py grows downwards."""
        x, y = point
        x_scale, y_scale = self.scales(width, height, padding)
        lo, _ = self.effective_range()
        px = padding + (x - lo) * x_scale
        py = height / 2 - y * y_scale + self.state.pan_dy
        return (px, py)

    def from_viewport(self, px: float, width: float, padding: float = PADDING) -> float:
        """Map a pixel column back to math-space x."""
        _check_size(width, None, padding)
        lo, hi = self.effective_range()
        x_scale = (width - 2 * padding) / (hi - lo)
        return lo + (px - padding) / x_scale

    def contains_x(self, x: float) -> bool:
        lo, hi = self.effective_range()
        return lo <= x <= hi

    def svg_path(
        self,
        points: Iterable[Point],
        width: float,
        height: float,
        padding: float = PADDING,
    ) -> str:
        """Build an SVG path ("M x y L x y ...") through the given points."""
        parts = []
        for x, y in points:
            px, py = self.to_viewport((x, y), width, height, padding)
            command = "L" if parts else "M"
            parts.append(f"{command} {px:.2f} {py:.2f}")
        return " ".join(parts)

    def axis_ticks(
        self, width: float, height: float, padding: float = PADDING
    ) -> AxisTicks:
        """Compute labelled tick positions inside the padded plot area."""
        lo, hi = self.effective_range()
        origin_px, origin_py = self.to_viewport((0.0, 0.0), width, height, padding)
        ticks = AxisTicks(x_axis_py=origin_py, y_axis_px=origin_px)

        x_step = max(1, math.ceil((hi - lo) / 10))
        x = math.ceil(lo / x_step) * x_step
        while x <= hi:
            if abs(x) >= 0.001:
                px, _ = self.to_viewport((x, 0.0), width, height, padding)
                if padding <= px <= width - padding:
                    ticks.x.append((float(x), px))
            x += x_step

        y_half = self.vertical_span / 2 / self.state.zoom
        y_step = 1 if y_half <= 5 else math.ceil(y_half / 5)
        y_limit = math.floor(y_half)
        for y in range(-y_limit, y_limit + 1, y_step):
            if y == 0:
                continue
            _, py = self.to_viewport((0.0, float(y)), width, height, padding)
            if padding <= py <= height - padding:
                ticks.y.append((float(y), py))
        return ticks


def segment_to_viewport(
    viewport: Viewport,
    segment: Sequence[Point],
    width: float,
    height: float,
    padding: float = PADDING,
) -> list[Point]:
    """Project each endpoint of a math-space segment to pixels."""
    return [viewport.to_viewport(p, width, height, padding) for p in segment]
