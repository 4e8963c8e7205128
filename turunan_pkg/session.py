"""Explicit visualizer state and the operations a UI layer calls.

``VisualizerSession`` is the only owner of mutable state: the active
expression and derivative, the base domain, the viewport (zoom/pan), the
animation driver and the current SampleSet. Every mutator recomputes what it
invalidates before returning, so reads never see a half-built SampleSet.

Expression and domain changes resample and rewind the animation once.
Zoom and pan changes resample over the new visible range but keep the
animation where it is. Failures never raise: they leave the last good state
in place and set ``message``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .animation import AnimationDriver, visible_prefix
from .backend import ExpressionBackend, get_default_backend
from .calculus import numerical_derivative, resolve_derivative
from .config import (
    DEFAULT_DOMAIN,
    DERIVATIVE_MODE,
    DISPLAY_CEILING,
    DOMAIN_LIMIT,
    PADDING,
    RESOLUTION,
    TANGENT_HALF_WIDTH,
    VIEWPORT_HEIGHT,
    VIEWPORT_WIDTH,
)
from .evaluator import evaluate, probe
from .logging_config import get_logger
from .presets import get_preset
from .sampler import sample
from .tangent import points_across, points_on_segment, tangent_at
from .types import (
    INVALID,
    Domain,
    DomainError,
    ExpressionInvalidError,
    ParseError,
    Point,
    SampleSet,
    TangentSpec,
    ValidationError,
    ViewportError,
)
from .viewport import AxisTicks, Viewport, segment_to_viewport

logger = get_logger("session")

UNDEFINED_ON_DOMAIN_MESSAGE = "Warning: Function has no drawable points on this domain"


@dataclass
class Highlight:
    x: float
    y: float
    dy: float


@dataclass
class Frame:
    """Everything the rendering layer needs to draw one frame."""

    function_path: str = ""
    derivative_path: str = ""
    function_points: list[Point] = field(default_factory=list)
    derivative_points: list[Point] = field(default_factory=list)
    effective_range: tuple[float, float] = DEFAULT_DOMAIN
    zoom: float = 1.0
    progress: float = 0.0
    animating: bool = False
    generation: int = 0
    highlight: Highlight | None = None
    highlight_pixel: Point | None = None
    tangent: TangentSpec | None = None
    tangent_segment: list[Point] | None = None  # math space
    tangent_pixels: list[Point] | None = None
    ticks: AxisTicks = field(default_factory=AxisTicks)
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {
            "effective_range": list(self.effective_range),
            "zoom": self.zoom,
            "progress": self.progress,
            "animating": self.animating,
            "generation": self.generation,
            "function_path": self.function_path,
            "derivative_path": self.derivative_path,
            "points": len(self.function_points),
        }
        if self.highlight is not None:
            result_dict["highlight"] = {
                "x": self.highlight.x,
                "y": self.highlight.y,
                "dy": self.highlight.dy,
            }
        if self.tangent is not None:
            result_dict["tangent"] = {
                "point": self.tangent.point,
                "slope": self.tangent.slope,
                "intercept": self.tangent.intercept,
                "degenerate": self.tangent.degenerate,
            }
        if self.tangent_pixels is not None:
            result_dict["tangent_pixels"] = [list(p) for p in self.tangent_pixels]
        if self.message is not None:
            result_dict["message"] = self.message
        return result_dict


class VisualizerSession:
    """State of one interactive derivative graph."""

    def __init__(
        self,
        backend: ExpressionBackend | None = None,
        width: float = VIEWPORT_WIDTH,
        height: float = VIEWPORT_HEIGHT,
        padding: float = PADDING,
        resolution: int = RESOLUTION,
        ceiling: float | None = DISPLAY_CEILING,
        derivative_mode: str = DERIVATIVE_MODE,
        tangent_span: str = "local",
    ):
        if tangent_span not in ("local", "global"):
            raise ValueError(f"tangent_span must be 'local' or 'global': {tangent_span}")
        self.backend = backend or get_default_backend()
        self.width = width
        self.height = height
        self.padding = padding
        self.resolution = resolution
        self.ceiling = ceiling
        self.derivative_mode = derivative_mode
        self.tangent_span = tangent_span

        self.domain = Domain(*DEFAULT_DOMAIN)
        self.viewport = Viewport(self.domain)
        self.animation = AnimationDriver()
        self.expression: str | None = None
        self.derivative: str | None = None  # None means central differences
        self.derivative_method: str | None = None
        self.sample_set: SampleSet | None = None
        self.highlight_x: float | None = None
        self.message: str | None = None
        self._drag_last: Point | None = None
        self._suspended = False  # last input was rejected; draw nothing

        # Reject a size with no drawable area up front
        self.viewport.scales(width, height, padding)

    # Data changes -------------------------------------------------------

    def _clamp_domain(self, lo: float, hi: float) -> Domain:
        requested = Domain(lo, hi)
        lo, hi = requested.as_tuple()
        lo = max(-DOMAIN_LIMIT, min(DOMAIN_LIMIT, float(lo)))
        hi = max(-DOMAIN_LIMIT, min(DOMAIN_LIMIT, float(hi)))
        return Domain(lo, hi)

    def _apply(
        self, expression: str | None, derivative: str | None, domain: Domain
    ) -> None:
        """Install new data, resample, and rewind the animation if anything changed.

        Returning from a rejected input always counts as a change.
        """
        changed = self._suspended or (expression, derivative, domain) != (
            self.expression,
            self.derivative,
            self.domain,
        )
        self.expression = expression
        self.derivative = derivative
        self.domain = domain
        self._suspended = False
        self.viewport.set_base_domain(domain)
        self._resample()
        if changed:
            self.animation.reset()
            logger.debug("Data changed, animation rewound")
        if self.sample_set is not None and not self.sample_set:
            self.message = UNDEFINED_ON_DOMAIN_MESSAGE
            logger.warning(
                "No drawable point on the new domain",
                extra={"expression": expression, "domain": domain.as_tuple()},
            )

    def set_expression(self, text: str, derivative: str | None = None) -> bool:
        """Make ``text`` the plotted function.

        ``derivative`` is used as given; otherwise it is derived according to
        ``derivative_mode``. An empty ``text`` clears the graph.

        Returns:
            True if the expression was accepted
        """
        text = (text or "").strip()
        if not text:
            self.message = None
            self.derivative_method = None
            self._apply(None, None, self.domain)
            return True

        try:
            probe(text, self.domain, self.backend)
        except ExpressionInvalidError as e:
            return self._reject(e.message)

        if derivative is not None and derivative.strip():
            try:
                self.backend.parse(derivative.strip())
            except (ParseError, ValidationError) as e:
                return self._reject(f"Invalid derivative: {e}")

        try:
            resolved = resolve_derivative(
                text, derivative, self.derivative_mode, self.backend
            )
        except ValidationError as e:
            return self._reject(e.message)
        if not resolved.ok:
            return self._reject(resolved.error or "Differentiation failed")

        self.message = None
        self.derivative_method = resolved.method
        self._apply(text, resolved.derivative, self.domain)
        logger.info(
            "Plotting %r with %s derivative %r",
            text,
            resolved.method,
            resolved.derivative,
        )
        return True

    def _reject(self, message: str) -> bool:
        """Keep the last good expression but show nothing for the bad one."""
        logger.warning("Expression rejected: %s", message)
        self.message = message
        self.sample_set = None
        self._suspended = True
        return False

    def select_preset(self, rule: str, index: int = 0) -> bool:
        """Load a worked example together with its default domain."""
        try:
            preset = get_preset(rule, index)
            domain = self._clamp_domain(*preset.default_domain)
        except ValidationError as e:
            self.message = e.message
            return False
        self.message = None
        self.derivative_method = "supplied"
        self.highlight_x = None
        self._apply(preset.function, preset.derivative, domain)
        return True

    def set_domain(self, x_min: float, x_max: float) -> bool:
        """Change the base domain; a degenerate one keeps the previous domain."""
        try:
            domain = self._clamp_domain(x_min, x_max)
        except (DomainError, TypeError, ValueError) as e:
            self.message = f"Invalid domain: {e}"
            logger.warning("Rejected domain (%r, %r): %s", x_min, x_max, e)
            return False
        self.message = None
        self._apply(self.expression, self.derivative, domain)
        return True

    def reset_domain(self) -> bool:
        return self.set_domain(*DEFAULT_DOMAIN)

    def set_viewport_size(self, width: float, height: float) -> bool:
        try:
            self.viewport.scales(width, height, self.padding)
        except ViewportError as e:
            self.message = e.message
            logger.warning("Rejected viewport size %rx%r", width, height)
            return False
        self.width = width
        self.height = height
        return True

    # View changes -------------------------------------------------------

    def _view_changed(self, before: tuple[float, float]) -> None:
        if self.viewport.effective_range() != before:
            self._resample()

    def set_zoom(self, zoom: float) -> float:
        before = self.viewport.effective_range()
        self.viewport.set_zoom(zoom)
        self._view_changed(before)
        return self.viewport.zoom

    def zoom_in(self) -> float:
        before = self.viewport.effective_range()
        self.viewport.zoom_in()
        self._view_changed(before)
        return self.viewport.zoom

    def zoom_out(self) -> float:
        before = self.viewport.effective_range()
        self.viewport.zoom_out()
        self._view_changed(before)
        return self.viewport.zoom

    def wheel(self, delta_y: float) -> float:
        before = self.viewport.effective_range()
        self.viewport.wheel(delta_y)
        self._view_changed(before)
        return self.viewport.zoom

    def pan(self, dx: float, dy: float = 0.0) -> None:
        before = self.viewport.effective_range()
        self.viewport.pan_by(dx, dy)
        self._view_changed(before)

    def begin_drag(self, px: float, py: float) -> None:
        self._drag_last = (px, py)

    def drag_to(self, px: float, py: float) -> None:
        if self._drag_last is None:
            return
        last_px, last_py = self._drag_last
        before = self.viewport.effective_range()
        self.viewport.drag(px - last_px, py - last_py, self.width, self.padding)
        self._drag_last = (px, py)
        self._view_changed(before)

    def end_drag(self) -> None:
        self._drag_last = None

    @property
    def dragging(self) -> bool:
        return self._drag_last is not None

    def reset_view(self) -> None:
        before = self.viewport.effective_range()
        self.viewport.reset()
        self._view_changed(before)

    # Pointer / tangent --------------------------------------------------

    def highlight_pixel(self, px: float) -> bool:
        """Highlight the x under the pointer column ``px``."""
        if not self.sample_set or self.dragging:
            return False
        x = self.viewport.from_viewport(px, self.width, self.padding)
        if not self.viewport.contains_x(x):
            return False
        self.highlight_x = x
        return True

    def highlight_at(self, x: float) -> None:
        self.highlight_x = float(x)

    def clear_highlight(self) -> None:
        self.highlight_x = None

    def tangent(self) -> TangentSpec | None:
        if self.expression is None or self.highlight_x is None or self._suspended:
            return None
        return tangent_at(self.expression, self.derivative, self.highlight_x, self.backend)

    # Animation ----------------------------------------------------------

    def start_animation(self) -> None:
        self.animation.start()

    def stop_animation(self) -> None:
        self.animation.stop()

    def toggle_animation(self) -> bool:
        return self.animation.toggle()

    def set_speed(self, speed: float) -> float:
        return self.animation.set_speed(speed)

    def tick(self, elapsed_ms: float) -> float:
        return self.animation.tick(elapsed_ms)

    def on_frame(self, timestamp_ms: float) -> float:
        return self.animation.frame(timestamp_ms)

    # Output -------------------------------------------------------------

    def _resample(self) -> None:
        if self.expression is None or self._suspended:
            self.sample_set = None
            return
        self.sample_set = sample(
            self.expression,
            self.derivative,
            self.viewport.effective_domain(),
            self.resolution,
            self.ceiling,
            self.backend,
        )

    def _highlight(self) -> Highlight | None:
        if self.expression is None or self.highlight_x is None:
            return None
        x = self.highlight_x
        y = evaluate(self.expression, x, self.backend)
        if y is INVALID:
            return None
        if self.derivative is not None:
            dy = evaluate(self.derivative, x, self.backend)
        else:
            dy = numerical_derivative(self.expression, x, backend=self.backend)
        return Highlight(x=x, y=y, dy=0.0 if dy is INVALID else dy)

    def frame(self) -> Frame:
        """Pixel-space geometry for the current state."""
        lo, hi = self.viewport.effective_range()
        ticks = self.viewport.axis_ticks(self.width, self.height, self.padding)
        frame = Frame(
            effective_range=(lo, hi),
            zoom=self.viewport.zoom,
            progress=self.animation.progress,
            animating=self.animation.running,
            generation=self.animation.generation,
            ticks=ticks,
            message=self.message,
        )
        if self.sample_set is None:
            return frame

        visible = self.sample_set
        if self.animation.running:
            visible = visible_prefix(self.sample_set, self.animation.progress)
        clamp = self.ceiling is not None and self.ceiling > 0
        frame.function_points = [(s.x, s.y) for s in visible]
        frame.derivative_points = [
            (s.x, s.dy)
            for s in visible
            if s.dy_valid and not (clamp and abs(s.dy) > self.ceiling)
        ]
        frame.function_path = self.viewport.svg_path(
            frame.function_points, self.width, self.height, self.padding
        )
        frame.derivative_path = self.viewport.svg_path(
            frame.derivative_points, self.width, self.height, self.padding
        )

        # The highlight and tangent are hidden while the path is being revealed
        if self.animation.running:
            return frame
        frame.highlight = self._highlight()
        if frame.highlight is None:
            return frame
        frame.highlight_pixel = self.viewport.to_viewport(
            (frame.highlight.x, frame.highlight.y), self.width, self.height, self.padding
        )
        frame.tangent = self.tangent()
        if frame.tangent is not None:
            if self.tangent_span == "global":
                segment = points_across(frame.tangent, lo, hi)
            else:
                segment = points_on_segment(frame.tangent, TANGENT_HALF_WIDTH)
            frame.tangent_segment = list(segment)
            frame.tangent_pixels = segment_to_viewport(
                self.viewport, segment, self.width, self.height, self.padding
            )
        return frame
