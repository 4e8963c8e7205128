"""Looping path-reveal animation driven by an external frame clock.

The driver never schedules itself. The host (a GUI event loop, a timer, or a
test feeding synthetic timestamps) calls ``tick`` or ``frame``; once ``stop``
returns, neither call changes the progress again until ``start``.
"""

from __future__ import annotations

import math

from .config import CYCLE_PERIOD_MS, SPEED_MAX, SPEED_MIN
from .logging_config import get_logger
from .types import AnimationState, SampleSet

logger = get_logger("animation")


class AnimationDriver:
    """Progress accumulator in [0, 1] that wraps back to 0."""

    def __init__(
        self,
        cycle_period_ms: float = CYCLE_PERIOD_MS,
        speed: float = 1.0,
        speed_bounds: tuple[float, float] = (SPEED_MIN, SPEED_MAX),
    ):
        if cycle_period_ms <= 0:
            raise ValueError(f"Cycle period must be positive: {cycle_period_ms}")
        self.cycle_period_ms = cycle_period_ms
        self.speed_min, self.speed_max = speed_bounds
        self.state = AnimationState()
        self.set_speed(speed)

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def generation(self) -> int:
        return self.state.generation

    def start(self) -> None:
        if not self.state.running:
            self.state.running = True
            self.state.last_timestamp = None
            logger.debug("Animation started at progress %.3f", self.state.progress)

    def stop(self) -> None:
        """Stop advancing; progress is kept."""
        self.state.running = False
        self.state.last_timestamp = None

    def toggle(self) -> bool:
        if self.state.running:
            self.stop()
        else:
            self.start()
        return self.state.running

    def reset(self) -> None:
        """Rewind to 0 because the data underneath changed."""
        self.state.progress = 0.0
        self.state.last_timestamp = None
        self.state.generation += 1

    def set_speed(self, speed: float) -> float:
        try:
            speed = float(speed)
        except (TypeError, ValueError):
            speed = math.nan
        if not math.isfinite(speed):
            logger.warning("Ignoring non-finite speed %r", speed)
            return self.state.speed
        self.state.speed = max(self.speed_min, min(self.speed_max, speed))
        return self.state.speed

    def tick(self, elapsed_ms: float) -> float:
        """Advance by ``elapsed_ms`` of wall time if running.

        A full cycle takes ``cycle_period_ms / speed``. Passing 1 wraps to 0.
        """
        if not self.state.running:
            return self.state.progress
        if not math.isfinite(elapsed_ms) or elapsed_ms < 0:
            logger.debug("Ignoring tick with elapsed=%r", elapsed_ms)
            return self.state.progress
        progress = self.state.progress + elapsed_ms / (
            self.cycle_period_ms / self.state.speed
        )
        self.state.progress = 0.0 if progress > 1 else progress
        return self.state.progress

    def frame(self, timestamp_ms: float) -> float:
        """requestAnimationFrame-style entry: derive elapsed time from timestamps."""
        if not self.state.running:
            return self.state.progress
        last = self.state.last_timestamp
        self.state.last_timestamp = timestamp_ms
        if last is None:
            return self.state.progress
        return self.tick(timestamp_ms - last)


def visible_prefix(sample_set: SampleSet, progress: float) -> SampleSet:
    """The part of ``sample_set`` revealed at ``progress``.

    ``index = floor(len * progress)``; the first ``index + 1`` samples are
    returned, or none when ``index <= 0``.
    """
    index = math.floor(len(sample_set) * progress)
    if index <= 0:
        return sample_set.prefix(0)
    return sample_set.prefix(index + 1)
