"""Tests for the path-reveal animation driver."""

import pytest

from turunan_pkg.animation import AnimationDriver, visible_prefix
from turunan_pkg.sampler import sample


class TestAnimationDriver:
    """Test progress accounting."""

    def test_not_running_by_default(self):
        driver = AnimationDriver()
        assert driver.tick(1000) == 0.0
        assert driver.running is False

    def test_progress_and_wrap(self):
        driver = AnimationDriver(cycle_period_ms=5000)
        driver.start()
        assert driver.tick(2500) == pytest.approx(0.5)
        assert driver.tick(2500) == pytest.approx(1.0)
        assert driver.tick(16) == 0.0

    def test_speed_shortens_cycle(self):
        driver = AnimationDriver(cycle_period_ms=5000, speed=2)
        driver.start()
        assert driver.tick(1000) == pytest.approx(0.4)

    def test_speed_clamped(self):
        driver = AnimationDriver()
        assert driver.set_speed(10) == 3.0
        assert driver.set_speed(0.1) == 0.5
        assert driver.set_speed(float("nan")) == 0.5
        assert driver.set_speed("fast") == 0.5

    def test_stop_freezes_progress(self):
        driver = AnimationDriver(cycle_period_ms=1000)
        driver.start()
        driver.tick(300)
        driver.stop()
        assert driver.tick(300) == pytest.approx(0.3)
        assert driver.frame(5000) == pytest.approx(0.3)

    def test_toggle(self):
        driver = AnimationDriver()
        assert driver.toggle() is True
        assert driver.toggle() is False

    def test_bad_elapsed_ignored(self):
        driver = AnimationDriver(cycle_period_ms=1000)
        driver.start()
        assert driver.tick(-50) == 0.0
        assert driver.tick(float("nan")) == 0.0

    def test_frame_timestamps(self):
        driver = AnimationDriver(cycle_period_ms=5000)
        driver.start()
        assert driver.frame(1000.0) == 0.0
        assert driver.frame(1500.0) == pytest.approx(0.1)
        driver.stop()
        driver.start()
        # A restart does not count the time spent stopped
        assert driver.frame(9000.0) == pytest.approx(0.1)
        assert driver.frame(9250.0) == pytest.approx(0.15)

    def test_reset_bumps_generation(self):
        driver = AnimationDriver(cycle_period_ms=1000)
        driver.start()
        driver.tick(400)
        driver.reset()
        assert driver.progress == 0.0
        assert driver.generation == 1
        assert driver.running is True

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            AnimationDriver(cycle_period_ms=0)


class TestVisiblePrefix:
    """Test which part of a SampleSet is revealed."""

    @pytest.fixture
    def samples(self):
        return sample("sin(x)", "cos(x)", (-10, 10), resolution=500)

    def test_half(self, samples):
        assert len(samples) == 501
        assert len(visible_prefix(samples, 0.5)) == 251

    def test_start_shows_nothing(self, samples):
        assert len(visible_prefix(samples, 0.0)) == 0
        assert len(visible_prefix(samples, 0.001)) == 0

    def test_full_shows_everything(self, samples):
        assert len(visible_prefix(samples, 1.0)) == 501

    def test_prefix_keeps_order(self, samples):
        head = visible_prefix(samples, 0.3)
        assert head.xs == samples.xs[: len(head)]
