"""
Unit tests for ipsnav.sensors.pdr (step detection and dead reckoning).

Run with: pytest tests/sensors/test_pdr_integrator.py -v
"""

import unittest

import numpy as np
import pytest

from ipsnav.config import PdrConfig
from ipsnav.exceptions import SensorUnavailable
from ipsnav.sensors import (
    AccelSample,
    HeadingTracker,
    OrientationSample,
    PdrIntegrator,
    StepDetector,
    StepState,
    detect_steps_peak_detector,
    integrate_steps,
    step_displacement,
)


def _accel(t, magnitude):
    return AccelSample(t=t, ax=0.0, ay=0.0, az=magnitude)


def _tracker(azimuth_deg):
    tracker = HeadingTracker()
    tracker.update(OrientationSample(t=0.0, azimuth_deg=azimuth_deg))
    return tracker


class TestStepDetector(unittest.TestCase):
    """Test suite for the streaming step state machine."""

    def test_first_sample_only_primes(self) -> None:
        detector = StepDetector(threshold=1.2, min_interval_s=0.3)
        self.assertFalse(detector.update(0.0, 20.0))
        self.assertEqual(detector.state, StepState.IDLE)

    def test_rise_above_threshold_is_step(self) -> None:
        detector = StepDetector(threshold=1.2, min_interval_s=0.3)
        detector.update(0.0, 9.8)
        self.assertTrue(detector.update(0.02, 11.5))
        self.assertEqual(detector.state, StepState.STEP_DETECTED)
        self.assertEqual(detector.step_count, 1)

    def test_rise_below_threshold_ignored(self) -> None:
        detector = StepDetector(threshold=1.2, min_interval_s=0.3)
        detector.update(0.0, 9.8)
        self.assertFalse(detector.update(0.02, 10.9))

    def test_refractory_interval(self) -> None:
        detector = StepDetector(threshold=1.2, min_interval_s=0.3)
        detector.update(0.0, 9.8)
        self.assertTrue(detector.update(0.1, 12.0))
        detector.update(0.2, 9.8)
        self.assertFalse(detector.update(0.3, 12.0))   # 0.2 s after the step
        detector.update(0.35, 9.8)
        self.assertTrue(detector.update(0.4, 12.0))    # exactly 0.3 s
        self.assertEqual(detector.step_count, 2)

    def test_reset_clears_count(self) -> None:
        detector = StepDetector()
        detector.update(0.0, 9.8)
        detector.update(0.1, 12.0)
        detector.reset()
        self.assertEqual(detector.step_count, 0)
        self.assertFalse(detector.update(0.2, 15.0))


class TestStepDisplacement(unittest.TestCase):
    """Test suite for step_displacement() (0 = north, 90 = east)."""

    def test_north(self) -> None:
        dx, dy = step_displacement(0.75, 0.0)
        self.assertAlmostEqual(dx, 0.0)
        self.assertAlmostEqual(dy, 0.75)

    def test_east(self) -> None:
        dx, dy = step_displacement(0.75, 90.0)
        self.assertAlmostEqual(dx, 0.75)
        self.assertAlmostEqual(dy, 0.0)

    def test_negative_length(self) -> None:
        with self.assertRaises(ValueError):
            step_displacement(-1.0, 0.0)


class TestPdrIntegrator:
    """Test suite for PdrIntegrator."""

    def _walk(self, pdr, n_steps, t0=0.0):
        events = []
        pdr.update(_accel(t0, 9.8))
        t = t0
        for _ in range(n_steps):
            t += 0.25
            pdr.update(_accel(t, 9.8))
            t += 0.25
            event = pdr.update(_accel(t, 12.0))
            if event is not None:
                events.append(event)
        return events

    def test_steps_follow_heading(self):
        pdr = PdrIntegrator(_tracker(90.0))

        events = self._walk(pdr, 4)

        assert len(events) == 4
        assert [e.index for e in events] == [1, 2, 3, 4]
        assert events[0].dx == pytest.approx(0.75)
        assert events[0].dy == pytest.approx(0.0, abs=1e-12)
        assert pdr.x == pytest.approx(3.0)
        assert pdr.y == pytest.approx(0.0, abs=1e-9)

    def test_configured_step_length(self):
        pdr = PdrIntegrator(_tracker(0.0), PdrConfig(step_length_m=0.6))

        events = self._walk(pdr, 2)

        assert events[1].length_m == 0.6
        assert pdr.y == pytest.approx(1.2)

    def test_target_heading_gating(self):
        pdr = PdrIntegrator(_tracker(90.0))
        pdr.set_target_heading(0.0)

        events = self._walk(pdr, 3)

        assert events == []
        assert pdr.ignored_steps == 3
        assert pdr.step_count == 3
        assert (pdr.x, pdr.y) == (0.0, 0.0)

    def test_target_heading_within_tolerance(self):
        pdr = PdrIntegrator(_tracker(40.0))
        pdr.set_target_heading(0.0)

        assert len(self._walk(pdr, 2)) == 2

        pdr.set_target_heading(None)
        pdr.heading.update(OrientationSample(t=10.0, azimuth_deg=180.0))
        assert self._walk(pdr, 1, t0=20.0)

    def test_no_heading_raises(self):
        pdr = PdrIntegrator(HeadingTracker())
        pdr.update(_accel(0.0, 9.8))

        with pytest.raises(SensorUnavailable):
            pdr.update(_accel(0.5, 12.0))

    def test_reset_to(self):
        pdr = PdrIntegrator(_tracker(0.0))
        self._walk(pdr, 2)

        pdr.reset_to(5.0, -2.0)
        assert (pdr.x, pdr.y) == (5.0, -2.0)
        assert pdr.step_count == 0

        pdr.reset_to()
        assert (pdr.x, pdr.y) == (5.0, -2.0)
        assert pdr.heading.heading == pytest.approx(0.0)


class TestPeakDetector:
    """Test suite for the batch peak detector."""

    def test_counts_periodic_steps(self):
        dt = 0.01
        t = np.arange(0, 10, dt)
        accel_z = -9.81 + 2.0 * np.sin(2 * np.pi * 2.0 * t)
        accel = np.column_stack([np.zeros_like(t), np.zeros_like(t), accel_z])

        steps, filtered = detect_steps_peak_detector(accel, dt=dt, min_peak_distance=0.3)

        assert filtered.shape == t.shape
        assert 18 <= len(steps) <= 21

    def test_stationary_has_no_steps(self):
        accel = np.tile([0.0, 0.0, 9.81], (500, 1))

        steps, _ = detect_steps_peak_detector(accel, dt=0.01)

        assert len(steps) == 0

    def test_input_validation(self):
        with pytest.raises(ValueError):
            detect_steps_peak_detector(np.zeros((10, 2)), dt=0.01)
        with pytest.raises(ValueError):
            detect_steps_peak_detector(np.zeros((10, 3)), dt=0.0)


class TestIntegrateSteps(unittest.TestCase):
    """Test suite for integrate_steps()."""

    def test_square_loop_closes(self) -> None:
        track = integrate_steps([0.0, 90.0, 180.0, 270.0], step_length_m=1.0, start_xy=(2.0, 3.0))
        self.assertEqual(track.shape, (5, 2))
        np.testing.assert_allclose(track[2], [3.0, 4.0], atol=1e-12)
        np.testing.assert_allclose(track[-1], [2.0, 3.0], atol=1e-12)
