"""
Pedestrian Dead Reckoning (PDR): steps + heading -> relative displacement.

Streaming path (one sample at a time, used by the live engine):
    - ``StepDetector``: Idle -> StepDetected when the acceleration
      magnitude rises by more than a threshold between consecutive samples
      and the refractory interval since the last step has elapsed.
    - ``PdrIntegrator``: on each accepted step emits a fixed-length
      displacement along the current smoothed heading.

Batch path (recorded logs, used for offline evaluation):
    - ``detect_steps_peak_detector``: peak picking on the gravity-removed,
      low-pass filtered magnitude.
    - ``integrate_steps``: dead-reckoned track from step headings.

Displacement convention (compass heading ψ, 0 = north, 90 = east):
    Δx = L · sin(ψ)
    Δy = L · cos(ψ)
"""

import enum
import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import signal

from ipsnav.config import PdrConfig
from ipsnav.sensors.heading import HeadingTracker
from ipsnav.sensors.types import AccelSample, StepEvent
from ipsnav.utils.angles import angle_diff_deg

logger = logging.getLogger(__name__)


def step_displacement(step_length_m: float, heading_deg: float) -> Tuple[float, float]:
    """
    Displacement (Δx, Δy) of one step along a compass heading.

    Example:
        >>> dx, dy = step_displacement(0.75, 90.0)   # due east
        >>> round(dx, 6), round(dy, 6)
        (0.75, 0.0)
    """
    if step_length_m < 0:
        raise ValueError(f"step_length_m must be non-negative, got {step_length_m}")
    heading_rad = math.radians(heading_deg)
    return (step_length_m * math.sin(heading_rad), step_length_m * math.cos(heading_rad))


class StepState(enum.Enum):
    IDLE = "idle"
    STEP_DETECTED = "step_detected"


class StepDetector:
    """
    Streaming step detector on acceleration magnitude.

    A sample is a step when
        |a_k| - |a_{k-1}| > threshold   and   t_k - t_last_step >= min_interval

    The first sample after construction or ``reset`` only primes the
    previous magnitude.
    """

    def __init__(self, threshold: float = 1.2, min_interval_s: float = 0.3):
        self.threshold = threshold
        self.min_interval_s = min_interval_s
        self.reset()

    def reset(self) -> None:
        self.state = StepState.IDLE
        self.step_count = 0
        self._last_magnitude: Optional[float] = None
        self._last_step_t: Optional[float] = None

    def update(self, t: float, magnitude: float) -> bool:
        """Feed one magnitude sample; True if it is an accepted step."""
        previous = self._last_magnitude
        self._last_magnitude = magnitude

        if previous is None:
            self.state = StepState.IDLE
            return False

        rising = magnitude - previous > self.threshold
        rested = self._last_step_t is None or t - self._last_step_t >= self.min_interval_s
        if rising and rested:
            self.state = StepState.STEP_DETECTED
            self.step_count += 1
            self._last_step_t = t
            return True

        self.state = StepState.IDLE
        return False


class PdrIntegrator:
    """
    Turns accelerometer samples into per-step displacements.

    Heading comes from a shared ``HeadingTracker``. If a target travel
    heading is set, steps more than ``target_tolerance_deg`` away from it
    are ignored as off-axis motion (e.g. turning in place).

    Usage:
        >>> tracker = HeadingTracker()
        >>> pdr = PdrIntegrator(tracker)
        >>> event = pdr.update(AccelSample(t=0.0, ax=0.0, ay=0.0, az=9.8))   # primes
        >>> event is None
        True

    The integrator keeps its own dead-reckoned (x, y), which callers may
    ignore when feeding the deltas into a fusion filter.
    """

    def __init__(self, heading: HeadingTracker, config: Optional[PdrConfig] = None):
        self.config = config or PdrConfig()
        self.heading = heading
        self.detector = StepDetector(
            threshold=self.config.accel_delta_threshold,
            min_interval_s=self.config.min_step_interval_s,
        )
        self.target_heading_deg: Optional[float] = None
        self.x = 0.0
        self.y = 0.0
        self.ignored_steps = 0
        self.emitted_steps = 0

    @property
    def step_count(self) -> int:
        """Steps detected since the last reset (emitted or ignored)."""
        return self.detector.step_count

    def set_target_heading(self, heading_deg: Optional[float]) -> None:
        """Set (or clear with None) the desired travel heading."""
        self.target_heading_deg = heading_deg

    def update(self, sample: AccelSample) -> Optional[StepEvent]:
        """
        Feed one accelerometer sample.

        Returns:
            StepEvent for an accepted, on-axis step; None otherwise.

        Raises:
            SensorUnavailable: A step was detected but no heading is
                               available. The step is dropped.
        """
        if not self.detector.update(sample.t, sample.magnitude):
            return None

        heading_deg = self.heading.heading

        if self.target_heading_deg is not None:
            deviation = abs(angle_diff_deg(heading_deg, self.target_heading_deg))
            if deviation > self.config.target_tolerance_deg:
                self.ignored_steps += 1
                logger.debug(
                    "Step ignored: heading %.1f deg is %.1f deg off target %.1f deg",
                    heading_deg, deviation, self.target_heading_deg,
                )
                return None

        length = self.config.step_length_m
        dx, dy = step_displacement(length, heading_deg)
        self.x += dx
        self.y += dy
        self.emitted_steps += 1

        event = StepEvent(
            t=sample.t,
            index=self.detector.step_count,
            length_m=length,
            heading_deg=heading_deg,
            dx=dx,
            dy=dy,
        )
        logger.debug(
            "Step %d: dx=%.2f dy=%.2f heading=%.1f deg", event.index, dx, dy, heading_deg
        )
        return event

    def reset_to(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        """
        Clear step counters; optionally move the dead-reckoned position.

        The heading tracker and its sensor registration are untouched.
        """
        self.detector.reset()
        self.ignored_steps = 0
        self.emitted_steps = 0
        if x is not None and y is not None:
            self.x = float(x)
            self.y = float(y)


def detect_steps_peak_detector(
    accel_series: np.ndarray,
    dt: float,
    g: float = 9.81,
    min_peak_height: float = 1.0,
    min_peak_distance: float = 0.3,
    lowpass_cutoff: Optional[float] = 5.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Detect steps in a recorded accelerometer log.

    1. Magnitude ||a_k|| of each sample
    2. Gravity removal: a_dyn = ||a|| - g
    3. Optional 4th-order Butterworth low-pass (zero-phase)
    4. Peaks above ``min_peak_height`` at least ``min_peak_distance`` apart

    Args:
        accel_series: Accelerometer samples, shape (N, 3), m/s², gravity included.
        dt: Sample period (s).
        g: Gravity magnitude (m/s²).
        min_peak_height: Minimum dynamic acceleration of a step peak (m/s²).
        min_peak_distance: Minimum time between steps (s).
        lowpass_cutoff: Low-pass cutoff (Hz); None disables filtering.

    Returns:
        Tuple of (step_indices, accel_filtered):
            step_indices: Sample indices of detected steps, shape (n_steps,).
            accel_filtered: Processed dynamic magnitude, shape (N,).

    Example:
        >>> t = np.arange(0, 10, 0.01)
        >>> accel_z = -9.81 + 2.0 * np.sin(2 * np.pi * 2.0 * t)   # 2 steps/s
        >>> accel = np.column_stack([np.zeros_like(t), np.zeros_like(t), accel_z])
        >>> steps, _ = detect_steps_peak_detector(accel, dt=0.01, min_peak_distance=0.4)
    """
    accel_series = np.asarray(accel_series, dtype=float)
    if accel_series.ndim != 2 or accel_series.shape[1] != 3:
        raise ValueError(
            f"accel_series must have shape (N, 3), got {accel_series.shape}"
        )
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")
    if min_peak_distance <= 0:
        raise ValueError(f"min_peak_distance must be positive, got {min_peak_distance}")

    accel_dynamic = np.linalg.norm(accel_series, axis=1) - g

    accel_filtered = accel_dynamic
    # filtfilt needs more samples than its padding length
    if lowpass_cutoff is not None and len(accel_dynamic) > 27:
        normalized_cutoff = lowpass_cutoff / (0.5 / dt)
        if normalized_cutoff < 1.0:
            b, a = signal.butter(4, normalized_cutoff, btype="low")
            accel_filtered = signal.filtfilt(b, a, accel_dynamic)

    peak_indices, _ = signal.find_peaks(
        accel_filtered,
        height=min_peak_height,
        distance=max(1, int(min_peak_distance / dt)),
    )
    return peak_indices, accel_filtered


def integrate_steps(
    headings_deg: Sequence[float],
    step_length_m: float = 0.75,
    start_xy: Tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """
    Dead-reckoned track from a sequence of step headings.

    Returns:
        Positions after each step, shape (n_steps + 1, 2), starting with
        ``start_xy``.
    """
    track = np.zeros((len(headings_deg) + 1, 2))
    track[0] = start_xy
    for i, heading in enumerate(headings_deg):
        dx, dy = step_displacement(step_length_m, heading)
        track[i + 1] = track[i] + (dx, dy)
    return track
