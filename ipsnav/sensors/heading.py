"""
Compass heading from rotation-vector samples.

The rotation-vector sensor reports device attitude as a unit quaternion
(x, y, z, w). Azimuth is the rotation of the device's y axis about the
vertical, measured clockwise from magnetic north:

    R = rotation matrix of q
    azimuth = atan2(R[0][1], R[1][1])

Raw azimuth jitters by several degrees, so ``HeadingTracker`` smooths it
(exponential blend or change gate) and applies a user-set reference
offset.
"""

import logging
import math
from typing import Optional, Sequence

from ipsnav.config import HeadingConfig
from ipsnav.exceptions import SensorUnavailable
from ipsnav.sensors.types import OrientationSample
from ipsnav.utils.angles import angle_diff_deg, wrap_heading_deg

logger = logging.getLogger(__name__)


def azimuth_from_rotation_vector(rotation_vector: Sequence[float]) -> float:
    """
    Azimuth in compass degrees [0, 360) from a rotation vector.

    Args:
        rotation_vector: (x, y, z) or (x, y, z, w[, accuracy]). When w is
                         missing it is recovered from the unit norm.

    Returns:
        Azimuth (deg), 0 = north, 90 = east.

    Example:
        >>> azimuth_from_rotation_vector((0.0, 0.0, 0.0, 1.0))   # identity: facing north
        0.0
        >>> round(azimuth_from_rotation_vector((0.0, 0.0, -math.sqrt(0.5), math.sqrt(0.5))), 6)
        90.0
    """
    q1, q2, q3 = (float(v) for v in rotation_vector[:3])
    if len(rotation_vector) >= 4:
        q0 = float(rotation_vector[3])
    else:
        q0_sq = 1.0 - q1 * q1 - q2 * q2 - q3 * q3
        q0 = math.sqrt(q0_sq) if q0_sq > 0 else 0.0

    r01 = 2.0 * q1 * q2 - 2.0 * q3 * q0
    r11 = 1.0 - 2.0 * q1 * q1 - 2.0 * q3 * q3
    return wrap_heading_deg(math.degrees(math.atan2(r01, r11)))


class HeadingTracker:
    """
    Smoothed, offset-corrected compass heading.

    Modes (``HeadingConfig.mode``):
        - "exponential": h ← h + α·wrap(new − h), α = 0.1 by default.
        - "change_gate": h ← new only when |wrap(new − h)| > 45° or more
          than 0.5 s passed since the last accepted update.

    The reported heading is (smoothed − offset) wrapped to [0, 360).

    Usage:
        >>> tracker = HeadingTracker()
        >>> tracker.update(OrientationSample(t=0.0, azimuth_deg=90.0))
        90.0
        >>> tracker.zero()
        >>> tracker.heading
        0.0
    """

    def __init__(self, config: Optional[HeadingConfig] = None):
        self.config = config or HeadingConfig()
        self._smoothed: Optional[float] = None
        self._offset = 0.0
        self._last_update_t: Optional[float] = None
        self._unavailable_reason: Optional[str] = None

    # ------------------------------------------------------------------
    # Sensor availability
    # ------------------------------------------------------------------

    def mark_unavailable(self, reason: str = "orientation sensor not available") -> None:
        """Record that the orientation source could not be acquired."""
        self._unavailable_reason = reason
        logger.warning("Heading source unavailable: %s", reason)

    @property
    def available(self) -> bool:
        return self._unavailable_reason is None and self._smoothed is not None

    def _require(self) -> float:
        if self._unavailable_reason is not None:
            raise SensorUnavailable(self._unavailable_reason)
        if self._smoothed is None:
            raise SensorUnavailable("no orientation sample received yet")
        return self._smoothed

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update(self, sample: OrientationSample) -> Optional[float]:
        """
        Feed one orientation sample.

        Returns:
            The new reported heading if the smoothed value changed, None
            when the change gate held it.
        """
        if sample.azimuth_deg is not None:
            azimuth = wrap_heading_deg(sample.azimuth_deg)
        else:
            azimuth = azimuth_from_rotation_vector(sample.rotation_vector)

        # A sample arriving means the source works again
        self._unavailable_reason = None

        if self._smoothed is None:
            self._smoothed = azimuth
            self._last_update_t = sample.t
            return self.heading

        diff = angle_diff_deg(azimuth, self._smoothed)
        if self.config.mode == "exponential":
            self._smoothed = wrap_heading_deg(self._smoothed + self.config.smoothing_alpha * diff)
            self._last_update_t = sample.t
        else:
            elapsed = sample.t - self._last_update_t
            if abs(diff) <= self.config.gate_deg and elapsed <= self.config.gate_interval_s:
                return None
            self._smoothed = azimuth
            self._last_update_t = sample.t

        logger.debug("Heading %.1f deg (raw %.1f)", self.heading, azimuth)
        return self.heading

    # ------------------------------------------------------------------
    # Offsets
    # ------------------------------------------------------------------

    def zero(self) -> None:
        """Make the current heading the zero reference."""
        self._offset = self._require()

    def add_offset(self, delta_deg: float) -> None:
        """Shift the reference offset by ``delta_deg``."""
        self._offset = wrap_heading_deg(self._offset + delta_deg)

    @property
    def offset_deg(self) -> float:
        return self._offset

    @property
    def raw_heading(self) -> float:
        """Smoothed azimuth before the offset is applied."""
        return self._require()

    @property
    def heading(self) -> float:
        """
        Offset-corrected smoothed heading in [0, 360).

        Raises:
            SensorUnavailable: If the orientation source is missing or no
                               sample has arrived yet.
        """
        return wrap_heading_deg(self._require() - self._offset)
