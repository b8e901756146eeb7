"""
Motion sample and step event types.

Samples are produced by the platform sensor layer (accelerometer,
rotation-vector sensor) and pushed into the engine; steps are produced
by the PDR integrator. All are immutable.

Frame conventions:
    - Acceleration in the device body frame (m/s², gravity included).
    - Heading in compass degrees: 0 = +y (north), 90 = +x (east).
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class AccelSample:
    """
    Timestamped 3-axis accelerometer reading.

    Attributes:
        t: Timestamp (s, monotonic).
        ax, ay, az: Acceleration components (m/s²).
    """

    t: float
    ax: float
    ay: float
    az: float

    @property
    def magnitude(self) -> float:
        """Orientation-independent magnitude ||a|| (m/s²)."""
        return math.sqrt(self.ax * self.ax + self.ay * self.ay + self.az * self.az)


@dataclass(frozen=True)
class OrientationSample:
    """
    Timestamped orientation reading.

    Either ``rotation_vector`` (x, y, z[, w] of a unit quaternion, as
    delivered by a rotation-vector sensor) or a precomputed
    ``azimuth_deg`` must be given.
    """

    t: float
    rotation_vector: Optional[Tuple[float, ...]] = None
    azimuth_deg: Optional[float] = None

    def __post_init__(self) -> None:
        if self.rotation_vector is None and self.azimuth_deg is None:
            raise ValueError("OrientationSample needs rotation_vector or azimuth_deg")
        if self.rotation_vector is not None and len(self.rotation_vector) not in (3, 4, 5):
            raise ValueError(
                f"rotation_vector must have 3 to 5 components, got {len(self.rotation_vector)}"
            )


@dataclass(frozen=True)
class StepEvent:
    """
    One accepted step with its relative displacement.

    Attributes:
        t: Timestamp of the step (s).
        index: 1-based step count since the last reset.
        length_m: Step length (m).
        heading_deg: Offset-corrected heading used for the step (deg).
        dx: East displacement (m).
        dy: North displacement (m).
    """

    t: float
    index: int
    length_m: float
    heading_deg: float
    dx: float
    dy: float
