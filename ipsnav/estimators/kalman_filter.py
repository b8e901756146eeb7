"""
Position fusion Kalman filter.

State x = [x, y, vx, vy] in floor-local meters. The filter fuses two
asynchronous sources:

    - PDR step displacements as a control input (prediction)
    - Wi-Fi fingerprint fixes as direct position measurements (correction)

Prediction with control u = (dx, dy):
    x ← x + [dx, dy, 0, 0]
    P_ii ← P_ii + q          for every diagonal term

Correction with z = (x_meas, y_meas), one scalar update per axis i ∈ {x, y}:
    K_i = P_ii / (P_ii + r)
    x_i ← x_i + K_i (z_i − x_i)
    P_ii ← (1 − K_i) P_ii

Both operations are no-ops until ``reset`` has placed the filter at a
known position; the engine bootstraps it from the first Wi-Fi fix.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ipsnav.estimators.base import StateEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FusionState:
    """
    Read-only snapshot of the fused estimate.

    Attributes:
        x, y: Position (m).
        vx, vy: Velocity (m/s); carried in the state, unused for display.
        covariance: 4×4 covariance P (copy).
        initialized: False until the first ``reset``.
    """

    x: float
    y: float
    vx: float
    vy: float
    covariance: np.ndarray
    initialized: bool

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


class FusionKalmanFilter(StateEstimator):
    """
    Constant-velocity position filter with scalar per-axis corrections.

    Attributes:
        q: Process noise added to each diagonal of P per prediction.
        r: Measurement noise variance of a Wi-Fi fix (m²).

    Example:
        >>> kf = FusionKalmanFilter(process_noise=0.05, measurement_noise=1.0)
        >>> kf.reset(0.0, 0.0)
        >>> for _ in range(5):
        ...     kf.predict(1.0, 0.0)
        >>> kf.position()
        (5.0, 0.0)
    """

    def __init__(self, process_noise: float = 0.05, measurement_noise: float = 1.0):
        super().__init__(state_dim=4)
        if process_noise < 0:
            raise ValueError(f"process_noise must be non-negative, got {process_noise}")
        if measurement_noise <= 0:
            raise ValueError(f"measurement_noise must be positive, got {measurement_noise}")
        self.q = float(process_noise)
        self.r = float(measurement_noise)

    def reset(self, x: float, y: float) -> None:
        """Place the filter at (x, y) with zero velocity and P = I."""
        self.state = np.array([float(x), float(y), 0.0, 0.0])
        self.covariance = np.eye(self.state_dim)
        logger.debug("Filter reset to x=%.2f y=%.2f", x, y)

    def predict(self, dx: float = 0.0, dy: float = 0.0) -> None:
        """Shift position by a PDR displacement and inflate P."""
        if not self.initialized:
            return
        self.state[0] += dx
        self.state[1] += dy
        self.covariance[np.diag_indices(self.state_dim)] += self.q

    def correct(self, x_meas: float, y_meas: float) -> None:
        """Pull the position towards an absolute fix."""
        if not self.initialized:
            return
        for i, z_i in enumerate((x_meas, y_meas)):
            p_ii = self.covariance[i, i]
            gain = p_ii / (p_ii + self.r)
            self.state[i] += gain * (z_i - self.state[i])
            self.covariance[i, i] = (1.0 - gain) * p_ii

    def update(self, z: np.ndarray) -> None:
        """``correct`` with a measurement vector (x, y)."""
        z = np.asarray(z, dtype=float)
        if z.shape != (2,):
            raise ValueError(f"Measurement z must have shape (2,), got {z.shape}")
        self.correct(z[0], z[1])

    def position(self) -> Optional[Tuple[float, float]]:
        """Current (x, y), or None before the first reset."""
        if not self.initialized:
            return None
        return (float(self.state[0]), float(self.state[1]))

    def snapshot(self) -> FusionState:
        if not self.initialized:
            return FusionState(0.0, 0.0, 0.0, 0.0, np.eye(self.state_dim), False)
        x, y, vx, vy = (float(v) for v in self.state)
        return FusionState(x, y, vx, vy, self.covariance.copy(), True)
