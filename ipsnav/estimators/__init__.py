"""State estimators for position fusion."""

from ipsnav.estimators.base import StateEstimator
from ipsnav.estimators.kalman_filter import FusionKalmanFilter, FusionState

__all__ = ["StateEstimator", "FusionKalmanFilter", "FusionState"]
