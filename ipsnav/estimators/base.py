"""
Base class for recursive state estimators.

Defines the predict/update interface shared by the fusion filter and
any alternative estimator plugged into the engine.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np


class StateEstimator(ABC):
    """Abstract base class for state estimators."""

    def __init__(self, state_dim: int):
        """
        Initialize state estimator.

        Args:
            state_dim: Dimension of the state vector.
        """
        self.state_dim = state_dim
        self.state: Optional[np.ndarray] = None
        self.covariance: Optional[np.ndarray] = None

    @property
    def initialized(self) -> bool:
        return self.state is not None and self.covariance is not None

    @abstractmethod
    def predict(self, u: Optional[np.ndarray] = None) -> None:
        """
        Perform prediction step (time update).

        Args:
            u: Optional control input vector.
        """

    @abstractmethod
    def update(self, z: np.ndarray) -> None:
        """
        Perform measurement update (correction step).

        Args:
            z: Measurement vector.
        """

    def get_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Get current state estimate and covariance.

        Returns:
            Tuple of (state_vector, covariance_matrix), both copies.

        Raises:
            RuntimeError: If the estimator has not been initialized.
        """
        if not self.initialized:
            raise RuntimeError("Estimator not initialized. Call reset() first.")
        return self.state.copy(), self.covariance.copy()
