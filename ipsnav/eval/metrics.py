"""
Position error metrics for recorded walks.

Errors are horizontal Euclidean distances between a ground-truth track
and an estimated track sampled at the same instants:

    e_k = ||p̂_k − p_k||
    RMSE = sqrt(mean(e_k²))
"""

from typing import Dict, Sequence, Tuple

import numpy as np

from ipsnav.utils.geometry import point_to_polyline_distance


def compute_position_errors(truth: np.ndarray, estimated: np.ndarray) -> np.ndarray:
    """
    Per-sample horizontal position errors.

    Args:
        truth: True positions, shape (N, 2).
        estimated: Estimated positions, shape (N, 2).

    Returns:
        errors: Euclidean error per sample, shape (N,).

    Raises:
        ValueError: If inputs have incompatible shapes.
    """
    truth = np.asarray(truth, dtype=float)
    estimated = np.asarray(estimated, dtype=float)

    if truth.shape != estimated.shape:
        raise ValueError(
            f"Shape mismatch: truth {truth.shape} vs estimated {estimated.shape}"
        )
    if truth.ndim != 2 or truth.shape[1] != 2:
        raise ValueError(f"Positions must have shape (N, 2), got {truth.shape}")

    return np.linalg.norm(estimated - truth, axis=1)


def compute_rmse(errors: np.ndarray) -> float:
    """Root mean square of error magnitudes."""
    errors = np.asarray(errors, dtype=float)
    if errors.size == 0:
        raise ValueError("Cannot compute RMSE of an empty error array")
    return float(np.sqrt(np.mean(errors**2)))


def compute_error_stats(errors: np.ndarray) -> Dict[str, float]:
    """
    Summary statistics of error magnitudes.

    Args:
        errors: Error magnitudes, shape (N,), or error vectors (N, d).

    Returns:
        stats: Dictionary with keys 'count', 'mean', 'median', 'std',
               'rmse', 'p90' and 'max'.
    """
    errors = np.asarray(errors, dtype=float)
    if errors.size == 0:
        raise ValueError("Cannot summarise an empty error array")

    if errors.ndim > 1:
        magnitudes = np.linalg.norm(errors, axis=1)
    else:
        magnitudes = np.abs(errors)

    return {
        "count": float(magnitudes.size),
        "mean": float(np.mean(magnitudes)),
        "median": float(np.median(magnitudes)),
        "std": float(np.std(magnitudes)),
        "rmse": float(np.sqrt(np.mean(magnitudes**2))),
        "p90": float(np.percentile(magnitudes, 90)),
        "max": float(np.max(magnitudes)),
    }


def compute_route_deviation(
    positions: np.ndarray, polyline: Sequence[Tuple[float, float]]
) -> np.ndarray:
    """
    Cross-track distance of each position to a route polyline.

    Args:
        positions: Positions, shape (N, 2).
        polyline: Route vertices in walking order.

    Returns:
        Distances (m), shape (N,).
    """
    positions = np.asarray(positions, dtype=float)
    return np.array([point_to_polyline_distance(tuple(p), polyline) for p in positions])
