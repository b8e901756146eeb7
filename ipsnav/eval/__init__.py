"""
Evaluation and visualization for offline runs.

Modules:
    metrics: position errors, RMSE, summary statistics, route deviation
    plots: floor-plan track plots and error CDFs

The plotting module imports matplotlib; import it explicitly with
``from ipsnav.eval import plots``.
"""

from .metrics import (
    compute_error_stats,
    compute_position_errors,
    compute_rmse,
    compute_route_deviation,
)

__all__ = [
    "compute_position_errors",
    "compute_rmse",
    "compute_error_stats",
    "compute_route_deviation",
]
