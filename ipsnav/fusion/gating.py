"""
Minimum-displacement gating of absolute fixes.

A stationary user still receives a slightly different Wi-Fi estimate on
every scan. Applying each of them makes the fused position jitter, so a
fix is only applied when it lies more than ``min_displacement_m`` from
the previously applied fix:

    apply(z_k)  ⇔  z_prev is None  or  ||z_k − z_prev|| > d_min

The reference point only moves when a fix is applied, so a slow drift
of small steps is eventually accepted once it accumulates past d_min.
"""

import math
from typing import Optional, Tuple


class DisplacementGate:
    """
    Accept/reject decisions for successive position fixes.

    Example:
        >>> gate = DisplacementGate(0.25)
        >>> gate.accept(1.0, 1.0)    # first fix always passes
        True
        >>> gate.accept(1.1, 1.0)
        False
        >>> gate.accept(1.5, 1.0)
        True
    """

    def __init__(self, min_displacement_m: float = 0.25):
        if min_displacement_m < 0:
            raise ValueError(
                f"min_displacement_m must be non-negative, got {min_displacement_m}"
            )
        self.min_displacement_m = min_displacement_m
        self.last_applied: Optional[Tuple[float, float]] = None

    def displacement(self, x: float, y: float) -> float:
        """Distance from the last applied fix; +inf when there is none."""
        if self.last_applied is None:
            return math.inf
        return math.hypot(x - self.last_applied[0], y - self.last_applied[1])

    def should_apply(self, x: float, y: float) -> bool:
        return self.displacement(x, y) > self.min_displacement_m

    def accept(self, x: float, y: float) -> bool:
        """``should_apply`` that also records (x, y) when it passes."""
        if not self.should_apply(x, y):
            return False
        self.last_applied = (float(x), float(y))
        return True

    def reset(self) -> None:
        self.last_applied = None
