"""
Angle wrapping utilities in degrees.

Compass headings live in [0, 360) and turn angles in [-180, 180). Both
wrap, so differences must be taken on the circle: without wrapping,
359° vs 1° looks like a 358° change instead of 2°.
"""

from typing import Union

import numpy as np


def wrap_heading_deg(angle_deg: float) -> float:
    """
    Wrap an angle to the compass range [0, 360).

    Example:
        >>> wrap_heading_deg(-90.0)
        270.0
        >>> wrap_heading_deg(725.0)
        5.0
    """
    wrapped = float(angle_deg) % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def wrap_signed_deg(angle_deg: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Wrap angle(s) to the signed range [-180, 180).

    Example:
        >>> wrap_signed_deg(190.0)
        -170.0
    """
    wrapped = (np.asarray(angle_deg, dtype=float) + 180.0) % 360.0 - 180.0
    if np.ndim(wrapped) == 0:
        return float(wrapped)
    return wrapped


def angle_diff_deg(angle1: float, angle2: float) -> float:
    """
    Shortest signed difference ``angle1 - angle2`` in degrees.

    Example:
        >>> angle_diff_deg(10.0, 350.0)
        20.0
        >>> angle_diff_deg(350.0, 10.0)
        -20.0
    """
    return wrap_signed_deg(angle1 - angle2)
