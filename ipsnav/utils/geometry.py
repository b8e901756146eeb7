"""
Planar geometry helpers for floor-local coordinates (meters).
"""

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]


def euclidean(a: Point, b: Point) -> float:
    """Straight-line distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """
    Distance from point ``p`` to segment ``ab``.

    The projection parameter is clamped to the segment ends, so points
    beyond either end measure to that endpoint. A degenerate segment
    (a == b) reduces to point distance.

    Example:
        >>> point_to_segment_distance((5.0, 3.0), (0.0, 0.0), (10.0, 0.0))
        3.0
        >>> point_to_segment_distance((-3.0, 4.0), (0.0, 0.0), (10.0, 0.0))
        5.0
    """
    px, py = p
    x1, y1 = a
    x2, y2 = b
    dx = x2 - x1
    dy = y2 - y1
    seg_len_sq = dx * dx + dy * dy
    if seg_len_sq == 0.0:
        return math.hypot(px - x1, py - y1)

    t = ((px - x1) * dx + (py - y1) * dy) / seg_len_sq
    if t < 0.0:
        return math.hypot(px - x1, py - y1)
    if t > 1.0:
        return math.hypot(px - x2, py - y2)
    return math.hypot(px - (x1 + t * dx), py - (y1 + t * dy))


def point_to_polyline_distance(p: Point, polyline: Sequence[Point]) -> float:
    """
    Minimum distance from ``p`` to any segment of ``polyline``.

    A single-vertex polyline measures to that vertex; an empty one
    returns +inf.
    """
    if len(polyline) == 0:
        return math.inf
    if len(polyline) == 1:
        return euclidean(p, polyline[0])
    return min(
        point_to_segment_distance(p, polyline[i], polyline[i + 1])
        for i in range(len(polyline) - 1)
    )
