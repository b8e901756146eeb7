"""Shared angle and geometry helpers."""

from ipsnav.utils.angles import angle_diff_deg, wrap_heading_deg, wrap_signed_deg
from ipsnav.utils.geometry import (
    euclidean,
    point_to_polyline_distance,
    point_to_segment_distance,
)

__all__ = [
    "angle_diff_deg",
    "wrap_heading_deg",
    "wrap_signed_deg",
    "euclidean",
    "point_to_segment_distance",
    "point_to_polyline_distance",
]
