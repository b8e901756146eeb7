"""Unit tests for ipsnav.utils angle and geometry helpers."""

import math

import numpy as np
import pytest

from ipsnav.utils.angles import angle_diff_deg, wrap_heading_deg, wrap_signed_deg
from ipsnav.utils.geometry import (
    euclidean,
    point_to_polyline_distance,
    point_to_segment_distance,
)


@pytest.mark.parametrize(
    "angle, expected",
    [(0.0, 0.0), (360.0, 0.0), (-90.0, 270.0), (725.0, 5.0), (-1e-17, 0.0)],
)
def test_wrap_heading(angle, expected):
    assert wrap_heading_deg(angle) == pytest.approx(expected)
    assert 0.0 <= wrap_heading_deg(angle) < 360.0


def test_wrap_signed():
    assert wrap_signed_deg(190.0) == pytest.approx(-170.0)
    assert wrap_signed_deg(180.0) == pytest.approx(-180.0)
    np.testing.assert_allclose(wrap_signed_deg(np.array([-190.0, 90.0])), [170.0, 90.0])


def test_angle_diff_across_north():
    assert angle_diff_deg(10.0, 350.0) == pytest.approx(20.0)
    assert angle_diff_deg(350.0, 10.0) == pytest.approx(-20.0)
    assert angle_diff_deg(90.0, 90.0) == pytest.approx(0.0)


class TestGeometry:
    def test_euclidean(self):
        assert euclidean((0.0, 0.0), (3.0, 4.0)) == 5.0

    def test_segment_interior_and_ends(self):
        a, b = (0.0, 0.0), (10.0, 0.0)
        assert point_to_segment_distance((5.0, 3.0), a, b) == pytest.approx(3.0)
        assert point_to_segment_distance((-3.0, 4.0), a, b) == pytest.approx(5.0)
        assert point_to_segment_distance((13.0, -4.0), a, b) == pytest.approx(5.0)

    def test_degenerate_segment(self):
        assert point_to_segment_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == 5.0

    def test_polyline(self):
        polyline = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
        assert point_to_polyline_distance((12.0, 5.0), polyline) == pytest.approx(2.0)
        assert point_to_polyline_distance((1.0, 1.0), [(0.0, 0.0)]) == pytest.approx(math.sqrt(2.0))
        assert point_to_polyline_distance((1.0, 1.0), []) == math.inf
