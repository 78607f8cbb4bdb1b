"""
Geometry kernel: containment, intersection, SAT, rectangles and hulls.
"""
from __future__ import annotations

import math

import pytest

from urbanlayout.core.geometry import (
    angle,
    calculate_polygon_area,
    convex_hull,
    get_bounding_box,
    get_building_corners,
    inset_polygon,
    line_segment_intersection,
    point_in_polygon,
    point_to_segment_distance,
    polygons_intersect,
    segment_intersects_polygon,
)


# ---------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------
def _square(x0: float, y0: float, side: float):
    return [(x0, y0), (x0 + side, y0), (x0 + side, y0 + side), (x0, y0 + side)]


def _close(a, b, tol=1e-9) -> bool:
    return abs(a[0] - b[0]) < tol and abs(a[1] - b[1]) < tol


# ---------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "point, expected",
    [((5, 5), True), ((15, 5), False), ((-1, -1), False), ((9.9, 0.1), True)],
)
def test_point_in_square(point, expected):
    assert point_in_polygon(point, _square(0, 0, 10)) is expected


def test_point_in_concave_polygon():
    # L-shape: the notch at the top right is outside
    l_shape = [(0, 0), (10, 0), (10, 5), (5, 5), (5, 10), (0, 10)]
    assert point_in_polygon((2, 8), l_shape)
    assert not point_in_polygon((8, 8), l_shape)


def test_area_and_bbox():
    poly = [(0, 0), (4, 0), (4, 3)]
    assert calculate_polygon_area(poly) == pytest.approx(6.0)
    assert calculate_polygon_area(list(reversed(poly))) == pytest.approx(6.0)
    bbox = get_bounding_box(poly)
    assert (bbox.min_x, bbox.max_x, bbox.min_y, bbox.max_y) == (0, 4, 0, 3)


# ---------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------
def test_crossing_segments_meet():
    hit = line_segment_intersection((0, 0), (10, 10), (0, 10), (10, 0))
    assert hit is not None
    assert _close(hit, (5.0, 5.0))


def test_parallel_and_disjoint_segments():
    assert line_segment_intersection((0, 0), (10, 0), (0, 1), (10, 1)) is None
    assert line_segment_intersection((0, 0), (1, 1), (5, 0), (6, -3)) is None


def test_segment_against_polygon():
    sq = _square(0, 0, 10)
    assert segment_intersects_polygon((-5, 5), (15, 5), sq)     # passes through
    assert segment_intersects_polygon((5, 5), (6, 6), sq)       # fully inside
    assert not segment_intersects_polygon((-5, -5), (-1, 20), sq)


def test_point_to_segment_distance_clamps():
    assert point_to_segment_distance((5, 3), (0, 0), (10, 0)) == pytest.approx(3)
    assert point_to_segment_distance((13, 4), (0, 0), (10, 0)) == pytest.approx(5)
    assert point_to_segment_distance((1, 1), (0, 0), (0, 0)) == pytest.approx(math.sqrt(2))


# ---------------------------------------------------------------------
# Separating axis
# ---------------------------------------------------------------------
def test_sat_overlap_touch_and_gap():
    a = _square(0, 0, 10)
    assert polygons_intersect(a, _square(5, 5, 10))
    assert polygons_intersect(a, _square(10, 0, 10))            # shared edge
    assert not polygons_intersect(a, _square(10.01, 0, 10))


def test_sat_separates_on_diagonal_axis():
    # bounding boxes overlap; only the hypotenuse normal separates them
    triangle = [(12, 9), (13, 13), (9, 12)]
    assert not polygons_intersect(_square(0, 0, 10), triangle)


def test_sat_degenerate_inputs():
    assert not polygons_intersect([(0, 0), (1, 1)], _square(0, 0, 10))


# ---------------------------------------------------------------------
# Building rectangles
# ---------------------------------------------------------------------
def test_building_corners_unrotated():
    corners = get_building_corners((10, 20), 4, 2, 0)
    assert corners == [(8, 19), (12, 19), (12, 21), (8, 21)]


def test_building_corners_rotated_quarter_turn():
    corners = get_building_corners((0, 0), 4, 2, 90)
    expected = [(1, -2), (1, 2), (-1, 2), (-1, -2)]
    assert all(_close(c, e) for c, e in zip(corners, expected))
    assert calculate_polygon_area(corners) == pytest.approx(8)


def test_angle_in_degrees():
    assert angle((0, 0), (0, 5)) == pytest.approx(90)
    assert angle((0, 0), (-1, 0)) == pytest.approx(180)


# ---------------------------------------------------------------------
# Hulls & insets
# ---------------------------------------------------------------------
def test_convex_hull_drops_interior_and_keeps_input():
    pts = [(5, 5), (0, 0), (10, 0), (10, 10), (0, 10), (3, 7), (0, 0)]
    snapshot = list(pts)
    hull = convex_hull(pts)
    assert pts == snapshot
    assert sorted(hull) == [(0.0, 0.0), (0.0, 10.0), (10.0, 0.0), (10.0, 10.0)]
    assert hull[0] == (0.0, 0.0)


def test_convex_hull_collinear_and_tiny():
    assert convex_hull([(0, 0), (1, 1)]) == [(0.0, 0.0), (1.0, 1.0)]
    hull = convex_hull([(0, 0), (5, 0), (10, 0), (10, 10)])
    assert (5.0, 0.0) not in hull


@pytest.mark.parametrize("reverse", [False, True])
def test_inset_square_either_winding(reverse):
    sq = _square(0, 0, 10)
    if reverse:
        sq = list(reversed(sq))
    inner = inset_polygon(sq, 2)
    flat = [v for p in sorted((round(x, 6), round(y, 6)) for x, y in inner) for v in p]
    assert flat == pytest.approx([2, 2, 2, 8, 8, 2, 8, 8])
    assert inset_polygon([(0, 0), (1, 1)], 1) == []
