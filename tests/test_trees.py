"""
Park and street tree placement.
"""
from __future__ import annotations

import itertools

from urbanlayout.constants import TREE_SPACING
from urbanlayout.core.geometry import distance, inset_polygon, point_in_polygon
from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.trees import generate_trees
from urbanlayout.protocol import Building, Park, River, Roads

PARK = Park(vertices=[(0.0, 0.0), (50.0, 0.0), (50.0, 50.0), (0.0, 50.0)])


def _street() -> Roads:
    return Roads(width=10.0, lines=[[(0.0, 100.0), (200.0, 100.0)]])


def test_park_trees_stay_inside_and_apart():
    trees = generate_trees([PARK], Roads(width=0.0), [], [], SeededRNG(6))
    assert 0 < len(trees) <= 7
    inner = inset_polygon(PARK.vertices, 3.0)
    for t in trees:
        assert t.kind == "park"
        assert point_in_polygon(t.center, inner)
    for a, b in itertools.combinations(trees, 2):
        assert distance(a.center, b.center) >= TREE_SPACING


def test_street_trees_line_both_sides():
    trees = generate_trees([], _street(), [], [], SeededRNG(1))
    assert len(trees) == 20
    assert {t.kind for t in trees} == {"street"}
    assert {round(t.center[1], 6) for t in trees} == {94.5, 105.5}
    xs = sorted({round(t.center[0], 6) for t in trees})
    assert xs == [10.0 + 20.0 * k for k in range(10)]


def test_street_trees_avoid_buildings_and_rivers():
    building = Building(center=(50.0, 115.0), size=(60.0, 20.0, 10.0))
    river = River(vertices=[(120.0, 80.0), (160.0, 80.0), (160.0, 120.0), (120.0, 120.0)])
    trees = generate_trees([], _street(), [building], [river], SeededRNG(1))
    for t in trees:
        assert not (20.0 <= t.center[0] <= 80.0 and t.center[1] > 100.0)
        assert not point_in_polygon(t.center, river.vertices)
    assert len(trees) < 20


def test_short_roads_and_degenerate_parks():
    roads = Roads(width=6.0, lines=[[(0.0, 0.0), (10.0, 0.0)]])
    sliver = Park(vertices=[(0.0, 0.0), (4.0, 0.0)])
    assert generate_trees([sliver], roads, [], [], SeededRNG(1)) == []
