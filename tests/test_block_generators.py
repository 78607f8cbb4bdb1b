"""
Block layouts: the street-front scenario plus per-block invariants for every
layout strategy.
"""
from __future__ import annotations

import itertools

import pytest

from urbanlayout.constants import AREA_TOLERANCE
from urbanlayout.core.block_generators import (
    LAYOUT_GENERATORS,
    adjacent_segments,
    generate_block_layout,
    generate_fill,
    generate_perimeter,
    get_layout_generator,
    street_rows,
)
from urbanlayout.core.geometry import (
    calculate_polygon_area,
    get_building_corners,
    point_in_polygon,
    polygons_intersect,
)
from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.road_mask import create_road_mask
from urbanlayout.protocol import Block, Roads


# ---------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------
def _scenario_block(layout: str = "perimeter", coverage: float = 0.3) -> Block:
    return Block.from_dict(
        {
            "boundary": [[0, 0], [100, 0], [100, 60], [0, 60]],
            "size": [10, 10],
            "height": [10, 20],
            "spacing": 2,
            "coverage": coverage,
            "layout": layout,
        }
    )


def _scenario_roads() -> Roads:
    return Roads(width=10.0, lines=[[(0.0, 30.0), (100.0, 30.0)]])


def _grid_block(layout: str) -> Block:
    return Block.from_dict(
        {
            "boundary": [[0, 0], [120, 0], [120, 120], [0, 120]],
            "size": [12, 10],
            "height": [8, 24],
            "spacing": 3,
            "coverage": 0.5,
            "layout": layout,
        }
    )


def _grid_roads() -> Roads:
    return Roads(
        width=8.0,
        lines=[
            [(0.0, 60.0), (120.0, 60.0)],
            [(60.0, 0.0), (60.0, 120.0)],
            [(0.0, 0.0), (120.0, 0.0)],
        ],
    )


def _rect(b):
    return get_building_corners(b.center, b.size[0], b.size[1], b.rotation)


# ---------------------------------------------------------------------
# Street-front scenario
# ---------------------------------------------------------------------
def test_perimeter_scenario_positions():
    buildings = generate_block_layout(
        _scenario_block(), _scenario_roads(), SeededRNG(11)
    )
    assert len(buildings) == 16

    centres = sorted((round(b.center[1], 6), round(b.center[0], 6)) for b in buildings)
    expected = sorted((y, 8.0 + 12.0 * i) for y in (18.0, 42.0) for i in range(8))
    assert centres == expected

    assert sum(b.footprint for b in buildings) <= 1800 + AREA_TOLERANCE
    for b in buildings:
        assert b.rotation == pytest.approx(0.0)
        assert 10 <= b.size[2] <= 20
        assert 9.5 <= b.size[0] <= 10.5


def test_street_rows_count_and_margin():
    block = _scenario_block()
    cands = street_rows((0.0, 30.0), (100.0, 30.0), 10.0, block, SeededRNG(1), rows=2)
    # 8 per side, two sides, two rows
    assert len(cands) == 32
    ys = sorted({round(c.center[1], 6) for c in cands})
    assert ys == [6.0, 18.0, 42.0, 54.0]


def test_street_rows_short_segment():
    block = _scenario_block()
    assert street_rows((0.0, 0.0), (5.0, 0.0), 10.0, block, SeededRNG(1)) == []
    assert street_rows((0.0, 0.0), (0.0, 0.0), 10.0, block, SeededRNG(1)) == []


def test_adjacent_segments_include_crossing_and_fronting_roads():
    block = _scenario_block()
    roads = Roads(
        width=10.0,
        lines=[
            [(0.0, 30.0), (100.0, 30.0)],       # crosses
            [(0.0, -8.0), (100.0, -8.0)],       # runs just outside
            [(0.0, 500.0), (100.0, 500.0)],     # far away
        ],
    )
    segs = adjacent_segments(block, roads)
    assert ((0.0, 30.0), (100.0, 30.0)) in segs
    assert ((0.0, -8.0), (100.0, -8.0)) in segs
    assert len(segs) == 2


def test_fill_adds_rows_behind_the_street_front():
    block = _scenario_block(layout="fill")
    rng = SeededRNG(3)
    assert len(generate_fill(block, _scenario_roads(), rng)) > len(
        generate_perimeter(block, _scenario_roads(), SeededRNG(3))
    )


def test_no_roads_no_street_buildings():
    block = _scenario_block()
    assert generate_block_layout(block, Roads(width=10.0), SeededRNG(1)) == []


# ---------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------
@pytest.mark.parametrize(
    "layout, seed", list(itertools.product(sorted(LAYOUT_GENERATORS), [1, 42, 2024]))
)
def test_block_invariants(layout, seed):
    block = _grid_block(layout)
    roads = _grid_roads()
    buildings = generate_block_layout(block, roads, SeededRNG(seed))
    assert buildings

    rects = [_rect(b) for b in buildings]
    for rect in rects:
        assert all(point_in_polygon(c, block.boundary) for c in rect)
    for a, b in itertools.combinations(rects, 2):
        assert not polygons_intersect(a, b)

    mask = create_road_mask(roads)
    for rect in rects:
        assert not any(polygons_intersect(rect, road) for road in mask)

    target = calculate_polygon_area(block.boundary) * block.coverage
    assert sum(b.footprint for b in buildings) <= target + AREA_TOLERANCE
    for b in buildings:
        assert block.height[0] <= b.size[2] <= block.height[1]
        assert b.color == block.color


def test_occupied_and_exclusions_are_respected():
    block = _grid_block("fill")
    roads = _grid_roads()
    blocker = [(0.0, 60.0), (60.0, 60.0), (60.0, 120.0), (0.0, 120.0)]
    buildings = generate_block_layout(
        block, roads, SeededRNG(5), exclusions=[blocker]
    )
    assert buildings
    assert not any(polygons_intersect(_rect(b), blocker) for b in buildings)

    again = generate_block_layout(block, roads, SeededRNG(5), occupied=[blocker])
    assert not any(polygons_intersect(_rect(b), blocker) for b in again)


def test_unknown_layout_falls_back_to_fill():
    assert get_layout_generator("gothic") is LAYOUT_GENERATORS["fill"]
    assert get_layout_generator(None) is LAYOUT_GENERATORS["fill"]
    block = _grid_block("gothic")
    a = generate_block_layout(block, _grid_roads(), SeededRNG(8))
    b = generate_block_layout(_grid_block("fill"), _grid_roads(), SeededRNG(8))
    assert a == b


def test_zero_coverage_places_nothing():
    block = _scenario_block(coverage=0.0)
    assert generate_block_layout(block, _scenario_roads(), SeededRNG(1)) == []
