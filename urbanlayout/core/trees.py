"""
Tree scattering for parks and street frontage.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from urbanlayout.constants import (
    PARK_TREE_ATTEMPTS,
    PARK_TREE_DENSITY,
    PARK_TREE_INSET,
    PARK_TREE_MIN,
    STREET_TREE_SETBACK,
    STREET_TREE_SPACING,
    TREE_SPACING,
)
from urbanlayout.core.geometry import (
    Point,
    calculate_polygon_area,
    distance,
    get_bounding_box,
    get_building_corners,
    inset_polygon,
    point_in_polygon,
)
from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.road_mask import create_road_mask
from urbanlayout.protocol import Building, Park, River, Roads, Tree


def _inside_any(point: Point, polygons: Sequence[Sequence[Point]]) -> bool:
    return any(point_in_polygon(point, poly) for poly in polygons)


def _too_close(point: Point, trees: List[Tree]) -> bool:
    return any(distance(point, t.center) < TREE_SPACING for t in trees)


def generate_trees(
    parks: Sequence[Park],
    roads: Roads,
    buildings: Sequence[Building],
    rivers: Sequence[River],
    rng: SeededRNG,
) -> List[Tree]:
    trees: List[Tree] = []
    road_mask = create_road_mask(roads)
    river_polys = [r.vertices for r in rivers if len(r.vertices) >= 3]
    park_polys = [p.vertices for p in parks if len(p.vertices) >= 3]

    for polygon in park_polys:
        inner = inset_polygon(polygon, PARK_TREE_INSET)
        if len(inner) < 3:
            continue
        bbox = get_bounding_box(inner)
        wanted = max(PARK_TREE_MIN, int(calculate_polygon_area(polygon) * PARK_TREE_DENSITY))
        placed = 0
        attempts = 0
        while placed < wanted and attempts < wanted * PARK_TREE_ATTEMPTS:
            attempts += 1
            point = (rng.range(bbox.min_x, bbox.max_x), rng.range(bbox.min_y, bbox.max_y))
            if not point_in_polygon(point, inner):
                continue
            if _inside_any(point, road_mask) or _inside_any(point, river_polys):
                continue
            if _too_close(point, trees):
                continue
            trees.append(Tree(center=point, kind="park"))
            placed += 1

    building_polys = [
        get_building_corners(b.center, b.size[0], b.size[1], b.rotation) for b in buildings
    ]
    offset = roads.width / 2 + STREET_TREE_SETBACK
    for p1, p2 in roads.segments():
        seg_len = distance(p1, p2)
        if seg_len < STREET_TREE_SPACING:
            continue
        dir_x = (p2[0] - p1[0]) / seg_len
        dir_y = (p2[1] - p1[1]) / seg_len
        count = int(math.floor(seg_len / STREET_TREE_SPACING))
        start = (seg_len - (count - 1) * STREET_TREE_SPACING) / 2
        for k in range(count):
            t = start + k * STREET_TREE_SPACING
            base_x = p1[0] + dir_x * t
            base_y = p1[1] + dir_y * t
            for side in (1, -1):
                point = (base_x - dir_y * offset * side, base_y + dir_x * offset * side)
                if _too_close(point, trees):
                    continue
                if _inside_any(point, park_polys) or _inside_any(point, building_polys):
                    continue
                if _inside_any(point, road_mask) or _inside_any(point, river_polys):
                    continue
                trees.append(Tree(center=point, kind="street"))
    return trees
