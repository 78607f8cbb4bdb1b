"""
Corner lots: L-shaped buildings wrapped around road junctions.

A junction is any position where a road line starts or ends and at least
one other road direction leaves it. Every pair of neighbouring directions
(counter-clockwise) whose gap is wide enough gets one corner lot, set back
from both road edges. The L is emitted as two rectangular arms, one along
each road, so the lot goes through the same filters as any other candidate.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from urbanlayout.constants import (
    CORNER_DEPTH,
    CORNER_MAX_REACH_FACTOR,
    CORNER_MIN_ANGLE_DEG,
    CORNER_RAY_LENGTH,
    CORNER_SETBACK,
    CORNER_SIZE_JITTER,
    CORNER_WING,
)
from urbanlayout.core.geometry import (
    Point,
    distance,
    get_bounding_box,
    line_segment_intersection,
)
from urbanlayout.core.rng import SeededRNG
from urbanlayout.protocol import Block, BuildingCandidate, Roads

Direction = Tuple[float, float]


# ---------------------------------------------------------------------------
# SECTION 1: Junctions
# ---------------------------------------------------------------------------
def _key(p: Point) -> Tuple[float, float]:
    return (round(p[0], 6), round(p[1], 6))


def _unit_towards(origin: Point, target: Point) -> Optional[Direction]:
    length = distance(origin, target)
    if length == 0:
        return None
    return ((target[0] - origin[0]) / length, (target[1] - origin[1]) / length)


def road_junctions(roads: Roads) -> Dict[Point, List[Direction]]:
    """Map each junction position to the unit directions of the roads leaving it."""
    ends = set()
    for line in roads.lines:
        ends.add(_key(line[0]))
        ends.add(_key(line[-1]))

    junctions: Dict[Point, List[Direction]] = {}
    for line in roads.lines:
        for i, vertex in enumerate(line):
            key = _key(vertex)
            if key not in ends:
                continue
            dirs = junctions.setdefault(key, [])
            for j in (i - 1, i + 1):
                if 0 <= j < len(line):
                    d = _unit_towards(vertex, line[j])
                    if d is not None:
                        dirs.append(d)
    return {pos: dirs for pos, dirs in junctions.items() if len(dirs) >= 2}


def _heading(d: Direction) -> float:
    return math.atan2(d[1], d[0])


def corner_pairs(directions: List[Direction]) -> List[Tuple[Direction, Direction, float]]:
    """Neighbouring directions in counter-clockwise order with the gap between them.

    Gaps below ``CORNER_MIN_ANGLE_DEG`` or of half a turn and more are dropped.
    """
    if len(directions) < 2:
        return []
    ordered = sorted(directions, key=_heading)
    min_gap = math.radians(CORNER_MIN_ANGLE_DEG)
    pairs = []
    for i, e1 in enumerate(ordered):
        e2 = ordered[(i + 1) % len(ordered)]
        gap = _heading(e2) - _heading(e1)
        if gap < 0:
            gap += 2 * math.pi
        if min_gap <= gap < math.pi:
            pairs.append((e1, e2, gap))
    return pairs


# ---------------------------------------------------------------------------
# SECTION 2: Lot geometry
# ---------------------------------------------------------------------------
def inner_corner(
    node: Point, e1: Direction, e2: Direction, setback: float, depth: float
) -> Optional[Point]:
    """Where the two setback lines meet, or ``None`` if they don't close near *node*."""
    perp1 = (-e1[1], e1[0])
    perp2 = (e2[1], -e2[0])
    base1 = (node[0] + perp1[0] * setback, node[1] + perp1[1] * setback)
    base2 = (node[0] + perp2[0] * setback, node[1] + perp2[1] * setback)
    far1 = (base1[0] + e1[0] * CORNER_RAY_LENGTH, base1[1] + e1[1] * CORNER_RAY_LENGTH)
    far2 = (base2[0] + e2[0] * CORNER_RAY_LENGTH, base2[1] + e2[1] * CORNER_RAY_LENGTH)
    ic = line_segment_intersection(base1, far1, base2, far2)
    if ic is None or distance(ic, node) > depth * CORNER_MAX_REACH_FACTOR:
        return None
    return ic


def _arm(
    ic: Point, along: Direction, into: Direction, start: float, length: float, wing: float
) -> BuildingCandidate:
    offset = start + length / 2
    return BuildingCandidate(
        center=(
            ic[0] + along[0] * offset + into[0] * wing / 2,
            ic[1] + along[1] * offset + into[1] * wing / 2,
        ),
        width=length,
        length=wing,
        rotation=math.degrees(_heading(along)),
    )


def corner_lot_arms(
    node: Point,
    e1: Direction,
    e2: Direction,
    gap: float,
    road_width: float,
    depth: float,
    wing: float,
    spacing: float,
) -> List[BuildingCandidate]:
    """The two arms of one corner L.

    The arm along *e1* is pulled back from the inner corner on acute
    junctions so it clears the other road; the arm along *e2* starts past
    the first arm's outer face plus *spacing*.
    """
    ic = inner_corner(node, e1, e2, road_width / 2 + CORNER_SETBACK, depth)
    if ic is None:
        return []
    sin_gap = math.sin(gap)
    lean = max(0.0, math.cos(gap))

    arms = []
    start1 = wing * lean / sin_gap
    if depth - start1 > spacing:
        arms.append(_arm(ic, e1, (-e1[1], e1[0]), start1, depth - start1, wing))
    start2 = wing * (1 + lean) / sin_gap + spacing
    if depth - start2 > spacing:
        arms.append(_arm(ic, e2, (e2[1], -e2[0]), start2, depth - start2, wing))
    return arms


# ---------------------------------------------------------------------------
# SECTION 3: Per-block candidates
# ---------------------------------------------------------------------------
def corner_candidates(block: Block, roads: Roads, rng: SeededRNG) -> List[BuildingCandidate]:
    """Corner arms for every junction near *block*, unfiltered."""
    if not roads.lines:
        return []
    bbox = get_bounding_box(block.boundary)
    margin = CORNER_DEPTH
    lo, hi = 1 - CORNER_SIZE_JITTER, 1 + CORNER_SIZE_JITTER

    candidates = []
    for node, directions in road_junctions(roads).items():
        if not (
            bbox.min_x - margin <= node[0] <= bbox.max_x + margin
            and bbox.min_y - margin <= node[1] <= bbox.max_y + margin
        ):
            continue
        for e1, e2, gap in corner_pairs(directions):
            depth = rng.range(CORNER_DEPTH * lo, CORNER_DEPTH * hi)
            wing = rng.range(CORNER_WING * lo, CORNER_WING * hi)
            candidates.extend(
                corner_lot_arms(node, e1, e2, gap, roads.width, depth, wing, block.spacing)
            )
    return candidates
