"""
Block layouts: turn one block polygon into building candidates.

Three strategies are registered in ``LAYOUT_GENERATORS``:

* ``perimeter`` – a single street-front row on both sides of every road
  segment that reaches the block.
* ``fill``      – the same rows repeated inward until the block is tiled.
* ``scatter``   – a street-front row plus Poisson-disk scattered interior
  buildings at random rotations.

Every strategy only proposes candidates. ``generate_block_layout`` adds the
corner lots from ``corner_lots``, runs everything through the shared
``FilterPipeline`` and promotes the survivors to ``Building`` records.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from urbanlayout.constants import (
    DEFAULT_LAYOUT,
    PERIMETER_JITTER,
    SCATTER_INTERIOR_SHARE,
    SCATTER_JITTER,
    SCATTER_OVERSAMPLE,
)
from urbanlayout.core.corner_lots import corner_candidates
from urbanlayout.core.filters import FilterPipeline
from urbanlayout.core.geometry import (
    Point,
    angle,
    calculate_polygon_area,
    distance,
    get_bounding_box,
    get_building_rect,
    point_to_polyline_distance,
    point_to_segment_distance,
    segment_intersects_polygon,
)
from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.road_mask import create_road_mask
from urbanlayout.core.sampling import poisson_disk_sample
from urbanlayout.protocol import Block, Building, BuildingCandidate, Roads
from urbanlayout.utils.logging import ColoredLogger

Generator = Callable[[Block, Roads, SeededRNG], List[BuildingCandidate]]


# ---------------------------------------------------------------------------
# SECTION 1: Road adjacency
# ---------------------------------------------------------------------------
def _segment_to_polygon_distance(p1: Point, p2: Point, polygon: Sequence[Point]) -> float:
    n = len(polygon)
    best = min(point_to_segment_distance(v, p1, p2) for v in polygon)
    for i in range(n):
        a, b = polygon[i], polygon[(i + 1) % n]
        best = min(
            best,
            point_to_segment_distance(p1, a, b),
            point_to_segment_distance(p2, a, b),
        )
    return best


def adjacent_segments(block: Block, roads: Roads) -> List[Tuple[Point, Point]]:
    """Road segments that cross the block or whose frontage row can reach it.

    A segment that crosses the block boundary always counts. On top of that,
    a segment running along the outside of a block fronts it when it comes
    within ``road_width / 2 + length + spacing``, the reach of its first
    row of buildings, so edge roads still get a street-front row.
    """
    reach = roads.width / 2 + block.size[1] + block.spacing
    found = []
    for p1, p2 in roads.segments():
        if distance(p1, p2) == 0:
            continue
        if segment_intersects_polygon(p1, p2, block.boundary):
            found.append((p1, p2))
        elif _segment_to_polygon_distance(p1, p2, block.boundary) <= reach:
            found.append((p1, p2))
    return found


# ---------------------------------------------------------------------------
# SECTION 2: Street-front rows
# ---------------------------------------------------------------------------
def street_rows(
    p1: Point,
    p2: Point,
    road_width: float,
    block: Block,
    rng: SeededRNG,
    rows: int = 1,
    jitter: float = PERIMETER_JITTER,
) -> List[BuildingCandidate]:
    """Rows of candidates on both sides of one road segment.

    The row is centred on the segment with equal leftover margin at each end;
    row *k* sits ``k * (length + spacing)`` further from the road than the
    street-front row.
    """
    width, length = block.size
    spacing = block.spacing
    seg_len = distance(p1, p2)
    pitch = width + spacing
    if seg_len == 0 or pitch <= 0:
        return []
    count = int(math.floor((seg_len + spacing) / pitch))
    if count <= 0:
        return []

    margin = (seg_len - (count * pitch - spacing)) / 2
    dir_x = (p2[0] - p1[0]) / seg_len
    dir_y = (p2[1] - p1[1]) / seg_len
    norm_x, norm_y = -dir_y, dir_x
    rotation = angle(p1, p2)
    step_inward = length + spacing

    candidates = []
    for row in range(rows):
        offset = road_width / 2 + length / 2 + spacing + row * step_inward
        for side in (1, -1):
            for i in range(count):
                t = margin + width / 2 + i * pitch
                cx = p1[0] + dir_x * t + norm_x * offset * side
                cy = p1[1] + dir_y * t + norm_y * offset * side
                candidates.append(
                    BuildingCandidate(
                        center=(cx, cy),
                        width=rng.jitter(width, jitter),
                        length=rng.jitter(length, jitter),
                        rotation=rotation,
                    )
                )
    return candidates


# ---------------------------------------------------------------------------
# SECTION 3: Strategies
# ---------------------------------------------------------------------------
def generate_perimeter(block: Block, roads: Roads, rng: SeededRNG) -> List[BuildingCandidate]:
    candidates = []
    for p1, p2 in adjacent_segments(block, roads):
        candidates.extend(street_rows(p1, p2, roads.width, block, rng))
    return candidates


def generate_fill(block: Block, roads: Roads, rng: SeededRNG) -> List[BuildingCandidate]:
    bbox = get_bounding_box(block.boundary)
    step_inward = block.size[1] + block.spacing
    if step_inward <= 0:
        return []
    rows = max(1, int(math.ceil(max(bbox.width, bbox.height) / step_inward)))
    candidates = []
    for p1, p2 in adjacent_segments(block, roads):
        candidates.extend(street_rows(p1, p2, roads.width, block, rng, rows=rows))
    return candidates


def scatter_points(block: Block, roads: Roads, rng: SeededRNG) -> List[Point]:
    """Interior sample points far enough from every road line."""
    width, length = block.size
    building_area = width * length
    if building_area <= 0:
        return []
    block_area = calculate_polygon_area(block.boundary)
    target = int(block_area * block.coverage / building_area * SCATTER_INTERIOR_SHARE)
    if target <= 0:
        return []

    min_dist = max(width, length) + block.spacing
    points = poisson_disk_sample(
        get_bounding_box(block.boundary), min_dist, target * SCATTER_OVERSAMPLE, rng
    )
    clearance = roads.width / 2 + length + 2 * block.spacing
    return [
        p for p in points
        if all(point_to_polyline_distance(p, line) > clearance for line in roads.lines)
    ]


def generate_scatter(block: Block, roads: Roads, rng: SeededRNG) -> List[BuildingCandidate]:
    candidates = generate_perimeter(block, roads, rng)
    width, length = block.size
    for point in scatter_points(block, roads, rng):
        candidates.append(
            BuildingCandidate(
                center=point,
                width=rng.jitter(width, SCATTER_JITTER),
                length=rng.jitter(length, SCATTER_JITTER),
                rotation=rng.range(0.0, 360.0),
            )
        )
    return candidates


LAYOUT_GENERATORS: Dict[str, Generator] = {
    "perimeter": generate_perimeter,
    "fill": generate_fill,
    "scatter": generate_scatter,
}


def get_layout_generator(layout: Optional[str]) -> Generator:
    generator = LAYOUT_GENERATORS.get(layout or "")
    if generator is None:
        ColoredLogger.debug(f"Unknown layout {layout!r}, falling back to {DEFAULT_LAYOUT}")
        return LAYOUT_GENERATORS[DEFAULT_LAYOUT]
    return generator


# ---------------------------------------------------------------------------
# SECTION 4: Block driver
# ---------------------------------------------------------------------------
def promote(candidate: BuildingCandidate, block: Block, rng: SeededRNG) -> Building:
    return Building(
        center=candidate.center,
        size=(candidate.width, candidate.length, rng.range(*block.height)),
        rotation=candidate.rotation,
        color=block.color,
    )


def generate_block_layout(
    block: Block,
    roads: Roads,
    rng: SeededRNG,
    pipeline: Optional[FilterPipeline] = None,
    occupied: Sequence[Sequence[Point]] = (),
    exclusions: Sequence[Sequence[Point]] = (),
    within: Sequence[Sequence[Point]] = (),
    target_area: Optional[float] = None,
) -> List[Building]:
    """Generate, filter and promote the buildings of a single block.

    *occupied* holds footprints already claimed by earlier blocks and
    *exclusions* the landmark, park and river polygons to keep clear of.
    Corner lots are placed first and their footprint comes out of the
    coverage budget before the layout's own candidates are considered.
    """
    pipeline = pipeline or FilterPipeline()
    road_mask = create_road_mask(roads, get_bounding_box(block.boundary))
    if target_area is None:
        target_area = calculate_polygon_area(block.boundary) * block.coverage

    corners = corner_candidates(block, roads, rng)
    if corners:
        corners = pipeline.run(
            corners,
            block.boundary,
            road_mask,
            target_area,
            rng,
            occupied=occupied,
            exclusions=exclusions,
            within=within,
        )
    taken = list(occupied) + [get_building_rect(c) for c in corners]
    remaining = target_area - sum(c.area for c in corners)

    candidates = get_layout_generator(block.layout)(block, roads, rng)
    survivors = pipeline.run(
        candidates,
        block.boundary,
        road_mask,
        remaining,
        rng,
        occupied=taken,
        exclusions=exclusions,
        within=within,
    )
    ColoredLogger.debug(
        f"Block layout={block.layout}: {len(corners)} corner arms, {len(candidates)} candidates, "
        f"{len(survivors)} kept (target area {target_area:.0f})"
    )
    return [promote(c, block, rng) for c in corners + survivors]
