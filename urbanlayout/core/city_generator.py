"""
City-level orchestration: landmarks first, then every block, then trees.

Public entry points mirror what the rendering layer asks for:

* ``generate_city_rivers`` / ``generate_city_parks`` – pass-through today,
  kept as the place where river and park adjustment will live.
* ``generate_landmark_buildings`` – landmarks moved off the road corridors.
* ``generate_block_buildings`` – all ordinary buildings, block by block, each
  block avoiding what earlier blocks already claimed.
* ``generate_city`` – one full reproducible pass bundled as a ``CityLayout``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Union

from urbanlayout.constants import DEFAULT_SEED
from urbanlayout.core.block_generators import generate_block_layout
from urbanlayout.core.filters import FilterPipeline
from urbanlayout.core.geometry import (
    Point,
    bbox_to_polygon,
    bboxes_overlap,
    calculate_polygon_area,
    get_bounding_box,
    get_building_corners,
)
from urbanlayout.core.landmarks import adjust_landmark_position, landmark_rect
from urbanlayout.core.polygon_difference import subtract_polygons
from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.road_mask import generate_road_segments
from urbanlayout.core.trees import generate_trees
from urbanlayout.protocol import (
    Block,
    Building,
    CityDescriptor,
    CityLayout,
    Landmark,
    Park,
    River,
    RoadRenderSegment,
    Roads,
)
from urbanlayout.utils.logging import ColoredLogger

CityInput = Union[CityDescriptor, Dict[str, Any]]


def _as_descriptor(city: CityInput) -> CityDescriptor:
    if isinstance(city, CityDescriptor):
        return city
    return CityDescriptor.from_dict(city)


# ---------------------------------------------------------------------------
# SECTION 1: Rivers, parks, roads
# ---------------------------------------------------------------------------
def generate_city_rivers(rivers: Optional[Sequence[River]]) -> List[River]:
    return list(rivers or [])


def generate_city_parks(
    parks: Optional[Sequence[Park]], roads: Optional[Roads] = None
) -> List[Park]:
    return list(parks or [])


def generate_roads(roads: Roads) -> List[RoadRenderSegment]:
    return generate_road_segments(roads)


# ---------------------------------------------------------------------------
# SECTION 2: Landmarks
# ---------------------------------------------------------------------------
def generate_landmark_buildings(city: CityInput) -> List[Landmark]:
    city = _as_descriptor(city)
    placed = [adjust_landmark_position(lm, city.roads) for lm in city.landmarks]
    moved = sum(1 for a, b in zip(city.landmarks, placed) if a.center != b.center)
    ColoredLogger.info(f"Placed {len(placed)} landmarks ({moved} relocated off roads)")
    return placed


def landmarks_as_buildings(landmarks: Sequence[Landmark]) -> List[Building]:
    return [Building(center=lm.center, size=lm.size, rotation=lm.rotation) for lm in landmarks]


# ---------------------------------------------------------------------------
# SECTION 3: Blocks
# ---------------------------------------------------------------------------
def resolve_blocks(city: CityDescriptor) -> List[Block]:
    blocks = []
    for idx, settings in enumerate(city.block_settings()):
        try:
            blocks.append(Block.from_dict(settings))
        except (KeyError, TypeError, ValueError) as e:
            ColoredLogger.warning(f"Skipping block {idx}: {e}")
    return blocks


def carve_rivers(block: Block, rivers: Sequence[River]) -> List[Block]:
    """Split *block* into the parts left over once rivers are cut out.

    Parts are convex hulls of raster regions, so on a concave block they can
    spill past the original boundary; callers keep candidates inside both.
    """
    bbox = get_bounding_box(block.boundary)
    crossing = [
        r.vertices for r in rivers
        if len(r.vertices) >= 3 and bboxes_overlap(get_bounding_box(r.vertices), bbox)
    ]
    if not crossing:
        return [block]
    parts = subtract_polygons(block.boundary, crossing)
    ColoredLogger.debug(f"River carving split block into {len(parts)} parts")
    return [replace(block, boundary=part) for part in parts]


def exclusion_polygons(
    landmarks: Sequence[Landmark],
    parks: Sequence[Park],
    rivers: Sequence[River] = (),
) -> List[List[Point]]:
    """Landmark rectangles, the bounding rectangle of every park and the river polygons."""
    polys = [landmark_rect(lm) for lm in landmarks]
    polys.extend(
        bbox_to_polygon(get_bounding_box(p.vertices)) for p in parks if len(p.vertices) >= 3
    )
    polys.extend(list(r.vertices) for r in rivers if len(r.vertices) >= 3)
    return polys


def generate_block_buildings(
    city: CityInput,
    landmarks: Sequence[Landmark],
    rng: Optional[SeededRNG] = None,
    pipeline: Optional[FilterPipeline] = None,
) -> List[Building]:
    city = _as_descriptor(city)
    rng = rng or SeededRNG()
    pipeline = pipeline or FilterPipeline()
    exclusions = exclusion_polygons(landmarks, city.parks, city.rivers)

    buildings: List[Building] = []
    occupied: List[List[Point]] = []
    for idx, block in enumerate(resolve_blocks(city)):
        parts = carve_rivers(block, city.rivers)
        carved = parts != [block]
        budget = calculate_polygon_area(block.boundary) * block.coverage
        for part in parts:
            placed = generate_block_layout(
                part,
                city.roads,
                rng,
                pipeline,
                occupied=occupied,
                exclusions=exclusions,
                within=[block.boundary] if carved else (),
                target_area=min(calculate_polygon_area(part.boundary) * part.coverage, budget),
            )
            budget -= sum(b.footprint for b in placed)
            buildings.extend(placed)
            occupied.extend(
                get_building_corners(b.center, b.size[0], b.size[1], b.rotation)
                for b in placed
            )
        ColoredLogger.debug(f"Block {idx}: {len(buildings)} buildings so far")

    ColoredLogger.info(f"Generated {len(buildings)} block buildings")
    return buildings


# ---------------------------------------------------------------------------
# SECTION 4: Full pass
# ---------------------------------------------------------------------------
def generate_city(
    city: CityInput,
    seed: Optional[int] = DEFAULT_SEED,
    pipeline: Optional[FilterPipeline] = None,
    with_trees: bool = True,
) -> CityLayout:
    city = _as_descriptor(city)
    rng = SeededRNG(seed)

    rivers = generate_city_rivers(city.rivers)
    parks = generate_city_parks(city.parks, city.roads)
    landmarks = generate_landmark_buildings(city)
    buildings = generate_block_buildings(city, landmarks, rng, pipeline)
    trees = []
    if with_trees:
        footprints = landmarks_as_buildings(landmarks) + buildings
        trees = generate_trees(parks, city.roads, footprints, rivers, rng)

    layout = CityLayout(
        seed=rng.seed,
        landmarks=landmarks,
        buildings=buildings,
        parks=parks,
        rivers=rivers,
        road_segments=generate_roads(city.roads),
        trees=trees,
    )
    ColoredLogger.success(
        f"City seed={layout.seed}: {len(landmarks)} landmarks, {len(buildings)} buildings, "
        f"{len(trees)} trees | sha256={layout.sha256[:16]}..."
    )
    return layout
