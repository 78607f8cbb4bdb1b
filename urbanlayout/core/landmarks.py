"""
Landmark placement: keep priority buildings off the road corridors.

A landmark that already clears every road rectangle is returned untouched.
Otherwise its centre is walked outward on rings of growing radius until a
road-free spot turns up; if none does within the search radius the original
position is kept and the caller is expected to re-check.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from urbanlayout.constants import (
    AREA_TOLERANCE,
    LANDMARK_ANGLE_STEP_DEG,
    LANDMARK_RADIUS_FACTOR,
    LANDMARK_SEARCH_STEP,
)
from urbanlayout.core.geometry import (
    Point,
    distance,
    get_bounding_box,
    get_building_corners,
    polygons_intersect,
)
from urbanlayout.core.road_mask import create_road_mask
from urbanlayout.protocol import Landmark, Roads
from urbanlayout.utils.logging import ColoredLogger


def landmark_rect(landmark: Landmark, center: Optional[Point] = None) -> List[Point]:
    return get_building_corners(
        center if center is not None else landmark.center,
        landmark.size[0],
        landmark.size[1],
        landmark.rotation,
    )


def hits_road(rect: List[Point], roads: Roads) -> bool:
    mask = create_road_mask(roads, get_bounding_box(rect))
    return any(polygons_intersect(rect, road) for road in mask)


def _search_ring(
    landmark: Landmark, roads: Roads, radius: float
) -> Optional[Tuple[float, Point]]:
    cx, cy = landmark.center
    best: Optional[Tuple[float, Point]] = None
    for deg in range(0, 360, LANDMARK_ANGLE_STEP_DEG):
        theta = math.radians(deg)
        candidate = (cx + radius * math.cos(theta), cy + radius * math.sin(theta))
        if hits_road(landmark_rect(landmark, candidate), roads):
            continue
        d = distance(candidate, landmark.center)
        if best is None or d < best[0]:
            best = (d, candidate)
    return best


def adjust_landmark_position(landmark: Landmark, roads: Roads) -> Landmark:
    if not hits_road(landmark_rect(landmark), roads):
        return landmark

    max_radius = LANDMARK_RADIUS_FACTOR * max(landmark.size[0], landmark.size[1])
    radius = LANDMARK_SEARCH_STEP
    while radius <= max_radius:
        found = _search_ring(landmark, roads, radius)
        if found is not None and found[0] <= radius + AREA_TOLERANCE:
            ColoredLogger.debug(
                f"Landmark at {landmark.center} moved {found[0]:.1f}m off the road"
            )
            return Landmark(
                center=found[1], size=landmark.size, rotation=landmark.rotation
            )
        radius += LANDMARK_SEARCH_STEP

    ColoredLogger.warning(
        f"No road-free position within {max_radius:.1f}m of landmark at "
        f"{landmark.center}; keeping original position"
    )
    return landmark
