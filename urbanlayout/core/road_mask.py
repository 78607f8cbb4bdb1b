"""
Road corridors as rectangles.

Each road segment is widened into a rectangle of the road's width; the
resulting set of rectangles is the no-build mask used by the landmark placer
and the block filters. The same segments also feed the renderer as
position/length/angle records.
"""

from __future__ import annotations

import math
from typing import List, Optional

from urbanlayout.core.geometry import (
    Point,
    angle,
    bboxes_overlap,
    distance,
    get_bounding_box,
    lerp,
)
from urbanlayout.protocol import BBox, RoadRenderSegment, Roads


def expand_line_to_rect(p1: Point, p2: Point, width: float) -> List[Point]:
    """Rectangle of *width* centred on the segment; ``[]`` for zero length."""
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return []
    nx = -dy / length * (width / 2)
    ny = dx / length * (width / 2)
    return [
        (p1[0] + nx, p1[1] + ny),
        (p2[0] + nx, p2[1] + ny),
        (p2[0] - nx, p2[1] - ny),
        (p1[0] - nx, p1[1] - ny),
    ]


def create_road_mask(roads: Roads, bbox: Optional[BBox] = None) -> List[List[Point]]:
    """Road rectangles, optionally culled to those whose bounds touch *bbox*."""
    mask = []
    for p1, p2 in roads.segments():
        rect = expand_line_to_rect(p1, p2, roads.width)
        if not rect:
            continue
        if bbox is not None and not bboxes_overlap(get_bounding_box(rect), bbox):
            continue
        mask.append(rect)
    return mask


def generate_road_segments(roads: Roads) -> List[RoadRenderSegment]:
    segments = []
    for p1, p2 in roads.segments():
        length = distance(p1, p2)
        if length == 0:
            continue
        segments.append(
            RoadRenderSegment(
                position=lerp(p1, p2, 0.5),
                length=length,
                width=roads.width,
                angle=angle(p1, p2),
            )
        )
    return segments
