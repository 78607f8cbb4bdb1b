"""
Planar geometry kernel shared by every layout stage.

Points are ``(x, y)`` tuples and polygons are sequences of points that are
implicitly closed (the last vertex connects back to the first).
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from urbanlayout.constants import PARALLEL_EPSILON
from urbanlayout.protocol import BBox, BuildingCandidate

Point = Tuple[float, float]
Polygon = Sequence[Point]


# ---------------------------------------------------------------------------
# SECTION 1: Scalar helpers
# ---------------------------------------------------------------------------
def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def angle(p1: Point, p2: Point) -> float:
    """Direction from *p1* to *p2* in degrees, counter-clockwise from +X."""
    return math.degrees(math.atan2(p2[1] - p1[1], p2[0] - p1[0]))


def cross(o: Point, a: Point, b: Point) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return distance(p, a)
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return distance(p, (a[0] + t * dx, a[1] + t * dy))


def point_to_polyline_distance(p: Point, line: Sequence[Point]) -> float:
    if len(line) == 1:
        return distance(p, line[0])
    return min(
        point_to_segment_distance(p, line[i], line[i + 1])
        for i in range(len(line) - 1)
    )


# ---------------------------------------------------------------------------
# SECTION 2: Polygon measures
# ---------------------------------------------------------------------------
def calculate_polygon_area(polygon: Polygon) -> float:
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2


def signed_area(polygon: Polygon) -> float:
    n = len(polygon)
    total = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2


def get_bounding_box(polygon: Polygon) -> BBox:
    xs = [p[0] for p in polygon]
    ys = [p[1] for p in polygon]
    return BBox(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))


def bbox_to_polygon(bbox: BBox) -> List[Point]:
    return [
        (bbox.min_x, bbox.min_y),
        (bbox.max_x, bbox.min_y),
        (bbox.max_x, bbox.max_y),
        (bbox.min_x, bbox.max_y),
    ]


def bboxes_overlap(a: BBox, b: BBox) -> bool:
    return not (
        a.max_x < b.min_x or b.max_x < a.min_x
        or a.max_y < b.min_y or b.max_y < a.min_y
    )


# ---------------------------------------------------------------------------
# SECTION 3: Containment & intersection
# ---------------------------------------------------------------------------
def point_in_polygon(point: Point, polygon: Polygon) -> bool:
    """Ray-casting parity test. Points exactly on an edge may go either way."""
    x, y = point
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def line_segment_intersection(
    p1: Point, p2: Point, p3: Point, p4: Point
) -> Optional[Point]:
    d1x, d1y = p2[0] - p1[0], p2[1] - p1[1]
    d2x, d2y = p4[0] - p3[0], p4[1] - p3[1]
    denom = d1x * d2y - d1y * d2x
    if abs(denom) < PARALLEL_EPSILON:
        return None
    ox, oy = p3[0] - p1[0], p3[1] - p1[1]
    t = (ox * d2y - oy * d2x) / denom
    u = (ox * d1y - oy * d1x) / denom
    if t < 0 or t > 1 or u < 0 or u > 1:
        return None
    return (p1[0] + t * d1x, p1[1] + t * d1y)


def segment_intersects_polygon(p1: Point, p2: Point, polygon: Polygon) -> bool:
    if point_in_polygon(p1, polygon) or point_in_polygon(p2, polygon):
        return True
    n = len(polygon)
    for i in range(n):
        if line_segment_intersection(p1, p2, polygon[i], polygon[(i + 1) % n]):
            return True
    return False


def project_polygon(polygon: Polygon, axis: Point) -> Tuple[float, float]:
    dots = [p[0] * axis[0] + p[1] * axis[1] for p in polygon]
    return min(dots), max(dots)


def polygons_intersect(a: Polygon, b: Polygon) -> bool:
    """Separating-axis test; exact for convex polygons, touching counts as a hit."""
    if len(a) < 3 or len(b) < 3:
        return False
    for polygon in (a, b):
        n = len(polygon)
        for i in range(n):
            x1, y1 = polygon[i]
            x2, y2 = polygon[(i + 1) % n]
            axis = (-(y2 - y1), x2 - x1)
            if axis == (0, 0):
                continue
            min_a, max_a = project_polygon(a, axis)
            min_b, max_b = project_polygon(b, axis)
            if max_a < min_b or max_b < min_a:
                return False
    return True


# ---------------------------------------------------------------------------
# SECTION 4: Building rectangles
# ---------------------------------------------------------------------------
def get_building_corners(
    center: Point, width: float, length: float, rotation: float
) -> List[Point]:
    """Corners of a *width* x *length* rectangle rotated by *rotation* degrees.

    Width runs along the local X axis, so a building rotated to a road's
    angle has its width along the road and its length away from it.
    """
    cx, cy = center
    hw = width / 2
    hl = length / 2
    rad = math.radians(rotation)
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    local = ((-hw, -hl), (hw, -hl), (hw, hl), (-hw, hl))
    return [
        (cx + lx * cos_r - ly * sin_r, cy + lx * sin_r + ly * cos_r)
        for lx, ly in local
    ]


def get_building_rect(candidate: BuildingCandidate) -> List[Point]:
    return get_building_corners(
        candidate.center, candidate.width, candidate.length, candidate.rotation
    )


# ---------------------------------------------------------------------------
# SECTION 5: Hulls & offsets
# ---------------------------------------------------------------------------
def convex_hull(points: Sequence[Point]) -> List[Point]:
    """Graham scan. The caller's sequence is copied, never reordered."""
    pts = list(dict.fromkeys((float(x), float(y)) for x, y in points))
    if len(pts) < 3:
        return pts

    pivot_idx = min(range(len(pts)), key=lambda i: (pts[i][1], pts[i][0]))
    pts[0], pts[pivot_idx] = pts[pivot_idx], pts[0]
    pivot = pts[0]

    rest = sorted(
        pts[1:],
        key=lambda p: (
            math.atan2(p[1] - pivot[1], p[0] - pivot[0]),
            (p[0] - pivot[0]) ** 2 + (p[1] - pivot[1]) ** 2,
        ),
    )

    hull = [pivot]
    for p in rest:
        while len(hull) >= 2 and cross(hull[-2], hull[-1], p) <= 0:
            hull.pop()
        hull.append(p)
    return hull


def inset_polygon(polygon: Polygon, dist: float) -> List[Point]:
    """Move every vertex *dist* inward along its corner bisector.

    Works for either winding. Returns ``[]`` for fewer than three vertices;
    large insets on thin polygons can self-intersect.
    """
    n = len(polygon)
    if n < 3:
        return []
    signed_dist = -dist if signed_area(polygon) >= 0 else dist

    def _unit(vx: float, vy: float) -> Point:
        length = math.hypot(vx, vy)
        return (vx / length, vy / length) if length > 0 else (0.0, 0.0)

    result = []
    for i in range(n):
        prev = polygon[(i - 1) % n]
        curr = polygon[i]
        nxt = polygon[(i + 1) % n]
        v1 = _unit(curr[0] - prev[0], curr[1] - prev[1])
        v2 = _unit(nxt[0] - curr[0], nxt[1] - curr[1])
        n1 = (v1[1], -v1[0])
        n2 = (v2[1], -v2[0])
        bis = _unit(n1[0] + n2[0], n1[1] + n2[1])
        dot = n1[0] * bis[0] + n1[1] * bis[1]
        offset = signed_dist / dot if abs(dot) > 0.001 else signed_dist
        result.append((curr[0] + bis[0] * offset, curr[1] + bis[1] * offset))
    return result
