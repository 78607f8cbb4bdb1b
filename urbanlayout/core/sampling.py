"""
Poisson-disk sampling (Bridson-style dart throwing on a background grid).
"""

from __future__ import annotations

import math
from typing import List

import numpy as np

from urbanlayout.constants import POISSON_ATTEMPTS, POISSON_NEIGHBOURHOOD
from urbanlayout.core.geometry import Point
from urbanlayout.core.rng import SeededRNG
from urbanlayout.protocol import BBox


def poisson_disk_sample(
    bbox: BBox,
    min_dist: float,
    target_count: int,
    rng: SeededRNG,
    attempts: int = POISSON_ATTEMPTS,
) -> List[Point]:
    """Return up to *target_count* points in *bbox*, pairwise ≥ *min_dist* apart.

    The result is shorter than requested when the box saturates; that is a
    normal outcome, not an error.
    """
    if target_count <= 0 or min_dist <= 0 or bbox.width <= 0 or bbox.height <= 0:
        return []

    cell = min_dist / math.sqrt(2)
    cols = int(math.ceil(bbox.width / cell)) + 1
    rows = int(math.ceil(bbox.height / cell)) + 1
    grid = np.full((cols, rows), -1, dtype=np.int64)

    def to_cell(x: float, y: float):
        return int((x - bbox.min_x) / cell), int((y - bbox.min_y) / cell)

    def far_enough(x: float, y: float, gx: int, gy: int) -> bool:
        lo_x = max(gx - POISSON_NEIGHBOURHOOD, 0)
        hi_x = min(gx + POISSON_NEIGHBOURHOOD + 1, cols)
        lo_y = max(gy - POISSON_NEIGHBOURHOOD, 0)
        hi_y = min(gy + POISSON_NEIGHBOURHOOD + 1, rows)
        for idx in grid[lo_x:hi_x, lo_y:hi_y].ravel():
            if idx < 0:
                continue
            px, py = points[idx]
            if math.hypot(x - px, y - py) < min_dist:
                return False
        return True

    first = (rng.range(bbox.min_x, bbox.max_x), rng.range(bbox.min_y, bbox.max_y))
    points: List[Point] = [first]
    active = [0]
    grid[to_cell(*first)] = 0

    while active and len(points) < target_count:
        slot = int(rng.next_float() * len(active))
        px, py = points[active[slot]]

        found = False
        for _ in range(attempts):
            theta = rng.next_float() * 2 * math.pi
            radius = min_dist + rng.next_float() * min_dist
            x = px + radius * math.cos(theta)
            y = py + radius * math.sin(theta)
            if not bbox.contains((x, y)):
                continue
            gx, gy = to_cell(x, y)
            if not far_enough(x, y, gx, gy):
                continue
            points.append((x, y))
            active.append(len(points) - 1)
            grid[gx, gy] = len(points) - 1
            found = True
            break

        if not found:
            active.pop(slot)

    return points
