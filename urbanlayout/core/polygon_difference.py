"""
Approximate polygon subtraction on a raster.

The subject's bounding box is sampled at cell centres, every centre is
classified as outside / available / occupied, 4-connected available cells
are flood-filled into regions and each region is re-bounded by the convex
hull of its cell centres. Concave leftovers therefore come back convexified
and edges are only accurate to about one cell; swap in an exact clipper
behind ``subtract_polygons`` if that ever matters.
"""

from __future__ import annotations

import math
from collections import deque
from typing import List, Sequence

import numpy as np

from urbanlayout.constants import DIFFERENCE_RESOLUTION
from urbanlayout.core.geometry import (
    Point,
    bboxes_overlap,
    convex_hull,
    get_bounding_box,
    point_in_polygon,
)

OUTSIDE = 0
AVAILABLE = 1
OCCUPIED = 2


def classify_cells(
    subject: Sequence[Point],
    holes: Sequence[Sequence[Point]],
    resolution: float,
) -> tuple:
    """Return ``(grid, origin)`` where ``grid[i, j]`` classifies the centre
    ``(origin_x + (i + 0.5) * resolution, origin_y + (j + 0.5) * resolution)``.
    """
    bbox = get_bounding_box(subject)
    cols = max(1, int(math.ceil(bbox.width / resolution)))
    rows = max(1, int(math.ceil(bbox.height / resolution)))
    grid = np.full((cols, rows), OUTSIDE, dtype=np.int8)
    relevant = [
        h for h in holes
        if len(h) >= 3 and bboxes_overlap(get_bounding_box(h), bbox)
    ]

    for i in range(cols):
        x = bbox.min_x + (i + 0.5) * resolution
        for j in range(rows):
            y = bbox.min_y + (j + 0.5) * resolution
            if not point_in_polygon((x, y), subject):
                continue
            if any(point_in_polygon((x, y), h) for h in relevant):
                grid[i, j] = OCCUPIED
            else:
                grid[i, j] = AVAILABLE
    return grid, (bbox.min_x, bbox.min_y)


def _flood_regions(grid: np.ndarray) -> List[List[tuple]]:
    cols, rows = grid.shape
    seen = np.zeros_like(grid, dtype=bool)
    regions = []
    for i in range(cols):
        for j in range(rows):
            if grid[i, j] != AVAILABLE or seen[i, j]:
                continue
            region = []
            queue = deque([(i, j)])
            seen[i, j] = True
            while queue:
                ci, cj = queue.popleft()
                region.append((ci, cj))
                for ni, nj in ((ci + 1, cj), (ci - 1, cj), (ci, cj + 1), (ci, cj - 1)):
                    if 0 <= ni < cols and 0 <= nj < rows:
                        if grid[ni, nj] == AVAILABLE and not seen[ni, nj]:
                            seen[ni, nj] = True
                            queue.append((ni, nj))
            regions.append(region)
    return regions


def subtract_polygons(
    subject: Sequence[Point],
    holes: Sequence[Sequence[Point]],
    resolution: float = DIFFERENCE_RESOLUTION,
) -> List[List[Point]]:
    """Approximate ``subject - union(holes)`` as a list of convex polygons."""
    if len(subject) < 3 or resolution <= 0:
        return []
    grid, (ox, oy) = classify_cells(subject, holes, resolution)
    polygons = []
    for region in _flood_regions(grid):
        centres = [
            (ox + (i + 0.5) * resolution, oy + (j + 0.5) * resolution)
            for i, j in region
        ]
        hull = convex_hull(centres)
        if len(hull) >= 3:
            polygons.append(hull)
    return polygons
