"""
Candidate culling shared by every block layout.

Pipeline order is fixed: boundary containment, road exclusion, mutual
de-overlap, landmark/park/river exclusion, coverage cap. The two order-sensitive
heuristics (de-overlap and coverage selection) are pluggable so a smarter
packer can replace them without touching the generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence

from urbanlayout.constants import AREA_TOLERANCE
from urbanlayout.core.geometry import (
    Point,
    get_building_rect,
    point_in_polygon,
    polygons_intersect,
)
from urbanlayout.core.rng import SeededRNG
from urbanlayout.protocol import BuildingCandidate

Polygon = Sequence[Point]


# ---------------------------------------------------------------------------
# SECTION 1: Simple geometric filters
# ---------------------------------------------------------------------------
def inside_boundary(candidate: BuildingCandidate, boundary: Polygon) -> bool:
    return all(point_in_polygon(c, boundary) for c in get_building_rect(candidate))


def filter_inside_boundary(
    candidates: List[BuildingCandidate], boundary: Polygon
) -> List[BuildingCandidate]:
    return [c for c in candidates if inside_boundary(c, boundary)]


def filter_obstacles(
    candidates: List[BuildingCandidate], obstacles: Sequence[Polygon]
) -> List[BuildingCandidate]:
    """Drop candidates whose rectangle touches any obstacle polygon."""
    if not obstacles:
        return candidates
    kept = []
    for c in candidates:
        rect = get_building_rect(c)
        if not any(polygons_intersect(rect, ob) for ob in obstacles):
            kept.append(c)
    return kept


# ---------------------------------------------------------------------------
# SECTION 2: Mutual de-overlap
# ---------------------------------------------------------------------------
class OverlapResolver(ABC):
    @abstractmethod
    def resolve(
        self,
        candidates: List[BuildingCandidate],
        occupied: Sequence[Polygon] = (),
    ) -> List[BuildingCandidate]:
        """Return a subset of *candidates* with no pairwise overlap."""


class GreedyOverlapResolver(OverlapResolver):
    """First accepted wins, in generation order."""

    def resolve(self, candidates, occupied=()):
        accepted: List[BuildingCandidate] = []
        taken: List[List[Point]] = [list(p) for p in occupied]
        for c in candidates:
            rect = get_building_rect(c)
            if any(polygons_intersect(rect, other) for other in taken):
                continue
            accepted.append(c)
            taken.append(rect)
        return accepted


# ---------------------------------------------------------------------------
# SECTION 3: Coverage cap
# ---------------------------------------------------------------------------
class CoverageSelector(ABC):
    @abstractmethod
    def select(
        self, candidates: List[BuildingCandidate], target_area: float, rng: SeededRNG
    ) -> List[BuildingCandidate]:
        """Return a subset whose summed footprint stays within *target_area*."""


def _fill_to(ordered, target_area):
    selected = []
    total = 0.0
    for c in ordered:
        if total + c.area <= target_area + AREA_TOLERANCE:
            selected.append(c)
            total += c.area
    return selected


class ShuffledCoverageSelector(CoverageSelector):
    def select(self, candidates, target_area, rng):
        return _fill_to(rng.shuffle(list(candidates)), target_area)


class LargestFirstCoverageSelector(CoverageSelector):
    """Deterministic alternative: biggest footprints claim the budget first."""

    def select(self, candidates, target_area, rng):
        ordered = sorted(candidates, key=lambda c: c.area, reverse=True)
        return _fill_to(ordered, target_area)


COVERAGE_SELECTORS = {
    "shuffled": ShuffledCoverageSelector,
    "largest_first": LargestFirstCoverageSelector,
}


# ---------------------------------------------------------------------------
# SECTION 4: Pipeline
# ---------------------------------------------------------------------------
@dataclass
class FilterPipeline:
    overlap: OverlapResolver = field(default_factory=GreedyOverlapResolver)
    coverage: CoverageSelector = field(default_factory=ShuffledCoverageSelector)

    def run(
        self,
        candidates: List[BuildingCandidate],
        boundary: Polygon,
        road_mask: Sequence[Polygon],
        target_area: float,
        rng: SeededRNG,
        occupied: Sequence[Polygon] = (),
        exclusions: Sequence[Polygon] = (),
        within: Sequence[Polygon] = (),
    ) -> List[BuildingCandidate]:
        """Cull *candidates* down to the ones that may be built.

        Every rectangle must sit inside *boundary* and inside each polygon of
        *within* (the uncarved block when *boundary* is a river-cut part).
        """
        kept = filter_inside_boundary(candidates, boundary)
        for outer in within:
            kept = filter_inside_boundary(kept, outer)
        kept = filter_obstacles(kept, road_mask)
        kept = self.overlap.resolve(kept, occupied)
        kept = filter_obstacles(kept, exclusions)
        return self.coverage.select(kept, target_area, rng)
