"""
Poisson-disk sampling and the seeded RNG it draws from.
"""
from __future__ import annotations

import itertools
import math

import pytest

from urbanlayout.core.rng import SeededRNG
from urbanlayout.core.sampling import poisson_disk_sample
from urbanlayout.protocol import BBox


def _box(w: float = 100.0, h: float = 100.0) -> BBox:
    return BBox(min_x=0.0, max_x=w, min_y=0.0, max_y=h)


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_separation_and_bounds(seed):
    pts = poisson_disk_sample(_box(), 10.0, 50, SeededRNG(seed))
    assert 0 < len(pts) <= 50
    for p in pts:
        assert _box().contains(p)
    for a, b in itertools.combinations(pts, 2):
        assert math.hypot(a[0] - b[0], a[1] - b[1]) >= 10.0


def test_saturated_box_returns_fewer_points():
    # a 20x20 box cannot hold many points 10 apart
    pts = poisson_disk_sample(_box(20, 20), 10.0, 500, SeededRNG(3))
    assert 0 < len(pts) < 500


@pytest.mark.parametrize(
    "box, min_dist, target",
    [(_box(), 10.0, 0), (_box(), 0.0, 10), (_box(0, 100), 10.0, 10)],
)
def test_degenerate_requests(box, min_dist, target):
    assert poisson_disk_sample(box, min_dist, target, SeededRNG(1)) == []


def test_same_seed_same_points():
    a = poisson_disk_sample(_box(), 8.0, 40, SeededRNG(99))
    b = poisson_disk_sample(_box(), 8.0, 40, SeededRNG(99))
    assert a == b


def test_rng_helpers():
    rng = SeededRNG(5)
    assert rng.seed == 5
    for _ in range(100):
        assert 2.0 <= rng.range(2.0, 3.0) <= 3.0
        assert 9.5 <= rng.jitter(10.0, 0.1) <= 10.5
    items = list(range(20))
    shuffled = rng.shuffle(items)
    assert shuffled is items
    assert sorted(shuffled) == list(range(20))
    assert SeededRNG().seed is not None
