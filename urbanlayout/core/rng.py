"""
Seeded random source threaded through every stochastic step of a layout pass.

Jitter, scatter rotation, corner lot sizes, the coverage shuffle and
Poisson-disk sampling all draw from one ``SeededRNG`` so that a pass is
reproducible from its seed.
"""

import random
from typing import List, Optional, TypeVar

T = TypeVar("T")


class SeededRNG:
    def __init__(self, seed: Optional[int] = None):
        self._seed = seed if seed is not None else random.randint(0, 999999)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def range(self, min_val: float, max_val: float) -> float:
        return self._rng.uniform(min_val, max_val)

    def next_float(self) -> float:
        return self._rng.random()

    def jitter(self, value: float, span: float) -> float:
        """Return *value* scaled by a factor uniform in ``1 ± span/2``."""
        return value + (self._rng.random() - 0.5) * value * span

    def shuffle(self, items: List[T]) -> List[T]:
        """Fisher–Yates shuffle of *items* in place; returns the same list."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self._rng.random() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items
