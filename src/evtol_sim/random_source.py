"""
Random sources for the fleet simulation.

The simulation draws randomness through a two-operation contract so that a
seeded or scripted source makes a run fully reproducible.
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np


class RandomSource(ABC):
    """Contract for the randomness consumed by vehicles and fleet construction."""

    @abstractmethod
    def bernoulli(self, probability: float) -> bool:
        """Return the outcome of a Boolean trial with the given success probability."""

    @abstractmethod
    def uniform_int(self, low: int, high: int) -> int:
        """Return an integer drawn uniformly from the inclusive range [low, high]."""


class NumpyRandomSource(RandomSource):
    """
    RandomSource backed by a numpy Generator (`np.random.default_rng`).

    Probabilities above 1 always succeed and probabilities at or below 0
    never do, so the linear fault model may pass raw products through.

    Attributes:
        seed: Seed the generator was created with (None for OS entropy)
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def bernoulli(self, probability: float) -> bool:
        return bool(self._rng.random() < probability)

    def uniform_int(self, low: int, high: int) -> int:
        if high < low:
            raise ValueError(f"Empty range: [{low}, {high}]")
        return int(self._rng.integers(low, high, endpoint=True))

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed})"
