"""
Seedable randomness for the cybersim warfare engine.

Every probabilistic decision in a simulation (spawn chance, target
selection, kind selection, blocking) goes through one RandomEventSource.
Each simulation owns its own instance; there is no shared module-level
generator, so two simulations built with the same seed replay the same
sequence of decisions.
"""

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


class RandomEventSource:
    """Thin wrapper around a private ``random.Random``."""

    def __init__(self, seed: int | None = 42):
        """
        Args:
            seed: Random seed for determinism. ``None`` draws from OS entropy.
        """
        self.seed = seed
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        return self._rng.random()

    def chance(self, probability: float) -> bool:
        """Draw one sample and report whether it fell below ``probability``."""
        return self._rng.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        """Uniformly pick one element of a non-empty sequence."""
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self._rng.randrange(len(items))]

    def reseed(self, seed: int | None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)
