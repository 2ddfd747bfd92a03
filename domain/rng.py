from __future__ import annotations

from typing import Protocol


class RandomSource(Protocol):
    """
    Capability producing uniformly distributed values.

    Every game draws its randomness through this interface so that a
    seeded or scripted source makes rounds reproducible.
    """

    def next_uniform(self) -> float:
        """Return a float in [0, 1)."""

        ...


def randbelow(rng: RandomSource, n: int) -> int:
    """Return a uniformly chosen integer in [0, n)."""

    if n <= 0:
        raise ValueError("n must be positive")
    # Guard against sources that round up to exactly 1.0.
    return min(int(rng.next_uniform() * n), n - 1)
