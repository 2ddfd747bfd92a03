from __future__ import annotations

import random
from typing import Optional

from domain.rng import RandomSource


class StdlibRandomSource(RandomSource):
    """
    `RandomSource` backed by the `random` module.

    With a seed the sequence is replayable; without one the operating
    system's generator is used.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        if seed is None:
            self._random = random.SystemRandom()
        else:
            self._random = random.Random(seed)

    def next_uniform(self) -> float:
        return self._random.random()
