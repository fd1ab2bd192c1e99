"""
Shuffler - Seedable Fisher-Yates permutation.

Algorithm:
    for i from len-1 down to 1:
        j = int(rng.random() * (i + 1))
        swap(i, j)

With a seed, rng is random.Random(seed) (Mersenne Twister). Only
random() is drawn from; its output for an integer seed is stable across
Python releases, so saved seeds keep replaying the same dungeon.
Without a seed, rng is random.SystemRandom (OS entropy).

The PRNG lives only here; the state machine just calls shuffle().
"""

from __future__ import annotations
import random
from typing import Sequence, TypeVar

T = TypeVar("T")

SEED_BITS = 32


def new_seed() -> int:
    """Draw a fresh non-reproducible seed so randomized games can be replayed."""
    return random.SystemRandom().getrandbits(SEED_BITS)


class Shuffler:
    """
    Produces permutations from one random stream.

    Two Shufflers built with the same seed produce the same sequence of
    permutations for identically ordered inputs.
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = random.Random(seed) if seed is not None else random.SystemRandom()

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a new shuffled list; the input is left untouched."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = int(self._rng.random() * (i + 1))
            result[i], result[j] = result[j], result[i]
        return result


def shuffle(items: Sequence[T], seed: int | None = None) -> list[T]:
    """Shuffle with a one-off Shuffler."""
    return Shuffler(seed).shuffle(items)
