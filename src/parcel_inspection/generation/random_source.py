"""Seedable random source threaded through every generator call.

A session owns one RandomSource. Every draw takes a re-entrant lock, and
generators hold ``exclusive()`` for the whole of one item or rule set, so
draws from two threads never interleave inside a single generated object and
a seeded session reproduces the same sequence.
"""

from __future__ import annotations

import random
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

T = TypeVar("T")


class RandomSource:
    """Thread-safe wrapper around ``random.Random``.

    Example:
        ```python
        rng = RandomSource(seed=42)
        item = ItemRecordGenerator().generate(rng)
        ```
    """

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)
        self._lock = threading.RLock()

    @contextmanager
    def exclusive(self) -> Iterator[RandomSource]:
        """Hold the stream for a sequence of draws."""
        with self._lock:
            yield self

    def value(self) -> float:
        """Uniform float in [0, 1)."""
        with self._lock:
            return self._random.random()

    def chance(self, probability: float) -> bool:
        """Bernoulli trial. The probability is clamped to [0, 1]."""
        return self.value() < min(1.0, max(0.0, probability))

    def uniform(self, low: float, high: float) -> float:
        with self._lock:
            return self._random.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both inclusive."""
        with self._lock:
            return self._random.randint(low, high)

    def choice(self, options: Sequence[T]) -> T:
        if not options:
            raise IndexError("Cannot choose from an empty sequence")
        with self._lock:
            return options[self._random.randrange(len(options))]

    def pick_distinct(self, options: Sequence[T], count: int) -> list[T]:
        """Pick up to ``count`` distinct entries, in draw order."""
        remaining = list(options)
        picked: list[T] = []
        with self._lock:
            while remaining and len(picked) < count:
                picked.append(remaining.pop(self._random.randrange(len(remaining))))
        return picked

    def hex_token(self, length: int = 8) -> str:
        """Lower-case hex string drawn from the stream."""
        with self._lock:
            return f"{self._random.getrandbits(length * 4):0{length}x}"
