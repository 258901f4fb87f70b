"""
Entropy sources for the outcome selector.

Every source yields independent samples in [0, 1). Sources own their
generator, so nothing here reads or reseeds the module-level ``random`` state.
"""

import random
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, TypeVar

from .errors import EntropyExhausted

T = TypeVar('T')


class EntropySource(ABC):
    """Produces uniform samples in [0, 1)."""

    @abstractmethod
    def next_sample(self) -> float:
        """Return the next sample in [0, 1)."""


class SeededEntropy(EntropySource):
    """
    Deterministic source backed by a private ``random.Random``.

    Two instances built with the same seed yield the same sequence.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def next_sample(self) -> float:
        return self._rng.random()

    def __repr__(self):
        return f"SeededEntropy(seed={self.seed!r})"


class SystemEntropy(EntropySource):
    """OS-backed source used for real demo runs."""

    def __init__(self):
        self._rng = random.SystemRandom()

    def next_sample(self) -> float:
        return self._rng.random()

    def __repr__(self):
        return "SystemEntropy()"


class ScriptedEntropy(EntropySource):
    """
    Replays a fixed list of samples.

    Used in tests to force a particular branch of a scenario.

    Raises:
        ValueError: If any sample is outside [0, 1)
        EntropyExhausted: When more samples are requested than were scripted
    """

    def __init__(self, samples: Iterable[float]):
        self._samples: List[float] = list(samples)
        for value in self._samples:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Scripted sample {value!r} is outside [0, 1)")
        self._position = 0

    def next_sample(self) -> float:
        if self._position >= len(self._samples):
            raise EntropyExhausted(
                f"Scripted entropy exhausted after {len(self._samples)} samples"
            )
        value = self._samples[self._position]
        self._position += 1
        return value

    @property
    def remaining(self) -> int:
        return len(self._samples) - self._position


def choice(entropy: EntropySource, options: Sequence[T]) -> T:
    """Pick one element of ``options`` uniformly using a single sample."""
    if not options:
        raise ValueError("Cannot choose from an empty sequence")
    index = int(entropy.next_sample() * len(options))
    # Guards against float rounding at the top of the range
    return options[min(index, len(options) - 1)]


def create_entropy(seed: Optional[int] = None) -> EntropySource:
    """Seeded source when a seed is given, system source otherwise."""
    if seed is None:
        return SystemEntropy()
    return SeededEntropy(seed)
