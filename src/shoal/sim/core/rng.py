from __future__ import annotations

import random

_BOID_RNG_SALT = 0xB01D5EED0F15A11E
_WANDER_RNG_SALT = 0x3A9DE7C0FFEE1234
_TARGET_RNG_SALT = 0x7A26E75A17ED0C4B


def derive_stream_seed(seed: int, salt: int) -> int:
    return (int(seed) ^ int(salt)) & 0xFFFFFFFFFFFFFFFF


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        """Uniform sample in [low, high); returns `low` when the range is empty."""
        return low + (high - low) * self._random.random()


class RngStreams:
    """Independent seeded streams so boid creation, wander and target draws never interleave."""

    def __init__(self, seed: int):
        self.boids = DeterministicRng(derive_stream_seed(seed, _BOID_RNG_SALT))
        self.wander = DeterministicRng(derive_stream_seed(seed, _WANDER_RNG_SALT))
        self.target = DeterministicRng(derive_stream_seed(seed, _TARGET_RNG_SALT))

    def reset(self) -> None:
        self.boids.reset()
        self.wander.reset()
        self.target.reset()
