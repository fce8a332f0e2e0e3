"""
Determinism layer.

Every source of variation in a program comes from here. `Random` is a
counter-based Philox stream keyed by a digest of the seed, so the n-th draw
depends only on (seed, n) on every platform. `Noise` is Perlin gradient
noise over a permutation table keyed from the same seed under a separate
domain tag; sampling it never advances the random stream.
"""

import hashlib
import logging
import math
from typing import Sequence, Tuple, TypeVar, Union

import numpy as np

from ..shared.errors import TypeMismatch
from ..utils.config import NOISE_TABLE_SIZE, SEED_DIGEST_BYTES

logger = logging.getLogger("xylo.runtime.determinism")

Seed = Union[int, str]
T = TypeVar("T")

_RANDOM_TAG = b"xylo.random:"
_NOISE_TAG = b"xylo.noise:"
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1


def normalize_seed(seed: Seed) -> bytes:
    """Seed -> canonical bytes. Integers use their decimal form."""
    if isinstance(seed, bool) or not isinstance(seed, (int, str)):
        raise TypeMismatch(f"seed must be an integer or a string, found {type(seed).__name__}")
    return str(seed).encode("utf-8")


def seed_key(seed: Seed, tag: bytes = _RANDOM_TAG) -> int:
    """128-bit Philox key derived from SHA-256(tag + seed)."""
    digest = hashlib.sha256(tag + normalize_seed(seed)).digest()
    return int.from_bytes(digest[:SEED_DIGEST_BYTES], "little")


def _generator(seed: Seed, tag: bytes) -> np.random.Generator:
    return np.random.Generator(np.random.Philox(key=seed_key(seed, tag)))


class Random:
    """Seeded draw stream. `draws` counts every value taken from it."""

    def __init__(self, seed: Seed = 0):
        self.seed = seed
        self._generator = _generator(seed, _RANDOM_TAG)
        self.draws = 0
        logger.debug("random stream keyed from seed %r", seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        self.draws += 1
        return float(self._generator.random())

    def uniform(self, low: float, high: float) -> float:
        value = low + (high - low) * self.random()
        if not math.isfinite(value):
            raise TypeMismatch(f"random range {low}..{high} overflows a float")
        return value

    def integer(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends included."""
        if high < low:
            raise TypeMismatch(f"empty integer range {low}..={high}")
        if low < _INT64_MIN or high > _INT64_MAX:
            raise TypeMismatch("random integer range overflows", note="both ends must fit in a signed 64-bit integer")
        self.draws += 1
        return int(self._generator.integers(low, high, endpoint=True))

    def weighted_index(self, weights: Sequence[float]) -> int:
        """Index i with probability weights[i] / sum(weights); one draw."""
        total = math.fsum(weights)
        target = self.random() * total
        running = 0.0
        for index, weight in enumerate(weights):
            running += weight
            if target < running:
                return index
        return len(weights) - 1

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise TypeMismatch("cannot choose from an empty sequence")
        return items[self.integer(0, len(items) - 1)]

    def shuffled(self, items: Sequence[T]) -> Tuple[T, ...]:
        # Fisher-Yates with one draw per swap, so `draws` stays exact
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.integer(0, i)
            result[i], result[j] = result[j], result[i]
        return tuple(result)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


def _grad(hash_value: int, x: float, y: float, z: float) -> float:
    h = hash_value & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h in (12, 14):
        v = x
    else:
        v = z
    return (u if h & 1 == 0 else -u) + (v if h & 2 == 0 else -v)


class Noise:
    """Improved Perlin noise, values roughly in -1..1, zero at lattice points."""

    def __init__(self, seed: Seed = 0):
        table = _generator(seed, _NOISE_TAG).permutation(NOISE_TABLE_SIZE)
        self._perm = [int(v) for v in np.concatenate((table, table))]
        self._mask = NOISE_TABLE_SIZE - 1

    def noise2(self, x: float, y: float) -> float:
        return self.noise3(x, y, 0.0)

    def noise3(self, x: float, y: float, z: float) -> float:
        try:
            x, y, z = float(x), float(y), float(z)
        except OverflowError:
            raise TypeMismatch("noise coordinates overflow a float") from None
        if not all(math.isfinite(v) for v in (x, y, z)):
            raise TypeMismatch("noise coordinates must be finite")
        fx, fy, fz = math.floor(x), math.floor(y), math.floor(z)
        xi, yi, zi = int(fx) & self._mask, int(fy) & self._mask, int(fz) & self._mask
        x, y, z = x - fx, y - fy, z - fz
        u, v, w = _fade(x), _fade(y), _fade(z)

        p = self._perm
        a = p[xi] + yi
        aa, ab = p[a] + zi, p[a + 1] + zi
        b = p[xi + 1] + yi
        ba, bb = p[b] + zi, p[b + 1] + zi

        return _lerp(w,
                     _lerp(v,
                           _lerp(u, _grad(p[aa], x, y, z), _grad(p[ba], x - 1, y, z)),
                           _lerp(u, _grad(p[ab], x, y - 1, z), _grad(p[bb], x - 1, y - 1, z))),
                     _lerp(v,
                           _lerp(u, _grad(p[aa + 1], x, y, z - 1), _grad(p[ba + 1], x - 1, y, z - 1)),
                           _lerp(u, _grad(p[ab + 1], x, y - 1, z - 1), _grad(p[bb + 1], x - 1, y - 1, z - 1))))
