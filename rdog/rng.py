"""Integer hashes (PCG) and the pseudo-random helpers built on them."""

from __future__ import annotations

import math

import numpy as np

__all__ = ["pcg", "pcg3d", "rng01", "rng", "hash_vec"]

_MASK = 0xFFFFFFFF
_INV_MAX = np.float32(1.0) / np.float32(_MASK)


def _u32(x: float) -> int:
    """Saturating float-to-u32 conversion, truncating toward zero."""
    x = float(x)
    if math.isnan(x) or x <= 0.0:
        return 0
    if x >= 4294967295.0:
        return _MASK
    return int(x)


def _unit(u: int) -> float:
    return float(np.float32(pcg(u)) * _INV_MAX)


def pcg(v: int) -> int:
    """Single-word PCG hash of a 32-bit value."""
    state = (v * 747796405 + 2891336453) & _MASK
    word = (((state >> ((state >> 28) + 4)) ^ state) * 277803737) & _MASK
    return ((word >> 22) ^ word) & _MASK


def pcg3d(v) -> tuple[int, int, int]:
    """Three-component PCG hash; every step wraps at 32 bits."""
    x, y, z = ((int(c) * 1664525 + 1013904223) & _MASK for c in v)

    x = (x + y * z) & _MASK
    y = (y + z * x) & _MASK
    z = (z + x * y) & _MASK

    x ^= x >> 16
    y ^= y >> 16
    z ^= z >> 16

    x = (x + y * z) & _MASK
    y = (y + z * x) & _MASK
    z = (z + x * y) & _MASK

    return x, y, z


def rng01(s, seed: int, width: int) -> float:
    """Pseudo-random number in ``[0, 1]`` for a 2D pixel position."""
    x = (_u32(s[0]) * seed) & _MASK
    y = (_u32(s[1]) * seed) & _MASK
    u = (x + y * width) & _MASK
    return _unit(u)


def rng(s, seed: int) -> float:
    """Pseudo-random number in ``[0, 1]`` for a 3D position."""
    x = (_u32(s[0]) * seed) & _MASK
    y = (_u32(s[1]) * seed) & _MASK
    z = (_u32(s[2]) * seed) & _MASK
    u = (x + ((y * 200 + z * 200) & _MASK)) & _MASK
    return _unit(u)


def hash_vec(s, seed: int) -> tuple[int, int, int]:
    """Hash a 2D position into three pseudo-random 32-bit integers."""
    x = (_u32(s[0]) * seed) & _MASK
    y = (_u32(s[1]) * seed) & _MASK
    return pcg3d((x, y, x ^ y))