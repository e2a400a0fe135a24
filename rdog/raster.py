"""Final presentation pass: sRGB encoding and the full-screen triangle."""

from __future__ import annotations

import math

import numpy as np

from .texture import Texture, sample
from .vecmath import saturate

__all__ = ["srgb", "fragment", "full_screen_triangle"]


def srgb(c: float) -> float:
    """Encode a linear channel value with the sRGB transfer curve."""
    if c <= 0.00031308:
        return c * 12.92
    return 1.055 * math.pow(c, 1.0 / 2.4) - 0.055


def fragment(pos, camera, trace_tx: Texture, prev_tx: Texture) -> np.ndarray:
    """Shade the fragment at ``pos``, storing the result in ``prev_tx`` too."""
    uv = np.asarray(pos, dtype=float)[:2] / camera.screen[:2]
    col = sample(trace_tx, uv)[:3]
    col = saturate(np.array([srgb(float(c)) for c in col]))
    out = np.append(col, 1.0)
    prev_tx.write(int(pos[0]), int(pos[1]), out)
    return out


def full_screen_triangle(vert_idx: int) -> np.ndarray:
    """Clip-space position of one vertex of a triangle covering the screen."""
    uv = np.array([float((vert_idx << 1) & 2), float(vert_idx & 2)])
    p = 2.0 * uv - 1.0
    return np.array([p[0], p[1], 0.0, 1.0])