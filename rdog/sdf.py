"""Signed distance functions and their combinators."""

from __future__ import annotations

import numpy as np

from .vecmath import clamp, mix

__all__ = [
    "sd_round_box",
    "sphere",
    "sd_rounded_cylinder",
    "op_smooth_union",
    "op_smooth_subtraction",
    "min_sd",
    "plane",
]


def sd_round_box(p, b, r: float) -> float:
    """Distance to a box with half-extents ``b`` and rounded edges of radius ``r``."""
    q = np.abs(np.asarray(p, dtype=float)) - np.asarray(b, dtype=float) + r
    outside = np.linalg.norm(np.maximum(q, 0.0))
    inside = min(max(q[1], q[2], q[0]), 0.0)
    return float(outside + inside - r)


def sphere(p, r: float) -> float:
    """Distance to a sphere of radius ``r`` centred at the origin."""
    return float(np.linalg.norm(np.asarray(p, dtype=float)) - r)


def sd_rounded_cylinder(p, ra: float, rb: float, h: float) -> float:
    """Distance to a y-aligned cylinder with rounded rims."""
    p_arr = np.asarray(p, dtype=float)
    radial = float(np.hypot(p_arr[0], p_arr[2]))
    d = np.array([radial - 2.0 * ra + rb, abs(p_arr[1]) - h])
    return float(min(d.max(), 0.0) + np.linalg.norm(np.maximum(d, 0.0)) - rb)


def op_smooth_union(d1: float, d2: float, k: float) -> float:
    """Smoothly blended union of two distances."""
    h = clamp(0.5 + 0.5 * (d2 - d1) / k, 0.0, 1.0)
    return d2 + (d1 - d2) * h - k * h * (1.0 - h)


def op_smooth_subtraction(d1: float, d2: float, k: float) -> float:
    """Smoothly subtract the shape ``d1`` from the shape ``d2``."""
    h = clamp(0.5 - 0.5 * (d2 + d1) / k, 0.0, 1.0)
    return mix(d2, -d1, h) + k * h * (1.0 - h)


def min_sd(d1, d2):
    """Pick the ``(distance, id)`` pair with the smaller distance; ties pick ``d2``."""
    return d1 if d1[0] < d2[0] else d2


def plane(pos, n) -> float:
    """Distance to the plane with normal ``n[:3]`` and offset ``n[3]``."""
    n_arr = np.asarray(n, dtype=float)
    return float(np.dot(np.asarray(pos, dtype=float), n_arr[:3]) + n_arr[3])