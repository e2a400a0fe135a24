"""Small vector helpers in the spirit of GLSL: wrapping, clamping, mixing and rotations."""

from __future__ import annotations

import numpy as np

__all__ = [
    "vec",
    "normalize",
    "fract",
    "wrap",
    "saturate",
    "clamp",
    "mix",
    "smoothstep",
    "rotate_vector",
    "rotor_y",
    "aar",
]


def _result(value):
    """Return a plain float for 0-d results and a float array otherwise."""
    arr = np.asarray(value, dtype=float)
    return float(arr) if arr.ndim == 0 else arr


def vec(*args) -> np.ndarray:
    """Build a float vector from scalars and vectors, concatenated in order."""
    if not args:
        raise ValueError("vec() needs at least one component")
    parts = [np.atleast_1d(np.asarray(a, dtype=float)).ravel() for a in args]
    return np.concatenate(parts)


def normalize(v) -> np.ndarray:
    """Return ``v`` scaled to unit length (NaN for a zero vector)."""
    arr = np.asarray(v, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return arr / np.linalg.norm(arr)


def fract(v):
    """Fractional part, ``x - floor(x)``, always in ``[0, 1)``."""
    arr = np.asarray(v, dtype=float)
    return _result(arr - np.floor(arr))


def wrap(x):
    """Wrap values into ``(0, 1]``; positive values keep their fractional part.

    Zero and negative whole numbers map to ``1.0``.
    """
    arr = np.asarray(x, dtype=float)
    wrapped = np.where(arr > 0.0, np.fmod(arr, 1.0), 1.0 - np.fmod(-arr, 1.0))
    return _result(wrapped)


def saturate(v):
    """Clamp every component into ``[0, 1]``."""
    return _result(np.maximum(np.minimum(np.asarray(v, dtype=float), 1.0), 0.0))


def clamp(v, lo, hi):
    """Component-wise clamp; NaN components pass through unchanged."""
    arr = np.asarray(v, dtype=float)
    lo_arr = np.asarray(lo, dtype=float)
    hi_arr = np.asarray(hi, dtype=float)
    return _result(np.where(arr < lo_arr, lo_arr, np.where(arr > hi_arr, hi_arr, arr)))


def mix(a, b, t):
    """Linear interpolation between ``a`` and ``b``."""
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    return _result(a_arr * (1.0 - t) + b_arr * t)


def smoothstep(edge0, edge1, x):
    """Hermite interpolation of ``x`` between ``edge0`` and ``edge1``."""
    e0 = np.asarray(edge0, dtype=float)
    e1 = np.asarray(edge1, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.clip((x - e0) / (e1 - e0), 0.0, 1.0)
    return _result(t * t * (3.0 - 2.0 * t))


def rotate_vector(q, v) -> np.ndarray:
    """Rotate ``v`` by the quaternion ``q`` given as ``(x, y, z, w)``."""
    q_arr = np.asarray(q, dtype=float)
    v_arr = np.asarray(v, dtype=float)
    u = q_arr[:3]
    s = q_arr[3]
    return (
        2.0 * np.dot(u, v_arr) * u
        + (s * s - np.dot(u, u)) * v_arr
        + 2.0 * s * np.cross(u, v_arr)
    )


def rotor_y(a: float) -> np.ndarray:
    """Quaternion rotating by angle ``a`` around the y axis."""
    ha = a * 0.5
    return np.array([0.0, np.sin(ha), 0.0, np.cos(ha)])


def aar(v, axis, a: float) -> np.ndarray:
    """Rotate ``v`` around a unit ``axis`` by angle ``a``."""
    v_arr = np.asarray(v, dtype=float)
    ha = a * 0.5
    s = np.cos(ha)
    b = np.asarray(axis, dtype=float) * np.sin(ha)
    return v_arr + 2.0 * np.cross(b, np.cross(b, v_arr) + s * v_arr)