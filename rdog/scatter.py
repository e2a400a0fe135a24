"""Subsurface-scattering pass: light transported through the translucent piece."""

from __future__ import annotations

import numpy as np

from .direct import spherical_light_sample
from .scene import (
    RMAX,
    SCATTER_STEPS,
    TMAX,
    Material,
    Ray,
    get_camera_ray,
    hit,
    light_map,
    lookup_mat,
    sample_atmos,
    scene_map,
)
from .texture import Texture

__all__ = [
    "hit_transparent",
    "transmittance_profile",
    "sample_scattering",
    "get_color",
    "scatter_pixel",
]

_MASK = 0xFFFFFFFF

_PROFILE = (
    (np.array([0.233, 0.455, 0.649]), 0.0064),
    (np.array([0.1, 0.336, 0.344]), 0.0484),
    (np.array([0.118, 0.198, 0.0]), 0.187),
    (np.array([0.113, 0.007, 0.007]), 0.567),
    (np.array([0.358, 0.004, 0.0]), 1.99),
    (np.array([0.078, 0.0, 0.0]), 7.41),
)


def hit_transparent(r: Ray, el: float, seed) -> Material:
    """March ``r`` through the inside of objects until it leaves them."""
    t = 0.0
    for _ in range(RMAX):
        p = r.o + t * r.d
        h = scene_map(p, el, seed)
        h[0] = -h[0]
        if h[0] < 0.002:
            return lookup_mat(r, p, h, t, el, seed)
        if t > TMAX:
            break
        t += h[0]
    return Material()


def transmittance_profile(s: float) -> np.ndarray:
    """Sum-of-Gaussians diffusion profile for a travelled distance ``s``."""
    return sum(weight * np.exp(-s * s / variance) for weight, variance in _PROFILE)


def sample_scattering(pos, n, uv, camera, el: float, seed) -> np.ndarray:
    """Light from the sphere light that passes through the object beneath ``pos``."""
    p1 = np.asarray(pos, dtype=float) - np.asarray(n, dtype=float) * 0.02
    cl = light_map(p1, el, seed)
    out = np.zeros(3)

    for i in range(SCATTER_STEPS + 1):
        l = spherical_light_sample(cl, p1, uv, camera, (int(seed[1]) + i) & _MASK)

        h = hit_transparent(Ray(p1, l), el, seed)
        h1 = hit(Ray(p1 + l * h.dist + 0.03 * l, l), el, seed)

        if h1.emissive > 0.0:
            scale = 3.0
            bias = 0.01
            cos_theta = float(np.dot(-h1.normal, l))
            s = scale * (h.dist + bias)
            e = max(0.3 + cos_theta, 0.0)
            a = 1.0 / (h1.dist * h1.dist)
            out = out + transmittance_profile(s) * e * a * (h1.albedo * h1.emissive)

    return out / SCATTER_STEPS


def get_color(r: Ray, uv, camera, el: float, seed) -> np.ndarray:
    """Scattered radiance seen along ``r``."""
    res = hit(r, el, seed)

    if res.dist >= TMAX:
        return sample_atmos(r)

    if res.id > 900.0:
        return res.albedo

    pos = r.o + r.d * res.dist

    if res.scattering_scale > 0.0:
        return (
            res.scattering_scale
            * res.scattering_color
            * sample_scattering(
                pos,
                res.normal,
                np.asarray(uv, dtype=float) + np.array([1.325, 2.4]),
                camera,
                el,
                seed,
            )
        )
    return np.zeros(3)


def scatter_pixel(global_id, camera, globals, out: Texture) -> np.ndarray:
    """Add scattered light to the colour already stored for one pixel."""
    x, y = int(global_id[0]), int(global_id[1])
    inp = out.read(x, y)

    if inp[3] >= TMAX:
        out.write(x, y, np.array([0.01, 0.01, 0.01, inp[3]]))

    el = globals.time[0]
    pos = np.array([float(x), float(y)])
    r = get_camera_ray(pos, camera, el)
    r = Ray(inp[3] * r.d + r.o, r.d)

    col = np.append(inp[:3] + get_color(r, pos, camera, el, globals.seed), inp[3])
    out.write(x, y, col)
    return col