"""Diffuse lighting pass: direct light from the sphere light plus bounced light."""

from __future__ import annotations

import math

import numpy as np

from .rng import rng01
from .scene import (
    DIFFUSE_STEPS,
    TMAX,
    Light,
    Ray,
    get_camera_ray,
    hit,
    light_map,
    sample_atmos,
    translate_to_ws,
)
from .texture import Texture
from .vecmath import clamp

__all__ = [
    "spherical_light_sample",
    "get_random_sample",
    "sample_indirect_diff",
    "sample_direct_diff_spherical",
    "get_color",
    "direct_pixel",
]

_MASK = 0xFFFFFFFF


def _u32(x: float) -> int:
    x = float(x)
    if math.isnan(x) or x <= 0.0:
        return 0
    return min(int(x), _MASK)


def spherical_light_sample(cl: Light, p, uv, camera, seed: int) -> np.ndarray:
    """Random direction from ``p`` towards the cone subtended by the light ``cl``."""
    uv = np.asarray(uv, dtype=float)
    width = _u32(camera.screen[0])
    u0 = clamp(rng01(uv + np.array([2.0, 3.0]), seed, width), 0.0, 1.0)
    u1 = clamp(rng01(uv[::-1] - np.array([1.0, 1.0]), seed, width), 0.0, 1.0)

    to_light = np.asarray(cl.pos, dtype=float) - np.asarray(p, dtype=float)
    d = float(np.linalg.norm(to_light))
    lv = to_light / d

    sin_theta_max_sq = (cl.radius * cl.radius) / (d * d)
    cos_theta_max = math.sqrt(max(1.0 - sin_theta_max_sq, 0.0))

    cos_theta = u0 * cos_theta_max + (1.0 - u0)
    sin_theta = math.sqrt(max(1.0 - cos_theta * cos_theta, 0.0))
    phi = u1 * 2.0 * math.pi

    direction = np.array([math.cos(phi) * sin_theta, cos_theta, math.sin(phi) * sin_theta])
    return translate_to_ws(direction, lv)


def get_random_sample(uv, camera, el: float, seed) -> np.ndarray:
    """Cosine-weighted direction in the hemisphere around +y."""
    uv = np.asarray(uv, dtype=float)
    height = _u32(camera.screen[1])
    cos_theta = math.sqrt(1.0 - rng01(uv, seed[1], height))
    sin_theta = math.sqrt(max(1.0 - cos_theta * cos_theta, 0.0))
    phi = rng01(uv[::-1], seed[1], height) * 2.0 * math.pi
    return np.array([math.cos(phi) * sin_theta, cos_theta, math.sin(phi) * sin_theta])


def sample_indirect_diff(p, n, uv, steps: int, camera, el: float, seed) -> np.ndarray:
    """Direct light at ``p`` plus up to ``steps + 1`` diffuse bounces."""
    p = np.asarray(p, dtype=float)
    n = np.asarray(n, dtype=float)
    uv = np.asarray(uv, dtype=float)
    total = sample_direct_diff_spherical(p, n, uv, camera, el, seed)
    albedo = np.ones(3)

    for i in range(steps + 1):
        l = translate_to_ws(get_random_sample(uv + float(i), camera, el, seed), n)
        cos_theta = float(np.dot(n, l))
        sr = Ray(p + l, l)
        h = hit(sr, el, seed)

        if h.dist >= TMAX:
            total = total + albedo * sample_atmos(sr)
            break

        if h.emissive > 0.0 and i > 0:
            total = total + albedo * cos_theta
            break

        albedo = albedo * h.albedo
        n = h.normal
        p = sr.o + sr.d * h.dist
        total = total + albedo * cos_theta * sample_direct_diff_spherical(
            p, n, uv, camera, el, seed
        )

    return total


def sample_direct_diff_spherical(p, n, uv, camera, el: float, seed) -> np.ndarray:
    """Light arriving at ``p`` directly from the spherical light."""
    p = np.asarray(p, dtype=float)
    cl = light_map(p, el, seed)
    l = spherical_light_sample(cl, p, uv, camera, seed[1])

    cos_theta = float(np.dot(np.asarray(n, dtype=float), l))
    if cos_theta < 0.0:
        return np.zeros(3)

    h = hit(Ray(p + l, l), el, seed)
    attenuation = h.dist / cl.radius + 0.5

    if h.emissive > 0.0:
        return h.albedo * cos_theta / (attenuation * attenuation)
    return np.zeros(3)


def get_color(r: Ray, uv, camera, el: float, seed) -> np.ndarray:
    """Diffuse radiance seen along ``r``."""
    res = hit(r, el, seed)

    if res.dist >= TMAX:
        return sample_atmos(r)

    if res.id > 900.0:
        return res.albedo

    pos = r.o + r.d * res.dist

    if res.diffuse_scale > 0.0:
        return (
            res.diffuse_scale
            * res.albedo
            * sample_indirect_diff(pos, res.normal, uv, DIFFUSE_STEPS, camera, el, seed)
        )
    return np.zeros(3)


def direct_pixel(global_id, camera, globals, out: Texture) -> np.ndarray:
    """Shade one pixel, starting its ray at the distance stored in ``out``'s alpha."""
    x, y = int(global_id[0]), int(global_id[1])
    inp = out.read(x, y)

    if inp[3] >= TMAX:
        out.write(x, y, np.array([0.01, 0.01, 0.01, inp[3]]))

    el = globals.time[0]
    pos = np.array([float(x), float(y)])
    r = get_camera_ray(pos, camera, el)
    r = Ray(inp[3] * r.d + r.o, r.d)
    col = np.append(get_color(r, pos, camera, el, globals.seed), inp[3])

    out.write(x, y, col)
    return col