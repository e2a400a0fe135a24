"""Specular pass: GGX reflections of the scene and of the sphere light."""

from __future__ import annotations

import math

import numpy as np

from .direct import sample_indirect_diff, spherical_light_sample
from .rng import rng01
from .scene import (
    BRDF_STEPS,
    TMAX,
    Ray,
    get_camera_ray,
    hit,
    light_map,
    sample_atmos,
    translate_to_ws,
)
from .texture import Texture

__all__ = [
    "d_term_ggxtr",
    "g_term_schlick_ggx",
    "sample_brdf",
    "spec_brdf",
    "get_color",
    "specular_pixel",
]

_MASK = 0xFFFFFFFF


def _u32(x: float) -> int:
    x = float(x)
    if math.isnan(x) or x <= 0.0:
        return 0
    return min(int(x), _MASK)


def _offset_seed(seed, k: int) -> tuple[int, int]:
    return (int(seed[0]) + k) & _MASK, (int(seed[1]) + k) & _MASK


def d_term_ggxtr(n_dot_h: float, alpha: float) -> float:
    """GGX (Trowbridge-Reitz) normal distribution term."""
    n_dot_h = np.float64(n_dot_h)
    with np.errstate(divide="ignore", invalid="ignore"):
        a = n_dot_h * np.float64(alpha)
        kappa = a / (n_dot_h * n_dot_h * (a * a - 1.0) + 1.0)
        return float(kappa * kappa / math.pi)


def g_term_schlick_ggx(n_dot_v: float, n_dot_l: float, k: float) -> float:
    """Schlick-GGX geometric shadowing term for view and light directions."""
    n_dot_v = np.float64(n_dot_v)
    n_dot_l = np.float64(n_dot_l)
    with np.errstate(divide="ignore", invalid="ignore"):
        g_v = n_dot_v / (n_dot_v * (1.0 - k) + k)
        g_l = n_dot_l / (n_dot_l * (1.0 - k) + k)
        return float(g_v * g_l)


def sample_brdf(normal, alpha2: float, uv, camera, el: float, seed) -> np.ndarray:
    """GGX-distributed half vector around ``normal``, in world space."""
    uv = np.asarray(uv, dtype=float)[:2]
    height = _u32(camera.screen[1])
    u0 = np.float64(rng01(uv, seed[1], height))
    u1 = rng01(uv[::-1] + np.array([1.3, 2.7]), seed[1], height)

    with np.errstate(divide="ignore", invalid="ignore"):
        cos_theta = np.sqrt((1.0 - u0) / ((alpha2 - 1.0) * u0 + 1.0))
        sin_theta = np.sqrt(max(1.0 - cos_theta * cos_theta, 0.0))
    phi = u1 * 2.0 * math.pi

    return translate_to_ws(
        np.array([math.cos(phi) * sin_theta, cos_theta, math.sin(phi) * sin_theta]),
        normal,
    )


def spec_brdf(
    pos, v, n, roughness: float, f0: float, uv, camera, el: float, seed
) -> tuple[np.ndarray, float]:
    """Specular light reflected towards ``v`` at ``pos``.

    Returns ``(radiance, fresnel)``, where ``fresnel`` is the last Schlick
    term computed (``0.0`` when no reflected ray left the surface).
    """
    pos = np.asarray(pos, dtype=float)
    v = np.asarray(v, dtype=float)
    n = np.asarray(n, dtype=float)
    uv = np.asarray(uv, dtype=float)[:2]

    specular = np.zeros(3)
    fresnel = 0.0

    alpha = roughness * roughness
    alpha2 = alpha * alpha
    k_direct = (alpha2 + 1.0) / 8.0
    k_ibl = alpha / 2.0

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for i in range(BRDF_STEPS + 1):
            h = sample_brdf(
                n, alpha2, uv + np.array([1.220, 2.530]), camera, el, _offset_seed(seed, i + 5)
            )
            v_dot_h = np.maximum(np.dot(v, h), 0.000001)
            l = 2.0 * (v_dot_h * h) - v
            n_dot_v = np.maximum(np.dot(n, v), 0.0)
            n_dot_l = np.dot(n, l)
            n_dot_h = np.maximum(np.dot(n, h), 0.0)

            if n_dot_l > 0.0:
                sr = Ray(pos + l * 0.02, l)
                found = hit(sr, el, seed)

                if found.dist >= TMAX:
                    in_radiance = sample_atmos(sr)
                elif found.emissive > 0.0:
                    in_radiance = found.albedo
                else:
                    in_radiance = found.albedo * sample_indirect_diff(
                        pos + l * found.dist,
                        found.normal,
                        uv,
                        1,
                        camera,
                        el,
                        _offset_seed(seed, i + 30),
                    )

                fresnel = f0 + (1.0 - f0) * (1.0 - n_dot_v) ** 5.0
                g_term = g_term_schlick_ggx(n_dot_v, n_dot_l, k_ibl)
                specular = specular + in_radiance * (
                    g_term * fresnel * v_dot_h / (n_dot_h * n_dot_v)
                )

            cl = light_map(pos, el, seed)
            l = spherical_light_sample(cl, pos, uv, camera, (int(seed[1]) + i) & _MASK)
            h = (v + l) / np.linalg.norm(v + l)
            n_dot_l = np.dot(n, l)
            n_dot_h = np.maximum(np.dot(n, h), 0.0)

            if n_dot_l > 0.0:
                found = hit(Ray(pos, l), el, seed)
                if found.emissive > 0.0:
                    attn = 1.0 / (np.float64(found.dist) * found.dist)
                    in_radiance = found.albedo * found.emissive * attn
                    d_term = d_term_ggxtr(n_dot_h, alpha)
                    g_term = g_term_schlick_ggx(n_dot_v, n_dot_l, k_direct)
                    specular = specular + in_radiance * g_term * fresnel * d_term / (
                        4.0 / n_dot_v
                    )

    return specular / BRDF_STEPS, float(fresnel)


def get_color(r: Ray, uv, camera, el: float, seed) -> tuple[np.ndarray, float]:
    """Specular radiance seen along ``r`` and the Fresnel term used for it."""
    res = hit(r, el, seed)

    if res.dist >= TMAX:
        return sample_atmos(r), 0.0

    if res.id > 900.0:
        return res.albedo, 0.0

    v = -r.d
    pos = r.pd(res.dist)

    if res.specular_scale > 0.0:
        radiance, fresnel = spec_brdf(
            pos,
            v,
            res.normal,
            res.roughness,
            res.f0,
            np.asarray(uv, dtype=float)[:2] - np.array([1.0, 1.0]),
            camera,
            el,
            seed,
        )
        return res.specular_scale * radiance, fresnel
    return np.zeros(3), 0.0


def specular_pixel(global_id, camera, globals, out: Texture) -> np.ndarray:
    """Blend the specular term over the colour already stored for one pixel."""
    x, y = int(global_id[0]), int(global_id[1])
    inp = out.read(x, y)

    if inp[3] >= TMAX:
        out.write(x, y, np.array([0.01, 0.01, 0.01, inp[3]]))

    el = globals.time[0]
    pos = np.array([float(x), float(y)])
    r = get_camera_ray(pos, camera, el)
    r = Ray(inp[3] * r.d + r.o, r.d)

    col, fresnel = get_color(r, pos, camera, el, globals.seed)
    col = (1.0 - fresnel) * inp[:3] + col
    value = np.append(col, 1.0)

    out.write(x, y, value)
    return value