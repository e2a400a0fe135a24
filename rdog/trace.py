"""Primary-visibility pass: distance to the first surface for every pixel."""

from __future__ import annotations

import numpy as np

from .scene import RMAX, TMAX, Ray, get_camera_ray, scene_map
from .texture import Texture

__all__ = ["hit_simple", "trace_pixel"]


def hit_simple(r: Ray, el: float, seed) -> float:
    """Distance along ``r`` to the first surface, or ``TMAX`` on a miss."""
    t = 0.0
    for _ in range(RMAX):
        p = r.o + t * r.d
        h = scene_map(p, el, seed)
        if h[0] < 0.001:
            return t
        if t > TMAX:
            break
        t += h[0]
    return TMAX


def trace_pixel(global_id, camera, globals, out: Texture) -> float:
    """Trace one pixel and store its hit distance in all four channels of ``out``."""
    x, y = int(global_id[0]), int(global_id[1])
    el = globals.time[0]
    r = get_camera_ray((float(x), float(y)), camera, el)
    dist = hit_simple(r, el, globals.seed)
    out.write(x, y, np.full(4, dist))
    return dist