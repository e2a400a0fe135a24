"""The ray-marched scene: rays, materials, the distance field and its queries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .sdf import min_sd, op_smooth_subtraction, op_smooth_union, plane, sd_rounded_cylinder, sphere
from .vecmath import aar, fract, normalize, rotate_vector, rotor_y, wrap

__all__ = [
    "TMAX",
    "RMAX",
    "LIGHT_POS",
    "LIGHT_RAD",
    "DIFFUSE_STEPS",
    "SCATTER_STEPS",
    "BRDF_STEPS",
    "Ray",
    "Light",
    "Material",
    "shape",
    "scene_map",
    "hit",
    "lookup_mat",
    "calculate_derivatives",
    "checkers_grad_box",
    "checker",
    "light_map",
    "calc_normal",
    "translate_to_ws",
    "get_camera_ray",
    "sample_atmos",
]

TMAX = 22.0
RMAX = 300
LIGHT_POS = np.array([0.0, 1.5, 2.5])
LIGHT_POS.setflags(write=False)
LIGHT_RAD = 1.0

DIFFUSE_STEPS = 8
SCATTER_STEPS = 8
BRDF_STEPS = 8

_NEG_Y = np.array([0.0, -1.0, 0.0])
_SHAPE_AXIS = normalize(np.array([0.2, 1.0, 0.0]))
_Z_AXIS = np.array([0.0, 0.0, 1.0])
_X_AXIS = np.array([1.0, 0.0, 0.0])
_FLOOR = np.array([0.0, 1.0, 0.0, 0.9])
_SPHERE_CENTRE = np.array([-1.0, 1.0, 0.0])

_LIGHT_ID = 999.0
_SHAPE_ID = 2.0
_METAL_ID = 3.0


def _v3(value) -> np.ndarray:
    return np.array(value, dtype=float)


@dataclass
class Ray:
    """A ray with origin ``o`` and direction ``d``."""

    o: np.ndarray
    d: np.ndarray

    def __post_init__(self) -> None:
        self.o = _v3(self.o)
        self.d = _v3(self.d)

    def pd(self, t: float) -> np.ndarray:
        """Point at distance ``t`` along the ray."""
        return self.d * t + self.o


@dataclass
class Light:
    """A spherical light and the distance to it from some query point."""

    dist: float
    pos: np.ndarray
    radius: float


@dataclass
class Material:
    """Surface properties found where a ray hit the scene."""

    id: float = 0.0
    dist: float = TMAX
    normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    metallic: bool = False
    refractive: bool = False
    albedo: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scattering_color: np.ndarray = field(default_factory=lambda: np.zeros(3))
    diffuse_scale: float = 1.0
    specular_scale: float = 1.0
    emissive: float = 0.0
    ior: float = 1.0
    f0: float = 0.04
    roughness: float = 0.0
    scattering_scale: float = 0.0


def shape(posi, el: float, seed) -> float:
    """Distance to the animated centre piece, spinning with the elapsed time ``el``."""
    pos = aar(_v3(posi) + _NEG_Y, _SHAPE_AXIS, el)
    po = aar(pos, _Z_AXIS, math.radians(90.0))
    pp = aar(pos, _X_AXIS, math.radians(45.0))
    o = sd_rounded_cylinder(pp + np.array([0.0, 0.0, -0.35]), 0.3, 0.1, 0.1)
    r = sd_rounded_cylinder(po + np.array([-0.35, 0.0, 0.35]), 0.3, 0.1, 0.1)
    v = sd_rounded_cylinder(po + np.array([-0.35, 0.0, 0.35]), 0.15, 0.1, 0.4)
    r = op_smooth_subtraction(v, r, 0.1)
    return op_smooth_union(o, r, 0.1)


def scene_map(posi, el: float, seed) -> np.ndarray:
    """Return ``(distance, material id)`` of the closest object to ``posi``."""
    p = _v3(posi)
    light = (sphere(p - LIGHT_POS, LIGHT_RAD), _LIGHT_ID)
    piece = (shape(p, el, seed), _SHAPE_ID)
    floor = (plane(p, _FLOOR), _METAL_ID)
    ball = (sphere(p - _SPHERE_CENTRE, 0.6), _METAL_ID)
    return np.array(min_sd(min_sd(min_sd(light, piece), floor), ball), dtype=float)


def hit(r: Ray, el: float, seed) -> Material:
    """March ``r`` through the scene; a miss gives the default material."""
    t = 0.0
    for _ in range(RMAX):
        p = r.pd(t)
        h = scene_map(p, el, seed)
        if h[0] < 0.001:
            return lookup_mat(r, p, h, t, el, seed)
        if t > TMAX:
            break
        t += h[0]
    return Material()


def lookup_mat(r: Ray, p, h, t: float, el: float, seed) -> Material:
    """Material for a hit at ``p`` with ``h = (distance, id)`` after travelling ``t``."""
    s = 1.0 if h[0] >= 0.0 else 0.0
    mat_id = float(h[1])
    normal = calc_normal(p, el, seed) * s

    if mat_id == _SHAPE_ID:
        return Material(
            id=mat_id,
            dist=t,
            scattering_scale=1.0,
            scattering_color=np.ones(3),
            specular_scale=1.0,
            f0=0.04,
            roughness=1.0,
            ior=1.04,
            normal=normal,
            albedo=np.array([0.71, 0.05, 0.1]),
        )
    if mat_id == _METAL_ID:
        return Material(
            id=mat_id,
            dist=t,
            metallic=True,
            scattering_scale=0.0,
            scattering_color=np.ones(3),
            specular_scale=1.0,
            f0=0.95,
            ior=1.4,
            diffuse_scale=0.0,
            roughness=0.2,
            normal=normal,
            albedo=np.array([0.71, 0.65, 0.26]),
        )
    if mat_id == _LIGHT_ID:
        return Material(
            id=mat_id,
            dist=t,
            emissive=8.0,
            normal=normal,
            albedo=np.ones(3),
        )
    return Material(
        id=mat_id,
        dist=t,
        albedo=np.ones(3),
        specular_scale=1.0,
        f0=0.04,
        normal=normal,
    )


def calculate_derivatives(rd, step_size: float) -> tuple[np.ndarray, np.ndarray]:
    """Two offsets perpendicular to ``rd``, each of length ``step_size``."""
    rd = _v3(rd)
    temp = _X_AXIS if abs(rd[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    tangent = normalize(np.cross(rd, temp))
    bitangent = np.cross(rd, tangent)
    return tangent * step_size, bitangent * step_size


def checkers_grad_box(p, dpdx, dpdy) -> float:
    """Box-filtered checkerboard pattern value at ``p``."""
    t = 3.0
    p = np.asarray(wrap(np.asarray(p, dtype=float) / t)) * t
    w = np.abs(np.asarray(dpdx, dtype=float)) + np.abs(np.asarray(dpdy, dtype=float)) + 0.001
    i = (
        2.0
        * (
            np.abs(fract((p - 0.5 * w) * 0.5) - 0.5)
            - np.abs(fract((p + 0.5 * w) * 0.5) - 0.5)
        )
        / w
    )
    return float(0.5 - 0.5 * i[0] * i[1])


def checker(v1, v2, r: Ray, t: float):
    """Pick ``v1`` or ``v2`` from the checkerboard under the hit point."""
    pos = r.pd(t)
    dpdx, dpdy = calculate_derivatives(r.d, 0.01)
    f = checkers_grad_box(3.0 * pos[[0, 2]], 3.0 * dpdx[[0, 2]], 3.0 * dpdy[[0, 2]])
    return v1 if f > 0.0 else v2


def light_map(posi, el: float, seed) -> Light:
    """The scene light together with its distance from ``posi``."""
    return Light(
        dist=sphere(_v3(posi) - LIGHT_POS, LIGHT_RAD),
        pos=LIGHT_POS.copy(),
        radius=LIGHT_RAD,
    )


_K = 0.5773
_TETRAHEDRON = (
    np.array([_K, -_K, -_K]),
    np.array([-_K, -_K, _K]),
    np.array([-_K, _K, -_K]),
    np.array([_K, _K, _K]),
)


def calc_normal(pos, el: float, seed) -> np.ndarray:
    """Surface normal from a tetrahedral gradient estimate of the distance field."""
    ep = 0.0001
    p = _v3(pos)
    total = sum(e * scene_map(p + ep * e, el, seed)[0] for e in _TETRAHEDRON)
    return normalize(total)


def translate_to_ws(d, n) -> np.ndarray:
    """Express ``d``, given in a frame whose y axis is ``n``, in world space."""
    d = _v3(d)
    n = _v3(n)
    if abs(n[0]) > abs(n[1]):
        r = np.array([n[2], 0.0, -n[0]]) / math.sqrt(n[0] * n[0] + n[2] * n[2])
    else:
        r = np.array([0.0, -n[2], n[1]]) / math.sqrt(n[1] * n[1] + n[2] * n[2])
    f = np.cross(n, r)
    return d[0] * f + d[1] * n + d[2] * r


def get_camera_ray(pos, camera, el: float) -> Ray:
    """Primary ray for a pixel, orbiting the scene as time ``el`` passes."""
    screen = camera.screen
    p = np.array([float(pos[0]), screen[1] - float(pos[1])])
    uv = (2.0 * p - screen[:2]) / screen[1]

    rotor = rotor_y(el * 0.5)
    ro = rotate_vector(rotor, np.array([0.0, 1.0, -3.0]))
    rd = normalize(rotate_vector(rotor, np.array([uv[0], uv[1], 1.5])))
    return Ray(ro + rd, rd)


def sample_atmos(sr: Ray) -> np.ndarray:
    """Faint constant sky radiance for rays that escape the scene."""
    o = float(np.linalg.norm(normalize(sr.o)))
    return np.full(3, o) * 0.001