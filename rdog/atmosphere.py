"""Sky pass: analytic atmospheric scattering with ray-marched volumetric clouds."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .rng import rng01
from .texture import Texture, sample
from .vecmath import clamp, fract, mix, normalize, smoothstep

__all__ = [
    "ATMOS_MULT",
    "NOISE_DIM",
    "EARTH_RADIUS",
    "CLOUD_MAX_HEIGHT",
    "CLOUD_DENSITY",
    "HPI",
    "PositionStruct",
    "calculate_world_space_position",
    "gather_pos_with_coord",
    "gather_pos",
    "bayer_16",
    "ray_sphere_intersection",
    "calc_atmospheric_scatter",
    "calc_atmospheric_scatter_top",
    "get_clouds",
    "calculate_volumetric_clouds",
    "calc_atmosphere",
    "atmosphere_pixel",
    "noise_pixel",
]

ATMOS_MULT = 4.0
NOISE_DIM = (64, 64)
SPHERICAL_PROJECTION = True

RAYLEIGH_COEFF = np.array([0.27e-5, 0.5e-5, 1.0e-5])
MIE_COEFF = np.full(3, 0.5e-6)
TOTAL_COEFF = RAYLEIGH_COEFF + MIE_COEFF
SUN_BRIGHTNESS = 2.5
EARTH_RADIUS = 6371000.0
CLOUD_HEIGHT = 1600.0
CLOUD_THICKNESS = 500.0
CLOUD_MIN_HEIGHT = CLOUD_HEIGHT
CLOUD_MAX_HEIGHT = CLOUD_THICKNESS + CLOUD_MIN_HEIGHT
CLOUD_DENSITY = 0.03
CLOUD_SPEED = 0.02

VOLUMETRIC_CLOUD_STEPS = 16
CLOUD_SHADOWING_STEPS = 8

RPI = 1.0 / math.pi
HPI = math.pi * 0.5
RLOG2 = 1.0 / 0.69314718056
LN2 = math.log(2.0)

_UP = np.array([0.0, 1.0, 0.0])


@dataclass
class PositionStruct:
    """View direction and sun direction for one sky sample."""

    world_vector: np.ndarray
    sun_vector: np.ndarray


def _d0(x) -> np.ndarray:
    return np.abs(x) + 1e-8


def _d02(x) -> np.ndarray:
    return np.abs(x) + 1e-3


def _sphere_to_cart(sc) -> np.ndarray:
    c = np.cos(sc[:2])
    s = np.sin(sc[:2])
    return sc[2] * np.array([c[0] * c[1], s[1], s[0] * c[1]])


def calculate_world_space_position(p, sphere: bool) -> np.ndarray:
    """Map a ``[0, 1]^2`` coordinate to a direction, spherically if ``sphere``."""
    q = np.asarray(p, dtype=float)[:2] * 2.0 - 1.0
    position = np.array([q[0], q[1], 1.0])
    if sphere:
        position = _sphere_to_cart(position * np.array([math.pi, HPI, 1.0]))
    return position


def gather_pos_with_coord(sphere: bool, uv, el: float, seed) -> PositionStruct:
    """Use ``uv`` as the view direction, with the sun at the centre coordinate."""
    sun_vector = normalize(calculate_world_space_position((0.0, 0.0), sphere))
    return PositionStruct(world_vector=np.asarray(uv, dtype=float), sun_vector=sun_vector)


def gather_pos(sphere: bool, frag_coord, screen_res) -> PositionStruct:
    """View and sun directions for a fragment of a sky texture of size ``screen_res``."""
    tx = np.asarray(frag_coord, dtype=float)[:2] / np.asarray(screen_res, dtype=float)[:2]
    tx[1] = 1.0 - tx[1]
    world_vector = normalize(calculate_world_space_position(tx, sphere))
    sun_vector = normalize(calculate_world_space_position((0.8, 0.55), sphere))
    return PositionStruct(world_vector=world_vector, sun_vector=sun_vector)


def _bayer_2(a) -> float:
    a = np.floor(a)
    return fract(float(np.dot(a, np.array([0.5, a[1] * 0.75]))))


def _bayer_4(a) -> float:
    return _bayer_2(0.5 * a) * 0.25 + _bayer_2(a)


def _bayer_8(a) -> float:
    return _bayer_4(0.5 * a) * 0.25 + _bayer_2(a)


def bayer_16(a) -> float:
    """Ordered-dither value in ``[0, 1)`` for a pixel coordinate."""
    arr = np.asarray(a, dtype=float)[:2]
    return _bayer_8(0.5 * arr) * 0.25 + _bayer_2(arr)


def ray_sphere_intersection(position, direction, radius: float) -> np.ndarray:
    """Near and far ray parameters of a sphere hit, or ``(-1, -1)`` on a miss."""
    position = np.asarray(position, dtype=float)
    direction = np.asarray(direction, dtype=float)
    pod = float(np.dot(position, direction))
    delta = pod * pod + radius * radius - float(np.dot(position, position))
    if delta < 0.0:
        return np.array([-1.0, -1.0])
    delta = math.sqrt(delta)
    return -pod + np.array([-delta, delta])


def _scatter(coeff, depth: float) -> np.ndarray:
    return coeff * depth


def _absorb(coeff, depth: float) -> np.ndarray:
    return np.exp2(_scatter(coeff, -depth))


def _calc_particle_thickness(depth: float) -> float:
    return 100_000.0 / max(depth * 2.0 - 0.01, 0.01)


def _rayleigh_phase(x: float) -> float:
    return 0.375 * (1.0 + x * x)


def _hg_phase(x: float, g: float) -> float:
    g2 = g * g
    return 0.25 * ((1.0 - g2) * (1.0 + g2 - 2.0 * g * x) ** -1.5)


def _mie_phase_sky(x: float, depth: float) -> float:
    return _hg_phase(x, 2.0 ** (-0.000003 * depth))


def _powder(od: float) -> float:
    return 1.0 - 2.0 ** (-od * 2.0)


def _calculate_scatter_integral(optical_depth: float, coeff: float) -> float:
    a = -coeff * RLOG2
    b = -1.0 / coeff
    c = 1.0 / coeff
    return 2.0 ** (a * optical_depth) * b + c


def calc_atmospheric_scatter(pos: PositionStruct) -> tuple[np.ndarray, np.ndarray]:
    """Sky colour along the view direction and the light's transmittance.

    Returns ``(colour, absorb_light)``.
    """
    l_dot_w = float(np.dot(pos.sun_vector, pos.world_vector))
    l_dot_u = float(np.dot(pos.sun_vector, _UP))
    u_dot_w = float(np.dot(_UP, pos.world_vector))

    optical_depth = _calc_particle_thickness(u_dot_w)
    optical_depth_light = _calc_particle_thickness(l_dot_u)

    scatter_view = _scatter(TOTAL_COEFF, optical_depth)
    absorb_view = _absorb(TOTAL_COEFF, optical_depth)

    scatter_light = _scatter(TOTAL_COEFF, optical_depth_light)
    absorb_light = _absorb(TOTAL_COEFF, optical_depth_light)

    absorb_sun = np.abs(absorb_light - absorb_view) / _d0((scatter_light - scatter_view) * LN2)

    mie = _scatter(MIE_COEFF, optical_depth) * _mie_phase_sky(l_dot_w, optical_depth)
    rayleigh = _scatter(RAYLEIGH_COEFF, optical_depth) * _rayleigh_phase(l_dot_w)
    scatter_sun = mie + rayleigh

    sun_spot = smoothstep(0.9999, 0.99993, l_dot_w) * absorb_view * SUN_BRIGHTNESS

    return (scatter_sun * absorb_sun + sun_spot) * SUN_BRIGHTNESS, absorb_light


def calc_atmospheric_scatter_top(pos: PositionStruct) -> np.ndarray:
    """Ambient sky light seen from above, used to light the clouds."""
    l_dot_u = float(np.dot(pos.sun_vector, _UP))

    optical_depth = _calc_particle_thickness(1.0)
    optical_depth_light = _calc_particle_thickness(l_dot_u)

    scatter_view = _scatter(TOTAL_COEFF, optical_depth)
    absorb_view = _absorb(TOTAL_COEFF, optical_depth)

    scatter_light = _scatter(TOTAL_COEFF, optical_depth_light)
    absorb_light = _absorb(TOTAL_COEFF, optical_depth_light)

    absorb_sun = _d02(absorb_light - absorb_view) / _d02((scatter_light - scatter_view) * LN2)

    mie = _scatter(MIE_COEFF, optical_depth) * 0.25
    rayleigh = _scatter(RAYLEIGH_COEFF, optical_depth) * 0.375

    return ((mie + rayleigh) * absorb_sun) * SUN_BRIGHTNESS


def _get_3d_noise(pos, tx: Texture) -> float:
    p = math.floor(pos[2])
    f = pos[2] - p
    inv_noise_res = 1.0 / 64.0
    z_stretch = 17.0 * inv_noise_res
    coord = pos[:2] * inv_noise_res + p * z_stretch
    a = float(sample(tx, coord)[0])
    b = float(sample(tx, coord + z_stretch)[0])
    return mix(a, b, f)


def get_clouds(p, el: float, seed, tx: Texture) -> float:
    """Cloud density at ``p`` (relative to the ground) at time ``el``."""
    p = np.asarray(p, dtype=float)
    height = float(np.linalg.norm(p + np.array([0.0, EARTH_RADIUS, 0.0]))) - EARTH_RADIUS
    p = np.array([p[0], height, p[2]])

    if height < CLOUD_MIN_HEIGHT or height > CLOUD_MAX_HEIGHT:
        return 0.0

    time = el * CLOUD_SPEED
    movement = np.array([time, 0.0, time])
    cloud_coord = p * 0.001 + movement

    noise = _get_3d_noise(cloud_coord, tx) * 0.5
    noise += _get_3d_noise(cloud_coord * (2.0 + movement), tx) * 0.25
    noise += _get_3d_noise(cloud_coord * (7.0 - movement), tx) * 0.125
    noise += _get_3d_noise((cloud_coord + movement) * 16.0, tx) * 0.0625

    top = 0.004
    bot = 0.01
    h_height = height - CLOUD_MIN_HEIGHT
    threshold = (1.0 - 2.0 ** (-bot * h_height)) * 2.0 ** (-top * h_height)

    return smoothstep(0.55, 0.6, noise) * threshold * CLOUD_DENSITY


def _get_sun_visibility(p, pos: PositionStruct, el: float, seed, tx: Texture) -> float:
    r_steps = CLOUD_THICKNESS / CLOUD_SHADOWING_STEPS
    increment = pos.sun_vector * r_steps
    position = increment * 0.5 + p
    transmittance = CLOUD_SHADOWING_STEPS * get_clouds(position, el, seed, tx)
    return 2.0 ** (-transmittance * r_steps)


def _phase_2_lobes(x: float) -> float:
    m = 0.6
    gm = 0.8
    lobe1 = _hg_phase(x, 0.8 * gm)
    lobe2 = _hg_phase(x, -0.5 * gm)
    return mix(lobe2, lobe1, m)


def _get_volumetric_clouds_scattering(
    optical_depth: float,
    phase: float,
    p,
    sun_color,
    sky_light,
    pos: PositionStruct,
    el: float,
    seed,
    tx: Texture,
) -> np.ndarray:
    integral = _calculate_scatter_integral(optical_depth, 1.11)
    beers_powder = _powder(optical_depth * LN2)
    visibility = _get_sun_visibility(p, pos, el, seed, tx)
    sun_lighting = (
        np.asarray(sun_color, dtype=float) * visibility * beers_powder
    ) * phase * HPI * SUN_BRIGHTNESS
    sky_lighting = np.asarray(sky_light, dtype=float) * 0.25 * RPI
    return (sun_lighting + sky_lighting) * integral * math.pi


def calculate_volumetric_clouds(
    pos: PositionStruct, color, dither: float, sun_color, el: float, seed, tx: Texture
) -> np.ndarray:
    """Composite clouds over ``color`` by marching through the cloud layer."""
    color = np.asarray(color, dtype=float)
    isteps = 1.0 / VOLUMETRIC_CLOUD_STEPS
    ground = _UP * EARTH_RADIUS

    bottom_sphere = ray_sphere_intersection(
        ground, pos.world_vector, EARTH_RADIUS + CLOUD_MIN_HEIGHT
    )[1]
    top_sphere = ray_sphere_intersection(
        ground, pos.world_vector, EARTH_RADIUS + CLOUD_MAX_HEIGHT
    )[1]

    start_position = pos.world_vector * bottom_sphere
    end_position = pos.world_vector + top_sphere

    increment = (end_position - start_position) * isteps
    cloud_pos = increment * dither + start_position
    step_len = float(np.linalg.norm(increment))

    scattering = np.zeros(3)
    transmittance = 1.0

    phase = _phase_2_lobes(float(np.dot(pos.sun_vector, pos.world_vector)))
    sky_light = calc_atmospheric_scatter_top(pos)

    for _ in range(VOLUMETRIC_CLOUD_STEPS):
        optical_depth = get_clouds(cloud_pos, el, seed, tx) * step_len
        if optical_depth <= 0.0:
            continue

        scattering = scattering + _get_volumetric_clouds_scattering(
            optical_depth, phase, cloud_pos, sun_color, sky_light, pos, el, seed, tx
        ) * transmittance
        transmittance *= 2.0 ** (-optical_depth)
        cloud_pos = cloud_pos + increment

    fade = clamp(float(np.linalg.norm(start_position)) * 0.00001, 0.0, 1.0)
    return np.asarray(mix(color * transmittance + scattering, color, fade))


def calc_atmosphere(coord, camera, el: float, seed, noise_tx: Texture) -> np.ndarray:
    """Sky colour for one texel of the atmosphere texture."""
    coord = np.asarray(coord, dtype=float)[:2]
    pos = gather_pos(SPHERICAL_PROJECTION, coord, camera.screen[:2] * ATMOS_MULT)
    dither = bayer_16(coord)
    col, light_absorb = calc_atmospheric_scatter(pos)
    return calculate_volumetric_clouds(pos, col, dither, light_absorb, el, seed, noise_tx)


def atmosphere_pixel(global_id, camera, globals, noise_tx: Texture, out: Texture) -> np.ndarray:
    """Render one texel of the sky into ``out`` and return it."""
    x, y = int(global_id[0]), int(global_id[1])
    pos = np.array([float(x), camera.screen[1] * ATMOS_MULT - float(y)])
    col = calc_atmosphere(pos, camera, globals.time[0], globals.seed, noise_tx)
    value = np.append(col, 1.0)
    out.write(x, y, value)
    return value


def noise_pixel(global_id, globals, out: Texture) -> np.ndarray:
    """Fill one texel of the cloud-noise texture with a grey random value."""
    x, y = int(global_id[0]), int(global_id[1])
    value = rng01((float(x), float(y)), globals.seed[0], NOISE_DIM[0]) * 0.97
    texel = np.array([value, value, value, 1.0])
    out.write(x, y, texel)
    return texel