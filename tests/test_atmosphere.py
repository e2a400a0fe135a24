import numpy as np
import pytest

from rdog.atmosphere import (
    ATMOS_MULT,
    CLOUD_DENSITY,
    CLOUD_MAX_HEIGHT,
    NOISE_DIM,
    PositionStruct,
    atmosphere_pixel,
    bayer_16,
    calc_atmosphere,
    calc_atmospheric_scatter,
    calc_atmospheric_scatter_top,
    calculate_volumetric_clouds,
    calculate_world_space_position,
    gather_pos,
    gather_pos_with_coord,
    get_clouds,
    noise_pixel,
    ray_sphere_intersection,
)
from rdog.camera import Camera, Globals
from rdog.texture import Texture
from rdog.vecmath import normalize


def _camera(w=2.0, h=2.0):
    return Camera(screen=[w, h, 0.0, 0.0])


def _zero_noise():
    return Texture(NOISE_DIM[0], NOISE_DIM[1])


def _full_noise():
    return Texture.from_array(np.ones((NOISE_DIM[1], NOISE_DIM[0], 4)))


def test_flat_projection_centre_points_forward():
    np.testing.assert_allclose(
        calculate_world_space_position((0.5, 0.5), False), [0.0, 0.0, 1.0]
    )


@pytest.mark.parametrize("p", [(0.1, 0.2), (0.5, 0.5), (0.9, 0.3), (0.0, 1.0)])
def test_spherical_projection_is_unit_length(p):
    v = calculate_world_space_position(p, True)
    assert np.linalg.norm(v) == pytest.approx(1.0)


def test_gather_pos_gives_unit_vectors():
    pos = gather_pos(True, (10.0, 3.0), (32.0, 32.0))
    assert np.linalg.norm(pos.world_vector) == pytest.approx(1.0)
    assert np.linalg.norm(pos.sun_vector) == pytest.approx(1.0)


def test_gather_pos_sun_does_not_depend_on_fragment():
    a = gather_pos(True, (1.0, 2.0), (32.0, 32.0))
    b = gather_pos(True, (20.0, 30.0), (32.0, 32.0))
    np.testing.assert_allclose(a.sun_vector, b.sun_vector)


def test_gather_pos_with_coord_keeps_view_vector():
    uv = np.array([0.0, 0.6, 0.8])
    pos = gather_pos_with_coord(True, uv, 0.0, (1, 2))
    np.testing.assert_allclose(pos.world_vector, uv)
    np.testing.assert_allclose(
        pos.sun_vector, normalize(calculate_world_space_position((0.0, 0.0), True))
    )


def test_bayer_origin_is_zero():
    assert bayer_16((0.0, 0.0)) == 0.0


def test_bayer_in_unit_range():
    values = [bayer_16((float(x), float(y))) for x in range(16) for y in range(16)]
    assert all(0.0 <= v < 1.0 for v in values)
    assert len(set(values)) > 1


def test_ray_sphere_miss():
    result = ray_sphere_intersection([0.0, 5.0, 0.0], [1.0, 0.0, 0.0], 1.0)
    np.testing.assert_allclose(result, [-1.0, -1.0])


def test_ray_sphere_hits_lie_on_sphere():
    position = np.array([0.0, 0.3, -4.0])
    direction = normalize([0.1, 0.0, 1.0])
    near, far = ray_sphere_intersection(position, direction, 2.0)
    assert near < far
    for t in (near, far):
        assert np.linalg.norm(position + t * direction) == pytest.approx(2.0)


def test_atmospheric_scatter_is_physical():
    pos = gather_pos(True, (10.0, 10.0), (32.0, 32.0))
    col, absorb = calc_atmospheric_scatter(pos)
    assert col.shape == (3,)
    assert np.all(np.isfinite(col)) and np.all(col >= 0.0)
    assert np.all(absorb > 0.0) and np.all(absorb <= 1.0)


def test_atmospheric_scatter_top_is_non_negative():
    pos = gather_pos(True, (5.0, 20.0), (32.0, 32.0))
    sky = calc_atmospheric_scatter_top(pos)
    assert sky.shape == (3,)
    assert bool(np.all(np.isfinite(sky))) is True
    assert float(sky.min()) >= 0.0


def test_atmospheric_scatter_top_ignores_view_direction():
    a = gather_pos(True, (5.0, 20.0), (32.0, 32.0))
    b = gather_pos(True, (25.0, 2.0), (32.0, 32.0))
    np.testing.assert_allclose(
        calc_atmospheric_scatter_top(a), calc_atmospheric_scatter_top(b)
    )


def test_no_clouds_outside_layer():
    tx = _full_noise()
    assert get_clouds([0.0, 0.0, 0.0], 0.0, (1, 2), tx) == 0.0
    assert get_clouds([0.0, CLOUD_MAX_HEIGHT + 100.0, 0.0], 0.0, (1, 2), tx) == 0.0


def test_clouds_need_noise():
    assert get_clouds([0.0, 1800.0, 0.0], 0.0, (1, 2), _zero_noise()) == 0.0


def test_cloud_density_bounded_with_full_noise():
    density = get_clouds([0.0, 1800.0, 0.0], 0.0, (1, 2), _full_noise())
    assert 0.0 < density <= CLOUD_DENSITY


def test_clear_sky_keeps_colour():
    pos = gather_pos(True, (10.0, 10.0), (32.0, 32.0))
    color = np.array([0.2, 0.3, 0.4])
    result = calculate_volumetric_clouds(pos, color, 0.5, np.ones(3), 0.0, (1, 2), _zero_noise())
    np.testing.assert_allclose(result, color)


def test_calc_atmosphere_matches_clear_sky_scatter():
    camera = _camera()
    coord = (3.0, 5.0)
    col = calc_atmosphere(coord, camera, 0.0, (1, 2), _zero_noise())
    expected, _ = calc_atmospheric_scatter(
        gather_pos(True, coord, camera.screen[:2] * ATMOS_MULT)
    )
    np.testing.assert_allclose(col, expected)


def test_atmosphere_pixel_writes_texel():
    camera = _camera()
    out = Texture(8, 8)
    value = atmosphere_pixel((3, 5, 0), camera, Globals(seed=(1, 2)), _zero_noise(), out)
    np.testing.assert_allclose(out.read(3, 5), value)
    assert value[3] == 1.0
    assert np.all(np.isfinite(value[:3])) and np.all(value[:3] >= 0.0)


def test_atmosphere_pixel_outside_texture_raises():
    with pytest.raises(IndexError):
        atmosphere_pixel((9, 0, 0), _camera(), Globals(), _zero_noise(), Texture(8, 8))


def test_noise_pixel_is_grey_and_bounded():
    out = Texture(*NOISE_DIM)
    texel = noise_pixel((7, 11, 0), Globals(seed=(12345, 0)), out)
    np.testing.assert_allclose(out.read(7, 11), texel)
    assert texel[0] == texel[1] == texel[2]
    assert 0.0 <= texel[0] <= 0.97
    assert texel[3] == 1.0


def test_noise_pixel_is_deterministic():
    a = noise_pixel((3, 4, 0), Globals(seed=(99, 0)), Texture(*NOISE_DIM))
    b = noise_pixel((3, 4, 0), Globals(seed=(99, 0)), Texture(*NOISE_DIM))
    np.testing.assert_array_equal(a, b)


def test_position_struct_holds_vectors():
    pos = PositionStruct(world_vector=np.array([0.0, 1.0, 0.0]), sun_vector=np.array([1.0, 0.0, 0.0]))
    top = calc_atmospheric_scatter_top(pos)
    assert np.all(np.isfinite(top))