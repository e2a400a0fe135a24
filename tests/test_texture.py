import numpy as np
import pytest

from rdog.texture import Texture, sample


def test_new_texture_is_zero():
    tex = Texture(3, 2)
    assert np.array_equal(tex.read(2, 1), np.zeros(4))
    assert tex.data.shape == (2, 3, 4)


def test_write_read_round_trip():
    tex = Texture(4, 4)
    tex.write(1, 2, [0.1, 0.2, 0.3, 0.4])
    assert np.allclose(tex.read(1, 2), [0.1, 0.2, 0.3, 0.4])
    assert np.array_equal(tex.read(2, 1), np.zeros(4))


def test_read_returns_copy():
    tex = Texture(2, 2)
    texel = tex.read(0, 0)
    texel[0] = 5.0
    assert tex.read(0, 0)[0] == 0.0


@pytest.mark.parametrize("x, y", [(4, 0), (0, 4), (-1, 0), (0, -1)])
def test_out_of_bounds_raises(x, y):
    tex = Texture(4, 4)
    with pytest.raises(IndexError):
        tex.read(x, y)
    with pytest.raises(IndexError):
        tex.write(x, y, [0, 0, 0, 0])


def test_write_wrong_component_count():
    tex = Texture(2, 2)
    with pytest.raises(ValueError):
        tex.write(0, 0, [1.0, 2.0, 3.0])


@pytest.mark.parametrize("w, h", [(0, 4), (4, 0)])
def test_zero_size_rejected(w, h):
    with pytest.raises(ValueError):
        Texture(w, h)


def test_from_array_rejects_bad_shape():
    with pytest.raises(ValueError):
        Texture.from_array(np.zeros((2, 2, 3)))


def test_nearest_sample_picks_texel_under_uv():
    data = np.arange(16, dtype=float).reshape(2, 2, 4)
    tex = Texture.from_array(data)
    assert np.array_equal(tex.sample((0.25, 0.25)), data[0, 0])
    assert np.array_equal(tex.sample((0.75, 0.25)), data[0, 1])
    assert np.array_equal(tex.sample((0.25, 0.75)), data[1, 0])


def test_nearest_sample_clamps_at_edges():
    data = np.arange(16, dtype=float).reshape(2, 2, 4)
    tex = Texture.from_array(data)
    assert np.array_equal(tex.sample((1.0, 1.0)), data[1, 1])
    assert np.array_equal(tex.sample((-0.5, -0.5)), data[0, 0])


def test_linear_sample_of_constant_texture_is_constant():
    tex = Texture.from_array(np.full((3, 5, 4), 0.25), linear=True)
    for uv in [(0.0, 0.0), (0.37, 0.81), (1.0, 1.0)]:
        assert np.allclose(tex.sample(uv), 0.25)


def test_linear_sample_between_texels_averages():
    a = np.array([0.0, 0.2, 0.4, 1.0])
    b = np.array([1.0, 0.6, 0.0, 1.0])
    tex = Texture.from_array(np.stack([a, b])[None, :, :], linear=True)
    assert np.allclose(tex.sample((0.5, 0.5)), (a + b) / 2)
    assert np.allclose(tex.sample((0.25, 0.5)), a)
    assert np.allclose(tex.sample((0.75, 0.5)), b)


def test_sample_function_wraps_coordinates():
    data = np.arange(16, dtype=float).reshape(2, 2, 4)
    tex = Texture.from_array(data)
    assert np.array_equal(sample(tex, (1.25, 0.25)), tex.sample((0.25, 0.25)))
    assert np.array_equal(sample(tex, (-0.75, 2.75)), tex.sample((0.25, 0.75)))