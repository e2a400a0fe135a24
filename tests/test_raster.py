import numpy as np
import pytest

from rdog.camera import Camera
from rdog.raster import fragment, full_screen_triangle, srgb
from rdog.texture import Texture


def test_srgb_linear_segment():
    assert srgb(0.0) == 0.0
    assert srgb(0.0002) == pytest.approx(0.0002 * 12.92)
    assert srgb(-1.0) == pytest.approx(-12.92)


def test_srgb_white_stays_white():
    assert srgb(1.0) == pytest.approx(1.0)


def test_srgb_is_monotonic():
    values = [srgb(c) for c in np.linspace(0.0, 2.0, 50)]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_full_screen_triangle_vertices():
    verts = [full_screen_triangle(i) for i in range(3)]
    assert np.array_equal(verts[0], [-1.0, -1.0, 0.0, 1.0])
    assert np.array_equal(verts[1], [3.0, -1.0, 0.0, 1.0])
    assert np.array_equal(verts[2], [-1.0, 3.0, 0.0, 1.0])


def _setup(value):
    cam = Camera(screen=[4.0, 4.0, 0.0, 0.0])
    trace = Texture.from_array(np.full((4, 4, 4), value), linear=True)
    prev = Texture(4, 4)
    return cam, trace, prev


def test_fragment_encodes_and_stores():
    cam, trace, prev = _setup(0.5)
    out = fragment((1.5, 2.5, 0.0, 1.0), cam, trace, prev)
    assert np.allclose(out[:3], srgb(0.5))
    assert out[3] == 1.0
    assert np.allclose(prev.read(1, 2), out)


def test_fragment_saturates_bright_values():
    cam, trace, prev = _setup(3.0)
    out = fragment((0.5, 0.5, 0.0, 1.0), cam, trace, prev)
    assert np.allclose(out, [1.0, 1.0, 1.0, 1.0])


def test_fragment_clamps_negative_values():
    cam, trace, prev = _setup(-2.0)
    out = fragment((3.5, 3.5, 0.0, 1.0), cam, trace, prev)
    assert np.allclose(out[:3], 0.0)
    assert np.allclose(prev.read(3, 3), out)