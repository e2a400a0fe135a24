import pytest

from rdog.rng import hash_vec, pcg, pcg3d, rng, rng01

MASK = 0xFFFFFFFF


@pytest.mark.parametrize("v", [0, 1, 12345, 2**31, MASK])
def test_pcg_is_u32_and_deterministic(v):
    out = pcg(v)
    assert 0 <= out <= MASK
    assert pcg(v) == out


def test_pcg_input_wraps_modulo_2_32():
    assert pcg(7) == pcg(7 + 2**32)


def test_pcg_spreads_inputs():
    outputs = {pcg(v) for v in range(1000)}
    assert len(outputs) == 1000


def test_pcg3d_components_in_range_and_varied():
    results = {pcg3d((i, i + 1, i + 2)) for i in range(200)}
    assert len(results) == 200
    for triple in results:
        assert all(0 <= c <= MASK for c in triple)


def test_rng01_range_and_determinism():
    values = [rng01((x, y), 17, 480) for x in range(20) for y in range(20)]
    assert all(0.0 <= v <= 1.0 for v in values)
    assert rng01((3.0, 4.0), 17, 480) == rng01((3.0, 4.0), 17, 480)
    assert len(set(values)) > 350


def test_rng01_truncates_and_saturates_coordinates():
    assert rng01((3.9, 4.2), 11, 64) == rng01((3.0, 4.0), 11, 64)
    assert rng01((-5.0, -0.5), 11, 64) == rng01((0.0, 0.0), 11, 64)
    assert rng01((float("nan"), 0.0), 11, 64) == rng01((0.0, 0.0), 11, 64)


def test_rng01_zero_seed_ignores_position():
    assert rng01((10.0, 20.0), 0, 64) == rng01((99.0, 1.0), 0, 64)


def test_rng_range_and_zero_seed():
    values = [rng((x, y, z), 5) for x in range(5) for y in range(5) for z in range(5)]
    assert all(0.0 <= v <= 1.0 for v in values)
    assert rng((1.0, 2.0, 3.0), 0) == rng((7.0, 8.0, 9.0), 0)


def test_hash_vec_zero_seed_matches_pcg3d_of_zero():
    assert hash_vec((12.0, 34.0), 0) == pcg3d((0, 0, 0))


def test_hash_vec_matches_pcg3d_of_scaled_inputs():
    assert hash_vec((3.0, 5.0), 2) == pcg3d((6, 10, 6 ^ 10))