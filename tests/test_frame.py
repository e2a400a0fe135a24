import pytest

from rdog.frame import Frame


def test_default_frame_is_zero_and_tracing():
    assert Frame().value == 0
    assert Frame().is_gi_tracing()


def test_gi_cycle_pattern():
    tracing = [Frame(i).is_gi_tracing() for i in range(12)]
    assert tracing == [True, True, True, True, False, False] * 2


@pytest.mark.parametrize("i", range(0, 30, 7))
def test_validation_is_complement(i):
    f = Frame(i)
    assert f.is_gi_validation() is (not f.is_gi_tracing())


def test_frames_are_ordered_and_comparable():
    assert Frame(1) < Frame(2)
    assert Frame(5) == Frame(5)
    assert sorted([Frame(3), Frame(1), Frame(2)]) == [Frame(1), Frame(2), Frame(3)]


@pytest.mark.parametrize("bad", [-1, 2**32])
def test_out_of_range_rejected(bad):
    with pytest.raises(ValueError):
        Frame(bad)