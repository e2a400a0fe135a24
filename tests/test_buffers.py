import logging
import struct
import time

import numpy as np
import pytest

from rdog.buffers import measure, pad_size, to_bytes
from rdog.camera import Camera, Globals


def test_u32_layout():
    assert to_bytes(np.uint32(1)) == b"\x01\x00\x00\x00"
    assert to_bytes(7) == struct.pack("<I", 7)


def test_u64_layout():
    data = to_bytes(np.uint64(5))
    assert len(data) == 8
    assert struct.unpack("<Q", data) == (5,)


def test_f32_layout():
    assert to_bytes(1.0) == b"\x00\x00\x80\x3f"
    assert to_bytes(np.float32(1.0)) == b"\x00\x00\x80\x3f"


def test_int_out_of_range():
    with pytest.raises(OverflowError):
        to_bytes(-1)
    with pytest.raises(OverflowError):
        to_bytes(1 << 32)


def test_unsupported_types():
    with pytest.raises(TypeError):
        to_bytes("text")
    with pytest.raises(TypeError):
        to_bytes(True)


def test_globals_round_trip():
    g = Globals(time=(1.5, 0.25), seed=(10, 20))
    data = to_bytes(g)
    assert len(data) == 16
    assert struct.unpack("<2f2I", data) == (1.5, 0.25, 10, 20)


def test_camera_layout_is_column_major():
    pv = np.arange(16, dtype=float).reshape(4, 4)
    cam = Camera(projection_view=pv, origin=[1.0, 2.0, 3.0, 0.0], screen=[8.0, 6.0, 0.0, 0.0])
    data = to_bytes(cam)
    assert len(data) == 144
    floats = np.frombuffer(data, dtype="<f4")
    assert np.array_equal(floats[:16].reshape(4, 4).T, pv)
    assert np.array_equal(floats[32:36], [1.0, 2.0, 3.0, 0.0])
    assert np.array_equal(floats[36:40], [8.0, 6.0, 0.0, 0.0])


def test_array_and_sequence_concatenate():
    arr = np.array([1.0, 2.0], dtype=np.float32)
    assert to_bytes(arr) == to_bytes(1.0) + to_bytes(2.0)
    assert to_bytes([3, 4]) == to_bytes(3) + to_bytes(4)


@pytest.mark.parametrize("size", [0, 1, 31, 32, 33, 100, 4096])
def test_pad_size_invariants(size):
    padded = pad_size(size)
    assert padded % 32 == 0
    assert size <= padded < size + 32


def test_pad_size_keeps_aligned_sizes():
    assert pad_size(0) == 0
    assert pad_size(64) == 64


def test_measure_returns_result_and_logs(monkeypatch, caplog):
    monkeypatch.delenv("RDOG_METRIC_THRESHOLD", raising=False)

    def work():
        time.sleep(0.001)
        return 42

    with caplog.at_level(logging.DEBUG, logger="rdog.buffers"):
        assert measure("tick", work) == 42
    assert "metric(tick)" in caplog.text


def test_measure_below_threshold_is_silent(monkeypatch, caplog):
    monkeypatch.setenv("RDOG_METRIC_THRESHOLD", "1h")
    with caplog.at_level(logging.DEBUG, logger="rdog.buffers"):
        assert measure("tick", lambda: "done") == "done"
    assert "metric(tick)" not in caplog.text


def test_measure_rejects_bad_threshold(monkeypatch):
    monkeypatch.setenv("RDOG_METRIC_THRESHOLD", "soon")
    with pytest.raises(ValueError):
        measure("tick", lambda: None)