"""Byte layouts of values uploaded to uniform buffers, and timing helpers."""

from __future__ import annotations

import logging
import os
import re
import struct
import time
from collections.abc import Callable
from typing import TypeVar

import numpy as np

from .camera import Camera, Globals

__all__ = ["to_bytes", "pad_size", "measure"]

_log = logging.getLogger(__name__)

T = TypeVar("T")

_THRESHOLD_ENV = "RDOG_METRIC_THRESHOLD"
_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION = re.compile(r"\s*(\d+(?:\.\d+)?)\s*(ns|us|ms|s|m|h)\s*")


def _mat4(m) -> bytes:
    # Matrices are laid out column by column.
    return np.asarray(m, dtype="<f4").tobytes(order="F")


def to_bytes(value) -> bytes:
    """Little-endian byte image of ``value`` as the shaders expect it.

    Python ints are 32-bit unsigned, Python floats 32-bit floats; numpy
    scalars and arrays keep their own type. Sequences are concatenated.
    """
    if isinstance(value, Camera):
        return (
            _mat4(value.projection_view)
            + _mat4(value.ndc_to_world)
            + np.asarray(value.origin, dtype="<f4").tobytes()
            + np.asarray(value.screen, dtype="<f4").tobytes()
        )
    if isinstance(value, Globals):
        return struct.pack("<2f2I", *value.time, *value.seed)
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("booleans have no buffer layout")
    if isinstance(value, (np.generic, np.ndarray)):
        arr = np.ascontiguousarray(value)
        return arr.astype(arr.dtype.newbyteorder("<")).tobytes()
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFFFF:
            raise OverflowError(f"{value} does not fit in 32 unsigned bits")
        return struct.pack("<I", value)
    if isinstance(value, float):
        return struct.pack("<f", value)
    if isinstance(value, (list, tuple)):
        return b"".join(to_bytes(item) for item in value)
    raise TypeError(f"cannot lay out {type(value).__name__} in a buffer")


def pad_size(size: int) -> int:
    """Round ``size`` up to a multiple of 32 bytes."""
    return (size + 31) & ~31


def _threshold() -> float:
    raw = os.environ.get(_THRESHOLD_ENV)
    if raw is None:
        return 0.0
    match = _DURATION.fullmatch(raw)
    if match is None:
        raise ValueError(f"invalid duration in {_THRESHOLD_ENV}: {raw!r}")
    return float(match.group(1)) * _UNITS[match.group(2)]


def measure(name: str, func: Callable[[], T]) -> T:
    """Call ``func`` and log how long it took if that exceeds the threshold.

    The threshold comes from ``RDOG_METRIC_THRESHOLD`` (e.g. ``"5ms"``) and
    defaults to zero.
    """
    threshold = _threshold()
    start = time.perf_counter()
    result = func()
    elapsed = time.perf_counter() - start
    if elapsed > threshold:
        _log.debug("metric(%s)=%.6fs", name, elapsed)
    return result