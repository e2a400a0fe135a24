"""GPU-side camera description and the per-frame shader globals."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

__all__ = ["Camera", "Globals", "RayParams"]


def _array(value, shape: tuple[int, ...], name: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {arr.shape}")
    return arr


@dataclass(eq=False)
class Camera:
    """Camera matrices, origin and screen size as seen by the shaders."""

    projection_view: np.ndarray = field(default_factory=lambda: np.zeros((4, 4)))
    ndc_to_world: np.ndarray = field(default_factory=lambda: np.zeros((4, 4)))
    origin: np.ndarray = field(default_factory=lambda: np.zeros(4))
    screen: np.ndarray = field(default_factory=lambda: np.zeros(4))

    def __post_init__(self) -> None:
        self.projection_view = _array(self.projection_view, (4, 4), "projection_view")
        self.ndc_to_world = _array(self.ndc_to_world, (4, 4), "ndc_to_world")
        self.origin = _array(self.origin, (4,), "origin")
        self.screen = _array(self.screen, (4,), "screen")

    def world_to_clip(self, pos) -> np.ndarray:
        """Map a world-space point to clip coordinates."""
        p = np.append(np.asarray(pos, dtype=float), 1.0)
        return self.projection_view @ p

    def world_to_screen(self, pos) -> np.ndarray:
        """Map a world-space point to screen coordinates."""
        return self.clip_to_screen(self.world_to_clip(pos))

    def clip_to_screen(self, pos) -> np.ndarray:
        """Map clip coordinates to screen coordinates (y pointing down)."""
        p = np.asarray(pos, dtype=float)
        ndc = p[:2] / p[3]
        ndc = np.array([ndc[0], -ndc[1]])
        return (0.5 * ndc + 0.5) * self.screen[:2]

    def screen_to_idx(self, pos) -> int:
        """Row-major index of an integer screen position."""
        width = int(self.screen[0])
        x, y = (int(c) for c in pos)
        return (y * width + x) & 0xFFFFFFFF


@dataclass(frozen=True)
class Globals:
    """Per-frame values: ``time`` is (elapsed, delta), ``seed`` two 32-bit seeds."""

    time: tuple[float, float] = (0.0, 0.0)
    seed: tuple[int, int] = (0, 0)

    def with_seed(self, seed) -> Globals:
        """Return a copy with the seed replaced."""
        return replace(self, seed=tuple(int(s) for s in seed))


@dataclass(frozen=True)
class RayParams:
    """Per-ray parameters: time and seed pair."""

    time: tuple[float, float] = (0.0, 0.0)
    seed: tuple[int, int] = (0, 0)