"""Host-side camera configuration and per-frame globals."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

import numpy as np

from .camera import Camera, Globals
from .frame import Frame

__all__ = ["CameraMode", "CameraViewport", "CameraConfig", "CameraHandle", "globals_for"]

_log = logging.getLogger(__name__)

_MASK = 0xFFFFFFFF


class CameraMode(enum.Enum):
    """What a camera shows."""

    IMAGE = "Image"
    """The final composed image (the default)."""


@dataclass
class CameraViewport:
    """Output format, size and position of a camera's viewport."""

    format: str = "Rgba8UnormSrgb"
    size: tuple[int, int] = (512, 512)
    position: tuple[int, int] = (0, 0)


@dataclass(eq=False)
class CameraConfig:
    """A camera as the application describes it."""

    transform: np.ndarray
    projection: np.ndarray
    mode: CameraMode = CameraMode.IMAGE
    viewport: CameraViewport = field(default_factory=CameraViewport)

    def __post_init__(self) -> None:
        self.transform = np.array(self.transform, dtype=float)
        self.projection = np.array(self.projection, dtype=float)
        for name, matrix in (("transform", self.transform), ("projection", self.projection)):
            if matrix.shape != (4, 4):
                raise ValueError(f"{name} must be a 4x4 matrix, got shape {matrix.shape}")

    def __str__(self) -> str:
        vp = self.viewport
        return (
            f"pos={vp.position[0]}x{vp.position[1]}, "
            f"size={vp.size[0]}x{vp.size[1]}, format={vp.format}"
        )

    def serialize(self) -> Camera:
        """Convert to the shader-side camera."""
        translation = self.transform[:3, 3]
        return Camera(
            projection_view=self.projection @ np.linalg.inv(self.transform),
            ndc_to_world=self.transform @ np.linalg.inv(self.projection),
            origin=np.append(translation, 0.0),
            screen=[float(self.viewport.size[0]), float(self.viewport.size[1]), 0.0, 0.0],
        )

    def is_invalidated_by(self, older: CameraConfig) -> bool:
        """Whether switching from ``older`` to this camera needs new buffers."""
        if self.mode != older.mode:
            _log.info(
                "Camera `%s` invalidated: mode has been changed (%s -> %s)",
                older, older.mode.value, self.mode.value,
            )
            return True

        if self.viewport.format != older.viewport.format:
            _log.info(
                "Camera `%s` invalidated: viewport.format has been changed (%s -> %s)",
                older, older.viewport.format, self.viewport.format,
            )
            return True

        if tuple(self.viewport.size) != tuple(older.viewport.size):
            _log.info(
                "Camera `%s` invalidated: viewport.size has been changed (%s -> %s)",
                older, tuple(older.viewport.size), tuple(self.viewport.size),
            )
            return True

        return False


@dataclass(frozen=True)
class CameraHandle:
    """Opaque identifier of a registered camera."""

    id: int


def globals_for(time, seed: int, frame) -> Globals:
    """Shader globals for a frame; the second seed is offset by the frame number."""
    frame_no = frame.value if isinstance(frame, Frame) else int(frame)
    seed = int(seed) & _MASK
    return Globals(
        time=(float(time[0]), float(time[1])),
        seed=(seed, (seed + frame_no) & _MASK),
    )