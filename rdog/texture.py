"""Two-dimensional RGBA textures with storage access and filtered sampling."""

from __future__ import annotations

import math

import numpy as np

from .vecmath import wrap

__all__ = ["Texture", "sample"]


class Texture:
    """A ``height x width`` grid of RGBA texels.

    ``read`` and ``write`` give storage-image access to single texels, while
    ``sample`` looks the texture up by normalised coordinates, either with
    nearest-texel or bilinear filtering and clamping at the edges.
    """

    def __init__(self, width: int, height: int, *, linear: bool = False) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"texture size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.linear = linear
        self.data = np.zeros((self.height, self.width, 4), dtype=float)

    @classmethod
    def from_array(cls, data, *, linear: bool = False) -> Texture:
        """Create a texture from an array of shape ``(height, width, 4)``."""
        arr = np.array(data, dtype=float)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected shape (height, width, 4), got {arr.shape}")
        tex = cls(arr.shape[1], arr.shape[0], linear=linear)
        tex.data[...] = arr
        return tex

    def __repr__(self) -> str:
        mode = "linear" if self.linear else "nearest"
        return f"Texture({self.width}x{self.height}, {mode})"

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"texel ({x}, {y}) outside a {self.width}x{self.height} texture"
            )

    def read(self, x: int, y: int) -> np.ndarray:
        """Return a copy of the texel at ``(x, y)``."""
        self._check(x, y)
        return self.data[y, x].copy()

    def write(self, x: int, y: int, value) -> None:
        """Store a four-component value at ``(x, y)``."""
        self._check(x, y)
        arr = np.asarray(value, dtype=float)
        if arr.shape != (4,):
            raise ValueError(f"texel value must have 4 components, got shape {arr.shape}")
        self.data[y, x] = arr

    def _texel(self, x: int, y: int) -> np.ndarray:
        cx = min(max(x, 0), self.width - 1)
        cy = min(max(y, 0), self.height - 1)
        return self.data[cy, cx]

    def sample(self, uv) -> np.ndarray:
        """Look up the texture at normalised coordinates, clamped to the edges."""
        u, v = float(uv[0]), float(uv[1])
        if not self.linear:
            x = math.floor(u * self.width)
            y = math.floor(v * self.height)
            return self._texel(x, y).copy()

        fx = u * self.width - 0.5
        fy = v * self.height - 0.5
        x0 = math.floor(fx)
        y0 = math.floor(fy)
        tx = fx - x0
        ty = fy - y0
        top = self._texel(x0, y0) * (1.0 - tx) + self._texel(x0 + 1, y0) * tx
        bottom = self._texel(x0, y0 + 1) * (1.0 - tx) + self._texel(x0 + 1, y0 + 1) * tx
        return top * (1.0 - ty) + bottom * ty


def sample(tex: Texture, uv) -> np.ndarray:
    """Sample ``tex`` with the coordinates wrapped into ``(0, 1]``."""
    return tex.sample(wrap(np.asarray(uv, dtype=float)[:2]))