"""Frame counter shared by the renderer and the shading passes."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Frame"]


@dataclass(frozen=True, order=True)
class Frame:
    """A 32-bit frame number."""

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFFFFFF:
            raise ValueError(f"frame number out of range: {self.value}")

    def is_gi_tracing(self) -> bool:
        """Four of every six frames trace global illumination."""
        return self.value % 6 < 4

    def is_gi_validation(self) -> bool:
        """The remaining two of every six frames validate it."""
        return not self.is_gi_tracing()