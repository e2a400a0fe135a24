"""Registry of live cameras keyed by handle."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

from .config import CameraHandle

__all__ = ["CameraRegistry"]

T = TypeVar("T")


class CameraRegistry(Generic[T]):
    """Hands out fresh handles for cameras and looks them up again."""

    def __init__(self) -> None:
        self._cameras: dict[CameraHandle, T] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._cameras)

    def __contains__(self, handle: object) -> bool:
        return handle in self._cameras

    def add(self, camera: T) -> CameraHandle:
        """Register ``camera`` under a new handle and return it."""
        handle = CameraHandle(self._next_id)
        self._cameras[handle] = camera
        self._next_id += 1
        return handle

    def get(self, handle: CameraHandle) -> T:
        """Return the camera for ``handle``; raises ``KeyError`` if it is gone."""
        try:
            return self._cameras[handle]
        except KeyError:
            raise KeyError(f"camera does not exist: {handle!r}") from None

    def remove(self, handle: CameraHandle) -> None:
        """Forget ``handle``; unknown handles are ignored."""
        self._cameras.pop(handle, None)

    def values(self) -> Iterator[T]:
        """Iterate over the registered cameras."""
        return iter(self._cameras.values())