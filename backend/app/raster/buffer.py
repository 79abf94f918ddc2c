"""PixelBuffer — immutable RGBA view over a decoded image."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from app.errors import InvalidBufferError

if TYPE_CHECKING:
    from app.engine.context import Rectangle


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Read-only RGBA samples, shape (height, width, 4), row-major, top-left origin."""

    data: NDArray[np.uint8]

    def __post_init__(self) -> None:
        arr = self.data
        if not isinstance(arr, np.ndarray) or arr.ndim != 3 or arr.shape[2] != 4:
            raise InvalidBufferError(
                f"Expected an array of shape (height, width, 4), got {getattr(arr, 'shape', None)}"
            )
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidBufferError(f"Empty buffer: {arr.shape[1]}x{arr.shape[0]}")
        if arr.dtype != np.uint8:
            raise InvalidBufferError(f"Expected uint8 samples, got {arr.dtype}")
        if arr.flags.writeable:
            arr = arr.copy()
            arr.flags.writeable = False
            object.__setattr__(self, "data", arr)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.data.shape == other.data.shape and bool(np.array_equal(self.data, other.data))

    def __hash__(self) -> int:
        return hash((self.data.shape, self.data.tobytes()))

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes) -> PixelBuffer:
        if width <= 0 or height <= 0:
            raise InvalidBufferError(f"Invalid dimensions: {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidBufferError(
                f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}"
            )
        arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(arr)

    @classmethod
    def from_array(cls, arr: NDArray) -> PixelBuffer:
        """Wrap an (h, w, 3) RGB or (h, w, 4) RGBA array. RGB gets opaque alpha."""
        arr = np.asarray(arr)
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8), alpha], axis=2)
        return cls(arr)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = self.data[y, x]
        return (int(r), int(g), int(b), int(a))

    def rgb(self) -> NDArray[np.uint8]:
        return self.data[:, :, :3]

    def alpha(self) -> NDArray[np.uint8]:
        return self.data[:, :, 3]

    def crop(self, rect: Rectangle) -> PixelBuffer:
        """Sub-view clipped to the buffer bounds."""
        x0 = max(0, rect.x)
        y0 = max(0, rect.y)
        x1 = min(self.width, rect.x + rect.width)
        y1 = min(self.height, rect.y + rect.height)
        return PixelBuffer(self.data[y0:y1, x0:x1])
