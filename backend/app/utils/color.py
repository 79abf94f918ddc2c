"""Color helpers — hex round-trip, luminance, contrast. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

RGB = tuple[int, int, int]

WHITE = "#ffffff"
BLACK = "#000000"

# Contrast ratio offset (WCAG-style flare term)
_CONTRAST_FLARE = 0.05


def to_hex(rgb: RGB) -> str:
    """(r, g, b) → lowercase ``#rrggbb``."""
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"


def parse_hex(color: str) -> RGB:
    """``#rrggbb`` or ``#rgb`` → (r, g, b). Raises ValueError on malformed input."""
    value = color.strip().lower()
    if value.startswith("#"):
        value = value[1:]
    if len(value) == 3:
        value = value[0] * 2 + value[1] * 2 + value[2] * 2
    if len(value) != 6:
        raise ValueError(f"Not a hex color: {color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def pack_rgb(rgb: NDArray[np.uint8]) -> NDArray[np.int64]:
    """Nx3 uint8 → N packed 24-bit ints (0xRRGGBB)."""
    rgb = rgb.astype(np.int64)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def packed_to_hex(packed: int) -> str:
    return f"#{packed & 0xFFFFFF:06x}"


def luminance(color: str | RGB) -> float:
    """Perceived lightness 0-1 (ITU-R BT.601)."""
    r, g, b = parse_hex(color) if isinstance(color, str) else color
    return 0.299 * (r / 255) + 0.587 * (g / 255) + 0.114 * (b / 255)


def contrast_ratio(a: str | RGB, b: str | RGB) -> float:
    """(brighter + 0.05) / (darker + 0.05). Symmetric, ≥ 1."""
    la = luminance(a)
    lb = luminance(b)
    return (max(la, lb) + _CONTRAST_FLARE) / (min(la, lb) + _CONTRAST_FLARE)
