"""Shared test fixtures — synthetic screenshots built with numpy."""

from __future__ import annotations

import numpy as np
import pytest

from app.raster.buffer import PixelBuffer

WHITE = (255, 255, 255)
BLUE = (0, 0, 255)
DARK = (30, 30, 30)


def canvas(width: int, height: int, color: tuple[int, int, int] = WHITE) -> np.ndarray:
    """Opaque (height, width, 4) uint8 canvas filled with ``color``."""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, :, :3] = color
    arr[:, :, 3] = 255
    return arr


def fill_rect(
    arr: np.ndarray, x: int, y: int, w: int, h: int, color: tuple[int, int, int]
) -> np.ndarray:
    arr[y : y + h, x : x + w, :3] = color
    return arr


def buffer_with_rects(
    width: int,
    height: int,
    rects: list[tuple[int, int, int, int]],
    color: tuple[int, int, int] = BLUE,
    background: tuple[int, int, int] = WHITE,
) -> PixelBuffer:
    arr = canvas(width, height, background)
    for x, y, w, h in rects:
        fill_rect(arr, x, y, w, h, color)
    return PixelBuffer(arr)


# Scenario A: uniform white
WHITE_100 = buffer_with_rects(100, 100, [])

# Scenario B: blue 80×40 on white 400×300, aligned to the 20 px seed grid
BUTTON_SCREEN = buffer_with_rects(400, 300, [(160, 140, 80, 40)])


@pytest.fixture
def white_buffer() -> PixelBuffer:
    return WHITE_100


@pytest.fixture
def button_buffer() -> PixelBuffer:
    return BUTTON_SCREEN
