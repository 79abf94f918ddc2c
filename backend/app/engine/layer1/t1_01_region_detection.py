"""T1.01 — Region Detection.

Coarse seed grid → color-consistent, border-contrasting windows → axis-limited
growth from the seed. The growth only walks the two axes through the seed,
so bounds of non-rectangular shapes are approximate; the classification
thresholds downstream are tuned to that bias.

Visited marking is sparse (every ``visited_stride`` px), so overlapping or
duplicate rectangles from neighboring seeds can still come through.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext, Rectangle
from app.engine.registry import TAG_REGIONS, Layer, transform
from app.raster.buffer import PixelBuffer
from app.utils.color import RGB, contrast_ratio
from app.utils.math_helpers import round_half_up

logger = logging.getLogger(__name__)


def window_stats(
    buffer: PixelBuffer, x: int, y: int, size: int, config: AnalysisConfig
) -> tuple[RGB, float] | None:
    """Mean color and RGB variance of a sub-sampled window, or None if fully transparent."""
    step = config.region_sample_step
    window = buffer.data[y : y + size : step, x : x + size : step]
    samples = window[window[:, :, 3] > config.opaque_alpha][:, :3].astype(np.float64)
    if len(samples) == 0:
        return None

    totals = samples.sum(axis=0)
    n = len(samples)
    mean = (
        round_half_up(totals[0] / n),
        round_half_up(totals[1] / n),
        round_half_up(totals[2] / n),
    )
    variance = float(((samples - np.array(mean, dtype=np.float64)) ** 2).sum() / n)
    return mean, variance


def border_samples(buffer: PixelBuffer, x: int, y: int, size: int, step: int) -> list[RGB]:
    """Pixels of the one-pixel ring just outside the window, every ``step`` px."""
    w, h = buffer.width, buffer.height
    rgb = buffer.rgb()
    out: list[RGB] = []

    for i in range(0, size, step):
        if y > 0 and x + i < w:
            out.append(tuple(int(c) for c in rgb[y - 1, x + i]))
        if y + size < h and x + i < w:
            out.append(tuple(int(c) for c in rgb[y + size, x + i]))

    for i in range(0, size, step):
        if x > 0 and y + i < h:
            out.append(tuple(int(c) for c in rgb[y + i, x - 1]))
        if x + size < w and y + i < h:
            out.append(tuple(int(c) for c in rgb[y + i, x + size]))

    return out


def has_border_contrast(
    buffer: PixelBuffer, x: int, y: int, size: int, color: RGB, config: AnalysisConfig
) -> bool:
    ring = border_samples(buffer, x, y, size, config.border_sample_step)
    contrasting = sum(1 for c in ring if contrast_ratio(color, c) > config.border_min_contrast)
    return contrasting > len(ring) * config.border_contrast_fraction


def is_candidate(
    buffer: PixelBuffer, x: int, y: int, size: int, config: AnalysisConfig
) -> RGB | None:
    """Mean color of the window if it looks like a UI element, else None."""
    stats = window_stats(buffer, x, y, size, config)
    if stats is None:
        return None
    mean, variance = stats
    if variance >= config.region_max_variance:
        return None
    if not has_border_contrast(buffer, x, y, size, mean, config):
        return None
    return mean


def _run_length(line: NDArray[np.uint8], target: RGB, tolerance: float) -> int:
    """Number of leading samples within ``tolerance`` RGB distance of ``target``."""
    if len(line) == 0:
        return 0
    diff = line.astype(np.float64) - np.array(target, dtype=np.float64)
    dist = np.sqrt((diff * diff).sum(axis=1))
    misses = np.flatnonzero(dist >= tolerance)
    return int(misses[0]) if len(misses) else len(dist)


def expand_region(
    buffer: PixelBuffer, seed_x: int, seed_y: int, target: RGB, config: AnalysisConfig
) -> Rectangle:
    """Grow independently along +x, −x, +y, −y from the seed."""
    rgb = buffer.rgb()
    step = config.expand_step
    tol = config.expand_tolerance

    def extent(line: NDArray[np.uint8]) -> int:
        n = _run_length(line, target, tol)
        return step * (n - 1) if n > 0 else 0

    max_x = seed_x + extent(rgb[seed_y, seed_x::step])
    min_x = seed_x - extent(rgb[seed_y, seed_x::-step])
    max_y = seed_y + extent(rgb[seed_y::step, seed_x])
    min_y = seed_y - extent(rgb[seed_y::-step, seed_x])

    return Rectangle(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def find_regions(
    buffer: PixelBuffer,
    config: AnalysisConfig | None = None,
    on_progress: Callable[[float], None] | None = None,
) -> list[Rectangle]:
    """Candidate UI-element rectangles in scan order."""
    config = config or AnalysisConfig()
    stride = config.region_seed_stride
    w, h = buffer.width, buffer.height
    visited = np.zeros((h, w), dtype=bool)
    rectangles: list[Rectangle] = []

    rows = range(0, h - stride, stride)
    for row_idx, y in enumerate(rows):
        for x in range(0, w - stride, stride):
            if visited[y, x]:
                continue

            mean = is_candidate(buffer, x, y, stride, config)
            if mean is None:
                continue

            rect = expand_region(buffer, x, y, mean, config)
            if rect.width <= config.min_region_width or rect.height <= config.min_region_height:
                continue

            rectangles.append(rect)
            vs = config.visited_stride
            visited[rect.y : rect.bottom : vs, rect.x : rect.right : vs] = True

        if on_progress is not None:
            on_progress((row_idx + 1) / len(rows))

    return rectangles


@transform(
    id="T1.01",
    layer=Layer.REGIONS,
    tags={TAG_REGIONS},
    description="Detect candidate UI-element rectangles by region growing",
)
def region_detection(ctx: AnalysisContext) -> None:
    ctx.rectangles = find_regions(ctx.buffer, ctx.config, on_progress=ctx.progress_callback)
    logger.debug("Region detection: %d candidate rectangles", len(ctx.rectangles))
