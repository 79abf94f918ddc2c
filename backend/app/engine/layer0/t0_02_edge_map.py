"""T0.02 — Sobel Edge Map.

Grayscale (mean of R, G, B) → Sobel gradient magnitude → binary mask.
Border pixels are never edges. The region detector runs its own contrast
test, so this map is an independent secondary signal.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.ndimage import correlate

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext, EdgeMap
from app.engine.registry import TAG_EDGES, Layer, transform
from app.raster.buffer import PixelBuffer

logger = logging.getLogger(__name__)

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)


def grayscale(buffer: PixelBuffer) -> np.ndarray:
    """Per-pixel intensity (R + G + B) / 3 as float64."""
    return buffer.rgb().astype(np.float64).sum(axis=2) / 3.0


def detect_edges(buffer: PixelBuffer, config: AnalysisConfig | None = None) -> EdgeMap:
    config = config or AnalysisConfig()
    mask = np.zeros((buffer.height, buffer.width), dtype=bool)
    if buffer.width < 3 or buffer.height < 3:
        return EdgeMap(mask)

    gray = grayscale(buffer)
    gx = correlate(gray, SOBEL_X, mode="nearest")
    gy = correlate(gray, SOBEL_Y, mode="nearest")
    magnitude = np.sqrt(gx * gx + gy * gy)

    # Interior only
    mask[1:-1, 1:-1] = magnitude[1:-1, 1:-1] > config.edge_threshold
    return EdgeMap(mask)


@transform(
    id="T0.02",
    layer=Layer.PIXELS,
    tags={TAG_EDGES},
    description="Sobel edge map (informational)",
)
def edge_map(ctx: AnalysisContext) -> None:
    ctx.edge_map = detect_edges(ctx.buffer, ctx.config)
    logger.debug(
        "Edge map: %d edge pixels (density %.3f)",
        ctx.edge_map.edge_count,
        ctx.edge_map.density,
    )
