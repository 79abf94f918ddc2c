"""T0.01 — Color Palette.

Frequency-based palette from a strided pixel sample. Background comes from
the image corners, text color from background luminance, accent from the
first well-contrasting frequent color.
"""

from __future__ import annotations

import logging
from collections import Counter

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext, ColorPalette
from app.engine.registry import Layer, transform
from app.raster.buffer import PixelBuffer
from app.utils.color import BLACK, WHITE, contrast_ratio, luminance, pack_rgb, packed_to_hex

logger = logging.getLogger(__name__)

# Corner color must appear on at least this many corners to count as background
_CORNER_MAJORITY = 2


def ranked_colors(
    buffer: PixelBuffer,
    stride: int,
    min_alpha: int,
    limit: int | None = None,
) -> list[str]:
    """Hex colors of every ``stride``-th pixel (row-major), most frequent first.

    Samples with alpha < ``min_alpha`` are skipped. Ties keep first-seen order.
    """
    flat = buffer.data.reshape(-1, 4)[::stride]
    opaque = flat[flat[:, 3] >= min_alpha]
    if len(opaque) == 0:
        return []
    counts = Counter(pack_rgb(opaque[:, :3]).tolist())
    return [packed_to_hex(c) for c, _ in counts.most_common(limit)]


def dominant_color(buffer: PixelBuffer, stride: int = 4, opaque_alpha: int = 128) -> str:
    """Most frequent color among every ``stride``-th pixel with alpha > ``opaque_alpha``."""
    flat = buffer.data.reshape(-1, 4)[::stride]
    opaque = flat[flat[:, 3] > opaque_alpha]
    if len(opaque) == 0:
        return WHITE
    counts = Counter(pack_rgb(opaque[:, :3]).tolist())
    return packed_to_hex(counts.most_common(1)[0][0])


def _corner_colors(buffer: PixelBuffer) -> list[str]:
    w, h = buffer.width, buffer.height
    corners = [(0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1)]
    return [packed_to_hex(int(pack_rgb(buffer.data[y, x, :3]))) for x, y in corners]


def detect_background(buffer: PixelBuffer, dominant: str) -> str:
    counts = Counter(_corner_colors(buffer))
    color, n = counts.most_common(1)[0]
    return color if n >= _CORNER_MAJORITY else dominant


def detect_text_color(background: str, cutoff: float = 0.5) -> str:
    return BLACK if luminance(background) > cutoff else WHITE


def detect_accent(candidates: list[str], background: str, config: AnalysisConfig) -> str:
    for color in candidates:
        if color != background and contrast_ratio(color, background) > config.accent_min_contrast:
            return color
    return config.default_accent


def extract_palette(buffer: PixelBuffer, config: AnalysisConfig | None = None) -> ColorPalette:
    """Derive the ColorPalette of an image. Pure function of the buffer."""
    config = config or AnalysisConfig()
    candidates = ranked_colors(
        buffer,
        stride=config.palette_sample_stride,
        min_alpha=config.palette_min_alpha,
        limit=config.palette_candidates,
    )
    dominant = candidates[0] if candidates else WHITE
    background = detect_background(buffer, dominant)
    return ColorPalette(
        dominant=dominant,
        background=background,
        text=detect_text_color(background, config.text_luminance_cutoff),
        accent=detect_accent(candidates, background, config),
        palette=tuple(candidates[: config.palette_size]),
    )


@transform(
    id="T0.01",
    layer=Layer.PIXELS,
    description="Extract dominant/background/text/accent colors and palette",
)
def color_palette(ctx: AnalysisContext) -> None:
    ctx.palette = extract_palette(ctx.buffer, ctx.config)
    logger.debug(
        "Palette: dominant=%s background=%s accent=%s (%d colors)",
        ctx.palette.dominant,
        ctx.palette.background,
        ctx.palette.accent,
        len(ctx.palette.palette),
    )
