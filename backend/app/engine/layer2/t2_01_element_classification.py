"""T2.01 — Element Classification.

Decision table on aspect ratio and area. Rules are evaluated top to bottom
and the first match wins, so the narrow button rule shadows the broader
input/card/container rules. Rectangles matching nothing are discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import NamedTuple

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext, DetectedElement, ElementType, Rectangle
from app.engine.layer0.t0_01_color_palette import dominant_color
from app.engine.registry import TAG_REGIONS, Layer, transform
from app.raster.buffer import PixelBuffer

logger = logging.getLogger(__name__)


def _within(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


class ClassificationRule(NamedTuple):
    type: ElementType
    confidence: float
    matches: Callable[[Rectangle, AnalysisConfig], bool]


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    # Wider than tall, medium size
    ClassificationRule(
        ElementType.BUTTON,
        0.8,
        lambda r, c: _within(r.aspect_ratio, c.button_aspect)
        and _within(r.height, c.button_height)
        and _within(r.width, c.button_width),
    ),
    # Very wide, short
    ClassificationRule(
        ElementType.TEXT,
        0.7,
        lambda r, c: r.aspect_ratio > c.text_min_aspect and r.height <= c.text_max_height,
    ),
    # Wide field of input height
    ClassificationRule(
        ElementType.INPUT,
        0.6,
        lambda r, c: _within(r.aspect_ratio, c.input_aspect)
        and _within(r.height, c.input_height)
        and r.width >= c.input_min_width,
    ),
    # Large, roughly square to moderately oblong
    ClassificationRule(
        ElementType.CARD,
        0.7,
        lambda r, c: r.area > c.card_min_area and _within(r.aspect_ratio, c.card_aspect),
    ),
    # Near-square, medium to large
    ClassificationRule(
        ElementType.IMAGE,
        0.6,
        lambda r, c: r.area > c.image_min_area and _within(r.aspect_ratio, c.image_aspect),
    ),
    ClassificationRule(
        ElementType.CONTAINER,
        0.4,
        lambda r, c: r.area > c.container_min_area,
    ),
)


def classify(
    rect: Rectangle, background: str | None = None, config: AnalysisConfig | None = None
) -> DetectedElement | None:
    """Map a rectangle (and its dominant color) to an element, or None to discard."""
    config = config or AnalysisConfig()
    if rect.width <= 0 or rect.height <= 0:
        return None
    for rule in CLASSIFICATION_RULES:
        if rule.matches(rect, config):
            return DetectedElement(
                type=rule.type,
                bounds=rect,
                confidence=rule.confidence,
                background=background,
            )
    return None


def classify_region(
    buffer: PixelBuffer, rect: Rectangle, config: AnalysisConfig | None = None
) -> DetectedElement | None:
    """Classify a rectangle of ``buffer``, using its dominant color as background."""
    config = config or AnalysisConfig()
    if rect.width <= 0 or rect.height <= 0:
        return None
    background = dominant_color(
        buffer.crop(rect),
        stride=config.dominant_sample_stride,
        opaque_alpha=config.opaque_alpha,
    )
    return classify(rect, background, config)


@transform(
    id="T2.01",
    layer=Layer.CLASSIFICATION,
    dependencies=["T1.01"],
    tags={TAG_REGIONS},
    description="Classify candidate rectangles into UI element types",
)
def element_classification(ctx: AnalysisContext) -> None:
    elements: list[DetectedElement] = []
    for rect in ctx.rectangles:
        element = classify_region(ctx.buffer, rect, ctx.config)
        if element is not None:
            elements.append(element)
    ctx.elements = elements

    if logger.isEnabledFor(logging.DEBUG):
        by_type: dict[str, int] = {}
        for el in elements:
            by_type[el.type.value] = by_type.get(el.type.value, 0) + 1
        logger.debug(
            "Classification: %d/%d rectangles kept %s",
            len(elements),
            len(ctx.rectangles),
            by_type,
        )
