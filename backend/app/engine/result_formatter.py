"""AnalysisContext → AnalysisResult (the output contract)."""

from __future__ import annotations

from app.engine.context import AnalysisContext, DetectedElement
from app.models.analysis import (
    AnalysisResult,
    Bounds,
    ColorPaletteModel,
    DetectedElementModel,
    Dimensions,
    ElementColors,
    LayoutModel,
)


def element_to_model(element: DetectedElement) -> DetectedElementModel:
    b = element.bounds
    return DetectedElementModel(
        type=element.type,
        bounds=Bounds(x=b.x, y=b.y, width=b.width, height=b.height),
        colors=ElementColors(background=element.background),
        content=element.content or None,
        confidence=element.confidence,
    )


def context_to_result(ctx: AnalysisContext) -> AnalysisResult:
    palette = ctx.palette
    layout = ctx.layout
    return AnalysisResult(
        colors=ColorPaletteModel(
            dominant=palette.dominant,
            background=palette.background,
            text=palette.text,
            accent=palette.accent,
            palette=list(palette.palette),
        ),
        elements=[element_to_model(el) for el in ctx.elements],
        layout=LayoutModel(
            type=layout.type,
            direction=layout.direction,
            alignment=layout.alignment,
            gap=layout.gap,
            padding=layout.padding,
        ),
        dimensions=Dimensions(width=ctx.width, height=ctx.height),
    )
