"""ScreenSight raster → layout analysis engine."""

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext, DetectedElement, ElementType, Rectangle
from app.engine.registry import Layer, get_registry, transform

__all__ = [
    "transform",
    "Layer",
    "get_registry",
    "AnalysisConfig",
    "AnalysisContext",
    "DetectedElement",
    "ElementType",
    "Rectangle",
]
