"""AnalysisContext — the per-call state object flowing through all transforms.

Value types produced by the transforms (Rectangle, ColorPalette,
DetectedElement, LayoutAnalysis) are frozen; only the context itself is
mutated, and a fresh context is built for every analysis.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

import numpy as np
from numpy.typing import NDArray

from app.engine.config import AnalysisConfig

if TYPE_CHECKING:
    from app.raster.buffer import PixelBuffer


class ElementType(str, enum.Enum):
    BUTTON = "button"
    TEXT = "text"
    HEADING = "heading"
    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SWITCH = "switch"
    CARD = "card"
    IMAGE = "image"
    CONTAINER = "container"
    NAVIGATION = "navigation"
    FORM = "form"
    BADGE = "badge"
    ALERT = "alert"
    TOOLTIP = "tooltip"
    MODAL = "modal"
    DIVIDER = "divider"
    BREADCRUMB = "breadcrumb"
    STEPPER = "stepper"
    TABS = "tabs"
    ACCORDION = "accordion"
    MENU = "menu"
    AVATAR = "avatar"
    ICON = "icon"
    LINK = "link"
    LIST = "list"
    TABLE = "table"
    PROGRESS = "progress"
    SPINNER = "spinner"


class LayoutType(str, enum.Enum):
    FLEX = "flex"
    GRID = "grid"
    ABSOLUTE = "absolute"


class FlexDirection(str, enum.Enum):
    ROW = "row"
    COLUMN = "column"


class Alignment(str, enum.Enum):
    START = "start"
    CENTER = "center"
    END = "end"
    SPACE_BETWEEN = "space-between"
    SPACE_AROUND = "space-around"


@dataclass(frozen=True)
class Rectangle:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else float("inf")

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class ColorPalette:
    dominant: str = "#ffffff"
    background: str = "#ffffff"
    text: str = "#000000"
    accent: str = "#007bff"
    # ≤5 colors, most frequent first
    palette: tuple[str, ...] = ()


@dataclass(frozen=True)
class DetectedElement:
    type: ElementType
    bounds: Rectangle
    confidence: float
    background: str | None = None
    content: str = ""


@dataclass(frozen=True)
class LayoutAnalysis:
    type: LayoutType = LayoutType.ABSOLUTE
    direction: FlexDirection | None = None
    alignment: Alignment | None = None
    gap: int | None = None
    padding: int | None = None


@dataclass(frozen=True, eq=False)
class EdgeMap:
    """Binary Sobel edge mask, shape (height, width)."""

    mask: NDArray[np.bool_]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EdgeMap):
            return NotImplemented
        return self.mask.shape == other.mask.shape and bool(np.array_equal(self.mask, other.mask))

    def __hash__(self) -> int:
        return hash((self.mask.shape, self.mask.tobytes()))

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def density(self) -> float:
        return self.edge_count / self.mask.size if self.mask.size else 0.0


@dataclass
class AnalysisContext:
    """Shared state flowing through the pipeline for one image."""

    buffer: PixelBuffer
    config: AnalysisConfig = field(default_factory=AnalysisConfig)

    # --- Layer 0 ---
    palette: ColorPalette = field(default_factory=ColorPalette)
    edge_map: EdgeMap | None = None

    # --- Layer 1 ---
    rectangles: list[Rectangle] = field(default_factory=list)

    # --- Layer 2 ---
    elements: list[DetectedElement] = field(default_factory=list)

    # --- Layer 3 ---
    layout: LayoutAnalysis = field(default_factory=LayoutAnalysis)

    # --- Pipeline metadata ---
    completed_transforms: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)
    progress_callback: Callable[[float], None] | None = None

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height
