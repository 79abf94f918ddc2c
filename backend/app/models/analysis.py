"""Analysis output contract — the structured result shared by every analyzer.

Serialize with ``model_dump(by_alias=True, exclude_none=True)`` to get the
camelCase wire shape with unset optionals omitted.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.engine.context import Alignment, ElementType, FlexDirection, LayoutType
from app.utils.color import parse_hex, to_hex


def _normalize_hex(value: str | None) -> str | None:
    if value is None:
        return None
    return to_hex(parse_hex(value))


class _Contract(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Bounds(_Contract):
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class Gradient(_Contract):
    from_: str = Field(alias="from")
    to: str

    @field_validator("from_", "to")
    @classmethod
    def normalize_hex(cls, value: str) -> str:
        return _normalize_hex(value)


class ElementColors(_Contract):
    background: str | None = None
    text: str | None = None
    border: str | None = None
    hover: str | None = None
    focus: str | None = None
    gradient: Gradient | None = None

    @field_validator("background", "text", "border", "hover", "focus")
    @classmethod
    def normalize_hex(cls, value: str | None) -> str | None:
        return _normalize_hex(value)


class Spacing(_Contract):
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0


class Styling(_Contract):
    font_size: Literal["xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl"] | None = Field(
        default=None, alias="fontSize"
    )
    font_weight: Literal[
        "thin", "light", "normal", "medium", "semibold", "bold", "extrabold", "black"
    ] | None = Field(default=None, alias="fontWeight")
    border_radius: Literal["none", "sm", "md", "lg", "xl", "2xl", "3xl", "full"] | None = Field(
        default=None, alias="borderRadius"
    )
    shadow: Literal["none", "xs", "sm", "md", "lg", "xl", "2xl", "inner"] | None = None
    border_width: Literal["0", "1", "2", "4", "8"] | None = Field(default=None, alias="borderWidth")
    padding: Spacing | None = None
    margin: Spacing | None = None
    opacity: float | None = Field(default=None, ge=0.0, le=1.0)
    z_index: int | None = Field(default=None, alias="zIndex")


class FormProperties(_Contract):
    placeholder: str | None = None
    required: bool | None = None
    disabled: bool | None = None
    type: Literal[
        "text", "email", "password", "number", "tel", "url", "search", "date", "time"
    ] | None = None
    validation: Literal["error", "warning", "success"] | None = None


class Accessibility(_Contract):
    aria_label: str | None = Field(default=None, alias="ariaLabel")
    role: str | None = None


class DetectedElementModel(_Contract):
    type: ElementType
    bounds: Bounds
    colors: ElementColors = Field(default_factory=ElementColors)
    content: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    styling: Styling | None = None
    variant: Literal["solid", "outline", "ghost", "link", "subtle", "surface"] | None = None
    size: Literal["xs", "sm", "md", "lg", "xl"] | None = None
    state: Literal["default", "hover", "focus", "active", "disabled", "loading"] | None = None
    form_properties: FormProperties | None = Field(default=None, alias="formProperties")
    accessibility: Accessibility | None = None


class ColorPaletteModel(_Contract):
    dominant: str
    background: str
    text: str
    accent: str
    palette: list[str] = Field(default_factory=list, max_length=5)

    @field_validator("dominant", "background", "text", "accent")
    @classmethod
    def normalize_hex(cls, value: str) -> str:
        return _normalize_hex(value)

    @field_validator("palette")
    @classmethod
    def normalize_palette(cls, value: list[str]) -> list[str]:
        return [to_hex(parse_hex(c)) for c in value]


class LayoutModel(_Contract):
    type: LayoutType
    direction: FlexDirection | None = None
    alignment: Alignment | None = None
    gap: int | None = None
    padding: int | None = None


class Dimensions(_Contract):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class AnalysisResult(_Contract):
    """{colors, elements, layout, dimensions} — the analyzer output contract."""

    colors: ColorPaletteModel
    elements: list[DetectedElementModel] = Field(default_factory=list)
    layout: LayoutModel
    dimensions: Dimensions

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
