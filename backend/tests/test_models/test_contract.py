"""Tests for the analysis output contract models."""

import pytest
from pydantic import ValidationError

from app.models.analysis import DetectedElementModel

ELEMENT = {
    "type": "card",
    "bounds": {"x": 10, "y": 20, "width": 200, "height": 100},
    "confidence": 0.9,
    "colors": {"background": "#FFFFFF", "gradient": {"from": "#000", "to": "#ffffff"}},
    "styling": {"fontSize": "lg", "borderRadius": "md", "opacity": 0.8, "zIndex": 2},
    "formProperties": {"placeholder": "Email", "type": "email"},
    "accessibility": {"ariaLabel": "Sign up"},
}


def test_vision_payload_round_trip():
    element = DetectedElementModel.model_validate(ELEMENT)
    wire = element.model_dump(mode="json", by_alias=True, exclude_none=True)

    assert wire["styling"] == {"fontSize": "lg", "borderRadius": "md", "opacity": 0.8, "zIndex": 2}
    assert wire["colors"] == {
        "background": "#ffffff",
        "gradient": {"from": "#000000", "to": "#ffffff"},
    }
    assert wire["formProperties"] == {"placeholder": "Email", "type": "email"}
    assert wire["accessibility"] == {"ariaLabel": "Sign up"}
    assert DetectedElementModel.model_validate(wire) == element


def test_styling_accepts_field_names():
    element = DetectedElementModel.model_validate(
        {**ELEMENT, "styling": {"opacity": 1.0, "z_index": 0}}
    )
    assert element.styling.opacity == 1.0
    assert element.styling.z_index == 0


@pytest.mark.parametrize("opacity", [-0.1, 1.5])
def test_opacity_out_of_range(opacity):
    with pytest.raises(ValidationError):
        DetectedElementModel.model_validate({**ELEMENT, "styling": {"opacity": opacity}})
