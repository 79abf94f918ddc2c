"""Tests for Layer 2 — element classification."""

import pytest

import app.engine.layer2.t2_01_element_classification

from app.engine.config import AnalysisConfig
from app.engine.context import ElementType, Rectangle
from app.engine.layer2.t2_01_element_classification import (
    CLASSIFICATION_RULES,
    classify,
    classify_region,
)
from app.engine.registry import Layer, get_registry
from tests.conftest import BUTTON_SCREEN


def test_layer2_registers_classification():
    spec = get_registry().get("T2.01")
    assert spec.layer == Layer.CLASSIFICATION
    assert spec.dependencies == ["T1.01"]


@pytest.mark.parametrize(
    "rect, expected_type, expected_confidence",
    [
        (Rectangle(0, 0, 100, 40), ElementType.BUTTON, 0.8),
        (Rectangle(0, 0, 60, 40), ElementType.BUTTON, 0.8),  # aspect exactly 1.5
        (Rectangle(0, 0, 400, 30), ElementType.TEXT, 0.7),
        (Rectangle(0, 0, 320, 40), ElementType.TEXT, 0.7),  # too wide for a button
        (Rectangle(0, 0, 320, 50), ElementType.INPUT, 0.6),
        (Rectangle(0, 0, 200, 100), ElementType.CARD, 0.7),
        (Rectangle(0, 0, 60, 60), ElementType.IMAGE, 0.6),
        (Rectangle(0, 0, 20, 80), ElementType.CONTAINER, 0.4),
        (Rectangle(0, 0, 100, 300), ElementType.CONTAINER, 0.4),  # too tall for a card
    ],
)
def test_decision_table(rect, expected_type, expected_confidence):
    element = classify(rect)
    assert element is not None
    assert element.type == expected_type
    assert element.confidence == expected_confidence
    assert element.bounds == rect


def test_small_rectangle_is_discarded():
    # Area 651, aspect just under 1.5
    assert classify(Rectangle(0, 0, 31, 21)) is None


def test_degenerate_rectangle_is_discarded():
    assert classify(Rectangle(0, 0, 0, 40)) is None


def test_first_matching_rule_wins():
    # 100×40 is also a valid input and container; button is listed first
    rect = Rectangle(0, 0, 100, 40)
    matching = [rule.type for rule in CLASSIFICATION_RULES if rule.matches(rect, AnalysisConfig())]
    assert matching[0] == ElementType.BUTTON
    assert ElementType.INPUT in matching
    assert classify(rect).type == ElementType.BUTTON


def test_rule_confidences_in_range():
    for rule in CLASSIFICATION_RULES:
        assert 0.0 <= rule.confidence <= 1.0


def test_thresholds_are_configurable():
    config = AnalysisConfig(button_width=(60, 90))
    element = classify(Rectangle(0, 0, 100, 40), config=config)
    assert element.type == ElementType.INPUT


def test_background_is_carried():
    element = classify(Rectangle(0, 0, 100, 40), background="#0000ff")
    assert element.background == "#0000ff"
    assert element.content == ""


def test_classify_region_uses_dominant_color():
    element = classify_region(BUTTON_SCREEN, Rectangle(160, 140, 78, 38))
    assert element.type == ElementType.BUTTON
    assert element.confidence == 0.8
    assert element.background == "#0000ff"


def test_classify_region_white_background():
    element = classify_region(BUTTON_SCREEN, Rectangle(0, 0, 100, 40))
    assert element.background == "#ffffff"


def test_classification_is_pure():
    rect = Rectangle(10, 20, 200, 100)
    assert classify(rect, "#abcdef") == classify(rect, "#abcdef")
