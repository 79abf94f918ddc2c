"""Tests for color and math helpers."""

import math

import numpy as np
import pytest

from app.utils.color import (
    contrast_ratio,
    luminance,
    pack_rgb,
    packed_to_hex,
    parse_hex,
    to_hex,
)
from app.utils.math_helpers import clamp, median, population_std, round_half_up


def test_hex_round_trip():
    for rgb in [(0, 0, 0), (255, 255, 255), (10, 20, 30), (0, 123, 255)]:
        assert parse_hex(to_hex(rgb)) == rgb


def test_parse_short_hex():
    assert parse_hex("#fff") == (255, 255, 255)
    assert parse_hex("0A0") == (0, 170, 0)


def test_parse_bad_hex():
    with pytest.raises(ValueError):
        parse_hex("#12345")


def test_packing():
    packed = pack_rgb(np.array([[0, 123, 255]], dtype=np.uint8))
    assert int(packed[0]) == 0x007BFF
    assert packed_to_hex(int(packed[0])) == "#007bff"


def test_luminance():
    assert luminance("#ffffff") == pytest.approx(1.0)
    assert luminance((0, 0, 0)) == 0.0
    assert luminance("#0000ff") == pytest.approx(0.114)


def test_contrast_ratio():
    assert contrast_ratio("#ffffff", "#000000") == pytest.approx(21.0)
    assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)
    assert contrast_ratio((0, 0, 255), (0, 0, 255)) == 1.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(2.49) == 2


def test_median_and_std():
    assert median([3, 1, 2]) == 2.0
    assert median([1, 2, 3, 4]) == 2.5
    assert population_std([2, 4, 4, 4, 5, 5, 7, 9]) == 2.0
    assert math.isnan(population_std([]))
    with pytest.raises(ValueError):
        median([])


def test_clamp():
    assert clamp(0, 8, 32) == 8
    assert clamp(50, 8, 32) == 32
    assert clamp(20, 8, 32) == 20
