"""Math helpers — median, population std, half-up rounding. No engine imports."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def round_half_up(value: float) -> int:
    """Round .5 away from zero toward +inf (2.5 → 3, -2.5 → -2), unlike round()."""
    return int(math.floor(value + 0.5))


def median(values: Sequence[float]) -> float:
    """Median; mean of the two middle values for even lengths."""
    if len(values) == 0:
        raise ValueError("median of empty sequence")
    return float(np.median(np.asarray(values, dtype=np.float64)))


def population_std(values: Sequence[float]) -> float:
    """Standard deviation over the whole population (ddof=0)."""
    if len(values) == 0:
        return float("nan")
    return float(np.std(np.asarray(values, dtype=np.float64)))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))
