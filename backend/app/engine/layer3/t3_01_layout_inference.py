"""T3.01 — Layout Inference.

Grid first (rows × columns with consistent spacing), then flex row/column
from pairwise edge alignment, else absolute. Gaps are edge-to-edge
distances between neighbors in x or y order; only positive gaps count.
Every input, including degenerate ones, maps to a defined layout.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from app.engine.config import AnalysisConfig
from app.engine.context import (
    Alignment,
    AnalysisContext,
    DetectedElement,
    FlexDirection,
    LayoutAnalysis,
    LayoutType,
)
from app.engine.registry import TAG_REGIONS, Layer, transform
from app.utils.math_helpers import clamp, median, population_std, round_half_up

logger = logging.getLogger(__name__)

HORIZONTAL = "horizontal"
VERTICAL = "vertical"


@dataclass(frozen=True)
class LayoutMetrics:
    horizontal_gap: int
    vertical_gap: int
    average_gap: int
    padding: int
    alignment: Alignment


def _sorted_by_x(elements: Sequence[DetectedElement]) -> list[DetectedElement]:
    return sorted(elements, key=lambda e: e.bounds.x)


def _sorted_by_y(elements: Sequence[DetectedElement]) -> list[DetectedElement]:
    return sorted(elements, key=lambda e: e.bounds.y)


def horizontal_gaps(elements: Sequence[DetectedElement]) -> list[int]:
    ordered = _sorted_by_x(elements)
    gaps = [cur.bounds.x - prev.bounds.right for prev, cur in zip(ordered, ordered[1:])]
    return [g for g in gaps if g > 0]


def vertical_gaps(elements: Sequence[DetectedElement]) -> list[int]:
    ordered = _sorted_by_y(elements)
    gaps = [cur.bounds.y - prev.bounds.bottom for prev, cur in zip(ordered, ordered[1:])]
    return [g for g in gaps if g > 0]


def content_alignment(
    elements: Sequence[DetectedElement], width: int, height: int, config: AnalysisConfig
) -> Alignment:
    """Where the content mass sits relative to the canvas center."""
    center_x = width / 2
    center_y = height / 2
    avg_x = sum(e.bounds.center[0] for e in elements) / len(elements)
    avg_y = sum(e.bounds.center[1] for e in elements) / len(elements)

    x_offset = abs(avg_x - center_x) / center_x if center_x else 0.0
    y_offset = abs(avg_y - center_y) / center_y if center_y else 0.0

    if x_offset < config.center_offset_ratio and y_offset < config.center_offset_ratio:
        return Alignment.CENTER
    if avg_x < center_x * config.start_bias_ratio:
        return Alignment.START
    if avg_x > center_x * config.end_bias_ratio:
        return Alignment.END
    return Alignment.START


def layout_metrics(
    elements: Sequence[DetectedElement], width: int, height: int, config: AnalysisConfig
) -> LayoutMetrics:
    h_gaps = horizontal_gaps(elements)
    v_gaps = vertical_gaps(elements)
    h_median = median(h_gaps) if h_gaps else float(config.default_gap)
    v_median = median(v_gaps) if v_gaps else float(config.default_gap)

    min_x = min(e.bounds.x for e in elements)
    min_y = min(e.bounds.y for e in elements)
    padding = clamp(min(min_x, min_y), config.padding_min, config.padding_max)

    return LayoutMetrics(
        horizontal_gap=round_half_up(h_median),
        vertical_gap=round_half_up(v_median),
        average_gap=round_half_up((h_median + v_median) / 2),
        padding=round_half_up(padding),
        alignment=content_alignment(elements, width, height, config),
    )


def _group(values: list[int], tolerance: int) -> list[list[int]]:
    """Greedy 1-D grouping; each value joins the first group whose first member is within tolerance."""
    groups: list[list[int]] = []
    for v in sorted(values):
        for group in groups:
            if abs(v - group[0]) <= tolerance:
                group.append(v)
                break
        else:
            groups.append([v])
    return groups


def group_rows(elements: Sequence[DetectedElement], tolerance: int = 20) -> list[list[int]]:
    return _group([e.bounds.y for e in elements], tolerance)


def group_columns(elements: Sequence[DetectedElement], tolerance: int = 20) -> list[list[int]]:
    return _group([e.bounds.x for e in elements], tolerance)


def has_consistent_spacing(elements: Sequence[DetectedElement], config: AnalysisConfig) -> bool:
    for gaps in (horizontal_gaps(elements), vertical_gaps(elements)):
        if gaps and population_std(gaps) >= config.grid_gap_max_std:
            return False
    return True


def is_grid(elements: Sequence[DetectedElement], config: AnalysisConfig) -> bool:
    if len(elements) < config.grid_min_elements:
        return False
    rows = group_rows(elements, config.grid_group_tolerance)
    cols = group_columns(elements, config.grid_group_tolerance)
    return len(rows) >= 2 and len(cols) >= 2 and has_consistent_spacing(elements, config)


def pair_alignment_score(positions: Sequence[int], tolerance: int) -> float:
    """Fraction of all pairs whose positions differ by at most ``tolerance``."""
    n = len(positions)
    if n < 2:
        return 0.0
    aligned = sum(
        1
        for i in range(n)
        for j in range(i + 1, n)
        if abs(positions[i] - positions[j]) <= tolerance
    )
    return aligned / (n * (n - 1) / 2)


def resolve_alignment(
    ordered: Sequence[DetectedElement], axis: str, extent: int, config: AnalysisConfig
) -> Alignment:
    """Main-axis alignment of elements already sorted along ``axis``."""
    if len(ordered) < 2:
        return Alignment.START

    if axis == HORIZONTAL:
        positions = [e.bounds.x for e in ordered]
    else:
        positions = [e.bounds.y for e in ordered]

    steps = [b - a for a, b in zip(positions, positions[1:])]
    if population_std(steps) < config.spacing_max_std:
        avg = sum(steps) / len(steps)
        return Alignment.SPACE_BETWEEN if avg > config.space_between_min_gap else Alignment.SPACE_AROUND

    first, last = positions[0], positions[-1]
    band = config.edge_band_ratio
    lo, hi = config.center_band
    if first < extent * band:
        return Alignment.START
    if last > extent * (1 - band):
        return Alignment.END
    if first > extent * lo and last < extent * hi:
        return Alignment.CENTER
    return Alignment.START


def analyze_layout(
    elements: Sequence[DetectedElement],
    width: int,
    height: int,
    config: AnalysisConfig | None = None,
) -> LayoutAnalysis:
    """Infer the layout topology of ``elements`` on a ``width`` × ``height`` canvas."""
    config = config or AnalysisConfig()
    if len(elements) < 2:
        return LayoutAnalysis(type=LayoutType.ABSOLUTE)

    metrics = layout_metrics(elements, width, height, config)

    if is_grid(elements, config):
        return LayoutAnalysis(
            type=LayoutType.GRID,
            alignment=metrics.alignment,
            gap=metrics.average_gap,
            padding=metrics.padding,
        )

    tol = config.flex_pair_tolerance
    row_score = pair_alignment_score([e.bounds.y for e in elements], tol)
    column_score = pair_alignment_score([e.bounds.x for e in elements], tol)

    if row_score > config.flex_score_cutoff:
        return LayoutAnalysis(
            type=LayoutType.FLEX,
            direction=FlexDirection.ROW,
            alignment=resolve_alignment(_sorted_by_x(elements), HORIZONTAL, width, config),
            gap=metrics.horizontal_gap,
            padding=metrics.padding,
        )
    if column_score > config.flex_score_cutoff:
        return LayoutAnalysis(
            type=LayoutType.FLEX,
            direction=FlexDirection.COLUMN,
            alignment=resolve_alignment(_sorted_by_y(elements), VERTICAL, height, config),
            gap=metrics.vertical_gap,
            padding=metrics.padding,
        )

    return LayoutAnalysis(type=LayoutType.ABSOLUTE, padding=metrics.padding)


@transform(
    id="T3.01",
    layer=Layer.LAYOUT,
    dependencies=["T2.01"],
    tags={TAG_REGIONS},
    description="Infer flex/grid/absolute layout from element positions",
)
def layout_inference(ctx: AnalysisContext) -> None:
    ctx.layout = analyze_layout(ctx.elements, ctx.width, ctx.height, ctx.config)
    logger.debug(
        "Layout: %s direction=%s alignment=%s gap=%s padding=%s",
        ctx.layout.type.value,
        ctx.layout.direction.value if ctx.layout.direction else None,
        ctx.layout.alignment.value if ctx.layout.alignment else None,
        ctx.layout.gap,
        ctx.layout.padding,
    )
