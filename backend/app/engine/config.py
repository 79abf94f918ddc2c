"""Analysis configuration — every heuristic threshold in one place."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AnalysisConfig:
    """Thresholds for the raster → layout heuristics.

    Defaults reproduce the reference behavior; override per call for tuning.
    """

    # Palette extraction
    palette_sample_stride: int = 100  # every Nth pixel
    palette_candidates: int = 10  # ranked colors kept for accent search
    palette_size: int = 5
    palette_min_alpha: int = 128  # samples with alpha below this are skipped
    text_luminance_cutoff: float = 0.5
    accent_min_contrast: float = 3.0
    default_accent: str = "#007bff"

    # Dominant color of a sub-region (classifier)
    dominant_sample_stride: int = 4
    opaque_alpha: int = 128  # strictly above = opaque

    # Edge map (Sobel)
    compute_edge_map: bool = True
    edge_threshold: float = 50.0

    # Region detection
    region_seed_stride: int = 20
    region_sample_step: int = 2
    region_max_variance: float = 2000.0
    border_sample_step: int = 5
    border_min_contrast: float = 1.5
    border_contrast_fraction: float = 0.3
    expand_step: int = 2
    expand_tolerance: float = 50.0
    min_region_width: int = 30  # strictly greater
    min_region_height: int = 20  # strictly greater
    visited_stride: int = 5

    # Classification
    button_aspect: tuple[float, float] = (1.5, 6.0)
    button_height: tuple[int, int] = (20, 80)
    button_width: tuple[int, int] = (60, 300)
    text_min_aspect: float = 4.0  # strictly greater
    text_max_height: int = 40
    input_aspect: tuple[float, float] = (2.0, 8.0)
    input_height: tuple[int, int] = (25, 60)
    input_min_width: int = 100
    card_min_area: int = 5000
    card_aspect: tuple[float, float] = (0.5, 3.0)
    image_min_area: int = 2000
    image_aspect: tuple[float, float] = (0.7, 1.5)
    container_min_area: int = 1000

    # Layout inference
    default_gap: int = 16
    padding_min: int = 8
    padding_max: int = 32
    grid_min_elements: int = 4
    grid_group_tolerance: int = 20  # px, row/column grouping
    grid_gap_max_std: float = 20.0
    flex_pair_tolerance: int = 10  # px
    flex_score_cutoff: float = 0.6
    center_offset_ratio: float = 0.2
    start_bias_ratio: float = 0.7
    end_bias_ratio: float = 1.3
    spacing_max_std: float = 10.0
    space_between_min_gap: float = 50.0
    edge_band_ratio: float = 0.1  # start/end edge band
    center_band: tuple[float, float] = (0.3, 0.7)
