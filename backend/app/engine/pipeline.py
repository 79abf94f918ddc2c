"""Pipeline orchestrator — runs transforms in dependency order with adaptive gating."""

from __future__ import annotations

import logging
import time
from collections.abc import Generator
from typing import TYPE_CHECKING, Any

from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext
from app.engine.registry import (
    TAG_EDGES,
    TAG_REGIONS,
    Layer,
    TransformRegistry,
    get_registry,
    load_transforms,
)
from app.errors import DecodeError

if TYPE_CHECKING:
    from app.models.analysis import AnalysisResult
    from app.raster.buffer import PixelBuffer

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates the transform pipeline."""

    def __init__(
        self,
        registry: TransformRegistry | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or AnalysisConfig()

    def new_context(self, buffer: PixelBuffer) -> AnalysisContext:
        return AnalysisContext(buffer=buffer, config=self.config)

    def _ordered(self, ctx: AnalysisContext) -> tuple[list, set[str]]:
        skip_ids = self._adaptive_gate(ctx)
        requested = {s.id for s in self.registry.all()} - skip_ids
        return self.registry.resolve_order(requested), skip_ids

    def run(self, ctx: AnalysisContext) -> AnalysisContext:
        """Run the full pipeline on the given context."""
        start = time.perf_counter()
        ordered, skip_ids = self._ordered(ctx)

        logger.info(
            "Pipeline: %d transforms queued (%d skipped) for %dx%d image",
            len(ordered),
            len(skip_ids),
            ctx.width,
            ctx.height,
        )

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
                ctx.completed_transforms.add(spec.id)
                elapsed = (time.perf_counter() - t0) * 1000
                logger.debug("  %s completed in %.1fms", spec.id, elapsed)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d/%d transforms in %.0fms (%d elements, layout=%s)",
            len(ctx.completed_transforms),
            len(ordered),
            total,
            len(ctx.elements),
            ctx.layout.type.value,
        )
        return ctx

    def run_streaming(self, ctx: AnalysisContext) -> Generator[dict[str, Any], None, None]:
        """Run the pipeline, yielding a progress dict before and after each transform.

        The caller's ``ctx`` is mutated in-place, so after the generator is
        exhausted the context contains all results (same as ``run()``).
        """
        ordered, _ = self._ordered(ctx)
        total = len(ordered)

        # Sub-progress events collected from long transforms via callback
        sub_events: list[dict[str, Any]] = []

        def _event(spec, index: int, status: str, elapsed_ms: float = 0.0, error: str = "") -> dict[str, Any]:
            return {
                "transform_id": spec.id,
                "description": spec.description,
                "layer": spec.layer.name,
                "index": index,
                "total": total,
                "elapsed_ms": elapsed_ms,
                "status": status,
                "error": error,
            }

        for i, spec in enumerate(ordered):
            yield _event(spec, i, "running")

            def _on_sub_progress(pct: float, _spec=spec, _i=i) -> None:
                evt = _event(_spec, _i, "running")
                evt["sub_progress"] = round(pct, 2)
                sub_events.append(evt)

            ctx.progress_callback = _on_sub_progress

            t0 = time.perf_counter()
            status = "ok"
            error = ""
            try:
                spec.fn(ctx)
                ctx.completed_transforms.add(spec.id)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                status = "error"
                error = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)

            ctx.progress_callback = None

            yield from sub_events
            sub_events.clear()

            elapsed_ms = round((time.perf_counter() - t0) * 1000, 1)
            yield _event(spec, i, status, elapsed_ms, error)

    def run_layer(self, ctx: AnalysisContext, layer: Layer) -> AnalysisContext:
        """Run only transforms in a specific layer."""
        for spec in self.registry.get_layer(layer):
            try:
                spec.fn(ctx)
                ctx.completed_transforms.add(spec.id)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED: %s", spec.id, e)
        return ctx

    def _adaptive_gate(self, ctx: AnalysisContext) -> set[str]:
        """Transforms to skip for this run.

        - Edge map is informational; skipped when disabled in the config.
        - Images smaller than one seed window cannot yield regions, so the
          region → classification → layout chain is skipped.
        """
        skip: set[str] = set()

        if not ctx.config.compute_edge_map:
            skip |= self.registry.tagged(TAG_EDGES)

        stride = ctx.config.region_seed_stride
        if ctx.width <= stride or ctx.height <= stride:
            skip |= self.registry.tagged(TAG_REGIONS)

        return skip


def create_pipeline(config: AnalysisConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline with every transform loaded."""
    return Pipeline(registry=load_transforms(), config=config)


def analyze_buffer(buffer: PixelBuffer | None, config: AnalysisConfig | None = None) -> AnalysisResult:
    """Entry point: PixelBuffer → AnalysisResult.

    Raises DecodeError when no buffer is supplied; malformed buffers are
    rejected with InvalidBufferError when the PixelBuffer is constructed.
    """
    if buffer is None:
        raise DecodeError("No image buffer supplied")

    from app.engine.result_formatter import context_to_result

    pipeline = create_pipeline(config)
    ctx = pipeline.run(pipeline.new_context(buffer))
    return context_to_result(ctx)
