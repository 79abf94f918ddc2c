"""Stage registry for the screenshot analysis pipeline.

Each stage is a plain function over ``AnalysisContext``, declared with
``@transform``:

    @transform(id="T1.01", layer=Layer.REGIONS, tags={TAG_REGIONS})
    def region_detection(ctx: AnalysisContext) -> None:
        ctx.rectangles = find_regions(ctx.buffer, ctx.config)

Stages live one per module under ``app/engine/layer<N>/``;
``load_transforms()`` imports them all. Tags group stages for the
pipeline's gate (e.g. everything that needs a full seed window).
"""

from __future__ import annotations

import enum
import heapq
import importlib
import logging
import pkgutil
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from app.engine.context import AnalysisContext

logger = logging.getLogger(__name__)

LAYER_PACKAGES = ("layer0", "layer1", "layer2", "layer3")

# Informational Sobel pass, not consumed downstream
TAG_EDGES = "edges"
# Region → classification → layout chain; needs at least one seed window
TAG_REGIONS = "regions"


class Layer(enum.IntEnum):
    PIXELS = 0
    REGIONS = 1
    CLASSIFICATION = 2
    LAYOUT = 3


@dataclass
class TransformSpec:
    id: str
    layer: Layer
    fn: Callable[["AnalysisContext"], None]
    dependencies: list[str] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)
    description: str = ""


class TransformRegistry:
    """Stages keyed by id, ordered by (layer, id)."""

    def __init__(self) -> None:
        self._specs: dict[str, TransformSpec] = {}

    def register(self, spec: TransformSpec) -> None:
        if spec.id in self._specs:
            raise ValueError(f"Duplicate transform ID: {spec.id}")
        self._specs[spec.id] = spec
        logger.debug("Registered %s in %s", spec.id, spec.layer.name)

    def get(self, transform_id: str) -> TransformSpec:
        return self._specs[transform_id]

    def all(self) -> list[TransformSpec]:
        return sorted(self._specs.values(), key=lambda s: (s.layer, s.id))

    def get_layer(self, layer: Layer) -> list[TransformSpec]:
        return [s for s in self.all() if s.layer == layer]

    def tagged(self, tag: str) -> set[str]:
        """Ids of every stage carrying ``tag``."""
        return {s.id for s in self._specs.values() if tag in s.tags}

    def _closure(self, ids: set[str]) -> dict[str, TransformSpec]:
        """``ids`` plus everything they depend on, transitively."""
        seen: set[str] = set()
        pending = list(ids)
        while pending:
            tid = pending.pop()
            if tid in seen or tid not in self._specs:
                continue
            seen.add(tid)
            pending.extend(self._specs[tid].dependencies)
        return {tid: self._specs[tid] for tid in seen}

    def resolve_order(self, requested_ids: set[str] | None = None) -> list[TransformSpec]:
        """Dependency order of ``requested_ids`` (all stages when None); ties go to the lower id."""
        pool = dict(self._specs) if requested_ids is None else self._closure(requested_ids)

        waiting = {tid: sum(1 for d in spec.dependencies if d in pool) for tid, spec in pool.items()}
        dependents: dict[str, list[str]] = defaultdict(list)
        for tid, spec in pool.items():
            for dep in spec.dependencies:
                if dep in pool:
                    dependents[dep].append(tid)

        ready = [tid for tid, n in waiting.items() if n == 0]
        heapq.heapify(ready)
        ordered: list[TransformSpec] = []
        while ready:
            tid = heapq.heappop(ready)
            ordered.append(pool[tid])
            for nxt in dependents[tid]:
                waiting[nxt] -= 1
                if waiting[nxt] == 0:
                    heapq.heappush(ready, nxt)

        if len(ordered) < len(pool):
            stuck = sorted(set(pool) - {s.id for s in ordered})
            raise ValueError(f"Circular dependency detected among: {stuck}")
        return ordered

    @property
    def count(self) -> int:
        return len(self._specs)


_registry = TransformRegistry()


def get_registry() -> TransformRegistry:
    return _registry


def transform(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    tags: set[str] | None = None,
    description: str = "",
):
    """Register the decorated function as a pipeline stage."""

    def decorator(fn: Callable[["AnalysisContext"], None]):
        _registry.register(
            TransformSpec(
                id=id,
                layer=layer,
                fn=fn,
                dependencies=list(dependencies or []),
                tags=set(tags or ()),
                description=description,
            )
        )
        return fn

    return decorator


def load_transforms() -> TransformRegistry:
    """Import every stage module so its ``@transform`` runs. Idempotent."""
    for layer_name in LAYER_PACKAGES:
        package = importlib.import_module(f"app.engine.{layer_name}")
        for info in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package.__name__}.{info.name}")
    return _registry
