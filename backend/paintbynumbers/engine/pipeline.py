"""Pipeline orchestrator — runs stages in dependency order, stops at the first failure."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time
from collections.abc import Generator
from typing import Any

import numpy as np
from numpy.typing import NDArray

from paintbynumbers.engine.config import PipelineConfig
from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.errors import StageError
from paintbynumbers.engine.registry import StageRegistry, StageSpec, get_registry

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates the stage pipeline."""

    def __init__(
        self,
        registry: StageRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()

    def context(self, raster: NDArray[np.uint8], palette_size: int) -> PipelineContext:
        return PipelineContext(raster=raster, palette_size=palette_size, config=self.config)

    def plan(self, ctx: PipelineContext) -> list[StageSpec]:
        """Stages to run for this context, in execution order."""
        skip_ids = self._gate(ctx)
        return [s for s in self.registry.resolve_order() if s.id not in skip_ids]

    def run(self, ctx: PipelineContext) -> PipelineContext:
        """Run every planned stage; raises StageError on the first failure."""
        start = time.perf_counter()
        ordered = self.plan(ctx)
        logger.info("Pipeline: %d stages queued", len(ordered))

        for spec in ordered:
            self._run_stage(spec, ctx)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d stages in %.0fms (%d regions, %d colours)",
            len(ctx.completed_stages),
            total,
            len(ctx.regions) if ctx.regions is not None else 0,
            len(ctx.palette),
        )
        return ctx

    def run_streaming(self, ctx: PipelineContext) -> Generator[dict[str, Any], None, None]:
        """Run the pipeline, yielding a progress dict before and after each stage.

        The caller's ``ctx`` is mutated in-place. A failing stage yields its
        ``error`` event and then raises StageError, so no later stage runs.
        """
        ordered = self.plan(ctx)
        total = len(ordered)

        for i, spec in enumerate(ordered):
            event = {
                "stage_id": spec.id,
                "description": spec.description,
                "phase": spec.phase.name,
                "index": i,
                "total": total,
                "elapsed_ms": 0.0,
                "status": "running",
                "error": "",
            }
            yield event

            try:
                self._run_stage(spec, ctx)
            except StageError as e:
                yield {**event, "status": "error", "error": str(e.cause)}
                raise

            yield {**event, "status": "ok", "elapsed_ms": ctx.timings_ms[spec.id]}

    def _run_stage(self, spec: StageSpec, ctx: PipelineContext) -> None:
        t0 = time.perf_counter()
        try:
            spec.fn(ctx)
        except Exception as e:
            logger.warning("  %s FAILED: %s", spec.id, e)
            raise StageError(spec.id, e) from e
        elapsed = round((time.perf_counter() - t0) * 1000, 1)
        ctx.completed_stages.append(spec.id)
        ctx.timings_ms[spec.id] = elapsed
        logger.debug("  %s completed in %.1fms", spec.id, elapsed)

    def _gate(self, ctx: PipelineContext) -> set[str]:
        """Stages to skip for this run: smoothing is opt-in."""
        skip: set[str] = set()
        if not ctx.config.smooth:
            skip.update(self.registry.with_tag("smoothing"))
        return skip


def register_stages() -> None:
    """Import all stage modules so @stage decorators fire."""
    package = importlib.import_module("paintbynumbers.engine.stages")
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        importlib.import_module(f"{package.__name__}.{module_name}")


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline instance over the registered stages."""
    register_stages()
    return Pipeline(config=config)
