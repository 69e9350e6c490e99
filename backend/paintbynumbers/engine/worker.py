"""Request handling: one request in, exactly one success or error message out."""

from __future__ import annotations

import logging
import time
import traceback

from paintbynumbers.config import Settings, settings as default_settings
from paintbynumbers.engine.config import PipelineConfig
from paintbynumbers.engine.context import PipelineContext
from paintbynumbers.engine.errors import StageError
from paintbynumbers.engine.pipeline import Pipeline, create_pipeline
from paintbynumbers.models.requests import GenerateRequest, RasterPayload
from paintbynumbers.models.responses import GenerateError, GenerateResponse, GenerateSuccess
from paintbynumbers.utils.raster import decode_rgba, encode_rgba

logger = logging.getLogger(__name__)


def build_config(request: GenerateRequest, settings: Settings | None = None) -> PipelineConfig:
    """Per-run config: request options on top of the service settings."""
    settings = settings or default_settings
    opts = request.options
    return PipelineConfig(
        color_threshold=opts.color_threshold,
        min_region_size=opts.min_region_size,
        thinness_threshold=opts.thinness_threshold,
        sample_size=settings.pbn_sample_size,
        oversample_factor=settings.pbn_oversample_factor,
        max_candidates=settings.pbn_max_candidates,
        max_iterations=settings.pbn_max_iterations,
        seed=opts.seed if opts.seed is not None else settings.pbn_random_seed,
        smooth=opts.smooth,
        outline_by_color=opts.outline_by_color,
        label_font_size=settings.pbn_label_font_size,
    )


def prepare(request: GenerateRequest, settings: Settings | None = None) -> tuple[Pipeline, PipelineContext]:
    """Decode the raster and set up a pipeline + context for this request."""
    raster = decode_rgba(request.raster.data, request.raster.width, request.raster.height)
    pipeline = create_pipeline(build_config(request, settings))
    return pipeline, pipeline.context(raster, request.palette_size)


def to_payload(raster) -> RasterPayload:
    height, width = raster.shape[:2]
    return RasterPayload(width=width, height=height, data=encode_rgba(raster))


def success_response(ctx: PipelineContext, elapsed_ms: float) -> GenerateSuccess:
    return GenerateSuccess(
        palette=list(ctx.palette),
        outline_raster=to_payload(ctx.outline_raster),
        colored_raster=to_payload(ctx.colored_raster),
        region_count=len(ctx.regions) if ctx.regions is not None else 0,
        processing_time_ms=round(elapsed_ms, 1),
    )


def error_response(exc: BaseException) -> GenerateError:
    cause = exc.cause if isinstance(exc, StageError) else exc
    return GenerateError(
        message=str(cause) or type(cause).__name__,
        diagnostic="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def process_request(request: GenerateRequest, settings: Settings | None = None) -> GenerateResponse:
    """Run the full pipeline for one request. Never raises."""
    start = time.perf_counter()
    try:
        pipeline, ctx = prepare(request, settings)
        pipeline.run(ctx)
        return success_response(ctx, (time.perf_counter() - start) * 1000)
    except Exception as e:
        logger.warning("Generation failed: %s", e)
        return error_response(e)
