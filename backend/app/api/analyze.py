"""POST /api/analyze — full pipeline analysis of a screenshot."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.config import Settings
from app.dependencies import get_settings
from app.engine.config import AnalysisConfig
from app.engine.context import AnalysisContext
from app.engine.pipeline import create_pipeline
from app.errors import ScreenSightError
from app.models.requests import AnalyzeRequest
from app.models.responses import AnalyzeResponse
from app.raster.buffer import PixelBuffer
from app.raster.decoder import decode_base64_image

router = APIRouter()

logger = logging.getLogger(__name__)


_SENTINEL = object()  # marks end of queue


class _Failure:
    """Queue item carrying an exception raised in the pipeline thread."""

    def __init__(self, exc: Exception) -> None:
        self.exc = exc


def _error_event(kind: str, message: str) -> str:
    data = json.dumps({"type": "error", "error": kind, "message": message})
    return f"event: error\ndata: {data}\n\n"


def _check_size(payload: str, limit: int) -> None:
    # base64 inflates by 4/3
    if len(payload) * 3 // 4 > limit:
        raise HTTPException(status_code=413, detail=f"Image exceeds {limit} bytes")


def _config_from(req: AnalyzeRequest) -> AnalysisConfig:
    return AnalysisConfig(compute_edge_map=req.options.compute_edge_map)


def _build_response(ctx: AnalysisContext, elapsed_ms: float) -> AnalyzeResponse:
    from app.engine.result_formatter import context_to_result

    return AnalyzeResponse(
        result=context_to_result(ctx),
        processing_time_ms=round(elapsed_ms, 1),
        transforms_completed=len(ctx.completed_transforms),
        transforms_failed=len(ctx.errors),
        errors=ctx.errors,
        edge_density=round(ctx.edge_map.density, 4) if ctx.edge_map is not None else None,
    )


def _dump(response: AnalyzeResponse) -> dict:
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


async def _stream_analyze(buffer: PixelBuffer, config: AnalysisConfig) -> AsyncGenerator[str, None]:
    """Drive pipeline.run_streaming() in a thread, yielding SSE events as they arrive."""
    start = time.perf_counter()

    pipeline = create_pipeline(config)
    ctx = pipeline.new_context(buffer)
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def _run_pipeline() -> None:
        """Sync pipeline in thread; pushes progress dicts onto the async queue."""
        try:
            for progress in pipeline.run_streaming(ctx):
                loop.call_soon_threadsafe(queue.put_nowait, progress)
        except Exception as e:
            logger.exception("Streaming analysis failed")
            loop.call_soon_threadsafe(queue.put_nowait, _Failure(e))
        finally:
            loop.call_soon_threadsafe(queue.put_nowait, _SENTINEL)

    # Start pipeline in a thread so the event loop stays free to flush SSE
    worker = loop.run_in_executor(None, _run_pipeline)

    failure: Exception | None = None
    while True:
        item = await queue.get()
        if item is _SENTINEL:
            break
        if isinstance(item, _Failure):
            failure = item.exc
            continue
        yield f"event: progress\ndata: {json.dumps(item)}\n\n"

    await worker
    if failure is not None:
        yield _error_event(getattr(failure, "kind", ScreenSightError.kind), str(failure))
        return

    elapsed = (time.perf_counter() - start) * 1000
    response = _build_response(ctx, elapsed)
    yield f"event: result\ndata: {json.dumps(_dump(response))}\n\n"

    yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"


async def _error_stream(exc: ScreenSightError) -> AsyncGenerator[str, None]:
    yield _error_event(exc.kind, str(exc))


@router.post("/analyze/stream")
async def analyze_stream(
    req: AnalyzeRequest, settings: Settings = Depends(get_settings)
) -> StreamingResponse:
    _check_size(req.image, settings.max_image_bytes)
    try:
        buffer = decode_base64_image(req.image)
        stream = _stream_analyze(buffer, _config_from(req))
    except ScreenSightError as e:
        stream = _error_stream(e)

    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
)
async def analyze(req: AnalyzeRequest, settings: Settings = Depends(get_settings)) -> AnalyzeResponse:
    _check_size(req.image, settings.max_image_bytes)
    start = time.perf_counter()

    # Decode errors propagate to the app-level ScreenSightError handler (422)
    buffer = decode_base64_image(req.image)

    pipeline = create_pipeline(_config_from(req))
    ctx = await asyncio.get_running_loop().run_in_executor(
        None, pipeline.run, pipeline.new_context(buffer)
    )

    elapsed = (time.perf_counter() - start) * 1000
    return _build_response(ctx, elapsed)
