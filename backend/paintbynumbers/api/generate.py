"""POST /api/generate — palette, outline and coloured preview for one raster."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from paintbynumbers.config import Settings
from paintbynumbers.dependencies import get_settings
from paintbynumbers.engine.worker import error_response, prepare, process_request, success_response
from paintbynumbers.models.requests import GenerateRequest
from paintbynumbers.models.responses import GenerateError, GenerateSuccess

router = APIRouter()


_SENTINEL = object()  # marks end of queue


async def _stream_generate(req: GenerateRequest, settings: Settings) -> AsyncGenerator[str, None]:
    """Drive pipeline.run_streaming() in a thread, yielding SSE events as they arrive."""
    start = time.perf_counter()

    try:
        pipeline, ctx = prepare(req, settings)
    except Exception as e:
        data = error_response(e).model_dump_json()
        yield f"event: error\ndata: {data}\n\n"
        yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    failure: list[BaseException] = []

    def _run_pipeline() -> None:
        """Sync pipeline in thread — pushes progress dicts onto the async queue."""
        try:
            for progress in pipeline.run_streaming(ctx):
                loop.call_soon_threadsafe(queue.put_nowait, progress)
        except Exception as e:
            failure.append(e)
        finally:
            loop.call_soon_threadsafe(queue.put_nowait, _SENTINEL)

    # Run in a thread so the event loop stays free to flush SSE
    loop.run_in_executor(None, _run_pipeline)

    while True:
        item = await queue.get()
        if item is _SENTINEL:
            break
        yield f"event: progress\ndata: {json.dumps(item)}\n\n"

    if failure:
        yield f"event: error\ndata: {error_response(failure[0]).model_dump_json()}\n\n"
    else:
        elapsed = (time.perf_counter() - start) * 1000
        yield f"event: result\ndata: {success_response(ctx, elapsed).model_dump_json()}\n\n"

    yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"


@router.post("/generate/stream")
async def generate_stream(
    req: GenerateRequest,
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    return StreamingResponse(
        _stream_generate(req, settings),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/generate", response_model=GenerateSuccess | GenerateError)
async def generate(
    req: GenerateRequest,
    settings: Settings = Depends(get_settings),
) -> GenerateSuccess | GenerateError:
    # One run per request, off the event loop
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, process_request, req, settings)
