"""Enhance endpoint: stream chunk-by-chunk progress as server-sent events."""

from __future__ import annotations

import json
import logging
import queue
import threading
from collections.abc import Iterator
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from transcript_enhancer.api.models import EnhanceRequest
from transcript_enhancer.config import settings
from transcript_enhancer.enhancement.enhancers import Enhancer, build_enhancer, delay_for
from transcript_enhancer.enhancement.orchestrator import ProgressEvent, run_enhancement
from transcript_enhancer.enhancement.pipeline import prepare_chunks
from transcript_enhancer.errors import ConfigurationError, ParseFailure
from transcript_enhancer.ingestion.models import Chunk

logger = logging.getLogger(__name__)

router = APIRouter()

_DONE = object()


def _sse(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _event_stream(
    chunks: list[Chunk],
    total_segments: int,
    enhancer: Enhancer,
    delay_seconds: float,
) -> Iterator[str]:
    """Run the orchestrator in a worker thread and relay its events.

    Each request gets its own queue and cancellation event. Closing the
    stream (client disconnect) stops further enhancer calls.
    """
    events: queue.Queue[Any] = queue.Queue()
    cancel = threading.Event()

    def on_progress(event: ProgressEvent) -> None:
        events.put(
            {
                "type": "progress",
                "completed": event.completed,
                "total": event.total,
                "message": event.message,
            }
        )

    def worker() -> None:
        try:
            result = run_enhancement(
                chunks,
                enhancer,
                delay_seconds=delay_seconds,
                observer=on_progress,
                cancel_event=cancel,
            )
            events.put(
                {
                    "type": "complete",
                    "enhanced_transcript": result.text,
                    "chunks_processed": result.chunks_processed,
                    "total_segments": total_segments,
                    "failed_chunks": result.failed_chunks,
                }
            )
        except ConfigurationError as exc:
            events.put({"type": "error", "error": str(exc)})
        except Exception as exc:
            logger.exception("Enhancement run failed")
            events.put({"type": "error", "error": f"Internal server error: {exc}"})
        finally:
            events.put(_DONE)

    thread = threading.Thread(target=worker, name="enhancement-run", daemon=True)
    thread.start()

    try:
        yield _sse(
            {
                "type": "progress",
                "completed": 0,
                "total": len(chunks),
                "message": "Starting enhancement...",
            }
        )
        while True:
            item = events.get()
            if item is _DONE:
                break
            yield _sse(item)
    finally:
        cancel.set()


@router.post("/api/enhance")
async def enhance(request: EnhanceRequest) -> StreamingResponse:
    """Enhance a full transcript, streaming progress as server-sent events.

    Emits ``progress`` events (``completed``/``total``) before each chunk and
    a final ``complete`` event with the joined transcript. Chunks whose
    enhancement fails keep their original text and are listed in
    ``failed_chunks``.
    """
    if not request.transcript.strip():
        raise HTTPException(status_code=400, detail="No transcript provided")

    max_tokens = request.max_tokens_per_chunk or settings.max_tokens_per_chunk
    try:
        segments, chunks = prepare_chunks(request.transcript, max_tokens)
    except ParseFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        enhancer = build_enhancer(request.provider, settings, request.mode)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return StreamingResponse(
        _event_stream(chunks, len(segments), enhancer, delay_for(request.provider, settings)),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
