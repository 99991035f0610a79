"""Sequential enhancement of packed chunks with per-chunk fallback.

Chunks are enhanced one at a time, in order, with a fixed pause between
calls to stay under third-party rate limits. A chunk whose enhancement
fails transiently keeps its formatted, unenhanced text; a configuration
error aborts the whole run.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from transcript_enhancer.enhancement.enhancers import ChunkContext, Enhancer
from transcript_enhancer.errors import TransientFailure
from transcript_enhancer.ingestion.chunking import format_chunk
from transcript_enhancer.ingestion.models import Chunk

logger = logging.getLogger(__name__)

FRAGMENT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification: *completed* of *total* chunks are done."""

    completed: int
    total: int
    message: str = ""


ProgressObserver = Callable[[ProgressEvent], None]


@dataclass
class EnhancementResult:
    """Outcome of one enhancement run."""

    text: str
    chunks_processed: int
    total_chunks: int
    total_segments: int
    failed_chunks: list[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def degraded(self) -> bool:
        """True if any chunk fell back to its unenhanced text."""
        return bool(self.failed_chunks)


def run_enhancement(
    chunks: Sequence[Chunk],
    enhancer: Enhancer,
    *,
    delay_seconds: float = 1.0,
    observer: ProgressObserver | None = None,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> EnhancementResult:
    """Enhance every chunk in order and join the fragments.

    Args:
        chunks: Packed chunks, in transcript order.
        enhancer: Backend called once per chunk.
        delay_seconds: Pause between consecutive enhancer calls.
        observer: Optional callback receiving :class:`ProgressEvent`. Errors it
            raises are logged and ignored.
        cancel_event: Checked before each chunk; once set, no further
            enhancer calls are made and the fragments so far are returned.
        sleep: Injected for tests.

    Returns:
        An :class:`EnhancementResult` with the joined document.

    Raises:
        ConfigurationError: Propagated from the enhancer; no partial output.
    """
    total = len(chunks)
    fragments: list[str] = []
    failed: list[int] = []
    cancelled = False

    def notify(completed: int, message: str) -> None:
        if observer is None:
            return
        try:
            observer(ProgressEvent(completed=completed, total=total, message=message))
        except Exception:
            # Progress is a side channel.
            logger.exception("Progress observer failed at %d/%d", completed, total)

    for i, chunk in enumerate(chunks):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Enhancement cancelled after %d/%d chunks", i, total)
            cancelled = True
            break

        notify(i, f"Processing chunk {i + 1}/{total}...")
        formatted = format_chunk(chunk)

        try:
            enhanced = enhancer.enhance(formatted, ChunkContext(index=i, total=total))
            if not enhanced or not enhanced.strip():
                raise TransientFailure("Enhancer returned empty text")
            fragments.append(enhanced)
            logger.info("Chunk %d/%d enhanced (%d tokens)", i + 1, total, chunk.total_tokens)
        except TransientFailure as exc:
            logger.warning("Error enhancing chunk %d/%d, keeping original text: %s", i + 1, total, exc)
            fragments.append(formatted)
            failed.append(i)

        if i < total - 1 and delay_seconds > 0:
            sleep(delay_seconds)

    if not cancelled:
        notify(total, "Enhancement complete")

    return EnhancementResult(
        text=FRAGMENT_SEPARATOR.join(fragments),
        chunks_processed=len(fragments),
        total_chunks=total,
        total_segments=sum(len(c.segments) for c in chunks),
        failed_chunks=failed,
        cancelled=cancelled,
    )
