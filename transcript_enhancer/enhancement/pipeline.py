"""End-to-end enhancement pipeline: parse -> chunk -> enhance -> join."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from transcript_enhancer.enhancement.enhancers import Enhancer
from transcript_enhancer.enhancement.orchestrator import (
    EnhancementResult,
    ProgressObserver,
    run_enhancement,
)
from transcript_enhancer.errors import ParseFailure
from transcript_enhancer.ingestion.chunking import DEFAULT_MAX_TOKENS, create_chunks, verify_partition
from transcript_enhancer.ingestion.models import Chunk, Segment
from transcript_enhancer.ingestion.parsers import parse_transcript

logger = logging.getLogger(__name__)


def prepare_chunks(
    raw_text: str,
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS,
) -> tuple[list[Segment], list[Chunk]]:
    """Parse and pack a transcript, checking the chunk partition.

    Raises:
        ParseFailure: If no speaker-attributed segments are recognized.
    """
    segments = parse_transcript(raw_text)
    if not segments:
        raise ParseFailure("Could not parse transcript segments")

    chunks = create_chunks(segments, max_tokens_per_chunk)
    verify_partition(segments, chunks)
    return segments, chunks


def produce_enhanced_document(
    raw_text: str,
    max_tokens_per_chunk: int,
    enhancer: Enhancer,
    observer: ProgressObserver | None = None,
    *,
    delay_seconds: float = 1.0,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> EnhancementResult:
    """Full pipeline: parse -> chunk -> enhance each chunk -> join.

    Args:
        raw_text: Speaker-annotated transcript text.
        max_tokens_per_chunk: Token budget per enhancement call.
        enhancer: Backend called once per chunk.
        observer: Optional progress callback.
        delay_seconds: Pause between enhancer calls.
        cancel_event: Optional cancellation signal checked before each chunk.
        sleep: Injected for tests.

    Returns:
        The enhanced document and run statistics.

    Raises:
        ParseFailure: If the transcript has no recognizable segments.
        ConfigurationError: If the enhancer cannot be used.
    """
    segments, chunks = prepare_chunks(raw_text, max_tokens_per_chunk)
    logger.info("Enhancing %d segments in %d chunks", len(segments), len(chunks))

    result = run_enhancement(
        chunks,
        enhancer,
        delay_seconds=delay_seconds,
        observer=observer,
        cancel_event=cancel_event,
        sleep=sleep,
    )
    if result.degraded:
        logger.warning(
            "%d of %d chunks fell back to unenhanced text: %s",
            len(result.failed_chunks),
            result.total_chunks,
            result.failed_chunks,
        )
    return result
