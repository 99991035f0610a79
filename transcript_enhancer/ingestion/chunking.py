"""Token-bounded packing of transcript segments and chunk rendering."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from transcript_enhancer.errors import PartitionViolation
from transcript_enhancer.ingestion.models import Chunk, Segment

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2000


def _close_chunk(segments: list[Segment], total_tokens: int) -> Chunk:
    return Chunk(
        segments=tuple(segments),
        total_tokens=total_tokens,
        start_time=segments[0].timestamp,
        end_time=segments[-1].timestamp,
    )


def create_chunks(
    segments: Sequence[Segment],
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> list[Chunk]:
    """Greedily group consecutive segments into token-bounded chunks.

    A segment that would push a non-empty chunk over *max_tokens* starts a new
    chunk. A single segment larger than *max_tokens* is never split; it becomes
    a chunk on its own. Segments are never reordered or dropped.

    Args:
        segments: Parsed transcript segments, in order.
        max_tokens: Token budget per chunk (estimated tokens).

    Returns:
        List of :class:`Chunk` instances in input order.

    Raises:
        ValueError: If *max_tokens* is not a positive integer.
    """
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
        msg = f"max_tokens must be a positive integer, got {max_tokens!r}"
        raise ValueError(msg)

    chunks: list[Chunk] = []
    current: list[Segment] = []
    current_tokens = 0

    for segment in segments:
        if current and current_tokens + segment.token_count > max_tokens:
            chunks.append(_close_chunk(current, current_tokens))
            current = [segment]
            current_tokens = segment.token_count
        else:
            current.append(segment)
            current_tokens += segment.token_count

    if current:
        chunks.append(_close_chunk(current, current_tokens))

    logger.info(
        "Packed %d segments into %d chunks (max_tokens=%d)",
        len(segments),
        len(chunks),
        max_tokens,
    )
    return chunks


def verify_partition(segments: Sequence[Segment], chunks: Sequence[Chunk]) -> None:
    """Check that *chunks* reproduce *segments* exactly, in order.

    Raises:
        PartitionViolation: If any segment was dropped, duplicated, or moved.
    """
    flattened = [segment for chunk in chunks for segment in chunk.segments]
    if flattened != list(segments):
        msg = (
            f"Chunks hold {len(flattened)} segments in a different order or "
            f"content than the {len(segments)} input segments"
        )
        raise PartitionViolation(msg)


def format_chunk(chunk: Chunk) -> str:
    """Render a chunk in the speaker-header form the enhancer expects."""
    formatted = "".join(
        f"{segment.speaker} {segment.timestamp}\n\n{segment.text}\n\n"
        for segment in chunk.segments
    )
    return formatted.rstrip()
