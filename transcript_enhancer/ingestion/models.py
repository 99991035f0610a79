"""Data models for the chunking pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Segment:
    """One continuous utterance by a single speaker.

    ``timestamp`` is carried through verbatim; it is never parsed.
    """

    speaker: str
    timestamp: str
    text: str
    token_count: int


@dataclass(frozen=True)
class Chunk:
    """An ordered, contiguous run of segments sent to one enhancement call."""

    segments: tuple[Segment, ...]
    total_tokens: int
    start_time: str
    end_time: str
