"""Parser for speaker-annotated markdown transcripts.

The expected input is what the transcription step produces::

    SPEAKER A 0:00:00

    Hello everyone, welcome to the meeting.

    SPEAKER B 0:00:07

    Thanks for having us.
"""

from __future__ import annotations

import logging
import math
import re

from transcript_enhancer.ingestion.models import Segment

logger = logging.getLogger(__name__)

# Uppercase label (letters and spaces, ending in a letter), then H+:MM:SS.
# Mixed-case or numeric labels are deliberately not accepted.
SPEAKER_HEADER_RE = re.compile(r"^([A-Z\s]*[A-Z])\s+(\d+:\d{2}:\d{2})$")

_LINE_SPLIT_RE = re.compile(r"\r?\n|\r")


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def _make_segment(speaker: str, timestamp: str, text: str) -> Segment:
    body = text.strip()
    return Segment(
        speaker=speaker,
        timestamp=timestamp,
        text=body,
        token_count=estimate_tokens(body),
    )


def parse_transcript(content: str) -> list[Segment]:
    """Parse a speaker-annotated transcript into ordered segments.

    A line matching :data:`SPEAKER_HEADER_RE` opens a new segment; every other
    non-blank line is appended to the open segment. Lines seen before the
    first header cannot be attributed and are dropped. A header with no body
    (followed directly by another header or by end of input) yields nothing.

    Args:
        content: Raw transcript text, any line-ending convention.

    Returns:
        Segments in input order. An empty list means the text was not in the
        expected format; callers should treat it as a parse failure.
    """
    lines = [line for line in _LINE_SPLIT_RE.split(content) if line.strip()]
    logger.debug("Parsing transcript with %d non-blank lines", len(lines))

    segments: list[Segment] = []
    speaker: str | None = None
    timestamp = ""
    text = ""

    for line in lines:
        clean_line = line.strip()
        match = SPEAKER_HEADER_RE.match(clean_line)
        if match:
            if speaker is not None and text.strip():
                segments.append(_make_segment(speaker, timestamp, text))
            speaker = match.group(1)
            timestamp = match.group(2)
            text = ""
        elif speaker is not None:
            text += clean_line + "\n"

    if speaker is not None and text.strip():
        segments.append(_make_segment(speaker, timestamp, text))

    logger.debug("Parsed %d segments", len(segments))
    return segments
