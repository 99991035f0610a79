"""Render diarized utterances as a speaker-annotated markdown transcript."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

NO_TRANSCRIPT = "No transcript available."


def format_timestamp(milliseconds: int | float) -> str:
    """Convert milliseconds to ``H:MM:SS`` (hours unpadded)."""
    seconds = int(milliseconds // 1000)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def _field(utterance: Any, name: str) -> Any:
    if isinstance(utterance, dict):
        return utterance.get(name)
    return getattr(utterance, name, None)


def utterances_to_markdown(utterances: Iterable[Any] | None) -> str:
    """Build the markdown transcript consumed by the chunking pipeline.

    A ``SPEAKER 0:00:00`` header is written whenever the speaker changes;
    consecutive utterances by the same speaker become separate paragraphs
    under one header. Accepts AssemblyAI SDK utterance objects or dicts with
    ``speaker``, ``text`` and ``start`` (milliseconds).
    """
    parts: list[str] = []
    current_speaker: str | None = None

    for utterance in utterances or []:
        speaker = str(_field(utterance, "speaker") or "")
        if speaker != current_speaker:
            current_speaker = speaker
            label = speaker.replace("speaker_", "Speaker ").upper()
            timestamp = format_timestamp(_field(utterance, "start") or 0)
            parts.append(f"\n{label} {timestamp}\n\n")
        parts.append(f"{_field(utterance, 'text') or ''}\n\n")

    if not parts:
        return NO_TRANSCRIPT
    return "".join(parts).strip()
