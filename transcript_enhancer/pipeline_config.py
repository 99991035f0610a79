"""Pipeline configuration: enhancement enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from transcript_enhancer.ingestion.chunking import DEFAULT_MAX_TOKENS


class EnhancementMode(str, Enum):
    """What the enhancer does to each chunk."""

    CLEAN = "clean"
    ESSAY = "essay"


class EnhancerProvider(str, Enum):
    """Backends available for the enhancement pass."""

    CLAUDE = "claude"
    GEMINI = "gemini"
    IDENTITY = "identity"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable per-run configuration for the enhancement pipeline.

    Defaults mirror the Claude route: clean-up mode, 2000-token chunks and a
    one second pause between calls.
    """

    mode: EnhancementMode = EnhancementMode.CLEAN
    provider: EnhancerProvider = EnhancerProvider.CLAUDE
    max_tokens_per_chunk: int = DEFAULT_MAX_TOKENS
    delay_seconds: float = 1.0
