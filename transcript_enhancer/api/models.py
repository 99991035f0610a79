"""Pydantic request/response schemas for the Transcript Enhancer API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from transcript_enhancer.pipeline_config import EnhancementMode, EnhancerProvider


class EnhanceRequest(BaseModel):
    """Request body for the /api/enhance endpoint."""

    transcript: str
    mode: EnhancementMode = EnhancementMode.CLEAN
    provider: EnhancerProvider = EnhancerProvider.CLAUDE
    max_tokens_per_chunk: int | None = Field(default=None, gt=0)


class EnhanceChunkRequest(BaseModel):
    """Request body for the /api/enhance-chunk endpoint."""

    chunk: str
    mode: EnhancementMode = EnhancementMode.CLEAN
    provider: EnhancerProvider = EnhancerProvider.CLAUDE


class EnhanceChunkResponse(BaseModel):
    """Response body for the /api/enhance-chunk endpoint."""

    enhanced_chunk: str


class EnhancedTranscriptResponse(BaseModel):
    """Final result of a full enhancement run."""

    enhanced_transcript: str
    chunks_processed: int
    total_segments: int
    failed_chunks: list[int] = []


class TranscribeResponse(BaseModel):
    """Response body for the /api/transcribe endpoint."""

    transcript: str
    num_utterances: int = 0
