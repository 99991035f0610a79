"""Audio-informed enhancement endpoint backed by Gemini."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from transcript_enhancer.api.models import EnhancedTranscriptResponse
from transcript_enhancer.config import settings
from transcript_enhancer.enhancement.enhancers import AudioInput, GeminiEnhancer
from transcript_enhancer.enhancement.orchestrator import run_enhancement
from transcript_enhancer.enhancement.pipeline import prepare_chunks
from transcript_enhancer.errors import ConfigurationError, ParseFailure
from transcript_enhancer.pipeline_config import EnhancementMode

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/enhance-gemini", response_model=EnhancedTranscriptResponse)
async def enhance_gemini(
    transcript: Annotated[str | None, Form()] = None,
    audio_file: Annotated[UploadFile | None, File()] = None,
    mode: Annotated[EnhancementMode, Form()] = EnhancementMode.CLEAN,
) -> EnhancedTranscriptResponse:
    """Enhance a transcript with Gemini, using the original audio for context.

    Returns 400 if either input is missing or the transcript cannot be
    parsed, and 503 if GEMINI_API_KEY is not configured.
    """
    if not transcript or audio_file is None:
        raise HTTPException(
            status_code=400,
            detail="Both transcript and audio file are required",
        )

    raw = await audio_file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    audio = AudioInput(data=raw, mime_type=audio_file.content_type or "audio/mpeg")
    logger.info(
        "Gemini enhancement: audio %s (%.2f MB, %s)",
        audio_file.filename,
        audio.size_mb,
        audio.mime_type,
    )

    try:
        segments, chunks = prepare_chunks(transcript, settings.max_tokens_per_chunk)
    except ParseFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        enhancer = GeminiEnhancer(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            mode=mode,
            audio=audio,
            inline_audio_limit_mb=settings.inline_audio_limit_mb,
        )
        result = await asyncio.to_thread(
            run_enhancement,
            chunks,
            enhancer,
            delay_seconds=settings.gemini_delay_seconds,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return EnhancedTranscriptResponse(
        enhanced_transcript=result.text,
        chunks_processed=result.chunks_processed,
        total_segments=len(segments),
        failed_chunks=result.failed_chunks,
    )
