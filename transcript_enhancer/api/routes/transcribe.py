"""Transcribe endpoint: audio upload -> speaker-labelled markdown transcript."""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, File, HTTPException, UploadFile

from transcript_enhancer.api.models import TranscribeResponse
from transcript_enhancer.config import settings
from transcript_enhancer.ingestion.utterances import utterances_to_markdown

router = APIRouter()

# 500 MB upload limit
MAX_UPLOAD_BYTES = 500 * 1024 * 1024


def _transcribe_audio(raw: bytes) -> list[Any]:
    """Transcribe audio bytes via AssemblyAI SDK and return its utterances.

    Raises:
        HTTPException(400): Bad audio content (transcript error from AssemblyAI).
        HTTPException(503): Infrastructure error (bad API key, network, provider outage).
    """
    import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

    aai.settings.api_key = settings.assemblyai_api_key
    transcriber = aai.Transcriber()
    # speaker_labels=True enables diarization; without it there are no utterances.
    # Disfluencies stay off: the enhancement pass expects already-punctuated text.
    config = aai.TranscriptionConfig(
        speaker_labels=True,
        disfluencies=False,
        filter_profanity=False,
        format_text=True,
        punctuate=True,
    )

    try:
        transcript = transcriber.transcribe(raw, config=config)
        if transcript.status == aai.TranscriptStatus.error:
            raise HTTPException(
                status_code=400,
                detail=f"Transcription failed: {transcript.error}",
            )
        return list(transcript.utterances or [])
    except HTTPException:
        raise
    except Exception as exc:
        # Infrastructure error, not the client's fault.
        raise HTTPException(
            status_code=503,
            detail=f"Transcription service unavailable: {exc}",
        ) from exc


@router.post("/api/transcribe", response_model=TranscribeResponse)
async def transcribe(file: Annotated[UploadFile, File(...)]) -> TranscribeResponse:
    """Transcribe an uploaded recording into a speaker-annotated transcript.

    The transcript uses one ``SPEAKER 0:00:00`` header per speaker change,
    which is the format ``/api/enhance`` parses.
    """
    if not settings.assemblyai_api_key:
        raise HTTPException(
            status_code=501,
            detail="Audio transcription is not configured: ASSEMBLYAI_API_KEY is not set.",
        )

    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="No audio file provided")
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB.",
        )

    # Run synchronous AssemblyAI SDK in a thread; it polls until completion.
    utterances = await asyncio.to_thread(_transcribe_audio, raw)

    return TranscribeResponse(
        transcript=utterances_to_markdown(utterances),
        num_utterances=len(utterances),
    )
