"""Enhance-chunk endpoint: enhance a single, already formatted chunk."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException

from transcript_enhancer.api.models import EnhanceChunkRequest, EnhanceChunkResponse
from transcript_enhancer.config import settings
from transcript_enhancer.enhancement.enhancers import build_enhancer
from transcript_enhancer.errors import ConfigurationError, TransientFailure

router = APIRouter()


@router.post("/api/enhance-chunk", response_model=EnhanceChunkResponse)
async def enhance_chunk(request: EnhanceChunkRequest) -> EnhanceChunkResponse:
    """Enhance one chunk; the caller handles pacing and fallback."""
    if not request.chunk.strip():
        raise HTTPException(status_code=400, detail="No chunk provided")

    try:
        enhancer = build_enhancer(request.provider, settings, request.mode)
        enhanced = await asyncio.to_thread(enhancer.enhance, request.chunk)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except TransientFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return EnhanceChunkResponse(enhanced_chunk=enhanced)
