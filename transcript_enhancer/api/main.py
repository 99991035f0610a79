from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from transcript_enhancer.api.routes.enhance import router as enhance_router
from transcript_enhancer.api.routes.enhance_chunk import router as enhance_chunk_router
from transcript_enhancer.api.routes.enhance_gemini import router as enhance_gemini_router
from transcript_enhancer.api.routes.transcribe import router as transcribe_router

app = FastAPI(
    title="Transcript Enhancer API",
    description="Speaker-labelled transcription and LLM transcript enhancement",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_origin_regex=r"https://.*\.vercel\.app|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(transcribe_router)
app.include_router(enhance_router)
app.include_router(enhance_chunk_router)
app.include_router(enhance_gemini_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
