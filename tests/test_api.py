"""Tests for API endpoints (no external API keys required)."""

import json
import threading
from unittest.mock import MagicMock, patch

from fastapi import HTTPException as FastAPIHTTPException
from fastapi.testclient import TestClient

from transcript_enhancer.api.main import app
from transcript_enhancer.api.routes.enhance import _event_stream
from transcript_enhancer.enhancement.enhancers import ChunkContext, IdentityEnhancer
from transcript_enhancer.enhancement.pipeline import prepare_chunks
from transcript_enhancer.errors import TransientFailure

client = TestClient(app)

TRANSCRIPT = (
    "SPEAKER A 0:00:00\n\nUm, so, welcome to the show.\n\n"
    "SPEAKER B 0:00:04\n\nThanks, uh, for having me.\n\n"
    "SPEAKER A 0:00:09\n\nLet's, like, dive right in.\n"
)


def _events(body: str) -> list[dict]:
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def _mock_settings(mock_settings: MagicMock) -> None:
    mock_settings.anthropic_api_key = ""
    mock_settings.gemini_api_key = ""
    mock_settings.assemblyai_api_key = ""
    mock_settings.max_tokens_per_chunk = 2000
    mock_settings.claude_delay_seconds = 0.0
    mock_settings.gemini_delay_seconds = 0.0
    mock_settings.inline_audio_limit_mb = 20


class FailSecondCall:
    def __init__(self) -> None:
        self.calls = 0

    def enhance(self, text: str, context: ChunkContext | None = None) -> str:
        self.calls += 1
        if self.calls == 2:
            raise TransientFailure("HTTP 529")
        return text.upper()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# --- /api/enhance ---

def test_enhance_streams_progress_and_result():
    response = client.post(
        "/api/enhance",
        json={"transcript": "A 0:00:00\nhello there\nB 0:00:05\nhi\n", "provider": "identity"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = _events(response.text)
    assert events[0] == {
        "type": "progress",
        "completed": 0,
        "total": 1,
        "message": "Starting enhancement...",
    }
    final = events[-1]
    assert final["type"] == "complete"
    assert final["enhanced_transcript"] == "A 0:00:00\n\nhello there\n\nB 0:00:05\n\nhi"
    assert final["chunks_processed"] == 1
    assert final["total_segments"] == 2
    assert final["failed_chunks"] == []


def test_enhance_partial_failure_falls_back():
    with patch("transcript_enhancer.api.routes.enhance.build_enhancer", return_value=FailSecondCall()):
        response = client.post(
            "/api/enhance",
            json={"transcript": TRANSCRIPT, "provider": "identity", "max_tokens_per_chunk": 5},
        )
    assert response.status_code == 200
    final = _events(response.text)[-1]
    assert final["type"] == "complete"
    assert final["chunks_processed"] == 3
    assert final["failed_chunks"] == [1]
    assert final["enhanced_transcript"] == (
        "SPEAKER A 0:00:00\n\nUM, SO, WELCOME TO THE SHOW.\n\n"
        "SPEAKER B 0:00:04\n\nThanks, uh, for having me.\n\n"
        "SPEAKER A 0:00:09\n\nLET'S, LIKE, DIVE RIGHT IN."
    )


def test_enhance_progress_counts():
    response = client.post(
        "/api/enhance",
        json={"transcript": TRANSCRIPT, "provider": "identity", "max_tokens_per_chunk": 5},
    )
    progress = [(e["completed"], e["total"]) for e in _events(response.text) if e["type"] == "progress"]
    assert progress == [(0, 3), (0, 3), (1, 3), (2, 3), (3, 3)]


def test_enhance_unparseable_transcript_returns_400():
    response = client.post(
        "/api/enhance",
        json={"transcript": "Speaker a said hello.", "provider": "identity"},
    )
    assert response.status_code == 400
    assert "could not parse" in response.json()["detail"].lower()


def test_enhance_empty_transcript_returns_400():
    response = client.post("/api/enhance", json={"transcript": "  "})
    assert response.status_code == 400


def test_enhance_without_claude_key_returns_503():
    with patch("transcript_enhancer.api.routes.enhance.settings") as mock_settings:
        _mock_settings(mock_settings)
        response = client.post("/api/enhance", json={"transcript": TRANSCRIPT})
    assert response.status_code == 503
    assert "not configured" in response.json()["detail"].lower()


def test_enhance_stream_close_stops_further_calls():
    segments, chunks = prepare_chunks(TRANSCRIPT, 5)
    assert len(chunks) == 3
    started = threading.Event()
    release = threading.Event()
    calls = []

    class BlockingEnhancer:
        def enhance(self, text, context=None):
            calls.append(text)
            started.set()
            release.wait(5)
            return text

    stream = _event_stream(chunks, len(segments), BlockingEnhancer(), 0.0)
    first = next(stream)
    assert json.loads(first[len("data: "):])["message"] == "Starting enhancement..."
    assert started.wait(5)
    workers = [t for t in threading.enumerate() if t.name == "enhancement-run"]

    stream.close()
    release.set()
    for worker in workers:
        worker.join(5)

    assert not any(worker.is_alive() for worker in workers)
    assert len(calls) == 1


def test_enhance_validation():
    assert client.post("/api/enhance", json={}).status_code == 422
    assert client.post(
        "/api/enhance", json={"transcript": TRANSCRIPT, "mode": "poetry"}
    ).status_code == 422
    assert client.post(
        "/api/enhance", json={"transcript": TRANSCRIPT, "max_tokens_per_chunk": 0}
    ).status_code == 422


# --- /api/enhance-chunk ---

def test_enhance_chunk_identity():
    response = client.post(
        "/api/enhance-chunk",
        json={"chunk": "A 0:00:00\n\nhello", "provider": "identity"},
    )
    assert response.status_code == 200
    assert response.json() == {"enhanced_chunk": "A 0:00:00\n\nhello"}


def test_enhance_chunk_empty_returns_400():
    response = client.post("/api/enhance-chunk", json={"chunk": ""})
    assert response.status_code == 400


def test_enhance_chunk_without_key_returns_503():
    with patch("transcript_enhancer.api.routes.enhance_chunk.settings") as mock_settings:
        _mock_settings(mock_settings)
        response = client.post("/api/enhance-chunk", json={"chunk": "A 0:00:00\n\nhello"})
    assert response.status_code == 503


def test_enhance_chunk_transient_failure_returns_502():
    failing = MagicMock()
    failing.enhance.side_effect = TransientFailure("Claude API error: overloaded")
    with patch("transcript_enhancer.api.routes.enhance_chunk.build_enhancer", return_value=failing):
        response = client.post("/api/enhance-chunk", json={"chunk": "A 0:00:00\n\nhello"})
    assert response.status_code == 502
    assert "overloaded" in response.json()["detail"]


# --- /api/enhance-gemini ---

AUDIO = b"\xff\xfb\x90\x00" + b"\x00" * 100  # fake MP3 binary header


def test_enhance_gemini_requires_audio():
    response = client.post("/api/enhance-gemini", data={"transcript": TRANSCRIPT})
    assert response.status_code == 400
    assert "required" in response.json()["detail"]


def test_enhance_gemini_requires_transcript():
    response = client.post(
        "/api/enhance-gemini",
        files={"audio_file": ("talk.mp3", AUDIO, "audio/mpeg")},
    )
    assert response.status_code == 400


def test_enhance_gemini_unparseable_transcript_returns_400():
    response = client.post(
        "/api/enhance-gemini",
        data={"transcript": "no headers at all"},
        files={"audio_file": ("talk.mp3", AUDIO, "audio/mpeg")},
    )
    assert response.status_code == 400


def test_enhance_gemini_without_key_returns_503():
    with patch("transcript_enhancer.api.routes.enhance_gemini.settings") as mock_settings:
        _mock_settings(mock_settings)
        response = client.post(
            "/api/enhance-gemini",
            data={"transcript": TRANSCRIPT},
            files={"audio_file": ("talk.mp3", AUDIO, "audio/mpeg")},
        )
    assert response.status_code == 503
    assert "gemini" in response.json()["detail"].lower()


def test_enhance_gemini_success():
    with (
        patch("transcript_enhancer.api.routes.enhance_gemini.settings") as mock_settings,
        patch(
            "transcript_enhancer.api.routes.enhance_gemini.GeminiEnhancer",
            return_value=IdentityEnhancer(),
        ) as gemini_cls,
    ):
        _mock_settings(mock_settings)
        mock_settings.gemini_api_key = "g-key"
        response = client.post(
            "/api/enhance-gemini",
            data={"transcript": TRANSCRIPT, "mode": "essay"},
            files={"audio_file": ("talk.mp3", AUDIO, "audio/mpeg")},
        )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["chunks_processed"] == 1
    assert body["total_segments"] == 3
    assert body["failed_chunks"] == []
    assert body["enhanced_transcript"].startswith("SPEAKER A 0:00:00\n\nUm, so, welcome")
    audio = gemini_cls.call_args.kwargs["audio"]
    assert audio.data == AUDIO
    assert audio.mime_type == "audio/mpeg"
    assert gemini_cls.call_args.kwargs["mode"] == "essay"


# --- /api/transcribe ---

def test_transcribe_no_key_returns_501():
    with patch("transcript_enhancer.api.routes.transcribe.settings") as mock_settings:
        mock_settings.assemblyai_api_key = ""
        response = client.post(
            "/api/transcribe",
            files={"file": ("test.mp3", AUDIO, "audio/mpeg")},
        )
    assert response.status_code == 501, response.text
    assert "not configured" in response.json()["detail"].lower()


def test_transcribe_returns_markdown():
    utterances = [
        {"speaker": "A", "text": "Hello everyone.", "start": 0},
        {"speaker": "B", "text": "Hi.", "start": 4200},
    ]
    with (
        patch("transcript_enhancer.api.routes.transcribe.settings") as mock_settings,
        patch("transcript_enhancer.api.routes.transcribe._transcribe_audio", return_value=utterances),
    ):
        mock_settings.assemblyai_api_key = "test-key"
        response = client.post(
            "/api/transcribe",
            files={"file": ("test.mp3", AUDIO, "audio/mpeg")},
        )
    assert response.status_code == 200
    assert response.json() == {
        "transcript": "A 0:00:00\n\nHello everyone.\n\n\nB 0:00:04\n\nHi.",
        "num_utterances": 2,
    }


def test_transcribe_failure_returns_400_not_500():
    with (
        patch("transcript_enhancer.api.routes.transcribe.settings") as mock_settings,
        patch(
            "transcript_enhancer.api.routes.transcribe._transcribe_audio",
            side_effect=FastAPIHTTPException(status_code=400, detail="bad audio"),
        ),
    ):
        mock_settings.assemblyai_api_key = "test-key"
        response = client.post(
            "/api/transcribe",
            files={"file": ("test.mp3", AUDIO, "audio/mpeg")},
        )
    assert response.status_code == 400


def test_transcribe_requires_file():
    response = client.post("/api/transcribe")
    assert response.status_code == 422
