from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file. Only the
    API routes and the CLI read these; the pipeline receives what it needs as
    arguments.
    """

    # API Keys
    anthropic_api_key: str = ""
    gemini_api_key: str = ""  # Optional — audio-informed enhancement; 503 if absent
    assemblyai_api_key: str = ""  # Optional — /api/transcribe returns 501 if absent

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Enhancement
    llm_model: str = "claude-opus-4-20250514"
    gemini_model: str = "gemini-2.5-pro-preview-05-06"
    enhance_max_output_tokens: int = 4000
    max_tokens_per_chunk: int = 2000
    claude_delay_seconds: float = 1.0
    gemini_delay_seconds: float = 2.0
    inline_audio_limit_mb: int = 20

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
