"""Enhancer backends: Claude, Gemini (optionally audio-informed), and identity.

Every backend translates its library's errors into the pipeline taxonomy:
:class:`ConfigurationError` when the backend cannot be used at all, and
:class:`TransientFailure` when a single call failed.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from anthropic import Anthropic, APIError, AuthenticationError, PermissionDeniedError
from anthropic.types import TextBlock
from google.api_core import exceptions as google_exceptions

from transcript_enhancer.enhancement.prompts import system_prompt
from transcript_enhancer.errors import ConfigurationError, TransientFailure
from transcript_enhancer.pipeline_config import EnhancementMode, EnhancerProvider

if TYPE_CHECKING:
    from transcript_enhancer.config import Settings

logger = logging.getLogger(__name__)

_REJECTED_KEY = (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated)


@dataclass(frozen=True)
class ChunkContext:
    """Position of the chunk being enhanced within its run (0-based index)."""

    index: int
    total: int


@dataclass(frozen=True)
class AudioInput:
    """Original recording handed to audio-capable enhancers."""

    data: bytes
    mime_type: str = "audio/mpeg"

    @property
    def size_mb(self) -> float:
        return len(self.data) / (1024 * 1024)


class Enhancer(Protocol):
    """Text in, text out. Raises ConfigurationError or TransientFailure."""

    def enhance(self, text: str, context: ChunkContext | None = None) -> str: ...


class IdentityEnhancer:
    """Returns every chunk unchanged. Used offline and in tests."""

    def enhance(self, text: str, context: ChunkContext | None = None) -> str:
        return text


class ClaudeEnhancer:
    """Enhance chunks with Claude via the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4000,
        mode: str | EnhancementMode = EnhancementMode.CLEAN,
        client: Anthropic | None = None,
    ) -> None:
        if not api_key and client is None:
            raise ConfigurationError("Claude API key not configured")
        self.model = model
        self.max_tokens = max_tokens
        self.mode = EnhancementMode(mode)
        self._client = client or Anthropic(api_key=api_key)

    def enhance(self, text: str, context: ChunkContext | None = None) -> str:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt(self.mode),
                messages=[{"role": "user", "content": text}],
            )
        except (AuthenticationError, PermissionDeniedError) as exc:
            raise ConfigurationError(f"Claude rejected the API key: {exc.message}") from exc
        except APIError as exc:
            raise TransientFailure(f"Claude API error: {exc.message}") from exc

        if not response.content:
            raise TransientFailure("Claude returned an empty response")

        # We request plain text, so the first block should be a TextBlock.
        block = response.content[0]
        if not isinstance(block, TextBlock):
            raise TransientFailure(f"Expected TextBlock from Claude, got {type(block).__name__}")
        return block.text


class GeminiEnhancer:
    """Enhance chunks with Gemini, optionally grounding on the original audio.

    Audio smaller than *inline_audio_limit_mb* is sent inline with every
    request; larger files are uploaded once through the Files API and
    referenced from each request.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        mode: str | EnhancementMode = EnhancementMode.CLEAN,
        audio: AudioInput | None = None,
        inline_audio_limit_mb: int = 20,
        genai: Any = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Gemini API key not configured")
        if genai is None:
            import google.generativeai as genai

        genai.configure(api_key=api_key)  # type: ignore[attr-defined]
        self._genai = genai
        self._model = genai.GenerativeModel(model)
        self.mode = EnhancementMode(mode)
        self.audio = audio
        self.inline_audio_limit_mb = inline_audio_limit_mb
        self._uploaded_audio: Any = None

    def _audio_part(self, audio: AudioInput) -> Any:
        if audio.size_mb < self.inline_audio_limit_mb:
            return {"mime_type": audio.mime_type, "data": audio.data}
        if self._uploaded_audio is None:
            logger.info("Uploading %.2f MB of audio to the Gemini Files API", audio.size_mb)
            try:
                self._uploaded_audio = self._genai.upload_file(
                    io.BytesIO(audio.data), mime_type=audio.mime_type
                )
            except _REJECTED_KEY as exc:
                raise ConfigurationError(f"Gemini rejected the API key: {exc}") from exc
            except Exception as exc:
                raise TransientFailure(f"Gemini audio upload failed: {exc}") from exc
        return self._uploaded_audio

    def build_prompt(self, text: str, context: ChunkContext | None = None) -> str:
        prompt = system_prompt(self.mode, with_audio=self.audio is not None)
        if context is not None:
            prompt += (
                f"\n\nThis is chunk {context.index + 1} of {context.total} from the full "
                "conversation. Focus on enhancing this specific portion"
            )
            prompt += " while using the full audio for context:" if self.audio else ":"
        return f"{prompt}\n\n{text}"

    def enhance(self, text: str, context: ChunkContext | None = None) -> str:
        contents: list[Any] = [self.build_prompt(text, context)]
        if self.audio is not None:
            contents.append(self._audio_part(self.audio))

        try:
            response = self._model.generate_content(contents)
            result = response.text
        except _REJECTED_KEY as exc:
            raise ConfigurationError(f"Gemini rejected the API key: {exc}") from exc
        except Exception as exc:
            raise TransientFailure(f"Gemini generation failed: {exc}") from exc

        if not result:
            raise TransientFailure("Gemini returned an empty response")
        return str(result)


def build_enhancer(
    provider: str | EnhancerProvider,
    settings: Settings,
    mode: str | EnhancementMode = EnhancementMode.CLEAN,
    audio: AudioInput | None = None,
) -> Enhancer:
    """Construct the enhancer for *provider* from explicitly passed settings.

    Raises:
        ConfigurationError: If the provider's API key is missing.
        ValueError: If *provider* is not recognized.
    """
    provider = EnhancerProvider(provider)

    if provider is EnhancerProvider.IDENTITY:
        return IdentityEnhancer()
    if provider is EnhancerProvider.GEMINI:
        return GeminiEnhancer(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            mode=mode,
            audio=audio,
            inline_audio_limit_mb=settings.inline_audio_limit_mb,
        )
    return ClaudeEnhancer(
        api_key=settings.anthropic_api_key,
        model=settings.llm_model,
        max_tokens=settings.enhance_max_output_tokens,
        mode=mode,
    )


def delay_for(provider: str | EnhancerProvider, settings: Settings) -> float:
    """Pause between consecutive enhancer calls for *provider*."""
    provider = EnhancerProvider(provider)
    if provider is EnhancerProvider.IDENTITY:
        return 0.0
    if provider is EnhancerProvider.GEMINI:
        return settings.gemini_delay_seconds
    return settings.claude_delay_seconds
