"""Enhance a speaker-annotated transcript file from the command line."""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from transcript_enhancer.config import settings
from transcript_enhancer.enhancement.enhancers import AudioInput, build_enhancer, delay_for
from transcript_enhancer.enhancement.orchestrator import ProgressEvent
from transcript_enhancer.enhancement.pipeline import produce_enhanced_document
from transcript_enhancer.errors import ConfigurationError, ParseFailure
from transcript_enhancer.pipeline_config import EnhancementMode, EnhancerProvider, PipelineConfig

logger = logging.getLogger("enhance_transcript")

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
}


def _print_progress(event: ProgressEvent) -> None:
    print(f"[{event.completed}/{event.total}] {event.message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("transcript", type=Path, help="Speaker-annotated transcript (.md/.txt)")
    parser.add_argument("-o", "--output", type=Path, help="Write the result here instead of stdout")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in EnhancementMode],
        default=EnhancementMode.CLEAN.value,
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in EnhancerProvider],
        default=EnhancerProvider.CLAUDE.value,
    )
    parser.add_argument("--max-tokens", type=int, default=settings.max_tokens_per_chunk)
    parser.add_argument("--delay", type=float, default=None, help="Seconds between chunk calls")
    parser.add_argument("--audio", type=Path, help="Original recording (Gemini provider only)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    provider = EnhancerProvider(args.provider)
    audio = None
    if args.audio is not None:
        if provider is not EnhancerProvider.GEMINI:
            parser.error("--audio requires --provider gemini")
        audio = AudioInput(
            data=args.audio.read_bytes(),
            mime_type=AUDIO_MIME_TYPES.get(args.audio.suffix.lower(), "audio/mpeg"),
        )

    delay = args.delay
    if delay is None:
        delay = delay_for(provider, settings)
    config = PipelineConfig(
        mode=EnhancementMode(args.mode),
        provider=provider,
        max_tokens_per_chunk=args.max_tokens,
        delay_seconds=delay,
    )

    raw_text = args.transcript.read_text(encoding="utf-8")

    try:
        enhancer = build_enhancer(config.provider, settings, config.mode, audio=audio)
        result = produce_enhanced_document(
            raw_text,
            config.max_tokens_per_chunk,
            enhancer,
            _print_progress,
            delay_seconds=config.delay_seconds,
        )
    except ParseFailure as exc:
        logger.error("%s: %s", args.transcript, exc)
        return 2
    except ConfigurationError as exc:
        logger.error("Enhancer not usable: %s", exc)
        return 3

    if args.output:
        args.output.write_text(result.text + "\n", encoding="utf-8")
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        print(result.text)

    print(
        f"Processed {result.chunks_processed}/{result.total_chunks} chunks "
        f"({result.total_segments} segments, {len(result.failed_chunks)} fell back)",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
