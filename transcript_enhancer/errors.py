"""Error taxonomy shared by the parser, packer, enhancers, and orchestrator."""

from __future__ import annotations


class EnhancementError(Exception):
    """Base class for every error raised by the enhancement pipeline."""


class ParseFailure(EnhancementError, ValueError):
    """Raw transcript text yielded no speaker-attributed segments."""


class ConfigurationError(EnhancementError):
    """The enhancer cannot be used at all (e.g. missing or rejected credential).

    Aborts the whole run; no partial document is produced.
    """


class TransientFailure(EnhancementError):
    """A single enhancement call failed (HTTP error, malformed response).

    The orchestrator recovers by keeping the unenhanced chunk text.
    """


class PartitionViolation(EnhancementError, AssertionError):
    """Packed chunks do not reconstruct the input segment sequence."""
