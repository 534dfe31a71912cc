"""Shared typed data models for pdfnarrator.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioSegment,
    Chunk,
    ChunkFailure,
    ChunkFailureKind,
    ExtractedText,
    RunSummary,
    SynthesisOptions,
)

__all__ = [
    "AudioSegment",
    "Chunk",
    "ChunkFailure",
    "ChunkFailureKind",
    "ExtractedText",
    "RunSummary",
    "SynthesisOptions",
]
