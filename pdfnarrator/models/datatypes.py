"""Core datatypes shared across pdfnarrator modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Provide explicit typing for per-chunk outcomes and run summaries.

Key types:
- `ExtractedText`, `Chunk`, `SynthesisOptions`, `AudioSegment`,
  `ChunkFailure`, and `RunSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ExtractedText:
    """Full raw text extracted from a source PDF.

    Attributes:
        text: Concatenated page text exactly as the extractor produced it.
        page_count: Number of pages read from the document.
        source_bytes: Size of the PDF payload the text was extracted from.
    """

    text: str
    page_count: int = 0
    source_bytes: int = 0

    @property
    def char_count(self) -> int:
        """Return the raw text length in characters."""

        return len(self.text)


@dataclass(frozen=True, slots=True)
class Chunk:
    """A bounded, trimmed segment of normalized document text.

    Attributes:
        index: 1-based sequence index.
        text: Trimmed chunk text.
        char_start: Inclusive offset of the raw (untrimmed) span in normalized text.
        char_end: Exclusive offset of the raw span; the next chunk search starts here.
        boundary: How the span end was chosen: `sentence`, `word`, `hard_cut`,
            or `document_end`.
    """

    index: int
    text: str
    char_start: int
    char_end: int
    boundary: str = "document_end"

    def preview(self, width: int = 80) -> str:
        """Return the first `width` characters of chunk text."""

        return self.text[:width]


@dataclass(frozen=True, slots=True)
class SynthesisOptions:
    """Provider-facing options for one synthesis request.

    Attributes:
        voice: Provider-native voice identifier.
        audio_format: Output encoding (`mp3` or `wav`).
        model: Provider model identifier.
        speaking_rate: Relative speaking rate multiplier.
    """

    voice: str
    audio_format: str = "mp3"
    model: str = "gpt-4o-mini-tts"
    speaking_rate: float = 1.0


@dataclass(frozen=True, slots=True)
class AudioSegment:
    """Raw audio bytes synthesized for one chunk."""

    chunk_index: int
    data: bytes
    audio_format: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class ChunkFailureKind(str, Enum):
    """Per-chunk failure classes recorded in the run summary."""

    REJECTED = "chunk_rejected"
    TRANSIENT = "synthesis_transient"
    FATAL = "synthesis_fatal"


@dataclass(frozen=True, slots=True)
class ChunkFailure:
    """One failed chunk with a human-readable diagnostic."""

    chunk_index: int
    kind: ChunkFailureKind
    message: str
    hint: str | None = None


@dataclass(slots=True)
class RunSummary:
    """Counters and outcome of one conversion run, filled in incrementally.

    Attributes:
        total_chunks: Number of chunks the document was split into.
        selected_chunks: Number of chunks in the configured processing range.
        attempted: Chunks handed to the rejection guard or the provider.
        succeeded: Chunks that produced audio bytes.
        failed: Rejected, transient, and fatal failures combined.
        skipped: Chunks that were empty after trimming.
        aborted: Whether a fatal provider error stopped the loop early.
        output_path: Written output file, or `None` when nothing was written.
        output_bytes: Size of the written output file.
        failures: Ordered per-chunk failure records.
    """

    total_chunks: int = 0
    selected_chunks: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    aborted: bool = False
    output_path: Path | None = None
    output_bytes: int = 0
    failures: list[ChunkFailure] = field(default_factory=list)

    def record_success(self) -> None:
        self.attempted += 1
        self.succeeded += 1

    def record_failure(self, failure: ChunkFailure) -> None:
        self.attempted += 1
        self.failed += 1
        self.failures.append(failure)

    def record_skip(self) -> None:
        self.skipped += 1

    @property
    def status(self) -> str:
        """Return `success`, `partial`, or `failed` for the completed run."""

        if self.succeeded == 0:
            return "failed"
        if self.failed > 0 or self.aborted:
            return "partial"
        return "success"

    @property
    def output_megabytes(self) -> float:
        return self.output_bytes / 1024 / 1024
