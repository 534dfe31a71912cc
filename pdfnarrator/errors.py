"""Domain exceptions for pipeline, synthesis, and CLI diagnostics.

Responsibilities:
- Represent run-terminating failures as stage-scoped errors with remediation hints.
- Provide the closed synthesis error-kind enumeration used by provider adapters.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.datatypes import RunSummary


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class SourceNotFoundError(PipelineStageError):
    """Raised when the configured input PDF does not exist."""

    def __init__(self, path: object) -> None:
        super().__init__(
            stage="extract",
            detail=f"PDF file not found at: {path}",
            hint="Pass an existing `<input.pdf>` path or fix `input_pdf` in the config file.",
        )
        self.path = path


class ExtractionError(PipelineStageError):
    """Raised when no usable text can be produced from the source PDF."""

    def __init__(self, *, stage: str = "extract", detail: str, hint: str | None = None) -> None:
        super().__init__(
            stage=stage,
            detail=detail,
            hint=hint or "Only text-based PDFs are supported; scanned pages need OCR first.",
        )


class NoOutputProducedError(PipelineStageError):
    """Raised when a run finishes without a single synthesized chunk."""

    def __init__(self, summary: RunSummary, hint: str | None = None) -> None:
        super().__init__(
            stage="finalize",
            detail=(
                "No audio segments were produced "
                f"({summary.attempted} attempted, {summary.failed} failed); "
                "no output file was written."
            ),
            hint=hint or "Inspect the per-chunk failures above and rerun.",
        )
        self.summary = summary


class SynthesisErrorKind(str, Enum):
    """Closed classification of speech-synthesis failures."""

    TRANSIENT = "transient"
    FATAL = "fatal"


class SynthesisError(RuntimeError):
    """Raised by synthesizer adapters for any failed synthesis request.

    `FATAL` marks a permanently unrecoverable provider condition (exhausted quota,
    rejected credentials) that makes every following request fail as well.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: SynthesisErrorKind = SynthesisErrorKind.TRANSIENT,
        provider_kind: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider_kind = provider_kind

    @property
    def is_fatal(self) -> bool:
        """Return whether remaining chunk processing must be aborted."""

        return self.kind is SynthesisErrorKind.FATAL
