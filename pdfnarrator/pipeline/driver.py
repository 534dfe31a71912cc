"""Serial synthesis loop over the selected chunk range.

Responsibilities:
- Synthesize chunks strictly in order, one provider call at a time.
- Apply the skip, reject, transient, and fatal per-chunk policies.
- Pause between provider calls and stream each segment to the output sink.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ..config import RunConfiguration
from ..errors import SynthesisError
from ..models.datatypes import (
    AudioSegment,
    Chunk,
    ChunkFailure,
    ChunkFailureKind,
    RunSummary,
)
from ..telemetry.logger import RunLogger
from ..tts.pacing import ChunkPacer
from ..tts.synthesizer import SpeechSynthesizer

SegmentSink = Callable[[AudioSegment], None]
ChunkProgressCallback = Callable[[Chunk, int], None]

_FATAL_HINTS = {
    "insufficient_quota": (
        "Replenish provider credits, switch to `--provider test`, or lower `--max-chunks`; "
        "then resume with `--start-chunk {index}`."
    ),
    "invalid_api_key": (
        "Check the API key (`--api-key`, `OPENAI_API_KEY`, or "
        "`pdfnarrator credentials --set-api-key`), then resume with `--start-chunk {index}`."
    ),
    "invalid_model": "Choose a supported model with `--model`, then resume with `--start-chunk {index}`.",
}


class SynthesisDriver:
    """Drive the synthesizer over the configured chunk sub-range."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        pacer: ChunkPacer | None = None,
        run_logger: RunLogger | None = None,
        chunk_progress_callback: ChunkProgressCallback | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.pacer = pacer or ChunkPacer()
        self._run_logger = run_logger
        self._chunk_progress_callback = chunk_progress_callback

    def run(
        self,
        chunks: Sequence[Chunk],
        config: RunConfiguration,
        sink: SegmentSink,
        summary: RunSummary | None = None,
    ) -> RunSummary:
        """Synthesize the selected chunks and return the updated run summary.

        Only a fatal provider error stops the loop early; every other failure is
        counted and processing continues with the next chunk.
        """

        summary = summary or RunSummary(total_chunks=len(chunks))
        selected = [chunks[position] for position in config.selected_range(len(chunks))]
        summary.selected_chunks = len(selected)
        options = config.synthesis_options()

        for position, chunk in enumerate(selected):
            if self._chunk_progress_callback is not None:
                self._chunk_progress_callback(chunk, len(chunks))

            text = chunk.text.strip()
            if not text:
                summary.record_skip()
                self._log("log_chunk_skipped", chunk.index)
                continue

            if len(text) > config.provider_char_limit:
                self._fail(
                    summary,
                    ChunkFailure(
                        chunk_index=chunk.index,
                        kind=ChunkFailureKind.REJECTED,
                        message=(
                            f"Chunk has {len(text)} characters, above the provider limit "
                            f"of {config.provider_char_limit}."
                        ),
                        hint="Lower `--max-chunk-size` below the provider limit.",
                    ),
                )
                continue

            if self._run_logger is not None:
                self._run_logger.log_chunk_start(chunk.index, len(chunks), len(text))

            try:
                segment = self._synthesize(chunk.index, text, options)
                sink(segment)
            except SynthesisError as exc:
                if exc.is_fatal:
                    self._fail(summary, self._fatal_failure(chunk.index, exc))
                    summary.aborted = True
                    if self._run_logger is not None:
                        self._run_logger.log_run_aborted(
                            chunk.index, summary.succeeded, summary.failed
                        )
                    break
                self._fail(summary, self._transient_failure(chunk.index, str(exc)))
            except ValueError as exc:
                self._fail(summary, self._transient_failure(chunk.index, f"Unusable audio: {exc}"))
            else:
                summary.record_success()
                self._log("log_chunk_success", chunk.index, segment.size_bytes)

            if position < len(selected) - 1:
                self.pacer.pause()

        return summary

    def _synthesize(self, chunk_index: int, text: str, options) -> AudioSegment:
        data = self.synthesizer.synthesize(text, options)
        if not data:
            raise SynthesisError("Provider returned no audio for this chunk.")
        return AudioSegment(chunk_index=chunk_index, data=data, audio_format=options.audio_format)

    def _fail(self, summary: RunSummary, failure: ChunkFailure) -> None:
        summary.record_failure(failure)
        self._log("log_chunk_failure", failure.chunk_index, failure.kind.value)

    def _log(self, method_name: str, *args: object) -> None:
        if self._run_logger is not None:
            getattr(self._run_logger, method_name)(*args)

    @staticmethod
    def _transient_failure(chunk_index: int, message: str) -> ChunkFailure:
        return ChunkFailure(
            chunk_index=chunk_index,
            kind=ChunkFailureKind.TRANSIENT,
            message=message,
            hint=f"Retry this chunk with `--start-chunk {chunk_index} --max-chunks 1`.",
        )

    @staticmethod
    def _fatal_failure(chunk_index: int, exc: SynthesisError) -> ChunkFailure:
        template = _FATAL_HINTS.get(
            exc.provider_kind or "",
            "Fix the provider configuration, then resume with `--start-chunk {index}`.",
        )
        return ChunkFailure(
            chunk_index=chunk_index,
            kind=ChunkFailureKind.FATAL,
            message=str(exc),
            hint=template.format(index=chunk_index),
        )
