"""Pipeline orchestration for pdfnarrator.

Responsibilities:
- Define the stage order of one conversion run:
  extract -> normalize -> chunk -> synthesize -> finalize.
- Own the single output writer and produce the `RunSummary`.
- Map collaborator failures to stage-aware `PipelineStageError`s.

Key types:
- `NarrationPipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
from time import sleep

from ..audio.writer import AudioOutputWriter
from ..config import RunConfiguration
from ..errors import ExtractionError, NoOutputProducedError, PipelineStageError
from ..io.pdf_text_extractor import PdfTextExtractor, TextExtractor, read_source
from ..models.datatypes import Chunk, ExtractedText, RunSummary
from ..provider_factory import ProviderFactory
from ..telemetry.logger import RunLogger
from ..text.chunking import Chunker
from ..text.normalizer import TextNormalizer
from ..tts.pacing import ChunkPacer
from ..tts.synthesizer import SpeechSynthesizer
from .driver import ChunkProgressCallback, SynthesisDriver
from .telemetry import PipelineTelemetryMixin


class NarrationPipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single PDF-to-audio run."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        chunk_progress_callback: ChunkProgressCallback | None = None,
        extractor: TextExtractor | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        normalizer: TextNormalizer | None = None,
        chunker: Chunker | None = None,
        sleeper: Callable[[float], None] = sleep,
    ) -> None:
        """Initialize runtime hooks and optional collaborator overrides.

        When `synthesizer` is `None`, one is created per run from the configured
        provider through `ProviderFactory`.
        """

        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._chunk_progress_callback = chunk_progress_callback
        self._extractor = extractor or PdfTextExtractor()
        self._synthesizer = synthesizer
        self._normalizer = normalizer or TextNormalizer()
        self._chunker = chunker or Chunker()
        self._sleeper = sleeper

    def plan_chunks(self, config: RunConfiguration) -> list[Chunk]:
        """Extract, normalize, and chunk the input without synthesizing anything."""

        self._validate_config(config)
        extracted = self._extract(config)
        normalized = self._normalize(extracted)
        return self._chunk(normalized, config)

    def run(self, config: RunConfiguration) -> RunSummary:
        """Run the full pipeline and return the run summary.

        Raises:
            PipelineStageError: On configuration, extraction, or empty-output failure.
                No output file exists after such a failure.
        """

        self._validate_config(config)
        synthesizer = self._resolve_synthesizer(config)

        extracted = self._run_stage(
            "extract",
            lambda: self._extract(config),
            lambda result: {"pages": result.page_count, "chars": result.char_count},
        )
        normalized = self._run_stage(
            "normalize",
            lambda: self._normalize(extracted),
            lambda result: {"chars": len(result)},
        )
        chunks = self._run_stage(
            "chunk",
            lambda: self._chunk(normalized, config),
            lambda result: {"total": len(result)},
        )

        summary = RunSummary(total_chunks=len(chunks))
        driver = SynthesisDriver(
            synthesizer,
            pacer=ChunkPacer(delay_ms=config.delay_ms, sleeper=self._sleeper),
            run_logger=self._run_logger,
            chunk_progress_callback=self._chunk_progress_callback,
        )
        with AudioOutputWriter(config.resolved_output_path(), config.audio_format) as writer:
            self._run_stage(
                "synthesize",
                lambda: driver.run(chunks, config, writer.append, summary),
                lambda result: {
                    "aborted": result.aborted,
                    "failed": result.failed,
                    "succeeded": result.succeeded,
                },
            )
            self._run_stage(
                "finalize",
                lambda: self._finalize(writer, summary),
                lambda result: {"bytes": result.output_bytes, "status": result.status},
            )
        return summary

    def _validate_config(self, config: RunConfiguration) -> None:
        """Validate configuration and map failures to stage-aware error."""

        try:
            config.validate()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Update the conversion options and rerun the command.",
            ) from exc

    def _resolve_synthesizer(self, config: RunConfiguration) -> SpeechSynthesizer:
        if self._synthesizer is not None:
            return self._synthesizer
        try:
            return ProviderFactory.create_synthesizer(
                config.provider,
                config.audio_format,
                api_key=config.api_key,
            )
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Use `--format wav` with `--provider test`, or choose another provider.",
            ) from exc

    def _extract(self, config: RunConfiguration) -> ExtractedText:
        """Read the source PDF and extract raw text; zero-length text is a failure."""

        data = read_source(config.input_pdf)
        try:
            extracted = self._extractor.extract(data)
        except PipelineStageError:
            raise
        except Exception as exc:
            raise ExtractionError(
                detail=f"Failed to extract text from PDF `{config.input_pdf}`: {exc}",
            ) from exc
        if extracted.char_count == 0:
            raise ExtractionError(
                detail=f"No text could be extracted from `{config.input_pdf}`.",
            )
        return extracted

    def _normalize(self, extracted: ExtractedText) -> str:
        normalized = self._normalizer.normalize(extracted.text)
        if not normalized:
            raise ExtractionError(
                stage="normalize",
                detail="Extracted text is empty after normalization.",
            )
        return normalized

    def _chunk(self, normalized: str, config: RunConfiguration) -> list[Chunk]:
        return self._chunker.to_chunks(normalized, config.max_chunk_size)

    def _finalize(self, writer: AudioOutputWriter, summary: RunSummary) -> RunSummary:
        """Commit the output when any chunk succeeded; otherwise fail without a file."""

        if summary.succeeded == 0:
            writer.discard()
            raise NoOutputProducedError(summary)
        output_path = writer.commit()
        summary.output_path = output_path
        summary.output_bytes = output_path.stat().st_size
        return summary
