"""End-to-end tests for the narration pipeline with stubbed collaborators."""

from __future__ import annotations

from collections.abc import Callable
import io
from pathlib import Path

import pytest

from pdfnarrator.config import RunConfiguration
from pdfnarrator.errors import (
    ExtractionError,
    NoOutputProducedError,
    PipelineStageError,
    SourceNotFoundError,
    SynthesisError,
    SynthesisErrorKind,
)
from pdfnarrator.models.datatypes import SynthesisOptions
from pdfnarrator.pipeline import NarrationPipeline
from pdfnarrator.telemetry import RunLogger
from tests.fixture_builders import wav_frame_count

_THREE_CHUNK_TEXT = "First sentence here. Second sentence here. Third sentence here."


class ScriptedSynthesizer:
    """Synthesizer stub returning tagged MP3-like bytes or raising per chunk."""

    provider_id = "scripted"
    supported_formats = frozenset({"mp3", "wav"})

    def __init__(self, failures: dict[int, SynthesisError] | None = None) -> None:
        self.failures = failures or {}
        self.calls: list[str] = []

    def synthesize(self, text: str, options: SynthesisOptions) -> bytes:
        self.calls.append(text)
        failure = self.failures.get(len(self.calls))
        if failure is not None:
            raise failure
        return f"[{text}]".encode("utf-8")


def _pipeline(
    synthesizer: ScriptedSynthesizer | None = None,
    log_sink: io.StringIO | None = None,
    stages: list[str] | None = None,
) -> NarrationPipeline:
    return NarrationPipeline(
        run_logger=RunLogger(sink=log_sink or io.StringIO()),
        stage_progress_callback=(
            (lambda name, index, total: stages.append(f"{index}/{total}:{name}"))
            if stages is not None
            else None
        ),
        synthesizer=synthesizer,
        sleeper=lambda _seconds: None,
    )


def test_transient_failure_on_middle_chunk_yields_partial_output(
    stub_pdf: Callable[..., Path],
) -> None:
    pdf_path = stub_pdf(_THREE_CHUNK_TEXT)
    synthesizer = ScriptedSynthesizer({2: SynthesisError("HTTP 500")})
    config = RunConfiguration(input_pdf=pdf_path, max_chunk_size=22)

    summary = _pipeline(synthesizer).run(config)

    assert synthesizer.calls == [
        "First sentence here.",
        "Second sentence here.",
        "Third sentence here.",
    ]
    assert (summary.succeeded, summary.failed) == (2, 1)
    assert summary.status == "partial"
    assert summary.output_path == pdf_path.with_name("book.mp3")
    assert summary.output_path.read_bytes() == b"[First sentence here.][Third sentence here.]"
    assert summary.output_bytes == len(summary.output_path.read_bytes())


def test_fatal_failure_on_first_chunk_writes_no_output(stub_pdf: Callable[..., Path]) -> None:
    pdf_path = stub_pdf(_THREE_CHUNK_TEXT)
    fatal = SynthesisError(
        "insufficient balance",
        kind=SynthesisErrorKind.FATAL,
        provider_kind="insufficient_quota",
    )
    synthesizer = ScriptedSynthesizer({1: fatal})
    config = RunConfiguration(input_pdf=pdf_path, max_chunk_size=22)

    with pytest.raises(NoOutputProducedError) as exc_info:
        _pipeline(synthesizer).run(config)

    summary = exc_info.value.summary
    assert exc_info.value.stage == "finalize"
    assert (summary.attempted, summary.succeeded, summary.failed) == (1, 0, 1)
    assert summary.aborted is True
    assert synthesizer.calls == ["First sentence here."]
    output_path = config.resolved_output_path()
    assert not output_path.exists()
    assert not output_path.with_name(output_path.name + ".part").exists()


def test_start_and_cap_select_exact_chunk_subrange(stub_pdf: Callable[..., Path]) -> None:
    pdf_path = stub_pdf("Aa. Bb. Cc. Dd. Ee.")
    synthesizer = ScriptedSynthesizer()
    config = RunConfiguration(
        input_pdf=pdf_path,
        max_chunk_size=4,
        start_chunk=2,
        max_chunks=2,
    )

    summary = _pipeline(synthesizer).run(config)

    assert synthesizer.calls == ["Bb.", "Cc."]
    assert summary.total_chunks == 5
    assert summary.status == "success"
    assert summary.output_path is not None
    assert summary.output_path.read_bytes() == b"[Bb.][Cc.]"


def test_run_emits_stage_progress_and_structured_logs(stub_pdf: Callable[..., Path]) -> None:
    pdf_path = stub_pdf("Hello world.")
    log_sink = io.StringIO()
    stages: list[str] = []

    _pipeline(ScriptedSynthesizer(), log_sink=log_sink, stages=stages).run(
        RunConfiguration(input_pdf=pdf_path)
    )

    assert stages == [
        "1/5:extract",
        "2/5:normalize",
        "3/5:chunk",
        "4/5:synthesize",
        "5/5:finalize",
    ]
    log_output = log_sink.getvalue()
    assert "[phase] level=INFO stage=chunk event=complete total=1" in log_output
    assert "stage=finalize event=complete bytes=14 status=success" in log_output
    assert "event=chunk_success" in log_output


def test_test_provider_writes_merged_silent_wav(stub_pdf: Callable[..., Path]) -> None:
    pdf_path = stub_pdf("One two. Three four.")
    config = RunConfiguration(
        input_pdf=pdf_path,
        max_chunk_size=12,
        provider="test",
        audio_format="wav",
    )

    summary = _pipeline().run(config)

    assert summary.output_path == pdf_path.with_name("book-test.wav")
    assert summary.succeeded == 2
    assert wav_frame_count(summary.output_path) > 0


def test_missing_source_fails_before_any_stage_output(tmp_path: Path) -> None:
    log_sink = io.StringIO()
    config = RunConfiguration(input_pdf=tmp_path / "missing.pdf")

    with pytest.raises(SourceNotFoundError, match="PDF file not found at"):
        _pipeline(ScriptedSynthesizer(), log_sink=log_sink).run(config)

    assert "stage=extract event=failure error_type=SourceNotFoundError" in log_sink.getvalue()
    assert not config.resolved_output_path().exists()


@pytest.mark.parametrize(
    ("raw_text", "stage"),
    [("", "extract"), ("\n-- 1 of 1 --\n\n", "normalize")],
)
def test_empty_text_fails_with_extraction_error(
    stub_pdf: Callable[..., Path], raw_text: str, stage: str
) -> None:
    pdf_path = stub_pdf(raw_text)
    synthesizer = ScriptedSynthesizer()

    with pytest.raises(ExtractionError) as exc_info:
        _pipeline(synthesizer).run(RunConfiguration(input_pdf=pdf_path))

    assert exc_info.value.stage == stage
    assert synthesizer.calls == []


def test_invalid_configuration_maps_to_config_stage_error(tmp_path: Path) -> None:
    config = RunConfiguration(input_pdf=tmp_path / "book.pdf", start_chunk=0)

    with pytest.raises(PipelineStageError, match="start_chunk") as exc_info:
        _pipeline(ScriptedSynthesizer()).run(config)

    assert exc_info.value.stage == "config"


def test_provider_format_mismatch_maps_to_config_stage_error(tmp_path: Path) -> None:
    config = RunConfiguration(input_pdf=tmp_path / "book.pdf", provider="test")

    with pytest.raises(PipelineStageError, match="cannot produce `mp3`") as exc_info:
        _pipeline().run(config)

    assert exc_info.value.stage == "config"
    assert "--format wav" in (exc_info.value.hint or "")


def test_plan_chunks_returns_chunks_without_synthesis(stub_pdf: Callable[..., Path]) -> None:
    pdf_path = stub_pdf("-- 1 of 2 --\nAlpha beta.\n\nGamma delta.")
    synthesizer = ScriptedSynthesizer()

    chunks = _pipeline(synthesizer).plan_chunks(
        RunConfiguration(input_pdf=pdf_path, max_chunk_size=13)
    )

    assert [chunk.text for chunk in chunks] == ["Alpha beta.", "Gamma delta."]
    assert synthesizer.calls == []
