"""Unit tests for the serial synthesis loop policies."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from pdfnarrator.config import RunConfiguration
from pdfnarrator.errors import SynthesisError, SynthesisErrorKind
from pdfnarrator.models.datatypes import AudioSegment, Chunk, ChunkFailureKind, SynthesisOptions
from pdfnarrator.pipeline import SynthesisDriver
from pdfnarrator.telemetry import RunLogger
from pdfnarrator.tts import ChunkPacer


class ScriptedSynthesizer:
    """Synthesizer stub returning bytes or raising per chunk text."""

    provider_id = "scripted"
    supported_formats = frozenset({"mp3", "wav"})

    def __init__(self, outcomes: dict[str, Exception | bytes] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[str] = []

    def synthesize(self, text: str, options: SynthesisOptions) -> bytes:
        self.calls.append(text)
        outcome = self.outcomes.get(text, f"<{text}>".encode("utf-8"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _chunks(*texts: str) -> list[Chunk]:
    return [
        Chunk(index=position, text=text, char_start=0, char_end=len(text))
        for position, text in enumerate(texts, start=1)
    ]


def _config(**overrides: object) -> RunConfiguration:
    return RunConfiguration(input_pdf=Path("book.pdf"), **overrides)  # type: ignore[arg-type]


def _run(
    synthesizer: ScriptedSynthesizer,
    chunks: list[Chunk],
    config: RunConfiguration,
    sleeps: list[float] | None = None,
    log_sink: io.StringIO | None = None,
):
    segments: list[AudioSegment] = []
    driver = SynthesisDriver(
        synthesizer,
        pacer=ChunkPacer(delay_ms=config.delay_ms, sleeper=(sleeps if sleeps is not None else []).append),
        run_logger=RunLogger(sink=log_sink or io.StringIO()),
    )
    summary = driver.run(chunks, config, segments.append)
    return summary, segments


def test_driver_continues_after_transient_failure() -> None:
    synthesizer = ScriptedSynthesizer({"two": SynthesisError("HTTP 500")})

    summary, segments = _run(synthesizer, _chunks("one", "two", "three"), _config())

    assert [segment.chunk_index for segment in segments] == [1, 3]
    assert [segment.data for segment in segments] == [b"<one>", b"<three>"]
    assert (summary.attempted, summary.succeeded, summary.failed) == (3, 2, 1)
    assert summary.failures[0].chunk_index == 2
    assert summary.failures[0].kind is ChunkFailureKind.TRANSIENT
    assert "--start-chunk 2 --max-chunks 1" in (summary.failures[0].hint or "")
    assert summary.status == "partial"


def test_driver_aborts_remaining_chunks_on_fatal_failure() -> None:
    fatal = SynthesisError(
        "quota exhausted",
        kind=SynthesisErrorKind.FATAL,
        provider_kind="insufficient_quota",
    )
    synthesizer = ScriptedSynthesizer({"two": fatal})
    log_sink = io.StringIO()

    summary, segments = _run(
        synthesizer, _chunks("one", "two", "three"), _config(), log_sink=log_sink
    )

    assert synthesizer.calls == ["one", "two"]
    assert len(segments) == 1
    assert summary.aborted is True
    assert (summary.attempted, summary.succeeded, summary.failed) == (2, 1, 1)
    assert summary.failures[0].kind is ChunkFailureKind.FATAL
    assert "Replenish provider credits" in (summary.failures[0].hint or "")
    assert "--start-chunk 2" in (summary.failures[0].hint or "")
    assert "event=aborted" in log_sink.getvalue()


def test_driver_processes_only_selected_range_in_order() -> None:
    synthesizer = ScriptedSynthesizer()

    summary, segments = _run(
        synthesizer,
        _chunks("c1", "c2", "c3", "c4", "c5"),
        _config(start_chunk=2, max_chunks=2),
    )

    assert synthesizer.calls == ["c2", "c3"]
    assert [segment.chunk_index for segment in segments] == [2, 3]
    assert summary.total_chunks == 5
    assert summary.selected_chunks == 2


def test_driver_rejects_chunks_over_provider_limit_without_calling_provider() -> None:
    synthesizer = ScriptedSynthesizer()
    config = _config(max_chunk_size=5, provider_char_limit=5)

    summary, segments = _run(synthesizer, _chunks("short", "much too long"), config)

    assert synthesizer.calls == ["short"]
    assert len(segments) == 1
    assert summary.failures[0].kind is ChunkFailureKind.REJECTED
    assert "--max-chunk-size" in (summary.failures[0].hint or "")


def test_driver_skips_blank_chunks_without_counting_failure() -> None:
    synthesizer = ScriptedSynthesizer()

    summary, _ = _run(synthesizer, _chunks("one", "   ", "three"), _config())

    assert synthesizer.calls == ["one", "three"]
    assert (summary.attempted, summary.succeeded, summary.failed, summary.skipped) == (2, 2, 0, 1)
    assert summary.status == "success"


def test_driver_treats_empty_audio_as_transient_failure() -> None:
    synthesizer = ScriptedSynthesizer({"one": b""})

    summary, segments = _run(synthesizer, _chunks("one", "two"), _config())

    assert [segment.chunk_index for segment in segments] == [2]
    assert summary.failures[0].kind is ChunkFailureKind.TRANSIENT
    assert "no audio" in summary.failures[0].message


def test_driver_treats_unusable_audio_from_sink_as_transient_failure() -> None:
    def _rejecting_sink(segment: AudioSegment) -> None:
        raise ValueError(f"Segment {segment.chunk_index} is not a readable WAV payload.")

    driver = SynthesisDriver(ScriptedSynthesizer(), pacer=ChunkPacer(delay_ms=0))
    summary = driver.run(_chunks("one"), _config(), _rejecting_sink)

    assert summary.succeeded == 0
    assert summary.failures[0].message.startswith("Unusable audio:")


def test_driver_pauses_between_provider_calls_but_not_after_last_chunk() -> None:
    sleeps: list[float] = []

    _run(
        ScriptedSynthesizer({"two": SynthesisError("HTTP 500")}),
        _chunks("one", "two", "three"),
        _config(delay_ms=250),
        sleeps=sleeps,
    )

    assert sleeps == [0.25, 0.25]


def test_driver_does_not_pause_after_skipped_chunk() -> None:
    sleeps: list[float] = []

    _run(ScriptedSynthesizer(), _chunks("one", " ", "three"), _config(delay_ms=100), sleeps=sleeps)

    assert sleeps == [0.1]


def test_driver_reports_chunk_progress() -> None:
    progress: list[tuple[int, int]] = []
    driver = SynthesisDriver(
        ScriptedSynthesizer(),
        pacer=ChunkPacer(delay_ms=0),
        chunk_progress_callback=lambda chunk, total: progress.append((chunk.index, total)),
    )

    driver.run(_chunks("a", "b", "c"), _config(start_chunk=2), lambda _segment: None)

    assert progress == [(2, 3), (3, 3)]


@pytest.mark.parametrize("start_chunk", [4, 10])
def test_driver_handles_start_beyond_last_chunk(start_chunk: int) -> None:
    synthesizer = ScriptedSynthesizer()

    summary, segments = _run(synthesizer, _chunks("a", "b", "c"), _config(start_chunk=start_chunk))

    assert synthesizer.calls == []
    assert segments == []
    assert summary.selected_chunks == 0
    assert summary.status == "failed"
