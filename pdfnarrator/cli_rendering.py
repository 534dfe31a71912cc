"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
per-chunk progress lines, chunk listings, and run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import Chunk, ChunkFailureKind, RunSummary

_PREVIEW_WIDTH = 80


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_chunk_progress(chunk: Chunk, total_chunks: int) -> None:
    """Print one progress block for a chunk about to be synthesized."""

    typer.echo(f"[{chunk.index}/{total_chunks}] Processing...")
    typer.echo(f"  Length: {len(chunk.text)} characters")
    typer.echo(f"  Preview: {chunk.preview(_PREVIEW_WIDTH)}...")


def echo_chunk_list(chunks: list[Chunk]) -> None:
    """Print compact deterministic chunk index/length/preview rows."""

    typer.echo(f"Total chunks: {len(chunks)}")
    for chunk in chunks:
        typer.echo(f"{chunk.index}. ({len(chunk.text)} chars) {chunk.preview(_PREVIEW_WIDTH)}")


def echo_run_summary(summary: RunSummary) -> None:
    """Print counters, per-chunk failures, and the written output file."""

    typer.echo(
        f"Processed: {summary.succeeded}/{summary.selected_chunks} chunks succeeded "
        f"({summary.attempted} attempted, {summary.failed} failed, "
        f"{summary.skipped} skipped; {summary.total_chunks} total)"
    )
    for failure in summary.failures:
        typer.secho(
            f"Chunk {failure.chunk_index} failed [{failure.kind.value}]: {failure.message}",
            fg=typer.colors.RED,
            err=True,
        )
        if failure.hint:
            typer.secho(f"  Hint: {failure.hint}", fg=typer.colors.YELLOW, err=True)

    if summary.aborted:
        _echo_abort_remediation(summary)

    if summary.output_path is not None:
        typer.echo(f"Output: {summary.output_path}")
        typer.echo(f"File size: {summary.output_megabytes:.2f} MB")


def _echo_abort_remediation(summary: RunSummary) -> None:
    """Print remediation lines after a fatal provider error stopped the run."""

    stopped_at = next(
        (
            failure.chunk_index
            for failure in summary.failures
            if failure.kind is ChunkFailureKind.FATAL
        ),
        None,
    )
    typer.secho("Processing stopped early after an unrecoverable provider error.", err=True)
    typer.secho("To continue:", err=True)
    typer.secho("  1. Replenish provider credits or fix the API key", err=True)
    typer.secho("  2. Use `--provider test --format wav` to try without provider cost", err=True)
    typer.secho("  3. Lower `--max-chunks` to process fewer chunks per run", err=True)
    if stopped_at is not None:
        typer.secho(f"  4. Resume with `--start-chunk {stopped_at}`", err=True)
