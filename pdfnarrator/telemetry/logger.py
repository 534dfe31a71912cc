"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level and chunk-level runtime logs.
- Route all events through `loguru` with a plain single-line format.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic phase and chunk logs for CLI-observable pipeline activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_chunk_start(self, chunk_index: int, total: int, length: int) -> None:
        self._emit("DEBUG", "chunk_start", "synthesize", chunk=f"{chunk_index}/{total}", chars=length)

    def log_chunk_success(self, chunk_index: int, size_bytes: int) -> None:
        self._emit("INFO", "chunk_success", "synthesize", chunk=chunk_index, bytes=size_bytes)

    def log_chunk_skipped(self, chunk_index: int) -> None:
        self._emit("WARNING", "chunk_skipped", "synthesize", chunk=chunk_index, reason="empty")

    def log_chunk_failure(self, chunk_index: int, error_class: str) -> None:
        self._emit("ERROR", "chunk_failure", "synthesize", chunk=chunk_index, error_class=error_class)

    def log_run_aborted(self, chunk_index: int, succeeded: int, failed: int) -> None:
        self._emit(
            "ERROR",
            "aborted",
            "synthesize",
            chunk=chunk_index,
            failed=failed,
            succeeded=succeeded,
        )
