"""Single-writer audio output stream.

Responsibilities:
- Append synthesized segments to the output in chunk order as they arrive.
- Byte-append compressed formats; frame-merge WAV segments under one header.
- Commit the finished file atomically or discard it when nothing succeeded.
"""

from __future__ import annotations

import io
import os
import wave
from pathlib import Path
from typing import BinaryIO

from ..models.datatypes import AudioSegment

_PARTIAL_SUFFIX = ".part"


class AudioOutputWriter:
    """Stream audio segments into `<output>.part`, then rename over `output_path`."""

    def __init__(self, output_path: Path, audio_format: str) -> None:
        self.output_path = output_path
        self.audio_format = audio_format
        self.partial_path = output_path.with_name(output_path.name + _PARTIAL_SUFFIX)
        self.segment_count = 0
        self._stream: BinaryIO | None = None
        self._wav: wave.Wave_write | None = None
        self._wav_params: tuple[int, int, int] | None = None

    def __enter__(self) -> AudioOutputWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None or self._is_open():
            self.discard()

    def append(self, segment: AudioSegment) -> None:
        """Append one segment; segments must arrive in chunk order."""

        if segment.audio_format != self.audio_format:
            raise ValueError(
                f"Segment {segment.chunk_index} is `{segment.audio_format}`, "
                f"output is `{self.audio_format}`."
            )
        if self.audio_format == "wav":
            self._append_wav(segment)
        else:
            self._open_stream().write(segment.data)
        self.segment_count += 1

    def commit(self) -> Path:
        """Close the partial file and move it over the final output path."""

        if self.segment_count == 0:
            raise ValueError("Cannot commit audio output without any segments.")
        self._close()
        os.replace(self.partial_path, self.output_path)
        return self.output_path

    def discard(self) -> None:
        """Close and delete the partial file without touching `output_path`."""

        self._close()
        self.partial_path.unlink(missing_ok=True)

    def _is_open(self) -> bool:
        return self._stream is not None

    def _open_stream(self) -> BinaryIO:
        if self._stream is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self.partial_path.open("wb")
        return self._stream

    def _append_wav(self, segment: AudioSegment) -> None:
        """Merge WAV frames of one segment into the running WAV output."""

        try:
            with wave.open(io.BytesIO(segment.data), "rb") as chunk:
                params = (chunk.getnchannels(), chunk.getsampwidth(), chunk.getframerate())
                frames = chunk.readframes(chunk.getnframes())
        except (wave.Error, EOFError) as exc:
            raise ValueError(
                f"Segment {segment.chunk_index} is not a readable WAV payload."
            ) from exc

        if self._wav is None:
            self._wav = wave.open(self._open_stream(), "wb")
            self._wav.setnchannels(params[0])
            self._wav.setsampwidth(params[1])
            self._wav.setframerate(params[2])
            self._wav_params = params
        elif params != self._wav_params:
            raise ValueError(
                f"Incompatible WAV parameters for segment {segment.chunk_index}: "
                f"{params} != {self._wav_params}"
            )
        self._wav.writeframes(frames)

    def _close(self) -> None:
        if self._wav is not None:
            self._wav.close()
            self._wav = None
        if self._stream is not None:
            self._stream.close()
            self._stream = None
