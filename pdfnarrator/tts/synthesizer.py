"""TTS synthesizer interfaces and provider-backed implementations.

Responsibilities:
- Define the protocol for chunk-level speech synthesis.
- Provide the OpenAI-backed adapter and an offline silent test synthesizer.
- Map provider failures onto the closed `SynthesisErrorKind` enumeration.
"""

from __future__ import annotations

import io
import wave
from typing import Protocol

from ..errors import SynthesisError, SynthesisErrorKind
from ..models.datatypes import SynthesisOptions
from .openai_client import OpenAIProviderError, OpenAISpeechClient

_FATAL_PROVIDER_KINDS = frozenset({"insufficient_quota", "invalid_api_key", "invalid_model"})


class SpeechSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    provider_id: str
    supported_formats: frozenset[str]

    def synthesize(self, text: str, options: SynthesisOptions) -> bytes:
        """Synthesize one chunk of text and return raw audio bytes.

        Raises:
            SynthesisError: On any provider failure.
        """


class OpenAISpeechSynthesizer:
    """OpenAI-backed synthesizer returning audio bytes in the requested format."""

    supported_formats = frozenset({"mp3", "wav"})

    def __init__(
        self,
        api_key: str | None = None,
        provider_id: str = "openai",
        client: OpenAISpeechClient | None = None,
    ) -> None:
        self.provider_id = provider_id
        self.client = client or OpenAISpeechClient(api_key=api_key)

    def synthesize(self, text: str, options: SynthesisOptions) -> bytes:
        """Synthesize one chunk through OpenAI, classifying failures."""

        try:
            return self.client.synthesize_speech(
                model=options.model,
                voice=options.voice,
                text=text,
                response_format=options.audio_format,
                speed=max(0.25, min(4.0, options.speaking_rate)),
            )
        except OpenAIProviderError as exc:
            kind = (
                SynthesisErrorKind.FATAL
                if exc.failure_kind in _FATAL_PROVIDER_KINDS
                else SynthesisErrorKind.TRANSIENT
            )
            raise SynthesisError(str(exc), kind=kind, provider_kind=exc.failure_kind) from exc


class SilentTestSynthesizer:
    """Offline synthesizer that returns silent WAV audio, free of charge.

    Duration scales with text length so concatenated output stays plausible.
    """

    provider_id = "test"
    supported_formats = frozenset({"wav"})

    def __init__(self, sample_rate: int = 24000, seconds_per_char: float = 0.01) -> None:
        self.sample_rate = sample_rate
        self.seconds_per_char = seconds_per_char

    def synthesize(self, text: str, options: SynthesisOptions) -> bytes:
        if options.audio_format not in self.supported_formats:
            raise SynthesisError(
                f"Test synthesizer cannot produce `{options.audio_format}` audio.",
                kind=SynthesisErrorKind.FATAL,
                provider_kind="unsupported_format",
            )

        frame_count = max(1, int(len(text) * self.seconds_per_char * self.sample_rate))
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(1)
            wav_file.setsampwidth(2)
            wav_file.setframerate(self.sample_rate)
            wav_file.writeframes(b"\x00\x00" * frame_count)
        return buffer.getvalue()
