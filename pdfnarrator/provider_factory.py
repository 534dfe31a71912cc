"""Provider factory for the TTS stage.

Responsibilities:
- Resolve provider identifiers to concrete synthesizer implementations.
- Keep orchestration independent from concrete provider class construction.
"""

from __future__ import annotations

from .tts.synthesizer import OpenAISpeechSynthesizer, SilentTestSynthesizer, SpeechSynthesizer


class ProviderFactory:
    """Factory for provider-backed synthesizers used by the pipeline."""

    @staticmethod
    def create_synthesizer(
        provider_id: str,
        audio_format: str,
        api_key: str | None = None,
    ) -> SpeechSynthesizer:
        """Create a synthesizer for a provider identifier and check format support.

        Raises:
            ValueError: For unknown providers or formats the provider cannot produce.
        """

        synthesizer: SpeechSynthesizer
        if provider_id == "openai":
            synthesizer = OpenAISpeechSynthesizer(api_key=api_key, provider_id=provider_id)
        elif provider_id == "test":
            synthesizer = SilentTestSynthesizer()
        else:
            raise ValueError(f"Unsupported TTS provider `{provider_id}`.")

        if audio_format not in synthesizer.supported_formats:
            supported = ", ".join(sorted(synthesizer.supported_formats))
            raise ValueError(
                f"TTS provider `{provider_id}` cannot produce `{audio_format}` audio; "
                f"supported: {supported}."
            )
        return synthesizer
