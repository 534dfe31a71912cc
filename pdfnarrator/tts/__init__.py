"""Text-to-speech provider abstractions.

This package contains the synthesizer protocol, provider adapters, and the
inter-chunk pacing used by the synthesis stage.
"""

from .pacing import ChunkPacer
from .synthesizer import OpenAISpeechSynthesizer, SilentTestSynthesizer, SpeechSynthesizer

__all__ = [
    "ChunkPacer",
    "OpenAISpeechSynthesizer",
    "SilentTestSynthesizer",
    "SpeechSynthesizer",
]
