"""Text preprocessing and segmentation components.

This package provides deterministic cleanup, normalization, and chunking
building blocks used before the TTS stage.
"""

from .chunking import Chunker
from .cleaners import (
    BlankNonPrintable,
    CollapseBlankLines,
    CollapseWhitespace,
    JoinLines,
    RemovePageMarkers,
    StripEdges,
)
from .normalizer import TextNormalizer

__all__ = [
    "Chunker",
    "TextNormalizer",
    "RemovePageMarkers",
    "CollapseBlankLines",
    "JoinLines",
    "CollapseWhitespace",
    "BlankNonPrintable",
    "StripEdges",
]
