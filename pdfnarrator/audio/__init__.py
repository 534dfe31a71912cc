"""Audio output components.

This package contains the ordered, single-writer output stream used to
assemble synthesized chunk audio into one file.
"""

from .writer import AudioOutputWriter

__all__ = ["AudioOutputWriter"]
