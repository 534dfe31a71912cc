"""Top-level package for pdfnarrator.

This package converts text-based PDF documents into a single narrated audio
file. The main orchestration entry point is `NarrationPipeline`.
"""

from .pipeline import NarrationPipeline

__all__ = ["NarrationPipeline", "__version__"]

__version__ = "0.1.0"
