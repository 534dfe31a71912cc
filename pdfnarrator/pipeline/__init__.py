"""pdfnarrator pipeline package.

This package contains the run orchestrator, the serial synthesis driver, and
stage telemetry helpers.
"""

from .driver import SynthesisDriver
from .orchestrator import NarrationPipeline

__all__ = ["NarrationPipeline", "SynthesisDriver"]
