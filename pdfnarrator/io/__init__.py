"""Input stage components for pdfnarrator.

This package contains the source reader and PDF text extraction interfaces
used by the pipeline.
"""

from .pdf_text_extractor import PdfTextExtractor, TextExtractor, read_source

__all__ = ["PdfTextExtractor", "TextExtractor", "read_source"]
