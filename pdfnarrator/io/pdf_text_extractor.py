"""PDF text extraction interfaces.

Responsibilities:
- Read the source PDF fully into memory.
- Extract plain text from in-memory PDF bytes with `pypdf`.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..errors import ExtractionError, SourceNotFoundError
from ..models.datatypes import ExtractedText


class TextExtractor(Protocol):
    """Protocol for swappable PDF text extractors."""

    def extract(self, data: bytes) -> ExtractedText:
        """Extract the full document text from PDF bytes."""


def read_source(pdf_path: Path) -> bytes:
    """Read the whole source PDF, failing with `SourceNotFoundError` when absent."""

    if not pdf_path.is_file():
        raise SourceNotFoundError(pdf_path)
    return pdf_path.read_bytes()


class PdfTextExtractor:
    """Extractor for text-based PDFs using `pypdf`."""

    def extract(self, data: bytes) -> ExtractedText:
        """Extract all page text from a PDF payload, pages joined by newlines."""

        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except PdfReadError as exc:
            raise ExtractionError(
                detail=f"Failed to parse PDF ({len(data)} bytes): {exc}",
                hint="Verify the input file is a valid, unencrypted PDF document.",
            ) from exc
        except Exception as exc:
            raise ExtractionError(
                detail=f"Failed to extract text from PDF ({len(data)} bytes): {exc}",
            ) from exc

        return ExtractedText(
            text="\n".join(page.replace("\f", "\n") for page in pages),
            page_count=len(pages),
            source_bytes=len(data),
        )
