"""Shared pytest fixtures for the full pdfnarrator test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from pdfnarrator.io.pdf_text_extractor import PdfTextExtractor
from pdfnarrator.models.datatypes import ExtractedText


@pytest.fixture
def stub_pdf(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str], Path]:
    """Create a placeholder PDF file whose extraction yields the given raw text."""

    def _create(raw_text: str, name: str = "book.pdf") -> Path:
        pdf_path = tmp_path / name
        pdf_path.write_bytes(b"%PDF-1.4 placeholder")

        def _extract(self: PdfTextExtractor, data: bytes) -> ExtractedText:
            _ = self
            return ExtractedText(text=raw_text, page_count=1, source_bytes=len(data))

        monkeypatch.setattr(PdfTextExtractor, "extract", _extract)
        return pdf_path

    return _create
