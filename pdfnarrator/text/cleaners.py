"""Deterministic text cleaning rules.

Responsibilities:
- Provide composable cleanup rules for PDF-derived text artifacts.
- Keep preprocessing predictable so chunk boundaries are reproducible.
"""

from __future__ import annotations

import re
from typing import Protocol


class CleanerRule(Protocol):
    """Protocol for text cleaning rules."""

    def apply(self, text: str) -> str:
        """Apply a single cleaning transformation."""


class RemovePageMarkers:
    """Remove page markers such as `-- 3 of 10 --`, with an optional `Page` label before.

    The dash runs on both sides are required; `1-5 of 12` or `page 3 of 10` in
    running prose are left alone.
    """

    _MARKER_RE = re.compile(r"(?:\bpage\s*)?-{2,}\s*\d+\s*of\s*\d+\s*-{2,}", re.IGNORECASE)

    def apply(self, text: str) -> str:
        """Apply page-marker cleanup rule."""

        return self._MARKER_RE.sub("", text)


class CollapseBlankLines:
    """Collapse any whitespace run that contains a blank line into one space."""

    def apply(self, text: str) -> str:
        return re.sub(r"\n\s*\n", " ", text)


class JoinLines:
    """Replace remaining line breaks with spaces."""

    def apply(self, text: str) -> str:
        return text.replace("\n", " ")


class CollapseWhitespace:
    """Collapse every whitespace run into a single space."""

    def apply(self, text: str) -> str:
        return re.sub(r"\s+", " ", text)


class BlankNonPrintable:
    """Replace characters outside printable ASCII (0x20-0x7E) with spaces."""

    def apply(self, text: str) -> str:
        return re.sub(r"[^\x20-\x7E]", " ", text)


class StripEdges:
    """Trim leading and trailing whitespace."""

    def apply(self, text: str) -> str:
        return text.strip()


def default_rules() -> list[CleanerRule]:
    """Return the canonical ordered rule sequence used by `TextNormalizer`."""

    return [
        RemovePageMarkers(),
        CollapseBlankLines(),
        JoinLines(),
        CollapseWhitespace(),
        BlankNonPrintable(),
        StripEdges(),
    ]
