"""Text normalization stage.

Responsibilities:
- Collapse raw extracted text into a single line suitable for chunking.
- Keep normalization pure and deterministic.
"""

from __future__ import annotations

from .cleaners import CleanerRule, default_rules


class TextNormalizer:
    """Normalize raw extracted text by applying cleaner rules in order."""

    def __init__(self, rules: list[CleanerRule] | None = None) -> None:
        """Initialize with custom rules or the default rule sequence."""

        self.rules = rules or default_rules()

    def normalize(self, raw: str) -> str:
        """Return single-line text without page markers or redundant whitespace.

        Non-ASCII characters are blanked after whitespace collapsing, so text that
        contained them may still hold consecutive spaces.
        """

        current = raw
        for rule in self.rules:
            current = rule.apply(current)
        return current
