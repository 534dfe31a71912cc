"""Normalized-text to chunk segmentation logic.

Responsibilities:
- Split normalized text into bounded chunks for provider calls.
- Prefer sentence boundaries, then word boundaries, then hard cuts.
- Preserve raw span offsets so chunk coverage can be verified.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..models.datatypes import Chunk


class Chunker:
    """Create ordered chunks of at most `max_size` characters from one text line."""

    _SENTENCE_BOUNDARY = ". "
    _WORD_BOUNDARY = " "

    def iter_chunks(self, text: str, max_size: int) -> Iterator[Chunk]:
        """Yield trimmed, non-empty chunks in document order.

        The cursor always advances to the raw span end, so whitespace trimmed from
        a chunk is still consumed and the next boundary search starts after it.

        Args:
            text: Normalized single-line text.
            max_size: Maximum chunk length in characters.

        Raises:
            ValueError: If `max_size` is not positive.
        """

        if max_size <= 0:
            raise ValueError("`max_size` must be a positive integer.")

        text_length = len(text)
        cursor = 0
        index = 0
        while cursor < text_length:
            end, boundary = self._resolve_end(text, cursor, max_size)
            chunk_text = text[cursor:end].strip()
            if chunk_text:
                index += 1
                yield Chunk(
                    index=index,
                    text=chunk_text,
                    char_start=cursor,
                    char_end=end,
                    boundary=boundary,
                )
            cursor = end

    def to_chunks(self, text: str, max_size: int) -> list[Chunk]:
        """Return the full chunk list for `text`."""

        return list(self.iter_chunks(text, max_size))

    def _resolve_end(self, text: str, cursor: int, max_size: int) -> tuple[int, str]:
        """Resolve the exclusive raw span end and its boundary classification."""

        cutoff = cursor + max_size
        if cutoff >= len(text):
            return len(text), "document_end"

        sentence = text.rfind(self._SENTENCE_BOUNDARY, cursor + 1, cutoff + 2)
        # A period on the cutoff only fits when the span opens with consumed whitespace.
        if sentence == cutoff and not text[cursor].isspace():
            sentence = text.rfind(self._SENTENCE_BOUNDARY, cursor + 1, cutoff + 1)
        if sentence > cursor:
            return sentence + 1, "sentence"

        # A space exactly at the cutoff is consumed as trailing whitespace.
        word = text.rfind(self._WORD_BOUNDARY, cursor + 1, cutoff + 1)
        if word > cursor:
            return word + 1, "word"

        return cutoff, "hard_cut"
