"""Core business logic for transcript building."""

from collections.abc import Iterable

PARAGRAPH_SEPARATOR = "\n\n"


class TranscriptBuilder:
    """Builds the final transcript from per-chunk texts."""

    def build(self, segments: Iterable[tuple[int, str]]) -> tuple[str, list[str]]:
        """
        Joins chunk texts in chunk index order.

        The order in which segments arrive does not matter; only their index
        does.

        Args:
            segments: (chunk_index, text) pairs in any order.

        Returns:
            Tuple of (transcript_text, ordered_chunk_texts).

        Raises:
            ValueError: If the indices are not exactly 0..n-1.
        """
        ordered = sorted(segments, key=lambda segment: segment[0])
        indices = [index for index, _ in ordered]
        if indices != list(range(len(ordered))):
            raise ValueError(f"Chunk indices must be contiguous from 0, got {indices}")
        texts = [text for _, text in ordered]
        return self._format(texts), texts

    def _format(self, texts: list[str]) -> str:
        """Separates chunk texts by a blank line."""
        return PARAGRAPH_SEPARATOR.join(texts)
