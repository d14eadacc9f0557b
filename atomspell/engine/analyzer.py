"""
Document statistics.

A single pass over the token stream: word counts, per-word frequencies,
spelling accuracy and estimated reading time. Only alphabetic tokens
count as words; numbers and digit-bearing tokens are ignored.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from atomspell.models import DocumentStats, Misspelling, Token

DEFAULT_WORDS_PER_MINUTE = 200


class DocumentAnalyzer:
    """
    Aggregates writing statistics for a document.

    Example:
        >>> analyzer = DocumentAnalyzer(words_per_minute=200)
        >>> stats = analyzer.analyze(tokens, misspellings)
        >>> stats.accuracy, stats.reading_time_minutes
        (0.95, 1.0)
    """

    def __init__(self, words_per_minute: int = DEFAULT_WORDS_PER_MINUTE):
        if words_per_minute <= 0:
            raise ValueError(f"words_per_minute must be > 0, got {words_per_minute}")
        self.words_per_minute = words_per_minute

    def analyze(
        self,
        tokens: Iterable[Token],
        misspellings: Sequence[Misspelling] = (),
        language: str | None = None,
    ) -> DocumentStats:
        """
        Compute statistics for a token stream.

        Args:
            tokens: Tokens of the whole document.
            misspellings: Misspellings found in the same token stream.
            language: Active language code, recorded on the result.

        Returns:
            DocumentStats. An empty document has accuracy 1.0 and a
            reading time of zero.
        """
        frequencies: Counter[str] = Counter()
        display_forms: dict[str, str] = {}
        for token in tokens:
            if not token.is_alpha:
                continue
            form = token.form
            frequencies[form] += 1
            display_forms.setdefault(form, token.text)

        total = sum(frequencies.values())
        misspelled = len(misspellings)
        accuracy = 1.0 - misspelled / total if total else 1.0

        return DocumentStats(
            total_words=total,
            unique_words=len(frequencies),
            frequencies=dict(frequencies),
            display_forms=display_forms,
            misspelling_count=misspelled,
            accuracy=max(0.0, accuracy),
            reading_time_minutes=total / self.words_per_minute,
            language=language,
        )
