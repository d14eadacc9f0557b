"""
Correction suggestions.

Candidates come from the dictionary's symspellpy deletion index and are
rescored with rapidfuzz's Damerau-Levenshtein distance (substitutions,
insertions, deletions and adjacent transpositions). Ranking is fully
deterministic:

1. Ascending edit distance
2. Descending frequency weight
3. Lexicographic order of the case-folded form
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rapidfuzz import process
from rapidfuzz.distance import DamerauLevenshtein

from atomspell.config import SuggestionConfig
from atomspell.engine.dictionary import Dictionary
from atomspell.models import Suggestion, normalize_form

logger = logging.getLogger(__name__)


def damerau_levenshtein(a: str, b: str, max_distance: int | None = None) -> int:
    """
    Edit distance counting insertions, deletions, substitutions and
    adjacent transpositions as one edit each.

    Args:
        a: First string.
        b: Second string.
        max_distance: Optional cutoff; any larger distance is reported
            as ``max_distance + 1``.

    Example:
        >>> damerau_levenshtein("kitten", "sitting")
        3
        >>> damerau_levenshtein("teh", "the")
        1
    """
    return DamerauLevenshtein.distance(a, b, score_cutoff=max_distance)


def match_case(suggestion: str, original: str) -> str:
    """
    Give a suggestion the casing pattern of the word it replaces.

    Example:
        >>> match_case("spelling", "SPELING"), match_case("spelling", "Speling")
        ('SPELLING', 'Spelling')
    """
    letters = [ch for ch in original if ch.isalpha()]
    if len(letters) > 1 and all(ch.isupper() for ch in letters):
        return suggestion.upper()
    if letters and letters[0].isupper() and suggestion[:1].islower():
        return suggestion[:1].upper() + suggestion[1:]
    return suggestion


class SuggestionEngine:
    """
    Ranks correction candidates for misspelled words.

    Example:
        >>> engine = SuggestionEngine()
        >>> [s.word for s in engine.suggest("speling", english)][:2]
        ['spelling', 'spewing']
    """

    def __init__(self, config: SuggestionConfig | None = None):
        self.config = config or SuggestionConfig()

    def suggest(
        self,
        word: str,
        dictionary: Dictionary,
        max_results: int | None = None,
        max_distance: int | None = None,
        extra_words: Iterable[str] = (),
    ) -> list[Suggestion]:
        """
        Suggest corrections for ``word``.

        Args:
            word: The misspelled word as written.
            dictionary: Dictionary to draw candidates from.
            max_results: Cap on returned suggestions.
            max_distance: Largest edit distance considered.
            extra_words: Case-folded custom words, scored alongside the
                dictionary candidates.

        Returns:
            Suggestions best-first; empty if nothing is close enough, if
            ``word`` has at most one character, contains a digit, or is
            already spelled correctly.
        """
        if not self.config.enabled:
            return []
        if max_results is None:
            max_results = self.config.max_results
        if max_distance is None:
            max_distance = self.config.max_distance

        if len(word) <= 1 or any(ch.isdigit() for ch in word):
            return []
        form = normalize_form(word)
        if form in dictionary.words:
            return []

        scored: dict[str, Suggestion] = {}
        for candidate in dictionary.candidates(form, max_distance, self.config.prefix_length):
            distance = damerau_levenshtein(form, candidate, max_distance)
            if distance <= max_distance:
                scored[candidate] = Suggestion(
                    dictionary.display(candidate), distance, dictionary.frequency(candidate)
                )

        for candidate in extra_words:
            if candidate in scored or candidate == form:
                continue
            distance = damerau_levenshtein(form, candidate, max_distance)
            if distance <= max_distance:
                scored[candidate] = Suggestion(candidate, distance, dictionary.frequency(candidate))

        ranked = sorted(
            scored.items(), key=lambda item: (item[1].distance, -item[1].frequency, item[0])
        )

        results: list[Suggestion] = []
        seen: set[str] = set()
        for _, suggestion in ranked:
            if len(results) >= max_results:
                break
            cased = match_case(suggestion.word, word)
            if cased in seen:
                continue
            seen.add(cased)
            results.append(Suggestion(cased, suggestion.distance, suggestion.frequency))

        logger.debug("%d candidates for %r, returning %d", len(scored), word, len(results))
        return results

    def find_similar(
        self,
        word: str,
        candidates: Iterable[str],
        max_results: int | None = None,
        max_distance: int | None = None,
    ) -> list[Suggestion]:
        """
        Rank an arbitrary vocabulary (e.g. the words of the document) by
        closeness to ``word``.

        Unlike ``suggest``, case is kept as given and exact matches other
        than ``word`` itself are included.

        Example:
            >>> [s.word for s in engine.find_similar("colour", ["color", "colon", "cold"])]
            ['color', 'colon']
        """
        if max_results is None:
            max_results = self.config.max_results
        if max_distance is None:
            max_distance = self.config.max_distance

        choices = sorted({c for c in candidates if c != word})
        matches = process.extract(
            word,
            choices,
            scorer=DamerauLevenshtein.distance,
            score_cutoff=max_distance,
            limit=None,
        )
        ranked = sorted((distance, choice) for choice, distance, _ in matches)
        return [Suggestion(choice, int(distance)) for distance, choice in ranked[:max_results]]
