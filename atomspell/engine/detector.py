"""
Automatic language detection.

Two stages:

1. Script census. Kana letters mean Japanese, Hangul means Korean and Han
   means Chinese whenever CJK letters dominate the text.
2. Character n-gram profiles. For space-delimited scripts, each candidate
   language gets a profile of character 1-3-grams built from its
   dictionary's most frequent words. Every word of the text gets a
   posterior over the candidates: a common word listed by some profiles
   splits its vote among those, any other word is scored against every
   profile by smoothed log-likelihood. The confidence of a language is
   its mean posterior over the words, so mixed text stays uncertain no
   matter how long it is.

The detector never switches on thin evidence: texts with fewer than
``min_chars`` letters, or whose best mean posterior is below
``min_confidence``, keep the previously active language.

The optional "langdetect" backend replaces stage 2 with langdetect's
trained profiles; the same threshold policy applies.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import Counter
from dataclasses import dataclass

from atomspell.config import DetectionConfig
from atomspell.engine.dictionary import DictionaryStore
from atomspell.engine.tokenizer import Tokenizer, classify_char
from atomspell.exceptions import AtomSpellError
from atomspell.languages import LANGUAGES, Language, Script, resolve_language
from atomspell.models import Detection

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

SMOOTHING_ALPHA = 0.5
WORD_BOUNDARY = " "

_CJK_LANGUAGE = {
    Script.KANA: "jpn",
    Script.HANGUL: "kor",
    Script.HAN: "zho",
}


def char_ngrams(word: str, max_n: int) -> list[str]:
    """
    Character n-grams of a word padded with boundary markers.

    Example:
        >>> char_ngrams("to", 2)
        [' ', 't', 'o', ' ', ' t', 'to', 'o ']
    """
    padded = f"{WORD_BOUNDARY}{word}{WORD_BOUNDARY}"
    grams = []
    for n in range(1, max_n + 1):
        grams.extend(padded[i : i + n] for i in range(len(padded) - n + 1))
    return grams


# =============================================================================
# PROFILES
# =============================================================================


@dataclass
class NgramProfile:
    """Weighted character n-gram counts and common words for one language."""

    language: str
    counts: dict[str, float]
    total: float
    vocabulary: frozenset[str] = frozenset()

    def log_probability(self, gram: str) -> float:
        """Add-alpha smoothed log probability; unseen grams share one extra slot."""
        slots = len(self.counts) + 1
        count = self.counts.get(gram, 0.0)
        return math.log((count + SMOOTHING_ALPHA) / (self.total + SMOOTHING_ALPHA * slots))


def build_profile(
    language: str, words: list[str], weights: dict[str, float], max_n: int
) -> NgramProfile:
    """
    Build a profile from ranked words.

    Args:
        language: Language code.
        words: Most frequent words of the language.
        weights: Frequency weight per word; a word without one counts once.
        max_n: Longest n-gram.

    Returns:
        The profile. Word weights are log-damped so a handful of function
        words cannot drown the rest.
    """
    counts: Counter[str] = Counter()
    for word in words:
        weight = math.log1p(weights[word]) if word in weights else 1.0
        if weight <= 0:
            weight = 1.0
        for gram in char_ngrams(word, max_n):
            counts[gram] += weight
    return NgramProfile(language, dict(counts), float(sum(counts.values())), frozenset(words))


def softmax(scores: dict[str, float]) -> dict[str, float]:
    """Normalize log scores to posteriors."""
    if not scores:
        return {}
    top = max(scores.values())
    exps = {code: math.exp(score - top) for code, score in scores.items()}
    total = sum(exps.values())
    return {code: value / total for code, value in exps.items()}


# =============================================================================
# DETECTOR
# =============================================================================


class LanguageDetector:
    """
    Detects the language of a text among the loadable dictionaries.

    Example:
        >>> detector = LanguageDetector(store)
        >>> detector.detect("Le chat est sur la table avec les enfants").language
        'fra'
        >>> detector.detect("Hi", previous="deu")
        Detection(language='deu', confidence=0.0, best=None, fallback=True, scores={})
    """

    def __init__(self, store: DictionaryStore, config: DetectionConfig | None = None):
        self.store = store
        self.config = config or DetectionConfig()
        self._tokenizer = Tokenizer("split")
        self._profiles: dict[str, NgramProfile | None] = {}
        self._lock = threading.Lock()

    def candidate_languages(self) -> list[Language]:
        """Languages detection may choose from."""
        if self.config.languages is not None:
            return [resolve_language(code) for code in self.config.languages]
        return self.store.available_languages()

    def detect(self, text: str, previous: str | None = None) -> Detection:
        """
        Detect the language of ``text``.

        Args:
            text: Text to analyze.
            previous: Active language code, kept on fallback.

        Returns:
            Detection whose ``language`` is the code to use. ``best`` is
            the top-scoring language even when it was not adopted.
        """
        previous = previous or resolve_language(self.config.fallback_language).code

        census: Counter[Script] = Counter()
        for ch in text:
            _, script = classify_char(ch)
            if script is not None:  # letters only
                census[script] += 1
        letters = sum(census.values())
        if letters < self.config.min_chars:
            return Detection(previous, 0.0, fallback=True)

        cjk = census[Script.HAN] + census[Script.KANA] + census[Script.HANGUL]
        if cjk * 2 > letters:
            best, confidence = self._census_language(census, letters)
            scores = {best: confidence}
            if best not in {language.code for language in self.candidate_languages()}:
                logger.debug("Detected %s but it is not a candidate language", best)
                return Detection(previous, confidence, best, True, scores)
        elif self.config.backend == "langdetect":
            scores = self._langdetect_scores(text)
            best = max(scores, key=scores.get) if scores else None
            confidence = scores.get(best, 0.0) if best else 0.0
        else:
            dominant = max(
                (s for s in census if s.space_delimited and s != Script.HANGUL),
                key=lambda s: census[s],
                default=None,
            )
            scores = self._profile_scores(text, dominant) if dominant else {}
            best = min(scores, key=lambda code: (-scores[code], code)) if scores else None
            confidence = scores.get(best, 0.0) if best else 0.0

        if best is None or confidence < self.config.min_confidence:
            logger.debug(
                "Detection below threshold (best=%s, %.2f); keeping %s", best, confidence, previous
            )
            return Detection(previous, confidence, best, True, scores)

        logger.debug("Detected %s with confidence %.2f", best, confidence)
        return Detection(best, confidence, best, False, scores)

    def _census_language(self, census: Counter[Script], letters: int) -> tuple[str, float]:
        if census[Script.KANA]:
            share = (census[Script.KANA] + census[Script.HAN]) / letters
            return _CJK_LANGUAGE[Script.KANA], share
        if census[Script.HANGUL] >= census[Script.HAN]:
            return _CJK_LANGUAGE[Script.HANGUL], census[Script.HANGUL] / letters
        return _CJK_LANGUAGE[Script.HAN], census[Script.HAN] / letters

    # -------------------------------------------------------------------------
    # n-gram profiles
    # -------------------------------------------------------------------------

    def _profile(self, language: Language) -> NgramProfile | None:
        with self._lock:
            if language.code in self._profiles:
                return self._profiles[language.code]
            try:
                dictionary = self.store.load(language)
            except AtomSpellError as e:
                logger.info("No profile for %s: %s", language, e)
                profile = None
            else:
                words = dictionary.top_words(self.config.profile_words)
                profile = build_profile(
                    language.code, words, dictionary.frequencies, self.config.max_ngram
                )
            self._profiles[language.code] = profile
            return profile

    def _profile_scores(self, text: str, script: Script) -> dict[str, float]:
        words = [
            token.form
            for token in self._tokenizer.tokenize(text)
            if token.is_alpha and token.script == script
        ]
        profiles = []
        for language in self.candidate_languages():
            if language.script != script:
                continue
            profile = self._profile(language)
            if profile is not None:
                profiles.append(profile)
        if not words or not profiles:
            return {}

        totals = dict.fromkeys((profile.language for profile in profiles), 0.0)
        for word in words:
            for code, posterior in self._word_posteriors(word, profiles).items():
                totals[code] += posterior
        return {code: total / len(words) for code, total in totals.items()}

    def _word_posteriors(self, word: str, profiles: list[NgramProfile]) -> dict[str, float]:
        # Common words vote for the languages that list them
        hits = [profile for profile in profiles if word in profile.vocabulary]
        grams = Counter(char_ngrams(word, self.config.max_ngram))
        return softmax(
            {
                profile.language: sum(
                    count * profile.log_probability(gram) for gram, count in grams.items()
                )
                for profile in hits or profiles
            }
        )

    # -------------------------------------------------------------------------
    # langdetect backend
    # -------------------------------------------------------------------------

    def _langdetect_scores(self, text: str) -> dict[str, float]:
        from langdetect import DetectorFactory, detect_langs
        from langdetect.lang_detect_exception import LangDetectException

        DetectorFactory.seed = 0
        try:
            results = detect_langs(text)
        except LangDetectException as e:
            logger.debug("langdetect failed: %s", e)
            return {}

        allowed = {language.code for language in self.candidate_languages()}
        scores: dict[str, float] = {}
        for result in results:
            code = result.lang.split("-")[0]
            language = next((lang for lang in LANGUAGES if lang.iso639_1 == code), None)
            if language is not None and language.code in allowed:
                scores[language.code] = scores.get(language.code, 0.0) + result.prob
        return scores

    def clear(self) -> None:
        """Drop cached profiles (e.g. after dictionaries were reloaded)."""
        with self._lock:
            self._profiles.clear()
