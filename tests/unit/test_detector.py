"""
Unit tests for language detection.
"""

import pytest

from atomspell.config import DetectionConfig
from atomspell.engine.detector import (
    LanguageDetector,
    build_profile,
    char_ngrams,
    softmax,
)

# =============================================================================
# Helpers
# =============================================================================


class TestProfiles:
    """Tests for n-gram helpers."""

    def test_char_ngrams(self):
        """Grams include boundary markers."""
        assert char_ngrams("to", 2) == [" ", "t", "o", " ", " t", "to", "o "]

    def test_build_profile_weights(self):
        """Frequent words contribute more than rare ones."""
        profile = build_profile("eng", ["aa", "bb"], {"aa": 100.0, "bb": 1.0}, 1)
        assert profile.counts["a"] > profile.counts["b"]
        assert profile.total == pytest.approx(sum(profile.counts.values()))

    def test_profile_vocabulary(self):
        """Profiles remember the words they were built from."""
        profile = build_profile("eng", ["the", "dog"], {}, 2)
        assert profile.vocabulary == frozenset({"the", "dog"})

    def test_unseen_gram_has_probability(self):
        """Smoothing gives unseen grams a finite log probability."""
        profile = build_profile("eng", ["abc"], {}, 3)
        assert profile.log_probability("zzz") < profile.log_probability("abc")

    def test_softmax(self):
        """Posteriors sum to one and keep the order of the scores."""
        posteriors = softmax({"eng": -10.0, "fra": -12.0})
        assert sum(posteriors.values()) == pytest.approx(1.0)
        assert posteriors["eng"] > posteriors["fra"]
        assert softmax({}) == {}


# =============================================================================
# LanguageDetector
# =============================================================================


class TestDetect:
    """Tests for LanguageDetector.detect."""

    @pytest.fixture
    def detector(self, store):
        return LanguageDetector(store)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("The quick brown fox jumps over the lazy dog", "eng"),
            ("Le petit chat est dans la maison avec les enfants", "fra"),
            ("Der Hund und die Katze sind heute nicht im Haus", "deu"),
            ("Привет мир, это дом и что как", "rus"),
        ],
    )
    def test_detects_language(self, detector, text, expected):
        """Sentences are attributed to their language."""
        detection = detector.detect(text, previous="eng")
        assert detection.language == expected
        assert not detection.fallback
        assert detection.confidence >= 0.6

    def test_short_text_keeps_previous(self, detector):
        """Too few letters never trigger a switch."""
        detection = detector.detect("Le chat", previous="deu")
        assert detection.language == "deu"
        assert detection.fallback
        assert detection.confidence == 0.0

    @pytest.mark.parametrize(
        "text",
        [
            "the dog and le chat est",
            "Hund und the dog und cat",
        ],
    )
    def test_mixed_text_keeps_previous(self, detector, text):
        """Half one language, half another is too uncertain to switch."""
        detection = detector.detect(text, previous="rus")
        assert detection.language == "rus"
        assert detection.fallback
        assert detection.confidence == pytest.approx(0.5)

    def test_confidence_independent_of_length(self, detector):
        """Repeating a mixed sentence does not make it more certain."""
        short = detector.detect("the dog and le chat est")
        long = detector.detect(" ".join(["the dog and le chat est"] * 20))
        assert long.confidence == pytest.approx(short.confidence)
        assert long.fallback

    def test_mostly_one_language_switches(self, detector):
        """A few foreign words do not block detection."""
        detection = detector.detect(
            "Le petit chat est dans la maison avec les enfants the dog", previous="eng"
        )
        assert detection.language == "fra"
        assert not detection.fallback
        assert sum(detection.scores.values()) == pytest.approx(1.0)

    def test_default_previous(self, detector):
        """Without a previous language, the configured fallback is used."""
        assert detector.detect("Hi").language == "eng"

    def test_chinese_by_script(self, detector):
        """Han-dominated text is Chinese."""
        detection = detector.detect("我们是学生，你好世界，中国很大", previous="eng")
        assert detection.language == "zho"
        assert detection.confidence == pytest.approx(1.0)

    def test_japanese_without_dictionary_falls_back(self, detector):
        """Kana means Japanese, but there is no Japanese dictionary to switch to."""
        detection = detector.detect("日本語ですこれはテストです", previous="eng")
        assert detection.best == "jpn"
        assert detection.fallback
        assert detection.language == "eng"

    def test_script_without_candidates_falls_back(self, detector):
        """Greek text has no candidate language."""
        detection = detector.detect("Καλημέρα κόσμε, τι κάνεις σήμερα", previous="fra")
        assert detection.language == "fra"
        assert detection.fallback
        assert detection.best is None

    def test_restricted_candidates(self, store):
        """Only configured languages are considered."""
        detector = LanguageDetector(store, DetectionConfig(languages=("rus",)))
        assert [lang.code for lang in detector.candidate_languages()] == ["rus"]

        detection = detector.detect("The quick brown fox jumps over the lazy dog", "deu")
        assert detection.language == "deu"
        assert detection.fallback

    def test_missing_dictionary_skipped(self, store):
        """Candidates that cannot be loaded are ignored."""
        detector = LanguageDetector(store, DetectionConfig(languages=("afr", "eng")))
        detection = detector.detect("The quick brown fox jumps over the lazy dog", "deu")
        assert detection.language == "eng"
        assert set(detection.scores) == {"eng"}

    def test_clear_rebuilds_profiles(self, detector):
        """clear drops cached profiles."""
        detector.detect("The quick brown fox jumps over the lazy dog")
        assert detector._profiles
        detector.clear()
        assert not detector._profiles


class TestLangdetectBackend:
    """The optional langdetect backend."""

    def test_detects_english(self, store):
        """langdetect results are mapped to registry codes."""
        detector = LanguageDetector(store, DetectionConfig(backend="langdetect"))
        detection = detector.detect(
            "This is a fairly long English sentence about the weather in the garden.",
            previous="fra",
        )
        assert detection.language == "eng"
        assert all(code in {"eng", "fra", "deu", "rus", "zho"} for code in detection.scores)
