"""
Basic tests for AtomSpell package structure.

These tests verify the public API is importable,
configuration validates, and the language registry resolves codes.
"""

import pytest


class TestImports:
    """Test that the public API is importable."""

    def test_import_package(self):
        """Can import the main package."""
        import atomspell

        assert atomspell.__version__ == "0.1.0"

    def test_import_session(self):
        """Can import the check session and store."""
        from atomspell import CheckSession, DictionaryStore

        assert callable(CheckSession)
        assert callable(DictionaryStore)

    def test_import_core_types(self):
        """Can import core data types."""
        from atomspell import Script, SessionState, Suggestion

        assert SessionState.IDLE.value == "idle"
        assert Script.HAN.space_delimited is False
        assert str(Suggestion("spelling", 1)) == "spelling"

    def test_import_exceptions(self):
        """Can import exception classes."""
        from atomspell import (
            AtomSpellError,
            ConfigurationError,
            CustomWordListIOError,
            DictionaryLoadError,
            InvalidPatternError,
            StaleSpanError,
            UnsupportedLanguageError,
        )

        # Verify inheritance
        assert issubclass(DictionaryLoadError, AtomSpellError)
        assert issubclass(UnsupportedLanguageError, AtomSpellError)
        assert issubclass(CustomWordListIOError, AtomSpellError)
        assert issubclass(ConfigurationError, AtomSpellError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(InvalidPatternError, AtomSpellError)
        assert issubclass(StaleSpanError, AtomSpellError)

    def test_dictionary_load_error_fields(self):
        """DictionaryLoadError carries the language and reason."""
        from atomspell import DictionaryLoadError

        error = DictionaryLoadError("afr", "No dictionary resource")
        assert error.language == "afr"
        assert error.reason == "No dictionary resource"
        assert str(error) == "No dictionary resource"


class TestCheckConfig:
    """Test CheckConfig behavior."""

    def test_default_config(self):
        """Default config has expected values."""
        from atomspell import CheckConfig

        config = CheckConfig()

        assert config.language == "eng"
        assert config.hyphen_policy == "keep"
        assert config.debounce_seconds == 0.15
        assert config.max_workers == 2
        assert config.words_per_minute == 200
        assert config.suggestions.max_results == 5
        assert config.suggestions.max_distance == 2
        assert config.detection.min_confidence == 0.6

    def test_custom_config(self, tmp_path):
        """Can create config with custom values; directories become Paths."""
        from pathlib import Path

        from atomspell import CheckConfig, SuggestionConfig

        config = CheckConfig(
            language="auto",
            custom_dir=str(tmp_path),
            hyphen_policy="split",
            suggestions=SuggestionConfig(max_results=8),
        )

        assert config.language == "auto"
        assert isinstance(config.custom_dir, Path)
        assert config.hyphen_policy == "split"
        assert config.suggestions.max_results == 8

    def test_invalid_hyphen_policy(self):
        """Invalid hyphen_policy raises error."""
        from atomspell import CheckConfig

        with pytest.raises(ValueError, match="hyphen_policy"):
            CheckConfig(hyphen_policy="join")

    def test_invalid_words_per_minute(self):
        """Non-positive reading speed raises error."""
        from atomspell import CheckConfig, ConfigurationError

        with pytest.raises(ConfigurationError, match="words_per_minute"):
            CheckConfig(words_per_minute=0)

    def test_invalid_cache_size(self):
        """Lookup caches need room for at least one entry."""
        from atomspell import CheckConfig, ConfigurationError

        with pytest.raises(ConfigurationError, match="cache_size"):
            CheckConfig(cache_size=0)

    def test_invalid_max_distance(self):
        """Suggestion distance is capped."""
        from atomspell import SuggestionConfig

        with pytest.raises(ValueError, match="max_distance"):
            SuggestionConfig(max_distance=4)

    def test_prefix_must_exceed_distance(self):
        """Deletion prefix must be longer than the distance."""
        from atomspell import SuggestionConfig

        with pytest.raises(ValueError, match="prefix_length"):
            SuggestionConfig(max_distance=2, prefix_length=2)

    def test_invalid_detection_backend(self):
        """Unknown detection backend raises error."""
        from atomspell import DetectionConfig

        with pytest.raises(ValueError, match="backend"):
            DetectionConfig(backend="cld3")

    def test_invalid_min_confidence(self):
        """Confidence threshold must be a probability."""
        from atomspell import DetectionConfig

        with pytest.raises(ValueError, match="min_confidence"):
            DetectionConfig(min_confidence=1.5)


class TestLanguages:
    """Test the language registry."""

    def test_resolve_three_letter_code(self):
        """ISO 639-3 codes resolve."""
        from atomspell import resolve_language

        language = resolve_language("fra")
        assert language.name == "French"
        assert language.iso639_1 == "fr"

    def test_resolve_two_letter_code_case_insensitive(self):
        """ISO 639-1 aliases resolve regardless of case."""
        from atomspell import resolve_language

        assert resolve_language("EN").code == "eng"
        assert resolve_language(" de ").code == "deu"

    def test_unknown_code_raises(self):
        """Unknown codes raise UnsupportedLanguageError."""
        from atomspell import UnsupportedLanguageError, resolve_language

        with pytest.raises(UnsupportedLanguageError, match="xx-unknown"):
            resolve_language("xx-unknown")

    def test_is_supported(self):
        """is_supported mirrors resolve_language."""
        from atomspell import is_supported

        assert is_supported("rus")
        assert not is_supported("klingon")

    def test_registry_codes_unique(self):
        """Every code and alias names exactly one language."""
        from atomspell import LANGUAGES

        codes = [lang.code for lang in LANGUAGES] + [lang.iso639_1 for lang in LANGUAGES]
        assert len(codes) == len(set(codes))

    def test_script_families(self):
        """Han and Kana share the CJK family; others stand alone."""
        from atomspell import Script
        from atomspell.languages import languages_for_script

        assert Script.HAN.family == Script.KANA.family == "cjk"
        assert Script.HANGUL.space_delimited
        assert {lang.code for lang in languages_for_script(Script.KANA)} == {"zho", "jpn"}

    def test_language_str(self):
        """Languages print as name and code."""
        from atomspell import resolve_language

        assert str(resolve_language("eng")) == "English (eng)"
