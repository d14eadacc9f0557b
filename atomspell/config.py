"""
Configuration for AtomSpell check sessions.

All options have sensible defaults; create a config only if you need
to customize behavior.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from atomspell.exceptions import ConfigurationError

AUTO_LANGUAGE = "auto"


@dataclass
class SuggestionConfig:
    """
    Configuration for correction candidates.

    Example:
        >>> config = CheckConfig(suggestions=SuggestionConfig(max_results=8))
    """

    max_results: int = 5
    max_distance: int = 2  # Damerau-Levenshtein cap
    prefix_length: int = 7  # Deletion index only covers this many leading chars
    enabled: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if self.max_results < 1:
            raise ConfigurationError(f"max_results must be >= 1, got {self.max_results}")
        if not 0 <= self.max_distance <= 3:
            raise ConfigurationError(
                f"max_distance must be between 0 and 3, got {self.max_distance}"
            )
        if self.prefix_length <= self.max_distance:
            raise ConfigurationError(
                f"prefix_length must be greater than max_distance, "
                f"got {self.prefix_length} <= {self.max_distance}"
            )


@dataclass
class DetectionConfig:
    """
    Configuration for automatic language detection.

    Detection is only consulted when the session language is "auto".
    Below ``min_confidence`` the previously active language is kept.
    """

    backend: Literal["profile", "langdetect"] = "profile"
    min_confidence: float = 0.6
    min_chars: int = 12  # Letters needed before a switch is considered
    profile_words: int = 3000  # Most frequent dictionary words per profile
    max_ngram: int = 3
    languages: tuple[str, ...] | None = None  # None = every loadable language
    fallback_language: str = "eng"  # Used when "auto" has nothing to fall back to

    def __post_init__(self):
        """Validate configuration."""
        valid_backends = ("profile", "langdetect")
        if self.backend not in valid_backends:
            raise ConfigurationError(
                f"backend must be one of {valid_backends}, got {self.backend!r}"
            )
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigurationError(
                f"min_confidence must be between 0.0 and 1.0, got {self.min_confidence}"
            )
        if self.min_chars < 1:
            raise ConfigurationError(f"min_chars must be >= 1, got {self.min_chars}")
        if self.profile_words < 1:
            raise ConfigurationError(f"profile_words must be >= 1, got {self.profile_words}")
        if not 1 <= self.max_ngram <= 5:
            raise ConfigurationError(f"max_ngram must be between 1 and 5, got {self.max_ngram}")


@dataclass
class CheckConfig:
    """
    Configuration for a check session.

    Example:
        >>> config = CheckConfig(
        ...     language="auto",
        ...     custom_dir=Path("~/.atomspell").expanduser(),
        ...     hyphen_policy="split",
        ... )
        >>> session = CheckSession(config=config)
    """

    # Language ("auto" or a registry code such as "eng" / "en")
    language: str = "eng"

    # Resources
    dictionary_dir: Path | None = None  # <code>.txt word lists, preferred over bundles
    custom_dir: Path | None = None  # user_<scope>.txt custom word lists
    use_bundled: bool = True  # Fall back to pyspellchecker's frequency lists

    # Tokenization
    hyphen_policy: Literal["keep", "split"] = "keep"

    # Checking policy
    min_word_length: int = 2  # Shorter tokens are always accepted
    ignore_all_caps: bool = True  # Acronyms such as "NASA"
    proper_nouns: set[str] = field(default_factory=set)  # Literal-case exceptions

    # Scheduling
    debounce_seconds: float = 0.15
    max_workers: int = 2
    cache_size: int = 10_000  # Entries per lookup and suggestion cache

    # Statistics
    words_per_minute: int = 200

    suggestions: SuggestionConfig = field(default_factory=SuggestionConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)

    def __post_init__(self):
        """Validate configuration."""
        valid_hyphen_policies = ("keep", "split")
        if self.hyphen_policy not in valid_hyphen_policies:
            raise ConfigurationError(
                f"hyphen_policy must be one of {valid_hyphen_policies}, "
                f"got {self.hyphen_policy!r}"
            )
        if self.min_word_length < 1:
            raise ConfigurationError(f"min_word_length must be >= 1, got {self.min_word_length}")
        if self.debounce_seconds < 0:
            raise ConfigurationError(
                f"debounce_seconds must be >= 0, got {self.debounce_seconds}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.cache_size < 1:
            raise ConfigurationError(f"cache_size must be >= 1, got {self.cache_size}")
        if self.words_per_minute <= 0:
            raise ConfigurationError(
                f"words_per_minute must be > 0, got {self.words_per_minute}"
            )
        if self.dictionary_dir is not None:
            self.dictionary_dir = Path(self.dictionary_dir)
        if self.custom_dir is not None:
            self.custom_dir = Path(self.custom_dir)
