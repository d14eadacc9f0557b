"""
AtomSpell: multilingual spell checking for text editors.

Checks text as it is typed against per-language dictionaries and user
custom word lists, suggests corrections, detects the document language
and reports writing statistics. Checking runs on background workers and
is debounced and revision-guarded, so an editor never blocks on it and
never shows results for text that has since changed.

Example:
    >>> import atomspell
    >>> with atomspell.CheckSession(config=atomspell.CheckConfig(language="auto")) as session:
    ...     session.set_text("Ceci est un texte écrit en françai.")
    ...     session.wait()
    ...     print(session.language, [m.word for m in session.get_misspellings()])
    French (fra) ['françai']
"""

from atomspell.config import (
    AUTO_LANGUAGE,
    CheckConfig,
    DetectionConfig,
    SuggestionConfig,
)
from atomspell.engine import (
    CheckSession,
    Dictionary,
    DictionaryStore,
    DocumentAnalyzer,
    LanguageDetector,
    SearchOptions,
    SuggestionEngine,
    Tokenizer,
)
from atomspell.exceptions import (
    AtomSpellError,
    ConfigurationError,
    CustomWordListIOError,
    DictionaryLoadError,
    InvalidPatternError,
    StaleSpanError,
    UnsupportedLanguageError,
)
from atomspell.languages import (
    LANGUAGES,
    Language,
    Script,
    is_supported,
    resolve_language,
)
from atomspell.models import (
    CheckResult,
    Detection,
    DocumentStats,
    MatchSpan,
    Misspelling,
    Notice,
    SessionState,
    Suggestion,
    Token,
)

__version__ = "0.1.0"
__all__ = [
    # Main API
    "CheckSession",
    "DictionaryStore",
    "Dictionary",
    # Configuration
    "AUTO_LANGUAGE",
    "CheckConfig",
    "SuggestionConfig",
    "DetectionConfig",
    # Components
    "Tokenizer",
    "LanguageDetector",
    "SuggestionEngine",
    "DocumentAnalyzer",
    "SearchOptions",
    # Languages
    "LANGUAGES",
    "Language",
    "Script",
    "resolve_language",
    "is_supported",
    # Results
    "Token",
    "Misspelling",
    "Suggestion",
    "MatchSpan",
    "Notice",
    "DocumentStats",
    "Detection",
    "CheckResult",
    "SessionState",
    # Exceptions
    "AtomSpellError",
    "DictionaryLoadError",
    "UnsupportedLanguageError",
    "CustomWordListIOError",
    "ConfigurationError",
    "InvalidPatternError",
    "StaleSpanError",
]
