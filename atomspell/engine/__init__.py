"""
Spell-checking engine.

Components:
- Dictionary store with pyspellchecker-backed and file-based word lists
- Script-aware tokenizer with incremental re-tokenization
- Character n-gram language detector
- Suggestion engine (symspellpy candidates, rapidfuzz Damerau-Levenshtein)
- Document statistics
- Debounced, revision-guarded check session

Example:
    >>> from atomspell.engine import CheckSession, DictionaryStore
    >>> store = DictionaryStore()
    >>> with CheckSession(store) as session:
    ...     session.set_text("Teh quick brown fox")
    ...     result = session.check_now()
    >>> [m.word for m in result.misspellings]
    ['Teh']
"""

from atomspell.engine.analyzer import DocumentAnalyzer
from atomspell.engine.custom_words import GLOBAL_SCOPE, CustomWordList
from atomspell.engine.detector import LanguageDetector
from atomspell.engine.dictionary import (
    Dictionary,
    DictionaryStore,
    parse_word_list,
)
from atomspell.engine.search import SearchOptions
from atomspell.engine.session import CheckSession, PassJob
from atomspell.engine.suggest import SuggestionEngine, damerau_levenshtein
from atomspell.engine.tokenizer import Tokenizer, coalesce_edits

__all__ = [
    # Session
    "CheckSession",
    "PassJob",
    # Dictionaries
    "Dictionary",
    "DictionaryStore",
    "CustomWordList",
    "GLOBAL_SCOPE",
    "parse_word_list",
    # Components
    "Tokenizer",
    "coalesce_edits",
    "LanguageDetector",
    "SuggestionEngine",
    "damerau_levenshtein",
    "DocumentAnalyzer",
    "SearchOptions",
]
