"""
Dictionary store: loading, caching and lookup of per-language word sets.

Built-in dictionaries come from one of two read-only resources:

- ``<dictionary_dir>/<code>.txt``: a plain word list, one entry per line,
  optionally followed by a frequency weight (``word<TAB>count``).
- The frequency lists bundled with pyspellchecker, for the languages it
  ships (English, French, Spanish, German, Italian, Portuguese, Dutch,
  Russian, Arabic, Persian, Latvian, Basque).

A loaded Dictionary is immutable and shared by every session that uses
the same store. User custom words live in separate CustomWordList objects
and are unioned with a dictionary at lookup time, never merged into it.
"""

from __future__ import annotations

import hashlib
import logging
import math
import threading
import time
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from symspellpy import SymSpell, Verbosity

from atomspell.engine.custom_words import GLOBAL_SCOPE, CustomWordList, custom_list_path
from atomspell.exceptions import (
    CustomWordListIOError,
    DictionaryLoadError,
)
from atomspell.languages import LANGUAGES, Language, resolve_language
from atomspell.models import Notice, normalize_form

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

RESOURCE_SUFFIX = ".txt"
COMMENT_PREFIX = "#"


# =============================================================================
# WORD-LIST PARSING
# =============================================================================


@dataclass
class ParsedWordList:
    """Entries of a word-list resource."""

    entries: list[tuple[str, float | None]] = field(default_factory=list)
    skipped_lines: int = 0


def parse_word_list(data: bytes) -> ParsedWordList:
    """
    Parse a word-list resource.

    Blank lines and ``#`` comments are ignored. Lines that cannot be
    decoded, carry more than two fields, a non-numeric or negative weight,
    or no letter at all are skipped and counted.

    Args:
        data: Raw file content.

    Returns:
        ParsedWordList with (word, weight or None) entries in file order.

    Example:
        >>> parse_word_list(b"the 500\\nspelling\\t10\\n42\\n").entries
        [('the', 500.0), ('spelling', 10.0)]
    """
    parsed = ParsedWordList()
    for raw in data.splitlines():
        try:
            line = raw.decode("utf-8").lstrip("\ufeff").strip()
        except UnicodeDecodeError:
            parsed.skipped_lines += 1
            continue
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        fields = line.split()
        if len(fields) > 2 or not any(ch.isalpha() for ch in fields[0]):
            parsed.skipped_lines += 1
            continue

        weight = None
        if len(fields) == 2:
            try:
                weight = float(fields[1])
            except ValueError:
                parsed.skipped_lines += 1
                continue
            if weight < 0 or math.isnan(weight) or math.isinf(weight):
                parsed.skipped_lines += 1
                continue

        parsed.entries.append((fields[0], weight))
    return parsed


def _checksum_counts(counts: dict[str, int]) -> str:
    digest = hashlib.sha256()
    for word in sorted(counts):
        digest.update(f"{word}\t{counts[word]}\n".encode())
    return digest.hexdigest()


# =============================================================================
# DICTIONARY
# =============================================================================


@dataclass(eq=False)
class Dictionary:
    """
    An immutable, case-folded word set for one language.

    Attributes:
        language: Language this dictionary checks.
        entries: Case-folded forms in source order, duplicates collapsed.
        frequencies: Weight per form; empty if the source carried none,
            in which case weights come from wordfreq on demand.
        display_forms: Original spelling for forms whose source casing
            differs from the folded form ("Paris", "Straße").
        source: Where the words came from.
        checksum: SHA-256 of the source, for re-verification.
        skipped_lines: Malformed source lines that were ignored.

    Example:
        >>> d = Dictionary.from_words(resolve_language("eng"), ["Paris", "speling"])
        >>> d.lookup("PARIS"), d.lookup("paris"), d.display("paris")
        (True, True, 'Paris')
    """

    language: Language
    entries: tuple[str, ...]
    frequencies: dict[str, float] = field(default_factory=dict)
    display_forms: dict[str, str] = field(default_factory=dict)
    source: str = "memory"
    checksum: str = ""
    skipped_lines: int = 0

    def __post_init__(self) -> None:
        self.words = frozenset(self.entries)
        self._indexes: dict[tuple[int, int], SymSpell] = {}
        self._index_lock = threading.Lock()
        self._fallback_weights: dict[str, float] = {}
        # wordfreq needs its optional jieba/MeCab tokenizers for CJK lookups
        self._wordfreq_supported = self.language.script.family not in ("cjk", "hangul")
        self._longest: int | None = None

    @classmethod
    def from_words(
        cls,
        language: Language,
        words: Iterable[str],
        frequencies: dict[str, float] | None = None,
        source: str = "memory",
    ) -> Dictionary:
        """Build a dictionary from in-memory words (weights keyed by word)."""
        entries = [(word, (frequencies or {}).get(word)) for word in words]
        return _build_dictionary(language, entries, source=source, checksum="", skipped=0)

    def lookup(self, word: str) -> bool:
        """
        Check membership, ignoring case.

        The literal input form is accepted too, so capitalized entries
        still match exactly as written.
        """
        return normalize_form(word) in self.words or word in self.words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.lookup(word)

    def __len__(self) -> int:
        return len(self.entries)

    def display(self, form: str) -> str:
        """Spelling to show for a case-folded form."""
        return self.display_forms.get(form, form)

    def segmentable(self, form: str, extra_words: Collection[str] = ()) -> bool:
        """
        Whether a case-folded run splits entirely into dictionary words.

        Used for scripts written without spaces, where a token is a whole
        run of characters rather than one word.

        Args:
            form: The case-folded run.
            extra_words: Further accepted forms (custom or ignored words)
                that may make up parts of the run.

        Example:
            >>> zho = Dictionary.from_words(resolve_language("zho"), ["我们", "是", "学生"])
            >>> zho.segmentable("我们是学生"), zho.segmentable("我们是老师")
            (True, False)
            >>> zho.segmentable("我们是老师", {"老师"})
            True
        """
        if self._longest is None:
            self._longest = max((len(entry) for entry in self.entries), default=0)
        longest = max([self._longest, *(len(word) for word in extra_words)])
        if not longest:
            return False
        n = len(form)
        reachable = [True] + [False] * n
        for end in range(1, n + 1):
            for start in range(max(0, end - longest), end):
                if not reachable[start]:
                    continue
                part = form[start:end]
                if part in self.words or part in extra_words:
                    reachable[end] = True
                    break
        return reachable[n]

    def frequency(self, form: str) -> float:
        """
        Frequency weight of a case-folded form.

        Returns:
            The source weight, or the wordfreq Zipf frequency (0-8 scale)
            when the source carried no weights, or 0.0 if neither is known.
            Chinese, Japanese and Korean lists without weights rank by
            distance and spelling only.
        """
        if self.frequencies:
            return self.frequencies.get(form, 0.0)
        cached = self._fallback_weights.get(form)
        if cached is not None:
            return cached
        if not self._wordfreq_supported:
            return 0.0

        from wordfreq import zipf_frequency

        try:
            weight = zipf_frequency(form, self.language.iso639_1)
        except LookupError:
            logger.info("wordfreq has no list for %s; frequency weights disabled", self.language)
            self._wordfreq_supported = False
            return 0.0
        self._fallback_weights[form] = weight
        return weight

    def top_words(self, n: int) -> list[str]:
        """
        The ``n`` most frequent forms.

        Without source weights the source order is used, since word lists
        are conventionally sorted by frequency.
        """
        if not self.frequencies:
            return list(self.entries[:n])
        ranked = sorted(self.entries, key=lambda form: (-self.frequencies.get(form, 0.0), form))
        return ranked[:n]

    def deletion_index(self, max_distance: int, prefix_length: int) -> SymSpell:
        """
        symspellpy deletion-variant index for suggestions, built on first use
        and cached per parameter set.

        Safe to call from several check passes at once.
        """
        key = (max_distance, prefix_length)
        index = self._indexes.get(key)
        if index is None:
            with self._index_lock:
                index = self._indexes.get(key)
                if index is None:
                    index = self._build_index(max_distance, prefix_length)
                    self._indexes[key] = index
        return index

    def _build_index(self, max_distance: int, prefix_length: int) -> SymSpell:
        started = time.perf_counter()
        index = SymSpell(max_dictionary_edit_distance=max_distance, prefix_length=prefix_length)
        for form in self.entries:
            # Ranking uses this dictionary's own weights, not SymSpell counts
            index.create_dictionary_entry(form, 1)
        logger.debug(
            "Built deletion index for %s: %d words in %.0f ms",
            self.language,
            len(self.entries),
            (time.perf_counter() - started) * 1000,
        )
        return index

    def candidates(self, form: str, max_distance: int, prefix_length: int = 7) -> set[str]:
        """
        Forms within ``max_distance`` edits of a case-folded ``form``.

        Only the first ``prefix_length`` characters are indexed, so a
        candidate whose edits all lie beyond the prefix is still found.
        Candidates are exact under SymSpell's distance and are rescored by
        the suggestion engine.

        Example:
            >>> sorted(english.candidates("speling", 2))
            ['smelling', 'spelling', 'spewing']
        """
        index = self.deletion_index(max_distance, prefix_length)
        return {
            item.term
            for item in index.lookup(form, Verbosity.ALL, max_edit_distance=max_distance)
            if item.term != form
        }


def _build_dictionary(
    language: Language,
    entries: Iterable[tuple[str, float | None]],
    source: str,
    checksum: str,
    skipped: int,
) -> Dictionary:
    forms: dict[str, None] = {}
    frequencies: dict[str, float] = {}
    display_forms: dict[str, str] = {}
    weighted = False

    for word, weight in entries:
        form = normalize_form(word)
        if form not in forms:
            forms[form] = None
            if word != form:
                display_forms[form] = word
        elif word == form:
            # A lowercase entry wins over an earlier capitalized one
            display_forms.pop(form, None)
        if weight is not None:
            weighted = True
            frequencies[form] = frequencies.get(form, 0.0) + weight

    return Dictionary(
        language=language,
        entries=tuple(forms),
        frequencies=frequencies if weighted else {},
        display_forms=display_forms,
        source=source,
        checksum=checksum,
        skipped_lines=skipped,
    )


# =============================================================================
# DICTIONARY STORE
# =============================================================================


class DictionaryStore:
    """
    Loads, caches and overlays dictionaries.

    One store can back any number of check sessions: dictionaries are
    cached by language code and read-only once loaded. Custom word lists
    are mutated only through the store's add/remove methods, which the
    sessions call from the foreground thread.

    Load and persistence failures of custom lists are recovered here:
    they are logged, recorded as notices (see ``drain_notices``) and the
    affected list continues in memory.

    Attributes:
        dictionary_dir: Directory of ``<code>.txt`` word lists.
        custom_dir: Directory of ``user_<scope>.txt`` custom lists.
        use_bundled: Whether pyspellchecker's bundled lists may be used.
        proper_nouns: Literal-case words accepted in every language.

    Example:
        >>> store = DictionaryStore(dictionary_dir=Path("dictionaries"))
        >>> english = store.load("en")
        >>> store.lookup(english, "Hello")
        True
        >>> store.add_custom_word("AtomSpell", "eng")
        True
        >>> store.lookup(english, "atomspell", store.custom_snapshot("eng"))
        True
    """

    def __init__(
        self,
        dictionary_dir: Path | None = None,
        custom_dir: Path | None = None,
        use_bundled: bool = True,
        proper_nouns: Iterable[str] | None = None,
    ):
        self.dictionary_dir = Path(dictionary_dir) if dictionary_dir else None
        self.custom_dir = Path(custom_dir) if custom_dir else None
        self.use_bundled = use_bundled
        self.proper_nouns = frozenset(proper_nouns or ())
        self._dictionaries: dict[str, Dictionary] = {}
        self._custom: dict[str, CustomWordList] = {}
        self._notices: list[Notice] = []
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config) -> DictionaryStore:
        """Create a store from a CheckConfig."""
        return cls(
            dictionary_dir=config.dictionary_dir,
            custom_dir=config.custom_dir,
            use_bundled=config.use_bundled,
            proper_nouns=config.proper_nouns,
        )

    # -------------------------------------------------------------------------
    # Built-in dictionaries
    # -------------------------------------------------------------------------

    def load(self, language: str | Language) -> Dictionary:
        """
        Load (or fetch from cache) the dictionary for a language.

        Args:
            language: Language or language code.

        Returns:
            The immutable Dictionary.

        Raises:
            UnsupportedLanguageError: If the code is unknown.
            DictionaryLoadError: If no resource exists or it holds no words.
        """
        if not isinstance(language, Language):
            language = resolve_language(language)

        with self._lock:
            cached = self._dictionaries.get(language.code)
            if cached is not None:
                return cached
            dictionary = self._load_uncached(language)
            self._dictionaries[language.code] = dictionary

        logger.info(
            "Loaded %d words for %s from %s (%d lines skipped)",
            len(dictionary),
            language,
            dictionary.source,
            dictionary.skipped_lines,
        )
        return dictionary

    def _resource_path(self, language: Language) -> Path | None:
        if self.dictionary_dir is None:
            return None
        path = self.dictionary_dir / f"{language.code}{RESOURCE_SUFFIX}"
        return path if path.exists() else None

    def _load_uncached(self, language: Language) -> Dictionary:
        path = self._resource_path(language)
        if path is not None:
            return self._load_file(language, path)
        if self.use_bundled and language.bundle:
            return self._load_bundle(language)
        raise DictionaryLoadError(
            language.code, f"No dictionary resource for {language.code!r} ({language.name})"
        )

    def _load_file(self, language: Language, path: Path) -> Dictionary:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DictionaryLoadError(language.code, f"Cannot read {path}: {e}") from e

        parsed = parse_word_list(data)
        if not parsed.entries:
            raise DictionaryLoadError(language.code, f"No valid entries in {path}")
        if parsed.skipped_lines:
            logger.warning("Skipped %d malformed lines in %s", parsed.skipped_lines, path)

        return _build_dictionary(
            language,
            parsed.entries,
            source=str(path),
            checksum=hashlib.sha256(data).hexdigest(),
            skipped=parsed.skipped_lines,
        )

    def _bundle_counts(self, language: Language) -> dict[str, int]:
        from spellchecker import SpellChecker

        try:
            spell = SpellChecker(language=language.bundle, distance=1)
        except (ValueError, OSError) as e:
            raise DictionaryLoadError(
                language.code, f"Bundled dictionary for {language.code!r} unavailable: {e}"
            ) from e
        return dict(spell.word_frequency.dictionary)

    def _load_bundle(self, language: Language) -> Dictionary:
        counts = self._bundle_counts(language)
        if not counts:
            raise DictionaryLoadError(
                language.code, f"Bundled dictionary for {language.code!r} is empty"
            )
        return _build_dictionary(
            language,
            ((word, float(count)) for word, count in counts.items()),
            source=f"pyspellchecker:{language.bundle}",
            checksum=_checksum_counts(counts),
            skipped=0,
        )

    def verify(self, dictionary: Dictionary) -> bool:
        """
        Re-read a dictionary's source and compare checksums.

        Returns:
            True if the source is unchanged since loading.
        """
        if dictionary.source.startswith("pyspellchecker:"):
            current = _checksum_counts(self._bundle_counts(dictionary.language))
        elif dictionary.source == "memory":
            return True
        else:
            try:
                current = hashlib.sha256(Path(dictionary.source).read_bytes()).hexdigest()
            except OSError as e:
                logger.warning("Cannot re-read %s: %s", dictionary.source, e)
                return False
        return current == dictionary.checksum

    def is_loaded(self, language: str) -> bool:
        """Whether a language is already cached."""
        return resolve_language(language).code in self._dictionaries

    def evict(self, language: str) -> None:
        """Drop a cached dictionary so the next load re-reads its resource."""
        with self._lock:
            self._dictionaries.pop(resolve_language(language).code, None)

    def available_languages(self) -> list[Language]:
        """Languages with a resource this store can load."""
        available = []
        for language in LANGUAGES:
            if language.code in self._dictionaries or self._resource_path(language):
                available.append(language)
            elif self.use_bundled and language.bundle:
                available.append(language)
        return available

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup(
        self,
        dictionary: Dictionary | None,
        word: str,
        custom: Collection[str] | None = None,
    ) -> bool:
        """
        Check a word against a dictionary, custom words and proper nouns.

        Args:
            dictionary: Active dictionary, or None if none could be loaded.
            word: Word as written in the text.
            custom: Case-folded custom forms (see ``custom_snapshot``);
                defaults to the live lists for the dictionary's language.

        Returns:
            True if the word is spelled correctly.
        """
        if word in self.proper_nouns:
            return True
        if dictionary is not None and dictionary.lookup(word):
            return True
        if custom is None:
            scope = dictionary.language.code if dictionary is not None else GLOBAL_SCOPE
            custom = self.custom_snapshot(scope)
        return normalize_form(word) in custom

    # -------------------------------------------------------------------------
    # Custom words
    # -------------------------------------------------------------------------

    def _scope(self, scope: str | Language | None) -> str:
        if scope is None or scope == GLOBAL_SCOPE:
            return GLOBAL_SCOPE
        if isinstance(scope, Language):
            return scope.code
        return resolve_language(scope).code

    def custom_words(self, scope: str | Language | None = GLOBAL_SCOPE) -> CustomWordList:
        """
        The custom list for a scope, loading it on first access.

        A list that cannot be read starts empty and stays in memory only.
        """
        scope = self._scope(scope)
        with self._lock:
            words = self._custom.get(scope)
            if words is not None:
                return words

            path = custom_list_path(self.custom_dir, scope) if self.custom_dir else None
            words = CustomWordList(scope, path)
            try:
                skipped = words.load()
            except CustomWordListIOError as e:
                self._degrade(words, e)
            else:
                if skipped:
                    self._notify(
                        "warning",
                        "custom_words_io",
                        f"Skipped {skipped} unreadable entries in custom words for {scope}",
                    )
            self._custom[scope] = words
            return words

    def custom_snapshot(self, language: str | Language | None) -> frozenset[str]:
        """Frozen union of a language's custom words and the global ones."""
        snapshot = self.custom_words(GLOBAL_SCOPE).snapshot()
        if language is not None and language != GLOBAL_SCOPE:
            snapshot = snapshot | self.custom_words(language).snapshot()
        return snapshot

    def add_custom_word(self, word: str, scope: str | Language | None = GLOBAL_SCOPE) -> bool:
        """
        Accept a word in a scope. Idempotent.

        Returns:
            True if the word was new to that scope.
        """
        words = self.custom_words(scope)
        try:
            return words.add(word)
        except CustomWordListIOError as e:
            self._degrade(words, e)
            return True

    def remove_custom_word(self, word: str, scope: str | Language | None = GLOBAL_SCOPE) -> bool:
        """
        Stop accepting a word in a scope.

        Returns:
            True if the word was present.
        """
        words = self.custom_words(scope)
        try:
            return words.remove(word)
        except CustomWordListIOError as e:
            self._degrade(words, e)
            return True

    def import_words(self, path: Path, scope: str | Language | None = GLOBAL_SCOPE) -> int:
        """
        Merge a word-list file into a custom list.

        Returns:
            Number of words that were new.

        Raises:
            CustomWordListIOError: If ``path`` cannot be read.
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise CustomWordListIOError(f"Cannot read {path}: {e}") from e

        entries = parse_word_list(data).entries
        added = sum(1 for word, _ in entries if self.add_custom_word(word, scope))
        logger.info("Imported %d new custom words into %s", added, self._scope(scope))
        return added

    def export_words(self, scope: str | Language | None, path: Path) -> int:
        """
        Write a custom list to ``path``.

        Returns:
            Number of words written.

        Raises:
            CustomWordListIOError: If ``path`` cannot be written.
        """
        words = sorted(self.custom_words(scope))
        try:
            Path(path).write_text("".join(f"{word}\n" for word in words), encoding="utf-8")
        except OSError as e:
            raise CustomWordListIOError(f"Cannot write {path}: {e}") from e
        return len(words)

    # -------------------------------------------------------------------------
    # Notices
    # -------------------------------------------------------------------------

    def _degrade(self, words: CustomWordList, error: CustomWordListIOError) -> None:
        words.persistent = False
        logger.warning("%s; custom words for %s kept in memory only", error, words.scope)
        self._notify(
            "warning",
            "custom_words_io",
            f"Custom words for {words.scope} cannot be saved and will last for this session only",
        )

    def _notify(self, level: str, kind: str, message: str) -> None:
        with self._lock:
            self._notices.append(Notice(level, kind, message))

    def drain_notices(self) -> list[Notice]:
        """Return and clear notices recorded since the last call."""
        with self._lock:
            notices, self._notices = self._notices, []
        return notices


__all__ = [
    "Dictionary",
    "DictionaryStore",
    "ParsedWordList",
    "parse_word_list",
]
