"""
Check session: the editor-facing spell-checking state machine.

A session owns one document's text and drives checking in the background:

    IDLE --edit--> CHECKING --debounce fires--> pass on worker --commit--> IDLE
      |                                                                     ^
      +--set_language--> LANGUAGE_SWITCHING --dictionary loaded-------------+

Every text change bumps the session revision. A check pass snapshots the
text, revision, dictionary and custom words on the foreground thread,
runs on a worker thread, and its result is committed only if the
revision has not moved on in the meantime. Results therefore appear in
revision order even when passes finish out of order, and a burst of
keystrokes costs one pass.

Example:
    >>> with CheckSession(store, CheckConfig(language="eng")) as session:
    ...     session.set_text("Helo world")
    ...     session.wait()
    ...     [m.word for m in session.get_misspellings()]
    ['Helo']
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, replace

from cachetools import LRUCache

from atomspell.config import AUTO_LANGUAGE, CheckConfig
from atomspell.engine.analyzer import DocumentAnalyzer
from atomspell.engine.custom_words import GLOBAL_SCOPE, sanitize_word
from atomspell.engine.detector import LanguageDetector
from atomspell.engine.dictionary import Dictionary, DictionaryStore
from atomspell.engine.search import (
    SearchOptions,
    check_span,
    find_all,
    plan_replacements,
)
from atomspell.engine.suggest import SuggestionEngine
from atomspell.engine.tokenizer import Tokenizer, coalesce_edits
from atomspell.exceptions import AtomSpellError, DictionaryLoadError
from atomspell.languages import Language, resolve_language
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
    normalize_form,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass(frozen=True)
class PassJob:
    """Snapshot a check pass works on, taken on the foreground thread."""

    revision: int
    text: str
    language: Language | None
    dictionary: Dictionary | None
    auto: bool
    base_tokens: tuple[Token, ...] | None  # None = tokenize from scratch
    edit: tuple[int, int, int] | None  # Coalesced (start, base_end, inserted_length)
    custom: frozenset[str]
    ignored: frozenset[str]
    custom_version: int


# =============================================================================
# CHECK SESSION
# =============================================================================


class CheckSession:
    """
    Spell-checks one document as it is edited.

    All public methods are called from the foreground (editor) thread and
    return immediately; checking happens on a worker pool. Use ``wait()``
    or ``check_now()`` where a caller needs results synchronously.

    Args:
        store: Dictionary store to check against; one store may back many
            sessions. Created from ``config`` if not given.
        config: Session configuration.
        executor: Worker pool for check passes. A private
            ThreadPoolExecutor is created (and shut down on close) if not
            given.
        detector: Language detector for "auto" mode.
        engine: Suggestion engine.
        analyzer: Document statistics.
        tokenizer: Tokenizer shared by checking and statistics.

    Raises:
        UnsupportedLanguageError: If ``config.language`` is unknown.
    """

    def __init__(
        self,
        store: DictionaryStore | None = None,
        config: CheckConfig | None = None,
        *,
        executor: Executor | None = None,
        detector: LanguageDetector | None = None,
        engine: SuggestionEngine | None = None,
        analyzer: DocumentAnalyzer | None = None,
        tokenizer: Tokenizer | None = None,
    ):
        self.config = config or CheckConfig()
        self.store = store or DictionaryStore.from_config(self.config)
        self.tokenizer = tokenizer or Tokenizer(self.config.hyphen_policy)
        self.detector = detector or LanguageDetector(self.store, self.config.detection)
        self.engine = engine or SuggestionEngine(self.config.suggestions)
        self.analyzer = analyzer or DocumentAnalyzer(self.config.words_per_minute)

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="atomspell-check"
        )
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._timer: threading.Timer | None = None
        self._inflight = 0
        self._closed = False

        # Document
        self._text = ""
        self._revision = 0
        self._edits: list[tuple[int, int, int, int]] = []  # (revision, start, end, inserted)
        self._full_revision = 0  # Latest revision that invalidated the token stream

        # Committed results
        self._committed_revision = 0
        self._tokens: tuple[Token, ...] = ()
        self._misspellings: tuple[Misspelling, ...] = ()
        self._stats = DocumentStats()
        self._detection: Detection | None = None
        self._state = SessionState.IDLE
        self._notices: list[Notice] = []

        # Language
        self._ignored: set[str] = set()
        self._custom_version = 0
        # Shared with worker threads; guarded by _cache_lock
        self._cache_lock = threading.Lock()
        self._known_cache: LRUCache = LRUCache(self.config.cache_size)  # (lang, text) -> bool
        self._suggestion_cache: LRUCache = LRUCache(self.config.cache_size)  # (lang, version, word)

        self._auto = self.config.language.strip().lower() == AUTO_LANGUAGE
        initial = self.config.detection.fallback_language if self._auto else self.config.language
        self._language: Language | None = resolve_language(initial)
        self._dictionary: Dictionary | None = None
        try:
            self._dictionary = self.store.load(self._language)
        except DictionaryLoadError as e:
            logger.warning("Cannot load dictionary for %s: %s", self._language, e)
            self._notices.append(Notice("warning", "dictionary_load", str(e)))
            if self._auto:
                self._language = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def committed_revision(self) -> int:
        """Revision the current misspellings and statistics belong to."""
        return self._committed_revision

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def language(self) -> Language | None:
        """Active language; None if no dictionary could be loaded in auto mode."""
        return self._language

    @property
    def auto_detect(self) -> bool:
        return self._auto

    @property
    def dictionary(self) -> Dictionary | None:
        return self._dictionary

    @property
    def detection(self) -> Detection | None:
        """Outcome of the last committed detection (auto mode only)."""
        return self._detection

    @property
    def tokens(self) -> tuple[Token, ...]:
        """Committed token stream."""
        return self._tokens

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def set_text(self, text: str) -> int:
        """
        Replace the whole document.

        Returns:
            The new revision.
        """
        with self._lock:
            self._text = text
            self._revision += 1
            self._full_revision = self._revision
            self._edits.clear()
            self._schedule()
            return self._revision

    def apply_edit(self, start: int, end: int, replacement: str) -> int:
        """
        Replace ``text[start:end]`` with ``replacement``.

        Args:
            start: Start of the replaced range.
            end: End of the replaced range (equal to start for an insertion).
            replacement: New text ("" for a deletion).

        Returns:
            The new revision.

        Raises:
            ValueError: If the range is outside the text.
        """
        with self._lock:
            if not 0 <= start <= end <= len(self._text):
                raise ValueError(
                    f"Edit range [{start}, {end}) outside text of length {len(self._text)}"
                )
            self._text = self._text[:start] + replacement + self._text[end:]
            self._revision += 1
            self._edits.append((self._revision, start, end, len(replacement)))
            self._schedule()
            return self._revision

    # -------------------------------------------------------------------------
    # Language
    # -------------------------------------------------------------------------

    def set_language(self, code: str) -> Language | None:
        """
        Switch the checking language, or enable detection with "auto".

        Args:
            code: Language code or "auto".

        Returns:
            The active language afterwards. If the dictionary cannot be
            loaded the previous language stays active and a warning
            notice is recorded.

        Raises:
            UnsupportedLanguageError: If ``code`` is unknown. The session
                is left unchanged.
        """
        if code.strip().lower() == AUTO_LANGUAGE:
            with self._lock:
                if not self._auto:
                    self._auto = True
                    self._invalidate_language()
                return self._language

        language = resolve_language(code)
        with self._lock:
            if language == self._language and not self._auto and self._dictionary is not None:
                return self._language
            previous_state = self._state
            self._state = SessionState.LANGUAGE_SWITCHING

        try:
            dictionary = self.store.load(language)
        except DictionaryLoadError as e:
            logger.warning("Keeping %s: %s", self._language, e)
            with self._lock:
                self._notices.append(Notice("warning", "dictionary_load", str(e)))
                self._state = previous_state
                self._idle.notify_all()
            return self._language

        with self._lock:
            self._auto = False
            self._language = language
            self._dictionary = dictionary
            self._invalidate_language()
            logger.info("Checking language set to %s", language)
            return self._language

    def _invalidate_language(self) -> None:
        self._clear_caches()
        self._revision += 1
        self._full_revision = self._revision
        self._schedule()

    # -------------------------------------------------------------------------
    # Custom words
    # -------------------------------------------------------------------------

    def _custom_scope(self, scope: str | None) -> str:
        if scope is not None:
            return scope
        return self._language.code if self._language is not None else GLOBAL_SCOPE

    def add_custom_word(self, word: str, scope: str | None = None) -> bool:
        """
        Accept ``word`` from now on and clear its current misspellings.

        Args:
            word: Word to accept.
            scope: Language code or "global"; defaults to the active language.

        Returns:
            True if the word was new to that scope.
        """
        with self._lock:
            scope = self._custom_scope(scope)
            added = self.store.add_custom_word(word, scope)
            self._custom_version += 1
            with self._cache_lock:
                self._suggestion_cache.clear()
            if self._scope_active(scope):
                self._drop_misspellings({normalize_form(sanitize_word(word))})
            return added

    def remove_custom_word(self, word: str, scope: str | None = None) -> bool:
        """
        Stop accepting ``word``; the document is re-checked.

        Returns:
            True if the word was present.
        """
        with self._lock:
            removed = self.store.remove_custom_word(word, self._custom_scope(scope))
            if removed:
                self._custom_version += 1
                with self._cache_lock:
                    self._suggestion_cache.clear()
                self._revision += 1
                self._schedule()
            return removed

    def ignore_word(self, word: str) -> None:
        """Accept ``word`` for the rest of this session only."""
        with self._lock:
            form = normalize_form(word)
            self._ignored.add(form)
            self._drop_misspellings({form})

    def clear_ignored_words(self) -> None:
        """Forget the words accepted with ``ignore_word``; the document is re-checked."""
        with self._lock:
            if not self._ignored:
                return
            self._ignored.clear()
            self._revision += 1
            self._schedule()

    def _scope_active(self, scope: str) -> bool:
        if scope == GLOBAL_SCOPE:
            return True
        return self._language is not None and resolve_language(scope) == self._language

    def _drop_misspellings(self, forms: set[str]) -> None:
        accepted = self.store.custom_snapshot(self._language) | self._ignored | forms
        kept = tuple(m for m in self._misspellings if not self._accepted(m.token, accepted))
        if len(kept) != len(self._misspellings):
            self._misspellings = kept
            self._stats = self.analyzer.analyze(self._tokens, kept, self._stats.language)

    def _accepted(self, token: Token, accepted: frozenset[str] | set[str]) -> bool:
        """Whether custom or ignored words now accept a flagged token."""
        if token.form in accepted:
            return True
        if token.script.space_delimited or self._dictionary is None:
            return False
        return self._dictionary.segmentable(token.form, accepted)

    def _clear_caches(self) -> None:
        with self._cache_lock:
            self._known_cache.clear()
            self._suggestion_cache.clear()

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def get_misspellings(self) -> list[Misspelling]:
        """Misspellings of the last committed revision, in text order."""
        with self._lock:
            return list(self._misspellings)

    def get_statistics(self) -> DocumentStats:
        """Statistics of the last committed revision."""
        with self._lock:
            return self._stats

    def get_suggestions(
        self, word: str | Misspelling, max_results: int | None = None
    ) -> list[Suggestion]:
        """
        Corrections for ``word`` in the active language.

        Args:
            word: A word, or a Misspelling from ``get_misspellings``.
            max_results: Cap on returned suggestions.

        Returns:
            Suggestions best-first; empty without an active dictionary.
        """
        if isinstance(word, Misspelling):
            word = word.word
        with self._lock:
            dictionary = self._dictionary
            custom = self.store.custom_snapshot(self._language)
            version = self._custom_version
        if dictionary is None:
            return []
        suggestions = self._suggest(word, dictionary, custom, version)
        if max_results is not None:
            suggestions = suggestions[:max_results]
        return list(suggestions)

    def drain_notices(self) -> list[Notice]:
        """Return and clear the notices recorded since the last call."""
        store_notices = self.store.drain_notices()
        with self._lock:
            notices, self._notices = self._notices + store_notices, []
        return notices

    # -------------------------------------------------------------------------
    # Search and replace
    # -------------------------------------------------------------------------

    def _current_tokens(self) -> tuple[Token, ...]:
        if self._committed_revision == self._revision:
            return self._tokens
        hint = self._language.script if self._language else None
        return tuple(self.tokenizer.tokenize(self._text, hint))

    def find_all(self, pattern: str, options: SearchOptions | None = None) -> list[MatchSpan]:
        """
        Find every match of ``pattern`` in the current text.

        Raises:
            InvalidPatternError: If ``pattern`` is not a valid expression.
        """
        options = options or SearchOptions()
        with self._lock:
            tokens = self._current_tokens() if options.whole_word else None
            return find_all(self._text, pattern, options, tokens)

    def replace(self, span: MatchSpan, text: str) -> int:
        """
        Replace a match found by ``find_all``.

        Returns:
            The new revision.

        Raises:
            StaleSpanError: If the text under ``span`` changed since.
        """
        with self._lock:
            check_span(self._text, span)
            return self.apply_edit(span.start, span.end, text)

    def replace_all(
        self, pattern: str, replacement: str, options: SearchOptions | None = None
    ) -> int:
        """
        Replace every match of ``pattern``.

        Returns:
            Number of replacements made.
        """
        options = options or SearchOptions()
        with self._lock:
            tokens = self._current_tokens() if options.whole_word else None
            planned = plan_replacements(self._text, pattern, replacement, options, tokens)
            # Back to front so earlier spans stay valid
            for span, new_text in reversed(planned):
                self.apply_edit(span.start, span.end, new_text)
            return len(planned)

    def find_similar(self, word: str, max_results: int | None = None) -> list[Suggestion]:
        """Words of the document closest to ``word``, for replace suggestions."""
        with self._lock:
            vocabulary = {token.text for token in self._current_tokens() if token.is_alpha}
        return self.engine.find_similar(word, vocabulary, max_results)

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def _schedule(self) -> None:
        """(Re)start the debounce timer. Caller holds the lock."""
        if self._closed:
            return
        if self._state != SessionState.LANGUAGE_SWITCHING:
            self._state = SessionState.CHECKING
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.config.debounce_seconds <= 0:
            self._submit()
            return
        self._timer = threading.Timer(self.config.debounce_seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
            if self._closed:
                return
            self._submit()

    def _submit(self) -> None:
        job = self.prepare_pass()
        self._inflight += 1
        logger.debug("Submitting check pass for revision %d", job.revision)
        self._executor.submit(self._run_and_commit, job)

    def _run_and_commit(self, job: PassJob) -> None:
        try:
            result = self.run_pass(job)
        except Exception as e:
            logger.exception("Check pass for revision %d failed", job.revision)
            with self._lock:
                self._inflight -= 1
                self._notices.append(Notice("error", "check_failed", f"Check failed: {e}"))
                if job.revision == self._revision and self._timer is None:
                    self._state = SessionState.IDLE
                    self._idle.notify_all()
            return

        with self._lock:
            self._inflight -= 1
            self.commit(result)

    # -------------------------------------------------------------------------
    # Check pass pipeline
    # -------------------------------------------------------------------------

    def prepare_pass(self) -> PassJob:
        """
        Snapshot everything a check pass needs.

        The token stream of the last commit is reused as the base when
        only ordinary edits happened since; their ranges are coalesced
        into one dirty range.
        """
        with self._lock:
            base = None
            edit = None
            if 0 < self._committed_revision and self._full_revision <= self._committed_revision:
                base = self._tokens
                edit = coalesce_edits(
                    (start, end, inserted)
                    for revision, start, end, inserted in self._edits
                    if self._committed_revision < revision <= self._revision
                )

            return PassJob(
                revision=self._revision,
                text=self._text,
                language=self._language,
                dictionary=self._dictionary,
                auto=self._auto,
                base_tokens=base,
                edit=edit,
                custom=self.store.custom_snapshot(self._language),
                ignored=frozenset(self._ignored),
                custom_version=self._custom_version,
            )

    def run_pass(self, job: PassJob) -> CheckResult:
        """
        Check a snapshot. Runs on a worker thread; touches no session state
        apart from the lookup caches.
        """
        started = time.perf_counter()
        language, dictionary = job.language, job.dictionary
        notices: list[Notice] = []

        detection = None
        if job.auto:
            detection = self.detector.detect(job.text, language.code if language else None)
            switched = language is None or detection.language != language.code
            if not detection.fallback and switched:
                candidate = resolve_language(detection.language)
                try:
                    dictionary = self.store.load(candidate)
                    language = candidate
                except AtomSpellError as e:
                    logger.warning("Detected %s but cannot load it: %s", candidate, e)
                    notices.append(Notice("warning", "dictionary_load", str(e)))
                    previous = job.language.code if job.language else detection.language
                    detection = replace(detection, language=previous, fallback=True)

        hint = language.script if language else None
        if job.base_tokens is None or language != job.language:
            tokens = self.tokenizer.tokenize(job.text, hint)
        elif job.edit is not None:
            start, base_end, inserted = job.edit
            tokens = self.tokenizer.retokenize(
                job.base_tokens, job.text, start, base_end, inserted, hint
            )
        else:
            tokens = list(job.base_tokens)

        misspellings = []
        if dictionary is not None:
            custom = job.custom
            if language != job.language:
                custom = self.store.custom_snapshot(language)
            for token in tokens:
                if not self._should_check(token):
                    continue
                if self._is_known(token, dictionary, custom, job.ignored):
                    continue
                suggestions = self._suggest(token.text, dictionary, custom, job.custom_version)
                misspellings.append(Misspelling(token, suggestions, job.revision))

        code = language.code if language else None
        stats = self.analyzer.analyze(tokens, misspellings, code)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "Checked revision %d: %d tokens, %d misspellings in %.1f ms",
            job.revision,
            len(tokens),
            len(misspellings),
            duration_ms,
        )
        return CheckResult(
            revision=job.revision,
            language=code,
            tokens=tuple(tokens),
            misspellings=tuple(misspellings),
            stats=stats,
            detection=detection,
            duration_ms=duration_ms,
            notices=tuple(notices),
        )

    def commit(self, result: CheckResult) -> bool:
        """
        Publish a pass result if it is for the current revision.

        Misspellings of words accepted after the pass was prepared are
        dropped.

        Returns:
            True if committed, False if the result was stale.
        """
        with self._lock:
            self._notices.extend(result.notices)
            if result.revision != self._revision:
                logger.debug(
                    "Discarding stale result for revision %d (current %d)",
                    result.revision,
                    self._revision,
                )
                return False

            if result.language is not None and (
                self._language is None or result.language != self._language.code
            ):
                language = resolve_language(result.language)
                try:
                    self._dictionary = self.store.load(language)
                except AtomSpellError as e:
                    logger.warning("Cannot switch to %s: %s", language, e)
                    return False
                previous = self._language
                self._language = language
                self._clear_caches()
                logger.info("Detected language changed from %s to %s", previous, language)
                self._notices.append(
                    Notice("info", "language_switch", f"Switched checking language to {language}")
                )

            accepted = self.store.custom_snapshot(self._language) | self._ignored
            misspellings = tuple(
                m for m in result.misspellings if not self._accepted(m.token, accepted)
            )
            stats = result.stats
            if len(misspellings) != len(result.misspellings):
                stats = self.analyzer.analyze(result.tokens, misspellings, result.language)

            self._tokens = result.tokens
            self._misspellings = misspellings
            self._stats = stats
            self._detection = result.detection
            self._committed_revision = result.revision
            self._edits = [e for e in self._edits if e[0] > result.revision]
            if self._timer is None:
                self._state = SessionState.IDLE
            self._idle.notify_all()
            return True

    def _should_check(self, token: Token) -> bool:
        if not token.is_alpha or token.foreign:
            return False
        if len(token.text) < self.config.min_word_length:
            return False
        if self.config.ignore_all_caps and len(token.text) > 1 and token.text.isupper():
            return False
        return True

    def _is_known(
        self,
        token: Token,
        dictionary: Dictionary,
        custom: frozenset[str],
        ignored: frozenset[str],
    ) -> bool:
        form = token.form
        if form in custom or form in ignored:
            return True

        key = (dictionary.language.code, token.text)
        with self._cache_lock:
            known = self._known_cache.get(key)
        if known is None:
            known = self.store.lookup(dictionary, token.text, custom=())
            if not known and not token.script.space_delimited:
                known = dictionary.segmentable(form)
            with self._cache_lock:
                self._known_cache[key] = known
        if known:
            return True

        if not token.script.space_delimited:
            # Custom and ignored words may fill the gaps of an unspaced run
            extra = custom | ignored
            return bool(extra) and dictionary.segmentable(form, extra)

        # Hyphenated compounds pass when every part does
        parts = [part for part in form.split("-") if part]
        if len(parts) > 1:
            return all(
                part in custom or part in ignored or self.store.lookup(dictionary, part, custom=())
                for part in parts
            )
        return False

    def _suggest(
        self,
        word: str,
        dictionary: Dictionary,
        custom: frozenset[str],
        custom_version: int,
    ) -> tuple[Suggestion, ...]:
        key = (dictionary.language.code, custom_version, word)
        with self._cache_lock:
            cached = self._suggestion_cache.get(key)
        if cached is None:
            cached = tuple(self.engine.suggest(word, dictionary, extra_words=custom))
            with self._cache_lock:
                self._suggestion_cache[key] = cached
        return cached

    # -------------------------------------------------------------------------
    # Synchronous use
    # -------------------------------------------------------------------------

    def check_now(self) -> CheckResult:
        """
        Run a pass for the current revision on the calling thread.

        Pending debounced work is cancelled; the result is committed.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            job = self.prepare_pass()
        result = self.run_pass(job)
        self.commit(result)
        return result

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the current revision has been checked.

        Returns:
            False if ``timeout`` expired first.
        """
        with self._idle:
            return self._idle.wait_for(
                lambda: self._state == SessionState.IDLE or self._closed, timeout
            )

    def close(self) -> None:
        """Cancel pending work and release the worker pool."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._idle.notify_all()
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> CheckSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
