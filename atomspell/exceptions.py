"""
Exception classes for AtomSpell.

All AtomSpell exceptions inherit from AtomSpellError,
making it easy to catch all library errors.

Load and persistence failures are normally recovered inside the
dictionary store and check session and surfaced as notices; these
exceptions only reach callers from the explicit entry points
(``DictionaryStore.load``, ``CheckSession.set_language``, config
construction).

Example:
    >>> try:
    ...     session.set_language("xx-unknown")
    ... except atomspell.UnsupportedLanguageError as e:
    ...     print(f"Language not supported: {e}")
    ... except atomspell.AtomSpellError as e:
    ...     print(f"AtomSpell error: {e}")
"""


class AtomSpellError(Exception):
    """
    Base exception for all AtomSpell errors.

    Catch this to handle any AtomSpell-specific error.
    """

    pass


class DictionaryLoadError(AtomSpellError):
    """
    Raised when a built-in dictionary resource is missing or corrupt.

    Fatal to that language selection only: the check session keeps the
    previously active language and records a warning notice.

    Example:
        >>> store.load("afr")
        DictionaryLoadError: No dictionary resource for 'afr' (Afrikaans)
    """

    def __init__(self, language: str, reason: str):
        self.language = language
        self.reason = reason
        super().__init__(reason)


class UnsupportedLanguageError(AtomSpellError):
    """
    Raised when an unknown language code is requested.

    Example:
        >>> session.set_language("xx-unknown")
        UnsupportedLanguageError: Language 'xx-unknown' is not supported
    """

    pass


class CustomWordListIOError(AtomSpellError):
    """
    Raised when a persisted custom word list cannot be read or written.

    The dictionary store catches this and degrades the list to
    in-memory only for the rest of the session.
    """

    pass


class ConfigurationError(AtomSpellError, ValueError):
    """
    Raised for invalid configuration.

    Example:
        >>> CheckConfig(words_per_minute=0)
        ConfigurationError: words_per_minute must be > 0, got 0
    """

    pass


class InvalidPatternError(AtomSpellError, ValueError):
    """
    Raised when a search pattern is not a valid regular expression.

    Example:
        >>> session.find_all("(unclosed", SearchOptions(regex=True))
        InvalidPatternError: Invalid search pattern '(unclosed': missing ), ...
    """

    pass


class StaleSpanError(AtomSpellError):
    """
    Raised when replacing a span whose text changed since it was found.

    Search results refer to one revision of the text; find again after
    editing.
    """

    pass
