"""
Language registry.

Every language the engine can check, with its codes, writing system and
the bundled resource (if any) that backs its dictionary. Codes follow
ISO 639-3 ("eng"); ISO 639-1 aliases ("en") are accepted everywhere a
code is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from atomspell.exceptions import UnsupportedLanguageError


class Script(Enum):
    """Writing systems the tokenizer distinguishes."""

    LATIN = "latin"
    CYRILLIC = "cyrillic"
    ARABIC = "arabic"
    HAN = "han"
    KANA = "kana"
    HANGUL = "hangul"
    OTHER = "other"

    @property
    def space_delimited(self) -> bool:
        """Whether words of this script are separated by spaces."""
        return self not in (Script.HAN, Script.KANA)

    @property
    def family(self) -> str:
        """Scripts that share one dictionary (Japanese mixes Han and Kana)."""
        if self in (Script.HAN, Script.KANA):
            return "cjk"
        return self.value


@dataclass(frozen=True)
class Language:
    """A checkable language."""

    code: str  # ISO 639-3
    iso639_1: str
    name: str
    script: Script
    bundle: str | None = None  # pyspellchecker language id

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


LANGUAGES: tuple[Language, ...] = (
    Language("eng", "en", "English", Script.LATIN, "en"),
    Language("fra", "fr", "French", Script.LATIN, "fr"),
    Language("spa", "es", "Spanish", Script.LATIN, "es"),
    Language("deu", "de", "German", Script.LATIN, "de"),
    Language("ita", "it", "Italian", Script.LATIN, "it"),
    Language("por", "pt", "Portuguese", Script.LATIN, "pt"),
    Language("nld", "nl", "Dutch", Script.LATIN, "nl"),
    Language("lav", "lv", "Latvian", Script.LATIN, "lv"),
    Language("eus", "eu", "Basque", Script.LATIN, "eu"),
    Language("afr", "af", "Afrikaans", Script.LATIN),
    Language("rus", "ru", "Russian", Script.CYRILLIC, "ru"),
    Language("ara", "ar", "Arabic", Script.ARABIC, "ar"),
    Language("fas", "fa", "Persian", Script.ARABIC, "fa"),
    Language("zho", "zh", "Chinese", Script.HAN),
    Language("jpn", "ja", "Japanese", Script.KANA),
    Language("kor", "ko", "Korean", Script.HANGUL),
)

_BY_CODE: dict[str, Language] = {}
for _language in LANGUAGES:
    _BY_CODE[_language.code] = _language
    _BY_CODE[_language.iso639_1] = _language


def resolve_language(code: str) -> Language:
    """
    Look up a language by ISO 639-3 or 639-1 code.

    Args:
        code: Language code, case-insensitive.

    Returns:
        The registered Language.

    Raises:
        UnsupportedLanguageError: If the code is not registered.

    Example:
        >>> resolve_language("EN").code
        'eng'
    """
    language = _BY_CODE.get(code.strip().lower()) if isinstance(code, str) else None
    if language is None:
        raise UnsupportedLanguageError(f"Language {code!r} is not supported")
    return language


def is_supported(code: str) -> bool:
    """Return True if ``code`` names a registered language."""
    try:
        resolve_language(code)
    except UnsupportedLanguageError:
        return False
    return True


def languages_for_script(script: Script) -> list[Language]:
    """Languages written in the same script family as ``script``."""
    return [lang for lang in LANGUAGES if lang.script.family == script.family]
