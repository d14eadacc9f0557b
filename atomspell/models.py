"""
Data models for AtomSpell.

These models are the values exchanged between the engine components and
handed to the editor layer. All of them are plain dataclasses; the ones
shared across threads are frozen.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from atomspell.languages import Script


def normalize_form(word: str) -> str:
    """
    Canonical lookup form of a word: NFC-normalized and case-folded, with
    typographic apostrophes replaced by ASCII ones.

    NFC keeps "ü" as U+00FC rather than "u" plus a combining diaeresis.

    Example:
        >>> normalize_form("Don’t")
        "don't"
    """
    return unicodedata.normalize("NFC", word).casefold().replace("’", "'")


@dataclass(frozen=True)
class Token:
    """A checkable unit of text with its source span ``[start, end)``."""

    start: int
    end: int
    text: str
    is_alpha: bool
    script: Script = Script.LATIN
    foreign: bool = False  # Script differs from the hint the text was tokenized with

    @property
    def form(self) -> str:
        """Case-folded form used for lookups and statistics."""
        return normalize_form(self.text)

    def shifted(self, delta: int) -> Token:
        """Return the same token moved by ``delta`` characters."""
        if delta == 0:
            return self
        return Token(
            self.start + delta,
            self.end + delta,
            self.text,
            self.is_alpha,
            self.script,
            self.foreign,
        )


@dataclass(frozen=True)
class Suggestion:
    """A correction candidate."""

    word: str
    distance: int
    frequency: float = 0.0

    def __str__(self) -> str:
        return self.word


@dataclass(frozen=True)
class Misspelling:
    """A token absent from every active word set, with ranked corrections."""

    token: Token
    suggestions: tuple[Suggestion, ...] = ()
    revision: int = 0

    @property
    def word(self) -> str:
        return self.token.text

    @property
    def start(self) -> int:
        return self.token.start

    @property
    def end(self) -> int:
        return self.token.end


@dataclass(frozen=True)
class MatchSpan:
    """A search hit ``[start, end)`` in the session text."""

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class Notice:
    """A recovered error or status change the editor should show the user."""

    level: Literal["info", "warning", "error"]
    kind: str  # "dictionary_load", "custom_words_io", "language_switch", ...
    message: str


@dataclass
class DocumentStats:
    """Document-level writing statistics."""

    total_words: int = 0
    unique_words: int = 0
    frequencies: dict[str, int] = field(default_factory=dict)  # case-folded -> count
    display_forms: dict[str, str] = field(default_factory=dict)  # case-folded -> first seen
    misspelling_count: int = 0
    accuracy: float = 1.0
    reading_time_minutes: float = 0.0
    language: str | None = None

    def most_common(self, n: int = 10) -> list[tuple[str, int]]:
        """
        Most frequent words, ties broken alphabetically.

        Args:
            n: Number of entries to return.

        Returns:
            List of (display form, count) pairs.
        """
        ranked = sorted(self.frequencies.items(), key=lambda item: (-item[1], item[0]))
        return [(self.display_forms.get(form, form), count) for form, count in ranked[:n]]

    def reading_time_parts(self) -> tuple[int, int]:
        """Reading time split into whole minutes and seconds."""
        total_seconds = int(round(self.reading_time_minutes * 60))
        return divmod(total_seconds, 60)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_words": self.total_words,
            "unique_words": self.unique_words,
            "misspelling_count": self.misspelling_count,
            "accuracy": self.accuracy,
            "reading_time_minutes": self.reading_time_minutes,
            "language": self.language,
            "most_common": self.most_common(10),
        }


class SessionState(Enum):
    """Check session states."""

    IDLE = "idle"
    CHECKING = "checking"
    LANGUAGE_SWITCHING = "language_switching"


@dataclass(frozen=True)
class Detection:
    """Outcome of a language detection run."""

    language: str  # Language to use (the previous one on fallback)
    confidence: float
    best: str | None = None  # Highest-scoring language, even if not adopted
    fallback: bool = False
    scores: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckResult:
    """Everything one check pass produced for one revision."""

    revision: int
    language: str | None
    tokens: tuple[Token, ...]
    misspellings: tuple[Misspelling, ...]
    stats: DocumentStats
    detection: Detection | None = None
    duration_ms: float = 0.0
    notices: tuple[Notice, ...] = ()  # Recovered failures during the pass
