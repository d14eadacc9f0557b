"""
User-maintained custom word lists.

A custom list belongs to one language or to the "global" scope and is
persisted as a plain UTF-8 word list, one word per line. Additions are
appended to the file; removals rewrite it. Custom words are kept apart
from the built-in dictionaries, which stay identical to their source
resource.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from atomspell.exceptions import CustomWordListIOError
from atomspell.models import normalize_form

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"


def sanitize_word(word: str) -> str:
    """
    Trim a user-supplied word to its letters, digits and inner connectors.

    Example:
        >>> sanitize_word("  'rock-n-roll!' ")
        'rock-n-roll'
    """
    trimmed = word.strip()
    chars = list(trimmed)
    kept = []
    for i, ch in enumerate(chars):
        if ch.isalnum():
            kept.append(ch)
        elif ch in "'’-" and 0 < i < len(chars) - 1:
            if chars[i - 1].isalnum() and chars[i + 1].isalnum():
                kept.append(ch)
    return "".join(kept)


def custom_list_path(directory: Path, scope: str) -> Path:
    """File name used to persist the list for ``scope``."""
    return directory / f"user_{scope}.txt"


class CustomWordList:
    """
    Accepted words for one scope.

    Attributes:
        scope: Language code or "global".
        path: Persistence file, or None for an in-memory list.
        persistent: False once persistence failed; changes then stay in memory.

    Example:
        >>> words = CustomWordList("eng")
        >>> words.add("AtomSpell")
        True
        >>> "atomspell" in words
        True
        >>> words.add("atomspell")  # idempotent
        False
    """

    def __init__(self, scope: str, path: Path | None = None):
        self.scope = scope
        self.path = path
        self.persistent = path is not None
        self._words: dict[str, str] = {}  # folded -> display

    def load(self) -> int:
        """
        Load words from ``path``.

        Lines that cannot be decoded or contain no word are skipped.

        Returns:
            Number of skipped lines.

        Raises:
            CustomWordListIOError: If the file exists but cannot be read.
        """
        if self.path is None or not self.path.exists():
            return 0

        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise CustomWordListIOError(f"Cannot read custom word list {self.path}: {e}") from e

        skipped = 0
        for raw in data.splitlines():
            try:
                line = raw.decode("utf-8").lstrip("\ufeff")
            except UnicodeDecodeError:
                skipped += 1
                continue
            word = sanitize_word(line)
            if not word:
                if line.strip():
                    skipped += 1
                continue
            self._words.setdefault(normalize_form(word), word)

        if skipped:
            logger.warning("Skipped %d unreadable lines in %s", skipped, self.path)
        logger.info("Loaded %d custom words from %s", len(self._words), self.path)
        return skipped

    def add(self, word: str) -> bool:
        """
        Accept ``word``. Adding a word already present is a no-op.

        Returns:
            True if the word was new.

        Raises:
            CustomWordListIOError: If the word could not be appended to the
                file. The word is accepted in memory regardless.
        """
        word = sanitize_word(word)
        if not word:
            return False
        form = normalize_form(word)
        if form in self._words:
            return False
        self._words[form] = word
        if self.persistent:
            self._append(word)
        return True

    def remove(self, word: str) -> bool:
        """
        Stop accepting ``word``.

        Returns:
            True if the word was present.

        Raises:
            CustomWordListIOError: If the file could not be rewritten.
        """
        form = normalize_form(sanitize_word(word))
        if self._words.pop(form, None) is None:
            return False
        if self.persistent:
            self.save()
        return True

    def save(self) -> None:
        """
        Rewrite the persistence file with the current words.

        Raises:
            CustomWordListIOError: If the file cannot be written.
        """
        if self.path is None:
            logger.debug("No persistence path for %s custom words; skipping save", self.scope)
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            content = "".join(f"{word}\n" for word in self._words.values())
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise CustomWordListIOError(f"Cannot write custom word list {self.path}: {e}") from e
        logger.info("Saved %d custom words to %s", len(self._words), self.path)

    def _append(self, word: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"{word}\n")
        except OSError as e:
            raise CustomWordListIOError(
                f"Cannot append to custom word list {self.path}: {e}"
            ) from e

    def snapshot(self) -> frozenset[str]:
        """Case-folded forms, frozen for readers on other threads."""
        return frozenset(self._words)

    def __contains__(self, word: str) -> bool:
        return normalize_form(word) in self._words

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._words.values()))

    def __len__(self) -> int:
        return len(self._words)
