"""
Script-aware tokenizer.

Splits text into checkable tokens with their source spans:

- Space-delimited scripts (Latin, Cyrillic, Arabic, Hangul, ...): maximal
  runs of letters, digits and combining marks. Apostrophes, and hyphens
  under the "keep" policy, stay inside a token only when they sit between
  two word characters, so surrounding punctuation is never part of a token.
- Han and Kana: runs of contiguous characters of one script form a single
  unit. No linguistic word segmentation is attempted; script changes and
  punctuation are the only boundaries.

The incremental mode re-tokenizes only the region around an edit and
splices it into the shifted remainder of the previous token stream.
"""

from __future__ import annotations

import logging
import unicodedata
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Literal

from atomspell.languages import Script
from atomspell.models import Token

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

APOSTROPHES = frozenset("'’")
HYPHENS = frozenset("-‐‑")

# Character kinds
_OTHER = 0
_LETTER = 1
_DIGIT = 2
_MARK = 3
_APOSTROPHE = 4
_HYPHEN = 5

_HAN_RANGES = (
    (0x3005, 0x3007),
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xF900, 0xFAFF),
    (0x20000, 0x2FA1F),
)
_KANA_RANGES = (
    (0x3041, 0x309F),
    (0x30A1, 0x30FA),
    (0x30FC, 0x30FF),
    (0x31F0, 0x31FF),
    (0xFF66, 0xFF9F),
)
_HANGUL_RANGES = ((0x1100, 0x11FF), (0x3130, 0x318F), (0xAC00, 0xD7AF))
_CYRILLIC_RANGES = ((0x0400, 0x052F), (0x1C80, 0x1C8F), (0x2DE0, 0x2DFF), (0xA640, 0xA69F))
_ARABIC_RANGES = (
    (0x0600, 0x06FF),
    (0x0750, 0x077F),
    (0x08A0, 0x08FF),
    (0xFB50, 0xFDFF),
    (0xFE70, 0xFEFF),
)
_LATIN_RANGES = (
    (0x0041, 0x024F),
    (0x1E00, 0x1EFF),
    (0x2C60, 0x2C7F),
    (0xA720, 0xA7FF),
    (0xFF21, 0xFF5A),
)


def _in_ranges(cp: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(low <= cp <= high for low, high in ranges)


@lru_cache(maxsize=8192)
def classify_char(ch: str) -> tuple[int, Script | None]:
    """
    Classify one character for tokenization.

    Returns:
        Tuple of (kind, script); script is only set for letters.
    """
    if ch in APOSTROPHES:
        return _APOSTROPHE, None
    if ch in HYPHENS:
        return _HYPHEN, None

    cp = ord(ch)
    if _in_ranges(cp, _KANA_RANGES):
        return _LETTER, Script.KANA
    if _in_ranges(cp, _HAN_RANGES):
        return _LETTER, Script.HAN

    category = unicodedata.category(ch)
    if category[0] == "L":
        if _in_ranges(cp, _HANGUL_RANGES):
            return _LETTER, Script.HANGUL
        if _in_ranges(cp, _LATIN_RANGES):
            return _LETTER, Script.LATIN
        if _in_ranges(cp, _CYRILLIC_RANGES):
            return _LETTER, Script.CYRILLIC
        if _in_ranges(cp, _ARABIC_RANGES):
            return _LETTER, Script.ARABIC
        return _LETTER, Script.OTHER
    if category[0] == "M":
        return _MARK, None
    if category == "Nd":
        return _DIGIT, None
    return _OTHER, None


def script_of(text: str) -> Script | None:
    """Script of the first letter in ``text``, or None if it has none."""
    for ch in text:
        kind, script = classify_char(ch)
        if kind == _LETTER:
            return script
    return None


# =============================================================================
# TOKENIZER
# =============================================================================


class Tokenizer:
    """
    Segments text into tokens.

    Attributes:
        hyphen_policy: "keep" keeps hyphenated compounds as one token
            ("don't-stop"); "split" makes hyphens separators ("don't", "stop").

    Example:
        >>> tokenizer = Tokenizer()
        >>> [t.text for t in tokenizer.tokenize("Well-known (really) words!")]
        ['Well-known', 'really', 'words']
        >>> [t.text for t in Tokenizer("split").tokenize("don't-stop")]
        ["don't", 'stop']
    """

    def __init__(self, hyphen_policy: Literal["keep", "split"] = "keep"):
        if hyphen_policy not in ("keep", "split"):
            raise ValueError(f"hyphen_policy must be 'keep' or 'split', got {hyphen_policy!r}")
        self.hyphen_policy = hyphen_policy

    def tokenize(
        self,
        text: str,
        script_hint: Script | None = None,
        offset: int = 0,
    ) -> list[Token]:
        """
        Tokenize text.

        Args:
            text: Text (or any substring of a larger text) to tokenize.
            script_hint: Script of the active dictionary; tokens of another
                script family are marked ``foreign``.
            offset: Added to every span, for tokenizing a slice in place.

        Returns:
            Tokens in text order.
        """
        tokens: list[Token] = []
        n = len(text)
        i = 0
        while i < n:
            kind, script = classify_char(text[i])
            if kind not in (_LETTER, _DIGIT):
                i += 1
                continue

            if kind == _LETTER and not script.space_delimited:
                end = self._scan_unsegmented(text, i + 1, script)
                tokens.append(self._make_token(text, i, end, script, True, script_hint, offset))
                i = end
                continue

            end, run_script, has_digit = self._scan_word(text, i, script)
            tokens.append(
                self._make_token(text, i, end, run_script, not has_digit, script_hint, offset)
            )
            i = end
        return tokens

    def _scan_unsegmented(self, text: str, i: int, script: Script) -> int:
        """Extend a Han/Kana run to the next script or punctuation boundary."""
        n = len(text)
        while i < n:
            kind, next_script = classify_char(text[i])
            if kind == _MARK or (kind == _LETTER and next_script == script):
                i += 1
            else:
                break
        return i

    def _scan_word(
        self, text: str, start: int, script: Script | None
    ) -> tuple[int, Script | None, bool]:
        """Extend a space-delimited word from ``start``."""
        n = len(text)
        run_script = script
        has_digit = script is None
        i = start + 1
        while i < n:
            kind, next_script = classify_char(text[i])
            if kind in (_MARK, _DIGIT):
                has_digit = has_digit or kind == _DIGIT
                i += 1
                continue
            if kind == _LETTER and next_script.space_delimited:
                if run_script is None:
                    run_script = next_script
                elif next_script != run_script:
                    break
                i += 1
                continue
            if kind == _APOSTROPHE or (kind == _HYPHEN and self.hyphen_policy == "keep"):
                if i + 1 < n and self._continues(text[i + 1], run_script):
                    i += 1
                    continue
            break
        return i, run_script, has_digit

    @staticmethod
    def _continues(ch: str, run_script: Script | None) -> bool:
        """Whether ``ch`` can follow an internal apostrophe or hyphen."""
        kind, script = classify_char(ch)
        if kind == _DIGIT:
            return True
        if kind != _LETTER or not script.space_delimited:
            return False
        return run_script is None or script == run_script

    @staticmethod
    def _make_token(
        text: str,
        start: int,
        end: int,
        script: Script | None,
        is_alpha: bool,
        script_hint: Script | None,
        offset: int,
    ) -> Token:
        token_script = script or Script.OTHER
        foreign = (
            script is not None
            and script_hint is not None
            and token_script.family != script_hint.family
        )
        return Token(start + offset, end + offset, text[start:end], is_alpha, token_script, foreign)

    def retokenize(
        self,
        tokens: Sequence[Token],
        text: str,
        edit_start: int,
        edit_end: int,
        inserted_length: int,
        script_hint: Script | None = None,
    ) -> list[Token]:
        """
        Re-tokenize only the region touched by an edit.

        The window is widened to the nearest token boundaries whose
        neighbouring characters the edit cannot have changed, tokenized
        afresh, and spliced between the untouched prefix and the shifted
        suffix of the old stream. The result equals ``tokenize(text)``.

        Args:
            tokens: Token stream of the text before the edit.
            text: Text after the edit.
            edit_start: Start of the replaced range (old coordinates).
            edit_end: End of the replaced range (old coordinates).
            inserted_length: Length of the replacement text.
            script_hint: Same hint the old stream was produced with.

        Returns:
            Token stream for ``text``.
        """
        delta = inserted_length - (edit_end - edit_start)

        # A prefix token is reusable when the character after it (which may
        # be a connector) and the one after that are both outside the edit.
        # A suffix token is reusable when the unchanged character before it
        # is a plain separator, so nothing on its left can join it.
        ends = [t.end for t in tokens]
        starts = [t.start for t in tokens]
        keep_prefix = bisect_right(ends, edit_start - 2)
        keep_suffix = max(bisect_left(starts, edit_end + 1), keep_prefix)
        while keep_suffix < len(tokens):
            before = text[tokens[keep_suffix].start - 1 + delta]
            if classify_char(before)[0] == _OTHER:
                break
            keep_suffix += 1

        window_start = tokens[keep_prefix - 1].end if keep_prefix else 0
        if keep_suffix < len(tokens):
            window_end = tokens[keep_suffix].start + delta
        else:
            window_end = len(text)

        middle = self.tokenize(text[window_start:window_end], script_hint, offset=window_start)
        logger.debug(
            "Retokenized window [%d, %d): %d tokens replaced by %d",
            window_start,
            window_end,
            keep_suffix - keep_prefix,
            len(middle),
        )
        suffix = [t.shifted(delta) for t in tokens[keep_suffix:]]
        return list(tokens[:keep_prefix]) + middle + suffix


def coalesce_edits(edits: Iterable[tuple[int, int, int]]) -> tuple[int, int, int] | None:
    """
    Fold a sequence of edits into one dirty range.

    Each edit is ``(start, end, inserted_length)`` in the coordinates of the
    text as it was when that edit was made.

    Returns:
        ``(start, base_end, inserted_length)``: the range of the original
        text that, replaced by ``inserted_length`` characters, yields the
        final text. None if there were no edits.

    Example:
        >>> coalesce_edits([(5, 5, 1), (6, 6, 1)])  # two keystrokes
        (5, 5, 2)
    """
    dirty_start = base_end = current_end = None
    for start, end, length in edits:
        if dirty_start is None:
            dirty_start, base_end, current_end = start, end, start + length
            continue
        offset = base_end - current_end  # base = current + offset past the region
        if end > current_end:
            base_end = end + offset
        dirty_start = min(dirty_start, start)
        offset -= length - (end - start)
        current_end = base_end - offset
    if dirty_start is None:
        return None
    return dirty_start, base_end, current_end - dirty_start
