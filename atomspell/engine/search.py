"""
Find and replace over the session text.

Matches are reported as MatchSpan objects in text coordinates, the same
coordinates tokens use, so a match can be compared against token spans
directly ("whole word" matches must coincide with a token).
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from atomspell.engine.tokenizer import Tokenizer
from atomspell.exceptions import InvalidPatternError, StaleSpanError
from atomspell.models import MatchSpan, Token


@dataclass(frozen=True)
class SearchOptions:
    """Options for find/replace."""

    case_sensitive: bool = False
    whole_word: bool = False  # Match must span exactly one token
    regex: bool = False  # Pattern is a regular expression, replacement may use \1


def compile_pattern(pattern: str, options: SearchOptions) -> re.Pattern[str]:
    """
    Compile a search pattern.

    Raises:
        InvalidPatternError: If ``pattern`` is empty or an invalid regex.
    """
    if not pattern:
        raise InvalidPatternError("Search pattern must not be empty")
    flags = 0 if options.case_sensitive else re.IGNORECASE
    source = pattern if options.regex else re.escape(pattern)
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise InvalidPatternError(f"Invalid search pattern {pattern!r}: {e}") from e


def find_all(
    text: str,
    pattern: str,
    options: SearchOptions | None = None,
    tokens: Sequence[Token] | None = None,
) -> list[MatchSpan]:
    """
    Find every non-overlapping match of ``pattern`` in ``text``.

    Args:
        text: Text to search.
        pattern: Literal text, or a regular expression if ``options.regex``.
        options: Search options.
        tokens: Token stream of ``text``, used for whole-word matching;
            computed if not given.

    Returns:
        Matches in text order. Empty matches are never reported.

    Example:
        >>> [m.start for m in find_all("cat concat cat", "cat", SearchOptions(whole_word=True))]
        [0, 11]
    """
    options = options or SearchOptions()
    return [
        MatchSpan(match.start(), match.end(), match.group(0))
        for match in _iter_matches(text, pattern, options, tokens)
    ]


def _iter_matches(
    text: str,
    pattern: str,
    options: SearchOptions,
    tokens: Sequence[Token] | None,
) -> Iterator[re.Match[str]]:
    compiled = compile_pattern(pattern, options)

    spans = None
    if options.whole_word:
        if tokens is None:
            tokens = Tokenizer().tokenize(text)
        spans = {(token.start, token.end) for token in tokens}

    for match in compiled.finditer(text):
        start, end = match.span()
        if start == end:
            continue
        if spans is not None and (start, end) not in spans:
            continue
        yield match


def check_span(text: str, span: MatchSpan) -> None:
    """
    Ensure ``span`` still describes ``text``.

    Raises:
        StaleSpanError: If the span is out of range or its text changed.
    """
    if not 0 <= span.start <= span.end <= len(text) or text[span.start : span.end] != span.text:
        raise StaleSpanError(
            f"Span [{span.start}, {span.end}) no longer contains {span.text!r}"
        )


def plan_replacements(
    text: str,
    pattern: str,
    replacement: str,
    options: SearchOptions | None = None,
    tokens: Sequence[Token] | None = None,
) -> list[tuple[MatchSpan, str]]:
    """
    Work out a replace-all without applying it.

    Returns:
        (match, replacement text) pairs in text order. In regex mode group
        references in ``replacement`` are expanded per match.

    Example:
        >>> planned = plan_replacements("colour and colours", "colour", "color")
        >>> [(span.start, new_text) for span, new_text in planned]
        [(0, 'color'), (11, 'color')]
    """
    options = options or SearchOptions()
    planned = []
    for match in _iter_matches(text, pattern, options, tokens):
        span = MatchSpan(match.start(), match.end(), match.group(0))
        planned.append((span, match.expand(replacement) if options.regex else replacement))
    return planned


def apply_replacements(text: str, planned: Sequence[tuple[MatchSpan, str]]) -> str:
    """Apply non-overlapping replacements from ``plan_replacements``."""
    parts = []
    cursor = 0
    for span, new_text in planned:
        parts.append(text[cursor : span.start])
        parts.append(new_text)
        cursor = span.end
    parts.append(text[cursor:])
    return "".join(parts)
