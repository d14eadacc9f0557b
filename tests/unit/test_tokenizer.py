"""
Unit tests for the script-aware tokenizer.

Covers:
- Word boundaries and punctuation stripping
- Apostrophe and hyphen policies
- Unsegmented scripts (Han, Kana) and script changes
- Incremental re-tokenization and edit coalescing
"""

import pytest

from atomspell.engine.tokenizer import Tokenizer, coalesce_edits, script_of
from atomspell.languages import Script

# =============================================================================
# Full tokenization
# =============================================================================


class TestTokenize:
    """Tests for Tokenizer.tokenize."""

    @pytest.fixture
    def tokenizer(self):
        return Tokenizer()

    def test_simple_words(self, tokenizer):
        """Words are split on whitespace and punctuation."""
        tokens = tokenizer.tokenize("Hello, world! (Really)")
        assert [t.text for t in tokens] == ["Hello", "world", "Really"]

    def test_spans_index_source(self, tokenizer):
        """Token spans slice back to the token text."""
        text = "  The quick/brown fox.  "
        for token in tokenizer.tokenize(text):
            assert text[token.start : token.end] == token.text

    def test_leading_trailing_connectors_stripped(self, tokenizer):
        """Quotes and dashes around a word are not part of it."""
        tokens = tokenizer.tokenize("'quoted' -dash- rock'n'roll")
        assert [t.text for t in tokens] == ["quoted", "dash", "rock'n'roll"]

    def test_typographic_apostrophe(self, tokenizer):
        """Curly apostrophes stay inside words."""
        tokens = tokenizer.tokenize("don’t stop")
        assert [t.text for t in tokens] == ["don’t", "stop"]
        assert tokens[0].form == "don't"

    def test_digits_make_token_non_alpha(self, tokenizer):
        """Tokens with digits are kept but not alphabetic."""
        tokens = tokenizer.tokenize("mp3 2024 word")
        assert [(t.text, t.is_alpha) for t in tokens] == [
            ("mp3", False),
            ("2024", False),
            ("word", True),
        ]

    def test_combining_marks_stay_in_word(self, tokenizer):
        """A decomposed accent does not split a word."""
        text = "cafe\u0301 noir"
        tokens = tokenizer.tokenize(text)
        assert [t.text for t in tokens] == ["cafe\u0301", "noir"]
        assert tokens[0].form == "caf\u00e9"

    def test_cyrillic_and_latin_split(self, tokenizer):
        """A script change ends a word."""
        tokens = tokenizer.tokenize("мирworld")
        assert [(t.text, t.script) for t in tokens] == [
            ("мир", Script.CYRILLIC),
            ("world", Script.LATIN),
        ]

    def test_empty_text(self, tokenizer):
        """Empty and punctuation-only texts have no tokens."""
        assert tokenizer.tokenize("") == []
        assert tokenizer.tokenize(" ... !? ") == []

    def test_offset_shifts_spans(self, tokenizer):
        """Offset is added to every span."""
        tokens = tokenizer.tokenize("ab cd", offset=10)
        assert [(t.start, t.end) for t in tokens] == [(10, 12), (13, 15)]


class TestHyphenPolicy:
    """Hyphenated and apostrophized words under both policies."""

    def test_keep_policy_single_token(self):
        """'keep' keeps compounds whole."""
        tokens = Tokenizer("keep").tokenize("don't-stop")
        assert [t.text for t in tokens] == ["don't-stop"]

    def test_split_policy_separates(self):
        """'split' treats hyphens as separators but keeps apostrophes."""
        tokens = Tokenizer("split").tokenize("don't-stop")
        assert [t.text for t in tokens] == ["don't", "stop"]

    def test_invalid_policy(self):
        """Unknown policies are rejected."""
        with pytest.raises(ValueError, match="hyphen_policy"):
            Tokenizer("merge")


class TestUnsegmentedScripts:
    """Han and Kana runs."""

    @pytest.fixture
    def tokenizer(self):
        return Tokenizer()

    def test_han_run_is_one_token(self, tokenizer):
        """Contiguous Han characters form one unit; punctuation splits."""
        tokens = tokenizer.tokenize("我们是学生。你好")
        assert [t.text for t in tokens] == ["我们是学生", "你好"]
        assert all(t.script == Script.HAN for t in tokens)

    def test_han_kana_boundary(self, tokenizer):
        """A change between Han and Kana starts a new unit."""
        tokens = tokenizer.tokenize("日本語です")
        assert [(t.text, t.script) for t in tokens] == [
            ("日本語", Script.HAN),
            ("です", Script.KANA),
        ]

    def test_mixed_latin_and_han(self, tokenizer):
        """Latin words next to Han runs are separate tokens."""
        tokens = tokenizer.tokenize("AI模型test")
        assert [t.text for t in tokens] == ["AI", "模型", "test"]

    def test_foreign_marking(self, tokenizer):
        """Tokens outside the hint's script family are foreign."""
        tokens = tokenizer.tokenize("hello 世界 привет", script_hint=Script.LATIN)
        assert [(t.text, t.foreign) for t in tokens] == [
            ("hello", False),
            ("世界", True),
            ("привет", True),
        ]

    def test_kana_not_foreign_for_han_hint(self, tokenizer):
        """Kana and Han share a family, so Japanese is not foreign."""
        tokens = tokenizer.tokenize("日本語です", script_hint=Script.HAN)
        assert not any(t.foreign for t in tokens)

    def test_script_of(self):
        """script_of reports the first letter's script."""
        assert script_of("123 мир") == Script.CYRILLIC
        assert script_of("42!") is None


# =============================================================================
# Incremental tokenization
# =============================================================================


def _edit(text, start, end, replacement):
    return text[:start] + replacement + text[end:]


class TestRetokenize:
    """Incremental results must equal a full tokenization."""

    @pytest.fixture(params=["keep", "split"])
    def tokenizer(self, request):
        return Tokenizer(request.param)

    @pytest.mark.parametrize(
        "text,start,end,replacement",
        [
            ("hello world", 11, 11, "s"),  # append
            ("hello world", 0, 0, "Oh "),  # prepend
            ("hello world", 5, 6, ""),  # join two words
            ("helloworld", 5, 5, " "),  # split a word
            ("well known fact", 4, 5, "-"),  # create a compound
            ("well-known fact", 4, 5, " "),  # break a compound
            ("don t stop", 3, 4, "'"),  # create an apostrophe word
            ("abc def ghi jkl", 4, 11, "x"),  # replace across tokens
            ("ab cd ef", 0, 8, ""),  # delete everything
            ("ж12-cd ef", 0, 1, "z"),  # script change merges the next token
            ("我们是学生 hello", 2, 3, "不是"),  # edit inside a Han run
            ("one, two; three", 3, 5, ""),  # remove punctuation
        ],
    )
    def test_single_edit_matches_full(self, tokenizer, text, start, end, replacement):
        """retokenize equals tokenize for one edit."""
        old_tokens = tokenizer.tokenize(text)
        new_text = _edit(text, start, end, replacement)

        incremental = tokenizer.retokenize(old_tokens, new_text, start, end, len(replacement))

        assert incremental == tokenizer.tokenize(new_text)

    def test_keystroke_burst_matches_full(self, tokenizer):
        """A coalesced burst of typing equals a full tokenization."""
        base = "The quick fox jumps."
        old_tokens = tokenizer.tokenize(base)

        text = base
        edits = []
        for i, ch in enumerate(" brown"):
            position = 9 + i
            text = _edit(text, position, position, ch)
            edits.append((position, position, 1))

        start, base_end, inserted = coalesce_edits(edits)
        incremental = tokenizer.retokenize(old_tokens, text, start, base_end, inserted)

        assert text == "The quick brown fox jumps."
        assert incremental == tokenizer.tokenize(text)

    def test_script_hint_preserved(self, tokenizer):
        """Foreign flags are recomputed with the same hint."""
        text = "hello world"
        old_tokens = tokenizer.tokenize(text, Script.LATIN)
        new_text = _edit(text, 6, 11, "мир")

        incremental = tokenizer.retokenize(old_tokens, new_text, 6, 11, 3, Script.LATIN)

        assert incremental == tokenizer.tokenize(new_text, Script.LATIN)
        assert incremental[-1].foreign


class TestCoalesceEdits:
    """Folding edit bursts into one dirty range."""

    def test_no_edits(self):
        """No edits, no range."""
        assert coalesce_edits([]) is None

    def test_consecutive_insertions(self):
        """Two keystrokes become one two-character insertion."""
        assert coalesce_edits([(5, 5, 1), (6, 6, 1)]) == (5, 5, 2)

    def test_backspace_after_typing(self):
        """Typing then deleting leaves a net insertion."""
        assert coalesce_edits([(5, 5, 2), (6, 7, 0)]) == (5, 5, 1)

    def test_edits_far_apart(self):
        """Separate edits cover everything between them."""
        # "abcdefghij": replace "b" with "XY", then (in the new text) delete "h"
        start, base_end, inserted = coalesce_edits([(1, 2, 2), (8, 9, 0)])
        base = "abcdefghij"
        final = "aXYcdefgij"
        assert final == base[:start] + final[start : start + inserted] + base[base_end:]

    def test_edit_before_earlier_edit(self):
        """An edit left of the first one extends the range start."""
        start, base_end, inserted = coalesce_edits([(5, 5, 1), (0, 1, 0)])
        # "hello world" -> "helloX world" -> "elloX world"
        base = "hello world"
        final = "elloX world"
        assert final == base[:start] + final[start : start + inserted] + base[base_end:]
