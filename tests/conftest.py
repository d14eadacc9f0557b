"""
Pytest configuration and fixtures for AtomSpell tests.

Most tests run against small word lists written into a temporary
directory so they are fast and independent of the bundled resources.
"""

from pathlib import Path

import pytest

ENGLISH_WORDS = {
    "the": 5000, "of": 3000, "and": 2800, "to": 2500, "a": 2000, "in": 1800,
    "is": 1500, "it": 1200, "that": 1100, "was": 1000, "for": 900, "with": 800,
    "on": 700, "as": 650, "this": 600, "be": 550, "by": 500, "over": 400,
    "there": 400, "their": 390, "they": 380, "well": 350, "dog": 300, "word": 300,
    "good": 300, "words": 280, "hello": 250, "world": 240, "house": 230,
    "quick": 200, "don't": 200, "brown": 150, "stop": 150, "fox": 120,
    "jumps": 100, "known": 100, "text": 100, "cat": 90, "writing": 90,
    "lazy": 80, "mouse": 60, "Paris": 50, "checker": 20, "spelling": 10,
    "spewing": 1,
}

FRENCH_WORDS = {
    "de": 6000, "le": 5000, "la": 4800, "les": 4000, "et": 3500, "il": 2600,
    "est": 2500, "un": 2400, "une": 2300, "dans": 2000, "que": 2000, "qui": 1900,
    "ce": 1800, "elle": 1700, "sur": 1500, "avec": 1400, "pour": 1300,
    "nous": 1200, "pas": 1100, "mais": 900, "très": 600, "petit": 500,
    "monde": 400, "sommes": 300, "maison": 250, "chat": 200, "table": 180,
    "enfants": 150, "bonjour": 120, "jardin": 100,
}

GERMAN_WORDS = {
    "der": 6000, "die": 5800, "und": 5000, "ist": 3000, "das": 2900,
    "nicht": 2500, "ein": 2400, "eine": 2200, "mit": 2000, "auf": 1800,
    "für": 1500, "ich": 1400, "sie": 1300, "wir": 1000, "heute": 400,
    "Haus": 300, "Hund": 200, "Katze": 150, "schön": 140, "groß": 130,
    "Straße": 100,
}

RUSSIAN_WORDS = {
    "и": 5000, "в": 4500, "не": 4000, "на": 3500, "я": 3000, "что": 2800,
    "он": 2500, "с": 2400, "это": 2000, "как": 1800, "мир": 300,
    "привет": 200, "дом": 150,
}

CHINESE_WORDS = ["我们", "是", "学生", "你好", "世界", "中国", "很", "大"]


def write_word_list(path: Path, words) -> Path:
    """Write ``word<TAB>count`` lines, or bare words for a plain list."""
    if isinstance(words, dict):
        lines = [f"{word}\t{count}" for word, count in words.items()]
    else:
        lines = list(words)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def dictionary_dir(tmp_path: Path) -> Path:
    """Directory with eng, fra, deu, rus and zho word lists."""
    directory = tmp_path / "dictionaries"
    directory.mkdir()
    write_word_list(directory / "eng.txt", ENGLISH_WORDS)
    write_word_list(directory / "fra.txt", FRENCH_WORDS)
    write_word_list(directory / "deu.txt", GERMAN_WORDS)
    write_word_list(directory / "rus.txt", RUSSIAN_WORDS)
    write_word_list(directory / "zho.txt", CHINESE_WORDS)
    return directory


@pytest.fixture
def custom_dir(tmp_path: Path) -> Path:
    """Empty directory for custom word lists."""
    directory = tmp_path / "custom"
    directory.mkdir()
    return directory


@pytest.fixture
def store(dictionary_dir: Path, custom_dir: Path):
    """DictionaryStore over the test word lists, bundled lists disabled."""
    from atomspell import DictionaryStore

    return DictionaryStore(dictionary_dir=dictionary_dir, custom_dir=custom_dir, use_bundled=False)


@pytest.fixture
def english(store):
    """The test English dictionary."""
    return store.load("eng")


@pytest.fixture
def make_config(dictionary_dir: Path, custom_dir: Path):
    """Factory for CheckConfig pointing at the test directories."""
    from atomspell import CheckConfig

    def _make(**overrides):
        options = {
            "dictionary_dir": dictionary_dir,
            "custom_dir": custom_dir,
            "use_bundled": False,
            # Long debounce: tests drive passes with check_now() unless they
            # exercise the scheduler explicitly.
            "debounce_seconds": 60.0,
        }
        options.update(overrides)
        return CheckConfig(**options)

    return _make
