"""
Command-line interface.

Usage:
    atomspell check essay.txt --language auto --suggest --stats
    atomspell frequency essay.txt --top 20
    atomspell create-dict corpus.txt dictionaries/afr.txt --lang afr
    atomspell detect essay.txt
    atomspell languages --dictionary-dir dictionaries
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

from atomspell import __version__
from atomspell.config import AUTO_LANGUAGE, CheckConfig
from atomspell.engine.analyzer import DocumentAnalyzer
from atomspell.engine.detector import LanguageDetector
from atomspell.engine.dictionary import DictionaryStore
from atomspell.engine.session import CheckSession
from atomspell.engine.tokenizer import Tokenizer
from atomspell.exceptions import AtomSpellError
from atomspell.languages import LANGUAGES, resolve_language

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise AtomSpellError(f"Cannot read {path}: {e}") from e


def _line_col(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    col = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, col


def _make_config(args: argparse.Namespace, **overrides) -> CheckConfig:
    return CheckConfig(
        dictionary_dir=args.dictionary_dir,
        custom_dir=args.custom_dir,
        use_bundled=not args.no_bundled,
        debounce_seconds=0.0,
        **overrides,
    )


# =============================================================================
# COMMANDS
# =============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """Report misspellings in a file."""
    text = _read_text(args.file)
    config = _make_config(args, language=args.language)

    with CheckSession(config=config) as session:
        session.set_text(text)
        result = session.check_now()
        notices = session.drain_notices()
        language = session.language
        checked = session.dictionary is not None

    for notice in notices:
        print(f"{notice.level}: {notice.message}", file=sys.stderr)
    if not checked:
        print("warning: no dictionary available; nothing checked", file=sys.stderr)

    for misspelling in result.misspellings:
        line, col = _line_col(text, misspelling.start)
        entry = f"{args.file}:{line}:{col}: {misspelling.word}"
        if args.suggest and misspelling.suggestions:
            entry += " -> " + ", ".join(s.word for s in misspelling.suggestions)
        print(entry)

    if args.stats:
        stats = result.stats
        minutes, seconds = stats.reading_time_parts()
        print()
        print(f"Language:      {language if language else 'none'}")
        print(f"Words:         {stats.total_words} ({stats.unique_words} unique)")
        print(f"Misspellings:  {stats.misspelling_count}")
        print(f"Accuracy:      {stats.accuracy:.1%}")
        print(f"Reading time:  {minutes} min {seconds} s")
    return 0


def cmd_frequency(args: argparse.Namespace) -> int:
    """Print the most frequent words of a file."""
    text = _read_text(args.file)
    stats = DocumentAnalyzer().analyze(Tokenizer().tokenize(text))
    for word, count in stats.most_common(args.top):
        print(f"{count:>7}  {word}")
    return 0


def cmd_create_dict(args: argparse.Namespace) -> int:
    """Build a ``word<TAB>count`` list from a text corpus."""
    text = _read_text(args.input)
    hint = resolve_language(args.lang).script if args.lang else None

    counts: Counter[str] = Counter()
    for token in Tokenizer().tokenize(text, hint):
        if token.is_alpha and not token.foreign:
            counts[token.form] += 1

    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            for word, count in ranked:
                f.write(f"{word}\t{count}\n")
    except OSError as e:
        raise AtomSpellError(f"Cannot write {args.output}: {e}") from e

    print(f"Wrote {len(ranked)} words to {args.output}")
    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    """Print the detected language of a file."""
    text = _read_text(args.file)
    config = _make_config(args)
    detector = LanguageDetector(DictionaryStore.from_config(config), config.detection)
    detection = detector.detect(text)

    if detection.fallback:
        best = resolve_language(detection.best) if detection.best else "unknown"
        print(f"Uncertain (best guess {best}, confidence {detection.confidence:.2f})")
        return 0
    print(f"{resolve_language(detection.language)}  confidence {detection.confidence:.2f}")
    return 0


def cmd_languages(args: argparse.Namespace) -> int:
    """List supported languages and whether a dictionary is available."""
    store = DictionaryStore.from_config(_make_config(args))
    available = {language.code for language in store.available_languages()}
    for language in LANGUAGES:
        marker = "available" if language.code in available else "no dictionary"
        print(f"{language.code}  {language.iso639_1}  {language.name:<12} {marker}")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atomspell", description="Multilingual spell checking"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--dictionary-dir", type=Path, help="Directory of <code>.txt word lists"
    )
    parser.add_argument("--custom-dir", type=Path, help="Directory of custom word lists")
    parser.add_argument(
        "--no-bundled",
        action="store_true",
        help="Only use word lists from --dictionary-dir, not pyspellchecker's",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Report misspellings in a file")
    check.add_argument("file", type=Path)
    check.add_argument(
        "--language", "-l", default="eng", help=f"Language code or '{AUTO_LANGUAGE}'"
    )
    check.add_argument("--suggest", action="store_true", help="Show suggestions")
    check.add_argument("--stats", action="store_true", help="Show document statistics")
    check.set_defaults(func=cmd_check)

    frequency = subparsers.add_parser("frequency", help="Most frequent words of a file")
    frequency.add_argument("file", type=Path)
    frequency.add_argument("--top", type=int, default=20, help="Number of words to show")
    frequency.set_defaults(func=cmd_frequency)

    create = subparsers.add_parser("create-dict", help="Build a word list from a corpus")
    create.add_argument("input", type=Path)
    create.add_argument("output", type=Path)
    create.add_argument("--lang", help="Only keep words in this language's script")
    create.set_defaults(func=cmd_create_dict)

    detect = subparsers.add_parser("detect", help="Detect the language of a file")
    detect.add_argument("file", type=Path)
    detect.set_defaults(func=cmd_detect)

    languages = subparsers.add_parser("languages", help="List supported languages")
    languages.set_defaults(func=cmd_languages)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    logger.debug("Running %s", args.command)
    try:
        return args.func(args)
    except AtomSpellError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
