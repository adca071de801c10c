"""
Command-line interface for inspecting and editing a user dictionary.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import Settings, load_config
from .exceptions import ConfigError
from .dictionary import UserDictionary
from .merger import SuggestionMerger
from .models import WordContext
from .speller import Speller, WordListSpeller, WordnetSpeller


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the userdict CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _resolve_settings(args)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return args.func(args, settings)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="userdict",
        description="Inspect and edit a context-aware user dictionary",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s (user-dictionary)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Dictionary database file (overrides config)",
    )
    parser.add_argument(
        "--locale",
        type=str,
        help="Locale identifier (overrides config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # words command
    words_parser = subparsers.add_parser(
        "words",
        help="List learned words",
    )
    words_parser.set_defaults(func=cmd_words)

    # contexts command
    contexts_parser = subparsers.add_parser(
        "contexts",
        help="Show the recorded contexts of a word",
    )
    contexts_parser.add_argument("word", help="Word to inspect")
    contexts_parser.set_defaults(func=cmd_contexts)

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add a word manually",
    )
    add_parser.add_argument("word", help="Word to add")
    add_parser.set_defaults(func=cmd_add)

    # remove command
    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove a word and all of its contexts",
    )
    remove_parser.add_argument("word", help="Word to remove")
    remove_parser.set_defaults(func=cmd_remove)

    # record command
    record_parser = subparsers.add_parser(
        "record",
        help="Record one usage of a word",
    )
    record_parser.add_argument("word", help="Word that was typed")
    record_parser.add_argument(
        "--before",
        nargs="*",
        default=[],
        help="Tokens preceding the word (the last two are kept)",
    )
    record_parser.add_argument(
        "--after",
        nargs="*",
        default=[],
        help="Tokens following the word (the first two are kept)",
    )
    record_parser.set_defaults(func=cmd_record)

    # suggest command
    suggest_parser = subparsers.add_parser(
        "suggest",
        help="Show merged suggestions for a partial word",
    )
    suggest_parser.add_argument("word", help="Word being typed")
    suggest_parser.add_argument(
        "--before",
        nargs="*",
        default=[],
        help="Tokens preceding the word, used for ranking",
    )
    suggest_parser.add_argument(
        "--wordlist",
        type=Path,
        help="Word list file to use as speller (overrides config)",
    )
    suggest_parser.add_argument(
        "--wordnet",
        type=str,
        help="wn lexicon specifier to use as speller (overrides config)",
    )
    suggest_parser.set_defaults(func=cmd_suggest)

    # dump command
    dump_parser = subparsers.add_parser(
        "dump",
        help="Print raw database rows as JSON",
    )
    dump_parser.set_defaults(func=cmd_dump)

    # reset command
    reset_parser = subparsers.add_parser(
        "reset",
        help="Delete every word and context",
    )
    reset_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    reset_parser.set_defaults(func=cmd_reset)

    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_config(args.config) if args.config else Settings()
    if args.db is not None:
        settings.database = args.db.expanduser()
    if args.locale:
        settings.locale = args.locale
    return settings


def _open(settings: Settings) -> UserDictionary:
    return UserDictionary(settings.database)


def cmd_words(args: argparse.Namespace, settings: Settings) -> int:
    """Execute words command."""
    with _open(settings) as dictionary:
        words = dictionary.get_learned_words(settings.locale)
    if not words:
        print(f"No learned words for locale {settings.locale!r}.")
        return 0
    for word in words:
        print(word)
    return 0


def cmd_contexts(args: argparse.Namespace, settings: Settings) -> int:
    """Execute contexts command."""
    with _open(settings) as dictionary:
        record = dictionary.find_word(args.word, settings.locale)
        contexts = dictionary.get_contexts(args.word, settings.locale)

    if record is None:
        print(f"Word not found: {args.word!r}", file=sys.stderr)
        return 1

    print(f"{record.text} [{record.state.value}]")
    for context in contexts:
        print("  " + " ".join(
            f"[{token}]" if token == context.word else token
            for token in context.tokens()
            if token is not None
        ))
    return 0


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    """Execute add command."""
    with _open(settings) as dictionary:
        record = dictionary.add_word_manually(args.word, settings.locale)
    print(f"Added {record.text!r} ({settings.locale})")
    return 0


def cmd_remove(args: argparse.Namespace, settings: Settings) -> int:
    """Execute remove command."""
    with _open(settings) as dictionary:
        dictionary.remove_word(args.word, settings.locale)
    print(f"Removed {args.word!r} ({settings.locale})")
    return 0


def cmd_record(args: argparse.Namespace, settings: Settings) -> int:
    """Execute record command."""
    context = WordContext.from_cursor(args.before, args.word, args.after)
    with _open(settings) as dictionary:
        record = dictionary.record_usage(context, settings.locale)
    print(f"{record.text} [{record.state.value}]")
    return 0


def _build_speller(args: argparse.Namespace, settings: Settings) -> Optional[Speller]:
    wordlist = args.wordlist or settings.wordlist
    wordnet = args.wordnet or settings.wordnet
    if wordlist is not None:
        return WordListSpeller.from_file(wordlist)
    if wordnet:
        return WordnetSpeller(wordnet)
    return None


def cmd_suggest(args: argparse.Namespace, settings: Settings) -> int:
    """Execute suggest command."""
    try:
        speller = _build_speller(args, settings)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    context = WordContext.from_cursor(args.before, args.word)
    with _open(settings) as dictionary, SuggestionMerger(
        dictionary,
        speller,
        speller_limit=settings.speller_limit,
        match=settings.match,
        dictionary_limit=settings.limit,
    ) as merger:
        suggestions = merger.suggestions_for(args.word, settings.locale, context)

    for suggestion in suggestions:
        print(suggestion)
    return 0


def cmd_dump(args: argparse.Namespace, settings: Settings) -> int:
    """Execute dump command."""
    with _open(settings) as dictionary:
        rows = dictionary.dump_rows()
    print(json.dumps(rows, indent=2, ensure_ascii=False))
    return 0


def cmd_reset(args: argparse.Namespace, settings: Settings) -> int:
    """Execute reset command."""
    if not args.yes:
        response = input(f"Delete every word in {settings.database}? [y/N] ")
        if response.lower() not in ("y", "yes"):
            print("Aborted.")
            return 1

    with _open(settings) as dictionary:
        dictionary.reset()
    print("User dictionary reset.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
