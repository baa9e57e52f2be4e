"""
Command-line interface for the sentence bank.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .bank import SentenceBank
from .config import SEGMENTERS, Settings, load_settings
from .exceptions import GinkouError
from .models import BatchResult
from .reader import SPLIT_STYLES, iter_sentences
from .segmenter import SudachiSegmenter, create_segmenter

logger = logging.getLogger(__name__)


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the ginkou CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.config)
        return args.func(args, settings)
    except GinkouError as e:
        logger.debug("Command failed", exc_info=True)
        line_info = f" (line {e.line})" if getattr(e, "line", None) else ""
        print(f"[ERROR] {e}{line_info}", file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ginkou",
        description="Japanese sentence bank",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file (default: $GINKOU_CONFIG or ~/.config/ginkou/config.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Show progress (-v) or debugging output (-vv)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add new sentences to the database",
    )
    add_parser.add_argument(
        "--file", "-f",
        type=Path,
        help="File to read sentences from (default: stdin)",
    )
    _add_database_argument(add_parser)
    add_parser.add_argument(
        "--split",
        choices=SPLIT_STYLES,
        help="Sentence boundaries: one per line, or at each '。' (default: line)",
    )
    add_parser.add_argument(
        "--segmenter",
        choices=SEGMENTERS,
        help="Word segmenter to use (default: sudachi)",
    )
    add_parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop at the first sentence that cannot be added",
    )
    add_parser.set_defaults(func=cmd_add)

    # get command
    get_parser = subparsers.add_parser(
        "get",
        help="Search for all sentences containing a given word",
    )
    get_parser.add_argument(
        "word",
        help="The word to search for, in dictionary form",
    )
    _add_database_argument(get_parser)
    get_parser.add_argument(
        "--allwords", "-a",
        action="store_true",
        help="Show all results instead of the shortest ones",
    )
    get_parser.add_argument(
        "--limit", "-n",
        type=_non_negative_int,
        help="Maximum number of sentences to show (default: 200)",
    )
    get_parser.set_defaults(func=cmd_get)

    # stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show how many words and sentences are stored",
    )
    _add_database_argument(stats_parser)
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def _add_database_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--database", "-d",
        type=Path,
        help="The database to use (default: ~/.ginkoudb)",
    )


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    """Handle add command."""
    settings = settings.with_overrides(
        database=args.database,
        split=args.split,
        segmenter=args.segmenter,
    )
    segmenter = create_segmenter(
        settings.segmenter,
        split_mode=settings.split_mode,
        config_path=settings.sudachi_config,
        form=settings.word_form,
    )
    if isinstance(segmenter, SudachiSegmenter):
        segmenter.load()

    if args.file is not None:
        try:
            stream = open(args.file, "rb")
        except OSError as e:
            print(f"[ERROR] Couldn't open {args.file}: {e}", file=sys.stderr)
            return 1
    else:
        # Bytes, so undecodable lines fail one at a time
        stream = getattr(sys.stdin, "buffer", sys.stdin)

    try:
        with SentenceBank(settings.database, segmenter) as bank:
            result = bank.ingest_many(
                iter_sentences(stream, settings.split),
                stop_on_error=args.stop_on_error,
            )
    finally:
        if args.file is not None:
            stream.close()

    _print_batch_result(result, settings.database)
    return 1 if result.failure_count else 0


def cmd_get(args: argparse.Namespace, settings: Settings) -> int:
    """Handle get command."""
    settings = settings.with_overrides(database=args.database)
    if args.allwords:
        limit = None
    elif args.limit is not None:
        limit = args.limit
    else:
        limit = settings.limit

    with SentenceBank(settings.database) as bank:
        sentences = bank.lookup(args.word, limit=limit)

    try:
        for sentence in sentences:
            sys.stdout.write(f"{sentence}\n")
        sys.stdout.flush()
    except BrokenPipeError:
        # Reader went away (e.g. piped into head)
        _silence_stdout()
    return 0


def cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    """Handle stats command."""
    settings = settings.with_overrides(database=args.database)
    with SentenceBank(settings.database) as bank:
        stats = bank.stats()

    print(f"Database:     {settings.database}")
    print(f"Words:        {stats.word_count}")
    print(f"Sentences:    {stats.sentence_count}")
    print(f"Associations: {stats.link_count}")
    return 0


def _silence_stdout() -> None:
    """Point stdout at devnull so interpreter shutdown doesn't flush into a closed pipe."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def _print_batch_result(result: BatchResult, database: Path) -> None:
    """Print failed sentences and a summary."""
    for failure in result.failures:
        print(
            f"[ERROR] Sentence #{failure.index + 1}: {failure.sentence}",
            file=sys.stderr,
        )
        print(f"        {failure.error}", file=sys.stderr)

    summary = f"Added {result.success_count} sentence(s) to {database}"
    if result.failure_count:
        summary += f", {result.failure_count} failed"
    print(summary)


if __name__ == "__main__":
    sys.exit(main())
